__all__ = [
    # Numeric codecs
    "encode_token_id",
    "decode_token_id",
    "to_display_amount",
    "to_display_rate",
    "Rate",
    # Schema codec
    "parse_schema_base64",
    "parse_schema_type",
    "serialize_value",
    "deserialize_value",
    "ContractAddress",
    "to_params_address",
    # Codec errors
    "CodecError",
    "EncodingError",
    "InvalidAmount",
    "SchemaError",
    "SchemaMissing",
    "SerializationError",
    "DecodeError",
    # Contracts
    "InitMethod",
    "ReceiveMethod",
    "ParsedError",
    "serialize_params",
    "deserialize_return",
    "deserialize_error",
    "parse_error",
    "invoke_method",
    "InvokeSuccess",
    "InvokeFailure",
    # Node
    "HttpNodeClient",
    "NodeProvider",
    "NodeRpcError",
    # Wallet
    "WalletProvider",
    "TransactionKind",
    # Transactions
    "TransactionSubmitter",
    "TransactionStateError",
    "submit_and_wait",
    "InitState",
    "SentState",
    "FinalizedState",
    "Success",
    "Rejected",
]

from .codec.address import ContractAddress, to_params_address
from .codec.amount import Rate, to_display_amount, to_display_rate
from .codec.errors import (
    CodecError,
    DecodeError,
    EncodingError,
    InvalidAmount,
    SchemaError,
    SchemaMissing,
    SerializationError,
)
from .codec.schema import parse_schema_base64, parse_schema_type
from .codec.token_id import decode_token_id, encode_token_id
from .codec.values import deserialize_value, serialize_value
from .contracts.codec import ParsedError, deserialize_error, deserialize_return, parse_error, serialize_params
from .contracts.descriptor import InitMethod, ReceiveMethod
from .contracts.invoke import InvokeFailure, InvokeSuccess, invoke_method
from .node.rpc import HttpNodeClient, NodeProvider, NodeRpcError
from .tx import TransactionStateError
from .tx.state import FinalizedState, InitState, Rejected, SentState, Success
from .tx.submitter import TransactionSubmitter, submit_and_wait
from .wallet import TransactionKind, WalletProvider
