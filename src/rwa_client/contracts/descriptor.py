"""
Contract method descriptors.

One immutable descriptor per contract entrypoint, built once at startup from
generated constants (see :mod:`rwa_client.contracts.registry`). A descriptor
is a lookup key plus the base64 schemas of its parameter, return and error
types.

The type parameters (``TIn``, ``TOut``, ``TErr``) carry no runtime
information: nothing checks that ``TIn`` matches the parameter schema. Keeping
them consistent is the obligation of whoever constructs the descriptor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any, Generic, Mapping, Optional, TypeVar, Union

from ..codec.address import ContractAddress
from ..codec.schema import Primitive, SchemaType, TypeTag, parse_schema_base64
from ..node.models import InvokeContractRequest, InvokeContractResult, RejectReason
from ..wallet import (
    InitContractPayload,
    SchemaSource,
    TransactionKind,
    UpdateContractPayload,
    WalletProvider,
)
from .codec import ParsedError, deserialize_return, parse_error, serialize_params

if TYPE_CHECKING:
    from ..node.rpc import NodeProvider

TIn = TypeVar("TIn")
TOut = TypeVar("TOut")
TErr = TypeVar("TErr")

DEFAULT_INIT_ENERGY = 30_000
DEFAULT_RECEIVE_ENERGY = 60_000


def _parse_optional(value: Optional[str]) -> Optional[SchemaType]:
    return parse_schema_base64(value) if value else None


class _SchemaMixin:
    params_schema: Optional[str]
    error_schema: Optional[str]

    @cached_property
    def params_type(self) -> Optional[SchemaType]:
        return _parse_optional(self.params_schema)

    @cached_property
    def error_type(self) -> Optional[SchemaType]:
        return _parse_optional(self.error_schema)

    @property
    def requires_params(self) -> bool:
        """True when the entrypoint takes a non-unit parameter."""
        return self.params_type is not None and self.params_type != Primitive(TypeTag.UNIT)

    def schema_source(self) -> Optional[SchemaSource]:
        return SchemaSource(self.params_schema) if self.params_schema else None

    def serialize_params(self, params: Any) -> bytes:
        return serialize_params(self, params)

    def parse_error(self, rejection: RejectReason) -> ParsedError[Any]:
        return parse_error(self, rejection)


@dataclass(frozen=True)
class InitMethod(_SchemaMixin, Generic[TIn]):
    module_ref: str
    contract_name: str
    params_schema: Optional[str] = None
    error_schema: Optional[str] = None
    max_energy: int = DEFAULT_INIT_ENERGY
    error_codes: Mapping[int, str] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self) -> None:
        if not self.contract_name:
            raise ValueError("contract_name must not be empty")
        if self.max_energy <= 0:
            raise ValueError(f"max_energy must be positive, got {self.max_energy}")
        # parse eagerly so a broken schema fails at startup
        _ = self.params_type, self.error_type

    @property
    def name(self) -> str:
        return f"init_{self.contract_name}"

    async def init(
        self,
        provider: WalletProvider,
        account: str,
        params: Optional[TIn] = None,
        amount: int = 0,
    ) -> str:
        """Send a contract creation transaction through the wallet; returns its hash."""
        payload = InitContractPayload(
            module_ref=self.module_ref,
            init_name=self.contract_name,
            max_energy=self.max_energy,
            amount=amount,
            parameter=self.serialize_params(params),
        )
        return await provider.send_transaction(
            account, TransactionKind.INIT_CONTRACT, payload, params, self.schema_source()
        )


@dataclass(frozen=True)
class ReceiveMethod(_SchemaMixin, Generic[TIn, TOut, TErr]):
    contract_name: str
    entrypoint: str
    params_schema: Optional[str] = None
    return_schema: Optional[str] = None
    error_schema: Optional[str] = None
    max_energy: int = DEFAULT_RECEIVE_ENERGY
    error_codes: Mapping[int, str] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self) -> None:
        if not self.contract_name or not self.entrypoint:
            raise ValueError("contract_name and entrypoint must not be empty")
        if self.max_energy <= 0:
            raise ValueError(f"max_energy must be positive, got {self.max_energy}")
        _ = self.params_type, self.return_type, self.error_type

    @property
    def name(self) -> str:
        return self.receive_name

    @property
    def receive_name(self) -> str:
        return f"{self.contract_name}.{self.entrypoint}"

    @cached_property
    def return_type(self) -> Optional[SchemaType]:
        return _parse_optional(self.return_schema)

    def parse_return_value(self, data: Union[bytes, str, None]) -> Optional[TOut]:
        return deserialize_return(self, data)

    async def update(
        self,
        provider: WalletProvider,
        account: str,
        address: ContractAddress,
        params: Optional[TIn] = None,
        amount: int = 0,
    ) -> str:
        """
        Send an update transaction through the wallet.

        The parameter is serialized locally first, so schema mismatches are
        reported before the user is asked to sign anything.

        Returns:
            Transaction hash (hex)
        """
        payload = UpdateContractPayload(
            address=address,
            receive_name=self.receive_name,
            max_energy=self.max_energy,
            amount=amount,
            parameter=self.serialize_params(params),
        )
        return await provider.send_transaction(
            account, TransactionKind.UPDATE, payload, params, self.schema_source()
        )

    async def invoke(
        self,
        node: "NodeProvider",
        contract: ContractAddress,
        params: Optional[TIn] = None,
        invoker: Optional[Union[str, ContractAddress]] = None,
        amount: int = 0,
    ) -> InvokeContractResult:
        """Run the entrypoint without committing anything to the chain."""
        request = InvokeContractRequest(
            contract=contract,
            method=self.receive_name,
            parameter=self.serialize_params(params),
            invoker=invoker,
            amount=amount,
            energy=self.max_energy,
        )
        return await node.invoke_contract(request)
