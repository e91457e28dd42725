"""Unit tests for utils, config, address helpers and UI conversion."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import account
from rwa_client import config
from rwa_client.codec.address import ContractAddress, is_account_address, to_params_address
from rwa_client.codec.errors import SerializationError
from rwa_client.codec.schema import parse_schema_base64
from rwa_client.codec.ui import to_contract_json, to_ui_json
from rwa_client.codec.values import serialize_value
from rwa_client.contracts import rwa_sponsor
from rwa_client.utils import (
    base64_decode,
    base64_encode,
    hex_to_bytes,
    is_base64,
    millis_to_rfc3339,
    rfc3339_to_millis,
)


class TestEncoding:
    def test_hex_to_bytes(self) -> None:
        assert hex_to_bytes("0x0102") == b"\x01\x02"
        assert hex_to_bytes("0102") == b"\x01\x02"
        assert hex_to_bytes(b"\x03") == b"\x03"

    def test_base64_unpadded(self) -> None:
        assert base64_decode("BQ") == b"\x05"
        assert base64_encode(b"\x05") == "BQ=="

    def test_is_base64(self) -> None:
        assert is_base64(rwa_sponsor.PERMIT_REQUEST_SCHEMA)
        assert not is_base64("not base64!")


class TestTimestamps:
    def test_round_trip(self) -> None:
        assert millis_to_rfc3339(1_704_067_200_000) == "2024-01-01T00:00:00Z"
        assert millis_to_rfc3339(1_704_067_200_123) == "2024-01-01T00:00:00.123Z"
        assert rfc3339_to_millis("2024-01-01T00:00:00.123Z") == 1_704_067_200_123

    def test_offset(self) -> None:
        assert rfc3339_to_millis("2024-01-01T01:00:00+01:00") == 1_704_067_200_000

    def test_naive_rejected(self) -> None:
        with pytest.raises(ValueError):
            rfc3339_to_millis("2024-01-01T00:00:00")


class TestConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("CONCORDIUM_NODE_URL", "RWA_POLL_INTERVAL", "RWA_RPC_TIMEOUT", "CCDSCAN_URL", "RWA_ARTIFACTS_DIR"):
            monkeypatch.delenv(name, raising=False)
        assert config.get_node_url() == config.DEFAULT_NODE_URL
        assert config.get_poll_interval() == 0.5
        assert config.get_rpc_timeout() == 30.0
        assert config.get_artifacts_dir() is None

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RWA_POLL_INTERVAL", "2")
        monkeypatch.setenv("CCDSCAN_URL", "https://ccdscan.io/")
        assert config.get_poll_interval() == 2.0
        assert config.transaction_link("ab") == "https://ccdscan.io/?dcount=1&dentity=transaction&dhash=ab"

    def test_invalid_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RWA_RPC_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="RWA_RPC_TIMEOUT"):
            config.get_rpc_timeout()

    def test_load_env_does_not_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env = tmp_path / ".env"
        env.write_text("CONCORDIUM_NODE_URL=http://from-file\nCCDSCAN_URL=http://scan-file\n", encoding="utf-8")
        monkeypatch.setenv("CONCORDIUM_NODE_URL", "http://from-env")
        # registered so teardown removes the value loaded from the file
        monkeypatch.setenv("CCDSCAN_URL", "")
        monkeypatch.delenv("CCDSCAN_URL")
        assert config.load_env(env) == env
        assert config.get_node_url() == "http://from-env"
        assert config.get_ccdscan_url() == "http://scan-file"

    def test_load_env_missing(self, tmp_path: Path) -> None:
        assert config.load_env(tmp_path / "absent.env") is None


class TestAddresses:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("<5,1>", ContractAddress(5, 1)),
            ("< 5 , 0 >", ContractAddress(5, 0)),
            ("12", ContractAddress(12, 0)),
            (12, ContractAddress(12, 0)),
            ({"index": 3, "subindex": 2}, ContractAddress(3, 2)),
        ],
    )
    def test_parse(self, value, expected: ContractAddress) -> None:
        assert ContractAddress.parse(value) == expected

    @pytest.mark.parametrize("value", ["<5>", "abc", "-1", True])
    def test_parse_invalid(self, value) -> None:
        with pytest.raises(ValueError):
            ContractAddress.parse(value)

    def test_str(self) -> None:
        assert str(ContractAddress(5, 1)) == "<5,1>"

    def test_account_detection(self) -> None:
        assert is_account_address(account(1))
        assert not is_account_address("12")
        assert not is_account_address(12)

    def test_to_params_address(self) -> None:
        assert to_params_address(account(1)) == {"Account": [account(1)]}
        assert to_params_address("<4,0>") == {"Contract": [{"index": 4, "subindex": 0}]}


class TestUiConversion:
    def test_tagged_enum_to_contract(self) -> None:
        schema = parse_schema_base64(rwa_sponsor.PERMIT_ERROR_SCHEMA)
        assert to_contract_json({"tag": "Expired", "Expired": None}, schema) == {"Expired": {}}
        value = to_contract_json({"tag": "CallContractLogicReject", "CallContractLogicReject": [-3]}, schema)
        assert value == {"CallContractLogicReject": [-3]}
        assert serialize_value(value, schema).hex() == "0efdffffff"

    def test_untagged_enum_rejected(self) -> None:
        schema = parse_schema_base64(rwa_sponsor.PERMIT_ERROR_SCHEMA)
        with pytest.raises(SerializationError):
            to_contract_json({"Expired": {}}, schema)

    def test_to_ui(self) -> None:
        schema = parse_schema_base64(rwa_sponsor.PERMIT_ERROR_SCHEMA)
        assert to_ui_json({"NonceMismatch": {}}, schema) == {"tag": "NonceMismatch", "NonceMismatch": None}

    def test_numbers_become_ints(self) -> None:
        schema = parse_schema_base64(rwa_sponsor.BYTES_TO_SIGN_REQUEST_SCHEMA)
        ui = to_ui_json(
            {
                "contract_address": {"index": "7", "subindex": "0"},
                "nonce": "3",
                "timestamp": "2024-01-01T00:00:00Z",
                "entry_point": "transfer",
                "payload": ["1"],
            },
            schema,
        )
        assert ui["nonce"] == 3
        assert ui["contract_address"] == {"index": 7, "subindex": 0}
        assert ui["payload"] == [1]
