"""Tests for contract artifact loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import enum_schema
from rwa_client.codec.errors import SchemaError
from rwa_client.contracts import rwa_sponsor
from rwa_client.contracts.registry import (
    ArtifactValidationError,
    artifact_from_dict,
    load_artifact,
    validate_artifact,
)


def _artifact() -> dict:
    return {
        "contract_name": "security_token",
        "module_ref": "ab" * 32,
        "init": {"params_schema": rwa_sponsor.NONCE_REQUEST_SCHEMA, "max_energy": 40_000},
        "entrypoints": {
            "balanceOf": {
                "params_schema": rwa_sponsor.NONCE_REQUEST_SCHEMA,
                "return_schema": rwa_sponsor.NONCE_RESPONSE_SCHEMA,
                "error_schema": enum_schema("Unauthorized", "InsufficientFunds"),
            },
            "pause": {"max_energy": 9_000},
        },
        "error_codes": {"7": "InsufficientFunds"},
    }


@pytest.fixture(autouse=True)
def _clear_cache():
    load_artifact.cache_clear()
    yield
    load_artifact.cache_clear()


class TestArtifactFromDict:
    def test_builds_descriptors(self) -> None:
        artifact = artifact_from_dict(_artifact())
        assert artifact.contract_name == "security_token"
        assert artifact.init.name == "init_security_token"
        assert artifact.init.max_energy == 40_000
        balance = artifact.method("balanceOf")
        assert balance.receive_name == "security_token.balanceOf"
        assert balance.error_codes == {7: "InsufficientFunds"}
        assert balance.max_energy == 60_000
        assert artifact.method("pause").max_energy == 9_000
        assert artifact.method("pause").params_type is None

    def test_unknown_entrypoint(self) -> None:
        artifact = artifact_from_dict(_artifact())
        with pytest.raises(KeyError, match="mint"):
            artifact.method("mint")

    def test_init_requires_module_ref(self) -> None:
        payload = _artifact()
        del payload["module_ref"]
        with pytest.raises(ArtifactValidationError):
            artifact_from_dict(payload)

    def test_broken_schema(self) -> None:
        payload = _artifact()
        payload["entrypoints"]["pause"]["params_schema"] = "/w=="
        with pytest.raises(SchemaError):
            artifact_from_dict(payload)


class TestValidation:
    def test_missing_entrypoints(self) -> None:
        payload = _artifact()
        del payload["entrypoints"]
        with pytest.raises(ArtifactValidationError) as exc_info:
            validate_artifact(payload)
        assert any("entrypoints" in err for err in exc_info.value.errors)

    def test_bad_module_ref(self) -> None:
        payload = _artifact()
        payload["module_ref"] = "xyz"
        with pytest.raises(ArtifactValidationError) as exc_info:
            validate_artifact(payload)
        assert exc_info.value.errors[0].startswith("module_ref:")

    def test_unknown_key(self) -> None:
        payload = _artifact()
        payload["entrypoints"]["pause"]["gas"] = 1
        with pytest.raises(ArtifactValidationError):
            validate_artifact(payload)

    def test_non_numeric_error_code(self) -> None:
        payload = _artifact()
        payload["error_codes"] = {"seven": "InsufficientFunds"}
        with pytest.raises(ArtifactValidationError):
            validate_artifact(payload)


class TestLoadArtifact:
    def test_from_configured_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "security_token.json").write_text(json.dumps(_artifact()), encoding="utf-8")
        monkeypatch.setenv("RWA_ARTIFACTS_DIR", str(tmp_path))
        artifact = load_artifact("security_token")
        assert artifact.module_ref == "ab" * 32
        assert load_artifact("security_token") is artifact

    def test_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RWA_ARTIFACTS_DIR", str(tmp_path))
        with pytest.raises(FileNotFoundError, match="Artifact not found"):
            load_artifact("nope")

    def test_missing_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RWA_ARTIFACTS_DIR", str(tmp_path / "absent"))
        with pytest.raises(FileNotFoundError, match="RWA_ARTIFACTS_DIR"):
            load_artifact("security_token")
