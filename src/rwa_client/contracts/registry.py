"""
Contract artifact loader.

Contract builds emit one JSON artifact per contract holding the module
reference and the base64 schemas of every entrypoint. Artifacts are looked up
in ``RWA_ARTIFACTS_DIR`` or, failing that, the nearest ``contracts/out/``
directory above this file, and are validated before descriptors are built.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import jsonschema
from jsonschema import FormatChecker

from ..config import get_artifacts_dir
from .descriptor import DEFAULT_INIT_ENERGY, DEFAULT_RECEIVE_ENERGY, InitMethod, ReceiveMethod

_SCHEMA_STRING = {"type": "string", "pattern": "^[A-Za-z0-9+/]*={0,2}$"}

ARTIFACT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["contract_name", "entrypoints"],
    "additionalProperties": False,
    "properties": {
        "contract_name": {"type": "string", "minLength": 1},
        "module_ref": {"type": "string", "pattern": "^[0-9a-fA-F]{64}$"},
        "init": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "params_schema": _SCHEMA_STRING,
                "error_schema": _SCHEMA_STRING,
                "max_energy": {"type": "integer", "minimum": 1},
            },
        },
        "entrypoints": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "params_schema": _SCHEMA_STRING,
                    "return_schema": _SCHEMA_STRING,
                    "error_schema": _SCHEMA_STRING,
                    "max_energy": {"type": "integer", "minimum": 1},
                },
            },
        },
        "error_codes": {
            "type": "object",
            "propertyNames": {"pattern": "^-?[0-9]+$"},
            "additionalProperties": {"type": "string"},
        },
    },
}


class ArtifactValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class ContractArtifact:
    contract_name: str
    module_ref: Optional[str]
    init: Optional[InitMethod]
    entrypoints: dict[str, ReceiveMethod] = field(default_factory=dict)

    def method(self, entrypoint: str) -> ReceiveMethod:
        try:
            return self.entrypoints[entrypoint]
        except KeyError:
            raise KeyError(
                f"{self.contract_name} has no entrypoint {entrypoint!r}; "
                f"known: {sorted(self.entrypoints)}"
            ) from None


def _format_error(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(part) for part in error.path) or "<root>"
    return f"{location}: {error.message}"


def validate_artifact(payload: dict[str, Any]) -> None:
    validator_cls = jsonschema.validators.validator_for(ARTIFACT_SCHEMA)
    validator = validator_cls(ARTIFACT_SCHEMA, format_checker=FormatChecker())
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.path))
    if errors:
        raise ArtifactValidationError(
            "Contract artifact failed validation.",
            errors=[_format_error(err) for err in errors],
        )


def artifact_from_dict(payload: dict[str, Any]) -> ContractArtifact:
    """
    Build descriptors from an artifact payload.

    Raises:
        ArtifactValidationError: If the payload does not match ARTIFACT_SCHEMA
        SchemaError: If any embedded schema is malformed
    """
    validate_artifact(payload)
    name = payload["contract_name"]
    error_codes = {int(code): variant for code, variant in payload.get("error_codes", {}).items()}

    init = None
    if "init" in payload:
        if "module_ref" not in payload:
            raise ArtifactValidationError(
                "Contract artifact failed validation.",
                errors=["<root>: 'module_ref' is required when 'init' is present"],
            )
        entry = payload["init"]
        init = InitMethod(
            module_ref=payload["module_ref"],
            contract_name=name,
            params_schema=entry.get("params_schema"),
            error_schema=entry.get("error_schema"),
            max_energy=entry.get("max_energy", DEFAULT_INIT_ENERGY),
            error_codes=error_codes,
        )

    entrypoints = {
        entrypoint: ReceiveMethod(
            contract_name=name,
            entrypoint=entrypoint,
            params_schema=entry.get("params_schema"),
            return_schema=entry.get("return_schema"),
            error_schema=entry.get("error_schema"),
            max_energy=entry.get("max_energy", DEFAULT_RECEIVE_ENERGY),
            error_codes=error_codes,
        )
        for entrypoint, entry in payload["entrypoints"].items()
    }
    return ContractArtifact(
        contract_name=name,
        module_ref=payload.get("module_ref"),
        init=init,
        entrypoints=entrypoints,
    )


def _find_artifacts_dir() -> Path:
    """
    Locate the artifacts directory.

    RWA_ARTIFACTS_DIR wins; otherwise searches from the current file upward
    for ``contracts/out/``.
    """
    configured = get_artifacts_dir()
    if configured is not None:
        if not configured.is_dir():
            raise FileNotFoundError(f"RWA_ARTIFACTS_DIR does not exist: {configured}")
        return configured
    current = Path(__file__).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / "contracts" / "out"
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(
        "Cannot find contract artifacts. Set RWA_ARTIFACTS_DIR or build into contracts/out/."
    )


def load_artifact_file(path: Path) -> ContractArtifact:
    with path.open("r", encoding="utf-8") as f:
        return artifact_from_dict(json.load(f))


@lru_cache(maxsize=16)
def load_artifact(contract_name: str) -> ContractArtifact:
    """
    Load and cache the artifact for a contract by name.

    Raises:
        FileNotFoundError: If no artifact exists for the contract
    """
    path = _find_artifacts_dir() / f"{contract_name}.json"
    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {path}")
    return load_artifact_file(path)
