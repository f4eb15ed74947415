"""Persisted shortcut-model state and its serialization.

The ranking core is stateless; the weights and per-feature normalisation
statistics it learns are threaded through calls by the caller.  This
module gives that state a document form with an embedded schema version
and checksum, in JSON or YAML.

Classes
-------
- ModelState           — weights + per-feature NormState
- ModelStateSerializer — JSON / YAML round trips with version checks
- SchemaVersionError   — unsupported schema version on load
"""
from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import ClassVar, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from browsing_insights.numeric import NormState

_SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"1.0"})


class SchemaVersionError(ValueError):
    """Raised when a serialised document uses an unsupported schema version."""

    def __init__(self, version: str) -> None:
        self.version = version
        supported = ", ".join(sorted(_SUPPORTED_SCHEMA_VERSIONS))
        super().__init__(
            f"Unsupported schema version {version!r}. "
            f"Supported versions: {supported}"
        )


class ModelState(BaseModel):
    """Learned shortcut-model state carried between ranking calls.

    Parameters
    ----------
    schema_version:
        Document schema version.
    weights:
        Linear model weights keyed by feature name.
    norms:
        Running normalisation statistics keyed by feature name.
    updated_at:
        Last modification time (UTC).
    checksum:
        SHA-256 of the canonical JSON of the other fields.
    """

    SCHEMA_VERSION: ClassVar[str] = "1.0"

    schema_version: str = "1.0"
    weights: dict[str, float] = Field(default_factory=dict)
    norms: dict[str, NormState] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checksum: str = ""

    model_config = {"frozen": False}

    def _canonical_dict(self) -> dict[str, object]:
        data = self.model_dump(mode="json")
        data.pop("checksum", None)
        return data  # type: ignore[return-value]

    def _digest(self) -> str:
        canonical_json = json.dumps(self._canonical_dict(), sort_keys=True)
        return hashlib.sha256(canonical_json.encode()).hexdigest()

    def compute_checksum(self) -> str:
        """Compute the checksum, store it on ``self.checksum`` and return it."""
        self.checksum = self._digest()
        return self.checksum

    def verify_checksum(self) -> bool:
        """True when the stored checksum matches the current content."""
        return self.checksum == self._digest()

    def updated(
        self,
        *,
        weights: Mapping[str, float] | None = None,
        norms: Mapping[str, NormState] | None = None,
    ) -> "ModelState":
        """Return a copy with new weights and/or merged norms.

        ``norms`` entries replace same-named entries; others are kept.
        """
        merged_norms = dict(self.norms)
        if norms:
            merged_norms.update(norms)
        return self.model_copy(
            update={
                "weights": dict(weights) if weights is not None else dict(self.weights),
                "norms": merged_norms,
                "updated_at": datetime.now(timezone.utc),
                "checksum": "",
            }
        )

    @model_validator(mode="after")
    def _ensure_schema_version(self) -> "ModelState":
        if not self.schema_version:
            self.schema_version = self.SCHEMA_VERSION
        return self


class ModelStateSerializer:
    """Serialize and deserialize ``ModelState`` documents.

    Parameters
    ----------
    validate_checksum:
        When True (default), loading verifies a non-empty embedded
        checksum and raises ``ValueError`` on mismatch.
    """

    def __init__(self, validate_checksum: bool = True) -> None:
        self.validate_checksum = validate_checksum

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def to_json(self, state: ModelState, *, indent: int = 2) -> str:
        """Serialise ``state`` to JSON, embedding a fresh checksum."""
        state.compute_checksum()
        return json.dumps(state.model_dump(mode="json"), indent=indent)

    def from_json(self, raw: str) -> ModelState:
        """Deserialise a ``ModelState`` from JSON.

        Raises
        ------
        SchemaVersionError
            If the ``schema_version`` field is not supported.
        ValueError
            If the checksum does not match.
        json.JSONDecodeError
            If ``raw`` is not valid JSON.
        """
        return self._deserialize(json.loads(raw))

    # ------------------------------------------------------------------
    # YAML
    # ------------------------------------------------------------------

    def to_yaml(self, state: ModelState) -> str:
        """Serialise ``state`` to YAML, embedding a fresh checksum."""
        state.compute_checksum()
        data = state.model_dump(mode="json")
        return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=True)

    def from_yaml(self, raw: str) -> ModelState:
        """Deserialise a ``ModelState`` from YAML."""
        return self._deserialize(yaml.safe_load(raw) or {})

    # ------------------------------------------------------------------
    # Format dispatch
    # ------------------------------------------------------------------

    def serialize(self, state: ModelState, format: Literal["json", "yaml"] = "json") -> str:
        if format == "yaml":
            return self.to_yaml(state)
        return self.to_json(state)

    def deserialize(self, raw: str, format: Literal["json", "yaml"] = "json") -> ModelState:
        if format == "yaml":
            return self.from_yaml(raw)
        return self.from_json(raw)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _deserialize(self, data: dict[str, object]) -> ModelState:
        version = str(data.get("schema_version", ""))
        if version not in _SUPPORTED_SCHEMA_VERSIONS:
            raise SchemaVersionError(version)

        state = ModelState.model_validate(data)

        if self.validate_checksum and state.checksum and not state.verify_checksum():
            raise ValueError(
                f"Checksum mismatch for model state: stored={state.checksum!r}"
            )
        return state
