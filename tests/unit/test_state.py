"""Unit tests for browsing_insights.state.

Covers JSON and YAML round-trips, schema version enforcement, checksum
validation and state updates.
"""
from __future__ import annotations

import json

import pytest

from browsing_insights.numeric import NormState
from browsing_insights.state import ModelState, ModelStateSerializer, SchemaVersionError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_state() -> ModelState:
    return ModelState(
        weights={"bias": 0.5, "ctr": 1.25, "thom": -0.75},
        norms={"ctr": NormState(mean=0.2, var=0.04), "thom": NormState(beta=0.01)},
    )


# ---------------------------------------------------------------------------
# SchemaVersionError
# ---------------------------------------------------------------------------


class TestSchemaVersionError:
    def test_message_contains_version(self) -> None:
        assert "99.0" in str(SchemaVersionError("99.0"))

    def test_version_attribute(self) -> None:
        assert SchemaVersionError("2.0").version == "2.0"

    def test_message_contains_supported_list(self) -> None:
        assert "1.0" in str(SchemaVersionError("bad"))


# ---------------------------------------------------------------------------
# ModelState
# ---------------------------------------------------------------------------


class TestModelState:
    def test_defaults(self) -> None:
        state = ModelState()
        assert state.schema_version == "1.0"
        assert state.weights == {}
        assert state.norms == {}

    def test_empty_schema_version_restored(self) -> None:
        assert ModelState(schema_version="").schema_version == "1.0"

    def test_checksum_verifies(self) -> None:
        state = _make_state()
        state.compute_checksum()
        assert state.verify_checksum()

    def test_checksum_detects_change(self) -> None:
        state = _make_state()
        state.compute_checksum()
        state.weights["bias"] = 9.0
        assert not state.verify_checksum()

    def test_updated_replaces_weights(self) -> None:
        state = _make_state()
        new_state = state.updated(weights={"bias": 1.0})
        assert new_state.weights == {"bias": 1.0}
        assert state.weights["bias"] == 0.5

    def test_updated_merges_norms(self) -> None:
        state = _make_state()
        new_state = state.updated(norms={"ctr": NormState(mean=1.0), "hour": NormState()})
        assert new_state.norms["ctr"].mean == 1.0
        assert "thom" in new_state.norms
        assert "hour" in new_state.norms
        assert state.norms["ctr"].mean == pytest.approx(0.2)


# ---------------------------------------------------------------------------
# ModelStateSerializer
# ---------------------------------------------------------------------------


class TestModelStateSerializerJson:
    def test_round_trip(self) -> None:
        serializer = ModelStateSerializer()
        restored = serializer.from_json(serializer.to_json(_make_state()))
        assert restored.weights == {"bias": 0.5, "ctr": 1.25, "thom": -0.75}
        assert restored.norms["ctr"].var == pytest.approx(0.04)

    def test_embeds_schema_version_and_checksum(self) -> None:
        data = json.loads(ModelStateSerializer().to_json(_make_state()))
        assert data["schema_version"] == "1.0"
        assert len(data["checksum"]) == 64

    def test_unsupported_version_raises(self) -> None:
        data = json.loads(ModelStateSerializer().to_json(_make_state()))
        data["schema_version"] = "9.9"
        with pytest.raises(SchemaVersionError):
            ModelStateSerializer().from_json(json.dumps(data))

    def test_tampered_document_raises(self) -> None:
        data = json.loads(ModelStateSerializer().to_json(_make_state()))
        data["weights"]["bias"] = 42.0
        with pytest.raises(ValueError, match="Checksum mismatch"):
            ModelStateSerializer().from_json(json.dumps(data))

    def test_checksum_validation_can_be_disabled(self) -> None:
        data = json.loads(ModelStateSerializer().to_json(_make_state()))
        data["weights"]["bias"] = 42.0
        restored = ModelStateSerializer(validate_checksum=False).from_json(json.dumps(data))
        assert restored.weights["bias"] == 42.0

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            ModelStateSerializer().from_json("{not json")


class TestModelStateSerializerYaml:
    def test_round_trip(self) -> None:
        serializer = ModelStateSerializer()
        restored = serializer.from_yaml(serializer.to_yaml(_make_state()))
        assert restored.weights["thom"] == pytest.approx(-0.75)
        assert restored.norms["thom"].beta == pytest.approx(0.01)

    def test_dispatch(self) -> None:
        serializer = ModelStateSerializer()
        raw = serializer.serialize(_make_state(), format="yaml")
        assert "schema_version" in raw
        restored = serializer.deserialize(raw, format="yaml")
        assert restored.weights["ctr"] == pytest.approx(1.25)

    def test_empty_document_rejected(self) -> None:
        with pytest.raises(SchemaVersionError):
            ModelStateSerializer().from_yaml("")
