"""Response schema compilation and lookup"""

import pytest

from erp_contracts.exceptions import SchemaCompileError
from erp_contracts.services.schema_validators import (
    NO_SCHEMA,
    build_validator_map,
    inline_refs,
    lookup_validator,
)


def test_validator_map_keys(sample_openapi):
    validators = build_validator_map(sample_openapi)
    assert set(validators) == {
        "GET /health",
        "GET /data/status",
        "POST /setup/trusts",
        "GET /setup/trusts/{trustId}",
    }


def test_validator_map_is_read_only(sample_openapi):
    validators = build_validator_map(sample_openapi)
    with pytest.raises(TypeError):
        validators["GET /health"] = None


def test_inline_schema_compiles(sample_openapi):
    lookup = build_validator_map(sample_openapi)["GET /health"]
    assert lookup.available
    assert lookup.errors_for({"health": "ok"}) == []
    assert lookup.errors_for({"health": "down"})


def test_missing_schema_is_absent(sample_openapi):
    lookup = build_validator_map(sample_openapi)["GET /data/status"]
    assert not lookup.available
    assert lookup.reason == NO_SCHEMA


def test_local_ref_is_inlined(sample_openapi):
    lookup = build_validator_map(sample_openapi)["POST /setup/trusts"]
    assert lookup.available
    assert lookup.errors_for({"id": 1, "name": "Green Valley Trust"}) == []
    errors = lookup.errors_for({"id": "1"})
    assert any("name" in error for error in errors)
    assert any(error.startswith("id:") for error in errors)


def test_format_is_checked(sample_openapi):
    lookup = build_validator_map(sample_openapi)["POST /setup/trusts"]
    assert lookup.errors_for({"id": 1, "name": "T", "contact_email": "not-an-email"})


def test_unresolvable_ref_is_absent_not_fatal(sample_openapi):
    lookup = build_validator_map(sample_openapi)["GET /setup/trusts/{trustId}"]
    assert not lookup.available
    assert "TrustDetail" in lookup.reason


def test_invalid_schema_is_absent():
    document = {
        "paths": {
            "/x": {"get": {"responses": {"200": {"content": {"application/json": {"schema": {"type": 12}}}}}}},
        }
    }
    assert not build_validator_map(document)["GET /x"].available


def test_absent_lookup_refuses_to_validate():
    lookup = lookup_validator({}, "GET /nowhere")
    assert not lookup.available
    with pytest.raises(SchemaCompileError):
        lookup.errors_for({})


def test_cyclic_ref_detected():
    document = {"components": {"schemas": {"Node": {"$ref": "#/components/schemas/Node"}}}}
    with pytest.raises(SchemaCompileError, match="cyclic"):
        inline_refs({"$ref": "#/components/schemas/Node"}, document)


def test_ref_with_siblings_keeps_both():
    document = {"components": {"schemas": {"Id": {"type": "integer"}}}}
    resolved = inline_refs({"$ref": "#/components/schemas/Id", "minimum": 1}, document)
    assert resolved == {"allOf": [{"type": "integer"}, {"minimum": 1}]}


def _single_schema_document(schema):
    return {
        "openapi": "3.0.3",
        "paths": {
            "/students/{id}": {
                "get": {"responses": {"200": {"content": {"application/json": {"schema": schema}}}}},
            },
        },
        "components": {"schemas": {"Guardian": {"type": "object", "required": ["name"],
                                                "properties": {"name": {"type": "string"}}}}},
    }


def test_nullable_property_accepts_null():
    document = _single_schema_document({
        "type": "object",
        "properties": {"email": {"type": "string", "nullable": True, "format": "email"}},
    })
    lookup = build_validator_map(document)["GET /students/{id}"]
    assert lookup.errors_for({"email": None}) == []
    assert lookup.errors_for({"email": "parent@school.test"}) == []
    assert lookup.errors_for({"email": 5})


def test_nullable_false_is_dropped():
    resolved = inline_refs({"type": "string", "nullable": False}, {})
    assert resolved == {"type": "string"}


def test_nullable_enum_accepts_null():
    resolved = inline_refs({"type": "string", "enum": ["M", "F"], "nullable": True}, {})
    assert resolved == {"type": ["string", "null"], "enum": ["M", "F", None]}


def test_nullable_ref_accepts_null():
    document = _single_schema_document({
        "type": "object",
        "properties": {"guardian": {"$ref": "#/components/schemas/Guardian", "nullable": True}},
    })
    lookup = build_validator_map(document)["GET /students/{id}"]
    assert lookup.errors_for({"guardian": None}) == []
    assert lookup.errors_for({"guardian": {"name": "R. Iyer"}}) == []
    assert lookup.errors_for({"guardian": {}})


def test_nullable_composed_schema_wrapped_in_any_of():
    resolved = inline_refs({"oneOf": [{"type": "integer"}, {"type": "string"}], "nullable": True}, {})
    assert resolved == {"anyOf": [{"oneOf": [{"type": "integer"}, {"type": "string"}]}, {"type": "null"}]}
