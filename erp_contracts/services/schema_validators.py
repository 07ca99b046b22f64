"""
Compiled response-schema validators keyed by ``"METHOD /path"``.

The map is built once, before any case runs, and is exposed as a read-only
mapping. Cases only read from it, so sequential replay needs no locking.
An operation whose schema is missing or cannot be compiled gets an absent
lookup: body validation is skipped for it, which is not the same thing as
the body passing.
"""

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import structlog
from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from erp_contracts.exceptions import SchemaCompileError
from erp_contracts.services.spec_loader import iter_operations

logger = structlog.get_logger()

NO_SCHEMA = "no 200 application/json schema declared"


@dataclass(frozen=True)
class SchemaLookup:
    """Either a compiled validator or the reason there is none"""
    key: str
    validator: Optional[Draft202012Validator] = None
    reason: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.validator is not None

    def errors_for(self, instance: Any) -> List[str]:
        if self.validator is None:
            raise SchemaCompileError(f"{self.key}: {self.reason}")
        return [
            f"{'/'.join(str(p) for p in error.absolute_path) or '<root>'}: {error.message}"
            for error in sorted(self.validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
        ]


def schema_key(method: str, path: str) -> str:
    return f"{method.upper()} {path}"


def success_schema(operation: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    responses = operation.get("responses") or {}
    # YAML may load the status as int or str
    response = responses.get("200") or responses.get(200) or {}
    return ((response.get("content") or {}).get("application/json") or {}).get("schema")


def _pointer_lookup(document: Dict[str, Any], ref: str) -> Any:
    if not ref.startswith("#/"):
        raise SchemaCompileError(f"unsupported $ref {ref!r}")
    node: Any = document
    for raw in ref[2:].split("/"):
        part = raw.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise SchemaCompileError(f"unresolvable $ref {ref!r}")
        node = node[part]
    return node


def _allow_null(schema: Any) -> Any:
    """JSON Schema spelling of OpenAPI 3.0 ``nullable: true``"""
    composed = ("allOf", "anyOf", "oneOf", "not", "const")
    if isinstance(schema, dict) and "type" in schema and not any(key in schema for key in composed):
        rewritten = dict(schema)
        kind = rewritten["type"]
        if isinstance(kind, str):
            rewritten["type"] = [kind, "null"]
        elif isinstance(kind, list) and "null" not in kind:
            rewritten["type"] = kind + ["null"]
        if "enum" in rewritten and None not in rewritten["enum"]:
            rewritten["enum"] = list(rewritten["enum"]) + [None]
        return rewritten
    return {"anyOf": [schema, {"type": "null"}]}


def inline_refs(schema: Any, document: Dict[str, Any], _stack: tuple = ()) -> Any:
    """Replace local ``$ref`` nodes with the referenced document fragment.

    OpenAPI 3.0 ``nullable: true`` is rewritten on the way so that Draft
    2020-12 accepts ``null`` where the document allows it.
    """
    if isinstance(schema, list):
        return [inline_refs(item, document, _stack) for item in schema]
    if not isinstance(schema, dict):
        return schema

    nullable = schema.get("nullable")
    if isinstance(nullable, bool):
        schema = {k: v for k, v in schema.items() if k != "nullable"}
        resolved = inline_refs(schema, document, _stack)
        return _allow_null(resolved) if nullable else resolved

    ref = schema.get("$ref")
    if isinstance(ref, str):
        if ref in _stack:
            raise SchemaCompileError(f"cyclic $ref {ref!r}")
        target = inline_refs(_pointer_lookup(document, ref), document, _stack + (ref,))
        siblings = {k: v for k, v in schema.items() if k != "$ref"}
        if not siblings:
            return target
        return {"allOf": [target, inline_refs(siblings, document, _stack)]}

    return {key: inline_refs(value, document, _stack) for key, value in schema.items()}


def compile_schema(schema: Dict[str, Any], document: Dict[str, Any]) -> Draft202012Validator:
    resolved = inline_refs(copy.deepcopy(schema), document)
    try:
        Draft202012Validator.check_schema(resolved)
    except SchemaError as exc:
        raise SchemaCompileError(exc.message) from exc
    return Draft202012Validator(resolved, format_checker=Draft202012Validator.FORMAT_CHECKER)


def build_validator_map(document: Dict[str, Any]) -> Mapping[str, SchemaLookup]:
    """Compile every operation's 200 schema; never raises per operation"""
    lookups: Dict[str, SchemaLookup] = {}
    for path, method, operation in iter_operations(document):
        key = schema_key(method, path)
        schema = success_schema(operation)
        if not schema:
            lookups[key] = SchemaLookup(key=key, reason=NO_SCHEMA)
            continue
        try:
            lookups[key] = SchemaLookup(key=key, validator=compile_schema(schema, document))
        except SchemaCompileError as exc:
            logger.warning("schema_compile_skipped", key=key, reason=str(exc))
            lookups[key] = SchemaLookup(key=key, reason=str(exc))

    compiled = sum(1 for lookup in lookups.values() if lookup.available)
    logger.info("validators_built", operations=len(lookups), compiled=compiled)
    return MappingProxyType(lookups)


def lookup_validator(validators: Mapping[str, SchemaLookup], key: str) -> SchemaLookup:
    """Lookup that reports unknown keys as absent instead of raising"""
    return validators.get(key) or SchemaLookup(key=key, reason="operation not in OpenAPI document")
