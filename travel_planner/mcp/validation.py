"""Request validation for MCP transport.

This module turns raw request bodies into JsonRpcRequest objects and checks
tools/call arguments against the declarative input schema of the named
tool. Nothing here touches tool logic: every failure is raised as a typed
MCPError before a handler runs.
"""

import json
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    create_model,
)

from ..errors import MalformedJson, MissingField, SchemaViolation
from ..models import JsonRpcRequest
from .tool_defs import FieldSpec, ToolDefinition

if TYPE_CHECKING:
    from .registry import ToolRegistry


def _describe_validation_error(exc: ValidationError) -> str:
    """Summarize pydantic errors as 'field: problem' pairs."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"]) or "request"
        parts.append(f"{loc}: {error['msg']}")
    return "; ".join(parts)


def parse_request(raw: bytes | str) -> JsonRpcRequest:
    """Parse a raw request body into a JSON-RPC request.

    Args:
        raw: Request body as received from the transport

    Returns:
        The parsed JsonRpcRequest

    Raises:
        MalformedJson: Body is not decodable JSON
        MissingField: Body is JSON but not a single JSON-RPC request object
    """
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise MalformedJson("Parse error")

    if isinstance(body, list):
        raise MissingField("Invalid Request: batch requests are not supported")
    if not isinstance(body, dict):
        raise MissingField("Invalid Request: expected a JSON object")

    try:
        return JsonRpcRequest.model_validate(body)
    except ValidationError as e:
        request_id = body.get("id")
        if not isinstance(request_id, (str, int)) or isinstance(request_id, bool):
            request_id = None
        raise MissingField(
            f"Invalid Request: {_describe_validation_error(e)}",
            request_id=request_id,
        )


# JSON Schema type name -> strict pydantic annotation
_FIELD_TYPES: dict[str, Any] = {
    "string": StrictStr,
    "number": StrictInt | StrictFloat,
    "integer": StrictInt,
    "boolean": StrictBool,
    "object": dict[StrictStr, Any],
}


def _annotation(spec: FieldSpec) -> Any:
    if spec.type == "array":
        return list[_FIELD_TYPES[spec.items]] if spec.items else list[Any]
    return _FIELD_TYPES[spec.type]


@lru_cache(maxsize=None)
def arguments_model(definition: ToolDefinition) -> type[BaseModel]:
    """Build (once per tool) the pydantic model for a tool's arguments.

    Optional fields default to their declared default. Undeclared arguments
    are ignored.
    """
    fields: dict[str, Any] = {}
    for spec in definition.fields:
        if spec.required:
            fields[spec.name] = (_annotation(spec), Field(..., description=spec.description))
        else:
            fields[spec.name] = (
                _annotation(spec) | None,
                Field(default=spec.default, description=spec.description),
            )
    return create_model(
        f"{definition.name}_arguments",
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )


def _violations(definition: ToolDefinition, exc: ValidationError) -> list[dict[str, str]]:
    """Map pydantic errors to one {field, constraint, message} entry per field."""
    specs = {spec.name: spec for spec in definition.fields}
    violations: dict[str, dict[str, str]] = {}
    for error in exc.errors():
        name, *rest = error["loc"]
        spec = specs[name]
        if error["type"] == "missing":
            violation = {
                "field": name,
                "constraint": "required",
                "message": "required field missing",
            }
        elif rest and isinstance(rest[0], int):
            violation = {
                "field": f"{name}[{rest[0]}]",
                "constraint": "items.type",
                "message": f"expected {spec.items}, got {type(error['input']).__name__}",
            }
        else:
            violation = {
                "field": name,
                "constraint": "type",
                "message": f"expected {spec.type}, got {type(error['input']).__name__}",
            }
        # Union types report one error per member; keep the first
        violations.setdefault(violation["field"], violation)
    return list(violations.values())


def validate_call(tool_name: str, raw_args: Any, registry: "ToolRegistry") -> dict[str, Any]:
    """Validate tools/call arguments against the tool's input schema.

    Args:
        tool_name: Name of the tool being called
        raw_args: The ``arguments`` value from the request (None means empty)
        registry: Registry holding the tool definitions

    Returns:
        Dict with every declared field present; absent optional fields hold
        their declared default. Undeclared arguments are dropped.

    Raises:
        UnknownTool: tool_name is not registered
        SchemaViolation: arguments do not conform (carries every violation)
    """
    definition = registry.get_definition(tool_name)

    if raw_args is None:
        raw_args = {}
    if not isinstance(raw_args, dict):
        raise SchemaViolation(
            tool_name,
            [
                {
                    "field": "arguments",
                    "constraint": "type",
                    "message": f"expected object, got {type(raw_args).__name__}",
                }
            ],
        )

    # null counts as absent
    present = {key: value for key, value in raw_args.items() if value is not None}
    try:
        arguments = arguments_model(definition).model_validate(present)
    except ValidationError as e:
        raise SchemaViolation(tool_name, _violations(definition, e))
    return arguments.model_dump()
