"""Render instruction chains as builder-call text or as OpenAPI response objects."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from respdoc.errors import ResolutionError
from respdoc.models import Chain, Example, Instruction

RESPONSE_REF_PREFIX = "#/components/responses/"

_NESTED_BUILDERS = {"content": "ContentBuilder", "header": "HeaderBuilder", "response": "ResponseBuilder"}

ResponseResolver = Callable[[str], dict[str, Any]]


def _is_chain(value: Any) -> bool:
    return isinstance(value, tuple) and bool(value) and all(isinstance(i, Instruction) for i in value)


# ---------------------------------------------------------------------------
# Builder text
# ---------------------------------------------------------------------------


def _render_example(example: Example) -> str:
    parts = ["ExampleBuilder::new()"]
    if example.summary is not None:
        parts.append(f".summary({json.dumps(example.summary)})")
    if example.description is not None:
        parts.append(f".description({json.dumps(example.description)})")
    if example.value is not None:
        parts.append(f".value(Some(json!({json.dumps(example.value.value)})))")
    if example.external_value is not None:
        parts.append(f".external_value({json.dumps(example.external_value)})")
    parts.append(".build()")
    return "".join(parts)


def _render_arg(method: str, arg: Any) -> str:
    if _is_chain(arg):
        return render_chain(arg, _NESTED_BUILDERS.get(method, "Builder"))
    if method == "examples_from_iter":
        pairs = ", ".join(f"({json.dumps(name)}, {_render_example(example)})" for name, example in arg)
        return f"[{pairs}]"
    if method == "example":
        return f"Some(json!({json.dumps(arg)}))"
    return json.dumps(arg)


def render_chain(chain: Chain, builder: str = "ResponseBuilder") -> str:
    """Render a chain as deterministic builder-call text."""
    first = chain[0]
    if first.method == "ref_from_response_name":
        return f"Ref::from_response_name({json.dumps(first.args[0])})"
    if first.method == "inline_response":
        return f"<{first.args[0]} as ToResponse>::response().1"

    parts: list[str] = []
    for instruction in chain:
        args = ", ".join(_render_arg(instruction.method, a) for a in instruction.args)
        if instruction.method == "new":
            parts.append(f"{builder}::new()")
        elif instruction.method == "default":
            parts.append(f"{builder}::from(Header::default())")
        else:
            parts.append(f".{instruction.method}({args})")
    return "".join(parts)


# ---------------------------------------------------------------------------
# OpenAPI objects
# ---------------------------------------------------------------------------


def _example_object(example: Example) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    if example.summary is not None:
        obj["summary"] = example.summary
    if example.description is not None:
        obj["description"] = example.description
    if example.value is not None:
        obj["value"] = example.value.value
    if example.external_value is not None:
        obj["externalValue"] = example.external_value
    return obj


def _content_object(chain: Chain) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for instruction in chain:
        if instruction.method == "schema":
            obj["schema"] = instruction.args[0]
        elif instruction.method == "example":
            obj["example"] = instruction.args[0]
        elif instruction.method == "examples_from_iter":
            obj["examples"] = {name: _example_object(example) for name, example in instruction.args[0]}
    return obj


def _header_object(chain: Chain) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for instruction in chain:
        if instruction.method == "schema":
            obj["schema"] = instruction.args[0]
        elif instruction.method == "default":
            obj["schema"] = {"type": "string"}
        elif instruction.method == "description":
            obj["description"] = instruction.args[0]
    return obj


def to_openapi(chain: Chain, resolve: ResponseResolver | None = None) -> dict[str, Any]:
    """Interpret a response chain into an OpenAPI 3 response object.

    ``resolve`` supplies the response object for ``inline_response``.
    """
    first = chain[0]
    if first.method == "ref_from_response_name":
        return {"$ref": f"{RESPONSE_REF_PREFIX}{first.args[0]}"}
    if first.method == "inline_response":
        if resolve is None:
            raise ResolutionError(f"cannot inline response `{first.args[0]}`: no response resolver available")
        return resolve(first.args[0])

    obj: dict[str, Any] = {}
    for instruction in chain:
        if instruction.method == "description":
            obj["description"] = instruction.args[0]
        elif instruction.method == "content":
            content_type, content = instruction.args
            obj.setdefault("content", {})[content_type] = _content_object(content)
        elif instruction.method == "header":
            name, header = instruction.args
            obj.setdefault("headers", {})[name] = _header_object(header)
    return obj


def responses_to_openapi(
    chain: Chain,
    resolve: ResponseResolver | None = None,
    expand: Callable[[str], dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Interpret a responses chain into an OpenAPI ``responses`` map.

    ``expand`` supplies the responses of a type named by ``responses_from_into_responses``.
    """
    responses: dict[str, Any] = {}
    for instruction in chain:
        if instruction.method == "response":
            status, response = instruction.args
            responses[status] = to_openapi(response, resolve)
        elif instruction.method == "responses_from_into_responses":
            if expand is None:
                raise ResolutionError(f"cannot expand responses of `{instruction.args[0]}`: type is not known")
            responses.update(expand(instruction.args[0]))
    return responses
