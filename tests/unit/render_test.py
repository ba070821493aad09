"""Unit tests for builder-text rendering and OpenAPI interpretation of chains."""

import pytest

from respdoc.core.emitter import emit_response, emit_responses
from respdoc.core.parser import parse_response_tuple, parse_responses
from respdoc.core.render import render_chain, responses_to_openapi, to_openapi
from respdoc.errors import ResolutionError


def test_render_simple_response() -> None:
    chain = emit_response(parse_response_tuple('(status = 200, description = "ok", body = String)'))
    assert render_chain(chain) == (
        'ResponseBuilder::new().description("ok")'
        '.content("text/plain", ContentBuilder::new().schema({"type": "string"}).build())'
        ".build()"
    )


def test_render_header_and_example() -> None:
    chain = emit_response(
        parse_response_tuple('(status = 200, body = String, example = "hi", headers(("x-id")))')
    )
    text = render_chain(chain)
    assert '.example(Some(json!("hi")))' in text
    assert '.header("x-id", HeaderBuilder::from(Header::default()).build())' in text


def test_render_reference_responses() -> None:
    assert render_chain(emit_response(parse_response_tuple("(status = 200, response = Person)"))) == (
        'Ref::from_response_name("Person")'
    )
    assert render_chain(emit_response(parse_response_tuple("(status = 200, response = inline(Person))"))) == (
        "<Person as ToResponse>::response().1"
    )


def test_to_openapi_response_object() -> None:
    chain = emit_response(
        parse_response_tuple(
            '(status = 200, description = "ok", body = User, headers(("x-rate" = u32, description = "left")),'
            ' examples(("Demo" = (summary = "s", value = json!({"id": 1})))))'
        )
    )
    assert to_openapi(chain) == {
        "description": "ok",
        "content": {
            "application/json": {
                "schema": {"$ref": "#/components/schemas/User"},
                "examples": {"Demo": {"summary": "s", "value": {"id": 1}}},
            }
        },
        "headers": {"x-rate": {"schema": {"type": "integer", "format": "int32"}, "description": "left"}},
    }


def test_to_openapi_reference() -> None:
    chain = emit_response(parse_response_tuple("(status = 200, response = Person)"))
    assert to_openapi(chain) == {"$ref": "#/components/responses/Person"}


def test_inline_response_needs_resolver() -> None:
    chain = emit_response(parse_response_tuple("(status = 200, response = inline(Person))"))
    with pytest.raises(ResolutionError, match="cannot inline response `Person`"):
        to_openapi(chain)
    assert to_openapi(chain, lambda name: {"description": name}) == {"description": "Person"}


def test_responses_to_openapi_keys_by_status() -> None:
    chain = emit_responses(parse_responses('(status = 200, description = "ok"), (status = "5XX", description = "err")'))
    assert responses_to_openapi(chain) == {"200": {"description": "ok"}, "5XX": {"description": "err"}}


def test_into_responses_path_needs_expander() -> None:
    chain = emit_responses(parse_responses("UserResponses"))
    with pytest.raises(ResolutionError):
        responses_to_openapi(chain)
    expanded = responses_to_openapi(chain, expand=lambda path: {"204": {"description": path}})
    assert expanded == {"204": {"description": "UserResponses"}}
