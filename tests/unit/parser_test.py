"""Unit tests for the response-annotation grammars."""

import pytest

from respdoc.core.parser import (
    MISSING_STATUS_ERROR,
    RESPONSE_INCOMPATIBLE_ATTRIBUTES_MSG,
    parse_derive_into_responses_value,
    parse_derive_to_response_value,
    parse_response_tuple,
    parse_responses,
    parse_type_text,
)
from respdoc.errors import ConflictError, GrammarError
from respdoc.models import (
    InlineType,
    IntoResponsesPath,
    MediaTypeBody,
    RefBody,
    ResponseRef,
    ResponseValue,
    TypeRef,
)

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def test_parse_generic_path_type() -> None:
    ty = parse_type_text("Vec<crate::models::User>")
    assert ty == TypeRef(path="Vec", args=(TypeRef(path="crate::models::User"),))
    assert ty.args[0].name == "User"
    assert str(ty) == "Vec<crate::models::User>"


def test_parse_reference_slice_and_unit_types() -> None:
    assert parse_type_text("&'a [u8]") == TypeRef(kind="slice", args=(TypeRef(path="u8"),))
    assert parse_type_text("()") == TypeRef(kind="unit")


def test_tuple_types_are_rejected() -> None:
    with pytest.raises(GrammarError, match="tuple types are not supported"):
        parse_type_text("(String, u32)")


# ---------------------------------------------------------------------------
# Response tuple
# ---------------------------------------------------------------------------


def test_parse_full_response_tuple() -> None:
    descriptor = parse_response_tuple(
        '(status = 200, description = "Success", body = User, content_type = ["application/json", "text/xml"],'
        ' headers(("x-rate-limit" = u32, description = "remaining")), example = json!({"id": 1}))'
    )
    assert descriptor.status == "200"
    inner = descriptor.inner
    assert isinstance(inner, ResponseValue)
    assert inner.description == "Success"
    assert inner.response_type == MediaTypeBody(type=InlineType(ty=TypeRef(path="User")))
    assert inner.content_type == ("application/json", "text/xml")
    assert [(h.name, h.description) for h in inner.headers] == [("x-rate-limit", "remaining")]
    assert inner.example is not None and inner.example.value == {"id": 1}


def test_parse_ref_body_and_named_examples() -> None:
    descriptor = parse_response_tuple(
        '(status = "4XX", body = ref("#/components/schemas/Error"),'
        ' examples(("Demo" = (summary = "demo", value = json!({"a": 1})))))'
    )
    inner = descriptor.inner
    assert isinstance(inner, ResponseValue)
    assert inner.response_type == RefBody(reference="#/components/schemas/Error")
    assert inner.examples is not None
    assert inner.examples[0].name == "Demo"
    assert inner.examples[0].summary == "demo"
    assert inner.examples[0].value is not None and inner.examples[0].value.value == {"a": 1}


def test_parse_content_list() -> None:
    descriptor = parse_response_tuple(
        '(status = 200, content(("text/plain" = String), ("application/json" = inline(User), example = "x")))'
    )
    inner = descriptor.inner
    assert isinstance(inner, ResponseValue)
    assert [c.content_type for c in inner.content] == ["text/plain", "application/json"]
    second = inner.content[1].body
    assert isinstance(second, MediaTypeBody) and second.type.is_inline
    assert inner.content[1].example is not None and inner.content[1].example.value == "x"


def test_response_reference_tuple() -> None:
    descriptor = parse_response_tuple("(status = 200, response = inline(PersonResponse))")
    assert descriptor.inner == ResponseRef(type=InlineType(ty=TypeRef(path="PersonResponse"), is_inline=True))


@pytest.mark.parametrize(
    "text",
    [
        '(status = 200, response = Foo, description = "x")',
        '(status = 200, description = "x", response = Foo)',
        "(status = 200, body = User, response = Foo)",
    ],
    ids=["reference-first", "value-first", "body-first"],
)
def test_value_and_reference_conflict_in_either_order(text: str) -> None:
    with pytest.raises(ConflictError) as exc_info:
        parse_response_tuple(text)
    assert exc_info.value.message == RESPONSE_INCOMPATIBLE_ATTRIBUTES_MSG


def test_missing_status_is_reported() -> None:
    with pytest.raises(GrammarError) as exc_info:
        parse_response_tuple('(description = "no status")')
    assert exc_info.value.message == MISSING_STATUS_ERROR


def test_unknown_key_lists_valid_keys() -> None:
    with pytest.raises(GrammarError) as exc_info:
        parse_response_tuple("(status = 200, colour = 1)")
    assert exc_info.value.message.startswith("unexpected attribute `colour`, expected any of: status, description")
    assert str(exc_info.value.location) == "1:16"


def test_parse_responses_list_mixes_tuples_and_paths() -> None:
    entries = parse_responses('(status = 200, description = "ok"), crate::UserResponses, (status = 404)')
    assert [type(e).__name__ for e in entries] == ["ResponseDescriptor", "IntoResponsesPath", "ResponseDescriptor"]
    assert entries[1] == IntoResponsesPath(path="crate::UserResponses")


# ---------------------------------------------------------------------------
# Derive values
# ---------------------------------------------------------------------------


def test_to_response_value_records_example_location() -> None:
    value = parse_derive_to_response_value('description = "d", example = "hi"')
    assert value.description == "d"
    assert value.example is not None and value.example.value == "hi"
    assert str(value.example_at) == "1:20"


def test_to_response_value_rejects_status() -> None:
    with pytest.raises(GrammarError, match="unexpected attribute `status`"):
        parse_derive_to_response_value("status = 200")


def test_into_responses_value_requires_status() -> None:
    with pytest.raises(GrammarError, match="missing expected `status` attribute"):
        parse_derive_into_responses_value('description = "x"')


def test_into_responses_status_may_follow_other_keys() -> None:
    value = parse_derive_into_responses_value('description = "x", status = StatusCode::ACCEPTED')
    assert value.status == "202"
    assert value.description == "x"
