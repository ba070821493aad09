"""Merge ``#[response(...)]`` occurrences and build response descriptors per declaration shape."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from respdoc.core.parser import MISSING_STATUS_ERROR, RESPONSE_INCOMPATIBLE_ATTRIBUTES_MSG, TokenStream
from respdoc.core.parser import parse_derive_into_responses_value, parse_derive_to_response_value
from respdoc.core.ports.types import TypeDescriber
from respdoc.core.shapes import EnumShape, NamedShape, UnitShape, UnnamedShape, classify
from respdoc.core.tokens import TokKind
from respdoc.errors import ConflictError, GrammarError, ShapeError
from respdoc.models import (
    Annotation,
    BodyType,
    ContentVariant,
    Declaration,
    DeriveIntoResponsesValue,
    DeriveToResponseValue,
    Field,
    InlineSchemaBody,
    InlineType,
    Location,
    MediaTypeBody,
    ResponseDescriptor,
    ResponseRef,
    ResponseValue,
    Variant,
)

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=DeriveToResponseValue)

ENUM_LEVEL_EXAMPLE_MSG = (
    "Enum with `#[content]` attribute in variant cannot have enum level `example` or `examples` defined"
)


# ---------------------------------------------------------------------------
# Occurrence merge
# ---------------------------------------------------------------------------


def merge_values(acc: V, item: V) -> V:
    """Fold ``item`` over ``acc``: later non-empty values win, empty ones never override.

    For ``IntoResponses`` values the status always comes from ``item``.
    """
    update: dict[str, object] = {}
    if item.content_type is not None:
        update["content_type"] = item.content_type
    if item.headers:
        update["headers"] = item.headers
    if item.description:
        update["description"] = item.description
    if item.example is not None:
        update["example"] = item.example
        update["example_at"] = item.example_at
    if item.examples is not None:
        update["examples"] = item.examples
        update["examples_at"] = item.examples_at
    if isinstance(item, DeriveIntoResponsesValue):
        update["status"] = item.status
    return acc.model_copy(update=update)


def fold_annotations(
    annotations: Iterable[Annotation],
    parse: Callable[[str, Location], V],
) -> V | None:
    """Parse every ``#[response(...)]`` occurrence and merge them left to right."""
    values = [parse(a.arguments, a.location) for a in annotations if a.name == "response"]
    if not values:
        return None
    logger.debug("Merging %d response occurrence(s)", len(values))
    return functools.reduce(merge_values, values)


# ---------------------------------------------------------------------------
# ToResponse
# ---------------------------------------------------------------------------


def _content_tag(field: Field) -> str | None:
    annotation = field.annotation("content")
    if annotation is None:
        return None
    stream = TokenStream.from_text(annotation.arguments, annotation.location)
    content_type = stream.expect(TokKind.STRING, "string literal content type").value
    stream.expect_end()
    return content_type


def _enum_content(variants: Iterable[Variant]) -> tuple[ContentVariant, ...]:
    content: list[ContentVariant] = []
    for variant in variants:
        value = fold_annotations(variant.annotations, parse_derive_to_response_value)
        field = variant.fields[0] if variant.fields else None
        if field is None:
            continue
        content_type = _content_tag(field)
        if content_type is None:
            continue
        content.append(
            ContentVariant(
                content_type=content_type,
                body=MediaTypeBody(type=InlineType(ty=field.type, is_inline=field.has_annotation("to_schema"))),
                example=value.example if value else None,
                examples=value.examples if value else None,
            )
        )
    return tuple(content)


def create_response(
    declaration: Declaration,
    description: str,
    body: BodyType | None,
    content: tuple[ContentVariant, ...] = (),
) -> ResponseDescriptor:
    value = fold_annotations(declaration.annotations, parse_derive_to_response_value)
    if value is None:
        return ResponseDescriptor(inner=ResponseValue(description=description, response_type=body, content=content))

    if content and (value.example is not None or value.examples is not None):
        ident, location = ("example", value.example_at) if value.example is not None else ("examples", value.examples_at)
        raise ConflictError(
            ENUM_LEVEL_EXAMPLE_MSG,
            location,
            help=f"Try defining `{ident}` on the enum variant",
        )

    return ResponseDescriptor(
        inner=ResponseValue(
            description=value.description or description,
            headers=value.headers,
            example=value.example,
            examples=value.examples,
            content_type=value.content_type,
            response_type=body,
            content=content,
        )
    )


def derive_to_response(declaration: Declaration, describer: TypeDescriber) -> ResponseDescriptor:
    """Build the descriptor for a declaration deriving ``ToResponse``."""
    shape = classify(declaration)
    description = "\n".join(declaration.docs)

    if isinstance(shape, UnnamedShape):
        is_inline = any(a.name == "to_schema" for a in shape.annotations)
        media = MediaTypeBody(type=InlineType(ty=shape.type, is_inline=is_inline))
        return create_response(declaration, description, media)

    if isinstance(shape, NamedShape):
        schema = describer.declaration_schema(declaration)
        return create_response(declaration, description, InlineSchemaBody(schema=schema, type=shape.type))

    if isinstance(shape, UnitShape):
        return create_response(declaration, description, None)

    assert isinstance(shape, EnumShape)
    content = _enum_content(shape.variants)
    # several tagged variants are referenced by payload type; otherwise the whole enum is inlined
    body: BodyType | None = None
    if len(content) <= 1:
        body = InlineSchemaBody(schema=describer.declaration_schema(declaration), type=shape.type)
    return create_response(declaration, description, body, content)


# ---------------------------------------------------------------------------
# IntoResponses
# ---------------------------------------------------------------------------


def _into_response(
    value: DeriveIntoResponsesValue,
    description: str,
    body: BodyType | ResponseRef | None,
    location: Location,
) -> ResponseDescriptor:
    if isinstance(body, ResponseRef):
        has_value = value.description or value.headers or value.content_type is not None
        if has_value or value.example is not None or value.examples is not None:
            raise ConflictError(RESPONSE_INCOMPATIBLE_ATTRIBUTES_MSG, location)
        return ResponseDescriptor(status=value.status, inner=body)
    return ResponseDescriptor(
        status=value.status,
        inner=ResponseValue(
            description=value.description or description,
            headers=value.headers,
            example=value.example,
            examples=value.examples,
            content_type=value.content_type,
            response_type=body,
        ),
    )


def _unnamed_body(field: Field) -> BodyType | ResponseRef:
    if field.has_annotation("ref_response"):
        return ResponseRef(type=InlineType(ty=field.type))
    if field.has_annotation("to_response"):
        return ResponseRef(type=InlineType(ty=field.type, is_inline=True))
    return MediaTypeBody(type=InlineType(ty=field.type, is_inline=field.has_annotation("to_schema")))


def _required_status(annotations: Iterable[Annotation], location: Location) -> DeriveIntoResponsesValue:
    value = fold_annotations(annotations, parse_derive_into_responses_value)
    if value is None:
        raise GrammarError(f"{MISSING_STATUS_ERROR}, expected `#[response(status = ...)]`", location)
    return value


def derive_into_responses(declaration: Declaration, describer: TypeDescriber) -> list[ResponseDescriptor]:
    """Build one descriptor per response of a declaration deriving ``IntoResponses``."""
    shape = classify(declaration)

    if not isinstance(shape, EnumShape):
        value = _required_status(declaration.annotations, declaration.location)
        description = "\n".join(declaration.docs)
        body: BodyType | ResponseRef | None = None
        if isinstance(shape, UnnamedShape):
            body = _unnamed_body(declaration.fields[0])
        elif isinstance(shape, NamedShape):
            body = InlineSchemaBody(schema=describer.declaration_schema(declaration), type=shape.type)
        return [_into_response(value, description, body, declaration.location)]

    responses: list[ResponseDescriptor] = []
    for variant in shape.variants:
        value = _required_status(variant.annotations, variant.location)
        description = "\n".join(variant.docs)
        variant_body: BodyType | ResponseRef | None = None
        if variant.unnamed and variant.fields:
            if len(variant.fields) > 1:
                raise ShapeError("unsupported: tuple-shaped response body", variant.location)
            variant_body = _unnamed_body(variant.fields[0])
        elif variant.fields:
            schema = describer.named_struct_schema(variant.fields, variant.docs)
            variant_body = InlineSchemaBody(schema=schema, type=declaration.type)
        responses.append(_into_response(value, description, variant_body, variant.location))
    return responses
