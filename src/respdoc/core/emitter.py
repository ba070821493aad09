"""Turn response descriptors into ordered builder instruction chains.

A response chain always reads ``new, description, [primary content...],
[explicit content...], [header...], build``; a reference response is a
single instruction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from respdoc.core.merge import derive_into_responses, derive_to_response
from respdoc.core.ports.types import TypeDescriber
from respdoc.core.schema import RustTypeDescriber
from respdoc.models import (
    AnyValue,
    BodyType,
    Chain,
    Declaration,
    Example,
    Header,
    InlineSchemaBody,
    Instruction,
    IntoResponsesPath,
    MediaTypeBody,
    RefBody,
    ResponseDescriptor,
    ResponseRef,
)

logger = logging.getLogger(__name__)

DEFAULT_REF_CONTENT_TYPE = "application/json"


def _content_schema(body: BodyType, describer: TypeDescriber) -> dict[str, Any]:
    if isinstance(body, RefBody):
        return {"$ref": body.reference}
    if isinstance(body, MediaTypeBody):
        return describer.schema_of(body.type)
    return body.schema_


def default_content_type(body: BodyType, describer: TypeDescriber) -> str:
    """Pick the content type for a body when none was declared."""
    if isinstance(body, RefBody):
        return DEFAULT_REF_CONTENT_TYPE
    if isinstance(body, InlineSchemaBody):
        return describer.default_content_type(body.type)
    return describer.default_content_type(body.type.ty)


def _content_chain(
    body: BodyType,
    example: AnyValue | None,
    examples: Iterable[Example] | None,
    describer: TypeDescriber,
) -> Chain:
    chain = [Instruction("new"), Instruction("schema", (_content_schema(body, describer),))]
    if example is not None:
        chain.append(Instruction("example", (example.value,)))
    if examples is not None:
        chain.append(Instruction("examples_from_iter", (tuple((e.name, e) for e in examples),)))
    chain.append(Instruction("build"))
    return tuple(chain)


def _header_chain(header: Header, describer: TypeDescriber) -> Chain:
    if header.value_type is not None:
        chain = [Instruction("new"), Instruction("schema", (describer.schema_of(header.value_type),))]
    else:
        chain = [Instruction("default")]
    if header.description is not None:
        chain.append(Instruction("description", (header.description,)))
    chain.append(Instruction("build"))
    return tuple(chain)


def emit_response(descriptor: ResponseDescriptor, describer: TypeDescriber | None = None) -> Chain:
    describer = describer or RustTypeDescriber()
    inner = descriptor.inner

    if isinstance(inner, ResponseRef):
        if inner.type.is_inline:
            return (Instruction("inline_response", (describer.response_name(inner.type.ty),)),)
        return (Instruction("ref_from_response_name", (describer.response_name(inner.type.ty),)),)

    chain = [Instruction("new"), Instruction("description", (inner.description,))]

    # an explicit content list takes priority over the direct body
    if inner.response_type is not None and not inner.content:
        content = _content_chain(inner.response_type, inner.example, inner.examples, describer)
        content_types = (
            inner.content_type
            if inner.content_type is not None
            else (default_content_type(inner.response_type, describer),)
        )
        for content_type in content_types:
            chain.append(Instruction("content", (content_type, content)))

    for variant in inner.content:
        content = _content_chain(variant.body, variant.example, variant.examples, describer)
        chain.append(Instruction("content", (variant.content_type, content)))

    for header in inner.headers:
        chain.append(Instruction("header", (header.name, _header_chain(header, describer))))

    chain.append(Instruction("build"))
    logger.debug("Emitted response chain with %d instruction(s)", len(chain))
    return tuple(chain)


def emit_responses(
    entries: Iterable[ResponseDescriptor | IntoResponsesPath],
    describer: TypeDescriber | None = None,
) -> Chain:
    """Emit an operation-level responses chain: one ``response`` per tuple, in order."""
    describer = describer or RustTypeDescriber()
    chain = [Instruction("new")]
    for entry in entries:
        if isinstance(entry, IntoResponsesPath):
            chain.append(Instruction("responses_from_into_responses", (entry.path,)))
        else:
            chain.append(Instruction("response", (entry.status, emit_response(entry, describer))))
    chain.append(Instruction("build"))
    return tuple(chain)


def emit_to_response(declaration: Declaration, describer: TypeDescriber | None = None) -> tuple[str, Chain]:
    """Return the registered response name and chain for a ``ToResponse`` declaration."""
    describer = describer or RustTypeDescriber([declaration])
    return declaration.name, emit_response(derive_to_response(declaration, describer), describer)


def emit_into_responses(declaration: Declaration, describer: TypeDescriber | None = None) -> Chain:
    describer = describer or RustTypeDescriber([declaration])
    return emit_responses(derive_into_responses(declaration, describer), describer)
