from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Location(_Frozen):
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TypeRef(_Frozen):
    """A parsed Rust type such as ``Vec<User>``, ``[u8]`` or ``crate::User``."""

    path: str = ""
    args: tuple[TypeRef, ...] = ()
    kind: Literal["path", "slice", "unit"] = "path"

    @property
    def name(self) -> str:
        return self.path.rsplit("::", 1)[-1]

    def __str__(self) -> str:
        if self.kind == "unit":
            return "()"
        if self.kind == "slice":
            return f"[{self.args[0]}]"
        if self.args:
            return f"{self.path}<{', '.join(str(a) for a in self.args)}>"
        return self.path


TypeRef.model_rebuild()  # necessary for recursive types


class InlineType(_Frozen):
    ty: TypeRef
    is_inline: bool = False


class RefBody(_Frozen):
    kind: Literal["ref"] = "ref"
    reference: str


class MediaTypeBody(_Frozen):
    kind: Literal["media_type"] = "media_type"
    type: InlineType


class InlineSchemaBody(_Frozen):
    kind: Literal["inline_schema"] = "inline_schema"
    schema_: dict[str, Any] = PydanticField(alias="schema")
    type: TypeRef

    model_config = ConfigDict(frozen=True, populate_by_name=True)


BodyType = Annotated[RefBody | MediaTypeBody | InlineSchemaBody, PydanticField(discriminator="kind")]


# ---------------------------------------------------------------------------
# Response descriptors
# ---------------------------------------------------------------------------


class AnyValue(_Frozen):
    """An example value: a string literal or a ``json!(...)`` document."""

    value: Any


class Example(_Frozen):
    name: str
    summary: str | None = None
    description: str | None = None
    value: AnyValue | None = None
    external_value: str | None = None


class Header(_Frozen):
    name: str
    value_type: InlineType | None = None
    description: str | None = None


class ContentVariant(_Frozen):
    content_type: str
    body: BodyType
    example: AnyValue | None = None
    examples: tuple[Example, ...] | None = None


class ResponseValue(_Frozen):
    kind: Literal["value"] = "value"
    description: str = ""
    response_type: BodyType | None = None
    content_type: tuple[str, ...] | None = None
    headers: tuple[Header, ...] = ()
    example: AnyValue | None = None
    examples: tuple[Example, ...] | None = None
    content: tuple[ContentVariant, ...] = ()


class ResponseRef(_Frozen):
    kind: Literal["ref"] = "ref"
    type: InlineType


class ResponseDescriptor(_Frozen):
    status: str | None = None
    inner: Annotated[ResponseValue | ResponseRef, PydanticField(discriminator="kind")] = ResponseValue()


class DeriveToResponseValue(_Frozen):
    """One parsed ``#[response(...)]`` occurrence on a ``ToResponse`` declaration or variant."""

    content_type: tuple[str, ...] | None = None
    headers: tuple[Header, ...] = ()
    description: str = ""
    example: AnyValue | None = None
    examples: tuple[Example, ...] | None = None
    # where the `example` / `examples` keys were written, for diagnostics
    example_at: Location | None = None
    examples_at: Location | None = None


class DeriveIntoResponsesValue(DeriveToResponseValue):
    """A ``#[response(status = ..., ...)]`` occurrence on an ``IntoResponses`` declaration or variant."""

    status: str


class IntoResponsesPath(_Frozen):
    """A ``responses(...)`` entry naming a type that derives ``IntoResponses``."""

    path: str


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class Annotation(_Frozen):
    """One ``#[name(arguments)]`` attribute; ``arguments`` excludes the outer delimiters."""

    name: str
    arguments: str = ""
    location: Location = Location(line=1, column=1)
    value: str | None = None


class Field(_Frozen):
    """A struct or variant field; the type is kept as written and parsed on access."""

    name: str | None = None
    type_text: str
    type_at: Location = Location(line=1, column=1)
    annotations: tuple[Annotation, ...] = ()
    docs: tuple[str, ...] = ()

    @property
    def type(self) -> TypeRef:
        from respdoc.core.parser import parse_type_text

        return parse_type_text(self.type_text, self.type_at)

    def annotation(self, name: str) -> Annotation | None:
        return next((a for a in self.annotations if a.name == name), None)

    def has_annotation(self, name: str) -> bool:
        return any(a.name == name for a in self.annotations)


class Variant(_Frozen):
    name: str
    fields: tuple[Field, ...] = ()
    unnamed: bool = False
    annotations: tuple[Annotation, ...] = ()
    docs: tuple[str, ...] = ()
    location: Location = Location(line=1, column=1)


class Declaration(_Frozen):
    name: str
    kind: Literal["struct", "enum", "union"]
    fields: tuple[Field, ...] = ()
    unnamed: bool = False
    variants: tuple[Variant, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    docs: tuple[str, ...] = ()
    derives: tuple[str, ...] = ()
    location: Location = Location(line=1, column=1)

    @property
    def type(self) -> TypeRef:
        return TypeRef(path=self.name)


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Instruction:
    """One builder call: ``method(*args)``."""

    method: str
    args: tuple[Any, ...] = ()


Chain = tuple[Instruction, ...]
