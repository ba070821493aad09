from __future__ import annotations

from dataclasses import dataclass

from respdoc.errors import ShapeError
from respdoc.models import Annotation, Declaration, Field, TypeRef, Variant


@dataclass(frozen=True)
class UnnamedShape:
    """A tuple struct with one field; the body is the field's own type."""

    type: TypeRef
    annotations: tuple[Annotation, ...]


@dataclass(frozen=True)
class NamedShape:
    type: TypeRef
    fields: tuple[Field, ...]


@dataclass(frozen=True)
class UnitShape:
    pass


@dataclass(frozen=True)
class EnumShape:
    type: TypeRef
    variants: tuple[Variant, ...]


Shape = UnnamedShape | NamedShape | UnitShape | EnumShape


def classify(declaration: Declaration) -> Shape:
    """Classify how a declaration's fields turn into a response body."""
    if declaration.kind == "union":
        raise ShapeError("Union type is not supported with `ToResponse`", declaration.location)

    if declaration.kind == "enum":
        return EnumShape(declaration.type, declaration.variants)

    if declaration.unnamed:
        if not declaration.fields:
            raise ShapeError("Unnamed struct used for `ToResponse` must have one argument", declaration.location)
        if len(declaration.fields) > 1:
            raise ShapeError("unsupported: tuple-shaped response body", declaration.location)
        field = declaration.fields[0]
        return UnnamedShape(field.type, field.annotations)

    if declaration.fields:
        return NamedShape(declaration.type, declaration.fields)

    return UnitShape()
