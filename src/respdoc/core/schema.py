"""JSON-schema fragments and default content types for Rust types."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from respdoc.models import Declaration, Field, InlineType, TypeRef, Variant

SCHEMA_REF_PREFIX = "#/components/schemas/"

_INT32 = {"type": "integer", "format": "int32"}
_INT64 = {"type": "integer", "format": "int64"}

_PRIMITIVES: dict[str, dict[str, Any]] = {
    "String": {"type": "string"},
    "str": {"type": "string"},
    "char": {"type": "string"},
    "bool": {"type": "boolean"},
    "i8": _INT32,
    "i16": _INT32,
    "i32": _INT32,
    "u8": _INT32,
    "u16": _INT32,
    "u32": _INT32,
    "i64": _INT64,
    "i128": _INT64,
    "isize": _INT64,
    "u64": _INT64,
    "u128": _INT64,
    "usize": _INT64,
    "f32": {"type": "number", "format": "float"},
    "f64": {"type": "number", "format": "double"},
    "Uuid": {"type": "string", "format": "uuid"},
    "Date": {"type": "string", "format": "date"},
    "NaiveDate": {"type": "string", "format": "date"},
    "DateTime": {"type": "string", "format": "date-time"},
    "NaiveDateTime": {"type": "string", "format": "date-time"},
    "OffsetDateTime": {"type": "string", "format": "date-time"},
}

_SEQUENCES = {"Vec", "VecDeque", "LinkedList"}
_SETS = {"HashSet", "BTreeSet", "IndexSet"}
_MAPS = {"HashMap", "BTreeMap", "IndexMap"}
_TRANSPARENT = {"Box", "Rc", "Arc", "Cow", "RefCell"}


def _unwrap(ty: TypeRef) -> TypeRef:
    while ty.kind == "path" and ty.name in _TRANSPARENT | {"Option"} and ty.args:
        ty = ty.args[-1]
    return ty


def _is_array(ty: TypeRef) -> bool:
    return ty.kind == "slice" or (ty.kind == "path" and ty.name in _SEQUENCES | _SETS)


def _is_required(field: Field) -> bool:
    ty = field.type
    return not (ty.kind == "path" and ty.name == "Option")


class RustTypeDescriber:
    """Describe Rust types as OpenAPI schema fragments.

    ``declarations`` are the types known to the current compilation; an
    ``inline(T)`` reference to one of them expands to its generated schema,
    anything else named is referenced under ``#/components/schemas/``.
    """

    def __init__(self, declarations: Iterable[Declaration] = ()) -> None:
        self._declarations = {d.name: d for d in declarations}

    # -- content type negotiation --

    def default_content_type(self, ty: TypeRef) -> str:
        ty = _unwrap(ty)
        if _is_array(ty) and ty.args and _unwrap(ty.args[0]).name == "u8":
            return "application/octet-stream"
        if ty.kind == "path" and ty.name in _PRIMITIVES:
            return "text/plain"
        return "application/json"

    def response_name(self, ty: TypeRef) -> str:
        return ty.name

    # -- schemas --

    def schema_of(self, ty: InlineType) -> dict[str, Any]:
        return self._schema(ty.ty, ty.is_inline)

    def _schema(self, ty: TypeRef, inline: bool) -> dict[str, Any]:
        if ty.kind == "unit":
            return {"nullable": True}
        if ty.kind == "slice":
            return {"type": "array", "items": self._schema(ty.args[0], inline)}

        name = ty.name
        if name in _PRIMITIVES:
            return dict(_PRIMITIVES[name])
        if name in ("Value", "JsonValue"):
            return {}
        if name == "Option" and ty.args:
            inner = self._schema(ty.args[0], inline)
            if "$ref" in inner:
                return {"allOf": [inner], "nullable": True}
            return {**inner, "nullable": True}
        if name in _TRANSPARENT and ty.args:
            return self._schema(ty.args[-1], inline)
        if name in _SEQUENCES and ty.args:
            return {"type": "array", "items": self._schema(ty.args[0], inline)}
        if name in _SETS and ty.args:
            return {"type": "array", "items": self._schema(ty.args[0], inline), "uniqueItems": True}
        if name in _MAPS and len(ty.args) == 2:
            return {"type": "object", "additionalProperties": self._schema(ty.args[1], inline)}

        declaration = self._declarations.get(name)
        if inline and declaration is not None:
            return self.declaration_schema(declaration)
        return {"$ref": f"{SCHEMA_REF_PREFIX}{name}"}

    def declaration_schema(self, declaration: Declaration) -> dict[str, Any]:
        if declaration.kind == "enum":
            return self.enum_schema(declaration.variants, declaration.docs)
        if declaration.unnamed and len(declaration.fields) == 1:
            return self.schema_of(InlineType(ty=declaration.fields[0].type))
        if declaration.fields:
            return self.named_struct_schema(declaration.fields, declaration.docs)
        return {"nullable": True}

    def named_struct_schema(self, fields: Iterable[Field], docs: Iterable[str] = ()) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "object"}
        description = "\n".join(docs)
        if description:
            schema["description"] = description
        properties: dict[str, Any] = {}
        required: list[str] = []
        for field in fields:
            assert field.name is not None
            prop = self.schema_of(InlineType(ty=field.type))
            if field.docs:
                prop["description"] = "\n".join(field.docs)
            properties[field.name] = prop
            if _is_required(field):
                required.append(field.name)
        if required:
            schema["required"] = required
        schema["properties"] = properties
        return schema

    def enum_schema(self, variants: Iterable[Variant], docs: Iterable[str] = ()) -> dict[str, Any]:
        variants = list(variants)
        description = "\n".join(docs)
        if all(not v.fields for v in variants):
            schema: dict[str, Any] = {"type": "string", "enum": [v.name for v in variants]}
        else:
            schema = {"oneOf": [self._variant_schema(v) for v in variants]}
        if description:
            schema["description"] = description
        return schema

    def _variant_schema(self, variant: Variant) -> dict[str, Any]:
        if not variant.fields:
            return {"type": "string", "enum": [variant.name]}
        if not variant.unnamed:
            payload = self.named_struct_schema(variant.fields, variant.docs)
        elif len(variant.fields) == 1:
            payload = self.schema_of(InlineType(ty=variant.fields[0].type))
        else:
            items = [self.schema_of(InlineType(ty=f.type)) for f in variant.fields]
            payload = {
                "type": "array",
                "items": {"oneOf": items},
                "minItems": len(items),
                "maxItems": len(items),
            }
        return {"type": "object", "required": [variant.name], "properties": {variant.name: payload}}
