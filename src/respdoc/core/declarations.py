"""Extract annotated type declarations from Rust source with tree-sitter."""

from __future__ import annotations

import logging
from pathlib import Path

from tree_sitter import Node
from tree_sitter_language_pack import get_parser

from respdoc.core.tokens import TokKind, tokenize
from respdoc.models import Annotation, Declaration, Field, Location, Variant

logger = logging.getLogger(__name__)

_ITEM_KINDS = {"struct_item": "struct", "enum_item": "enum", "union_item": "union"}
_COMMENTS = ("line_comment", "block_comment")


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _location(node: Node, column_offset: int = 0) -> Location:
    return Location(line=node.start_point[0] + 1, column=node.start_point[1] + 1 + column_offset)


def _doc_line(node: Node, source: bytes) -> str | None:
    """Return the text of a ``///`` or ``/** */`` outer doc comment, or None for other comments."""
    if node.type == "block_comment":
        text = _text(node, source)
        if not text.startswith("/**") or text.startswith("/***") or text == "/**/":
            return None
        lines = (line.strip().removeprefix("*").strip() for line in text[3:-2].splitlines())
        return "\n".join(line for line in lines if line)
    if node.type != "line_comment":
        return None
    text = _text(node, source).rstrip("\r\n")
    if not text.startswith("///") or text.startswith("////"):
        return None
    return text[3:].strip()


def _string_value(node: Node, source: bytes) -> str | None:
    tokens = tokenize(_text(node, source), _location(node))
    if len(tokens) == 2 and tokens[0].kind is TokKind.STRING:
        return tokens[0].value
    return None


def _annotation(item: Node, source: bytes) -> Annotation | None:
    attr = next((c for c in item.named_children if c.type == "attribute"), None)
    if attr is None or not attr.named_children:
        return None
    name = _text(attr.named_children[0], source)
    arguments = attr.child_by_field_name("arguments")
    value = attr.child_by_field_name("value")
    if arguments is not None:
        raw = _text(arguments, source)
        return Annotation(name=name, arguments=raw[1:-1], location=_location(arguments, 1))
    if value is not None:
        return Annotation(name=name, value=_string_value(value, source), location=_location(value))
    return Annotation(name=name, location=_location(attr))


class _Pending:
    """Attributes and doc lines seen since the last item in a list of siblings."""

    def __init__(self) -> None:
        self.annotations: list[Annotation] = []
        self.docs: list[str] = []

    def feed(self, node: Node, source: bytes) -> bool:
        if node.type == "attribute_item":
            annotation = _annotation(node, source)
            if annotation is not None:
                if annotation.name == "doc" and annotation.value is not None:
                    self.docs.append(annotation.value.strip())
                else:
                    self.annotations.append(annotation)
            return True
        if node.type in _COMMENTS:
            doc = _doc_line(node, source)
            if doc is not None:
                self.docs.append(doc)
            return True
        return False

    def take(self) -> tuple[tuple[Annotation, ...], tuple[str, ...]]:
        taken = tuple(self.annotations), tuple(self.docs)
        self.annotations, self.docs = [], []
        return taken


def _named_fields(body: Node, source: bytes) -> tuple[Field, ...]:
    fields: list[Field] = []
    pending = _Pending()
    for child in body.children:
        if pending.feed(child, source):
            continue
        if child.type == "field_declaration":
            name_node = child.child_by_field_name("name")
            type_node = child.child_by_field_name("type")
            assert name_node is not None and type_node is not None
            annotations, docs = pending.take()
            fields.append(
                Field(
                    name=_text(name_node, source),
                    type_text=_text(type_node, source),
                    type_at=_location(type_node),
                    annotations=annotations,
                    docs=docs,
                )
            )
    return tuple(fields)


def _unnamed_fields(body: Node, source: bytes) -> tuple[Field, ...]:
    fields: list[Field] = []
    pending = _Pending()
    for child in body.children:
        if pending.feed(child, source):
            continue
        if not child.is_named or child.type == "visibility_modifier":
            continue
        annotations, docs = pending.take()
        fields.append(
            Field(type_text=_text(child, source), type_at=_location(child), annotations=annotations, docs=docs)
        )
    return tuple(fields)


def _fields(body: Node | None, source: bytes) -> tuple[tuple[Field, ...], bool]:
    if body is None:
        return (), False
    if body.type == "ordered_field_declaration_list":
        return _unnamed_fields(body, source), True
    if body.type == "field_declaration_list":
        return _named_fields(body, source), False
    return (), False


def _variants(body: Node, source: bytes) -> tuple[Variant, ...]:
    variants: list[Variant] = []
    pending = _Pending()
    for child in body.children:
        if pending.feed(child, source):
            continue
        if child.type == "enum_variant":
            name_node = child.child_by_field_name("name")
            assert name_node is not None
            fields, unnamed = _fields(child.child_by_field_name("body"), source)
            annotations, docs = pending.take()
            variants.append(
                Variant(
                    name=_text(name_node, source),
                    fields=fields,
                    unnamed=unnamed,
                    annotations=annotations,
                    docs=docs,
                    location=_location(name_node),
                )
            )
    return tuple(variants)


def _derives(annotations: tuple[Annotation, ...]) -> tuple[str, ...]:
    names: list[str] = []
    for annotation in annotations:
        if annotation.name != "derive":
            continue
        for entry in annotation.arguments.split(","):
            entry = entry.strip()
            if entry:
                names.append(entry.rsplit("::", 1)[-1])
    return tuple(names)


def _declaration(item: Node, source: bytes, pending: _Pending) -> Declaration:
    name_node = item.child_by_field_name("name")
    assert name_node is not None
    annotations, docs = pending.take()
    kind = _ITEM_KINDS[item.type]
    body = item.child_by_field_name("body")
    fields: tuple[Field, ...] = ()
    unnamed = False
    variants: tuple[Variant, ...] = ()
    if kind == "enum" and body is not None:
        variants = _variants(body, source)
    elif kind == "struct":
        fields, unnamed = _fields(body, source)
    return Declaration(
        name=_text(name_node, source),
        kind=kind,  # type: ignore[arg-type]
        fields=fields,
        unnamed=unnamed,
        variants=variants,
        annotations=annotations,
        docs=docs,
        derives=_derives(annotations),
        location=_location(name_node),
    )


def _collect(container: Node, source: bytes, out: list[Declaration]) -> None:
    pending = _Pending()
    for child in container.children:
        if pending.feed(child, source):
            continue
        if child.type in _ITEM_KINDS:
            out.append(_declaration(child, source, pending))
            continue
        pending.take()
        if child.type == "mod_item":
            body = child.child_by_field_name("body")
            if body is not None:
                _collect(body, source, out)


def extract_declarations(source: bytes) -> list[Declaration]:
    """Return every struct, enum and union declared in ``source``, in source order."""
    parser = get_parser("rust")
    tree = parser.parse(source)
    declarations: list[Declaration] = []
    _collect(tree.root_node, source, declarations)
    logger.debug("Extracted %d declaration(s)", len(declarations))
    return declarations


def extract_declarations_from_file(path: str | Path) -> list[Declaration]:
    file_path = Path(path)
    try:
        source = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None
    return extract_declarations(source)
