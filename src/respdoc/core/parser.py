"""Recursive-descent parser for response annotations.

Three grammars share the same sub-grammars:

* the operation-level response tuple ``(status = 200, description = "ok", body = User)``,
* ``#[response(...)]`` on a ``ToResponse`` declaration or variant,
* ``#[response(status = ..., ...)]`` on an ``IntoResponses`` declaration or variant.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from respdoc.core.status import parse_int_literal, parse_status
from respdoc.core.tokens import KIND_NAMES, Token, TokKind, tokenize
from respdoc.errors import ConflictError, GrammarError
from respdoc.models import (
    AnyValue,
    BodyType,
    ContentVariant,
    DeriveIntoResponsesValue,
    DeriveToResponseValue,
    Example,
    Header,
    InlineType,
    IntoResponsesPath,
    Location,
    MediaTypeBody,
    RefBody,
    ResponseDescriptor,
    ResponseRef,
    ResponseValue,
    TypeRef,
)

RESPONSE_INCOMPATIBLE_ATTRIBUTES_MSG = (
    "The `response` attribute may only be used in conjunction with the `status` attribute"
)
MISSING_STATUS_ERROR = "missing expected `status` attribute"

RESPONSE_TUPLE_KEYS = (
    "status",
    "description",
    "body",
    "content_type",
    "headers",
    "example",
    "examples",
    "content",
    "response",
)
TO_RESPONSE_KEYS = ("description", "content_type", "headers", "example", "examples")
INTO_RESPONSES_KEYS = ("status", *TO_RESPONSE_KEYS)


# ---------------------------------------------------------------------------
# Token stream
# ---------------------------------------------------------------------------


class TokenStream:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    @classmethod
    def from_text(cls, text: str, origin: Location | None = None) -> TokenStream:
        return cls(tokenize(text, origin))

    def peek(self, offset: int = 0) -> Token:
        idx = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[idx]

    def peek_kind(self, offset: int = 0) -> TokKind:
        return self.peek(offset).kind

    def peek_ident(self, value: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok.kind is TokKind.IDENT and tok.value == value

    def next(self) -> Token:
        tok = self.peek()
        if tok.kind is not TokKind.EOF:
            self._pos += 1
        return tok

    def eat(self, kind: TokKind) -> Token | None:
        if self.peek_kind() is kind:
            return self.next()
        return None

    def expect(self, kind: TokKind, what: str | None = None) -> Token:
        tok = self.peek()
        if tok.kind is not kind:
            expected = what or KIND_NAMES[kind]
            raise GrammarError(f"expected {expected}, found {tok.describe()}", tok.location)
        return self.next()

    def at_end(self) -> bool:
        return self.peek_kind() is TokKind.EOF

    def expect_end(self) -> None:
        tok = self.peek()
        if tok.kind is not TokKind.EOF:
            raise GrammarError(f"unexpected {tok.describe()} after end of attribute", tok.location)


def _parse_group(stream: TokenStream, item: Callable[[TokenStream], Any]) -> list[Any]:
    """Parse ``( item, item, ... )`` allowing a trailing comma."""
    stream.expect(TokKind.LPAREN)
    items: list[Any] = []
    while stream.eat(TokKind.RPAREN) is None:
        items.append(item(stream))
        if stream.eat(TokKind.COMMA) is None:
            stream.expect(TokKind.RPAREN, "`,` or `)`")
            break
    return items


def _parse_keys(
    stream: TokenStream,
    handlers: dict[str, Callable[[Token], None]],
    valid_keys: tuple[str, ...],
    end: TokKind,
) -> None:
    """Parse a comma separated ``key ...`` list up to (not including) ``end``."""
    expected = f"expected any of: {', '.join(valid_keys)}"
    while stream.peek_kind() is not end:
        tok = stream.peek()
        if tok.kind is not TokKind.IDENT:
            raise GrammarError(f"unexpected {tok.describe()}, {expected}", tok.location)
        stream.next()
        handler = handlers.get(tok.value)
        if handler is None:
            raise GrammarError(f"unexpected attribute `{tok.value}`, {expected}", tok.location)
        handler(tok)
        if stream.peek_kind() is not end:
            stream.expect(TokKind.COMMA, f"`,` or {KIND_NAMES[end]}")


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------


def parse_next_str(stream: TokenStream) -> str:
    """Parse ``= "literal"``."""
    stream.expect(TokKind.EQ)
    return stream.expect(TokKind.STRING).value


def parse_json(stream: TokenStream) -> Any:
    tok = stream.peek()
    if tok.kind is TokKind.LBRACE:
        stream.next()
        obj: dict[str, Any] = {}
        while stream.eat(TokKind.RBRACE) is None:
            key = stream.expect(TokKind.STRING, "string literal object key").value
            stream.expect(TokKind.COLON)
            obj[key] = parse_json(stream)
            if stream.eat(TokKind.COMMA) is None:
                stream.expect(TokKind.RBRACE, "`,` or `}`")
                break
        return obj
    if tok.kind is TokKind.LBRACK:
        stream.next()
        arr: list[Any] = []
        while stream.eat(TokKind.RBRACK) is None:
            arr.append(parse_json(stream))
            if stream.eat(TokKind.COMMA) is None:
                stream.expect(TokKind.RBRACK, "`,` or `]`")
                break
        return arr
    if tok.kind is TokKind.STRING:
        return stream.next().value
    if tok.kind in (TokKind.INT, TokKind.FLOAT, TokKind.MINUS):
        return _parse_number(stream)
    if tok.kind is TokKind.IDENT and tok.value in ("true", "false", "null"):
        stream.next()
        return {"true": True, "false": False, "null": None}[tok.value]
    raise GrammarError(f"expected JSON value, found {tok.describe()}", tok.location)


def _parse_number(stream: TokenStream) -> int | float:
    negative = stream.eat(TokKind.MINUS) is not None
    tok = stream.peek()
    if tok.kind is TokKind.INT:
        stream.next()
        number: int | float = parse_int_literal(tok.value, tok.location)
    elif tok.kind is TokKind.FLOAT:
        stream.next()
        text = tok.value.replace("_", "").removesuffix("f32").removesuffix("f64")
        try:
            number = float(text)
        except ValueError:
            raise GrammarError(f"malformed float literal `{tok.value}`", tok.location) from None
    else:
        raise GrammarError(f"expected numeric literal, found {tok.describe()}", tok.location)
    return -number if negative else number


def parse_any_value(stream: TokenStream) -> AnyValue:
    """Parse a string literal, ``json!(...)`` or a bare numeric / boolean literal."""
    tok = stream.peek()
    if tok.kind is TokKind.STRING:
        return AnyValue(value=stream.next().value)
    if stream.peek_ident("json") and stream.peek_kind(1) is TokKind.BANG:
        stream.next()
        stream.next()
        closing = {TokKind.LPAREN: TokKind.RPAREN, TokKind.LBRACK: TokKind.RBRACK, TokKind.LBRACE: TokKind.RBRACE}
        opener = stream.peek()
        if opener.kind not in closing:
            raise GrammarError(f"expected `(` after `json!`, found {opener.describe()}", opener.location)
        if opener.kind is TokKind.LPAREN:
            stream.next()
            value = parse_json(stream)
            stream.expect(TokKind.RPAREN, "`)` closing `json!(`")
        else:
            # json![...] and json!{...} use the delimiter as part of the document
            value = parse_json(stream)
        return AnyValue(value=value)
    if tok.kind in (TokKind.INT, TokKind.FLOAT, TokKind.MINUS) or (
        tok.kind is TokKind.IDENT and tok.value in ("true", "false")
    ):
        return AnyValue(value=parse_json(stream))
    raise GrammarError(f"expected string literal or `json!(...)`, found {tok.describe()}", tok.location)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def parse_type(stream: TokenStream) -> TypeRef:
    tok = stream.peek()

    if tok.kind is TokKind.AMP:
        stream.next()
        stream.eat(TokKind.LIFETIME)
        if stream.peek_ident("mut"):
            stream.next()
        return parse_type(stream)

    if tok.kind is TokKind.LBRACK:
        stream.next()
        inner = parse_type(stream)
        if stream.eat(TokKind.SEMI) is not None:
            stream.expect(TokKind.INT, "array length")
        stream.expect(TokKind.RBRACK)
        return TypeRef(kind="slice", args=(inner,))

    if tok.kind is TokKind.LPAREN:
        stream.next()
        closing = stream.peek()
        if closing.kind is not TokKind.RPAREN:
            raise GrammarError("tuple types are not supported, expected `()`", closing.location)
        stream.next()
        return TypeRef(kind="unit")

    if tok.kind in (TokKind.IDENT, TokKind.PATHSEP):
        segments: list[str] = []
        if stream.eat(TokKind.PATHSEP) is not None:
            segments.append("")
        segments.append(stream.expect(TokKind.IDENT, "type").value)
        while stream.peek_kind() is TokKind.PATHSEP and stream.peek_kind(1) is TokKind.IDENT:
            stream.next()
            segments.append(stream.next().value)
        args: list[TypeRef] = []
        if stream.eat(TokKind.LT) is not None:
            while stream.eat(TokKind.GT) is None:
                if stream.eat(TokKind.LIFETIME) is None:
                    args.append(parse_type(stream))
                if stream.eat(TokKind.COMMA) is None:
                    stream.expect(TokKind.GT, "`,` or `>`")
                    break
        return TypeRef(path="::".join(segments), args=tuple(args))

    raise GrammarError(f"unexpected token, expected type such as String, found {tok.describe()}", tok.location)


def parse_type_text(text: str, origin: Location | None = None) -> TypeRef:
    stream = TokenStream.from_text(text, origin)
    ty = parse_type(stream)
    stream.expect_end()
    return ty


def parse_inline_type(stream: TokenStream) -> InlineType:
    """Parse ``inline(T)`` or ``T``."""
    if stream.peek_ident("inline") and stream.peek_kind(1) is TokKind.LPAREN:
        stream.next()
        stream.next()
        ty = parse_type(stream)
        stream.expect(TokKind.RPAREN, "`)` closing `inline(`")
        return InlineType(ty=ty, is_inline=True)
    return InlineType(ty=parse_type(stream))


def parse_body_type(stream: TokenStream) -> BodyType:
    """Parse ``ref("...")``, ``inline(T)`` or ``T``."""
    if stream.peek_ident("ref") and stream.peek_kind(1) is TokKind.LPAREN:
        stream.next()
        stream.next()
        reference = stream.expect(TokKind.STRING, "string literal reference").value
        stream.expect(TokKind.RPAREN, "`)` closing `ref(`")
        return RefBody(reference=reference)
    return MediaTypeBody(type=parse_inline_type(stream))


# ---------------------------------------------------------------------------
# Sub-grammars
# ---------------------------------------------------------------------------


def parse_content_type(stream: TokenStream) -> tuple[str, ...]:
    """Parse ``= "type"`` or ``= ["type", ...]``."""
    stream.expect(TokKind.EQ)
    tok = stream.peek()
    if tok.kind is TokKind.STRING:
        return (stream.next().value,)
    if tok.kind is TokKind.LBRACK:
        stream.next()
        values: list[str] = []
        while stream.eat(TokKind.RBRACK) is None:
            values.append(stream.expect(TokKind.STRING).value)
            if stream.eat(TokKind.COMMA) is None:
                stream.expect(TokKind.RBRACK, "`,` or `]`")
                break
        return tuple(values)
    raise GrammarError(f"expected string literal or `[`, found {tok.describe()}", tok.location)


def parse_example(stream: TokenStream) -> AnyValue:
    stream.expect(TokKind.EQ)
    return parse_any_value(stream)


def _parse_header(stream: TokenStream) -> Header:
    stream.expect(TokKind.LPAREN)
    name = stream.expect(TokKind.STRING, "string literal header name").value
    value_type: InlineType | None = None
    description: str | None = None

    if stream.eat(TokKind.EQ) is not None:
        value_type = parse_inline_type(stream)

    if stream.eat(TokKind.COMMA) is not None and stream.peek_kind() is TokKind.IDENT:
        ident = stream.next()
        if ident.value != "description":
            raise GrammarError(f"unexpected attribute `{ident.value}`, expected: description", ident.location)
        description = parse_next_str(stream)
        stream.eat(TokKind.COMMA)

    stream.expect(TokKind.RPAREN, "`)` closing header")
    return Header(name=name, value_type=value_type, description=description)


def parse_headers(stream: TokenStream) -> tuple[Header, ...]:
    """Parse ``headers(("name" = T, description = "..."), ...)``."""
    stream.eat(TokKind.EQ)
    return tuple(_parse_group(stream, _parse_header))


def _parse_named_example(stream: TokenStream) -> Example:
    stream.expect(TokKind.LPAREN)
    name = stream.expect(TokKind.STRING, "string literal example name").value
    stream.expect(TokKind.EQ)
    stream.expect(TokKind.LPAREN)
    fields: dict[str, Any] = {}

    def _str_field(key: str) -> Callable[[Token], None]:
        def handler(_: Token) -> None:
            fields[key] = parse_next_str(stream)

        return handler

    def _value(_: Token) -> None:
        fields["value"] = parse_example(stream)

    _parse_keys(
        stream,
        {
            "summary": _str_field("summary"),
            "description": _str_field("description"),
            "value": _value,
            "external_value": _str_field("external_value"),
        },
        ("summary", "description", "value", "external_value"),
        TokKind.RPAREN,
    )
    stream.expect(TokKind.RPAREN)
    stream.eat(TokKind.COMMA)
    stream.expect(TokKind.RPAREN, "`)` closing example")
    return Example(name=name, **fields)


def parse_examples(stream: TokenStream) -> tuple[Example, ...]:
    """Parse ``examples(("name" = (summary = "...", value = json!(...))), ...)``."""
    stream.eat(TokKind.EQ)
    return tuple(_parse_group(stream, _parse_named_example))


def _parse_content_variant(stream: TokenStream) -> ContentVariant:
    stream.expect(TokKind.LPAREN)
    content_type = stream.expect(TokKind.STRING, "string literal content type").value
    stream.expect(TokKind.EQ)
    body = parse_body_type(stream)
    fields: dict[str, Any] = {}
    if stream.eat(TokKind.COMMA) is not None:

        def _example(_: Token) -> None:
            fields["example"] = parse_example(stream)

        def _examples(_: Token) -> None:
            fields["examples"] = parse_examples(stream)

        _parse_keys(stream, {"example": _example, "examples": _examples}, ("example", "examples"), TokKind.RPAREN)
    stream.expect(TokKind.RPAREN, "`)` closing content")
    return ContentVariant(content_type=content_type, body=body, **fields)


def parse_content(stream: TokenStream) -> tuple[ContentVariant, ...]:
    """Parse ``content(("type" = T, example = ..., examples(...)), ...)``."""
    stream.eat(TokKind.EQ)
    return tuple(_parse_group(stream, _parse_content_variant))


# ---------------------------------------------------------------------------
# Response tuple
# ---------------------------------------------------------------------------


class _TupleBuilder:
    """Collects a response tuple whose body is either a value or a reference, never both."""

    def __init__(self) -> None:
        self.status: str | None = None
        self.value: dict[str, Any] | None = None
        self.ref: InlineType | None = None

    def as_value(self, location: Location) -> dict[str, Any]:
        if self.ref is not None:
            raise ConflictError(RESPONSE_INCOMPATIBLE_ATTRIBUTES_MSG, location)
        if self.value is None:
            self.value = {}
        return self.value

    def set_ref_type(self, location: Location, ty: InlineType) -> None:
        if self.value is not None:
            raise ConflictError(RESPONSE_INCOMPATIBLE_ATTRIBUTES_MSG, location)
        self.ref = ty

    def build(self) -> ResponseDescriptor:
        if self.ref is not None:
            return ResponseDescriptor(status=self.status, inner=ResponseRef(type=self.ref))
        return ResponseDescriptor(status=self.status, inner=ResponseValue(**(self.value or {})))


def _parse_response_tuple_body(stream: TokenStream, start: Location) -> ResponseDescriptor:
    builder = _TupleBuilder()

    def _status(_: Token) -> None:
        stream.expect(TokKind.EQ)
        builder.status = parse_status(stream)

    def _setter(key: str, parse: Callable[[TokenStream], Any]) -> Callable[[Token], None]:
        def handler(tok: Token) -> None:
            builder.as_value(tok.location)[key] = parse(stream)

        return handler

    def _body(tok: Token) -> None:
        value = builder.as_value(tok.location)
        stream.expect(TokKind.EQ)
        value["response_type"] = parse_body_type(stream)

    def _response(tok: Token) -> None:
        stream.expect(TokKind.EQ)
        builder.set_ref_type(tok.location, parse_inline_type(stream))

    _parse_keys(
        stream,
        {
            "status": _status,
            "description": _setter("description", parse_next_str),
            "body": _body,
            "content_type": _setter("content_type", parse_content_type),
            "headers": _setter("headers", parse_headers),
            "example": _setter("example", parse_example),
            "examples": _setter("examples", parse_examples),
            "content": _setter("content", parse_content),
            "response": _response,
        },
        RESPONSE_TUPLE_KEYS,
        TokKind.RPAREN,
    )
    if builder.status is None:
        raise GrammarError(MISSING_STATUS_ERROR, start)
    return builder.build()


def parse_response_tuple_stream(stream: TokenStream) -> ResponseDescriptor:
    start = stream.expect(TokKind.LPAREN, "`(` opening response tuple")
    descriptor = _parse_response_tuple_body(stream, start.location)
    stream.expect(TokKind.RPAREN)
    return descriptor


def parse_response_tuple(text: str, origin: Location | None = None) -> ResponseDescriptor:
    """Parse one ``(status = ..., ...)`` response tuple."""
    stream = TokenStream.from_text(text, origin)
    descriptor = parse_response_tuple_stream(stream)
    stream.expect_end()
    return descriptor


def parse_responses(text: str, origin: Location | None = None) -> list[ResponseDescriptor | IntoResponsesPath]:
    """Parse the entries of an operation-level ``responses(...)`` list.

    Each entry is a response tuple or the path of a type deriving ``IntoResponses``.
    """
    stream = TokenStream.from_text(text, origin)
    entries: list[ResponseDescriptor | IntoResponsesPath] = []
    while not stream.at_end():
        if stream.peek_kind() is TokKind.LPAREN:
            entries.append(parse_response_tuple_stream(stream))
        else:
            entries.append(IntoResponsesPath(path=str(parse_type(stream))))
        if not stream.at_end():
            stream.expect(TokKind.COMMA, "`,` or end of input")
    return entries


# ---------------------------------------------------------------------------
# Derive values
# ---------------------------------------------------------------------------


def _derive_handlers(stream: TokenStream, fields: dict[str, Any]) -> dict[str, Callable[[Token], None]]:
    def _description(_: Token) -> None:
        fields["description"] = parse_next_str(stream)

    def _content_type(_: Token) -> None:
        fields["content_type"] = parse_content_type(stream)

    def _headers(_: Token) -> None:
        fields["headers"] = parse_headers(stream)

    def _example(tok: Token) -> None:
        fields["example"] = parse_example(stream)
        fields["example_at"] = tok.location

    def _examples(tok: Token) -> None:
        fields["examples"] = parse_examples(stream)
        fields["examples_at"] = tok.location

    return {
        "description": _description,
        "content_type": _content_type,
        "headers": _headers,
        "example": _example,
        "examples": _examples,
    }


def parse_derive_to_response_value(text: str, origin: Location | None = None) -> DeriveToResponseValue:
    """Parse the arguments of ``#[response(...)]`` on a ``ToResponse`` declaration."""
    stream = TokenStream.from_text(text, origin)
    fields: dict[str, Any] = {}
    _parse_keys(stream, _derive_handlers(stream, fields), TO_RESPONSE_KEYS, TokKind.EOF)
    return DeriveToResponseValue(**fields)


def parse_derive_into_responses_value(text: str, origin: Location | None = None) -> DeriveIntoResponsesValue:
    """Parse the arguments of ``#[response(status = ..., ...)]`` on an ``IntoResponses`` declaration."""
    stream = TokenStream.from_text(text, origin)
    start = stream.peek().location
    fields: dict[str, Any] = {}
    handlers = _derive_handlers(stream, fields)

    def _status(_: Token) -> None:
        stream.expect(TokKind.EQ)
        fields["status"] = parse_status(stream)

    handlers["status"] = _status
    _parse_keys(stream, handlers, INTO_RESPONSES_KEYS, TokKind.EOF)
    if "status" not in fields:
        raise GrammarError(MISSING_STATUS_ERROR, start)
    return DeriveIntoResponsesValue(**fields)
