"""Tokenizer for the attribute mini-language.

Attribute arguments follow Rust token rules, so this recognizes Rust string
literals (including raw strings), numeric literals with separators and type
suffixes, lifetimes and the handful of punctuation marks the grammar uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from respdoc.errors import GrammarError
from respdoc.models import Location


class TokKind(Enum):
    IDENT = auto()
    STRING = auto()
    INT = auto()
    FLOAT = auto()
    LIFETIME = auto()
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACK = auto()  # [
    RBRACK = auto()  # ]
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    COMMA = auto()  # ,
    EQ = auto()  # =
    COLON = auto()  # :
    PATHSEP = auto()  # ::
    LT = auto()  # <
    GT = auto()  # >
    AMP = auto()  # &
    BANG = auto()  # !
    SEMI = auto()  # ;
    MINUS = auto()  # -
    POUND = auto()  # #
    EOF = auto()


# What a diagnostic calls each token kind.
KIND_NAMES: dict[TokKind, str] = {
    TokKind.IDENT: "identifier",
    TokKind.STRING: "string literal",
    TokKind.INT: "integer literal",
    TokKind.FLOAT: "float literal",
    TokKind.LIFETIME: "lifetime",
    TokKind.LPAREN: "`(`",
    TokKind.RPAREN: "`)`",
    TokKind.LBRACK: "`[`",
    TokKind.RBRACK: "`]`",
    TokKind.LBRACE: "`{`",
    TokKind.RBRACE: "`}`",
    TokKind.COMMA: "`,`",
    TokKind.EQ: "`=`",
    TokKind.COLON: "`:`",
    TokKind.PATHSEP: "`::`",
    TokKind.LT: "`<`",
    TokKind.GT: "`>`",
    TokKind.AMP: "`&`",
    TokKind.BANG: "`!`",
    TokKind.SEMI: "`;`",
    TokKind.MINUS: "`-`",
    TokKind.POUND: "`#`",
    TokKind.EOF: "end of input",
}

_PUNCT: dict[str, TokKind] = {
    "(": TokKind.LPAREN,
    ")": TokKind.RPAREN,
    "[": TokKind.LBRACK,
    "]": TokKind.RBRACK,
    "{": TokKind.LBRACE,
    "}": TokKind.RBRACE,
    ",": TokKind.COMMA,
    "=": TokKind.EQ,
    "<": TokKind.LT,
    ">": TokKind.GT,
    "&": TokKind.AMP,
    "!": TokKind.BANG,
    ";": TokKind.SEMI,
    "-": TokKind.MINUS,
    "#": TokKind.POUND,
}

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "0": "\0", "'": "'", '"': '"'}


@dataclass
class Token:
    kind: TokKind
    value: str
    line: int
    col: int

    @property
    def location(self) -> Location:
        return Location(line=self.line, column=self.col)

    def describe(self) -> str:
        if self.kind is TokKind.EOF:
            return KIND_NAMES[self.kind]
        return f"{KIND_NAMES[self.kind]} `{self.value}`"


class _Cursor:
    def __init__(self, text: str, origin: Location) -> None:
        self.text = text
        self.i = 0
        self.line = origin.line
        self.col = origin.column

    def peek(self, offset: int = 0) -> str:
        j = self.i + offset
        return self.text[j] if j < len(self.text) else ""

    def advance(self, count: int = 1) -> str:
        chunk = self.text[self.i : self.i + count]
        for ch in chunk:
            if ch == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
        self.i += count
        return chunk

    @property
    def location(self) -> Location:
        return Location(line=self.line, column=self.col)


def tokenize(text: str, origin: Location | None = None) -> list[Token]:
    """Split ``text`` into tokens, ending with a single EOF token.

    ``origin`` is the location of the first character, so diagnostics point
    into the surrounding source file.
    """
    cur = _Cursor(text, origin or Location(line=1, column=1))
    tokens: list[Token] = []

    while cur.i < len(text):
        ch = cur.peek()
        line, col = cur.line, cur.col

        if ch.isspace():
            cur.advance()
            continue

        if ch == "/" and cur.peek(1) == "/":
            while cur.i < len(text) and cur.peek() != "\n":
                cur.advance()
            continue

        if ch == "/" and cur.peek(1) == "*":
            end = text.find("*/", cur.i + 2)
            if end < 0:
                raise GrammarError("unterminated block comment", Location(line=line, column=col))
            cur.advance(end + 2 - cur.i)
            continue

        if ch == '"':
            tokens.append(Token(TokKind.STRING, _read_string(cur), line, col))
            continue

        if ch == "r" and (cur.peek(1) == '"' or (cur.peek(1) == "#" and cur.peek(2) in ('"', "#"))):
            tokens.append(Token(TokKind.STRING, _read_raw_string(cur), line, col))
            continue

        # raw identifier, `r#type` is the identifier `type`
        if ch == "r" and cur.peek(1) == "#" and (cur.peek(2).isalpha() or cur.peek(2) == "_"):
            cur.advance(2)
            start = cur.i
            while cur.peek().isalnum() or cur.peek() == "_":
                cur.advance()
            tokens.append(Token(TokKind.IDENT, text[start : cur.i], line, col))
            continue

        if ch.isalpha() or ch == "_":
            start = cur.i
            while cur.peek().isalnum() or cur.peek() == "_":
                cur.advance()
            tokens.append(Token(TokKind.IDENT, text[start : cur.i], line, col))
            continue

        if ch.isdigit():
            kind, value = _read_number(cur)
            tokens.append(Token(kind, value, line, col))
            continue

        if ch == "'":
            cur.advance()
            start = cur.i
            while cur.peek().isalnum() or cur.peek() == "_":
                cur.advance()
            if cur.i == start:
                raise GrammarError("expected lifetime name after `'`", Location(line=line, column=col))
            tokens.append(Token(TokKind.LIFETIME, text[start : cur.i], line, col))
            continue

        if ch == ":":
            if cur.peek(1) == ":":
                cur.advance(2)
                tokens.append(Token(TokKind.PATHSEP, "::", line, col))
            else:
                cur.advance()
                tokens.append(Token(TokKind.COLON, ":", line, col))
            continue

        if ch in _PUNCT:
            cur.advance()
            tokens.append(Token(_PUNCT[ch], ch, line, col))
            continue

        raise GrammarError(f"unexpected character `{ch}`", Location(line=line, column=col))

    tokens.append(Token(TokKind.EOF, "", cur.line, cur.col))
    return tokens


def _read_string(cur: _Cursor) -> str:
    start = cur.location
    cur.advance()  # opening quote
    out: list[str] = []
    while True:
        ch = cur.peek()
        if ch == "":
            raise GrammarError("unterminated string literal", start)
        if ch == '"':
            cur.advance()
            return "".join(out)
        if ch == "\\":
            cur.advance()
            esc = cur.peek()
            if esc in _ESCAPES:
                cur.advance()
                out.append(_ESCAPES[esc])
            elif esc == "u" and cur.peek(1) == "{":
                cur.advance(2)
                digits = ""
                while cur.peek() not in ("}", ""):
                    digits += cur.advance()
                cur.advance()
                try:
                    out.append(chr(int(digits.replace("_", ""), 16)))
                except ValueError:
                    raise GrammarError(f"invalid unicode escape `\\u{{{digits}}}`", start) from None
            elif esc == "x":
                cur.advance()
                digits = cur.advance(2)
                try:
                    out.append(chr(int(digits, 16)))
                except ValueError:
                    raise GrammarError(f"invalid hex escape `\\x{digits}`", start) from None
            elif esc == "\n":
                # line continuation skips the newline and leading whitespace
                while cur.peek().isspace():
                    cur.advance()
            else:
                raise GrammarError(f"unknown character escape `\\{esc}`", cur.location)
            continue
        out.append(cur.advance())


def _read_raw_string(cur: _Cursor) -> str:
    start = cur.location
    cur.advance()  # r
    hashes = 0
    while cur.peek() == "#":
        cur.advance()
        hashes += 1
    if cur.peek() != '"':
        raise GrammarError("expected `\"` in raw string literal", start)
    cur.advance()
    terminator = '"' + "#" * hashes
    end = cur.text.find(terminator, cur.i)
    if end < 0:
        raise GrammarError("unterminated raw string literal", start)
    value = cur.text[cur.i : end]
    cur.advance(end + len(terminator) - cur.i)
    return value


def _read_number(cur: _Cursor) -> tuple[TokKind, str]:
    start = cur.i
    kind = TokKind.INT
    if cur.peek() == "0" and cur.peek(1) in ("x", "o", "b"):
        cur.advance(2)
        while cur.peek().isalnum() or cur.peek() == "_":
            cur.advance()
        return kind, cur.text[start : cur.i]

    while cur.peek().isdigit() or cur.peek() == "_":
        cur.advance()
    if cur.peek() == "." and cur.peek(1).isdigit():
        kind = TokKind.FLOAT
        cur.advance()
        while cur.peek().isdigit() or cur.peek() == "_":
            cur.advance()
    if cur.peek() in ("e", "E") and (cur.peek(1).isdigit() or (cur.peek(1) in "+-" and cur.peek(2).isdigit())):
        kind = TokKind.FLOAT
        cur.advance(2)
        while cur.peek().isdigit() or cur.peek() == "_":
            cur.advance()
    # type suffix such as u16 or f64
    while cur.peek().isalnum() or cur.peek() == "_":
        cur.advance()
    return kind, cur.text[start : cur.i]
