"""Status-code resolution.

A status is written as a decimal integer, one of the fixed range strings, or
a path to an ``http::StatusCode`` associated constant. The token kind that is
actually present decides which grammar applies; there is no coercion between
the three forms.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from respdoc.core.tokens import TokKind, tokenize
from respdoc.errors import GrammarError, ResolutionError
from respdoc.models import Location

if TYPE_CHECKING:
    from respdoc.core.parser import TokenStream

VALID_STATUS_RANGES: tuple[str, ...] = ("default", "1XX", "2XX", "3XX", "4XX", "5XX")

STATUS_CODES: tuple[tuple[int, str], ...] = (
    (100, "CONTINUE"),
    (101, "SWITCHING_PROTOCOLS"),
    (102, "PROCESSING"),
    (200, "OK"),
    (201, "CREATED"),
    (202, "ACCEPTED"),
    (203, "NON_AUTHORITATIVE_INFORMATION"),
    (204, "NO_CONTENT"),
    (205, "RESET_CONTENT"),
    (206, "PARTIAL_CONTENT"),
    (207, "MULTI_STATUS"),
    (208, "ALREADY_REPORTED"),
    (226, "IM_USED"),
    (300, "MULTIPLE_CHOICES"),
    (301, "MOVED_PERMANENTLY"),
    (302, "FOUND"),
    (303, "SEE_OTHER"),
    (304, "NOT_MODIFIED"),
    (305, "USE_PROXY"),
    (307, "TEMPORARY_REDIRECT"),
    (308, "PERMANENT_REDIRECT"),
    (400, "BAD_REQUEST"),
    (401, "UNAUTHORIZED"),
    (402, "PAYMENT_REQUIRED"),
    (403, "FORBIDDEN"),
    (404, "NOT_FOUND"),
    (405, "METHOD_NOT_ALLOWED"),
    (406, "NOT_ACCEPTABLE"),
    (407, "PROXY_AUTHENTICATION_REQUIRED"),
    (408, "REQUEST_TIMEOUT"),
    (409, "CONFLICT"),
    (410, "GONE"),
    (411, "LENGTH_REQUIRED"),
    (412, "PRECONDITION_FAILED"),
    (413, "PAYLOAD_TOO_LARGE"),
    (414, "URI_TOO_LONG"),
    (415, "UNSUPPORTED_MEDIA_TYPE"),
    (416, "RANGE_NOT_SATISFIABLE"),
    (417, "EXPECTATION_FAILED"),
    (418, "IM_A_TEAPOT"),
    (421, "MISDIRECTED_REQUEST"),
    (422, "UNPROCESSABLE_ENTITY"),
    (423, "LOCKED"),
    (424, "FAILED_DEPENDENCY"),
    (426, "UPGRADE_REQUIRED"),
    (428, "PRECONDITION_REQUIRED"),
    (429, "TOO_MANY_REQUESTS"),
    (431, "REQUEST_HEADER_FIELDS_TOO_LARGE"),
    (451, "UNAVAILABLE_FOR_LEGAL_REASONS"),
    (500, "INTERNAL_SERVER_ERROR"),
    (501, "NOT_IMPLEMENTED"),
    (502, "BAD_GATEWAY"),
    (503, "SERVICE_UNAVAILABLE"),
    (504, "GATEWAY_TIMEOUT"),
    (505, "HTTP_VERSION_NOT_SUPPORTED"),
    (506, "VARIANT_ALSO_NEGOTIATES"),
    (507, "INSUFFICIENT_STORAGE"),
    (508, "LOOP_DETECTED"),
    (510, "NOT_EXTENDED"),
    (511, "NETWORK_AUTHENTICATION_REQUIRED"),
)

_INT_SUFFIXES = ("u8", "u16", "u32", "u64", "u128", "usize", "i8", "i16", "i32", "i64", "i128", "isize")


@functools.cache
def status_lookup() -> Mapping[str, int]:
    """Return the read-only symbolic-name -> code table, built on first use."""
    return MappingProxyType({name: code for code, name in STATUS_CODES})


def parse_int_literal(text: str, location: Location) -> int:
    digits = text.replace("_", "")
    for suffix in _INT_SUFFIXES:
        if digits.endswith(suffix):
            digits = digits[: -len(suffix)]
            break
    try:
        return int(digits, 0) if digits[:2].lower() in ("0x", "0o", "0b") else int(digits, 10)
    except ValueError:
        raise GrammarError(f"malformed integer literal `{text}`", location) from None


def parse_status(stream: TokenStream) -> str:
    """Parse one status literal from ``stream`` and return its canonical token."""
    tok = stream.peek()

    if tok.kind is TokKind.INT:
        stream.next()
        return str(parse_int_literal(tok.value, tok.location))

    if tok.kind is TokKind.STRING:
        stream.next()
        if tok.value not in VALID_STATUS_RANGES:
            raise ResolutionError(
                f"Invalid status range `{tok.value}`, expected one of: {', '.join(VALID_STATUS_RANGES)}",
                tok.location,
            )
        return tok.value

    if tok.kind is TokKind.IDENT:
        last = stream.next()
        while stream.peek_kind() is TokKind.PATHSEP:
            stream.next()
            last = stream.expect(TokKind.IDENT, "path segment")
        code = status_lookup().get(last.value)
        if code is None:
            raise ResolutionError(
                f"No associated item `{last.value}` found for struct `http::StatusCode`",
                last.location,
            )
        return str(code)

    raise GrammarError(f"expected integer literal, string literal or identifier, found {tok.describe()}", tok.location)


def resolve_status(text: str, origin: Location | None = None) -> str:
    """Resolve a standalone status literal such as ``200``, ``"5XX"`` or ``StatusCode::OK``."""
    from respdoc.core.parser import TokenStream

    stream = TokenStream(tokenize(text, origin))
    status = parse_status(stream)
    stream.expect_end()
    return status
