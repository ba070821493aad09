"""Compile Rust sources and ``responses(...)`` lists into instruction chains and OpenAPI objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from respdoc.core.declarations import extract_declarations
from respdoc.core.emitter import emit_into_responses, emit_responses, emit_to_response
from respdoc.core.parser import parse_responses
from respdoc.core.render import responses_to_openapi, to_openapi
from respdoc.core.schema import RustTypeDescriber
from respdoc.errors import ResolutionError
from respdoc.models import Chain, Declaration

logger = logging.getLogger(__name__)

Derive = Literal["ToResponse", "IntoResponses", "responses"]

TO_RESPONSE = "ToResponse"
INTO_RESPONSES = "IntoResponses"


@dataclass(frozen=True)
class CompiledResponse:
    name: str
    derive: Derive
    chain: Chain
    openapi: dict[str, Any]


class _Compiler:
    """Compile the declarations of one source, resolving inline references between them."""

    def __init__(self, declarations: list[Declaration]) -> None:
        self.describer = RustTypeDescriber(declarations)
        self._to_response = {d.name: d for d in declarations if TO_RESPONSE in d.derives}
        self._into_responses = {d.name: d for d in declarations if INTO_RESPONSES in d.derives}
        self._responses: dict[str, dict[str, Any]] = {}
        self._in_progress: set[str] = set()

    def to_response(self, declaration: Declaration) -> CompiledResponse:
        name, chain = emit_to_response(declaration, self.describer)
        return CompiledResponse(name, TO_RESPONSE, chain, to_openapi(chain, self.resolve))

    def into_responses(self, declaration: Declaration) -> CompiledResponse:
        chain = emit_into_responses(declaration, self.describer)
        openapi = responses_to_openapi(chain, self.resolve, self.expand)
        return CompiledResponse(declaration.name, INTO_RESPONSES, chain, openapi)

    def resolve(self, name: str) -> dict[str, Any]:
        if name in self._responses:
            return self._responses[name]
        declaration = self._to_response.get(name)
        if declaration is None:
            raise ResolutionError(f"cannot inline response `{name}`: no `ToResponse` type of that name in this source")
        if name in self._in_progress:
            raise ResolutionError(f"cannot inline response `{name}`: it inlines itself")
        self._in_progress.add(name)
        try:
            self._responses[name] = self.to_response(declaration).openapi
        finally:
            self._in_progress.discard(name)
        return self._responses[name]

    def expand(self, path: str) -> dict[str, Any]:
        name = path.rsplit("::", 1)[-1]
        declaration = self._into_responses.get(name)
        if declaration is None:
            raise ResolutionError(f"cannot expand responses of `{path}`: no `IntoResponses` type of that name in this source")
        return self.into_responses(declaration).openapi


def compile_source(source: str | bytes, type_name: str | None = None) -> list[CompiledResponse]:
    """Compile every ``ToResponse``/``IntoResponses`` declaration in ``source``.

    With ``type_name`` only that declaration is compiled. The first error aborts the whole compile.
    """
    if isinstance(source, str):
        source = source.encode()
    declarations = extract_declarations(source)
    compiler = _Compiler(declarations)

    targets = [d for d in declarations if TO_RESPONSE in d.derives or INTO_RESPONSES in d.derives]
    if type_name is not None:
        targets = [d for d in targets if d.name == type_name]
        if not targets:
            raise ResolutionError(f"no type `{type_name}` deriving `ToResponse` or `IntoResponses` found")

    compiled: list[CompiledResponse] = []
    for declaration in targets:
        logger.debug("Compiling %s (%s)", declaration.name, ", ".join(declaration.derives))
        if TO_RESPONSE in declaration.derives:
            compiled.append(compiler.to_response(declaration))
        if INTO_RESPONSES in declaration.derives:
            compiled.append(compiler.into_responses(declaration))
    logger.info("Compiled %d response(s)", len(compiled))
    return compiled


def compile_file(path: str | Path, type_name: str | None = None) -> list[CompiledResponse]:
    file_path = Path(path)
    try:
        source = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None
    logger.info("Compiling %s", file_path)
    return compile_source(source, type_name)


def compile_responses(text: str, source: str | bytes | None = None) -> CompiledResponse:
    """Compile an operation-level ``responses(...)`` list.

    ``source`` optionally supplies the Rust declarations that ``inline(...)``
    references and ``IntoResponses`` entries resolve against.
    """
    if isinstance(source, str):
        source = source.encode()
    compiler = _Compiler(extract_declarations(source) if source else [])
    entries = parse_responses(text)
    logger.debug("Parsed %d responses entr(ies)", len(entries))
    chain = emit_responses(entries, compiler.describer)
    return CompiledResponse("responses", "responses", chain, responses_to_openapi(chain, compiler.resolve, compiler.expand))
