from respdoc.core.compile import CompiledResponse, compile_file, compile_responses, compile_source
from respdoc.core.declarations import extract_declarations, extract_declarations_from_file
from respdoc.core.emitter import emit_into_responses, emit_response, emit_responses, emit_to_response
from respdoc.core.parser import (
    parse_derive_into_responses_value,
    parse_derive_to_response_value,
    parse_response_tuple,
    parse_responses,
)
from respdoc.core.render import render_chain, responses_to_openapi, to_openapi
from respdoc.core.schema import RustTypeDescriber
from respdoc.core.status import resolve_status

__all__ = [
    "CompiledResponse",
    "RustTypeDescriber",
    "compile_file",
    "compile_responses",
    "compile_source",
    "emit_into_responses",
    "emit_response",
    "emit_responses",
    "emit_to_response",
    "extract_declarations",
    "extract_declarations_from_file",
    "parse_derive_into_responses_value",
    "parse_derive_to_response_value",
    "parse_response_tuple",
    "parse_responses",
    "render_chain",
    "resolve_status",
    "responses_to_openapi",
    "to_openapi",
]
