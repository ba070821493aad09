"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from respdoc.core.declarations import extract_declarations
from respdoc.core.schema import RustTypeDescriber
from respdoc.models import Declaration

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Sample sources
# ---------------------------------------------------------------------------

USER_SOURCE = '''
use serde::Serialize;

#[derive(Serialize, ToSchema)]
struct User {
    id: u64,
    name: String,
}

/// Success response
#[derive(ToResponse)]
#[response(description = "Person response returns single Person entity")]
struct PersonResponse {
    /// Name of the person
    name: String,
    age: Option<u32>,
}

#[derive(ToResponse)]
struct Greeting(String);

#[derive(ToResponse)]
struct Gone;

#[derive(IntoResponses)]
enum UserResponses {
    /// Success response
    #[response(status = 200)]
    Success { value: String },

    #[response(status = 404)]
    NotFound,

    #[response(status = StatusCode::BAD_REQUEST)]
    BadRequest(#[to_schema] User),
}
'''

CONTENT_ENUM_SOURCE = '''
#[derive(ToSchema)]
struct Admin { name: String }

#[derive(ToSchema)]
struct Moderator { id: u32 }

#[derive(ToResponse)]
enum PersonResponse {
    #[response(example = json!({"name": "the admin"}))]
    Admin(#[content("application/vnd-custom-v1+json")] Admin),
    Moderator(#[content("application/vnd-custom-v2+json")] Moderator),
}
'''


@pytest.fixture
def rust_parser() -> Parser:
    """Return a tree-sitter parser for Rust."""
    return get_parser("rust")


@pytest.fixture
def user_source() -> str:
    return USER_SOURCE


@pytest.fixture
def content_enum_source() -> str:
    return CONTENT_ENUM_SOURCE


@pytest.fixture
def user_declarations() -> dict[str, Declaration]:
    return {d.name: d for d in extract_declarations(USER_SOURCE.encode())}


@pytest.fixture
def describer(user_declarations: dict[str, Declaration]) -> RustTypeDescriber:
    return RustTypeDescriber(user_declarations.values())
