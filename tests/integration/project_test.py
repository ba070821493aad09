"""End-to-end run over a small file-routed project on disk."""

from pathlib import Path

from respdoc.core.compile import compile_file
from respdoc.core.render import render_chain
from respdoc.routes import derive_path, list_handler_modules

_HANDLER = '''
use utoipa::{IntoResponses, ToResponse};

/// A single user
#[derive(ToResponse)]
#[response(description = "The user", content_type = "application/json")]
struct UserBody {
    id: u64,
}

#[derive(IntoResponses)]
enum GetUser {
    #[response(status = StatusCode::OK)]
    Found(#[to_response] UserBody),

    /// No such user
    #[response(status = 404, headers(("x-request-id" = String)))]
    Missing,
}

pub async fn get() {}
'''


def test_routes_and_responses_of_a_project(tmp_path: Path) -> None:
    routes = tmp_path / "src" / "routes"
    handler = routes / "users" / "_id.rs"
    handler.parent.mkdir(parents=True)
    handler.write_text(_HANDLER, encoding="utf-8")
    (routes / "users" / "mod.rs").write_text("pub mod _id;\n", encoding="utf-8")

    assert list_handler_modules(routes) == ["routes::users::_id::get"]
    assert derive_path(handler.relative_to(tmp_path)) == "/users/{id}"

    body, get_user = compile_file(handler)

    assert body.openapi == {
        "description": "The user",
        "content": {
            "application/json": {
                "schema": {"type": "object", "description": "A single user", "required": ["id"], "properties": {"id": {"type": "integer", "format": "int64"}}}
            }
        },
    }
    assert get_user.openapi == {
        "200": body.openapi,
        "404": {"description": "No such user", "headers": {"x-request-id": {"schema": {"type": "string"}}}},
    }
    assert render_chain(get_user.chain, "ResponsesBuilder").startswith(
        'ResponsesBuilder::new().response("200", <UserBody as ToResponse>::response().1)'
    )
