from pathlib import Path

import pytest

from respdoc.routes import derive_path, handler_verbs, list_handler_modules


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def routes_dir(tmp_path: Path) -> Path:
    root = tmp_path / "routes"
    _write(root / "mod.rs", "pub mod users;\npub async fn get() {}\n")
    _write(root / "users" / "mod.rs", "pub mod _id;\n")
    _write(root / "users" / "_id.rs", "pub async fn put() {}\npub async fn get() {}\n")
    _write(root / "health.rs", "pub async fn get() {}\n")
    _write(root / "util.rs", "fn helper() {}\n")
    return root


def test_handler_verbs_use_fixed_order() -> None:
    assert handler_verbs("async fn put() {} async fn delete() {} async fn get() {}") == ["get", "delete", "put"]


def test_list_handler_modules_skips_module_roots(routes_dir: Path) -> None:
    assert list_handler_modules(routes_dir) == [
        "routes::health::get",
        "routes::users::_id::get",
        "routes::users::_id::put",
    ]


def test_list_handler_modules_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        list_handler_modules(tmp_path / "nope")


@pytest.mark.parametrize(
    ("file_path", "expected"),
    [
        ("src/routes/users/_id.rs", "/users/{id}"),
        ("src/routes/users/_id/posts.rs", "/users/{id}/posts"),
        ("src/routes/health.rs", "/health"),
        ("src/routes/orgs/_org/members/_member.rs", "/orgs/{org}/members/{member}"),
    ],
)
def test_derive_path(file_path: str, expected: str) -> None:
    assert derive_path(file_path) == expected


def test_derive_path_custom_source_root() -> None:
    assert derive_path("app/handlers/_slug.rs", source_root="app/handlers") == "/{slug}"
