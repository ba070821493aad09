import pytest

from respdoc.config import OutputFormat, get_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RESPDOC_ROUTES_DIR", "RESPDOC_LOG_LEVEL", "RESPDOC_OUTPUT_FORMAT"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.routes_dir == "src/routes"
    assert settings.log_level == "WARNING"
    assert settings.output_format is OutputFormat.builder


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESPDOC_ROUTES_DIR", "app/routes")
    monkeypatch.setenv("RESPDOC_LOG_LEVEL", "debug")
    monkeypatch.setenv("RESPDOC_OUTPUT_FORMAT", "OpenAPI")

    settings = get_settings()

    assert settings.routes_dir == "app/routes"
    assert settings.log_level == "DEBUG"
    assert settings.output_format is OutputFormat.openapi


def test_unknown_output_format_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESPDOC_OUTPUT_FORMAT", "yaml")
    with pytest.raises(ValueError, match="RESPDOC_OUTPUT_FORMAT must be one of builder, openapi"):
        get_settings()
