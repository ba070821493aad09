import os
from dataclasses import dataclass
from enum import Enum


class OutputFormat(str, Enum):
    builder = "builder"
    openapi = "openapi"


@dataclass(frozen=True)
class Settings:
    routes_dir: str
    log_level: str
    output_format: OutputFormat


def get_settings() -> Settings:
    raw_format = os.getenv("RESPDOC_OUTPUT_FORMAT", "builder").lower()
    try:
        output_format = OutputFormat(raw_format)
    except ValueError:
        choices = ", ".join(f.value for f in OutputFormat)
        raise ValueError(f"RESPDOC_OUTPUT_FORMAT must be one of {choices}, got {raw_format!r}") from None
    return Settings(
        routes_dir=os.getenv("RESPDOC_ROUTES_DIR", "src/routes"),
        log_level=os.getenv("RESPDOC_LOG_LEVEL", "WARNING").upper(),
        output_format=output_format,
    )
