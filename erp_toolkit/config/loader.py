from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from ..models.config_models import ApiConfig, AppConfig, ImportSettings, PdfConfig

"""Config loader.

Responsibilities:
- Load YAML config (config/erp.yml by default)
- Validate against erp_toolkit/contracts/config_schema.json
- Apply defaults for omitted sections/keys
- Apply environment overrides (ERP_API_BASE_URL, ERP_API_TOKEN), .env included

Resolution order for API settings (highest first):
    1. environment variables (a .env file is loaded into the environment first)
    2. the ``api`` section of the YAML file
    3. built-in defaults
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "default_config",
    "load_env_file",
]

DEFAULT_CONFIG_PATH = Path("config/erp.yml")
SCHEMA_PATH = Path(__file__).resolve().parent.parent / "contracts" / "config_schema.json"

ENV_BASE_URL = "ERP_API_BASE_URL"
ENV_TOKEN = "ERP_API_TOKEN"


class ConfigError(Exception):
    pass


def load_env_file(path: Path = Path(".env"), override: bool = True) -> bool:
    """Load a .env file into os.environ. Returns False when absent."""
    if not path.exists():
        return False
    return load_dotenv(dotenv_path=path, override=override)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the shipped JSON schema.

    Raises:
        ConfigError: schema file missing/invalid or data failing validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_config(data: dict[str, Any]) -> AppConfig:
    api_raw = data.get("api") or {}
    pdf_raw = data.get("pdf") or {}
    import_raw = data.get("import") or {}

    api_defaults = ApiConfig()
    api = ApiConfig(
        base_url=os.getenv(ENV_BASE_URL) or api_raw.get("base_url"),
        token=os.getenv(ENV_TOKEN) or None,
        timeout_seconds=float(api_raw.get("timeout_seconds", api_defaults.timeout_seconds)),
    )

    pdf_defaults = PdfConfig()
    pdf = PdfConfig(
        scale=pdf_raw.get("scale", pdf_defaults.scale),
        max_pages=pdf_raw.get("max_pages", pdf_defaults.max_pages),
        background=pdf_raw.get("background", pdf_defaults.background),
        jpeg_quality=pdf_raw.get("jpeg_quality", pdf_defaults.jpeg_quality),
    )

    import_settings = ImportSettings(
        allow_unknown_columns=bool(import_raw.get("allow_unknown_columns", False)),
    )
    return AppConfig(api=api, pdf=pdf, import_settings=import_settings)


def default_config() -> AppConfig:
    """Built-in defaults with environment overrides applied."""
    return _build_config({})


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return _build_config(data)
