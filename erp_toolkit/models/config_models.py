from __future__ import annotations

from dataclasses import dataclass, field

from .pdf_export import DEFAULT_BACKGROUND

"""Config dataclasses for erp-toolkit.

These are the typed form of config/erp.yml after schema validation and
environment overrides (see erp_toolkit/config/loader.py).
"""

__all__ = [
    "ApiConfig",
    "PdfConfig",
    "ImportSettings",
    "AppConfig",
]


@dataclass(frozen=True)
class ApiConfig:
    """REST backend connection settings.

    ERP_API_BASE_URL / ERP_API_TOKEN take precedence over the file.
    """
    base_url: str | None = None
    token: str | None = None  # never read from the YAML file, env only
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class PdfConfig:
    scale: float = 2
    max_pages: int = 10
    background: str = DEFAULT_BACKGROUND
    jpeg_quality: int = 95


@dataclass(frozen=True)
class ImportSettings:
    # headers outside the canonical nine are rejected unless this is set
    allow_unknown_columns: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    api: ApiConfig = field(default_factory=ApiConfig)
    pdf: PdfConfig = field(default_factory=PdfConfig)
    import_settings: ImportSettings = field(default_factory=ImportSettings)
