from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from erp_toolkit.api.client import ApiError, RateGuideClient
from erp_toolkit.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    default_config,
    load_config,
    load_env_file,
)
from erp_toolkit.excel.rate_guide_export import export_rate_guides_to_csv, export_rate_guides_to_xlsx
from erp_toolkit.excel.rate_guide_parser import (
    TEMPLATE_FILENAME,
    parse_rate_guide_file,
    write_rate_guide_template,
)
from erp_toolkit.logging.error_log import ErrorLogBuffer, records_from_result
from erp_toolkit.logging.init import log_summary, set_debug, setup_logging
from erp_toolkit.models.config_models import AppConfig
from erp_toolkit.models.parsed_row import ParseResult
from erp_toolkit.models.pdf_export import PdfExportOptions
from erp_toolkit.pdf.exporter import export_to_pdf
from erp_toolkit.pdf.rasterizer import PlaywrightRasterizer, RasterizationError
from erp_toolkit.services.rate_guide_lookup import find_matching_rate_guide
from erp_toolkit.services.summary import render_export_summary, render_import_summary, render_pdf_summary

"""CLI entrypoint.

Subcommands:
- preview FILE     parse + validate a rate guide upload, nothing is sent
- template         write the reference spreadsheet
- import FILE      parse, validate, then bulk-replace via the API
- export FORMAT    download rate guides from the API as xlsx/csv
- lookup           find the rate guide band for a tenor and amount
- pdf SOURCE       render an HTML page to a paginated A4 PDF

Exit codes: 0 success, 2 row errors / truncated PDF, 1 fatal.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="erp-toolkit", description="ERP rate guide import and PDF export tools")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    sub = p.add_subparsers(dest="command", required=True)

    preview = sub.add_parser("preview", help="Validate a rate guide file without importing it")
    preview.add_argument("file", type=Path)
    preview.add_argument("--error-log", action="store_true", help="Write errors to logs/ as JSON Lines")

    template = sub.add_parser("template", help="Write the rate guide template spreadsheet")
    template.add_argument("-o", "--output", type=Path, default=Path(TEMPLATE_FILENAME))

    imp = sub.add_parser("import", help="Replace all rate guides with the rows of FILE")
    imp.add_argument("file", type=Path)
    imp.add_argument("--error-log", action="store_true", help="Write errors to logs/ as JSON Lines")

    export = sub.add_parser("export", help="Download rate guides as a spreadsheet")
    export.add_argument("format", choices=["xlsx", "csv"])
    export.add_argument("-o", "--output", type=Path, default=None)

    lookup = sub.add_parser("lookup", help="Find the rate guide band for a tenor and amount")
    lookup.add_argument("--tenor", type=int, required=True, help="Tenor in days")
    lookup.add_argument("--amount", type=float, required=True)

    pdf = sub.add_parser("pdf", help="Export an HTML page to PDF without splitting sections")
    pdf.add_argument("source", type=Path, help="HTML file")
    pdf.add_argument("-o", "--output", type=Path, required=True)
    pdf.add_argument("--selector", default="body", help="CSS selector of the element to export")
    pdf.add_argument("--scale", type=float, default=None)
    pdf.add_argument("--max-pages", type=int, default=None)
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _parse_file(logger: logging.Logger, cfg: AppConfig, file: Path, error_log: bool) -> ParseResult:
    result = parse_rate_guide_file(file, allow_unknown_columns=cfg.import_settings.allow_unknown_columns)
    for row in result.rows:
        if row.errors:
            logger.warning(f"row {row.row_number}: {' | '.join(row.errors)}")
        else:
            logger.debug(f"row {row.row_number}: {row.data.to_api()}")
    if error_log:
        records = records_from_result(file.name, result)
        if records:
            buf = ErrorLogBuffer()
            buf.extend(records)
            logger.info(f"error log: {buf.flush()}")
    return result


def _cmd_preview(logger: logging.Logger, cfg: AppConfig, args: argparse.Namespace) -> int:
    start = time.perf_counter()
    result = _parse_file(logger, cfg, args.file, args.error_log)
    if result.parse_error:
        logger.error(result.parse_error)
    log_summary(render_import_summary(args.file.name, result, time.perf_counter() - start)[8:])
    if not result.ok:
        return EXIT_FATAL
    return EXIT_PARTIAL if result.has_row_errors else EXIT_SUCCESS


def _cmd_template(logger: logging.Logger, cfg: AppConfig, args: argparse.Namespace) -> int:
    path = write_rate_guide_template(args.output)
    logger.info(f"template: {path}")
    return EXIT_SUCCESS


def _cmd_import(logger: logging.Logger, cfg: AppConfig, args: argparse.Namespace) -> int:
    start = time.perf_counter()
    result = _parse_file(logger, cfg, args.file, args.error_log)
    code = EXIT_SUCCESS
    if result.parse_error:
        logger.error(result.parse_error)
        code = EXIT_FATAL
    elif not result.rows:
        logger.error("no rows to import")
        code = EXIT_FATAL
    elif result.has_row_errors:
        logger.error(f"{len(result.error_rows)} row(s) have validation errors; nothing was imported")
        code = EXIT_PARTIAL
    else:
        try:
            client = RateGuideClient.from_config(cfg.api)
            inserted = client.bulk_replace(result.rows)
        except ApiError as e:
            logger.error(f"api: {e}")
            code = EXIT_FATAL
        else:
            logger.info(f"replaced rate guide with {inserted} entries")
    log_summary(render_import_summary(args.file.name, result, time.perf_counter() - start)[8:])
    return code


def _cmd_export(logger: logging.Logger, cfg: AppConfig, args: argparse.Namespace) -> int:
    output = args.output or Path(f"rate-guide.{args.format}")
    start = time.perf_counter()
    try:
        guides = RateGuideClient.from_config(cfg.api).list_rate_guides()
    except ApiError as e:
        logger.error(f"api: {e}")
        return EXIT_FATAL
    if args.format == "xlsx":
        export_rate_guides_to_xlsx(guides, output)
    else:
        export_rate_guides_to_csv(guides, output)
    log_summary(render_export_summary(output, len(guides), time.perf_counter() - start)[8:])
    return EXIT_SUCCESS


def _cmd_lookup(logger: logging.Logger, cfg: AppConfig, args: argparse.Namespace) -> int:
    try:
        guides = RateGuideClient.from_config(cfg.api).list_rate_guides()
    except ApiError as e:
        logger.error(f"api: {e}")
        return EXIT_FATAL
    match = find_matching_rate_guide(guides, args.tenor, args.amount)
    if match is None:
        logger.error(f"no rate guide for tenor={args.tenor} amount={args.amount:,.2f}")
        return EXIT_FATAL
    p = match.payload
    logger.info(
        f"rate guide {match.id}: indicative_rate={p.indicative_rate}% minimum_spread={p.minimum_spread}% "
        f"ethica/customer={p.ethica_ratio}/{p.customer_ratio} "
        f"at_ethica/at_customer={p.above_target_ethica_ratio}/{p.above_target_customer_ratio}"
    )
    return EXIT_SUCCESS


def _cmd_pdf(logger: logging.Logger, cfg: AppConfig, args: argparse.Namespace) -> int:
    if not args.source.exists():
        logger.error(f"source not found: {args.source}")
        return EXIT_FATAL
    options = PdfExportOptions(
        filename=args.output,
        scale=args.scale if args.scale is not None else cfg.pdf.scale,
        max_pages=args.max_pages if args.max_pages is not None else cfg.pdf.max_pages,
        background=cfg.pdf.background,
        jpeg_quality=cfg.pdf.jpeg_quality,
    )
    start = time.perf_counter()
    try:
        result = export_to_pdf(args.source, options, rasterizer=PlaywrightRasterizer(selector=args.selector))
    except RasterizationError as e:
        logger.error(f"pdf: {e}")
        return EXIT_FATAL
    log_summary(render_pdf_summary(result, time.perf_counter() - start)[8:])
    return EXIT_PARTIAL if result.truncated else EXIT_SUCCESS


_COMMANDS = {
    "preview": _cmd_preview,
    "template": _cmd_template,
    "import": _cmd_import,
    "export": _cmd_export,
    "lookup": _cmd_lookup,
    "pdf": _cmd_pdf,
}


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # an explicit [] (tests) must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    load_env_file(Path(".env"), override=True)
    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    return _COMMANDS[args.command](logger, cfg, args)
