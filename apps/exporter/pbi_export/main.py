"""Console entrypoint: export a Power BI report to a file."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
from pathlib import Path
import signal
import sys

from pbi_export.core.config import Settings, get_settings, validate_settings
from pbi_export.core.logging_safety import configure_logging, safe_log_identifier
from pbi_export.dependencies import (
    build_export_request,
    get_export_service,
    get_http_client,
    get_token_provider,
)
from pbi_export.errors import ExportError
from pbi_export.schemas.export import ExportRequest
from pbi_export.services.artifacts import save_artifact

logger = logging.getLogger("pbi_export")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pbi-export",
        description="Export a Power BI report through the ExportTo API. Settings come from PBI_EXPORT_* variables.",
    )
    parser.add_argument("--format", dest="export_format", help="PDF, PPTX or PNG (case-insensitive).")
    parser.add_argument("--output-dir", dest="output_directory", type=Path, help="Directory for the exported file.")
    parser.add_argument(
        "--report-config",
        dest="report_configuration_file",
        type=Path,
        help="JSON file holding a powerBIReportConfiguration object.",
    )
    parser.add_argument("--log-level", dest="log_level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    if not overrides:
        return settings
    return settings.model_copy(update=overrides)


async def export_report(settings: Settings, request: ExportRequest) -> bytes:
    token_provider = get_token_provider(settings)
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    # Signal handlers need the main thread and a Unix event loop.
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)

    try:
        async with get_http_client(settings) as http_client:
            service = get_export_service(settings, http_client=http_client, token_provider=token_provider)
            return await service.run(request, cancel_event=cancel_event)
    finally:
        await token_provider.close()
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    configure_logging(settings.log_level)
    logger.info("Starting Power BI export")

    try:
        validate_settings(settings)
        request = build_export_request(settings)
        logger.info(
            "export.requested report_id=%s group_id=%s format=%s",
            safe_log_identifier(settings.report_id, prefix="rid"),
            safe_log_identifier(settings.group_id, prefix="gid"),
            request.format.value,
        )
        content = asyncio.run(export_report(settings, request))
        path = save_artifact(content, output_dir=settings.output_directory, export_format=request.format)
    except ExportError as exc:
        logger.error("export.aborted reason=%s message=%s", type(exc).__name__, exc)
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.exception("export.terminated_unexpectedly reason=%s", type(exc).__name__)
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1

    print("Export completed successfully!")
    print(f"File saved as: {path}")
    print(f"File size: {len(content):,} bytes")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
