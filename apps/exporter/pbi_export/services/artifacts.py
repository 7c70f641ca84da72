"""Exported file persistence."""

from datetime import datetime
import logging
from pathlib import Path

from pbi_export.schemas.export import ExportFormat

logger = logging.getLogger(__name__)


def artifact_file_name(export_format: ExportFormat, *, now: datetime) -> str:
    return f"powerbi_export_{now:%Y%m%d_%H%M%S}.{export_format.file_extension}"


def save_artifact(
    content: bytes,
    *,
    output_dir: Path,
    export_format: ExportFormat,
    now: datetime | None = None,
) -> Path:
    """Write the export under ``output_dir`` and return its absolute path."""
    directory = Path(output_dir).resolve()
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / artifact_file_name(export_format, now=now or datetime.now())
    path.write_bytes(content)

    logger.info("artifact.saved path=%s size_bytes=%s", path, len(content))
    return path
