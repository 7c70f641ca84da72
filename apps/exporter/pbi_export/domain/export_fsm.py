"""Export job lifecycle rules as observed by polling."""

from pbi_export.schemas.job import ExportStatus

# Transitions are driven by the remote service; polling only stops on these.
_TERMINAL_STATES: set[ExportStatus] = {
    ExportStatus.SUCCEEDED,
    ExportStatus.FAILED,
}


def is_terminal(status: ExportStatus) -> bool:
    return status in _TERMINAL_STATES
