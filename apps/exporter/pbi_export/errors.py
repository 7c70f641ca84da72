"""Exporter exception types."""

from __future__ import annotations

from pbi_export.schemas.error import ErrorDetail


class ExportError(Exception):
    """Base class for every failure raised by the export workflow."""


class ConfigurationError(ExportError):
    """Raised when settings cannot drive an export run."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        message = "Configuration validation failed:\n" + "\n".join(f"  - {problem}" for problem in self.problems)
        super().__init__(message)


class AuthenticationError(ExportError):
    """Identity provider rejected the client-credentials exchange."""


class RequestFailedError(ExportError):
    """Remote API answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: str | None = None,
        details: list[ErrorDetail] | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = list(details or [])
        super().__init__(message)


class ProtocolError(ExportError):
    """A successful response did not match the expected schema."""


class TransportError(ExportError):
    """The remote host could not be reached."""


class ExportTimeoutError(ExportError, TimeoutError):
    """Polling exceeded the configured maximum wait time."""

    def __init__(self, job_id: str, *, max_wait_seconds: float, elapsed_seconds: float) -> None:
        self.job_id = job_id
        self.max_wait_seconds = max_wait_seconds
        self.elapsed_seconds = elapsed_seconds
        super().__init__(f"Export {job_id} did not complete within {max_wait_seconds:g} seconds")


class JobFailedError(ExportError):
    """The export job reached a terminal status other than Succeeded."""

    def __init__(self, job_id: str, status: str) -> None:
        self.job_id = job_id
        self.status = status
        super().__init__(f"Export {job_id} failed with status: {status}")


class ExportCancelledError(ExportError):
    """Polling was aborted by an external cancellation signal."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Export {job_id} was cancelled while polling")


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ExportCancelledError",
    "ExportError",
    "ExportTimeoutError",
    "JobFailedError",
    "ProtocolError",
    "RequestFailedError",
    "TransportError",
]
