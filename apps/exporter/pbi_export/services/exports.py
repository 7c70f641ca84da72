"""Export orchestration service layer."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import contextlib
from dataclasses import dataclass
import logging
import time

import httpx
from pydantic import ValidationError
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from pbi_export.adapters.auth.base import TokenProvider
from pbi_export.adapters.powerbi.rest_client import PowerBIRestClient
from pbi_export.core.logging_safety import safe_log_identifier
from pbi_export.domain.export_fsm import is_terminal
from pbi_export.errors import (
    ExportCancelledError,
    ExportTimeoutError,
    JobFailedError,
    ProtocolError,
    RequestFailedError,
    TransportError,
)
from pbi_export.schemas.export import ExportRequest
from pbi_export.schemas.job import ExportJob, ExportStatus

logger = logging.getLogger(__name__)

_STATUS_RETRY_MAX_WAIT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class PollingPolicy:
    interval_seconds: float = 5.0
    max_wait_seconds: float = 600.0
    status_retry_attempts: int = 3
    status_retry_wait_seconds: float = 1.0


class ExportService:
    def __init__(
        self,
        *,
        rest_client: PowerBIRestClient,
        token_provider: TokenProvider,
        policy: PollingPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._rest = rest_client
        self._tokens = token_provider
        self._policy = policy or PollingPolicy()
        self._clock = clock
        self._sleep = sleep

    async def submit(self, request: ExportRequest) -> str:
        """Start an export job and return its id."""
        logger.info("export.submitting format=%s", request.format.value)
        response = await self._send("POST", "ExportTo", json_body=request.to_wire())

        job = self._decode_job(response.content, operation="submit")
        if not job.id:
            raise ProtocolError("export id not returned")

        logger.info(
            "export.submitted job_id=%s status=%s",
            safe_log_identifier(job.id, prefix="xid"),
            job.status.value,
        )
        return job.id

    async def get_status(self, job_id: str) -> ExportJob:
        """Fetch the job's current state, retrying only transport failures."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._policy.status_retry_attempts),
            wait=wait_exponential(
                multiplier=self._policy.status_retry_wait_seconds,
                max=_STATUS_RETRY_MAX_WAIT_SECONDS,
            ),
            retry=retry_if_exception_type(TransportError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._fetch_status(job_id)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _fetch_status(self, job_id: str) -> ExportJob:
        response = await self._send("GET", f"exports/{job_id}")
        job = self._decode_job(response.content, operation="status")

        logger.debug(
            "export.status job_id=%s status=%s percent_complete=%s",
            safe_log_identifier(job_id, prefix="xid"),
            job.status.value,
            job.percent_complete,
        )
        return job

    async def download(self, job_id: str) -> bytes:
        """Return the exported file bytes verbatim."""
        safe_job_id = safe_log_identifier(job_id, prefix="xid")
        logger.info("export.downloading job_id=%s", safe_job_id)

        response = await self._send("GET", f"exports/{job_id}/file")
        content = response.content

        logger.info("export.downloaded job_id=%s size_bytes=%s", safe_job_id, len(content))
        return content

    async def run(self, request: ExportRequest, *, cancel_event: asyncio.Event | None = None) -> bytes:
        """Submit, poll until terminal, and download the export.

        The first status check happens one full polling interval after
        submission. The wait budget is checked before every sleep, so total
        wall-clock time is bounded by roughly ``max_wait + interval``.
        """
        job_id = await self.submit(request)
        safe_job_id = safe_log_identifier(job_id, prefix="xid")
        started_at = self._clock()
        last_status = ExportStatus.NOT_STARTED

        while True:
            self._ensure_not_cancelled(job_id, cancel_event)

            elapsed = self._clock() - started_at
            if elapsed > self._policy.max_wait_seconds:
                logger.warning(
                    "export.timed_out job_id=%s elapsed_seconds=%.1f max_wait_seconds=%s",
                    safe_job_id,
                    elapsed,
                    self._policy.max_wait_seconds,
                )
                raise ExportTimeoutError(
                    job_id,
                    max_wait_seconds=self._policy.max_wait_seconds,
                    elapsed_seconds=elapsed,
                )

            await self._pause(cancel_event)
            self._ensure_not_cancelled(job_id, cancel_event)

            job = await self.get_status(job_id)
            last_status = job.status

            logger.info(
                "export.progress job_id=%s status=%s percent_complete=%s",
                safe_job_id,
                job.status.value,
                job.percent_complete,
            )
            if is_terminal(job.status):
                break

        if last_status is not ExportStatus.SUCCEEDED:
            logger.error("export.job_failed job_id=%s status=%s", safe_job_id, last_status.value)
            raise JobFailedError(job_id, last_status.value)

        return await self.download(job_id)

    async def _send(self, method: str, path: str, *, json_body: dict | None = None) -> httpx.Response:
        credential = await self._tokens.acquire()
        try:
            return await self._rest.send(method, path, credential=credential, json_body=json_body)
        except RequestFailedError as exc:
            # A rejected bearer token must not be served again from cache.
            if exc.status_code == 401:
                self._tokens.invalidate()
            raise

    async def _pause(self, cancel_event: asyncio.Event | None) -> None:
        interval = self._policy.interval_seconds
        if cancel_event is None:
            await self._sleep(interval)
            return

        # Wakes early once cancellation is signalled.
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(cancel_event.wait(), timeout=interval)

    @staticmethod
    def _ensure_not_cancelled(job_id: str, cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("export.cancelled job_id=%s", safe_log_identifier(job_id, prefix="xid"))
            raise ExportCancelledError(job_id)

    @staticmethod
    def _decode_job(content: bytes, *, operation: str) -> ExportJob:
        try:
            return ExportJob.model_validate_json(content)
        except ValidationError as exc:
            raise ProtocolError(f"Unexpected {operation} response: {exc.errors()[0]['msg']}") from exc


__all__ = ["ExportService", "PollingPolicy"]
