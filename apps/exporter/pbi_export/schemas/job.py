"""Export job schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ExportStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @classmethod
    def from_wire(cls, value: Any) -> ExportStatus:
        """Match a wire status case-insensitively against the closed status set."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"unrecognized export status {value!r}")


class ExportJob(BaseModel):
    """Export job as returned by the ExportTo and status endpoints."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    id: str = ""
    created_date_time: datetime | None = None
    last_action_date_time: datetime | None = None
    report_id: str | None = None
    report_name: str | None = None
    status: ExportStatus = ExportStatus.NOT_STARTED
    percent_complete: int = 0
    resource_location: str | None = None
    expiration_time: datetime | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> ExportStatus:
        return ExportStatus.from_wire(value)
