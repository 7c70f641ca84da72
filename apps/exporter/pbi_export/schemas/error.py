"""Power BI REST error payload schemas."""

from pydantic import BaseModel, ConfigDict


class ErrorDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str = ""
    message: str = ""


class ErrorBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str = ""
    message: str = ""
    details: list[ErrorDetail] | None = None


class ErrorEnvelope(BaseModel):
    """Wire shape ``{"error": {"code", "message", "details"}}``."""

    model_config = ConfigDict(extra="ignore")

    error: ErrorBody
