"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """Bearer token issued by the identity platform."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1, repr=False)
    expires_on: int

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.token}"
