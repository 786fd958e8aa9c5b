"""Pydantic models describing the Marketing Cloud token payload."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MarketingCloudBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TokenRequest(MarketingCloudBaseModel):
    grant_type: str = "client_credentials"
    client_id: str
    client_secret: str
    account_id: str | None = None


class TokenResponse(MarketingCloudBaseModel):
    access_token: str = Field(min_length=1)
    token_type: str | None = None
    expires_in: int | None = None
    soap_instance_url: str | None = None
    rest_instance_url: str | None = None

    @field_validator("access_token", mode="before")
    @classmethod
    def _strip_token(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value
