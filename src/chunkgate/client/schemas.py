"""Pydantic schemas for gateway request/response bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# === Upload schemas ===


class UploadResponse(BaseModel):
    """Body returned by the chunk upload endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    code: int
    message: str = ""
    file_index: int = Field(default=0, alias="fileIndex")
    id: str | None = None

    @property
    def final_id(self) -> str:
        """Remote identifier, empty until the gateway assigns one."""
        return self.id or ""


# === Token schemas ===


class TokenRequest(BaseModel):
    """Request body for token issuance."""

    model_config = ConfigDict(populate_by_name=True)

    account: str
    api_key: str = Field(alias="apiKey")
    expire_time: int = Field(alias="expireTime")


class TokenResponse(BaseModel):
    """Response body for token issuance."""

    code: int
    message: str = ""
    data: str | None = None
