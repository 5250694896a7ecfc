from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WatchlistAddRequest(BaseModel):
    """Body of POST /api/v1/watchlist."""

    ticker: str = Field(min_length=1, max_length=16)

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    @field_validator("ticker")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()
