from __future__ import annotations

from typing import Any

from pydantic import BaseModel


# --- Requests ---


class WebSearchRequest(BaseModel):
    title: str | None = None
    urls: list[str] | None = None
    source: str = ""
    type: str | None = None


# --- Responses ---


class WebSearchResponse(BaseModel):
    data: Any


class HealthResponse(BaseModel):
    status: str
    service: str
