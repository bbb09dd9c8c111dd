"""URL-keyed summary cache backed by PostgreSQL (asyncpg) or process memory."""

from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Protocol

import asyncpg

from pagedigest.config import Settings
from pagedigest.llm_client import normalize_envelope
from pagedigest.models.content import SummaryRecord
from pagedigest.models.failures import CacheError
from pagedigest.services.logger import log_db_operation

TABLE = "url_summaries"

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id BIGSERIAL PRIMARY KEY,
    url TEXT NOT NULL UNIQUE,
    summary JSONB NOT NULL,
    word_count INTEGER NOT NULL CHECK (word_count >= 0),
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class SummaryStore(Protocol):
    async def lookup(self, url: str) -> SummaryRecord | None: ...
    async def store(self, record: SummaryRecord) -> None: ...
    async def close(self) -> None: ...


def _coerce_json_object(value: Any) -> dict[str, Any]:
    """Normalize JSON-string columns into dictionaries."""
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def record_from_row(row: Any) -> SummaryRecord:
    """Rebuild a SummaryRecord from a stored row, re-normalizing the provider blob."""
    envelope = _coerce_json_object(row["summary"])
    completion = normalize_envelope(envelope)
    return SummaryRecord(
        url=row["url"],
        summary_text=completion.text,
        model_id=completion.model,
        token_usage=completion.usage,
        word_count=int(row["word_count"]),
        summary_id=completion.completion_id,
        envelope=envelope,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresSummaryStore:
    """Summary cache in PostgreSQL; ``store`` is an upsert keyed by URL."""

    def __init__(self, database_url: str, *, min_size: int = 1, max_size: int = 10):
        self.database_url = database_url
        self.min_size = min_size
        self.max_size = max_size
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool
        async with self._pool_lock:
            if self._pool is None:
                pool = None
                try:
                    pool = await asyncpg.create_pool(
                        self.database_url,
                        min_size=self.min_size,
                        max_size=self.max_size,
                    )
                    async with pool.acquire() as conn:
                        await conn.execute(SCHEMA_SQL)
                except DB_ERRORS as exc:
                    log_db_operation("connect", TABLE, "failed", error=str(exc))
                    if pool is not None:
                        await pool.close()
                    raise CacheError(f"summary store unreachable: {exc}") from exc
                self._pool = pool
        return self._pool

    async def lookup(self, url: str) -> SummaryRecord | None:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT url, summary, word_count, created_at, updated_at
                    FROM {TABLE}
                    WHERE url = $1
                    """,
                    url,
                )
        except DB_ERRORS as exc:
            log_db_operation("select", TABLE, "failed", details=url, error=str(exc))
            raise CacheError(f"summary lookup failed: {exc}") from exc

        if row is None:
            log_db_operation("select", TABLE, "miss", details=url)
            return None
        try:
            record = record_from_row(row)
        except (ValueError, TypeError, KeyError) as exc:
            log_db_operation("select", TABLE, "failed", details=url, error=str(exc))
            raise CacheError(f"stored summary unreadable: {exc}") from exc
        log_db_operation("select", TABLE, "hit", details=url)
        return record

    async def store(self, record: SummaryRecord) -> None:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO {TABLE} (url, summary, word_count)
                    VALUES ($1, $2::jsonb, $3)
                    ON CONFLICT (url) DO UPDATE
                    SET summary = EXCLUDED.summary,
                        word_count = EXCLUDED.word_count,
                        updated_at = now()
                    """,
                    record.url,
                    json.dumps(record.envelope),
                    record.word_count,
                )
        except DB_ERRORS as exc:
            log_db_operation("upsert", TABLE, "failed", details=record.url, error=str(exc))
            raise CacheError(f"summary store failed: {exc}") from exc
        log_db_operation("upsert", TABLE, "success", details=record.url)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None


class InMemorySummaryStore:
    """Process-local summary cache, used when no DATABASE_URL is configured."""

    def __init__(self) -> None:
        self._records: dict[str, SummaryRecord] = {}

    async def lookup(self, url: str) -> SummaryRecord | None:
        record = self._records.get(url)
        return replace(record) if record is not None else None

    async def store(self, record: SummaryRecord) -> None:
        existing = self._records.get(record.url)
        if existing is not None:
            record = replace(
                record,
                created_at=existing.created_at,
                updated_at=datetime.now(timezone.utc),
            )
        self._records[record.url] = replace(record)

    async def close(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, url: object) -> bool:
        return url in self._records


def build_summary_store(settings: Settings) -> SummaryStore:
    if settings.database_url.strip():
        return PostgresSummaryStore(settings.database_url.strip())
    return InMemorySummaryStore()
