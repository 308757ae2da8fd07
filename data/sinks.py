"""Output sinks: where finished records go, one ``push`` per record."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.models import Record
from data.database import get_session
from data.repositories import RecordRepository

log = logging.getLogger(__name__)


class RecordSink(Protocol):
    async def push(self, record: Record) -> None: ...


class DatabaseSink:
    def __init__(self, factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._factory = factory

    async def push(self, record: Record) -> None:
        async with get_session(self._factory) as session:
            await RecordRepository(session).upsert(record)


class JsonlSink:
    """Appends each record as one JSON line to a timestamped file."""

    def __init__(self, out_dir: str, filename_prefix: str = "records") -> None:
        os.makedirs(out_dir, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        self.path = os.path.join(out_dir, f"{filename_prefix}-{stamp}.jsonl")
        log.info("Writing records to %s", self.path)

    async def push(self, record: Record) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False)
        await asyncio.to_thread(self._append, line)

    def _append(self, line: str) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")


def make_sink(kind: str, out_dir: str = "./output") -> RecordSink:
    if kind == "jsonl":
        return JsonlSink(out_dir)
    if kind == "database":
        return DatabaseSink()
    raise ValueError(f"Unknown output sink: {kind}")
