"""Structured JSONL audit log of pipeline runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class PipelineEvent:
    """One step of a packaging run."""

    timestamp: str
    run_id: str
    step: str
    ok: bool
    subject: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_event(
    run_id: str,
    step: str,
    *,
    ok: bool = True,
    subject: str | None = None,
    metadata: dict[str, object] | None = None,
) -> PipelineEvent:
    """Build a timestamped event."""
    return PipelineEvent(
        timestamp=utc_timestamp(),
        run_id=run_id,
        step=step,
        ok=ok,
        subject=subject,
        metadata=dict(metadata or {}),
    )


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: PipelineEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True, default=str))
            handle.write("\n")

    def read(self, run_id: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally restricted to one run."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if run_id is not None and record.get("run_id") != run_id:
                    continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
