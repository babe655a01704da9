"""JSON persistence for the watch configuration and runtime state."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .models.runtime_state import RuntimeSnapshot, utcnow
from .models.status import ResourceStatus
from .models.watch_config import WatchConfig

logger = logging.getLogger(__name__)


@dataclass
class SavedData:
    status: ResourceStatus = ResourceStatus.UNKNOWN
    counter: int = 0
    last_change: datetime = field(default_factory=utcnow)
    messages: dict[int, int] = field(default_factory=dict)
    config: WatchConfig = field(default_factory=WatchConfig)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "counter": self.counter,
            "last_change": self.last_change.isoformat(),
            "messages": {str(k): v for k, v in sorted(self.messages.items())},
            "config": self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SavedData":
        raw_change = data.get("last_change")
        last_change = datetime.fromisoformat(raw_change) if raw_change else utcnow()
        messages = {
            int(k): int(v) for k, v in (data.get("messages") or {}).items() if v
        }
        return cls(
            status=ResourceStatus.parse(data.get("status")),
            counter=max(0, int(data.get("counter") or 0)),
            last_change=last_change,
            messages=messages,
            config=WatchConfig.from_dict(data.get("config")),
        )

    @classmethod
    def from_snapshot(cls, snapshot: RuntimeSnapshot, config: WatchConfig) -> "SavedData":
        return cls(
            status=snapshot.status,
            counter=snapshot.counter,
            last_change=snapshot.last_change,
            messages=dict(snapshot.messages),
            config=config.snapshot(),
        )


def _read_json(path: Path) -> dict | None:
    """Return the parsed JSON object at ``path`` or None if the file is missing.

    Raises:
        ValueError: the file exists but cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ValueError(f"Failed to open {path}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed data in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Malformed data in {path}: expected an object")
    return data


def load_config_file(path: str | Path) -> WatchConfig | None:
    """Load the operator-provided configuration file, if any."""
    data = _read_json(Path(path))
    if data is None:
        return None
    try:
        return WatchConfig.from_dict(data)
    except (AttributeError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed config in {path}: {e}") from e


class StateFile:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> SavedData | None:
        data = _read_json(self.path)
        if data is None:
            return None
        try:
            return SavedData.from_dict(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed saved data in {self.path}: {e}") from e

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(self.path)

    async def save(self, saved: SavedData) -> bool:
        """Write ``saved`` to disk. Failures are logged, never raised."""
        try:
            payload = json.dumps(saved.to_dict(), indent=2, ensure_ascii=False)
            await asyncio.to_thread(self._write, payload)
        except Exception:
            logger.exception("Failed to save state to %s", self.path)
            return False
        logger.info("Saved state to %s", self.path)
        return True
