"""File store for computed reports and job bookkeeping.

JSON files live in two tiers under the data directory:
  - derived/: Computed outputs, always rewritten (heat-unit reports, trial
    aggregations)
  - historical/: Job markers with a ``valid_until`` (backfill progress per
    location), so a rerun can skip work that is still fresh

Every file is wrapped in a metadata envelope. Daily weather itself lives in
the SQL cache, not here.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any


class DataStore:
    """Read/write of metadata-enveloped JSON files with TTL."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.historical = base_dir / "historical"
        self.derived = base_dir / "derived"

    def read(self, path: Path) -> dict[str, Any] | None:
        """Read data payload from a metadata-enveloped JSON file.

        Returns the ``data`` field, or None if the file doesn't exist.
        """
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            envelope: dict[str, Any] = json.load(f)
        return envelope.get("data", envelope)

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``derived/heat_units/f1.json``).
            data: Payload to store under the ``data`` key.
            source: Origin of the payload (weather source tag or job name).
            valid_until: Expiry timestamp. None means never fresh.
            **params: Extra metadata fields (location, base temperature, ...).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "written_at": datetime.now(UTC).isoformat(),
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()
        if params:
            meta.update(params)

        envelope = {"meta": meta, "data": data}
        with full.open("w") as f:
            json.dump(envelope, f, indent=2)

        return full

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    def is_fresh(self, path: Path) -> bool:
        """Check if a file exists and its ``valid_until`` has not passed."""
        full = self._resolve(path)
        if not full.exists():
            return False

        with full.open() as f:
            envelope: dict[str, Any] = json.load(f)
        valid_until = envelope.get("meta", {}).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) < expiry
