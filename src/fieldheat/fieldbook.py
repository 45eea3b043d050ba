"""Location coordinates and trial observations.

The pipeline only needs two narrow capabilities from the field-trial side:

- ``GeolocationStore``: coordinates for a location id
- ``TraitStore``: a trial's planting date and location, and the recorded
  values of one trait per plot

``FieldBook`` implements both over a single JSON file::

    {
      "locations": {"field-1": {"lat": 40.0, "lon": -88.0, "name": "North"}},
      "trials": {
        "T1": {
          "planting_date": "2025-04-15",
          "location_id": "field-1",
          "traits": {
            "days_to_maturity": {"P1": "20250801", "P2": "105"},
            "days_to_emergence": {"P1": "10"}
          }
        }
      }
    }

Lookups never raise for unknown ids; they return None or an empty dict.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class TrialInfo:
    trial_id: str
    planting_date: date | None
    location_id: str | None


class GeolocationStore(Protocol):
    def get_coordinates(self, location_id: str) -> tuple[float, float] | None:
        """(lat, lon) for a location, or None when unknown."""
        ...


class TraitStore(Protocol):
    def get_trial(self, trial_id: str) -> TrialInfo | None: ...

    def get_trait_values(self, trial_id: str, trait_id: str) -> dict[str, Any]:
        """Raw recorded values keyed by plot id (empty when none)."""
        ...


class FieldBook:
    """JSON-file backed geolocation and trait store."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        data = data or {}
        self.locations: dict[str, dict[str, Any]] = data.get("locations", {})
        self.trials: dict[str, dict[str, Any]] = data.get("trials", {})

    @classmethod
    def load(cls, path: Path) -> FieldBook:
        """Read a field book file. A missing file is an empty field book."""
        if not path.exists():
            return cls()
        with path.open() as f:
            return cls(json.load(f))

    # -- GeolocationStore ------------------------------------------------------

    def get_coordinates(self, location_id: str) -> tuple[float, float] | None:
        entry = self.locations.get(location_id)
        if not entry or entry.get("lat") is None or entry.get("lon") is None:
            return None
        return float(entry["lat"]), float(entry["lon"])

    def located_ids(self) -> list[str]:
        """Location ids that have coordinates, in file order."""
        return [loc_id for loc_id in self.locations if self.get_coordinates(loc_id)]

    # -- TraitStore --------------------------------------------------------------

    def get_trial(self, trial_id: str) -> TrialInfo | None:
        entry = self.trials.get(trial_id)
        if entry is None:
            return None
        raw_planting = entry.get("planting_date")
        try:
            planting = date.fromisoformat(str(raw_planting)[:10]) if raw_planting else None
        except ValueError:
            planting = None
        location_id = entry.get("location_id")
        return TrialInfo(
            trial_id=trial_id,
            planting_date=planting,
            location_id=str(location_id) if location_id is not None else None,
        )

    def get_trait_values(self, trial_id: str, trait_id: str) -> dict[str, Any]:
        entry = self.trials.get(trial_id, {})
        values: dict[str, Any] = entry.get("traits", {}).get(trait_id, {})
        return dict(values)
