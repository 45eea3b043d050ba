"""Crop presets: base temperatures and which index a crop is tracked with."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CropPreset:
    id: int
    crop_name: str
    base_temp: float
    use_chu: bool = False


CROP_PRESETS: tuple[CropPreset, ...] = (
    CropPreset(1, "Corn (GDD)", 10.0),
    CropPreset(2, "Corn (CHU)", 4.4, use_chu=True),
    CropPreset(3, "Wheat", 0.0),
    CropPreset(4, "Soybean (GDD)", 10.0),
    CropPreset(5, "Soybean (CHU)", 4.4, use_chu=True),
    CropPreset(6, "Sunflower", 8.0),
    CropPreset(7, "Custom", 10.0),
)


def get_crop(crop_id: int) -> CropPreset | None:
    """Look up a preset by id."""
    return next((c for c in CROP_PRESETS if c.id == crop_id), None)
