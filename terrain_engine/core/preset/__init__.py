# ========================
# file: terrain_engine/core/preset/__init__.py
# ========================
from .model import (
    TerrainPreset,
    PropRule,
    ValueRange,
    MeshSettings,
    NoiseSettings,
    HeightSettings,
    FalloffSettings,
    SeedSettings,
    PlacementSettings,
    PaintSettings,
)
from .loader import load_preset, deep_merge, build_preset
from .defaults import DEFAULT_TERRAIN_PRESET
from .errors import PresetError, ValidationError, NotFoundError
from .registry import list_preset_ids, add_search_folder

__all__ = [
    "TerrainPreset",
    "PropRule",
    "ValueRange",
    "MeshSettings",
    "NoiseSettings",
    "HeightSettings",
    "FalloffSettings",
    "SeedSettings",
    "PlacementSettings",
    "PaintSettings",
    "load_preset",
    "deep_merge",
    "build_preset",
    "DEFAULT_TERRAIN_PRESET",
    "PresetError",
    "ValidationError",
    "NotFoundError",
    "list_preset_ids",
    "add_search_folder",
]
