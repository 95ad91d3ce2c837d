# ========================
# file: terrain_engine/core/preset/defaults.py
# ========================
from __future__ import annotations
from typing import Any, Dict

from ..constants import (
    DEFAULT_COLOR_RANGE,
    DEFAULT_PAINT_RESOLUTION,
    NOISE_TYPE_PERLIN,
    PAINT_TEXTURE_SLOT,
    PLACEMENT_INNER,
)

DEFAULT_TERRAIN_PRESET: Dict[str, Any] = {
    "id": "default",
    "mesh": {
        "width": 255,
        "depth": 255,
        "size_multiplier": 5.0,
    },
    "noise": {
        "type": NOISE_TYPE_PERLIN,
        "octaves": 6,
        "scale": 50.0,
        "persistence": 0.5,
        "lacunarity": 2.0,
    },
    "height": {
        "multiplier": 10.0,
        "curve": [[0.0, 0.0], [1.0, 1.0]],
        # пустые списки -> стандартный градиент
        "color_ramp": {"colors": [], "alphas": []},
    },
    "falloff": {
        "enabled": True,
        "start": 0.5,
        "end": 1.0,
    },
    "seed": {
        "random": False,
        "value": 0,
        "offset": [0.0, 0.0],
    },
    "placement": {
        "height_props": [],
        "texture_props": [],
        "color_range": DEFAULT_COLOR_RANGE,
        "selected_colors": [],
        "texture_placement": PLACEMENT_INNER,
    },
    "paint": {
        "resolution": DEFAULT_PAINT_RESOLUTION,
        "show_preview": True,
        "remove_props_while_painting": True,
        "prop_removal_radius": 1.0,
        "texture_slot": PAINT_TEXTURE_SLOT,
    },
}
