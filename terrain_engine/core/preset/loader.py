# ========================
# file: terrain_engine/core/preset/loader.py
# ========================
from __future__ import annotations
import os
import json
import copy
import logging
from typing import Any, Dict, Union, Mapping

from .defaults import DEFAULT_TERRAIN_PRESET
from .model import (
    FalloffSettings,
    HeightSettings,
    MeshSettings,
    NoiseSettings,
    PaintSettings,
    PlacementSettings,
    PropRule,
    SeedSettings,
    TerrainPreset,
    ValueRange,
)
from .registry import resolve_preset_path
from .validators import sanitize_dict
from ..curves import ColorRamp, HeightCurve, parse_color

logger = logging.getLogger(__name__)


def deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursive dict merge. Lists/tuples are replaced, not merged element-wise."""
    out = copy.deepcopy(base)
    for k, v in overrides.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def _load_json_file(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _build_prop(p: Dict[str, Any]) -> PropRule:
    return PropRule(
        name=str(p["name"]),
        density=float(p["density"]),
        template=str(p["template"]),
        height=ValueRange(*p["height"]),
        size=ValueRange(*p["size"]),
        rotation=ValueRange(*p["rotation"]),
    )


def build_preset(merged: Dict[str, Any]) -> TerrainPreset:
    """Собирает неизменяемый TerrainPreset из уже проверенного словаря."""
    mesh, noise, height = merged["mesh"], merged["noise"], merged["height"]
    falloff, seed = merged["falloff"], merged["seed"]
    placement, paint = merged["placement"], merged["paint"]

    return TerrainPreset(
        id=merged["id"],
        mesh=MeshSettings(
            width=int(mesh["width"]),
            depth=int(mesh["depth"]),
            size_multiplier=float(mesh["size_multiplier"]),
        ),
        noise=NoiseSettings(
            type=noise["type"],
            octaves=int(noise["octaves"]),
            scale=float(noise["scale"]),
            persistence=float(noise["persistence"]),
            lacunarity=float(noise["lacunarity"]),
        ),
        height=HeightSettings(
            multiplier=float(height["multiplier"]),
            curve=HeightCurve.from_keys(height.get("curve")),
            color_ramp=ColorRamp.from_config(height.get("color_ramp")),
        ),
        falloff=FalloffSettings(
            enabled=bool(falloff["enabled"]),
            start=float(falloff["start"]),
            end=float(falloff["end"]),
        ),
        seed=SeedSettings(
            random=bool(seed["random"]),
            value=int(seed["value"]),
            offset=(float(seed["offset"][0]), float(seed["offset"][1])),
        ),
        placement=PlacementSettings(
            height_props=tuple(_build_prop(p) for p in placement["height_props"]),
            texture_props=tuple(_build_prop(p) for p in placement["texture_props"]),
            color_range=float(placement["color_range"]),
            selected_colors=tuple(parse_color(c) for c in placement.get("selected_colors", [])),
            texture_placement=placement["texture_placement"],
        ),
        paint=PaintSettings(
            resolution=int(paint["resolution"]),
            show_preview=bool(paint["show_preview"]),
            remove_props_while_painting=bool(paint["remove_props_while_painting"]),
            prop_removal_radius=float(paint["prop_removal_radius"]),
            texture_slot=str(paint["texture_slot"]),
        ),
        raw=merged,
    )


def load_preset(
    source: Union[str, Dict[str, Any], None] = None, overrides: Mapping[str, Any] | None = None
) -> TerrainPreset:
    """Load a preset from id/path/dict, merge with defaults, apply overrides and sanitize.

    Args:
        source: preset id (e.g., 'island'), or file path to JSON, or raw dict; None -> defaults
        overrides: mapping of ad-hoc overrides (last layer)
    Returns:
        TerrainPreset (immutable dataclass) ready for use
    """
    if source is None:
        data: Dict[str, Any] = {}
    elif isinstance(source, str):
        if os.path.isfile(source):
            data = _load_json_file(source)
        else:
            # treat as id
            path = resolve_preset_path(source)
            data = _load_json_file(path)
    elif isinstance(source, dict):
        data = source
    else:
        raise TypeError("source must be str path/id or dict")

    merged = deep_merge(DEFAULT_TERRAIN_PRESET, data)
    if overrides:
        merged = deep_merge(merged, overrides)

    merged = sanitize_dict(merged)
    preset = build_preset(merged)
    logger.debug(
        "Preset '%s' loaded: grid %dx%d, %d height props, %d texture props",
        preset.id, preset.mesh.width, preset.mesh.depth,
        len(preset.placement.height_props), len(preset.placement.texture_props),
    )
    return preset
