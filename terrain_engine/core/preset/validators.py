# ========================
# file: terrain_engine/core/preset/validators.py
# ========================
from __future__ import annotations
import copy
import logging
from typing import Any, Dict, List

from .errors import ValidationError
from ..constants import (
    MAX_GRID_SIZE,
    MAX_OCTAVES,
    MAX_PAINT_RESOLUTION,
    MAX_SIZE_MULTIPLIER,
    MIN_NOISE_SCALE,
    MIN_OCTAVES,
    MIN_SIZE_MULTIPLIER,
    NOISE_TYPES,
    PLACEMENT_TYPES,
    COLOR_CHANNEL_MAX,
)

logger = logging.getLogger(__name__)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValidationError(msg)


def _num(section: Dict[str, Any], key: str, path: str) -> float:
    value = section.get(key)
    _require(
        isinstance(value, (int, float)) and not isinstance(value, bool),
        f"{path}.{key} must be a number, got {value!r}",
    )
    return float(value)


def _clamp(section: Dict[str, Any], key: str, path: str, lo: float | None, hi: float | None, as_int=False) -> None:
    raw = _num(section, key, path)
    value = raw
    if lo is not None:
        value = max(lo, value)
    if hi is not None:
        value = min(hi, value)
    if value != raw:
        logger.debug("Clamped %s.%s: %s -> %s", path, key, raw, value)
    section[key] = int(value) if as_int else float(value)


def _sanitize_range(rng: Any, path: str) -> List[float]:
    if isinstance(rng, dict):
        rng = [rng.get("min", rng.get("minimum", 0.0)), rng.get("max", rng.get("maximum", 0.0))]
    _require(isinstance(rng, (list, tuple)) and len(rng) == 2, f"{path} must be [min, max]")
    lo, hi = float(rng[0]), float(rng[1])
    if lo > hi:
        logger.debug("Swapped %s: [%s, %s]", path, lo, hi)
        lo, hi = hi, lo
    return [lo, hi]


def _sanitize_props(props: Any, path: str) -> List[Dict[str, Any]]:
    _require(isinstance(props, (list, tuple)), f"{path} must be a list")
    out = []
    for i, raw in enumerate(props):
        p = dict(raw)
        p_path = f"{path}[{i}]"
        _require(isinstance(p.get("name", ""), str), f"{p_path}.name must be a string")
        p.setdefault("name", f"prop_{i}")
        p.setdefault("template", p["name"])
        p.setdefault("density", 0.0)
        # Плотность не ограничиваем сверху: 10 даёт вероятность 100% на клетку.
        _clamp(p, "density", p_path, 0.0, None)
        p["height"] = _sanitize_range(p.get("height", [0.0, 1.0]), f"{p_path}.height")
        p["size"] = _sanitize_range(p.get("size", [1.0, 1.0]), f"{p_path}.size")
        p["rotation"] = _sanitize_range(p.get("rotation", [0.0, 0.0]), f"{p_path}.rotation")
        out.append(p)
    return out


def sanitize_dict(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Приводит объединённый словарь пресета к допустимым значениям.

    Ошибки конфигурации не считаются сбоями: значения зажимаются в диапазоны
    (например falloff.end < start -> end = start). ValidationError
    поднимается только если значение нельзя интерпретировать вообще.
    """
    cfg = copy.deepcopy(cfg)
    _require(isinstance(cfg.get("id"), str) and cfg["id"], "Preset.id must be non-empty string")

    mesh = cfg["mesh"]
    _clamp(mesh, "width", "mesh", 0, MAX_GRID_SIZE, as_int=True)
    _clamp(mesh, "depth", "mesh", 0, MAX_GRID_SIZE, as_int=True)
    _clamp(mesh, "size_multiplier", "mesh", MIN_SIZE_MULTIPLIER, MAX_SIZE_MULTIPLIER)

    noise = cfg["noise"]
    noise_type = str(noise.get("type", NOISE_TYPES[0])).lower()
    _require(noise_type in NOISE_TYPES, f"noise.type must be one of {NOISE_TYPES}")
    noise["type"] = noise_type
    _clamp(noise, "octaves", "noise", MIN_OCTAVES, MAX_OCTAVES, as_int=True)
    _clamp(noise, "scale", "noise", MIN_NOISE_SCALE, None)
    _clamp(noise, "persistence", "noise", 0.0, 1.0)
    _clamp(noise, "lacunarity", "noise", 0.0, 2.0)

    height = cfg["height"]
    _clamp(height, "multiplier", "height", None, None)
    curve = height.get("curve") or []
    _require(
        all(isinstance(k, (list, tuple)) and len(k) == 2 for k in curve),
        "height.curve must be a list of [time, value] keys",
    )

    falloff = cfg["falloff"]
    falloff["enabled"] = bool(falloff.get("enabled", True))
    _clamp(falloff, "start", "falloff", 0.0, 1.0)
    _clamp(falloff, "end", "falloff", 0.0, 1.0)
    if falloff["end"] < falloff["start"]:
        logger.debug("falloff.end < falloff.start, clamping end to %s", falloff["start"])
        falloff["end"] = falloff["start"]

    seed = cfg["seed"]
    seed["random"] = bool(seed.get("random", False))
    _clamp(seed, "value", "seed", None, None, as_int=True)
    offset = seed.get("offset", [0.0, 0.0])
    _require(isinstance(offset, (list, tuple)) and len(offset) == 2, "seed.offset must be [x, z]")
    seed["offset"] = [float(offset[0]), float(offset[1])]

    placement = cfg["placement"]
    placement["height_props"] = _sanitize_props(placement.get("height_props", []), "placement.height_props")
    placement["texture_props"] = _sanitize_props(placement.get("texture_props", []), "placement.texture_props")
    _clamp(placement, "color_range", "placement", 0.0, COLOR_CHANNEL_MAX)
    mode = str(placement.get("texture_placement", PLACEMENT_TYPES[0])).lower()
    _require(mode in PLACEMENT_TYPES, f"placement.texture_placement must be one of {PLACEMENT_TYPES}")
    placement["texture_placement"] = mode

    paint = cfg["paint"]
    _clamp(paint, "resolution", "paint", 1, MAX_PAINT_RESOLUTION, as_int=True)
    _clamp(paint, "prop_removal_radius", "paint", 0.0, None)
    paint["show_preview"] = bool(paint.get("show_preview", True))
    paint["remove_props_while_painting"] = bool(paint.get("remove_props_while_painting", True))
    _require(isinstance(paint.get("texture_slot"), str) and paint["texture_slot"], "paint.texture_slot must be a string")

    return cfg
