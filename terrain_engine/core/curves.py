# ==============================================================================
# Файл: terrain_engine/core/curves.py
# Назначение: Кривая высот (heightCurve) и цветовой градиент (colorRamp).
# ==============================================================================
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Sequence, Tuple

import numpy as np

RGBA = Tuple[float, float, float, float]


def parse_color(value: Any) -> RGBA:
    """Цвет из '#RRGGBB' / '#AARRGGBB' или последовательности 3-4 чисел.

    Числа > 1 считаются каналами 0..255. Возвращает RGBA в [0..1].
    """
    if isinstance(value, str):
        hex_color = value.strip().lstrip("#")
        alpha = 1.0
        if len(hex_color) == 8:
            alpha = int(hex_color[0:2], 16) / 255.0
            hex_color = hex_color[2:]
        if len(hex_color) != 6:
            raise ValueError(f"Bad hex color: {value!r}")
        r, g, b = (int(hex_color[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
        return (r, g, b, alpha)

    channels = [float(c) for c in value]
    if len(channels) not in (3, 4):
        raise ValueError(f"Color must have 3 or 4 channels, got {len(channels)}")
    if len(channels) == 3:
        channels.append(1.0 if max(channels) <= 1.0 else 255.0)
    if max(channels) > 1.0:
        channels = [c / 255.0 for c in channels]
    r, g, b, a = (min(1.0, max(0.0, c)) for c in channels)
    return (r, g, b, a)


def color_to_rgba8(value: Any) -> np.ndarray:
    """Цвет -> uint8[4] (как Color32)."""
    rgba = np.asarray(parse_color(value), dtype=np.float64)
    return np.rint(rgba * 255.0).astype(np.uint8)


def inverse_lerp(a: float, b: float, value):
    """Положение value в [a, b], зажатое в [0, 1]; 0 при a == b."""
    if a == b:
        return np.zeros_like(np.asarray(value, dtype=np.float64)) if np.ndim(value) else 0.0
    t = (np.asarray(value, dtype=np.float64) - a) / (b - a)
    t = np.clip(t, 0.0, 1.0)
    return t if np.ndim(value) else float(t)


@dataclass(frozen=True)
class HeightCurve:
    """Кусочно-линейная кривая по ключам (time, value), за краями - константа."""

    keys: Tuple[Tuple[float, float], ...] = ((0.0, 0.0), (1.0, 1.0))

    @classmethod
    def from_keys(cls, keys: Sequence[Sequence[float]] | None) -> "HeightCurve":
        if not keys:
            return cls()
        pairs = sorted((float(t), float(v)) for t, v in keys)
        return cls(keys=tuple(pairs))

    def evaluate(self, t):
        times = np.array([k[0] for k in self.keys], dtype=np.float64)
        values = np.array([k[1] for k in self.keys], dtype=np.float64)
        out = np.interp(np.asarray(t, dtype=np.float64), times, values)
        return out if np.ndim(t) else float(out)

    def to_list(self):
        return [list(k) for k in self.keys]


def _default_color_keys() -> Tuple[Tuple[float, RGBA], ...]:
    return (
        (0.0, (0.0, 1.0, 0.0, 1.0)),       # низины - зелёный
        (0.4, (0.6, 0.4, 0.2, 1.0)),       # холмы - коричневый
        (0.8, (0.8, 0.7, 0.3, 1.0)),       # горы - жёлто-коричневый
        (1.0, (0.9, 0.9, 0.9, 1.0)),       # пики - светло-бежевый
    )


@dataclass(frozen=True)
class ColorRamp:
    """Градиент: цветовые ключи (t, rgb) + ключи альфы (t, a), линейная интерполяция."""

    color_keys: Tuple[Tuple[float, RGBA], ...] = field(default_factory=_default_color_keys)
    alpha_keys: Tuple[Tuple[float, float], ...] = ((0.0, 1.0), (1.0, 1.0))

    @classmethod
    def from_config(cls, cfg: dict | None) -> "ColorRamp":
        cfg = dict(cfg or {})
        raw_colors = cfg.get("colors") or []
        raw_alphas = cfg.get("alphas") or []
        color_keys = tuple(sorted(((float(t), parse_color(c)) for t, c in raw_colors), key=lambda k: k[0]))
        alpha_keys = tuple(sorted((float(t), float(a)) for t, a in raw_alphas))
        return cls(
            color_keys=color_keys or _default_color_keys(),
            alpha_keys=alpha_keys or ((0.0, 1.0), (1.0, 1.0)),
        )

    def evaluate(self, t) -> np.ndarray:
        """t (скаляр или массив) -> RGBA float32 формы (..., 4)."""
        t_arr = np.asarray(t, dtype=np.float64)
        times = np.array([k[0] for k in self.color_keys], dtype=np.float64)
        colors = np.array([k[1] for k in self.color_keys], dtype=np.float64)
        a_times = np.array([k[0] for k in self.alpha_keys], dtype=np.float64)
        a_values = np.array([k[1] for k in self.alpha_keys], dtype=np.float64)

        out = np.empty(t_arr.shape + (4,), dtype=np.float32)
        for ch in range(3):
            out[..., ch] = np.interp(t_arr, times, colors[:, ch])
        out[..., 3] = np.interp(t_arr, a_times, a_values)
        return out

    def to_dict(self):
        return {
            "colors": [[t, list(c)] for t, c in self.color_keys],
            "alphas": [list(k) for k in self.alpha_keys],
        }
