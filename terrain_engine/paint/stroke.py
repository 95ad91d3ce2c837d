# ==============================================================================
# Файл: terrain_engine/paint/stroke.py
# Назначение: Сессия одного мазка кисти (от нажатия до отпускания).
# ==============================================================================
from __future__ import annotations
import math
import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from .paint_layer import PaintLayer

logger = logging.getLogger(__name__)


class BrushStroke:
    """Короткоживущая сессия мазка; в постоянное состояние слоя не входит.

    Если два соседних сэмпла дальше друг от друга, чем половина радиуса кисти,
    между ними дорисовываются промежуточные точки (линейная интерполяция
    мировой позиции и UV).
    """

    def __init__(
            self,
            layer: PaintLayer,
            color,
            radius: float,
            strength: float = 1.0,
            opacity: float = 1.0,
            brush_texture=None,
    ):
        self.layer = layer
        self.color = color
        self.radius = float(radius)
        self.strength = strength
        self.opacity = opacity
        self.brush_texture = brush_texture
        self.samples = 0
        self._last: Optional[Tuple[np.ndarray, np.ndarray]] = None
        self._active = True
        layer.begin_stroke()

    def __enter__(self) -> "BrushStroke":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.end()

    def _stamp(self, position: np.ndarray, uv: np.ndarray) -> None:
        self.layer.apply_brush(
            position, uv, self.color, self.radius, self.strength, self.opacity, self.brush_texture
        )
        self.samples += 1

    def add_sample(self, world_position: Sequence[float], uv: Sequence[float]) -> int:
        """Добавляет точку мазка. Возвращает число выполненных штампов."""
        if not self._active:
            return 0
        position = np.asarray(world_position, dtype=np.float64)
        uv_arr = np.asarray(uv, dtype=np.float64)
        before = self.samples

        if self._last is not None:
            last_pos, last_uv = self._last
            spacing = self.radius / 2.0
            distance = float(np.linalg.norm(position - last_pos))
            if spacing > 0.0 and distance > spacing:
                steps = int(math.ceil(distance / spacing))
                for i in range(1, steps):
                    t = i / steps
                    self._stamp(last_pos + (position - last_pos) * t, last_uv + (uv_arr - last_uv) * t)

        self._stamp(position, uv_arr)
        self._last = (position, uv_arr)
        return self.samples - before

    def end(self) -> None:
        if not self._active:
            return
        self._active = False
        self._last = None
        self.layer.end_stroke()
        logger.debug("Brush stroke finished: %d stamps", self.samples)
