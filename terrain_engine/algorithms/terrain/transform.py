# ==============================================================================
# Файл: terrain_engine/algorithms/terrain/transform.py
# Назначение: Общее смещение/масштаб поверхности. Меш, расстановка и покраска
#             обязаны пересчитывать координаты одинаково.
# ==============================================================================
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ...core.curves import inverse_lerp


@dataclass(frozen=True)
class SurfaceTransform:
    width: int
    depth: int
    size_multiplier: float
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def offset(self) -> np.ndarray:
        """Локальная позиция меша: след поверхности центрирован на origin."""
        return np.array([-self.width / 2.0, 0.0, -self.depth / 2.0], dtype=np.float64) * self.size_multiplier

    @property
    def footprint(self) -> Tuple[float, float]:
        return (self.width * self.size_multiplier, self.depth * self.size_multiplier)

    def local_to_world(self, local) -> np.ndarray:
        """Координаты вершин (в клетках сетки) -> мировые."""
        local = np.asarray(local, dtype=np.float64)
        return local * self.size_multiplier + self.offset + np.asarray(self.origin, dtype=np.float64)

    def texture_to_centered(self, px, py, tex_width: int, tex_height: int) -> Tuple[np.ndarray, np.ndarray]:
        """Пиксель растра -> X/Z относительно центра поверхности."""
        fw, fd = self.footprint
        wx = np.asarray(px, dtype=np.float64) / max(1, tex_width) * fw - fw / 2.0
        wz = np.asarray(py, dtype=np.float64) / max(1, tex_height) * fd - fd / 2.0
        return wx, wz

    def centered_to_cell(self, wx, wz) -> Tuple[np.ndarray, np.ndarray]:
        """X/Z относительно центра -> индекс клетки, зажатый в границы сетки."""
        size = self.size_multiplier
        nx = inverse_lerp(-self.width / 2.0, self.width / 2.0, np.asarray(wx, dtype=np.float64) / size)
        nz = inverse_lerp(-self.depth / 2.0, self.depth / 2.0, np.asarray(wz, dtype=np.float64) / size)
        xi = np.clip(np.floor(nx * self.width).astype(np.int64), 0, max(0, self.width - 1))
        zi = np.clip(np.floor(nz * self.depth).astype(np.int64), 0, max(0, self.depth - 1))
        return xi, zi
