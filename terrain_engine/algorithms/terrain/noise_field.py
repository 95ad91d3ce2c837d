# ==============================================================================
# Файл: terrain_engine/algorithms/terrain/noise_field.py
# Назначение: Карта высот из фрактального шума с глобальной нормализацией.
# ==============================================================================
from __future__ import annotations
import logging
from typing import Tuple

import numpy as np

from ...core.constants import MIN_NOISE_SCALE, NOISE_TYPE_PERLIN, NOISE_TYPE_SIMPLEX
from ...core.rng import init_rng, octave_offsets
from ...numerics.fast_noise import fbm_grid, fbm_grid_simplex
from ...numerics.normalization import normalize_minmax

logger = logging.getLogger(__name__)


class NoiseField:
    """Генератор карты высот.

    Результат - массив float64 формы (depth + 1, width + 1), индекс [z, x],
    значения в [0, 1]. Каждая регенерация строит карту заново.
    """

    def __init__(self, noise_type: str = NOISE_TYPE_PERLIN, primitive_seed: int = 0):
        if noise_type not in (NOISE_TYPE_PERLIN, NOISE_TYPE_SIMPLEX):
            logger.warning("Unknown noise type '%s', falling back to '%s'", noise_type, NOISE_TYPE_PERLIN)
            noise_type = NOISE_TYPE_PERLIN
        self.noise_type = noise_type
        # Сид самого примитива фиксирован; разнообразие дают смещения октав.
        self.primitive_seed = int(primitive_seed)
        self.last_seed: int | None = None

    def generate(
            self,
            width: int,
            depth: int,
            octaves: int,
            scale: float,
            persistence: float,
            lacunarity: float,
            seed: int,
            offset: Tuple[float, float] = (0.0, 0.0),
            random_seed: bool = False,
    ) -> np.ndarray:
        width = max(0, int(width))
        depth = max(0, int(depth))
        rng, actual_seed = init_rng(seed, random_seed)
        self.last_seed = actual_seed
        offsets = octave_offsets(rng, octaves, offset)

        inv_scale = 1.0 / max(float(scale), MIN_NOISE_SCALE)
        half_w = width / 2.0
        half_d = depth / 2.0
        sample_x = (np.arange(width + 1, dtype=np.float64) - half_w) * inv_scale
        sample_z = (np.arange(depth + 1, dtype=np.float64) - half_d) * inv_scale

        if self.noise_type == NOISE_TYPE_SIMPLEX:
            heights = fbm_grid_simplex(
                sample_x, sample_z, offsets, float(persistence), float(lacunarity), self.primitive_seed
            )
        else:
            heights = fbm_grid(
                sample_x, sample_z, offsets, float(persistence), float(lacunarity), self.primitive_seed
            )

        heights, lo, hi = normalize_minmax(heights)
        logger.debug(
            "Noise field %dx%d, seed=%d, octaves=%d, raw range [%.4f, %.4f]",
            width + 1, depth + 1, actual_seed, offsets.shape[0], lo, hi,
        )
        return heights
