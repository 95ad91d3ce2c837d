# ==============================================================================
# Файл: terrain_engine/core/rng.py
# Назначение: Явные генераторы случайных чисел (никакого глобального random).
# ==============================================================================
from __future__ import annotations
import logging
import random
from typing import Tuple

import numpy as np

from .constants import OCTAVE_OFFSET_RANGE, OFFSET_DIVISOR, RANDOM_SEED_RANGE

logger = logging.getLogger(__name__)


def resolve_seed(seed: int, random_seed: bool = False) -> int:
    """Возвращает фактический сид генерации.

    В режиме random_seed сид один раз берётся из системного источника энтропии.
    """
    if not random_seed:
        return int(seed)
    actual = random.SystemRandom().randrange(-RANDOM_SEED_RANGE, RANDOM_SEED_RANGE)
    logger.info("Random seed mode: drew seed %d", actual)
    return actual


def init_rng(seed: int, random_seed: bool = False) -> Tuple[random.Random, int]:
    actual = resolve_seed(seed, random_seed)
    return random.Random(actual), actual


def mix_seed(seed: int, salt: int) -> int:
    """Производный сид для независимых потоков (шум / расстановка / ...)."""
    s = (int(seed) ^ (salt * 0x9E3779B9)) & 0xFFFFFFFF
    # xorshift на 32 битах
    s ^= (s << 13) & 0xFFFFFFFF
    s ^= (s >> 17)
    s ^= (s << 5) & 0xFFFFFFFF
    return s & 0x7FFFFFFF


def octave_offsets(
        rng: random.Random, octaves: int, offset: Tuple[float, float] = (0.0, 0.0)
) -> np.ndarray:
    """Смещения октав: целые пары из [-100000, 100000) плюс offset / 10.

    Порядок выборки фиксирован (x, затем z для каждой октавы), поэтому
    одинаковый сид всегда даёт одинаковые смещения.
    """
    out = np.empty((max(0, int(octaves)), 2), dtype=np.float64)
    ox = float(offset[0]) / OFFSET_DIVISOR
    oz = float(offset[1]) / OFFSET_DIVISOR
    for i in range(out.shape[0]):
        out[i, 0] = rng.randrange(-OCTAVE_OFFSET_RANGE, OCTAVE_OFFSET_RANGE) + ox
        out[i, 1] = rng.randrange(-OCTAVE_OFFSET_RANGE, OCTAVE_OFFSET_RANGE) + oz
    return out
