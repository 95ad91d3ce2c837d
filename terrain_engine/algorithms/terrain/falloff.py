# ==============================================================================
# Файл: terrain_engine/algorithms/terrain/falloff.py
# Назначение: Маска спада к краям и её применение к карте высот.
# ==============================================================================
from __future__ import annotations
import logging

import numpy as np

from ...numerics.masking import edge_falloff_mask

logger = logging.getLogger(__name__)


class FalloffField:
    """Маска (depth + 1, width + 1) в [0, 1], зависит только от координат сетки.

    Условие end >= start обеспечивается при загрузке пресета, не здесь.
    """

    @staticmethod
    def generate(width: int, depth: int, start: float, end: float) -> np.ndarray:
        return edge_falloff_mask(max(0, int(width)), max(0, int(depth)), float(start), float(end))

    @staticmethod
    def combine(heightfield: np.ndarray, mask: np.ndarray | None) -> np.ndarray:
        """Поэлементное умножение in-place; без маски карта не меняется."""
        if mask is None:
            return heightfield
        if mask.shape != heightfield.shape:
            logger.warning(
                "Falloff mask shape %s does not match heightfield %s, skipping.",
                mask.shape, heightfield.shape,
            )
            return heightfield
        np.multiply(heightfield, mask, out=heightfield)
        return heightfield
