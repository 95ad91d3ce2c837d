# ======================================================================
# Файл: terrain_engine/numerics/normalization.py
# Назначение: Глобальная min/max нормализация карты в [0..1].
# ======================================================================
from __future__ import annotations
from typing import Tuple

import numpy as np
from numba import njit, prange


@njit(cache=True, parallel=True)
def _minmax_inplace(a: np.ndarray, lo: float, hi: float) -> None:
    H, W = a.shape
    den = hi - lo
    if den <= 0.0:
        # константная карта: InverseLerp(a, a, x) == 0
        for j in prange(H):
            for i in range(W):
                a[j, i] = 0.0
    else:
        for j in prange(H):
            for i in range(W):
                a[j, i] = (a[j, i] - lo) / den


def normalize_minmax(arr: np.ndarray) -> Tuple[np.ndarray, float, float]:
    """Одним проходом переводит всю карту из [min, max] в [0, 1] (in-place).

    Возвращает (arr, min, max). При min == max все клетки становятся 0.
    """
    if arr.size == 0:
        return arr, 0.0, 0.0
    lo = float(np.min(arr))
    hi = float(np.max(arr))
    _minmax_inplace(arr, lo, hi)
    return arr, lo, hi
