import numpy as np
from numba import njit, prange


@njit(cache=True, parallel=True)
def edge_falloff_mask(width: int, depth: int, start: float, end: float) -> np.ndarray:
    """
    Квадратная маска спада к краям, форма (depth + 1, width + 1).
    Координаты клетки -> [-1, 1], расстояние Чебышёва до центра,
    затем InverseLerp(start, end) и инвертированный smoothstep: 1 в центре, 0 за end.
    """
    output = np.empty((depth + 1, width + 1), dtype=np.float64)
    span = end - start

    for j in prange(depth + 1):
        zv = (j / depth) * 2.0 - 1.0 if depth > 0 else 0.0
        for i in range(width + 1):
            xv = (i / width) * 2.0 - 1.0 if width > 0 else 0.0
            edge_distance = max(abs(xv), abs(zv))

            # InverseLerp: 0 при start == end
            t = (edge_distance - start) / span if span != 0.0 else 0.0
            t = max(0.0, min(1.0, t))

            output[j, i] = 1.0 - t * t * (3.0 - 2.0 * t)

    return output
