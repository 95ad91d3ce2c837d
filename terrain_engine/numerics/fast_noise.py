# ==============================================================================
# Файл: terrain_engine/numerics/fast_noise.py
# Назначение: Градиентный 2D-шум (Perlin) и fBm по октавам на Numba.
# Координаты в float64: смещения октав доходят до ±100000.
# ==============================================================================
from __future__ import annotations
import numpy as np
from numba import njit, prange
from opensimplex import OpenSimplex

F64 = np.float64


@njit(inline='always', cache=True)
def _u32(x: int) -> int: return x & 0xFFFFFFFF


@njit(inline='always', cache=True)
def _hash2(ix: int, iz: int, seed: int) -> int:
    a, b, c = 0x9e3779b3, 0x9e3779b3, 0x9e3779b3
    a = _u32(a + ix); b = _u32(b + iz); c = _u32(c + seed)
    a = _u32(a - b - c) ^ (c >> 13); b = _u32(b - c - a) ^ (a << 8); c = _u32(c - a - b) ^ (b >> 13)
    a = _u32(a - b - c) ^ (c >> 12); b = _u32(b - c - a) ^ (a << 16); c = _u32(c - a - b) ^ (b >> 5)
    a = _u32(a - b - c) ^ (c >> 3); b = _u32(b - c - a) ^ (a << 10); c = _u32(c - a - b) ^ (b >> 15)
    return _u32(c)


@njit(inline='always', cache=True)
def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


@njit(inline='always', cache=True)
def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@njit(inline='always', cache=True)
def _grad(h: int, x: float, z: float) -> float:
    # 8 направлений: диагонали и оси
    g = h & 7
    if g == 0:
        return x + z
    elif g == 1:
        return -x + z
    elif g == 2:
        return x - z
    elif g == 3:
        return -x - z
    elif g == 4:
        return x
    elif g == 5:
        return -x
    elif g == 6:
        return z
    return -z


@njit(inline='always', cache=True)
def perlin_noise_2d(x: float, z: float, seed: int) -> float:
    """Градиентный шум в [0..1]."""
    x0 = np.floor(x); z0 = np.floor(z)
    xi = int(x0); zi = int(z0)
    xf = x - x0; zf = z - z0
    u = _fade(xf); v = _fade(zf)
    n00 = _grad(_hash2(xi, zi, seed), xf, zf)
    n10 = _grad(_hash2(xi + 1, zi, seed), xf - 1.0, zf)
    n01 = _grad(_hash2(xi, zi + 1, seed), xf, zf - 1.0)
    n11 = _grad(_hash2(xi + 1, zi + 1, seed), xf - 1.0, zf - 1.0)
    n = _lerp(_lerp(n00, n10, u), _lerp(n01, n11, u), v)
    val = 0.5 * (n + 1.0)
    if val < 0.0:
        return 0.0
    if val > 1.0:
        return 1.0
    return val


@njit(cache=True, parallel=True)
def fbm_grid(
        sample_x: np.ndarray,
        sample_z: np.ndarray,
        offsets: np.ndarray,
        persistence: float,
        lacunarity: float,
        seed: int,
) -> np.ndarray:
    """Сумма октав для сетки (len(sample_z), len(sample_x)).

    sample_x / sample_z - координаты клеток, уже отцентрованные и делённые на scale.
    Шум [0..1] переводится в [-1..1], чтобы октавы могли гасить друг друга.
    """
    D = sample_z.shape[0]
    W = sample_x.shape[0]
    octaves = offsets.shape[0]
    output = np.empty((D, W), dtype=F64)
    for j in prange(D):
        for i in range(W):
            amp = 1.0
            freq = 1.0
            total = 0.0
            for o in range(octaves):
                sx = sample_x[i] * freq + offsets[o, 0]
                sz = sample_z[j] * freq + offsets[o, 1]
                n = perlin_noise_2d(sx, sz, seed) * 2.0 - 1.0
                total += n * amp
                amp *= persistence
                freq *= lacunarity
            output[j, i] = total
    return output


def fbm_grid_simplex(
        sample_x: np.ndarray,
        sample_z: np.ndarray,
        offsets: np.ndarray,
        persistence: float,
        lacunarity: float,
        seed: int,
) -> np.ndarray:
    """То же, что fbm_grid, но с примитивом OpenSimplex (векторно по октавам)."""
    gen = OpenSimplex(seed=seed)
    output = np.zeros((sample_z.shape[0], sample_x.shape[0]), dtype=F64)
    amp = 1.0
    freq = 1.0
    for o in range(offsets.shape[0]):
        xs = sample_x * freq + offsets[o, 0]
        zs = sample_z * freq + offsets[o, 1]
        # noise2array -> форма (len(zs), len(xs)), значения [-1..1]
        n01 = np.clip((gen.noise2array(xs, zs) + 1.0) * 0.5, 0.0, 1.0)
        output += (n01 * 2.0 - 1.0) * amp
        amp *= persistence
        freq *= lacunarity
    return output
