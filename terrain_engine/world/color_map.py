# ==============================================================================
# Файл: terrain_engine/world/color_map.py
# Назначение: Цветовая карта для расстановки по текстуре (чтение, маски совпадений и краёв).
# ==============================================================================
from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..core.constants import NEIGHBOR_OFFSETS_4

logger = logging.getLogger(__name__)


def load_color_map(source: Union[str, Path, Image.Image, np.ndarray]) -> np.ndarray:
    """Растр RGBA uint8 формы (H, W, 4), строка 0 - НИЖНЯЯ строка изображения.

    Массивы numpy считаются уже приведёнными к этой конвенции.
    """
    if isinstance(source, np.ndarray):
        arr = source
        if arr.ndim == 2:
            arr = np.stack([arr, arr, arr], axis=-1)
        if arr.dtype != np.uint8:
            arr = np.clip(np.rint(arr.astype(np.float64)), 0, 255).astype(np.uint8)
        if arr.shape[-1] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=-1)
        return np.ascontiguousarray(arr)

    if isinstance(source, Image.Image):
        img = source
    else:
        with Image.open(source) as f:
            img = f.copy()
    # PIL хранит строки сверху вниз, а карта адресуется от левого нижнего угла
    img = img.convert("RGBA").transpose(Image.FLIP_TOP_BOTTOM)
    return np.asarray(img, dtype=np.uint8).copy()


def color_match_mask(pixels: np.ndarray, color_rgba8: np.ndarray, tolerance: float) -> np.ndarray:
    """Пиксели, у которых |R|,|G|,|B| от заданного цвета <= tolerance (в единицах 0..255)."""
    diff = np.abs(pixels[..., :3].astype(np.int16) - np.asarray(color_rgba8[:3], dtype=np.int16))
    return np.all(diff <= float(tolerance), axis=-1)


def edge_mask(pixels: np.ndarray, tolerance: float) -> np.ndarray:
    """Краевые пиксели: хотя бы один 4-сосед (в пределах растра) отличается больше чем на tolerance."""
    h, w = pixels.shape[:2]
    rgb = pixels[..., :3].astype(np.int16)
    edges = np.zeros((h, w), dtype=bool)
    for dx, dy in NEIGHBOR_OFFSETS_4:
        # срезы текущего пикселя и соседа (dx, dy), обрезанные по границам
        ys, yn = slice(max(0, -dy), h - max(0, dy)), slice(max(0, dy), h - max(0, -dy))
        xs, xn = slice(max(0, -dx), w - max(0, dx)), slice(max(0, dx), w - max(0, -dx))
        diff = np.abs(rgb[ys, xs] - rgb[yn, xn])
        edges[ys, xs] |= np.any(diff > float(tolerance), axis=-1)
    return edges
