# ==============================================================================
# Файл: terrain_engine/core/export/image_exporters.py
# Назначение: Изображения: превью по цветам вершин и 16-битная карта высот.
# ==============================================================================
from __future__ import annotations
import logging
import os
from pathlib import Path

import imageio.v2 as imageio
import numpy as np
from PIL import Image

from ...algorithms.terrain.mesh import Surface

logger = logging.getLogger(__name__)


def _ensure_path_exists(path: str) -> None:
    """Убеждается, что директория для файла существует."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def write_surface_preview(path: str, surface: Surface, upscale: int = 2) -> None:
    """Рисует вид сверху по цветам вершин и сохраняет в PNG."""
    w, d = surface.width + 1, surface.depth + 1
    rgb = np.clip(np.rint(surface.colors[:, :3] * 255.0), 0, 255).astype(np.uint8).reshape(d, w, 3)

    # строка z = 0 должна оказаться внизу картинки
    img = Image.fromarray(rgb, "RGB").transpose(Image.FLIP_TOP_BOTTOM)
    if upscale > 1:
        img = img.resize((w * upscale, d * upscale), Image.Resampling.NEAREST)

    _ensure_path_exists(path)
    tmp_path = path + ".tmp"
    img.save(tmp_path, format="PNG")
    os.replace(tmp_path, path)
    logger.debug("Preview image saved: %s", path)


def write_heightmap_png16(path: str, heightfield: np.ndarray) -> None:
    """Карта высот [0..1] -> PNG uint16 (0..65535)."""
    data_u16 = np.clip(np.rint(heightfield * 65535.0), 0, 65535).astype(np.uint16)
    _ensure_path_exists(path)
    imageio.imwrite(Path(path).as_posix(), np.flipud(data_u16))
    logger.debug("Heightmap PNG16 saved: %s", path)


def load_heightmap_png16(path: str) -> np.ndarray:
    arr = imageio.imread(Path(path).as_posix())
    if arr.dtype != np.uint16:
        arr = arr.astype(np.uint16)
    return np.flipud(arr).astype(np.float64) / 65535.0
