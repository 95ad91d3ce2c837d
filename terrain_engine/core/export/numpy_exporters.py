# ==============================================================================
# Файл: terrain_engine/core/export/numpy_exporters.py
# Назначение: Сохранение/загрузка геометрии поверхности и карты высот (NPZ).
# ==============================================================================
from __future__ import annotations
import os
from pathlib import Path
from typing import Dict

import numpy as np

from ...algorithms.terrain.mesh import Surface


def _ensure_path_exists(path: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def write_surface_npz(path: str, surface: Surface, heightfield: np.ndarray | None = None) -> None:
    """Сохраняет меш (и, если есть, карту высот) в один сжатый NPZ."""
    layers: Dict[str, np.ndarray] = {
        "vertices": surface.vertices.astype(np.float32),
        "uvs": surface.uvs.astype(np.float32),
        "colors": surface.colors.astype(np.float32),
        "normals": surface.normals.astype(np.float32),
        "triangles": surface.triangles.astype(np.int32),
        "grid": np.array([surface.width, surface.depth], dtype=np.int32),
    }
    if heightfield is not None:
        layers["heightfield"] = heightfield.astype(np.float32)

    _ensure_path_exists(path)
    tmp_path = path + ".tmp"
    with open(tmp_path, "wb") as f:
        np.savez_compressed(f, **layers)
    os.replace(tmp_path, path)


def read_surface_npz(path: str) -> Dict[str, np.ndarray] | None:
    if not os.path.exists(path):
        return None
    with np.load(path) as data:
        return {k: data[k] for k in data.files}
