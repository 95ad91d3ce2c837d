# ==============================================================================
# Файл: terrain_engine/algorithms/terrain/mesh.py
# Назначение: Меш поверхности из карты высот (вершины, UV, индексы, цвета, нормали).
# ==============================================================================
from __future__ import annotations
import logging
from dataclasses import dataclass

import numpy as np

from ...core.curves import ColorRamp, HeightCurve, inverse_lerp

logger = logging.getLogger(__name__)


@dataclass
class Surface:
    """Геометрия поверхности в локальных единицах сетки.

    vertices  - (N, 3) позиции (x, height, z), N = (width + 1) * (depth + 1)
    uvs       - (N, 2)
    colors    - (N, 4) RGBA в [0, 1]
    triangles - (width * depth * 6,) индексы, по два треугольника на квад
    normals   - (N, 3)
    Вершина клетки (x, z) имеет индекс z * (width + 1) + x.
    """

    width: int
    depth: int
    vertices: np.ndarray
    uvs: np.ndarray
    colors: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    def vertex_index(self, x: int, z: int) -> int:
        return z * (self.width + 1) + x

    def vertex(self, x: int, z: int) -> np.ndarray:
        return self.vertices[self.vertex_index(x, z)]


def compute_vertex_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Сглаженные нормали: сумма нормалей граней (с весом площади) по общим вершинам."""
    normals = np.zeros_like(vertices, dtype=np.float64)
    if triangles.size == 0:
        normals[:, 1] = 1.0
        return normals
    tris = triangles.reshape(-1, 3)
    p0, p1, p2 = vertices[tris[:, 0]], vertices[tris[:, 1]], vertices[tris[:, 2]]
    face_normals = np.cross(p1 - p0, p2 - p0)
    for k in range(3):
        np.add.at(normals, tris[:, k], face_normals)
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    # вершины без граней смотрят вверх
    degenerate = lengths[:, 0] < 1e-12
    lengths[degenerate] = 1.0
    normals /= lengths
    normals[degenerate] = (0.0, 1.0, 0.0)
    return normals


class MeshSynthesizer:

    @staticmethod
    def build_triangles(width: int, depth: int) -> np.ndarray:
        """Индексы: для квада с нижним углом v - {v, v+w+1, v+1} и {v+1, v+w+1, v+w+2}."""
        if width <= 0 or depth <= 0:
            return np.zeros(0, dtype=np.int64)
        z, x = np.mgrid[0:depth, 0:width]
        v = (z * (width + 1) + x).ravel()
        row = width + 1
        quads = np.stack([v, v + row, v + 1, v + 1, v + row, v + row + 1], axis=1)
        return quads.ravel().astype(np.int64)

    @staticmethod
    def build(
            heightfield: np.ndarray,
            height_curve: HeightCurve,
            height_multiplier: float,
            color_ramp: ColorRamp,
    ) -> Surface:
        depth = heightfield.shape[0] - 1
        width = heightfield.shape[1] - 1

        # 1. Вершины и UV (z - внешний цикл, x - внутренний)
        zz, xx = np.mgrid[0:depth + 1, 0:width + 1]
        heights = np.asarray(height_curve.evaluate(heightfield), dtype=np.float64) * float(height_multiplier)
        vertices = np.stack(
            [xx.ravel().astype(np.float64), heights.ravel(), zz.ravel().astype(np.float64)], axis=1
        )
        u = xx.ravel() / width if width > 0 else np.zeros(xx.size)
        v = zz.ravel() / depth if depth > 0 else np.zeros(zz.size)
        uvs = np.stack([u, v], axis=1).astype(np.float64)

        # 2. Треугольники
        triangles = MeshSynthesizer.build_triangles(width, depth)

        # 3. Цвета по высоте после кривой (а не по сырой карте)
        h = vertices[:, 1]
        h_min, h_max = float(np.min(h)), float(np.max(h))
        colors = color_ramp.evaluate(inverse_lerp(h_min, h_max, h))

        # 4. Нормали по итоговой топологии
        normals = compute_vertex_normals(vertices, triangles)

        logger.debug(
            "Surface built: %d vertices, %d triangles, height range [%.3f, %.3f]",
            vertices.shape[0], triangles.size // 3, h_min, h_max,
        )
        return Surface(
            width=width,
            depth=depth,
            vertices=vertices,
            uvs=uvs,
            colors=colors,
            triangles=triangles,
            normals=normals,
        )
