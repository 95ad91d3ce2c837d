# Файл: terrain_engine/algorithms/terrain/__init__.py
from .noise_field import NoiseField
from .falloff import FalloffField
from .mesh import MeshSynthesizer, Surface, compute_vertex_normals
from .transform import SurfaceTransform

__all__ = [
    "NoiseField",
    "FalloffField",
    "MeshSynthesizer",
    "Surface",
    "compute_vertex_normals",
    "SurfaceTransform",
]
