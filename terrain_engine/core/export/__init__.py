# ==============================================================================
# Файл: terrain_engine/core/export/__init__.py
# Назначение: Единая точка входа для всех функций экспорта.
# ==============================================================================
from .image_exporters import write_surface_preview, write_heightmap_png16, load_heightmap_png16
from .numpy_exporters import write_surface_npz, read_surface_npz
from .json_exporters import write_instances_json, write_terrain_meta_json

__all__ = [
    "write_surface_preview",
    "write_heightmap_png16",
    "load_heightmap_png16",
    "write_surface_npz",
    "read_surface_npz",
    "write_instances_json",
    "write_terrain_meta_json",
]
