# ==============================================================================
# Файл: terrain_engine/__init__.py
# Назначение: Процедурный ландшафт: шум -> меш -> расстановка пропов -> покраска.
# ==============================================================================
from .terrain_actor import TerrainActor
from .core.preset import load_preset, TerrainPreset, PropRule, ValueRange

__all__ = [
    "TerrainActor",
    "load_preset",
    "TerrainPreset",
    "PropRule",
    "ValueRange",
]
