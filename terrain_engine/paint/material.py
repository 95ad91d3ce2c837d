# ==============================================================================
# Файл: terrain_engine/paint/material.py
# Назначение: Материал-потребитель слоя покраски (именованные слоты текстур).
# ==============================================================================
from __future__ import annotations
from typing import Dict, Iterable, Optional, Protocol

import numpy as np


class Material(Protocol):
    def has_property(self, slot: str) -> bool: ...

    def get_texture(self, slot: str) -> Optional[np.ndarray]: ...

    def set_texture(self, slot: str, image: np.ndarray) -> None: ...


class TerrainMaterial:
    """Материал в памяти. Текстура - RGBA uint8 (H, W, 4), начало в левом нижнем углу."""

    def __init__(self, slots: Iterable[str] = ()):
        self.textures: Dict[str, Optional[np.ndarray]] = {slot: None for slot in slots}
        self.updates = 0

    def has_property(self, slot: str) -> bool:
        return slot in self.textures

    def get_texture(self, slot: str) -> Optional[np.ndarray]:
        return self.textures.get(slot)

    def set_texture(self, slot: str, image: np.ndarray) -> None:
        # материал держит ссылку на буфер, как шейдер на текстуру
        self.textures[slot] = image
        self.updates += 1
