# ==============================================================================
# Файл: terrain_engine/paint/paint_layer.py
# Назначение: Растровый слой покраски поверх ландшафта (кисть, очистка, PNG).
# ==============================================================================
from __future__ import annotations
import enum
import logging
import os
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

import numpy as np
from PIL import Image

from ..core.constants import (
    BRUSH_RADIUS_SCALE,
    COLOR_CHANNEL_MAX,
    DEFAULT_PAINT_RESOLUTION,
    MAX_PAINT_RESOLUTION,
    PAINT_TEXTURE_SLOT,
)
from ..core.curves import parse_color
from .material import Material

logger = logging.getLogger(__name__)

PropRemover = Callable[[Sequence[float], float], int]


class PaintState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    PAINTING = "painting"


def _smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def _to_rgba8(image: Union[np.ndarray, Image.Image]) -> np.ndarray:
    if isinstance(image, Image.Image):
        return np.asarray(image.convert("RGBA").transpose(Image.FLIP_TOP_BOTTOM), dtype=np.uint8).copy()
    arr = np.asarray(image)
    if arr.dtype != np.uint8:
        arr = np.clip(np.rint(arr.astype(np.float64)), 0, 255).astype(np.uint8)
    return arr


def _resample(src: np.ndarray, width: int, height: int) -> np.ndarray:
    """Билинейный пересэмпл RGBA-буфера к новому размеру."""
    if src.shape[0] == height and src.shape[1] == width:
        return src.copy()
    img = Image.fromarray(np.ascontiguousarray(src), "RGBA")
    return np.asarray(img.resize((width, height), Image.Resampling.BILINEAR), dtype=np.uint8).copy()


def sample_alpha_bilinear(brush: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Альфа кисти в точках (u, v) из [0, 1], билинейно, с зажимом на краях."""
    h, w = brush.shape[:2]
    alpha = brush[..., 3].astype(np.float64) / COLOR_CHANNEL_MAX
    px = np.asarray(u, dtype=np.float64) * w - 0.5
    py = np.asarray(v, dtype=np.float64) * h - 0.5
    x0 = np.floor(px)
    y0 = np.floor(py)
    fx = px - x0
    fy = py - y0
    x0i = np.clip(x0.astype(np.int64), 0, w - 1)
    x1i = np.clip(x0.astype(np.int64) + 1, 0, w - 1)
    y0i = np.clip(y0.astype(np.int64), 0, h - 1)
    y1i = np.clip(y0.astype(np.int64) + 1, 0, h - 1)
    top = alpha[y0i, x0i] * (1.0 - fx) + alpha[y0i, x1i] * fx
    bottom = alpha[y1i, x0i] * (1.0 - fx) + alpha[y1i, x1i] * fx
    return top * (1.0 - fy) + bottom * fy


class PaintLayer:
    """RGBA-растр фиксированного размера, адресуемый через UV меша.

    Буфер - uint8 (resolution, resolution, 4), строка 0 соответствует v = 0.
    Все операции до initialize() ничего не делают.
    """

    def __init__(
            self,
            material: Optional[Material] = None,
            texture_slot: str = PAINT_TEXTURE_SLOT,
            prop_remover: Optional[PropRemover] = None,
            remove_props_while_painting: bool = True,
            prop_removal_radius: float = 1.0,
    ):
        self.material = material
        self.texture_slot = texture_slot
        self.prop_remover = prop_remover
        self.remove_props_while_painting = remove_props_while_painting
        self.prop_removal_radius = prop_removal_radius
        self.pixels: Optional[np.ndarray] = None
        self.state = PaintState.UNINITIALIZED

    @property
    def is_initialized(self) -> bool:
        return self.state is not PaintState.UNINITIALIZED and self.pixels is not None

    @property
    def resolution(self) -> int:
        return 0 if self.pixels is None else int(self.pixels.shape[1])

    # --- Жизненный цикл ---
    def initialize(self, resolution: int = DEFAULT_PAINT_RESOLUTION) -> None:
        resolution = int(min(max(1, resolution), MAX_PAINT_RESOLUTION))
        existing = None
        # о пропавшем слоте предупреждает _update_material()
        if self.material is not None and self.material.has_property(self.texture_slot):
            existing = self.material.get_texture(self.texture_slot)

        self.pixels = np.zeros((resolution, resolution, 4), dtype=np.uint8)
        self.state = PaintState.INITIALIZED
        if existing is not None:
            # старая покраска переживает смену разрешения
            self.pixels[...] = _resample(_to_rgba8(existing), resolution, resolution)
            logger.debug("Existing paint texture %s resampled to %d", existing.shape[:2], resolution)
        self._update_material()
        logger.info("Paint layer initialized at %dx%d", resolution, resolution)

    def clear(self) -> None:
        if not self.is_initialized:
            return
        self.pixels.fill(0)
        self._update_material()

    def begin_stroke(self) -> None:
        if self.is_initialized:
            self.state = PaintState.PAINTING

    def end_stroke(self) -> None:
        if self.state is PaintState.PAINTING:
            self.state = PaintState.INITIALIZED

    def _update_material(self) -> None:
        if self.material is None or self.pixels is None:
            return
        if not self.material.has_property(self.texture_slot):
            logger.warning(
                "Material does not have '%s' texture slot; paint will not be visible.",
                self.texture_slot,
            )
            return
        self.material.set_texture(self.texture_slot, self.pixels)

    # --- Кисть ---
    def apply_brush(
            self,
            world_position: Sequence[float],
            uv: Sequence[float],
            color,
            radius: float,
            strength: float = 1.0,
            opacity: float = 1.0,
            brush_texture: Union[np.ndarray, Image.Image, None] = None,
    ) -> int:
        """Штамп кисти в точке uv. Возвращает число затронутых пикселей."""
        if not self.is_initialized:
            return 0
        height, width = self.pixels.shape[:2]
        cx = int(np.floor(float(uv[0]) * width))
        cy = int(np.floor(float(uv[1]) * height))
        r = max(0, int(np.floor(float(radius) * width / BRUSH_RADIUS_SCALE)))

        # квадрат кисти обрезается по растру до построения сетки
        x_offs = np.arange(max(-r, -cx), min(r, width - 1 - cx) + 1)
        y_offs = np.arange(max(-r, -cy), min(r, height - 1 - cy) + 1)
        if x_offs.size == 0 or y_offs.size == 0:
            return 0
        dy, dx = np.meshgrid(y_offs, x_offs, indexing="ij")
        px = cx + dx
        py = cy + dy
        dist = np.hypot(dx, dy) / r if r > 0 else np.zeros(dx.shape)
        inside = dist <= 1.0
        if not np.any(inside):
            return 0

        if brush_texture is not None:
            brush = _to_rgba8(brush_texture)
            span = float(2 * r) if r > 0 else 1.0
            factor = sample_alpha_bilinear(brush, (dx + r) / span, (dy + r) / span)
        else:
            factor = 1.0 - _smoothstep(0.0, 1.0, dist)

        blend = np.clip(factor * float(strength) * float(opacity), 0.0, 1.0)[inside][:, None]
        target = np.asarray(parse_color(color), dtype=np.float64) * COLOR_CHANNEL_MAX
        ys, xs = py[inside], px[inside]
        current = self.pixels[ys, xs].astype(np.float64)
        mixed = current + (target - current) * blend
        self.pixels[ys, xs] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)

        self._update_material()
        if self.remove_props_while_painting and self.prop_remover is not None:
            self.prop_remover(world_position, float(radius) * self.prop_removal_radius)
        return int(ys.size)

    # --- Сохранение / загрузка ---
    def save(self, path: Union[str, Path]) -> Optional[Path]:
        """PNG без потерь. До инициализации ничего не пишет."""
        if not self.is_initialized:
            return None
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        img = Image.fromarray(np.ascontiguousarray(self.pixels), "RGBA").transpose(Image.FLIP_TOP_BOTTOM)
        img.save(tmp_path, format="PNG")
        os.replace(tmp_path, path)
        logger.info("Paint map saved to: %s", path)
        return path

    def load(self, path: Union[str, Path]) -> None:
        """Читает ранее сохранённую карту; при другом размере пересэмплирует."""
        with Image.open(path) as f:
            data = _to_rgba8(f)
        if not self.is_initialized:
            side = max(data.shape[0], data.shape[1])
            self.pixels = np.zeros((side, side, 4), dtype=np.uint8)
            self.state = PaintState.INITIALIZED
        height, width = self.pixels.shape[:2]
        self.pixels[...] = _resample(data, width, height)
        self._update_material()
        logger.info("Paint map loaded from: %s", path)
