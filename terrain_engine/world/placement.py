# ==============================================================================
# Файл: terrain_engine/world/placement.py
# Назначение: Расстановка декоративных объектов по высоте и по цветовой карте.
# ==============================================================================
from __future__ import annotations
import logging
import random
from typing import Iterable, Sequence, Tuple

import numpy as np

from ..algorithms.terrain.mesh import Surface
from ..algorithms.terrain.transform import SurfaceTransform
from ..core.constants import (
    DENSITY_SCALE,
    HEIGHT_PROPS_GROUP,
    PLACEMENT_INNER,
    PLACEMENT_OUTER,
    TEXTURE_PROPS_GROUP,
)
from ..core.curves import HeightCurve, color_to_rgba8
from ..core.preset.model import PropRule
from .color_map import color_match_mask, edge_mask
from .instances import InstanceRegistry, InstanceSpawner, remove_within

logger = logging.getLogger(__name__)


class PlacementEngine:
    """Стохастическая расстановка по правилам PropRule.

    Случайные числа берутся только из собственного генератора `rng`, поэтому
    одинаковый сид даёт одинаковую расстановку. Если задан внешний `spawner`,
    объекты создаются через него, а реестр лишь запоминает хэндлы.
    """

    def __init__(
            self,
            rng: random.Random | None = None,
            registry: InstanceRegistry | None = None,
            spawner: InstanceSpawner | None = None,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.registry = registry if registry is not None else InstanceRegistry()
        self.registry.ensure_group(HEIGHT_PROPS_GROUP)
        self.registry.ensure_group(TEXTURE_PROPS_GROUP)
        self.spawner = spawner

    def should_spawn(self, density: float) -> bool:
        return self.rng.random() <= density / DENSITY_SCALE

    def _spawn(self, rule: PropRule, position, group: str) -> int:
        # порядок выборки фиксирован: сначала поворот, потом масштаб
        rotation = rule.random_rotation(self.rng)
        scale = rule.random_scale(self.rng)
        position = tuple(float(v) for v in position)
        if self.spawner is None:
            return self.registry.spawn(rule.template, position, rotation, scale, group)
        handle = self.spawner.spawn(rule.template, position, rotation, scale, group)
        return self.registry.record(handle, rule.template, position, rotation, scale, group)

    # --- Расстановка по высоте ---
    def place_by_height(
            self,
            heightfield: np.ndarray,
            surface: Surface,
            transform: SurfaceTransform,
            rules: Sequence[PropRule],
    ) -> int:
        """Клетки (x, z) с x < width, z < depth. Полоса высот сравнивается с картой ДО кривой,
        а позиция берётся из вершины меша (после кривой)."""
        if not rules:
            return 0
        spawned = 0
        for z in range(surface.depth):
            for x in range(surface.width):
                h = float(heightfield[z, x])
                for rule in rules:
                    if rule.height.contains(h) and self.should_spawn(rule.density):
                        position = transform.local_to_world(surface.vertex(x, z))
                        self._spawn(rule, position, HEIGHT_PROPS_GROUP)
                        spawned += 1
        logger.info("Height-based placement: %d instances spawned", spawned)
        return spawned

    # --- Расстановка по текстуре ---
    def world_height_at(
            self,
            heightfield: np.ndarray,
            transform: SurfaceTransform,
            height_curve: HeightCurve,
            height_multiplier: float,
            wx: float,
            wz: float,
    ) -> float:
        xi, zi = transform.centered_to_cell(wx, wz)
        base = float(heightfield[int(zi), int(xi)])
        return float(height_curve.evaluate(base)) * height_multiplier * transform.size_multiplier

    def place_by_texture(
            self,
            pixels: np.ndarray,
            heightfield: np.ndarray,
            transform: SurfaceTransform,
            height_curve: HeightCurve,
            height_multiplier: float,
            rules: Sequence[PropRule],
            selected_colors: Iterable,
            tolerance: float,
            mode: str = PLACEMENT_INNER,
    ) -> int:
        """pixels - RGBA uint8 (H, W, 4) с началом в левом нижнем углу."""
        if not rules:
            return 0
        if mode not in (PLACEMENT_INNER, PLACEMENT_OUTER):
            logger.warning("Unknown texture placement mode '%s', nothing placed.", mode)
            return 0
        tex_h, tex_w = pixels.shape[:2]
        colors = list(selected_colors)
        # Края не зависят от выбранного цвета: считаем один раз на весь проход
        edges = edge_mask(pixels, tolerance) if mode == PLACEMENT_OUTER else None

        spawned = 0
        for color in colors:
            if mode == PLACEMENT_INNER:
                mask = color_match_mask(pixels, color_to_rgba8(color), tolerance)
            else:
                mask = edges
            spawned += self._spawn_on_mask(
                mask, tex_w, tex_h, heightfield, transform, height_curve, height_multiplier, rules
            )
        logger.info(
            "Texture-based placement (%s, %d colors, %dx%d raster): %d instances spawned",
            mode, len(colors), tex_w, tex_h, spawned,
        )
        return spawned

    def _spawn_on_mask(
            self,
            mask: np.ndarray,
            tex_w: int,
            tex_h: int,
            heightfield: np.ndarray,
            transform: SurfaceTransform,
            height_curve: HeightCurve,
            height_multiplier: float,
            rules: Sequence[PropRule],
    ) -> int:
        origin = np.asarray(transform.origin, dtype=np.float64)
        spawned = 0
        # строка за строкой (y внешний, x внутренний)
        ys, xs = np.nonzero(mask)
        for y, x in zip(ys.tolist(), xs.tolist()):
            for rule in rules:
                if not self.should_spawn(rule.density):
                    continue
                wx, wz = transform.texture_to_centered(x, y, tex_w, tex_h)
                wy = self.world_height_at(
                    heightfield, transform, height_curve, height_multiplier, float(wx), float(wz)
                )
                position = np.array([float(wx), wy, float(wz)]) + origin
                self._spawn(rule, position, TEXTURE_PROPS_GROUP)
                spawned += 1
        return spawned

    # --- Очистка ---
    def _clear(self, group_id: str) -> int:
        removed = self.registry.clear_group(group_id)
        if self.spawner is not None:
            for handle in removed:
                self.spawner.destroy(handle)
        return len(removed)

    def clear_height_props(self) -> int:
        return self._clear(HEIGHT_PROPS_GROUP)

    def clear_texture_props(self) -> int:
        return self._clear(TEXTURE_PROPS_GROUP)

    def remove_props_in_area(self, position: Tuple[float, float, float], radius: float) -> int:
        """Удаляет объекты обеих групп в горизонтальном радиусе от position."""
        spawner = self.spawner if self.spawner is not None else self.registry
        removed = remove_within(
            spawner, self.registry, position, radius, (HEIGHT_PROPS_GROUP, TEXTURE_PROPS_GROUP)
        )
        if removed:
            logger.debug("Removed %d props within %.3f of (%.2f, %.2f)", removed, radius, position[0], position[2])
        return removed
