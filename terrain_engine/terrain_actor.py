# ==============================================================================
# Файл: terrain_engine/terrain_actor.py
# Назначение: Владелец ландшафта: связывает шум, меш, расстановку и покраску.
# ==============================================================================
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np
from PIL import UnidentifiedImageError

from .algorithms.terrain import FalloffField, MeshSynthesizer, NoiseField, Surface, SurfaceTransform
from .core.constants import HEIGHT_PROPS_GROUP, TEXTURE_PROPS_GROUP
from .core.export import (
    write_heightmap_png16,
    write_instances_json,
    write_surface_npz,
    write_surface_preview,
    write_terrain_meta_json,
)
from .core.preset import TerrainPreset, load_preset
from .core.rng import mix_seed
from .paint.material import Material, TerrainMaterial
from .paint.paint_layer import PaintLayer
from .paint.stroke import BrushStroke
from .world.color_map import load_color_map
from .world.instances import InstanceRegistry, InstanceSpawner
from .world.placement import PlacementEngine

logger = logging.getLogger(__name__)

# соль для потока случайных чисел расстановки
_PLACEMENT_SALT = 0x5EED


class TerrainActor:
    """Один объект ландшафта: карта высот, поверхность, группы пропов и слой покраски.

    Все вызовы синхронные. Меш должен быть построен до расстановки по высоте;
    расстановка до generate_map() - залогированный no-op.
    """

    def __init__(
            self,
            preset: Union[TerrainPreset, str, Dict[str, Any], None] = None,
            overrides: Mapping[str, Any] | None = None,
            material: Optional[Material] = None,
            spawner: Optional[InstanceSpawner] = None,
            color_map=None,
            origin: Sequence[float] = (0.0, 0.0, 0.0),
    ):
        if isinstance(preset, TerrainPreset) and not overrides:
            self.preset = preset
        else:
            source = preset.raw if isinstance(preset, TerrainPreset) else preset
            self.preset = load_preset(source, overrides)

        self.origin = tuple(float(v) for v in origin)
        self.material = material if material is not None else TerrainMaterial([self.preset.paint.texture_slot])
        self.color_map = color_map

        self.heightfield: Optional[np.ndarray] = None
        self.surface: Optional[Surface] = None
        self.seed: Optional[int] = None

        self.registry = InstanceRegistry((HEIGHT_PROPS_GROUP, TEXTURE_PROPS_GROUP))
        self.placement = PlacementEngine(registry=self.registry, spawner=spawner)

        paint = self.preset.paint
        self.paint_layer = PaintLayer(
            material=self.material,
            texture_slot=paint.texture_slot,
            prop_remover=self.placement.remove_props_in_area,
            remove_props_while_painting=paint.remove_props_while_painting,
            prop_removal_radius=paint.prop_removal_radius,
        )

    @property
    def transform(self) -> SurfaceTransform:
        mesh = self.preset.mesh
        return SurfaceTransform(mesh.width, mesh.depth, mesh.size_multiplier, self.origin)

    # --- Генерация ---
    def start(self) -> None:
        """Стартовая последовательность: карта, пропы по высоте, по текстуре, покраска."""
        self.generate_map()
        self.generate_height_props()
        self.generate_texture_props()
        self.initialize_paint_map()

    def generate_map(self) -> Surface:
        p = self.preset
        noise = NoiseField(p.noise.type)
        heights = noise.generate(
            p.mesh.width,
            p.mesh.depth,
            p.noise.octaves,
            p.noise.scale,
            p.noise.persistence,
            p.noise.lacunarity,
            p.seed.value,
            p.seed.offset,
            random_seed=p.seed.random,
        )
        self.seed = noise.last_seed

        if p.falloff.enabled:
            mask = FalloffField.generate(p.mesh.width, p.mesh.depth, p.falloff.start, p.falloff.end)
            FalloffField.combine(heights, mask)

        self.heightfield = heights
        # расстановка использует свой поток, производный от фактического сида
        self.placement.rng.seed(mix_seed(self.seed, _PLACEMENT_SALT))
        logger.info(
            "Terrain '%s' generated: grid %dx%d, seed=%d, falloff=%s",
            p.id, p.mesh.width, p.mesh.depth, self.seed, p.falloff.enabled,
        )
        return self.rebuild_surface()

    def rebuild_surface(self) -> Optional[Surface]:
        """Пересобирает меш из текущей карты высот (для потребителя-рендера)."""
        if self.heightfield is None:
            logger.warning("rebuild_surface() called before generate_map(), skipping.")
            return None
        h = self.preset.height
        self.surface = MeshSynthesizer.build(self.heightfield, h.curve, h.multiplier, h.color_ramp)
        return self.surface

    # --- Пропы ---
    def generate_height_props(self) -> int:
        if self.heightfield is None or self.surface is None:
            logger.warning("Height props requested before the map was generated, skipping.")
            return 0
        return self.placement.place_by_height(
            self.heightfield, self.surface, self.transform, self.preset.placement.height_props
        )

    def clear_height_props(self) -> int:
        return self.placement.clear_height_props()

    def generate_texture_props(self, color_map=None) -> int:
        if color_map is not None:
            self.color_map = color_map
        if self.heightfield is None:
            logger.warning("Texture props requested before the map was generated, skipping.")
            return 0
        if self.color_map is None:
            logger.warning("No color map assigned, texture-based placement skipped.")
            return 0
        pl = self.preset.placement
        if not pl.selected_colors:
            logger.info("No selected colors, texture-based placement skipped.")
            return 0
        try:
            pixels = load_color_map(self.color_map)
        except (OSError, UnidentifiedImageError) as e:
            logger.warning("Color map could not be read (%s), texture-based placement skipped.", e)
            return 0
        return self.placement.place_by_texture(
            pixels,
            self.heightfield,
            self.transform,
            self.preset.height.curve,
            self.preset.height.multiplier,
            pl.texture_props,
            pl.selected_colors,
            pl.color_range,
            pl.texture_placement,
        )

    def clear_texture_props(self) -> int:
        return self.placement.clear_texture_props()

    def remove_props_in_brush_area(self, world_position: Sequence[float], radius: float) -> int:
        return self.placement.remove_props_in_area(world_position, radius)

    # --- Покраска ---
    def initialize_paint_map(self) -> None:
        self.paint_layer.initialize(self.preset.paint.resolution)

    def clear_paint_map(self) -> None:
        self.paint_layer.clear()

    def apply_paint(
            self,
            world_position: Sequence[float],
            uv: Sequence[float],
            color,
            radius: float,
            strength: float = 1.0,
            opacity: float = 1.0,
            brush_texture=None,
    ) -> int:
        return self.paint_layer.apply_brush(world_position, uv, color, radius, strength, opacity, brush_texture)

    def begin_stroke(self, color, radius: float, strength: float = 1.0, opacity: float = 1.0,
                     brush_texture=None) -> BrushStroke:
        return BrushStroke(self.paint_layer, color, radius, strength, opacity, brush_texture)

    def save_paint_map(self, path: Union[str, Path]) -> Optional[Path]:
        return self.paint_layer.save(path)

    # --- Экспорт ---
    def export(self, out_dir: Union[str, Path]) -> Dict[str, str]:
        """Пишет карту высот, меш, пропы, превью и (если есть) покраску. Возвращает пути."""
        out = Path(out_dir)
        written: Dict[str, str] = {}
        if self.heightfield is None or self.surface is None:
            logger.warning("Nothing to export: map was not generated.")
            return written

        written["heightmap"] = str(out / "heightmap.png")
        write_heightmap_png16(written["heightmap"], self.heightfield)
        written["surface"] = str(out / "surface.npz")
        write_surface_npz(written["surface"], self.surface, self.heightfield)
        written["preview"] = str(out / "preview.png")
        write_surface_preview(written["preview"], self.surface)
        written["objects"] = str(out / "objects.json")
        write_instances_json(written["objects"], self.registry.instances.values())
        if self.paint_layer.is_initialized:
            written["paint"] = str(self.paint_layer.save(out / "paint_map.png"))

        written["meta"] = str(out / "terrain.json")
        write_terrain_meta_json(written["meta"], {
            "seed": self.seed,
            "preset": self.preset.to_dict(),
            "instances": {
                HEIGHT_PROPS_GROUP: self.registry.count(HEIGHT_PROPS_GROUP),
                TEXTURE_PROPS_GROUP: self.registry.count(TEXTURE_PROPS_GROUP),
            },
            "files": {k: Path(v).name for k, v in written.items()},
        })
        logger.info("Terrain exported to %s (%d files)", out, len(written))
        return written
