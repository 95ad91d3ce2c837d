# ========================
# file: terrain_engine/core/preset/model.py
# ========================
from __future__ import annotations
import random
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Tuple

from ..curves import ColorRamp, HeightCurve, RGBA
from ..constants import DENSITY_SCALE


@dataclass(frozen=True)
class ValueRange:
    minimum: float = 0.0
    maximum: float = 0.0

    def random_value(self, rng: random.Random) -> float:
        return rng.uniform(self.minimum, self.maximum)

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


@dataclass(frozen=True)
class PropRule:
    """Правило расстановки одного вида пропов (деревья, камни, ...)."""

    name: str
    density: float
    template: str
    height: ValueRange = ValueRange(0.0, 1.0)
    size: ValueRange = ValueRange(1.0, 1.0)
    rotation: ValueRange = ValueRange(0.0, 0.0)

    @property
    def spawn_probability(self) -> float:
        return self.density / DENSITY_SCALE

    def random_rotation(self, rng: random.Random) -> Tuple[float, float, float]:
        # Одно значение на все три оси (Euler)
        angle = self.rotation.random_value(rng)
        return (angle, angle, angle)

    def random_scale(self, rng: random.Random) -> Tuple[float, float, float]:
        s = self.size.random_value(rng)
        return (s, s, s)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MeshSettings:
    width: int
    depth: int
    size_multiplier: float


@dataclass(frozen=True)
class NoiseSettings:
    type: str
    octaves: int
    scale: float
    persistence: float
    lacunarity: float


@dataclass(frozen=True)
class HeightSettings:
    multiplier: float
    curve: HeightCurve
    color_ramp: ColorRamp


@dataclass(frozen=True)
class FalloffSettings:
    enabled: bool
    start: float
    end: float


@dataclass(frozen=True)
class SeedSettings:
    random: bool
    value: int
    offset: Tuple[float, float]


@dataclass(frozen=True)
class PlacementSettings:
    height_props: Tuple[PropRule, ...]
    texture_props: Tuple[PropRule, ...]
    color_range: float
    selected_colors: Tuple[RGBA, ...]
    texture_placement: str


@dataclass(frozen=True)
class PaintSettings:
    resolution: int
    show_preview: bool
    remove_props_while_painting: bool
    prop_removal_radius: float
    texture_slot: str


@dataclass(frozen=True)
class TerrainPreset:
    id: str
    mesh: MeshSettings
    noise: NoiseSettings
    height: HeightSettings
    falloff: FalloffSettings
    seed: SeedSettings
    placement: PlacementSettings
    paint: PaintSettings

    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mesh": asdict(self.mesh),
            "noise": asdict(self.noise),
            "height": {
                "multiplier": self.height.multiplier,
                "curve": self.height.curve.to_list(),
                "color_ramp": self.height.color_ramp.to_dict(),
            },
            "falloff": asdict(self.falloff),
            "seed": {
                "random": self.seed.random,
                "value": self.seed.value,
                "offset": list(self.seed.offset),
            },
            "placement": {
                "height_props": [p.to_dict() for p in self.placement.height_props],
                "texture_props": [p.to_dict() for p in self.placement.texture_props],
                "color_range": self.placement.color_range,
                "selected_colors": [list(c) for c in self.placement.selected_colors],
                "texture_placement": self.placement.texture_placement,
            },
            "paint": asdict(self.paint),
        }
