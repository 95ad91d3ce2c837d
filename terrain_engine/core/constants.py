# ==============================================================================
# Файл: terrain_engine/core/constants.py
# Назначение: Общие константы генератора ландшафта.
# ==============================================================================
from __future__ import annotations

# --- Сетка ---
MAX_GRID_SIZE = 255
MIN_SIZE_MULTIPLIER = 1.0
MAX_SIZE_MULTIPLIER = 10.0

# --- Шум ---
MIN_OCTAVES = 1
MAX_OCTAVES = 10
MIN_NOISE_SCALE = 1e-4
OCTAVE_OFFSET_RANGE = 100_000      # смещения октав берутся из [-R, R)
OFFSET_DIVISOR = 10.0              # пользовательский offset делится на 10
RANDOM_SEED_RANGE = 100_000

NOISE_TYPE_PERLIN = "perlin"
NOISE_TYPE_SIMPLEX = "simplex"
NOISE_TYPES = (NOISE_TYPE_PERLIN, NOISE_TYPE_SIMPLEX)

# --- Расстановка ---
# Слайдер плотности [0..1] соответствует вероятности спавна не более 10% на клетку.
DENSITY_SCALE = 10.0
COLOR_CHANNEL_MAX = 255.0
DEFAULT_COLOR_RANGE = 20.0

PLACEMENT_INNER = "inner"
PLACEMENT_OUTER = "outer"
PLACEMENT_TYPES = (PLACEMENT_INNER, PLACEMENT_OUTER)

HEIGHT_PROPS_GROUP = "height_props"
TEXTURE_PROPS_GROUP = "texture_props"

# 4-связные соседи (dx, dy): слева, справа, снизу, сверху
NEIGHBOR_OFFSETS_4 = ((-1, 0), (1, 0), (0, -1), (0, 1))

# --- Покраска ---
PAINT_TEXTURE_SLOT = "_PaintMap"
DEFAULT_PAINT_RESOLUTION = 128
MAX_PAINT_RESOLUTION = 4096
# Радиус кисти в пикселях = radius * resolution / BRUSH_RADIUS_SCALE
BRUSH_RADIUS_SCALE = 10.0
TRANSPARENT_RGBA = (0, 0, 0, 0)
