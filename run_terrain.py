# run_terrain.py
# Использование: python run_terrain.py <preset-id-or-path> [out_dir] [color_map.png]
import sys
import logging
from pathlib import Path

from terrain_engine import TerrainActor, load_preset
from terrain_engine.core.preset import PresetError, list_preset_ids
from terrain_engine.setup_logging import setup_logging

logger = logging.getLogger(__name__)


def run_terrain(argv) -> int:
    if not argv:
        print("usage: run_terrain.py <preset-id-or-path> [out_dir] [color_map.png]")
        print("built-in presets: " + (", ".join(list_preset_ids()) or "none"))
        return 2

    source = argv[0]
    out_dir = Path(argv[1]) if len(argv) > 1 else Path("artifacts") / "terrain"
    color_map = argv[2] if len(argv) > 2 else None

    setup_logging(out_dir / "logs")
    try:
        preset = load_preset(source)
    except PresetError as e:
        logger.error("Cannot load preset '%s': %s", source, e)
        return 1

    actor = TerrainActor(preset, color_map=color_map)
    actor.start()
    written = actor.export(out_dir)
    for kind, path in written.items():
        logger.info("  %-10s %s", kind, path)
    return 0


if __name__ == "__main__":
    logger.info("--- Запуск генератора ландшафта ---")
    sys.exit(run_terrain(sys.argv[1:]))
