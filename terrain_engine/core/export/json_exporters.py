# ==============================================================================
# Файл: terrain_engine/core/export/json_exporters.py
# Назначение: Запись размещённых объектов и метаданных генерации в JSON.
# ==============================================================================
from __future__ import annotations
import dataclasses
import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable

import numpy as np

from ...world.instances import PlacedInstance


def _ensure_path_exists(path: str) -> None:
    """Убеждается, что директория для файла существует."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def _atomic_write_json(path: str, data: Any) -> None:
    """Атомарно записывает данные в JSON файл для предотвращения битых файлов."""
    _ensure_path_exists(path)
    tmp_path = path + ".tmp"

    def default_serializer(o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return float(o)
        if isinstance(o, np.ndarray):
            return o.tolist()
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2, default=default_serializer)
    os.replace(tmp_path, path)


def write_instances_json(path: str, instances: Iterable[PlacedInstance]) -> None:
    """Записывает список размещённых объектов."""
    _atomic_write_json(path, [inst.to_dict() for inst in instances])


def write_terrain_meta_json(path: str, meta: Dict[str, Any]) -> None:
    """Записывает пресет, фактический сид и сводку генерации."""
    data = {"version": "terrain_meta_v1"}
    data.update(meta)
    _atomic_write_json(path, data)
