# ========================
# file: terrain_engine/core/preset/registry.py
# ========================
from __future__ import annotations
from typing import List
import os
from .errors import NotFoundError


# Встроенные пресеты: `terrain_engine/data/presets/<id>.json`
_PRESET_FOLDERS: List[str] = [
    os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
        "data", "presets"
    ),
]


def list_preset_ids() -> List[str]:
    """Id всех пресетов во всех папках поиска (вложенные папки через '/')."""
    ids = set()
    for root in _PRESET_FOLDERS:
        if not os.path.isdir(root):
            continue
        for dirpath, _, filenames in os.walk(root):
            for name in filenames:
                if not name.endswith(".json"):
                    continue
                rel = os.path.relpath(os.path.join(dirpath, name), root)
                ids.add(rel[:-len(".json")].replace(os.sep, "/"))
    return sorted(ids)


def resolve_preset_path(preset_id: str) -> str:
    """'island' -> путь к island.json в первой папке, где он нашёлся."""
    rel = preset_id.replace("\\", "/").strip("/") + ".json"
    for root in _PRESET_FOLDERS:
        candidate = os.path.join(root, rel)
        if os.path.isfile(candidate):
            return candidate
    known = ", ".join(list_preset_ids()) or "none"
    raise NotFoundError(f"Preset id '{preset_id}' not found (available: {known})")


def add_search_folder(path: str) -> None:
    """Подключает пользовательскую папку пресетов после встроенных."""
    path = os.path.abspath(path)
    if path not in _PRESET_FOLDERS:
        _PRESET_FOLDERS.append(path)
