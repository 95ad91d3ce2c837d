# ==============================================================================
# Файл: terrain_engine/world/instances.py
# Назначение: Реестр размещённых объектов (арена по группам расстановки).
# ==============================================================================
from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Protocol, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]


@dataclass
class PlacedInstance:
    """Структура для хранения информации о размещённом в мире объекте."""

    handle: int
    group_id: str
    template: str
    position: Vec3
    rotation: Vec3
    scale: Vec3

    def to_dict(self):
        return {
            "handle": self.handle,
            "group": self.group_id,
            "template": self.template,
            "position": [round(float(v), 4) for v in self.position],
            "rotation": [round(float(v), 2) for v in self.rotation],
            "scale": [round(float(v), 4) for v in self.scale],
        }


@dataclass
class PlacementGroup:
    """Родительская область для объектов одного прохода расстановки."""

    id: str
    handles: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.handles)


class InstanceSpawner(Protocol):
    """Внешний коллаборатор: создаёт и уничтожает экземпляры шаблонов."""

    def spawn(self, template: str, position: Vec3, rotation: Vec3, scale: Vec3, group: str) -> int: ...

    def destroy(self, handle: int) -> None: ...


class InstanceRegistry:
    """Арена экземпляров. Экземпляр хранит только id группы, группа - список хэндлов.

    Реализует InstanceSpawner, поэтому годится и как коллаборатор по умолчанию
    (в тестах и при экспорте без движка).
    """

    def __init__(self, group_ids: Iterable[str] = ()):
        self._handles = itertools.count(1)
        self.instances: Dict[int, PlacedInstance] = {}
        self.groups: Dict[str, PlacementGroup] = {}
        for gid in group_ids:
            self.ensure_group(gid)

    def ensure_group(self, group_id: str) -> PlacementGroup:
        group = self.groups.get(group_id)
        if group is None:
            group = PlacementGroup(id=group_id)
            self.groups[group_id] = group
        return group

    # --- InstanceSpawner ---
    def spawn(self, template: str, position: Vec3, rotation: Vec3, scale: Vec3, group: str) -> int:
        return self.record(next(self._handles), template, position, rotation, scale, group)

    def record(
            self, handle: int, template: str, position: Vec3, rotation: Vec3, scale: Vec3, group: str
    ) -> int:
        """Регистрирует объект, созданный внешним spawner-ом, под его хэндлом."""
        self.instances[handle] = PlacedInstance(
            handle=handle,
            group_id=group,
            template=template,
            position=tuple(float(v) for v in position),
            rotation=tuple(float(v) for v in rotation),
            scale=tuple(float(v) for v in scale),
        )
        self.ensure_group(group).handles.append(handle)
        return handle

    def destroy(self, handle: int) -> None:
        inst = self.instances.pop(handle, None)
        if inst is None:
            return
        group = self.groups.get(inst.group_id)
        if group is not None:
            group.handles.remove(handle)

    # --- Запросы ---
    def group_instances(self, group_id: str) -> List[PlacedInstance]:
        group = self.groups.get(group_id)
        if group is None:
            return []
        return [self.instances[h] for h in group.handles]

    def count(self, group_id: str | None = None) -> int:
        if group_id is None:
            return len(self.instances)
        group = self.groups.get(group_id)
        return len(group) if group is not None else 0

    def clear_group(self, group_id: str) -> List[int]:
        """Убирает все объекты группы из арены; сама группа остаётся.

        Возвращает хэндлы удалённых объектов.
        """
        group = self.groups.get(group_id)
        if group is None:
            return []
        removed = list(group.handles)
        for handle in removed:
            self.instances.pop(handle, None)
        group.handles.clear()
        logger.debug("Cleared %d instances from group '%s'", len(removed), group_id)
        return removed

    def find_within(
            self, position: Vec3, radius: float, group_ids: Iterable[str] | None = None
    ) -> List[int]:
        """Хэндлы объектов в горизонтальном радиусе (Y не учитывается)."""
        ids = list(group_ids) if group_ids is not None else list(self.groups)
        handles = [h for gid in ids if gid in self.groups for h in self.groups[gid].handles]
        if not handles:
            return []
        pts = np.array([self.instances[h].position for h in handles], dtype=np.float64)
        dx = pts[:, 0] - float(position[0])
        dz = pts[:, 2] - float(position[2])
        inside = np.hypot(dx, dz) <= float(radius)
        return [h for h, ok in zip(handles, inside) if ok]


def remove_within(
        spawner: InstanceSpawner,
        registry: InstanceRegistry,
        position: Vec3,
        radius: float,
        group_ids: Iterable[str] | None = None,
) -> int:
    """Уничтожает через spawner все объекты в горизонтальном радиусе."""
    handles = registry.find_within(position, radius, group_ids)
    for handle in handles:
        spawner.destroy(handle)
        if spawner is not registry:
            registry.destroy(handle)
    return len(handles)
