# ==============================================================================
# Файл: tests/test_placement.py
# Назначение: Юнит-тесты расстановки пропов и реестра экземпляров.
# ==============================================================================
import unittest
import random
import numpy as np

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from terrain_engine.algorithms.terrain import MeshSynthesizer, SurfaceTransform
from terrain_engine.core.constants import HEIGHT_PROPS_GROUP, TEXTURE_PROPS_GROUP
from terrain_engine.core.curves import ColorRamp, HeightCurve
from terrain_engine.core.preset import PropRule, ValueRange
from terrain_engine.world.color_map import color_match_mask, edge_mask, load_color_map
from terrain_engine.world.instances import InstanceRegistry
from terrain_engine.world.placement import PlacementEngine


class RecordingSpawner:
    """Внешний spawner для тестов: запоминает вызовы."""

    def __init__(self):
        self.alive = {}
        self.next_handle = 1000

    def spawn(self, template, position, rotation, scale, group):
        handle = self.next_handle
        self.next_handle += 1
        self.alive[handle] = (template, position, group)
        return handle

    def destroy(self, handle):
        del self.alive[handle]


def _terrain(width=6, depth=4, size=2.0, multiplier=3.0, curve=None):
    zz, xx = np.mgrid[0:depth + 1, 0:width + 1]
    hf = (xx + zz) / float(width + depth)
    curve = curve or HeightCurve()
    surface = MeshSynthesizer.build(hf, curve, multiplier, ColorRamp())
    return hf, surface, SurfaceTransform(width, depth, size), curve


def _uniform_raster(h, w, rgb):
    pixels = np.zeros((h, w, 4), dtype=np.uint8)
    pixels[..., :3] = rgb
    pixels[..., 3] = 255
    return pixels


class TestHeightPlacement(unittest.TestCase):

    def test_saturated_density_fills_every_cell(self):
        """Плотность 10 и полоса [0, 1]: ровно width * depth объектов на высоте вершин."""
        hf, surface, transform, _ = _terrain()
        engine = PlacementEngine(random.Random(1))
        rule = PropRule("tree", 10.0, "props/tree", height=ValueRange(0.0, 1.0))
        spawned = engine.place_by_height(hf, surface, transform, [rule])

        self.assertEqual(spawned, 6 * 4)
        instances = engine.registry.group_instances(HEIGHT_PROPS_GROUP)
        self.assertEqual(len(instances), 6 * 4)
        expected = {
            tuple(np.round(transform.local_to_world(surface.vertex(x, z)), 9))
            for z in range(4) for x in range(6)
        }
        got = {tuple(np.round(inst.position, 9)) for inst in instances}
        self.assertEqual(got, expected)

    def test_height_band_uses_raw_heightfield(self):
        # кривая поднимает всё до 1, но полоса сравнивается с картой до кривой
        curve = HeightCurve.from_keys([[0.0, 1.0], [1.0, 1.0]])
        hf, surface, transform, _ = _terrain(curve=curve)
        engine = PlacementEngine(random.Random(1))
        rule = PropRule("low", 10.0, "props/low", height=ValueRange(0.0, 0.25))
        engine.place_by_height(hf, surface, transform, [rule])
        for inst in engine.registry.group_instances(HEIGHT_PROPS_GROUP):
            xi = int(round(inst.position[0] / transform.size_multiplier + transform.width / 2))
            zi = int(round(inst.position[2] / transform.size_multiplier + transform.depth / 2))
            self.assertLessEqual(hf[zi, xi], 0.25)
            self.assertAlmostEqual(inst.position[1], 3.0 * transform.size_multiplier)
        self.assertEqual(engine.registry.count(HEIGHT_PROPS_GROUP), int(np.sum(hf[:-1, :-1] <= 0.25)))

    def test_band_outside_heightfield_spawns_nothing(self):
        hf, surface, transform, _ = _terrain()
        engine = PlacementEngine(random.Random(1))
        rule = PropRule("none", 10.0, "x", height=ValueRange(2.0, 3.0))
        self.assertEqual(engine.place_by_height(hf, surface, transform, [rule]), 0)

    def test_rotation_and_scale_ranges(self):
        hf, surface, transform, _ = _terrain()
        engine = PlacementEngine(random.Random(3))
        rule = PropRule(
            "rock", 10.0, "props/rock",
            size=ValueRange(0.5, 1.5), rotation=ValueRange(10.0, 20.0),
        )
        engine.place_by_height(hf, surface, transform, [rule])
        for inst in engine.registry.group_instances(HEIGHT_PROPS_GROUP):
            self.assertEqual(len(set(inst.rotation)), 1)
            self.assertEqual(len(set(inst.scale)), 1)
            self.assertTrue(10.0 <= inst.rotation[0] <= 20.0)
            self.assertTrue(0.5 <= inst.scale[0] <= 1.5)

    def test_same_rng_seed_same_layout(self):
        hf, surface, transform, _ = _terrain(width=10, depth=10)
        rule = PropRule("tree", 3.0, "props/tree", size=ValueRange(1.0, 2.0))

        def layout(seed):
            engine = PlacementEngine(random.Random(seed))
            engine.place_by_height(hf, surface, transform, [rule])
            return [(i.position, i.scale) for i in engine.registry.group_instances(HEIGHT_PROPS_GROUP)]

        self.assertEqual(layout(5), layout(5))

    def test_should_spawn_scaling(self):
        engine = PlacementEngine(random.Random(0))
        self.assertTrue(all(engine.should_spawn(10.0) for _ in range(200)))
        hits = sum(engine.should_spawn(1.0) for _ in range(20000))
        self.assertTrue(1600 < hits < 2400)


class TestTexturePlacement(unittest.TestCase):

    def test_uniform_raster_inner_vs_outer(self):
        """Однородный растр при допуске 0: Outer - ноль объектов, Inner - на каждом пикселе."""
        hf, _, transform, curve = _terrain()
        pixels = _uniform_raster(5, 7, (95, 175, 58))
        rule = PropRule("bush", 10.0, "props/bush")

        outer = PlacementEngine(random.Random(2))
        n_outer = outer.place_by_texture(pixels, hf, transform, curve, 3.0, [rule], ["#5FAF3A"], 0.0, "outer")
        self.assertEqual(n_outer, 0)

        inner = PlacementEngine(random.Random(2))
        n_inner = inner.place_by_texture(pixels, hf, transform, curve, 3.0, [rule], ["#5FAF3A"], 0.0, "inner")
        self.assertEqual(n_inner, 5 * 7)
        self.assertEqual(inner.registry.count(TEXTURE_PROPS_GROUP), 35)

    def test_inner_tolerance(self):
        hf, _, transform, curve = _terrain()
        pixels = _uniform_raster(4, 4, (100, 100, 100))
        rule = PropRule("bush", 10.0, "props/bush")
        engine = PlacementEngine(random.Random(2))
        self.assertEqual(
            engine.place_by_texture(pixels, hf, transform, curve, 3.0, [rule], [(110, 90, 100)], 5.0), 0
        )
        self.assertEqual(
            engine.place_by_texture(pixels, hf, transform, curve, 3.0, [rule], [(110, 90, 100)], 10.0), 16
        )

    def test_outer_marks_region_border(self):
        pixels = _uniform_raster(6, 6, (0, 0, 0))
        pixels[:, 3:, :3] = 255
        edges = edge_mask(pixels, 20.0)
        self.assertTrue(np.all(edges[:, 2]) and np.all(edges[:, 3]))
        self.assertFalse(np.any(edges[:, [0, 1, 4, 5]]))

        hf, _, transform, curve = _terrain()
        engine = PlacementEngine(random.Random(4))
        rule = PropRule("fence", 10.0, "props/fence")
        # края не зависят от выбранного цвета, но проход повторяется на каждый цвет
        n = engine.place_by_texture(
            pixels, hf, transform, curve, 3.0, [rule], ["#000000", "#FFFFFF"], 20.0, "outer"
        )
        self.assertEqual(n, 2 * 12)

    def test_texture_positions_sample_terrain_height(self):
        hf, _, transform, curve = _terrain()
        pixels = _uniform_raster(3, 3, (10, 20, 30))
        rule = PropRule("bush", 10.0, "props/bush")
        engine = PlacementEngine(random.Random(2))
        engine.place_by_texture(pixels, hf, transform, curve, 3.0, [rule], [(10, 20, 30)], 0.0)
        fw, fd = transform.footprint
        for inst in engine.registry.group_instances(TEXTURE_PROPS_GROUP):
            x, y, z = inst.position
            self.assertTrue(-fw / 2 <= x < fw / 2)
            self.assertTrue(-fd / 2 <= z < fd / 2)
            self.assertAlmostEqual(y, engine.world_height_at(hf, transform, curve, 3.0, x, z))

    def test_color_helpers(self):
        pixels = load_color_map(np.array([[[10, 20, 30]]], dtype=np.uint8))
        self.assertEqual(pixels.shape, (1, 1, 4))
        self.assertEqual(int(pixels[0, 0, 3]), 255)
        self.assertTrue(color_match_mask(pixels, np.array([12, 18, 30, 255]), 2.0)[0, 0])
        self.assertFalse(color_match_mask(pixels, np.array([13, 20, 30, 255]), 2.0)[0, 0])


class TestPlacementGroups(unittest.TestCase):

    def _filled_engine(self, spawner=None):
        hf, surface, transform, curve = _terrain()
        engine = PlacementEngine(random.Random(1), spawner=spawner)
        rule = PropRule("tree", 10.0, "props/tree")
        engine.place_by_height(hf, surface, transform, [rule])
        engine.place_by_texture(
            _uniform_raster(2, 2, (1, 2, 3)), hf, transform, curve, 3.0, [rule], [(1, 2, 3)], 0.0
        )
        return engine

    def test_clear_keeps_groups(self):
        engine = self._filled_engine()
        self.assertEqual(engine.clear_height_props(), 24)
        self.assertEqual(engine.registry.count(HEIGHT_PROPS_GROUP), 0)
        self.assertIn(HEIGHT_PROPS_GROUP, engine.registry.groups)
        self.assertEqual(engine.registry.count(TEXTURE_PROPS_GROUP), 4)
        self.assertEqual(engine.clear_texture_props(), 4)
        self.assertEqual(engine.registry.count(), 0)

    def test_remove_in_area_is_horizontal(self):
        engine = self._filled_engine()
        before = engine.registry.count()
        # высота центра кисти не важна: считается расстояние в плоскости XZ
        removed = engine.remove_props_in_area((0.0, 1000.0, 0.0), 2.5)
        self.assertGreater(removed, 0)
        self.assertEqual(engine.registry.count(), before - removed)
        for inst in engine.registry.instances.values():
            self.assertGreater(np.hypot(inst.position[0], inst.position[2]), 2.5)

    def test_external_spawner_receives_commands(self):
        spawner = RecordingSpawner()
        engine = self._filled_engine(spawner)
        self.assertEqual(len(spawner.alive), 28)
        self.assertEqual(set(spawner.alive), set(engine.registry.instances))
        engine.remove_props_in_area((0.0, 0.0, 0.0), 2.5)
        self.assertEqual(set(spawner.alive), set(engine.registry.instances))
        engine.clear_height_props()
        engine.clear_texture_props()
        self.assertEqual(spawner.alive, {})

    def test_registry_find_within_groups(self):
        reg = InstanceRegistry(("a", "b"))
        h1 = reg.spawn("t", (0, 0, 0), (0, 0, 0), (1, 1, 1), "a")
        h2 = reg.spawn("t", (1, 50, 0), (0, 0, 0), (1, 1, 1), "b")
        reg.spawn("t", (5, 0, 5), (0, 0, 0), (1, 1, 1), "b")
        self.assertEqual(sorted(reg.find_within((0, 0, 0), 1.0)), sorted([h1, h2]))
        self.assertEqual(reg.find_within((0, 0, 0), 1.0, ["b"]), [h2])
        reg.destroy(h2)
        self.assertEqual(reg.count("b"), 1)


if __name__ == "__main__":
    unittest.main()
