# ==============================================================================
# Файл: tests/test_paint_layer.py
# Назначение: Юнит-тесты слоя покраски и сессии мазка.
# ==============================================================================
import unittest
import numpy as np
import tempfile
import tracemalloc
import os

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from terrain_engine.paint.material import TerrainMaterial
from terrain_engine.paint.paint_layer import PaintLayer, PaintState, sample_alpha_bilinear
from terrain_engine.paint.stroke import BrushStroke

RED = (1.0, 0.0, 0.0, 1.0)


def _layer(resolution=32, **kw):
    material = TerrainMaterial(["_PaintMap"])
    layer = PaintLayer(material=material, **kw)
    layer.initialize(resolution)
    return layer, material


class TestPaintLayer(unittest.TestCase):

    def test_uninitialized_calls_are_noops(self):
        layer = PaintLayer(material=TerrainMaterial(["_PaintMap"]))
        self.assertEqual(layer.state, PaintState.UNINITIALIZED)
        self.assertEqual(layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 1.0), 0)
        layer.clear()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "paint.png")
            self.assertIsNone(layer.save(path))
            self.assertFalse(os.path.exists(path))

    def test_initialize_is_transparent_and_bound(self):
        layer, material = _layer(16)
        self.assertEqual(layer.state, PaintState.INITIALIZED)
        self.assertEqual(layer.pixels.shape, (16, 16, 4))
        self.assertFalse(np.any(layer.pixels))
        self.assertIs(material.get_texture("_PaintMap"), layer.pixels)

    def test_missing_slot_warns_but_paints(self):
        layer = PaintLayer(material=TerrainMaterial([]))
        with self.assertLogs("terrain_engine.paint.paint_layer", level="WARNING") as cm:
            layer.initialize(8)
        self.assertEqual(len(cm.records), 1)
        self.assertTrue(layer.is_initialized)
        with self.assertLogs("terrain_engine.paint.paint_layer", level="WARNING"):
            self.assertGreater(layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 1.0), 0)

    def test_existing_texture_is_resampled(self):
        material = TerrainMaterial(["_PaintMap"])
        old = np.zeros((4, 4, 4), dtype=np.uint8)
        old[...] = (0, 255, 0, 255)
        material.set_texture("_PaintMap", old)
        layer = PaintLayer(material=material)
        layer.initialize(8)
        self.assertEqual(layer.pixels.shape, (8, 8, 4))
        self.assertTrue(np.all(layer.pixels == np.array([0, 255, 0, 255], dtype=np.uint8)))

    def test_zero_opacity_leaves_raster_unchanged(self):
        layer, _ = _layer()
        layer.apply_brush((0, 0, 0), (0.3, 0.6), (0.2, 0.4, 0.6, 1.0), 2.0, strength=1.0, opacity=1.0)
        before = layer.pixels.copy()
        layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 3.0, strength=1.0, opacity=0.0)
        self.assertTrue(np.array_equal(before, layer.pixels))

    def test_full_strength_center_equals_target(self):
        layer, _ = _layer(32)
        touched = layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 2.0, strength=1.0, opacity=1.0)
        self.assertGreater(touched, 1)
        self.assertEqual(layer.pixels[16, 16].tolist(), [255, 0, 0, 255])
        # за радиусом кисти (2 * 32 / 10 = 6 пикселей) ничего не меняется
        self.assertEqual(layer.pixels[16, 23].tolist(), [0, 0, 0, 0])
        self.assertEqual(layer.pixels[23, 23].tolist(), [0, 0, 0, 0])

    def test_soft_brush_falls_off(self):
        layer, _ = _layer(64)
        layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 2.0)
        center = int(layer.pixels[32, 32, 0])
        mid = int(layer.pixels[32, 38, 0])
        self.assertGreater(center, mid)
        self.assertGreater(mid, 0)

    def test_brush_texture_alpha(self):
        layer, _ = _layer(32)
        brush = np.zeros((8, 8, 4), dtype=np.uint8)
        brush[..., 3] = 255
        layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 1.0, brush_texture=brush)
        # полностью непрозрачная кисть: весь круг радиуса 3 окрашен целиком
        self.assertEqual(layer.pixels[16, 19].tolist(), [255, 0, 0, 255])
        self.assertEqual(layer.pixels[19, 16].tolist(), [255, 0, 0, 255])
        self.assertEqual(layer.pixels[19, 19].tolist(), [0, 0, 0, 0])

    def test_brush_near_border_is_clipped(self):
        layer, _ = _layer(16)
        touched = layer.apply_brush((0, 0, 0), (0.0, 0.99), RED, 5.0)
        self.assertGreater(touched, 0)
        self.assertEqual(layer.apply_brush((0, 0, 0), (3.0, 3.0), RED, 0.5), 0)

    def test_huge_brush_in_corner_stays_in_bounds(self):
        """Радиус кисти много больше растра: работа и память ограничены размером растра."""
        layer, _ = _layer(64)
        tracemalloc.start()
        try:
            # r = 100 * 64 / 10 = 640 пикселей, угол растра
            touched = layer.apply_brush((0, 0, 0), (0.0, 0.0), RED, 100.0, strength=1.0)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()
        self.assertEqual(touched, 64 * 64)
        self.assertTrue(np.all(layer.pixels[..., 0] > 0))
        # квадрат 1281 x 1281 одного float64 массива - уже ~13 МБ
        self.assertLess(peak, 4 * 1024 * 1024)

    def test_brush_outside_raster_touches_nothing(self):
        layer, _ = _layer(16)
        self.assertEqual(layer.apply_brush((0, 0, 0), (-2.0, 0.5), RED, 1.0), 0)
        self.assertFalse(np.any(layer.pixels))

    def test_zero_radius_paints_center_pixel(self):
        layer, _ = _layer(8)
        self.assertEqual(layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 0.0), 1)
        self.assertEqual(layer.pixels[4, 4].tolist(), [255, 0, 0, 255])

    def test_clear(self):
        layer, material = _layer(8)
        layer.apply_brush((0, 0, 0), (0.5, 0.5), RED, 3.0)
        updates = material.updates
        layer.clear()
        self.assertFalse(np.any(layer.pixels))
        self.assertGreater(material.updates, updates)

    def test_prop_removal_after_stamp(self):
        calls = []
        layer, _ = _layer(8, prop_remover=lambda pos, r: calls.append((tuple(pos), r)) or 0,
                          prop_removal_radius=2.0)
        layer.apply_brush((1.0, 2.0, 3.0), (0.5, 0.5), RED, 1.5)
        self.assertEqual(calls, [((1.0, 2.0, 3.0), 3.0)])

        layer.remove_props_while_painting = False
        layer.apply_brush((1.0, 2.0, 3.0), (0.5, 0.5), RED, 1.5)
        self.assertEqual(len(calls), 1)

    def test_save_load_roundtrip(self):
        """PNG без потерь: после сохранения и загрузки пиксели совпадают."""
        layer, _ = _layer(16)
        layer.apply_brush((0, 0, 0), (0.25, 0.75), (0.1, 0.7, 0.3, 0.8), 3.0, strength=0.6)
        layer.pixels[0, 0] = (1, 2, 3, 4)
        saved = layer.pixels.copy()

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "nested", "paint.png")
            self.assertEqual(str(layer.save(path)), path)
            self.assertFalse(os.path.exists(path + ".tmp"))

            other, _ = _layer(16)
            other.load(path)
            self.assertTrue(np.array_equal(other.pixels, saved))

            fresh = PaintLayer()
            fresh.load(path)
            self.assertTrue(fresh.is_initialized)
            self.assertTrue(np.array_equal(fresh.pixels, saved))

    def test_bilinear_alpha_sampling(self):
        brush = np.zeros((2, 2, 4), dtype=np.uint8)
        brush[:, 1, 3] = 255
        self.assertAlmostEqual(float(sample_alpha_bilinear(brush, np.array(0.5), np.array(0.5))), 0.5)
        self.assertAlmostEqual(float(sample_alpha_bilinear(brush, np.array(0.0), np.array(0.0))), 0.0)
        self.assertAlmostEqual(float(sample_alpha_bilinear(brush, np.array(1.0), np.array(0.0))), 1.0)


class TestBrushStroke(unittest.TestCase):

    def test_state_and_gap_filling(self):
        layer, _ = _layer(32)
        stroke = BrushStroke(layer, RED, radius=1.0)
        self.assertEqual(layer.state, PaintState.PAINTING)
        self.assertEqual(stroke.add_sample((0.0, 0.0, 0.0), (0.2, 0.5)), 1)
        # шаг 2.0 при радиусе 1: половина радиуса 0.5 -> 4 штампа
        self.assertEqual(stroke.add_sample((2.0, 0.0, 0.0), (0.6, 0.5)), 4)
        # промежуточные точки закрашивают путь между сэмплами
        self.assertEqual(layer.pixels[16, 12].tolist(), [255, 0, 0, 255])
        stroke.end()
        self.assertEqual(layer.state, PaintState.INITIALIZED)
        self.assertEqual(stroke.add_sample((3.0, 0.0, 0.0), (0.7, 0.5)), 0)

    def test_close_samples_are_not_interpolated(self):
        layer, _ = _layer(16)
        with BrushStroke(layer, RED, radius=2.0) as stroke:
            stroke.add_sample((0.0, 0.0, 0.0), (0.5, 0.5))
            self.assertEqual(stroke.add_sample((0.5, 0.0, 0.0), (0.52, 0.5)), 1)
        self.assertEqual(layer.state, PaintState.INITIALIZED)


if __name__ == "__main__":
    unittest.main()
