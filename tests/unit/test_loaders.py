"""
Unit tests for terrain file loaders and the loader registry
"""

import os
import sys

import cv2
import numpy as np
import pytest
from PIL import Image

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import NotTileable, TruncatedFile, UnknownFormat
from loaders import LoaderRegistry, LLRawLoader, Raw32Loader
from loaders.llraw import decode_records, encode_records
from tests.factories import RS


def _south_to_north_ramp(width_regions=1, height_regions=1, top=128.0):
    rows, cols = height_regions * RS, width_regions * RS
    col = np.linspace(0.0, top, rows, dtype=np.float32)[:, None]
    return np.repeat(col, cols, axis=1)


class TestLLRaw:
    """13-byte LLRAW records"""

    def test_exact_length_loads(self, tmp_path, settings):
        path = tmp_path / "one.raw"
        path.write_bytes(bytes(RS * RS * 13))
        hm = LLRawLoader(settings).load_sized(path, 1, 1)
        assert hm.shape == (RS, RS)
        assert np.all(hm == 0.0)

    def test_one_byte_short_is_truncated(self, tmp_path, settings):
        path = tmp_path / "short.raw"
        path.write_bytes(bytes(RS * RS * 13 - 1))
        with pytest.raises(TruncatedFile):
            LLRawLoader(settings).load_sized(path, 1, 1)

    def test_size_inferred_from_length(self, tmp_path, settings):
        path = tmp_path / "four.raw"
        path.write_bytes(bytes(4 * RS * RS * 13))
        assert LLRawLoader(settings).load(path).shape == (2 * RS, 2 * RS)

    def test_decode_uses_scale_byte(self):
        rec = bytearray(13)
        rec[0], rec[1] = 200, 64  # 200 * 64/128
        assert decode_records(bytes(rec), 1, 1)[0, 0] == pytest.approx(100.0)

    def test_encode_picks_nearest_pair(self):
        heights = np.array([[0.0, 1.5, 100.25, 37.3]], dtype=np.float32)
        decoded = decode_records(encode_records(heights), 1, 4)
        np.testing.assert_allclose(decoded, heights, atol=0.02)

    def test_encode_zeroes_padding(self):
        rec = np.frombuffer(encode_records(np.full((2, 2), 12.0)), dtype=np.uint8).reshape(4, 13)
        assert np.all(rec[:, 2:] == 0)

    def test_save_load_keeps_row_order(self, tmp_path, settings):
        loader = LLRawLoader(settings)
        hm = _south_to_north_ramp(top=50.0)
        path = tmp_path / "ramp.raw"
        loader.save(path, hm)
        assert path.stat().st_size == RS * RS * 13
        np.testing.assert_allclose(loader.load(path), hm, atol=0.25)


class TestRaw32:
    """Headerless float32 rasters"""

    def test_save_load_exact(self, tmp_path, settings):
        loader = Raw32Loader(settings)
        hm = np.random.default_rng(1).normal(20, 5, (2 * RS, 2 * RS)).astype(np.float32)
        path = tmp_path / "terrain.r32"
        loader.save(path, hm)
        np.testing.assert_array_equal(loader.load(path), hm)

    def test_little_endian_row_major(self, tmp_path, settings):
        path = tmp_path / "le.f32"
        hm = np.arange(RS * RS, dtype="<f4")
        path.write_bytes(hm.tobytes())
        out = Raw32Loader(settings).load(path)
        assert out[1, 0] == RS
        assert out[0, 1] == 1

    def test_truncated(self, tmp_path, settings):
        path = tmp_path / "bad.r32"
        path.write_bytes(bytes(RS * RS * 4 - 4))
        with pytest.raises(TruncatedFile):
            Raw32Loader(settings).load_sized(path, 1, 1)
        with pytest.raises(NotTileable):
            Raw32Loader(settings).load(path)


class TestImageLoaders:
    """PNG/BMP via OpenCV, GIF via Pillow, GeoTIFF via rasterio"""

    @pytest.mark.parametrize("ext", [".png", ".bmp", ".gif"])
    def test_eight_bit_round_trip(self, tmp_path, registry, ext):
        hm = _south_to_north_ramp(2, 1)
        path = tmp_path / f"ramp{ext}"
        loader = registry.for_file(path)
        loader.save(path, hm)
        out = loader.load(path)
        assert out.shape == (RS, 2 * RS)
        # quantised to 256 grey levels over image_height_scale
        np.testing.assert_allclose(out, hm, atol=0.3)

    def test_png_is_stored_north_up(self, tmp_path, registry):
        path = tmp_path / "ramp.png"
        registry.for_file(path).save(path, _south_to_north_ramp())
        img = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        assert img[0, 0] == 255
        assert img[-1, 0] == 0

    def test_gif_is_stored_north_up(self, tmp_path, registry):
        path = tmp_path / "ramp.gif"
        registry.for_file(path).save(path, _south_to_north_ramp())
        with Image.open(path) as img:
            px = np.asarray(img.convert("L"))
        assert px[0, 0] == 255
        assert px[-1, 0] == 0

    def test_colour_png_reduced_to_luminance(self, tmp_path, registry):
        path = tmp_path / "colour.png"
        cv2.imwrite(str(path), np.full((RS, RS, 3), 255, dtype=np.uint8))
        out = registry.for_file(path).load(path)
        assert out.shape == (RS, RS)
        np.testing.assert_allclose(out, 128.0)

    def test_geotiff_round_trip_is_exact(self, tmp_path, registry):
        hm = _south_to_north_ramp(1, 2, top=812.5)
        path = tmp_path / "ramp.tif"
        loader = registry.for_file(path)
        loader.save(path, hm)
        np.testing.assert_array_equal(loader.load(path), hm)


class TestLoaderRegistry:
    """Extension lookup"""

    def test_lookup_is_case_insensitive(self, registry):
        assert registry.is_registered("ISLAND.R32")
        assert isinstance(registry.for_file("island.RAW"), LLRawLoader)

    def test_unknown_extension(self, registry):
        assert not registry.is_registered("notes.txt")
        with pytest.raises(UnknownFormat):
            registry.for_file("notes.txt")

    def test_registries_are_independent(self, settings):
        a = LoaderRegistry([Raw32Loader(settings)])
        b = LoaderRegistry()
        b.register(LLRawLoader(settings), extensions=["ter"])
        assert a.is_registered("x.r32") and not a.is_registered("x.ter")
        assert b.is_registered("x.TER") and not b.is_registered("x.r32")

    def test_default_extensions(self, registry):
        assert registry.extensions() == [".bmp", ".f32", ".gif", ".png", ".r32", ".raw", ".tif", ".tiff"]
