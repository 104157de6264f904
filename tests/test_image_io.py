"""Tests for PNG / GIF decoding and encoding."""

import numpy as np
import pytest
from PIL import Image

from imgtoy.image_io import decode, encode, is_image_file, load_media
from imgtoy.surface import Surface

from .helpers import grey_surface, horizontal_ramp


class TestStill:
    def test_png_roundtrip(self, tmp_path):
        surface = horizontal_ramp(9, 4)
        path = encode([surface], tmp_path / "out.whatever")
        assert path.suffix == ".png"
        media = load_media(path)
        assert not media.animated
        assert len(media.frames) == 1
        assert np.array_equal(media.frames[0].to_u8(), surface.to_u8())
        assert media.frames[0].alpha is None

    def test_alpha_roundtrip(self, tmp_path):
        rgba = np.zeros((3, 4, 4), dtype=np.uint8)
        rgba[..., 0] = 200
        rgba[..., 3] = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
        path = encode([Surface.from_u8(rgba)], tmp_path / "alpha")
        loaded = decode(path)[0]
        assert loaded.alpha is not None
        assert np.array_equal(loaded.to_rgba_u8(), rgba)

    def test_max_dim_downscales(self, tmp_path):
        path = tmp_path / "big.png"
        Image.new("RGB", (40, 20), (10, 20, 30)).save(path)
        frame = decode(path, max_dim=10)[0]
        assert (frame.width, frame.height) == (10, 5)
        assert decode(path, max_dim=100)[0].width == 40

    def test_greyscale_source_becomes_rgb(self, tmp_path):
        path = tmp_path / "grey.png"
        Image.new("L", (3, 3), 128).save(path)
        frame = decode(path)[0]
        assert frame.to_u8()[0, 0].tolist() == [128, 128, 128]


class TestAnimated:
    def test_gif_roundtrip(self, tmp_path):
        frames = [grey_surface(6, 5, 0.0), grey_surface(6, 5, 1.0)]
        path = encode(frames, tmp_path / "anim", [50, 80])
        assert path.suffix == ".gif"
        media = load_media(path)
        assert media.animated
        assert len(media.frames) == 2
        assert media.durations == [50, 80]
        assert np.all(media.frames[0].to_u8() == 0)
        assert np.all(media.frames[1].to_u8() == 255)

    def test_duration_count_must_match(self, tmp_path):
        frames = [grey_surface(2, 2, 0.0), grey_surface(2, 2, 1.0)]
        with pytest.raises(ValueError):
            encode(frames, tmp_path / "anim", [50])

    def test_nothing_to_encode(self, tmp_path):
        with pytest.raises(ValueError):
            encode([], tmp_path / "empty")


class TestIsImageFile:
    def test_detects_images(self, tmp_path):
        good = encode([grey_surface(2, 2)], tmp_path / "ok")
        bad = tmp_path / "notes.txt"
        bad.write_text("hello", encoding="utf-8")
        assert is_image_file(good)
        assert not is_image_file(bad)
        assert not is_image_file(tmp_path / "missing.png")
