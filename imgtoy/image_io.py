# imgtoy/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Union

import numpy as np
from PIL import Image, ImageCms, ImageOps, ImageSequence, UnidentifiedImageError

from .surface import Surface

"""
Image I/O helpers: decode stills and animated GIFs into Surfaces (sRGB, alpha
kept), encode Surfaces back to PNG or looping GIF.
"""

DEFAULT_FRAME_MS = 100


class Media(NamedTuple):
    frames: List[Surface]
    durations: List[int]  # ms per frame; one entry per frame

    @property
    def animated(self) -> bool:
        return len(self.frames) > 1


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    """RGBA in sRGB; an embedded ICC profile is converted when littleCMS accepts it."""
    icc_bytes = im.info.get("icc_profile")
    if icc_bytes:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im.convert("RGBA"),
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is not None:
                return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            pass
    return im.convert("RGBA")


def _fit(im: Image.Image, max_dim: Optional[int]) -> Image.Image:
    """Downscale so neither side exceeds max_dim; smaller images are left alone."""
    if max_dim is None or max_dim <= 0:
        return im
    w0, h0 = im.size
    scale = max_dim / float(max(w0, h0))
    if scale >= 1.0:
        return im
    dst = (max(1, int(round(w0 * scale))), max(1, int(round(h0 * scale))))
    return im.resize(dst, resample=Image.Resampling.LANCZOS)


def _to_surface(im: Image.Image) -> Surface:
    arr = np.array(im, dtype=np.uint8)
    alpha = arr[..., 3]
    if np.all(alpha == 255):
        return Surface.from_u8(arr[..., :3])
    return Surface.from_u8(arr)


def load_media(path: Union[str, Path], max_dim: Optional[int] = None) -> Media:
    """
    Decode path into frames. Stills give one frame; animated images give one
    surface per frame with its duration. EXIF orientation is applied.
    """
    frames: List[Surface] = []
    durations: List[int] = []
    with Image.open(path) as im0:
        n_frames = int(getattr(im0, "n_frames", 1))
        if n_frames <= 1:
            im = _fit(_convert_to_srgb_rgba(ImageOps.exif_transpose(im0)), max_dim)
            frames.append(_to_surface(im))
            durations.append(int(im0.info.get("duration", DEFAULT_FRAME_MS) or DEFAULT_FRAME_MS))
        else:
            for frame in ImageSequence.Iterator(im0):
                im = _fit(_convert_to_srgb_rgba(frame), max_dim)
                frames.append(_to_surface(im))
                durations.append(int(frame.info.get("duration", DEFAULT_FRAME_MS) or DEFAULT_FRAME_MS))
    return Media(frames, durations)


def decode(path: Union[str, Path], max_dim: Optional[int] = None) -> List[Surface]:
    return load_media(path, max_dim).frames


def _to_image(surface: Surface) -> Image.Image:
    if surface.alpha is None:
        return Image.fromarray(surface.to_u8())
    return Image.fromarray(surface.to_rgba_u8())


def encode(
    surfaces: Sequence[Surface],
    target: Union[str, Path],
    duration_ms: Optional[Union[int, Sequence[int]]] = None,
) -> Path:
    """
    One surface -> PNG, several -> looping GIF. The suffix of target is
    replaced to match; the written path is returned.
    """
    if not surfaces:
        raise ValueError("encode() needs at least one surface")
    path = Path(target)
    if len(surfaces) == 1:
        path = path.with_suffix(".png")
        _to_image(surfaces[0]).save(path)
        return path

    path = path.with_suffix(".gif")
    images = [_to_image(s) for s in surfaces]
    if duration_ms is None:
        duration: Union[int, List[int]] = DEFAULT_FRAME_MS
    elif isinstance(duration_ms, int):
        duration = duration_ms
    else:
        duration = [int(d) for d in duration_ms]
        if len(duration) != len(images):
            raise ValueError(f"got {len(duration)} durations for {len(images)} frames")
    images[0].save(
        path,
        save_all=True,
        append_images=images[1:],
        duration=duration,
        loop=0,
        disposal=2,
    )
    return path


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "Media",
    "load_media",
    "decode",
    "encode",
    "is_image_file",
]
