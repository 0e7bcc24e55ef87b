# processors/image_processor.py
import io
from enum import Enum
from typing import List, Sequence, Tuple
from PIL import GifImagePlugin, Image, UnidentifiedImageError
from ..exceptions import ImageDecodeError, ImageEncodeError

class GifPreset(Enum):
    """Trade-off between encode time and palette quality"""
    QUALITY = "quality"
    SPEED = "speed"

def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes, forcing the pixel data to load"""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Could not decode image ({len(data)} bytes): {e}") from e
    return image

def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="PNG")
    except (OSError, ValueError) as e:
        raise ImageEncodeError(f"PNG encoding failed: {e}") from e
    return buffer.getvalue()

def compress_jpg(image: Image.Image, size: Tuple[int, int], quality: int = 75,
                 subsampling: str = "4:2:2") -> bytes:
    """Resize straight to `size` (aspect ratio is not kept) and encode as JPEG"""
    resized = image.convert("RGB").resize(size, Image.Resampling.LANCZOS)
    buffer = io.BytesIO()
    try:
        resized.save(buffer, format="JPEG", quality=quality, subsampling=subsampling)
    except (OSError, ValueError) as e:
        raise ImageEncodeError(f"JPEG encoding failed: {e}") from e
    return buffer.getvalue()

def overlay(base: Image.Image, top: Image.Image) -> None:
    """Alpha-composite `top` onto `base` in place, anchored at the top-left corner.

    `base` must be RGBA. Parts of `top` that fall outside `base` are clipped.
    """
    top = top.convert("RGBA")
    width = min(base.width, top.width)
    height = min(base.height, top.height)
    if (width, height) != top.size:
        top = top.crop((0, 0, width, height))
    base.alpha_composite(top, dest=(0, 0))

def _to_palette(image: Image.Image, preset: GifPreset) -> Image.Image:
    rgb = image.convert("RGB")
    if preset is GifPreset.QUALITY:
        return rgb.quantize(colors=256, method=Image.Quantize.MEDIANCUT,
                            dither=Image.Dither.FLOYDSTEINBERG)
    return rgb.quantize(colors=256, method=Image.Quantize.FASTOCTREE,
                        dither=Image.Dither.NONE)

def encode_gif(frames: Sequence[Image.Image], duration_ms: int,
               preset: GifPreset = GifPreset.QUALITY) -> bytes:
    """Encode frames as an infinitely looping animated gif.

    Every input frame becomes exactly one gif frame shown for `duration_ms`,
    identical neighbours included. Pillow's save_all writer folds repeated
    frames together, so the file is built from its per-frame gif blocks, each
    with a local colour table. Delays are stored in hundredths of a second.
    """
    if not frames:
        raise ImageEncodeError("Cannot encode a gif with no frames")

    palette_frames: List[Image.Image] = [_to_palette(frame, preset) for frame in frames]
    buffer = io.BytesIO()
    try:
        header, _ = GifImagePlugin.getheader(palette_frames[0],
                                             info={"loop": 0, "duration": duration_ms})
        for block in header:
            buffer.write(block)
        for frame in palette_frames:
            for block in GifImagePlugin.getdata(frame, duration=duration_ms,
                                                include_color_table=True):
                buffer.write(block)
        buffer.write(b";")
    except (OSError, ValueError) as e:
        raise ImageEncodeError(f"GIF encoding failed: {e}") from e
    return buffer.getvalue()
