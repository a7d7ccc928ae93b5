"""RGBA raster <-> PNG conversion via Pillow.

Pillow does all of the container work (chunks, filtering, DEFLATE). This
module only hands it width, height and the RGBA8 buffer, collects what it
writes, and turns the result into base64 or a data URI.
"""

import base64
import io
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from PIL import Image

from .stream import ChunkStream

DATA_URI_PREFIX = 'data:image/png;base64,'

log = logging.getLogger(__name__)

_executor = None
_executor_lock = threading.Lock()


@dataclass
class DecodedImage:
    """What the codec hands back: dimensions plus an RGBA8 buffer."""
    width: int
    height: int
    data: bytearray


def rgba_to_pil(width: int, height: int, buffer) -> Image.Image:
    return Image.frombytes('RGBA', (width, height), bytes(buffer))


def rgba_to_png_bytes(width: int, height: int, buffer) -> bytes:
    """Encode an RGBA8 buffer as PNG bytes."""
    img = rgba_to_pil(width, height, buffer)
    stream = ChunkStream()
    img.save(stream, format='PNG')
    stream.end()
    log.debug("Encoded %dx%d PNG in %d chunks", width, height, len(stream.chunks))
    return stream.getvalue()


def raster_to_png_bytes(raster_image) -> bytes:
    """Convert anything with width, height and buffer to PNG bytes."""
    return rgba_to_png_bytes(raster_image.width, raster_image.height,
                             raster_image.buffer)


def png_bytes_to_base64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode('ascii')


def raster_to_png_data_uri(raster_image) -> str:
    """Convert a raster image to a base64 data URI."""
    b64 = png_bytes_to_base64(raster_to_png_bytes(raster_image))
    return f"{DATA_URI_PREFIX}{b64}"


def decode_png(data: bytes) -> DecodedImage:
    """Decode PNG (or anything Pillow reads) into an RGBA8 buffer."""
    with Image.open(io.BytesIO(data)) as img:
        rgba = img.convert('RGBA')
        return DecodedImage(rgba.width, rgba.height, bytearray(rgba.tobytes()))


def pil_to_decoded(img: Image.Image) -> DecodedImage:
    rgba = img if img.mode == 'RGBA' else img.convert('RGBA')
    return DecodedImage(rgba.width, rgba.height, bytearray(rgba.tobytes()))


def _export_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=1,
                                           thread_name_prefix='pngraster-export')
        return _executor


def encode_base64_async(width: int, height: int, buffer, prefix: str = '',
                        callback=None) -> Future:
    """Encode on a worker thread; resolve with prefix + base64 text.

    The buffer is copied before this returns, so the caller may keep
    mutating its image. ``callback`` (if any) is called exactly once with
    the text, on the worker, after the whole PNG stream has been collected.
    Errors from the codec or the callback end up in the future.
    """
    snapshot = bytes(buffer)

    def job():
        try:
            text = prefix + png_bytes_to_base64(
                rgba_to_png_bytes(width, height, snapshot))
            if callback is not None:
                callback(text)
        except Exception:
            log.exception("Export of %dx%d image failed", width, height)
            raise
        return text

    log.debug("Queued %dx%d export", width, height)
    return _export_executor().submit(job)
