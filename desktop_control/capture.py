"""
Screen capture: grab the whole virtual screen, then crop and encode.

Window and region rectangles arrive in logical screen coordinates. The raster
may be offset (monitors left of or above the primary) and, on HiDPI displays,
larger than the logical screen, so rectangles are translated and scaled into
raster pixels before cropping, then clamped to the raster.
"""

import asyncio
import io
import logging
from typing import Callable, NamedTuple, Tuple

from PIL import Image

from .errors import InvalidArgument, InvalidFormat, InvalidRegion
from .geometry import Rect, clamp_rect, padded_rect, scale_rect
from .models import CaptureResult, WindowBounds
from .pointer import require_pyautogui


logger = logging.getLogger(__name__)

_FORMATS = {"png": "png", "jpg": "jpeg", "jpeg": "jpeg"}


class Raster(NamedTuple):
    image: Image.Image
    origin_x: int = 0
    origin_y: int = 0
    scale: float = 1.0


def normalize_format(image_format: str) -> str:
    """Map a caller format name to 'png' or 'jpeg'."""
    key = (image_format or "png").strip().lower()
    if key not in _FORMATS:
        raise InvalidFormat(image_format, _FORMATS)
    return _FORMATS[key]


def validate_quality(quality: int) -> int:
    quality = int(quality)
    if not 1 <= quality <= 100:
        raise InvalidArgument(f"JPEG quality must be between 1 and 100, got {quality}")
    return quality


def validate_padding(padding: int) -> int:
    padding = int(padding)
    if padding < 0:
        raise InvalidArgument(f"Padding must not be negative, got {padding}")
    return padding


def validate_size(width: int, height: int) -> Tuple[int, int]:
    width, height = int(width), int(height)
    if width <= 0 or height <= 0:
        raise InvalidRegion(f"Region size must be positive, got {width}x{height}")
    return width, height


def grab_virtual_screen() -> Raster:
    """
    Capture all monitors using mss if available (faster), else fall back to PyAutoGUI.
    """
    try:
        import mss  # type: ignore

        with mss.mss() as sct:
            monitor = sct.monitors[0]
            raw = sct.grab(monitor)
            image = Image.frombytes("RGB", raw.size, raw.bgra, "raw", "BGRX")
            scale = raw.width / monitor["width"] if monitor["width"] else 1.0
            return Raster(image, int(monitor["left"]), int(monitor["top"]), scale)
    except Exception as exc:  # noqa: BLE001 - any mss failure falls back
        logger.debug("mss capture failed, using PyAutoGUI screenshot: %s", exc)

    pyautogui = require_pyautogui()
    image = pyautogui.screenshot()
    logical_width, _ = pyautogui.size()
    scale = image.size[0] / logical_width if logical_width else 1.0
    return Raster(image, 0, 0, scale)


def encode_image(image: Image.Image, image_format: str, quality: int = 90) -> bytes:
    buffer = io.BytesIO()
    if image_format == "jpeg":
        image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    else:
        image.save(buffer, format="PNG")
    return buffer.getvalue()


def _crop_and_encode(
    image: Image.Image, rect: Rect, image_format: str, quality: int
) -> Tuple[bytes, int, int]:
    cropped = image.crop((rect.left, rect.top, rect.right, rect.bottom))
    return encode_image(cropped, image_format, quality), cropped.size[0], cropped.size[1]


class ScreenCapture:
    """Produce encoded screenshots of a window, a region or the whole screen."""

    def __init__(self, grabber: Callable[[], Raster] = grab_virtual_screen):
        self._grabber = grabber

    async def grab(self) -> Raster:
        return await asyncio.to_thread(self._grabber)

    async def _crop(self, raster: Raster, rect: Rect, image_format: str, quality: int) -> CaptureResult:
        pixels = scale_rect(rect, raster.scale, raster.origin_x, raster.origin_y)
        clamped = clamp_rect(pixels, raster.image.size[0], raster.image.size[1])
        if clamped is None:
            raise InvalidRegion(
                f"Region {rect.width}x{rect.height} at ({rect.left}, {rect.top}) lies outside the screen"
            )
        if clamped != pixels:
            logger.debug("Clamped crop %s to %s", pixels, clamped)

        data, width, height = await asyncio.to_thread(
            _crop_and_encode, raster.image, clamped, image_format, quality
        )
        return CaptureResult(
            data=data, width=width, height=height, format=image_format, x=rect.left, y=rect.top
        )

    async def window(self, bounds: WindowBounds, padding: int = 10) -> CaptureResult:
        """PNG of ``bounds`` expanded by ``padding`` pixels on every side."""
        padding = validate_padding(padding)
        raster = await self.grab()
        rect = padded_rect(bounds, padding, raster.origin_x, raster.origin_y)
        return await self._crop(raster, rect, "png", 100)

    async def full(self, image_format: str = "png", quality: int = 90) -> CaptureResult:
        image_format = normalize_format(image_format)
        quality = validate_quality(quality)
        raster = await self.grab()
        data = await asyncio.to_thread(encode_image, raster.image, image_format, quality)
        return CaptureResult(
            data=data,
            width=raster.image.size[0],
            height=raster.image.size[1],
            format=image_format,
            x=raster.origin_x,
            y=raster.origin_y,
        )

    async def region(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        image_format: str = "png",
        quality: int = 90,
    ) -> CaptureResult:
        """Crop an absolute-pixel rectangle out of a fresh full-screen capture."""
        x, y = int(x), int(y)
        width, height = validate_size(width, height)
        image_format = normalize_format(image_format)
        quality = validate_quality(quality)
        raster = await self.grab()
        return await self._crop(raster, Rect(x, y, width, height), image_format, quality)

    async def color_at(self, x: int, y: int) -> Tuple[int, int, int]:
        """RGB value of the screen pixel at absolute logical coordinates."""
        x, y = int(x), int(y)
        raster = await self.grab()
        px = int((x - raster.origin_x) * raster.scale)
        py = int((y - raster.origin_y) * raster.scale)
        width, height = raster.image.size
        if not (0 <= px < width and 0 <= py < height):
            raise InvalidRegion(f"Point ({x}, {y}) lies outside the screen")
        pixel = raster.image.crop((px, py, px + 1, py + 1)).convert("RGB").getpixel((0, 0))
        return pixel[0], pixel[1], pixel[2]
