"""Image Loader: turn uploaded bytes into a RawImage."""
import io
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from photoscore import config
from photoscore.errors import DecodeError, InvalidInput
from photoscore.models import RawImage, ValidationReport


def decode(data: Optional[bytes]) -> RawImage:
    """Decode JPEG/PNG/WebP/... bytes into an RGB RawImage (alpha and palettes flattened)."""
    if not data:
        raise InvalidInput("No image data provided")
    try:
        with Image.open(io.BytesIO(data)) as pil:
            pil.load()
            rgb = pil.convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError, EOFError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Invalid or corrupted image file: {exc}") from exc
    return from_pil(rgb)


def from_pil(pil_img: Image.Image) -> RawImage:
    if pil_img.mode not in ("L", "RGB", "RGBA"):
        pil_img = pil_img.convert("RGB")
    return RawImage(np.array(pil_img))


def validate_image_format(data: bytes) -> ValidationReport:
    """Reject uploads that are not JPEG/PNG/WebP, or are too small, too large or too heavy."""
    try:
        with Image.open(io.BytesIO(data)) as pil:
            fmt = (pil.format or "").lower()
            width, height = pil.size
    except (UnidentifiedImageError, OSError, ValueError, EOFError, SyntaxError, Image.DecompressionBombError):
        return ValidationReport(valid=False, error="Invalid or corrupted image file.")

    if fmt not in config.SUPPORTED_FORMATS:
        return ValidationReport(
            valid=False,
            error=f"Unsupported image format: {fmt or 'unknown'}. Please use JPEG, PNG, or WebP.",
        )
    if width < config.MIN_DIMENSION or height < config.MIN_DIMENSION:
        return ValidationReport(
            valid=False,
            error=f"Image too small. Minimum dimensions are {config.MIN_DIMENSION}x{config.MIN_DIMENSION} pixels.",
        )
    if width > config.MAX_DIMENSION or height > config.MAX_DIMENSION:
        return ValidationReport(
            valid=False,
            error=f"Image too large. Maximum dimensions are {config.MAX_DIMENSION}x{config.MAX_DIMENSION} pixels.",
        )
    if len(data) > config.MAX_FILE_SIZE:
        return ValidationReport(valid=False, error="Image file size exceeds 10MB limit.")

    return ValidationReport(valid=True, format=fmt, width=width, height=height, size=len(data))
