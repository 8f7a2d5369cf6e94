"""Image processing utilities for the images transcoder."""

import io
import os
from pathlib import Path
from typing import Tuple, Union

import humanize
from PIL import Image

from .error_handling import with_error_handling
from .exceptions import EncodeError
from .models import OutputFormat

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})

PathLike = Union[str, "os.PathLike[str]"]


def is_image_file(file_name: PathLike) -> bool:
    """Check the extension allow-list, case-insensitively."""
    return os.path.splitext(os.fspath(file_name))[1].lower() in IMAGE_EXTENSIONS


def identity_from_filename(file_name: PathLike) -> str:
    """Logical item name: the base file name without its extension."""
    base = os.path.basename(os.fspath(file_name))
    return os.path.splitext(base)[0]


@with_error_handling
def decode_image_file(path: PathLike) -> Tuple[int, Image.Image]:
    """
    Open a source file, read its byte size and fully decode it.

    Args:
        path: Path to the source image

    Returns:
        Tuple of (size in bytes, decoded PIL Image)

    Raises:
        ImageDecodeError: If the file cannot be opened, stat'ed or decoded
    """
    with open(path, "rb") as source:
        size = os.fstat(source.fileno()).st_size
        image = Image.open(source)
        # Force decoding while the file handle is still open
        image.load()
    return size, image


def scaled_size(width: int, height: int, max_width: int) -> Tuple[int, int]:
    """
    Target dimensions for a width cap, preserving aspect ratio.

    A max_width of 0 disables scaling. Images at or under the cap keep
    their dimensions.
    """
    if max_width <= 0 or width <= max_width:
        return width, height
    new_height = max(1, round(height * max_width / width))
    return max_width, new_height


def resize_to_max_width(image: Image.Image, max_width: int) -> Image.Image:
    """Downscale an image to max_width with Lanczos resampling when it is wider."""
    target = scaled_size(image.width, image.height, max_width)
    if target == image.size:
        return image
    # Pillow falls back to NEAREST for palette and bilevel images
    if image.mode == "1":
        image = image.convert("L")
    elif image.mode in ("P", "PA"):
        has_alpha = image.mode == "PA" or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
    return image.resize(target, Image.Resampling.LANCZOS)


def _prepare_for_format(image: Image.Image, target_format: OutputFormat) -> Image.Image:
    """Convert modes the target codec cannot store."""
    has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info

    if target_format is OutputFormat.JPEG:
        if image.mode not in ("RGB", "L", "CMYK"):
            return image.convert("RGB")
    elif target_format is OutputFormat.WEBP:
        if image.mode not in ("RGB", "RGBA"):
            return image.convert("RGBA" if has_alpha else "RGB")
    elif target_format is OutputFormat.PNG:
        if image.mode in ("CMYK", "YCbCr", "LAB", "HSV"):
            return image.convert("RGB")
    elif target_format is OutputFormat.GIF:
        if image.mode != "P":
            source = image.convert("RGB") if image.mode not in ("RGB", "L") else image
            return source.quantize(colors=256)
    return image


def _save_options(target_format: OutputFormat, quality: float) -> dict:
    if target_format in (OutputFormat.WEBP, OutputFormat.JPEG):
        return {"quality": int(round(quality))}
    return {}


@with_error_handling
def encode_image(
    image: Image.Image,
    target_format: Union[OutputFormat, str],
    quality: float,
    buffer: io.BytesIO,
) -> None:
    """
    Encode an image into the given buffer.

    The caller owns the buffer, so whatever a failed attempt managed to
    write stays available afterwards.

    Args:
        image: Decoded PIL Image
        target_format: Output encoding
        quality: Codec quality in [1, 100]; ignored by png and gif
        buffer: Destination byte buffer

    Raises:
        EncodeError: If the format is unsupported or the codec fails
    """
    try:
        fmt = OutputFormat(target_format)
    except ValueError as e:
        raise EncodeError(f"unsupported output format: {target_format}") from e

    prepared = _prepare_for_format(image, fmt)
    prepared.save(buffer, format=fmt.pil_format, **_save_options(fmt, quality))


def format_bytes(num_bytes: int) -> str:
    """Render a byte count with binary prefixes, e.g. '1.5 MiB'."""
    return humanize.naturalsize(num_bytes, binary=True)


def unit_name(input_dir: PathLike) -> str:
    """Basename of an input set. Symlinks keep their own name."""
    return Path(os.path.abspath(os.fspath(input_dir))).name


def archive_path_for(input_dir: PathLike, output_root: PathLike) -> Path:
    """Archive location for an input set: '<basename>.zip' under output_root."""
    return Path(os.fspath(output_root)) / f"{unit_name(input_dir)}.zip"
