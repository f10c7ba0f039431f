"""
DerivativeGenerator - Produces the pyramid, thumbnail, medium and WebP variants.
"""

import io
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import sh
from PIL import Image, UnidentifiedImageError

from .errors import DerivativeError
from .photo_record import TILE_SIZE, VARIANT_NAMES


MAX_PIXELS = 268402689


@dataclass
class DerivativeSet:
    """
    The four encoded variants of one original plus its pixel dimensions.
    """
    pyramid: bytes
    thumb: bytes
    medium: bytes
    webp: bytes
    width: int
    height: int

    def __iter__(self) -> Iterator[Tuple[str, bytes]]:
        """Yield (variant name, bytes) in layout order."""
        for name in VARIANT_NAMES:
            yield name, getattr(self, name)

    @property
    def total_bytes(self) -> int:
        return sum(len(data) for _, data in self)


class DerivativeGenerator:
    """
    Generates derivatives from a local copy of an original.

    The tiled pyramid TIFF is written by ImageMagick; the raster variants
    are produced with Pillow from a single decode of the source.
    """

    def __init__(
        self,
        thumb_size: int = 300,
        thumb_quality: int = 80,
        medium_size: int = 1600,
        medium_quality: int = 85,
        webp_width: int = 1600,
        webp_quality: int = 80,
        pyramid_quality: int = 80,
        tile_size: int = TILE_SIZE,
        convert_command: str = 'convert',
        convert_timeout: Optional[float] = 300,
        max_pixels: Optional[int] = MAX_PIXELS,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize derivative generator.

        Args:
            thumb_size: Edge of the square thumbnail (default: 300)
            thumb_quality: JPEG quality for the thumbnail (default: 80)
            medium_size: Maximum dimension of the medium JPEG (default: 1600)
            medium_quality: JPEG quality for the medium copy (default: 85)
            webp_width: Maximum width of the WebP copy (default: 1600)
            webp_quality: WebP quality (default: 80)
            pyramid_quality: JPEG quality inside the pyramid TIFF (default: 80)
            tile_size: Pyramid tile edge (default: 512)
            convert_command: ImageMagick executable (default: convert)
            convert_timeout: Seconds allowed for the pyramid encode
            max_pixels: Largest accepted original in pixels (None for no limit)
            logger: Optional logger instance
        """
        self.thumb_size = thumb_size
        self.thumb_quality = thumb_quality
        self.medium_size = medium_size
        self.medium_quality = medium_quality
        self.webp_width = webp_width
        self.webp_quality = webp_quality
        self.pyramid_quality = pyramid_quality
        self.tile_size = tile_size
        self.convert_command = convert_command
        self.convert_timeout = convert_timeout
        self.max_pixels = max_pixels
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, source_path: str, scratch) -> DerivativeSet:
        """
        Generate all derivatives of an original.

        Args:
            source_path: Local path of the downloaded original
            scratch: ScratchDir for intermediate files

        Returns:
            DerivativeSet with all four variants

        Raises:
            DerivativeError: if any variant cannot be produced
        """
        try:
            width, height = self.probe_dimensions(source_path)
            if self.max_pixels and width * height > self.max_pixels:
                raise DerivativeError(
                    f"Image size ({width * height} pixels) exceeds limit of {self.max_pixels} pixels"
                )

            pyramid = self.encode_pyramid(source_path, scratch.file('pyramid.tif'))

            with self._open(source_path) as img:
                img.load()
                thumb = self.make_thumbnail(img)
                medium = self.make_medium(img)
                webp = self.make_webp(img)
        except DerivativeError:
            raise
        except Exception as e:
            self.logger.error(f"Error generating derivatives for {source_path}: {e}")
            raise DerivativeError(f"{type(e).__name__}: {e}") from e

        return DerivativeSet(
            pyramid=pyramid,
            thumb=thumb,
            medium=medium,
            webp=webp,
            width=width,
            height=height,
        )

    def probe_dimensions(self, source_path: str) -> Tuple[int, int]:
        """
        Read pixel dimensions from the image header without decoding.

        Returns (0, 0) if the header cannot be read.
        """
        try:
            with self._open(source_path) as img:
                return img.size
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as e:
            self.logger.warning(f"Could not read dimensions of {source_path}: {e}")
            return 0, 0

    @contextmanager
    def _open(self, source_path: str):
        """
        Open an image lazily with Pillow's decompression bomb check disabled.

        The pixel ceiling is max_pixels, enforced by generate(). Image.MAX_IMAGE_PIXELS
        is process-wide and is restored before returning.
        """
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            img = Image.open(source_path)
        finally:
            Image.MAX_IMAGE_PIXELS = previous
        with img:
            yield img

    def encode_pyramid(self, source_path: str, output_path: str) -> bytes:
        """Write a tiled, JPEG-compressed pyramid TIFF and return its bytes."""
        convert = sh.Command(self.convert_command)
        self.logger.debug(f"Encoding pyramid: {source_path} -> {output_path}")
        convert(
            f"{source_path}[0]",
            '-define', f"tiff:tile-geometry={self.tile_size}x{self.tile_size}",
            '-compress', 'JPEG',
            '-quality', str(self.pyramid_quality),
            f"ptif:{output_path}",
            _timeout=self.convert_timeout,
        )
        with open(output_path, 'rb') as f:
            return f.read()

    def make_thumbnail(self, img: Image.Image) -> bytes:
        """Square thumbnail covering the target, cropped to its busiest region."""
        rgb = self._convert_color_mode(img)
        thumb = self._cover_entropy(rgb, self.thumb_size, self.thumb_size)
        return self._encode(thumb, 'JPEG', self.thumb_quality)

    def make_medium(self, img: Image.Image) -> bytes:
        """JPEG bounded to medium_size on both axes, never upscaled."""
        medium = self._convert_color_mode(img).copy()
        medium.thumbnail((self.medium_size, self.medium_size), Image.Resampling.LANCZOS)
        return self._encode(medium, 'JPEG', self.medium_quality)

    def make_webp(self, img: Image.Image) -> bytes:
        """WebP bounded to webp_width, aspect preserved, never upscaled."""
        if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
            webp = img.convert('RGBA')
        else:
            webp = img.convert('RGB')

        if webp.width > self.webp_width:
            height = max(1, round(webp.height * self.webp_width / webp.width))
            webp = webp.resize((self.webp_width, height), Image.Resampling.LANCZOS)

        return self._encode(webp, 'WEBP', self.webp_quality)

    def _cover_entropy(self, img: Image.Image, width: int, height: int) -> Image.Image:
        """Resize to cover width x height, then crop the highest-entropy window."""
        scale = max(width / img.width, height / img.height)
        resized = img.resize(
            (max(width, round(img.width * scale)), max(height, round(img.height * scale))),
            Image.Resampling.LANCZOS,
        )

        left = self._entropy_offset(resized, width, height, axis=0)
        top = self._entropy_offset(resized, width, height, axis=1)
        return resized.crop((left, top, left + width, top + height))

    @staticmethod
    def _entropy_offset(img: Image.Image, width: int, height: int, axis: int, steps: int = 16) -> int:
        """
        Offset along one axis whose crop window has maximum entropy.

        Ties go to the candidate nearest the centre.
        """
        excess = (img.width - width) if axis == 0 else (img.height - height)
        if excess <= 0:
            return 0

        count = min(steps, excess)
        candidates = sorted({round(i * excess / count) for i in range(count + 1)})
        gray = img.convert('L')
        centre = excess / 2

        best, best_key = 0, None
        for offset in candidates:
            if axis == 0:
                box = (offset, 0, offset + width, img.height)
            else:
                box = (0, offset, img.width, offset + height)
            key = (gray.crop(box).entropy(), -abs(offset - centre))
            if best_key is None or key > best_key:
                best, best_key = offset, key
        return best

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert image to RGB, flattening transparency onto white."""
        if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
            rgba = img.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img

    @staticmethod
    def _encode(img: Image.Image, output_format: str, quality: int) -> bytes:
        output = io.BytesIO()
        if output_format == 'JPEG':
            img.save(output, format='JPEG', quality=quality, optimize=True)
        else:
            img.save(output, format=output_format, quality=quality)
        return output.getvalue()
