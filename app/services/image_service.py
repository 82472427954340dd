"""Image processing service."""

import io
import logging
from typing import Tuple

from PIL import Image

from app.config import settings
from app.utils.exceptions import ImageProcessingError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_MIME = ("image/jpeg", "image/png", "image/webp")

# Resize/compress before sending to Gemini; 1400px is plenty to recognise bottles
VISION_MAX_DIM = 1400
VISION_SKIP_BELOW_BYTES = 350_000
JPEG_QUALITY = 78


class ImageService:
    """Service for validating uploaded bar photos."""

    @staticmethod
    def validate_image(file_content: bytes, filename: str) -> Tuple[bytes, str]:
        """
        Validate an uploaded image.

        Args:
            file_content: Image file bytes
            filename: Original filename

        Returns:
            Tuple of (image_bytes, mime_type)

        Raises:
            ImageProcessingError: If image is invalid
        """
        if not file_content:
            raise ImageProcessingError("Image file is empty")

        max_size = settings.max_request_size
        if len(file_content) > max_size:
            raise ImageProcessingError(f"Image file too large (max {max_size / 1024 / 1024}MB)")

        # Determine MIME type from content (magic bytes)
        mime_type = ImageService._detect_mime_type(file_content)

        if mime_type not in ALLOWED_IMAGE_MIME:
            logger.warning("Rejected upload %s with detected type %s", filename, mime_type)
            raise ImageProcessingError(
                f"Unsupported image format: {mime_type}. Supported: JPEG, PNG, WebP"
            )

        return file_content, mime_type

    @staticmethod
    def _detect_mime_type(file_content: bytes) -> str:
        """
        Detect MIME type from file content (magic bytes).

        Args:
            file_content: File bytes

        Returns:
            MIME type string
        """
        if file_content.startswith(b"\xff\xd8\xff"):
            return "image/jpeg"
        elif file_content.startswith(b"\x89PNG\r\n\x1a\n"):
            return "image/png"
        elif file_content.startswith(b"RIFF") and b"WEBP" in file_content[:12]:
            return "image/webp"
        else:
            return "application/octet-stream"

    @staticmethod
    def prepare_for_vision(image_bytes: bytes, mime_type: str) -> Tuple[bytes, str]:
        """
        Downscale + compress large photos to reduce Gemini latency.

        Small images are returned untouched; on any Pillow failure the original
        bytes are returned.
        """
        if len(image_bytes) < VISION_SKIP_BELOW_BYTES:
            return image_bytes, mime_type

        try:
            with Image.open(io.BytesIO(image_bytes)) as im:
                # Normalize to RGB; if alpha exists, composite onto white
                if im.mode in ("RGBA", "LA") or (im.mode == "P" and "transparency" in im.info):
                    bg = Image.new("RGBA", im.size, (255, 255, 255, 255))
                    im = Image.alpha_composite(bg, im.convert("RGBA")).convert("RGB")
                else:
                    im = im.convert("RGB")

                w, h = im.size
                max_side = max(w, h)
                if max_side > VISION_MAX_DIM:
                    scale = VISION_MAX_DIM / float(max_side)
                    im = im.resize((max(1, int(w * scale)), max(1, int(h * scale))), Image.LANCZOS)

                out = io.BytesIO()
                im.save(out, format="JPEG", quality=JPEG_QUALITY, optimize=True)
                return out.getvalue(), "image/jpeg"

        except Exception as e:
            # Don't fail the scan because of resizing
            logger.warning(f"Image resize/compress skipped: {e}")
            return image_bytes, mime_type
