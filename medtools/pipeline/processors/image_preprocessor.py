"""
Image preparation for vision-model OCR.

Scans are reduced to grayscale, fitted into a square box and, by default,
binarized with Otsu's threshold so faint print reads as solid strokes.
"""

import io
import logging
from typing import Optional

import cv2
import numpy as np
from PIL import Image, ImageSequence

from medtools.pipeline.core.config import OCR_HISTOGRAM_LEVELS, OCR_MAX_DIMENSION

logger = logging.getLogger(__name__)


def otsu_threshold(gray: np.ndarray) -> int:
    """Otsu threshold of an 8-bit grayscale image from its 256-bin histogram."""
    hist = np.bincount(gray.ravel(), minlength=OCR_HISTOGRAM_LEVELS).astype(np.float64)
    total = hist.sum()
    if total == 0:
        return 0

    levels = np.arange(OCR_HISTOGRAM_LEVELS, dtype=np.float64)
    weight_bg = np.cumsum(hist)
    weight_fg = total - weight_bg
    cum_mean = np.cumsum(hist * levels)
    mean_total = cum_mean[-1]

    with np.errstate(divide="ignore", invalid="ignore"):
        mean_bg = cum_mean / weight_bg
        mean_fg = (mean_total - cum_mean) / weight_fg
        between = weight_bg * weight_fg * (mean_bg - mean_fg) ** 2
    between = np.nan_to_num(between, nan=0.0, posinf=0.0, neginf=0.0)
    return int(np.argmax(between))


class ImagePreprocessor:
    """Prepare scans for vision-model OCR.

    Grayscale, fit into a square box, then optionally binarize with Otsu
    and thicken dark strokes by one pixel. Output is always PNG.
    """

    def __init__(self, max_dimension: int = OCR_MAX_DIMENSION):
        self.max_dimension = max_dimension

    def _fit(self, image: np.ndarray) -> np.ndarray:
        height, width = image.shape[:2]
        scale = min(1.0, self.max_dimension / width, self.max_dimension / height)
        if scale >= 1.0:
            return image
        new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
        return cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)

    @staticmethod
    def _binarize(image: np.ndarray) -> np.ndarray:
        threshold = otsu_threshold(image)
        binary = np.where(image > threshold, 255, 0).astype(np.uint8)
        # Eroding the white background grows black strokes by one pixel.
        return cv2.erode(binary, np.ones((3, 3), np.uint8), iterations=1)

    def preprocess(self, image_bytes: bytes, binarize: bool = True) -> Optional[bytes]:
        """Preprocess raw image bytes (JPEG, PNG, GIF, WEBP).

        Args:
            image_bytes: Encoded image
            binarize: Apply Otsu binarization and stroke thickening

        Returns:
            PNG bytes, or None when the image cannot be processed
        """
        try:
            pil_image = Image.open(io.BytesIO(image_bytes))
            if getattr(pil_image, "is_animated", False):
                pil_image = next(ImageSequence.Iterator(pil_image))
            image = np.array(pil_image.convert("L"))

            image = self._fit(image)
            if binarize:
                image = self._binarize(image)

            result_buf = io.BytesIO()
            Image.fromarray(image).save(result_buf, "PNG")
            return result_buf.getvalue()

        except Exception:
            logger.exception("Failed to preprocess image")
            return None
