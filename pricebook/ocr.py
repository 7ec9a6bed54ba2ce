"""Tesseract OCR engine for receipt photos."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image

    from .config import OCRConfig

logger = logging.getLogger(__name__)


class OCREngine:
    """A Tesseract handle with an explicit lifecycle.

    Create one per process, call ``start()`` (or use it as a context
    manager) and ``close()`` on shutdown.
    """

    def __init__(
        self,
        lang: str = "eng",
        psm: int = 6,
        scale: float = 2.0,
        threshold: int = 190,
        char_whitelist: str = "",
    ) -> None:
        self._lang = lang
        self._psm = psm
        self._scale = scale
        self._threshold = threshold
        self._char_whitelist = char_whitelist
        self._tesseract = None
        self.version: str | None = None

    @classmethod
    def from_config(cls, config: OCRConfig) -> OCREngine:
        return cls(
            lang=config.lang,
            psm=config.psm,
            scale=config.scale,
            threshold=config.threshold,
            char_whitelist=config.char_whitelist,
        )

    def start(self) -> OCREngine:
        if self._tesseract is not None:
            return self
        try:
            import pytesseract
        except ImportError:
            raise ImportError(
                "pytesseract is required: pip install 'pricebook[ocr]'"
            ) from None

        self.version = str(pytesseract.get_tesseract_version())
        self._tesseract = pytesseract
        logger.info("Tesseract %s ready (lang=%s)", self.version, self._lang)
        return self

    def close(self) -> None:
        if self._tesseract is not None:
            self._tesseract = None
            logger.info("Tesseract engine closed")

    @property
    def running(self) -> bool:
        return self._tesseract is not None

    def __enter__(self) -> OCREngine:
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def tesseract_config(self) -> str:
        cfg = f"--psm {self._psm} -c preserve_interword_spaces=1"
        if self._char_whitelist:
            # -c values cannot contain spaces
            cfg += f" -c tessedit_char_whitelist={self._char_whitelist.replace(' ', '')}"
        return cfg

    def preprocess(self, img: Image.Image) -> Image.Image:
        """Upscale, convert to grayscale and binarize."""
        from PIL import Image as PILImage

        w, h = img.size
        if self._scale and self._scale != 1:
            img = img.resize(
                (int(w * self._scale), int(h * self._scale)), PILImage.LANCZOS
            )
        gray = img.convert("L")
        threshold = self._threshold
        return gray.point(lambda p: 255 if p > threshold else 0)

    def recognize(self, source: str | Path | Image.Image) -> str:
        """Return the text of an image file or PIL image."""
        if self._tesseract is None:
            raise RuntimeError("OCR engine is not started")

        try:
            from PIL import Image as PILImage
        except ImportError:
            raise ImportError("Pillow is required: pip install 'pricebook[ocr]'") from None

        if isinstance(source, (str, Path)):
            with PILImage.open(source) as im:
                logger.info("OCR: %s size=%sx%s", source, im.width, im.height)
                prepared = self.preprocess(im)
        else:
            prepared = self.preprocess(source)

        text = self._tesseract.image_to_string(
            prepared, lang=self._lang, config=self.tesseract_config
        ) or ""
        logger.info("OCR: recognized %d characters", len(text))
        return text
