"""
OCR text extraction.

``TextExtractor`` is the capability the pipeline depends on; the Tesseract
implementation below is the production engine. Images are opened with
Pillow, PDFs are rendered page by page with PyMuPDF.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import fitz  # PyMuPDF
import pytesseract
from PIL import Image

from finance_tracker.schemas import OCRResult

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"


class ExtractionError(Exception):
    """The OCR engine could not turn the file into text."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"OCR processing failed for {Path(path).name}: {reason}")


class TextExtractor(ABC):
    @abstractmethod
    def extract_text(self, path: str | Path) -> OCRResult:
        """Return the text of *path* and the engine confidence (0-100).

        Raises :class:`ExtractionError` when the file cannot be processed.
        """


class TesseractExtractor(TextExtractor):
    """Tesseract via pytesseract. No retries; failures surface as ExtractionError."""

    def __init__(
        self,
        language: str = "eng",
        tesseract_cmd: str | None = None,
        timeout: int = 0,
        pdf_dpi: int = 300,
        config: str = "--oem 3 --psm 6",  # uniform block of text suits receipts
    ):
        self.language = language
        self.timeout = timeout
        self.pdf_dpi = pdf_dpi
        self.config = config
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    # -- public -----------------------------------------------------------

    def extract_text(self, path: str | Path) -> OCRResult:
        path = Path(path)
        logger.info("Starting OCR for %s", path.name)
        try:
            pages = self._load_pages(path)
            texts: list[str] = []
            confidences: list[float] = []
            for index, image in enumerate(pages, 1):
                logger.debug("OCR progress: page %d/%d of %s", index, len(pages), path.name)
                text, page_confidences = self._recognize(image)
                texts.append(text)
                confidences.extend(page_confidences)
        except (
            OSError,
            RuntimeError,
            ValueError,
            Image.DecompressionBombError,
            pytesseract.TesseractError,
        ) as e:
            logger.error("OCR failed for %s: %s", path.name, e)
            raise ExtractionError(path, str(e)) from e

        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        logger.info("OCR completed for %s with %.1f%% confidence", path.name, confidence)
        return OCRResult(text="\n".join(texts), confidence=confidence)

    # -- helpers ----------------------------------------------------------

    def _load_pages(self, path: Path) -> list[Image.Image]:
        if not path.is_file():
            raise FileNotFoundError(f"No such file: {path}")
        if path.suffix.lower() == PDF_SUFFIX:
            return self._render_pdf(path)
        with Image.open(path) as image:
            image.load()
            return [image.convert("RGB")]

    def _render_pdf(self, path: Path) -> list[Image.Image]:
        pages: list[Image.Image] = []
        with fitz.open(str(path)) as doc:
            for page in doc:
                pix = page.get_pixmap(dpi=self.pdf_dpi)
                pages.append(Image.frombytes("RGB", (pix.width, pix.height), pix.samples))
        if not pages:
            raise ValueError("PDF has no pages")
        return pages

    def _recognize(self, image: Image.Image) -> tuple[str, list[float]]:
        """One engine pass per page; text is rebuilt from the word boxes."""
        data = pytesseract.image_to_data(
            image,
            lang=self.language,
            config=self.config,
            timeout=self.timeout,
            output_type=pytesseract.Output.DICT,
        )
        lines: dict[tuple[int, int, int], list[str]] = {}
        confidences: list[float] = []
        for i, word in enumerate(data.get("text", [])):
            conf = float(data["conf"][i])
            # Tesseract reports -1 for non-word boxes
            if conf >= 0:
                confidences.append(conf)
            word = (word or "").strip()
            if not word:
                continue
            key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
            lines.setdefault(key, []).append(word)
        text = "\n".join(" ".join(words) for words in lines.values())
        return text, confidences


def build_extractor(settings) -> TextExtractor:
    return TesseractExtractor(
        language=settings.OCR_LANGUAGE,
        tesseract_cmd=settings.TESSERACT_CMD or None,
        timeout=settings.OCR_TIMEOUT_SECONDS,
        pdf_dpi=settings.PDF_RENDER_DPI,
    )
