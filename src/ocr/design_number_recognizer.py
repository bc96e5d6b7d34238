"""
Design-Number Recognizer
========================

Turns a photo into a candidate design number for the catalog search box.

The OCR call itself is opaque (see ocr.ocr_engine). This module only:
- runs it off the event loop with a bounded wait,
- finds the first "D<.> <No> <digits>" reference in the recognized text,
- maps every failure (OCR error, timeout, no match) to RecognitionError.
"""
from __future__ import annotations

import asyncio
import os
import re
import time
from typing import List, Optional, Tuple

import config
from catalog.design_catalog import DesignCatalog
from catalog.models import Design
from errors import RecognitionError
from utils.logger import get_logger

# "D.No 452", "D.452", "d no. 77", "D 12"
DESIGN_NUMBER_PATTERN = re.compile(r"\bD\.?\s*(?:No\.?\s*)?(\d+)", re.IGNORECASE)


def extract_design_number(text: str) -> Optional[str]:
    """Return the digit run of the first design reference in `text`, or None."""
    if not text:
        return None
    match = DESIGN_NUMBER_PATTERN.search(text)
    return match.group(1) if match else None


class DesignNumberRecognizer:
    """Async wrapper around the OCR engine for design lookups."""

    def __init__(self, ocr_engine=None, timeout_seconds: float = None):
        self._ocr_engine = ocr_engine
        self.timeout_seconds = timeout_seconds or config.OCR_TIMEOUT_SECONDS
        self.logger = get_logger()
        self._in_flight = 0

    @property
    def processing(self) -> bool:
        """True while a recognition is running (the upload control should be disabled)."""
        return self._in_flight > 0

    def _get_engine(self):
        if self._ocr_engine is None:
            from ocr.ocr_engine import OCREngine
            self._ocr_engine = OCREngine(logger=self.logger)
        return self._ocr_engine

    async def recognize_text(self, image_path: str) -> str:
        """
        Run OCR on one image and return the raw text.

        Raises:
            RecognitionError: OCR failed or exceeded the timeout.
        """
        name = os.path.basename(image_path)
        self._in_flight += 1
        try:
            engine = self._get_engine()
            result = await asyncio.wait_for(
                asyncio.to_thread(engine.extract_text_from_image, image_path),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.logger.error(f"OCR timed out after {self.timeout_seconds}s on {name}", component="OCR")
            raise RecognitionError(f"Text recognition timed out after {self.timeout_seconds:g}s")
        except Exception as e:
            self.logger.error(f"OCR failed on {name}: {e}", component="OCR")
            raise RecognitionError(f"Error processing image: {e}") from e
        finally:
            self._in_flight -= 1

        return (result or {}).get('text', '') or ''

    async def recognize(self, image_path: str) -> str:
        """
        Recognize the design number printed in an image.

        Returns:
            The digit run, e.g. "452" for "D.No 452 Blue Silk".

        Raises:
            RecognitionError: OCR failed, timed out, or no design number was found.
        """
        start_time = time.time()
        text = await self.recognize_text(image_path)
        design_number = extract_design_number(text)
        self.logger.log_recognition(os.path.basename(image_path), design_number, time.time() - start_time)

        if design_number is None:
            raise RecognitionError("No design number found in image")
        return design_number

    async def find_designs(self, image_path: str, catalog: DesignCatalog) -> Tuple[str, List[Design]]:
        """Recognize a design number and use it as the catalog search term."""
        design_number = await self.recognize(image_path)
        return design_number, catalog.search(design_number)
