"""
OCR Engine using Google Gemini Vision API
Reads the printed text (design tags, labels) off a garment photo
"""
import os
import google.generativeai as genai
from typing import Dict
from PIL import Image
import config


class OCREngine:
    """OCR Engine using Google Gemini Vision API for design-tag text extraction"""

    def __init__(self, model_name: str = None, logger=None):
        """Initialize the OCR engine with Gemini API"""
        genai.configure(api_key=config.GOOGLE_API_KEY)
        self.model = genai.GenerativeModel(model_name or config.OCR_MODEL_NAME)
        self.logger = logger

        self.ocr_prompt = """
Extract ALL visible text from this photo of a garment, swatch card or design tag.

INSTRUCTIONS:
1. Scan the ENTIRE image, including labels, stickers, tags and handwriting
2. Keep design references exactly as printed (e.g. "D.No 452", "D.123", "D No. 77")
3. Do NOT summarize, translate or correct anything
4. If text is unclear, provide your best reading

OUTPUT FORMAT:
Plain text, one line per printed line.
"""

    def extract_text_from_image(self, image_path: str) -> Dict:
        """
        Extract text from a single image

        Args:
            image_path: Path to the uploaded photo

        Returns:
            Dict with 'text'
        """
        try:
            image = Image.open(image_path)
            response = self.model.generate_content([self.ocr_prompt, image])
            extracted_text = response.text if response.text else ""
        except Exception as e:
            raise Exception(f"OCR failed for {os.path.basename(image_path)}: {str(e)}")

        if self.logger:
            self.logger.debug(
                f"Extracted {len(extracted_text)} chars from {os.path.basename(image_path)}",
                component="OCR"
            )
        return {'text': extracted_text}
