"""
Design-number recognition for Stitchbook
The Gemini-backed OCREngine is imported lazily so the pattern helpers work
without an API key.
"""

from .design_number_recognizer import DesignNumberRecognizer, extract_design_number

__all__ = ['DesignNumberRecognizer', 'extract_design_number']
