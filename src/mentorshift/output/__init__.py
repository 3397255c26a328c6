"""Output generation for schedules (PDF, text report)."""

from mentorshift.output.debug_generator import DebugGenerator
from mentorshift.output.pdf_generator import PDFGenerator

__all__ = [
    "DebugGenerator",
    "PDFGenerator",
]
