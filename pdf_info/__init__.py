from .dataclasses import DocumentInfo, IndirectRef
from .info import PdfInfo, is_pdf, pdf_version
from .types import ScanConfig
from .exc import PdfInfoError, PdfInfoReadError, PdfEncryptedError

__all__ = [
    'DocumentInfo',
    'IndirectRef',
    'PdfInfo',
    'is_pdf',
    'pdf_version',
    'ScanConfig',
    'PdfInfoError',
    'PdfInfoReadError',
    'PdfEncryptedError',
]
