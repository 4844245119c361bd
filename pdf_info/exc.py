class PdfInfoError(Exception):
    """Base class for any pdf-info custom exceptions"""
    pass

class PdfInfoReadError(PdfInfoError):
    """Raised when the PDF file cannot be read from disk."""
    pass

class PdfEncryptedError(PdfInfoError):
    """Raised when the buffer references an /Encrypt dictionary and the caller asked to be told."""

    def __init__(self, refs: list[str]):
        self.refs = refs
        super().__init__(f"PDF is encrypted ({', '.join(refs)}); decrypt it before scanning")

class ValueDecodeError(PdfInfoError):
    """Raised when a single string value cannot be decoded."""
    pass
