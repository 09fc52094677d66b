class OcrError(Exception):
    """Base exception for OCR job handling."""


class OcrJobValidationError(OcrError):
    """Raised when an OCR job request is missing required fields."""


class OcrJobFailedError(OcrError):
    """Raised by the queue worker when an OCR job did not succeed."""
