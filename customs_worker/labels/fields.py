from enum import Enum


class CanonicalField(str, Enum):
    """Canonical Document attributes that raw detail-page labels resolve to."""

    DOCUMENT_NUMBER = "documentNumber"
    DOCUMENT_TYPE = "documentType"
    ISSUING_AGENCY = "issuingAgency"
    ISSUE_DATE = "issueDate"
    SIGNER = "signer"
    TITLE = "title"
    FILE_URL = "fileUrl"

    @classmethod
    def parse(cls, value: object) -> "CanonicalField | None":
        """Return the member whose value is ``value`` (whitespace-trimmed), else None."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value
