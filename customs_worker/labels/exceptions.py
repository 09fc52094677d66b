class LabelOverrideError(Exception):
    """Raised when a label override file cannot be read or parsed."""
