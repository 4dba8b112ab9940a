class RelayError(Exception):
    """Base class for failures that end a relay request with a 400."""


class ExpenseValidationError(RelayError, ValueError):
    """Raised when an expense request cannot be turned into a Splitser payload."""

    UNPARSEABLE_DATE = "UnparseableDate"
    INVALID_AMOUNT = "InvalidAmount"
    MALFORMED_COOKIES = "MalformedCookies"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class RemoteServiceError(RelayError):
    """Raised when the Splitser API call fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
