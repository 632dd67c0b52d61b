class NoirException(Exception):
    """Base exception for all noir core errors."""


class FetchError(NoirException):
    """Raised when the catalog or game details cannot be obtained (network, decode, filesystem)."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class DetailsUnavailable(FetchError):
    """Raised when the store answers a details lookup with ``success: false``."""

    def __init__(self, appid: int):
        super().__init__(f"Steam has no details for app {appid}.")
        self.appid = appid


class InputError(NoirException):
    """Raised when search text does not name a game in the catalog."""

    def __init__(self, text: str):
        super().__init__("invalid input")
        self.text = text


class ProcessError(NoirException):
    """
    Raised when the external download tool cannot be started or exits non-zero.
    """

    def __init__(self, message: str, returncode: int | None = None, original_error: Exception | None = None):
        if returncode is not None:
            message += f" (exit code {returncode})"
        super().__init__(message)
        self.returncode = returncode
        self.original_error = original_error
