"""Custom speech synthesis exceptions."""


class TTSError(Exception):
    """Base exception for speech synthesis errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class TTSAuthError(TTSError):
    """Exception raised for authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    - API key permissions are insufficient
    """

    pass


class TTSAPIError(TTSError):
    """Exception raised for cloud API communication errors.

    This typically occurs when:
    - API server is unavailable (5xx errors)
    - Rate limits are exceeded (429 error)
    - Request format is invalid (4xx errors)
    - The response body is empty or not audio
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class TTSEngineError(TTSError):
    """Exception raised when the local synthesis engine fails.

    This typically occurs when:
    - The engine executable is not installed
    - The engine exits with a non-zero code
    - The engine exits cleanly but writes no audio
    """

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.returncode = returncode


class TTSTimeoutError(TTSError):
    """Exception raised when the local engine exceeds its timeout."""

    def __init__(self, message: str, timeout: float) -> None:
        super().__init__(message)
        self.timeout = timeout
