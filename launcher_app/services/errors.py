# launcher_app/services/errors.py


class LauncherClientError(Exception):
    pass


class ApiError(LauncherClientError):
    """
    Raised when the backend answers with a non-2xx status or cannot be reached.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransferError(LauncherClientError):
    pass


class ExtractionError(LauncherClientError):
    pass
