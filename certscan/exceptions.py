"""Exception hierarchy for the credential document pipeline."""


class CertScanError(Exception):
    """Base class for all pipeline errors."""


class OCRBackendError(CertScanError):
    """An extraction backend could not produce text.

    Args:
        backend: Name of the backend that failed.
        message: Human-readable failure description.
    """

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(f"{backend}: {message}")
        self.backend = backend


class BackendAuthError(OCRBackendError):
    """Credentials for the backend are missing or were rejected."""


class BackendQuotaError(OCRBackendError):
    """The backend refused the call because a quota or rate limit was hit."""


class BackendTimeoutError(OCRBackendError):
    """The backend did not answer within the configured timeout."""


class BackendUnavailableError(OCRBackendError):
    """The backend could not be reached or answered with a server error."""


class UnprocessableDocumentError(CertScanError):
    """The input bytes cannot be opened as a PDF or an image."""


class ProcessingCancelledError(CertScanError):
    """The caller cancelled processing; raised at the next stage boundary."""
