class LuthierServiceError(RuntimeError):
    """Base class for failures of the external generative collaborators."""

    error_type = "service_error"


class MissingCredentialError(LuthierServiceError, ValueError):
    """Raised at collaborator construction when the API key is not configured."""

    error_type = "missing_credential"


class TransportError(LuthierServiceError):
    """Raised when the provider call fails (network, auth, quota, provider error)."""

    error_type = "transport_error"


class MalformedResponseError(LuthierServiceError):
    """Raised when the provider answers with something we cannot use."""

    error_type = "malformed_response"


class EmptyResultError(LuthierServiceError):
    """Raised when a nominally successful render carries no image data."""

    error_type = "empty_result"


class AdvisoryBusyError(RuntimeError):
    """Raised when a message is sent while the previous response is still streaming."""
