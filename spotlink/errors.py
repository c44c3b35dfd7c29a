"""Error types raised by spotlink."""


class SpotLinkError(Exception):
    """Base class for every error raised by spotlink."""


class InvalidArgument(SpotLinkError, ValueError):
    """Missing or wrong-typed identifier, or a malformed Track."""


class MalformedResponse(SpotLinkError):
    """An upstream JSON body is missing required fields."""


class UpstreamError(SpotLinkError):
    """An upstream service answered with a non-success status or garbage."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeout(UpstreamError):
    """An outbound call did not finish within its timeout."""


class AuthenticationFailed(SpotLinkError):
    """Token exchange rejected, or the held token expired with no replacement."""


class CredentialUnavailable(SpotLinkError):
    """A token was requested before the first exchange succeeded."""
