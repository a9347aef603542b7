from __future__ import annotations


class ProxyError(Exception):
    """
    Base class of every failure the relay turns into an `{"error": ...}` response.

    Attributes:
        message: Human-readable text returned to the caller as-is.
        status_code: HTTP status used for the error envelope.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingField(ProxyError):
    """A field required by the route is absent from the request."""

    status_code = 400


class UnsupportedChain(ProxyError):
    """The chain key is not registered for the requested provider purpose."""

    status_code = 400

    def __init__(self, message: str = "Unsupported chain") -> None:
        super().__init__(message)


class UnsupportedToken(ProxyError):
    """The (chain, token) pair has no contract address."""

    status_code = 400


class MissingCredential(ProxyError):
    """The caller did not supply a bearer token for a tracker route."""

    status_code = 401

    def __init__(self, message: str = "Authorization token required") -> None:
        super().__init__(message)


class ConfigurationError(ProxyError):
    """The process lacks a provider key or the tracker base URL."""

    status_code = 500


class UpstreamFailure(ProxyError):
    """The tracker service answered non-2xx or could not be reached; status is propagated."""


class UpstreamUnavailable(ProxyError):
    """An RPC, gas-price or explorer provider failed; always reported as 500."""

    status_code = 500
