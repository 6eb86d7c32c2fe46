from __future__ import annotations


class ForecastError(Exception):
    """Base error. ``status_code`` mirrors the HTTP status a request layer should use."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(ForecastError):
    status_code = 400


class PlayerNotFound(ForecastError):
    status_code = 404


class AmbiguousPlayer(ForecastError):
    status_code = 409


class ProviderError(ForecastError):
    """A provider call failed (network, bad status, or unparsable payload)."""

    status_code = 502


class UpstreamUnavailable(ForecastError):
    status_code = 503
