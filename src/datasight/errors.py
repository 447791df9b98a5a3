from __future__ import annotations

from typing import Any, Optional

from .constants import ExitCode


class InsightsError(Exception):
    """Base exception for all datasight errors."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    exit_code: ExitCode = ExitCode.ERROR

    def details(self) -> Optional[Any]:
        return None


class ValidationError(InsightsError):
    """Required input missing or malformed."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthError(InsightsError):
    """No authenticated principal."""

    code = "UNAUTHORIZED"
    status_code = 401


class NotFoundError(InsightsError):
    """Dataset absent or not owned by the caller."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(InsightsError):
    """Insight generation already in progress for the dataset."""

    code = "CONFLICT"
    status_code = 409


class StorageError(InsightsError):
    """Uploaded file could not be downloaded."""

    code = "STORAGE_ERROR"


class ConfigurationError(InsightsError):
    """Selected provider is missing its credential."""

    code = "CONFIGURATION_ERROR"


class UnknownProviderError(InsightsError):
    """Provider selector matches no known provider."""

    code = "UNKNOWN_PROVIDER"


class UnsupportedTemplateError(InsightsError):
    """Requested output template is not supported by the provider."""

    code = "UNSUPPORTED_TEMPLATE"
    status_code = 400


class ProviderError(InsightsError):
    """Upstream LLM API returned a non-success status (or timed out)."""

    code = "PROVIDER_ERROR"

    def __init__(self, provider: str, status: Optional[int], body: str) -> None:
        self.provider = provider
        self.upstream_status = status
        self.body = body
        label = status if status is not None else "no status"
        super().__init__(f"{provider} API error: {label} - {body}")

    def details(self) -> Optional[Any]:
        return {"provider": self.provider, "upstream_status": self.upstream_status}


class ParseError(InsightsError):
    """Upstream success payload did not match the expected shape."""

    code = "PARSE_ERROR"
