"""
Error taxonomy for the PRD builder client.

Defines hierarchical exceptions with standardized attributes for consistent
error handling, logging, and client communication throughout the application.

Each error class implements:
- code: String identifier for the error type
- message: Human-readable description
- context: Dict containing additional contextual information
- retry_hint: Boolean indicating if retry might succeed
"""
from __future__ import annotations
from typing import Any


class PRDBuilderError(Exception):
    """Base exception for all PRD builder errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "UNKNOWN_ERROR",
        context: dict[str, Any] | None = None,
        retry_hint: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context) if context else {}
        self.retry_hint = retry_hint

    def to_dict(self) -> dict[str, Any]:
        """Serialize to structured dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
            "retry_hint": self.retry_hint,
        }


class ProviderError(PRDBuilderError):
    """External collaborator failure (agent service, upload service)."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        code: str = "PROVIDER_ERROR",
        context: dict[str, Any] | None = None,
        retry_hint: bool = True,
    ) -> None:
        ctx = dict(context) if context else {}
        ctx["provider"] = provider
        super().__init__(message, code=code, context=ctx, retry_hint=retry_hint)


class AgentCallError(ProviderError):
    """The agent call could not be completed or returned an unreadable body."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "AGENT_CALL_ERROR",
        context: dict[str, Any] | None = None,
        retry_hint: bool = True,
    ) -> None:
        super().__init__(
            message, provider="agent", code=code, context=context, retry_hint=retry_hint
        )


class UploadError(ProviderError):
    """A single file upload could not be completed."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "UPLOAD_ERROR",
        context: dict[str, Any] | None = None,
        retry_hint: bool = True,
    ) -> None:
        super().__init__(
            message, provider="upload", code=code, context=context, retry_hint=retry_hint
        )


class ConfigurationError(PRDBuilderError):
    """Missing or invalid configuration."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "CONFIGURATION_ERROR",
        context: dict[str, Any] | None = None,
        retry_hint: bool = False,
    ) -> None:
        super().__init__(message, code=code, context=context, retry_hint=retry_hint)


class SchemaError(PRDBuilderError):
    """Data validation/schema failure."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "SCHEMA_ERROR",
        context: dict[str, Any] | None = None,
        retry_hint: bool = False,
    ) -> None:
        super().__init__(message, code=code, context=context, retry_hint=retry_hint)
