"""Error Hierarchy — typed, categorized exceptions for all PromptAtrium failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope {"error": {...}}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PromptAtriumError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Services raise these directly; routes stay free of status-code plumbing
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    resource_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class PromptAtriumError(Exception):
    """Base exception for all PromptAtrium errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "resource_id": self.context.resource_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidRequestError(PromptAtriumError):
    """Request is well-formed but carries an invalid value."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class BusinessRuleError(PromptAtriumError):
    """Operation violates a marketplace, community or credit rule."""
    def __init__(
        self, message: str, code: str = "BUSINESS_RULE_VIOLATION",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class InsufficientCreditsError(BusinessRuleError):
    """Credit balance does not cover the spend."""
    def __init__(self, balance: int, required: int, context: ErrorContext | None = None):
        super().__init__("Insufficient credits", "INSUFFICIENT_CREDITS", context)
        self.balance = balance
        self.required = required


class AuthenticationRequiredError(PromptAtriumError):
    """No authenticated user on the request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required", "UNAUTHENTICATED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(PromptAtriumError):
    """Authenticated user lacks the role or ownership required."""
    def __init__(self, message: str = "Insufficient permissions", context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(PromptAtriumError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class ConflictError(PromptAtriumError):
    """Resource already exists or was modified concurrently."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PromptAtriumError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ExternalServiceError(PromptAtriumError):
    """Third-party API call failed or the integration is not configured."""
    def __init__(
        self,
        service: str,
        message: str,
        error_type: str = "unknown",
        retry_after_ms: int | None = None,
        http_status: int = 503,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"{service} error ({error_type}): {message}",
            f"{service.upper()}_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, http_status,
        )
        self.service = service
        self.error_type = error_type


class StripeAPIError(ExternalServiceError):
    """Stripe call failed."""
    def __init__(self, message: str, error_type: str = "stripe_error", context: ErrorContext | None = None):
        super().__init__("Stripe", message, error_type, context=context)


class GeminiAPIError(ExternalServiceError):
    """Gemini call failed or returned unusable output."""
    def __init__(
        self, message: str, error_type: str = "api_error",
        http_status: int = 502, context: ErrorContext | None = None,
    ):
        super().__init__(
            "Gemini", message, error_type, http_status=http_status, context=context,
        )


class AnthropicAPIError(ExternalServiceError):
    """Anthropic API call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "Anthropic", message, api_error_type,
            retry_after_ms=retry_after_ms, context=context,
        )
        self.api_error_type = api_error_type


class SheetsAPIError(ExternalServiceError):
    """Google Sheets call failed or credentials missing."""
    def __init__(self, message: str, error_type: str = "api_error", context: ErrorContext | None = None):
        super().__init__("Sheets", message, error_type, context=context)
