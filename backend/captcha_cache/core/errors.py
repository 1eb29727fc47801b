"""Error Hierarchy — typed, categorized exceptions for every cache-client failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Module errors raised during startup are CRITICAL; the process must not serve commands
    - Protocol/deserialization errors are recoverable by the caller (retry or abort is theirs)
    - Transport errors keep the redis-py exception as __cause__ and its message text
    - to_response() produces a structured envelope for callers that report errors upward

Design Decisions:
    - Single hierarchy with CaptchaCacheError base: callers catch one type (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - StoreConnectionError subclasses StoreError: "could not connect" is a transport failure too
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    MODULE = "module"
    PROTOCOL = "protocol"
    STORE = "store"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    captcha_id: str | None = None
    command: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class CaptchaCacheError(Exception):
    """Base exception for all cache-client errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def is_startup_fatal(self) -> bool:
        return self.severity is ErrorSeverity.CRITICAL

    def to_response(self) -> dict:
        """Convert to standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "captcha_id": self.context.captcha_id,
                    "command": self.context.command,
                },
            }
        }


# ─── Module Errors (startup) ────────────────────────────────────

class ModuleNotLoadedError(CaptchaCacheError):
    """The mCaptcha cache module is not loaded in the store."""
    def __init__(self, module_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Redis module '{module_name}' is not loaded",
            "MODULE_NOT_LOADED", ErrorCategory.MODULE,
            ErrorSeverity.CRITICAL, context,
        )
        self.module_name = module_name


class ModuleCommandNotFoundError(CaptchaCacheError):
    """Module is loaded but an expected command is unavailable (version mismatch)."""
    def __init__(self, command: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.command = command
        super().__init__(
            f"Redis module command '{command}' not found",
            "MODULE_COMMAND_NOT_FOUND", ErrorCategory.MODULE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.command = command


# ─── Protocol Errors (per call) ─────────────────────────────────

class ModuleProtocolError(CaptchaCacheError):
    """Module replied with a value outside the command's expected domain."""
    def __init__(
        self, command: str, value: Any, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.command = command
        super().__init__(
            f"Unexpected reply {value!r} from {command}",
            "MODULE_PROTOCOL_ERROR", ErrorCategory.PROTOCOL,
            ErrorSeverity.ERROR, ctx,
        )
        self.command = command
        self.value = value


class DeserializationError(CaptchaCacheError):
    """A reply expected to be structured JSON could not be parsed."""
    def __init__(
        self, command: str, payload: Any, reason: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.command = command
        super().__init__(
            f"Could not deserialize reply from {command}: {reason}",
            "DESERIALIZATION_ERROR", ErrorCategory.PROTOCOL,
            ErrorSeverity.ERROR, ctx,
        )
        self.command = command
        self.payload = payload


# ─── Store Errors (transport) ───────────────────────────────────

class StoreError(CaptchaCacheError):
    """Transport or server failure while talking to the store."""
    def __init__(
        self,
        message: str,
        operation: str,
        context: ErrorContext | None = None,
        *,
        code: str = "STORE_ERROR",
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ):
        super().__init__(
            f"Store {operation} failed: {message}",
            code, ErrorCategory.STORE, severity, context,
        )
        self.operation = operation


class StoreConnectionError(StoreError):
    """Initial connection to the store could not be established."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "connect", context,
            code="STORE_CONNECTION_ERROR", severity=ErrorSeverity.CRITICAL,
        )
