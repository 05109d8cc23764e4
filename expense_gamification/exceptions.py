"""
Exception hierarchy for the gamification engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class GamificationError(Exception):
    """
    Base exception for all gamification errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise GamificationError(
            message="Failed to persist profile",
            operation="save_profile",
            context={"key": "gamification_profile"}
        )
    """

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # 'message' is reserved by logging
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for display or API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Storage Errors
# ==========================================

class StorageError(GamificationError):
    """Key-value persistence failed"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs
    ):
        self.key = key
        kwargs.setdefault(
            "user_message",
            "Your progress could not be saved. It will be kept for this session."
        )
        super().__init__(
            message=message,
            context={"key": key},
            **kwargs
        )


class StorageTimeoutError(StorageError):
    """Storage call exceeded its timeout; nothing was committed"""

    def __init__(self, message: str = "Storage operation timed out", **kwargs):
        kwargs.setdefault("user_message", "Saving your progress took too long. Please try again.")
        super().__init__(message=message, **kwargs)


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(GamificationError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_storage_exception(
    error: Exception,
    operation: str,
    key: Optional[str] = None,
) -> StorageError:
    """
    Wrap backend exceptions (OSError, redis errors, etc.) into our hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        key: Storage key involved

    Returns:
        StorageError wrapping the original exception

    Example:
        try:
            path.write_text(value)
        except OSError as e:
            raise wrap_storage_exception(e, "set", key) from e
    """
    if isinstance(error, StorageError):
        return error

    return StorageError(
        message=f"{operation} failed for key '{key}': {error}",
        key=key,
        operation=operation,
        cause=error
    )
