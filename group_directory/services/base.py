"""
Base Service Classes and Utilities

This module provides the foundation for the directory service layer including
the error taxonomy, the result type for recoverable failures, and the
decorator that gives every service method consistent logging and error
translation.
"""

import logging
from typing import Any, Dict, List, Optional, Generic, TypeVar, Callable
from datetime import datetime, timezone
from dataclasses import dataclass
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "SERVICE_ERROR"
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)


class ConflictError(ServiceError):
    """Resource conflict error."""

    def __init__(self, message: str, conflicting_resource: str = None):
        super().__init__(message, "CONFLICT", {"conflicting_resource": conflicting_resource})


class GroupAlreadyExistsError(ConflictError):
    """A group with the derived gid is already stored."""

    def __init__(self, gid: str):
        super().__init__(f"Group already exists: {gid}", gid)
        self.error_code = "GROUP_ALREADY_EXISTS"
        self.gid = gid


class StoreError(ServiceError):
    """The backing store failed (unreachable, malformed query, ...)."""

    def __init__(self, message: str, operation: str = None):
        super().__init__(message, "STORE_ERROR", {"operation": operation})
        self.operation = operation


@dataclass
class ServiceResult(Generic[T]):
    """Standard result type for operations with a recoverable failure mode."""
    success: bool
    data: Optional[T] = None
    error: Optional[ServiceError] = None
    warnings: List[str] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.warnings is None:
            self.warnings = []
        if self.metadata is None:
            self.metadata = {}

    @classmethod
    def success_result(cls, data: T, metadata: Dict[str, Any] = None) -> 'ServiceResult[T]':
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata or {})

    @classmethod
    def error_result(cls, error: ServiceError, metadata: Dict[str, Any] = None) -> 'ServiceResult[T]':
        """Create an error result."""
        return cls(success=False, error=error, metadata=metadata or {})


def service_method(func: Callable) -> Callable:
    """
    Decorator for service methods with logging and error translation.

    Raw SQLAlchemy failures are re-raised as StoreError so callers only
    have to know the service taxonomy. Nothing is swallowed: every
    exception leaves the method.
    """

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        method_name = f"{self.__class__.__name__}.{func.__name__}"
        logger.debug(f"[{method_name}] Starting operation")

        try:
            result = func(self, *args, **kwargs)
        except ServiceError as e:
            logger.error(f"[{method_name}] Service error: {e.message}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"[{method_name}] Store error: {e}")
            raise StoreError(f"Store failure in {method_name}: {e}", func.__name__) from e

        if isinstance(result, ServiceResult) and not result.success:
            logger.info(f"[{method_name}] Operation failed: {result.error.message}")
        else:
            logger.debug(f"[{method_name}] Operation completed")

        return result

    return wrapper


class BaseService:
    """Base class for directory services."""

    def __init__(self, name: str = None):
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(f"services.{self.name}")
