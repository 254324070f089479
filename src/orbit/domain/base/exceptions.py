"""Domain exceptions shared by queries, waiters and the session adapter."""

from typing import Any, Optional


class DomainException(Exception):
    """Base exception for every error raised by the compute client."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serialisable dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainException):
    """Raised when caller supplied input is invalid."""


class ConfigurationError(DomainException):
    """Raised when client configuration cannot be loaded or validated."""


class ResourceNotFoundError(DomainException):
    """Raised when a resource cannot be resolved."""

    def __init__(
        self, resource_type: str, resource_id: Optional[str] = None, message: Optional[str] = None
    ) -> None:
        if message is None:
            if resource_id is None:
                message = f"No {resource_type} found"
            else:
                message = f"{resource_type} {resource_id} not found"
        super().__init__(
            message,
            error_code="RESOURCE_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class TooManyItemsError(DomainException):
    """Raised when a query expected to match exactly one item matches more."""

    def __init__(self, resource_type: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Query returned more than one {resource_type}",
            error_code="TOO_MANY_ITEMS",
            details={"resource_type": resource_type},
        )
        self.resource_type = resource_type


class ResourceBusyError(DomainException):
    """Raised when an entity is held by an unresolved waiter."""

    def __init__(self, resource_id: str, resource_type: str = "server") -> None:
        super().__init__(
            f"{resource_type.capitalize()} {resource_id} is held by an active waiter",
            error_code="RESOURCE_BUSY",
            details={"resource_id": resource_id},
        )
        self.resource_id = resource_id


class OperationError(DomainException):
    """Base class for state-transition failures."""

    def __init__(self, message: str, resource_id: str, target: Any, error_code: str) -> None:
        super().__init__(
            message,
            error_code=error_code,
            details={"resource_id": resource_id, "target": str(target)},
        )
        self.resource_id = resource_id
        self.target = target


class OperationFailedError(OperationError):
    """Raised when the provider reports a terminal failure state."""

    def __init__(
        self, resource_id: str, target: Any, status: Any = "ERROR", resource_type: str = "server"
    ) -> None:
        super().__init__(
            f"{resource_type.capitalize()} {resource_id} got into {status} state "
            f"instead of {target}",
            resource_id,
            target,
            "OPERATION_FAILED",
        )
        self.details["status"] = str(status)
        self.status = status


class OperationTimedOutError(OperationError):
    """Raised when a waiter exceeds its time budget."""

    def __init__(
        self,
        resource_id: str,
        target: Any,
        timeout: Optional[float] = None,
        resource_type: str = "server",
    ) -> None:
        super().__init__(
            f"Timeout waiting for {resource_type} {resource_id} to reach state {target}",
            resource_id,
            target,
            "OPERATION_TIMED_OUT",
        )
        self.details["timeout"] = timeout
        self.timeout = timeout


class OperationCancelledError(OperationError):
    """Raised when the caller cancels a wait before it resolves."""

    def __init__(self, resource_id: str, target: Any, resource_type: str = "server") -> None:
        super().__init__(
            f"Cancelled waiting for {resource_type} {resource_id} to reach state {target}",
            resource_id,
            target,
            "OPERATION_CANCELLED",
        )


class InfrastructureError(DomainException):
    """Raised for failures of the transport collaborator."""

    def __init__(self, component: str, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, error_code="INFRASTRUCTURE_ERROR", details=details)
        self.component = component


class TransportError(InfrastructureError):
    """Raised when an HTTP call to the compute API fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__("HTTP", message, details=dict(details or {}, status_code=status_code))
        self.error_code = "TRANSPORT_ERROR"
        self.status_code = status_code
