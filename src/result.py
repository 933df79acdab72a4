"""Result pattern for operations whose failure is shown to the user.

Payment recording and statement exports return a Result instead of
raising, so views can display the error message directly.
"""
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.

    Attributes:
        success: Whether the operation succeeded.
        value: The return value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Category of error (see ErrorType).

    Usage:
        result = payments.record_payment(customer_id, 250.0)
        if result:
            print(f"Saved payment {result.value}")
        else:
            print(f"Error: {result.error}")
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, error_type: str = None) -> 'Result[T]':
        return cls(success=False, error=error, error_type=error_type)

    def __bool__(self) -> bool:
        return self.success


class ErrorType:
    """Standard error type constants."""
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    EXPORT = "EXPORT"
