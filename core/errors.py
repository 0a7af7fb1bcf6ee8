# core/errors.py
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    UNAUTHENTICATED = "Unauthenticated"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    INVALID_TRANSITION = "InvalidTransition"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    DUPLICATE_EMAIL = "DuplicateEmail"
    EXTERNAL_SERVICE = "ExternalServiceError"
    NOT_AVAILABLE = "NotAvailable"
    SELF_EXCHANGE = "SelfExchange"
    INVALID_AMOUNT = "InvalidAmount"
    DUPLICATE_CREDIT = "DuplicateCredit"


class ReadloomError(Exception):
    """Domain error carrying an ErrorKind.

    Raised inside repositories and services; public service operations
    convert it to an ``Err`` so callers never see a raw exception for
    an expected failure.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"ReadloomError({self.kind.value}, {self.message!r})"


class ExternalServiceError(ReadloomError):
    """A payment, moderation, video or email provider call failed."""

    def __init__(self, service: str, message: str):
        super().__init__(ErrorKind.EXTERNAL_SERVICE, message)
        self.service = service


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def returns_result(func: Callable[..., Any]) -> Callable[..., Result]:
    """Wrap a service operation so ReadloomError becomes Err and values become Ok."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return Ok(func(*args, **kwargs))
        except ReadloomError as e:
            return Err(e.kind, e.message)
    return wrapper


def unwrap(result: Result) -> Any:
    """Return the value of an Ok or re-raise an Err as ReadloomError."""
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, Err):
        raise ReadloomError(result.kind, result.message)
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")
