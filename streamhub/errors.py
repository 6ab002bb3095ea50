"""
Application error taxonomy.
Every service failure is an AppError with a stable kind and a human-readable message;
the HTTP layer renders it as {"success": false, "kind": ..., "message": ...}.
"""
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict


class ErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    NOT_FOUND = "NotFound"
    INVALID_CARD_FORMAT = "InvalidCardFormat"
    INVALID_CVV_FORMAT = "InvalidCvvFormat"
    CARD_EXPIRED = "CardExpired"
    ALREADY_PAID = "AlreadyPaid"
    CARD_DECLINED = "CardDeclined"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    INVALID_CARD = "InvalidCard"
    PAYMENT_ERROR = "PaymentError"
    UNKNOWN = "Unknown"
    CATALOG_UNAVAILABLE = "CatalogUnavailable"
    RATE_LIMITED = "RateLimited"


# Anything not listed is a client fault (400)
STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.PAYMENT_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorKind.CATALOG_UNAVAILABLE: HTTPStatus.BAD_GATEWAY,
    ErrorKind.RATE_LIMITED: HTTPStatus.TOO_MANY_REQUESTS,
}


class AppError(Exception):
    """
    Base exception for all service errors.

    Attributes:
        kind: Stable error kind from ErrorKind
        message: Error message safe to show to the caller
        status_code: HTTP status code derived from the kind
    """

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        self.status_code = int(STATUS_BY_KIND.get(kind, HTTPStatus.BAD_REQUEST))
        super().__init__(self.message)

    @property
    def is_server_fault(self) -> bool:
        return self.status_code >= 500

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "success": False,
            "kind": self.kind.value,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
