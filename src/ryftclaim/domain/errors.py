"""Rejections raised by claim verification and lookups."""

from __future__ import annotations

from enum import StrEnum


class RejectionReason(StrEnum):
    NOT_FOUND = "not_found"
    ALREADY_PROCESSED = "already_processed"
    EMAIL_MISMATCH = "email_mismatch"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NOT_VERIFIED = "not_verified"


class ClaimRejectedError(RuntimeError):
    """Base class for client-facing claim failures.

    ``str(exc)`` is safe to show to buyers; it never includes transport details.
    """

    reason: RejectionReason
    default_message: str = "This claim cannot be processed."

    def __init__(self, order_id: str, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.order_id = order_id


class ClaimNotFoundError(ClaimRejectedError):
    reason = RejectionReason.NOT_FOUND
    default_message = "Order ID not found. Please check your order number and try again."


class ClaimAlreadyProcessedError(ClaimRejectedError):
    reason = RejectionReason.ALREADY_PROCESSED
    default_message = "This order ID has already been claimed."


class EmailMismatchError(ClaimRejectedError):
    reason = RejectionReason.EMAIL_MISMATCH
    default_message = (
        "This order ID is not valid. If you think this is a mistake, "
        "contact us through our Discord server."
    )


class ClaimNotVerifiedError(ClaimRejectedError):
    reason = RejectionReason.NOT_VERIFIED
    default_message = "Claim not verified. Please verify your order first."


class OrderServiceUnavailableError(ClaimRejectedError):
    reason = RejectionReason.SERVICE_UNAVAILABLE
    default_message = "Order lookup is temporarily unavailable. Please try again shortly."
