"""Claim domain: model, codes, store and reconciliation."""

from __future__ import annotations

from .claim_codes import generate_claim_code, is_claim_code, normalize_claim_code
from .errors import (
    ClaimAlreadyProcessedError,
    ClaimNotFoundError,
    ClaimNotVerifiedError,
    ClaimRejectedError,
    EmailMismatchError,
    OrderServiceUnavailableError,
    RejectionReason,
)
from .model import Claim, ClaimItem, ClaimSnapshot, ClaimStatus, Order, OrderItem
from .reconciler import ClaimReconciler
from .store import ClaimStore

__all__ = [
    "Claim",
    "ClaimAlreadyProcessedError",
    "ClaimItem",
    "ClaimNotFoundError",
    "ClaimNotVerifiedError",
    "ClaimReconciler",
    "ClaimRejectedError",
    "ClaimSnapshot",
    "ClaimStatus",
    "ClaimStore",
    "EmailMismatchError",
    "Order",
    "OrderItem",
    "OrderServiceUnavailableError",
    "RejectionReason",
    "generate_claim_code",
    "is_claim_code",
    "normalize_claim_code",
]
