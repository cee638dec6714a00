"""Zap router error classes.

Every failure a caller can observe from a route is a ZapError. Errors raised
by the collaborators (ledger, pools, vault) and by the pricing math are
chained as ``__cause__`` at the adapter that called them.
"""

from __future__ import annotations


class ZapError(Exception):
    """Base error for zap routing."""

    pass


class AuthorizationInvalid(ZapError):
    """Permit signature failed verification, expired, or names another spender."""

    pass


class DeadlineExpired(ZapError):
    """Ambient time is past the request deadline."""

    pass


class SlippageExceeded(ZapError):
    """An intermediate or final amount fell below the caller's minimum."""

    def __init__(self, message: str, *, amount: int | None = None, minimum: int | None = None):
        super().__init__(message)
        self.amount = amount
        self.minimum = minimum


class InvalidRequest(ZapError):
    """Request is structurally inconsistent with the configured pools."""

    pass


class InvalidBasket(InvalidRequest):
    """Basket amounts are empty, all zero, or do not match the pool's basket."""

    pass


class LegExecutionFailed(ZapError):
    """An external pool or vault call aborted for its own reasons."""

    def __init__(self, message: str, *, leg: str | None = None):
        super().__init__(message)
        self.leg = leg


class EstimationInvalid(ZapError):
    """A quote could not be produced for the request."""

    pass


class ApprovalSetupError(ZapError):
    """Standing approvals could not be installed, or setup is not finished."""

    pass


class Unauthorized(ZapError):
    """Caller is not authorized for an owner-only operation."""

    pass
