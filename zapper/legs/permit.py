"""Turns signed permits into allowances for the router."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from zapper.chain.ledger import LedgerError
from zapper.chain.state import Chain
from zapper.errors import AuthorizationInvalid
from zapper.models.types import normalize_address
from zapper.models.zap import PermitAuthorization

logger = structlog.get_logger()


class PermitAdapter:
    """Applies EIP-2612 permits signed by the caller for the router."""

    def __init__(self, chain: Chain, router: str) -> None:
        self.chain = chain
        self.router = normalize_address(router)

    def apply(self, permits: Sequence[PermitAuthorization], owner: str) -> int:
        """Install every permit's allowance from ``owner`` to the router.

        Returns:
            Number of permits applied

        Raises:
            AuthorizationInvalid: If a permit is expired, names another spender,
                or fails verification
        """
        now = self.chain.now()
        for permit in permits:
            if permit.expiration < now:
                raise AuthorizationInvalid(
                    f"Permit for {permit.token} expired at {permit.expiration}, now {now}"
                )
            if permit.spender != self.router:
                raise AuthorizationInvalid(
                    f"Permit for {permit.token} names spender {permit.spender}, not the router"
                )
            try:
                self.chain.ledger.permit(
                    permit.token,
                    owner,
                    permit.spender,
                    permit.amount,
                    permit.expiration,
                    permit.v,
                    permit.r,
                    permit.s,
                    now=now,
                )
            except LedgerError as e:
                logger.warning("permit_rejected", token=permit.token, owner=owner, error=str(e))
                raise AuthorizationInvalid(f"Permit for {permit.token} rejected: {e}") from e
        return len(permits)
