"""Vault leg: one weighted-pool swap between an LP token and the principal token."""

from __future__ import annotations

import structlog

from zapper.approvals import ApprovalRegistry
from zapper.chain.ledger import LedgerError
from zapper.encoding import encode_vault_swap
from zapper.errors import DeadlineExpired, LegExecutionFailed, SlippageExceeded
from zapper.legs.pool import LegOutcome
from zapper.models.types import normalize_address
from zapper.models.zap import VaultLegDescriptor
from zapper.pools.vault import (
    SWAP_DEADLINE,
    SWAP_LIMIT,
    BalancerVault,
    FundManagement,
    SingleSwap,
    SwapKind,
    VaultError,
)

logger = structlog.get_logger()


class VaultLegAdapter:
    """Runs GIVEN_IN swaps through the vault with the router as sender and recipient."""

    def __init__(self, vault: BalancerVault, approvals: ApprovalRegistry, router: str) -> None:
        self.vault = vault
        self.approvals = approvals
        self.router = normalize_address(router)

    def swap(
        self,
        descriptor: VaultLegDescriptor,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int,
        deadline: int,
    ) -> LegOutcome:
        """Swap ``amount_in`` of ``asset_in`` for ``asset_out``.

        The vault checks the deadline itself, so a route that reaches this leg
        late aborts here even if it passed the router's own check.

        Raises:
            DeadlineExpired: If the vault sees the deadline passed
            SlippageExceeded: If the output is below ``min_amount_out``
            LegExecutionFailed: If the vault reverts for any other reason
        """
        self.approvals.require(asset_in, self.vault.address, amount_in)

        single_swap = SingleSwap(
            pool_id=descriptor.vault_pool_id,
            asset_in=asset_in,
            asset_out=asset_out,
            amount=amount_in,
        )
        funds = FundManagement(sender=self.router, recipient=self.router)
        call = encode_vault_swap(
            self.vault.address,
            descriptor.vault_pool_id,
            int(SwapKind.GIVEN_IN),
            asset_in,
            asset_out,
            amount_in,
            self.router,
            self.router,
            min_amount_out,
            deadline,
        )
        try:
            amount_out = self.vault.swap(single_swap, funds, min_amount_out, deadline)
        except VaultError as e:
            if e.code == SWAP_DEADLINE:
                raise DeadlineExpired(f"Vault swap past deadline {deadline}") from e
            if e.code == SWAP_LIMIT:
                raise SlippageExceeded(
                    f"Vault swap below limit {min_amount_out}", minimum=min_amount_out
                ) from e
            raise LegExecutionFailed(f"Vault swap failed: {e}", leg="vault_swap") from e
        except LedgerError as e:
            raise LegExecutionFailed(f"Vault swap failed: {e}", leg="vault_swap") from e

        logger.debug(
            "vault_leg_swap",
            pool_id=descriptor.vault_pool_id,
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return LegOutcome(amount=amount_out, call=call)
