"""Standing allowances the router grants to pools and the vault.

Set up once by an authorized account, then sealed. After sealing the
registry is read only: legs check it, nothing writes it.
"""

from __future__ import annotations

import structlog

from zapper.chain.ledger import LedgerError, TokenLedger
from zapper.errors import ApprovalSetupError, LegExecutionFailed, Unauthorized
from zapper.models.types import normalize_address

logger = structlog.get_logger()


class ApprovalRegistry:
    """Router-owned allowances, written during setup only.

    Attributes:
        router: Address whose allowances this registry manages
        owner: Account that may authorize others and change ownership
    """

    def __init__(self, ledger: TokenLedger, router: str, owner: str) -> None:
        self.ledger = ledger
        self.router = normalize_address(router)
        self.owner = normalize_address(owner)
        self._authorized: set[str] = {self.owner}
        self._sealed = False

    def is_authorized(self, account: str) -> bool:
        return normalize_address(account) in self._authorized

    def authorize(self, caller: str, account: str) -> None:
        self._only_owner(caller)
        self._authorized.add(normalize_address(account))

    def deauthorize(self, caller: str, account: str) -> None:
        self._only_owner(caller)
        self._authorized.discard(normalize_address(account))

    def set_owner(self, caller: str, new_owner: str) -> None:
        """Hand ownership to ``new_owner``, who is also authorized."""
        self._only_owner(caller)
        self.owner = normalize_address(new_owner)
        self._authorized.add(self.owner)

    def set_approvals_for(
        self,
        caller: str,
        tokens: list[str],
        spenders: list[str],
        amounts: list[int],
    ) -> None:
        """Approve ``spenders[i]`` for ``amounts[i]`` of the router's ``tokens[i]``.

        Raises:
            Unauthorized: If caller is not authorized
            ApprovalSetupError: If the registry is sealed, the lists differ in
                length, or a token rejects the update
        """
        if not self.is_authorized(caller):
            raise Unauthorized(f"{caller} is not authorized to set approvals")
        if self._sealed:
            raise ApprovalSetupError("Approvals are sealed")
        if not (len(tokens) == len(spenders) == len(amounts)):
            raise ApprovalSetupError(
                f"Length mismatch: {len(tokens)} tokens, {len(spenders)} spenders, {len(amounts)} amounts"
            )

        for token, spender, amount in zip(tokens, spenders, amounts):
            try:
                self.ledger.approve(token, self.router, spender, amount)
            except LedgerError as e:
                logger.warning("approval_rejected", token=token, spender=spender, error=str(e))
                raise ApprovalSetupError(f"{token} rejected approval for {spender}: {e}") from e
            logger.debug("approval_set", token=token, spender=spender, amount=amount)

    def seal(self, caller: str) -> None:
        """End setup. Routes are refused until this is called."""
        self._only_owner(caller)
        self._sealed = True
        logger.info("approvals_sealed", router=self.router)

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def allowance(self, token: str, spender: str) -> int:
        return self.ledger.allowance(token, self.router, spender)

    def require(self, token: str, spender: str, amount: int) -> None:
        """Check the router's standing allowance covers ``amount``.

        Raises:
            LegExecutionFailed: If it does not
        """
        current = self.allowance(token, spender)
        if current < amount:
            raise LegExecutionFailed(
                f"Router allowance {current} of {token} for {spender} below {amount}"
            )

    def _only_owner(self, caller: str) -> None:
        if normalize_address(caller) != self.owner:
            raise Unauthorized(f"{caller} is not the owner")
