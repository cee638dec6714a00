"""In-memory token ledger.

Holds balances, allowances, LP supplies and EIP-2612 nonces for every token
the pools, the vault and the router touch. The native currency is tracked
under ETH_CONSTANT like any other asset, but it has no allowances: it only
moves by direct transfer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from zapper.chain.permit import permit_typed_data, recover_permit_signer
from zapper.constants import ETH_CONSTANT, MAX_UINT256
from zapper.models.types import normalize_address

logger = structlog.get_logger()


class LedgerError(Exception):
    """Base error for token ledger operations."""

    pass


class UnknownToken(LedgerError):
    """Token was never registered with the ledger."""

    pass


class InsufficientBalance(LedgerError):
    """Holder balance is below the amount moved."""

    pass


class InsufficientAllowance(LedgerError):
    """Spender allowance is below the amount pulled."""

    pass


class ApprovalRejected(LedgerError):
    """Token refused the allowance update."""

    pass


class PermitError(LedgerError):
    """Permit is expired, unsupported, or its signature does not match the owner."""

    pass


@dataclass(frozen=True)
class TokenInfo:
    """Static metadata for a registered token.

    Attributes:
        address: Token address (lowercase)
        symbol: Ticker, for logs
        decimals: Native precision of amounts
        name: EIP-712 domain name; permit is unsupported when None
        version: EIP-712 domain version
        requires_zero_allowance: Token rejects changing a non-zero allowance
            to another non-zero value (USDT behaviour)
    """

    address: str
    symbol: str
    decimals: int
    name: str | None = None
    version: str = "1"
    requires_zero_allowance: bool = False

    @property
    def supports_permit(self) -> bool:
        return self.name is not None


@dataclass
class LedgerSnapshot:
    balances: dict[tuple[str, str], int] = field(default_factory=dict)
    allowances: dict[tuple[str, str, str], int] = field(default_factory=dict)
    supplies: dict[str, int] = field(default_factory=dict)
    nonces: dict[tuple[str, str], int] = field(default_factory=dict)


class TokenLedger:
    """Balances and allowances for every token on the chain."""

    def __init__(self, chain_id: int = 1) -> None:
        self.chain_id = chain_id
        self._tokens: dict[str, TokenInfo] = {
            ETH_CONSTANT: TokenInfo(address=ETH_CONSTANT, symbol="ETH", decimals=18)
        }
        self._balances: dict[tuple[str, str], int] = {}
        self._allowances: dict[tuple[str, str, str], int] = {}
        self._supplies: dict[str, int] = {}
        self._nonces: dict[tuple[str, str], int] = {}

    def register_token(
        self,
        address: str,
        *,
        symbol: str,
        decimals: int,
        name: str | None = None,
        version: str = "1",
        requires_zero_allowance: bool = False,
    ) -> TokenInfo:
        """Register a token. Passing ``name`` enables EIP-2612 permit."""
        address = normalize_address(address, validate=True)
        if address in self._tokens:
            raise LedgerError(f"Token {address} already registered")
        info = TokenInfo(
            address=address,
            symbol=symbol,
            decimals=decimals,
            name=name,
            version=version,
            requires_zero_allowance=requires_zero_allowance,
        )
        self._tokens[address] = info
        return info

    def token(self, address: str) -> TokenInfo:
        address = normalize_address(address)
        info = self._tokens.get(address)
        if info is None:
            raise UnknownToken(f"Unknown token {address}")
        return info

    def decimals(self, address: str) -> int:
        return self.token(address).decimals

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.get((normalize_address(token), normalize_address(holder)), 0)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        return self._allowances.get(key, 0)

    def total_supply(self, token: str) -> int:
        return self._supplies.get(normalize_address(token), 0)

    def nonces(self, token: str, owner: str) -> int:
        return self._nonces.get((normalize_address(token), normalize_address(owner)), 0)

    def mint(self, token: str, to: str, amount: int) -> None:
        info = self.token(token)
        to = normalize_address(to)
        self._balances[(info.address, to)] = self.balance_of(info.address, to) + amount
        self._supplies[info.address] = self.total_supply(info.address) + amount

    def burn(self, token: str, holder: str, amount: int) -> None:
        info = self.token(token)
        holder = normalize_address(holder)
        self._debit(info, holder, amount)
        self._supplies[info.address] = self.total_supply(info.address) - amount

    def transfer(self, token: str, sender: str, to: str, amount: int) -> None:
        """Move ``amount`` from ``sender`` to ``to``.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        info = self.token(token)
        self._debit(info, normalize_address(sender), amount)
        to = normalize_address(to)
        self._balances[(info.address, to)] = self.balance_of(info.address, to) + amount

    def transfer_from(self, token: str, spender: str, owner: str, to: str, amount: int) -> None:
        """Pull ``amount`` of ``owner``'s tokens on behalf of ``spender``.

        An allowance of MAX_UINT256 is treated as infinite and never decremented.

        Raises:
            InsufficientAllowance: If spender's allowance is below amount
            InsufficientBalance: If owner holds less than amount
        """
        info = self.token(token)
        if info.address == ETH_CONSTANT:
            raise LedgerError("Native currency cannot be pulled with an allowance")
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        if spender != owner:
            key = (info.address, owner, spender)
            current = self._allowances.get(key, 0)
            if current < amount:
                raise InsufficientAllowance(
                    f"{info.symbol}: allowance {current} of {spender} below {amount}"
                )
            if current != MAX_UINT256:
                self._allowances[key] = current - amount
        self.transfer(info.address, owner, to, amount)

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        """Set ``spender``'s allowance over ``owner``'s tokens.

        Raises:
            ApprovalRejected: If the token refuses the update
        """
        info = self.token(token)
        if info.address == ETH_CONSTANT:
            raise ApprovalRejected("Native currency has no allowances")
        if amount < 0 or amount > MAX_UINT256:
            raise ApprovalRejected(f"Allowance {amount} outside uint256 range")
        key = (info.address, normalize_address(owner), normalize_address(spender))
        if info.requires_zero_allowance and amount != 0 and self._allowances.get(key, 0) != 0:
            raise ApprovalRejected(f"{info.symbol}: allowance must be reset to zero first")
        self._allowances[key] = amount

    def permit_typed_data(
        self, token: str, owner: str, spender: str, value: int, deadline: int
    ) -> dict:
        """EIP-712 payload a wallet signs to permit ``spender``, at the owner's current nonce."""
        info = self.token(token)
        if not info.supports_permit:
            raise PermitError(f"{info.symbol} does not support permit")
        return permit_typed_data(
            token_name=info.name,
            token_version=info.version,
            chain_id=self.chain_id,
            token=info.address,
            owner=owner,
            spender=spender,
            value=value,
            nonce=self.nonces(info.address, owner),
            deadline=deadline,
        )

    def permit(
        self,
        token: str,
        owner: str,
        spender: str,
        value: int,
        deadline: int,
        v: int,
        r: str,
        s: str,
        *,
        now: int,
    ) -> None:
        """Verify an EIP-2612 permit, consume the owner's nonce and set the allowance.

        Raises:
            PermitError: If the token has no permit, the permit expired, or the
                signature does not recover to ``owner``
        """
        if deadline < now:
            raise PermitError(f"Permit expired at {deadline}, now {now}")
        owner = normalize_address(owner)
        typed_data = self.permit_typed_data(token, owner, spender, value, deadline)
        try:
            signer = recover_permit_signer(typed_data, v, r, s)
        except Exception as e:
            raise PermitError(f"Malformed permit signature: {e}") from e
        if signer != owner:
            raise PermitError(f"Permit signed by {signer}, expected {owner}")

        info = self.token(token)
        self._nonces[(info.address, owner)] = self.nonces(info.address, owner) + 1
        self._allowances[(info.address, owner, normalize_address(spender))] = value
        logger.debug("permit_accepted", token=info.symbol, owner=owner, spender=spender, value=value)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            balances=dict(self._balances),
            allowances=dict(self._allowances),
            supplies=dict(self._supplies),
            nonces=dict(self._nonces),
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self._balances = dict(snapshot.balances)
        self._allowances = dict(snapshot.allowances)
        self._supplies = dict(snapshot.supplies)
        self._nonces = dict(snapshot.nonces)

    def _debit(self, info: TokenInfo, holder: str, amount: int) -> None:
        if amount < 0:
            raise LedgerError(f"Negative amount {amount}")
        current = self._balances.get((info.address, holder), 0)
        if current < amount:
            raise InsufficientBalance(f"{info.symbol}: balance {current} of {holder} below {amount}")
        self._balances[(info.address, holder)] = current - amount
