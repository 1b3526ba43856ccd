"""Wallet data models."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

LAMPORTS_PER_SOL = 1_000_000_000

# Approximate rent deposit returned when a token account is closed (2,039,280 lamports).
RENT_PER_ACCOUNT = 0.002


class TokenAccount(BaseModel):
    """One SPL token account owned by the wallet."""

    address: str
    mint: str
    owner: str
    amount: float
    decimals: int
    ui_amount_string: str = "0"

    @property
    def is_empty(self) -> bool:
        return self.amount == 0


class WalletSnapshot(BaseModel):
    """Full read of one wallet. Rebuilt on every refresh, never patched."""

    address: str
    sol_balance: float
    token_accounts: list[TokenAccount] = Field(default_factory=list)
    bonk_balance: float = 0.0
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def empty_accounts(self) -> list[TokenAccount]:
        return [a for a in self.token_accounts if a.is_empty]

    @property
    def reclaimable_sol(self) -> float:
        return estimate_reclaimable(len(self.empty_accounts))


def estimate_reclaimable(empty_count: int) -> float:
    """Rent reclaimable by closing empty_count accounts. A fixed estimate, not chain-queried."""
    return empty_count * RENT_PER_ACCOUNT
