"""Read-only Solana wallet inspection."""

from bonkagent.wallet.models import RENT_PER_ACCOUNT, TokenAccount, WalletSnapshot
from bonkagent.wallet.monitor import WalletMonitor
from bonkagent.wallet.pubkey import BONK_MINT, TOKEN_PROGRAM_ID, is_valid_pubkey, validate_pubkey
from bonkagent.wallet.reader import WalletReader

__all__ = [
    "BONK_MINT",
    "RENT_PER_ACCOUNT",
    "TOKEN_PROGRAM_ID",
    "TokenAccount",
    "WalletMonitor",
    "WalletReader",
    "WalletSnapshot",
    "is_valid_pubkey",
    "validate_pubkey",
]
