"""Read-only Solana wallet reader over JSON-RPC. Never signs or submits transactions."""

import itertools
import logging
from typing import Any

from bonkagent.errors import UpstreamDomainError
from bonkagent.http import request_json
from bonkagent.wallet.models import (
    LAMPORTS_PER_SOL,
    TokenAccount,
    WalletSnapshot,
    estimate_reclaimable,
)
from bonkagent.wallet.pubkey import BONK_MINT, TOKEN_PROGRAM_ID, validate_pubkey

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_TIMEOUT = 15.0


def _parse_token_account(item: dict[str, Any]) -> TokenAccount:
    info = item["account"]["data"]["parsed"]["info"]
    token_amount = info["tokenAmount"]
    ui_amount_string = str(token_amount.get("uiAmountString") or "0")
    ui_amount = token_amount.get("uiAmount")
    if ui_amount is None:
        ui_amount = float(ui_amount_string)
    return TokenAccount(
        address=item["pubkey"],
        mint=info["mint"],
        owner=info["owner"],
        amount=ui_amount,
        decimals=int(token_amount.get("decimals", 0)),
        ui_amount_string=ui_amount_string,
    )


class WalletReader:
    """Stateless reader: SOL balance, token accounts, and values derived from them."""

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        commitment: str = "confirmed",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._rpc_url = rpc_url
        self._commitment = commitment
        self._timeout = timeout
        self._ids = itertools.count(1)

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        data = await request_json(
            "POST", self._rpc_url, json=body, timeout=self._timeout, service="Solana RPC"
        )
        if not isinstance(data, dict):
            raise UpstreamDomainError(f"Solana RPC {method}: unexpected response", details=data)
        if data.get("error"):
            err = data["error"]
            message = err.get("message") if isinstance(err, dict) else str(err)
            raise UpstreamDomainError(f"Solana RPC {method} failed: {message}", details=err)
        return data.get("result")

    async def get_balance(self, address: str) -> float:
        """SOL balance in whole SOL."""
        validate_pubkey(address)
        result = await self._rpc("getBalance", [address, {"commitment": self._commitment}])
        lamports = result.get("value", 0) if isinstance(result, dict) else result
        return int(lamports or 0) / LAMPORTS_PER_SOL

    async def get_token_accounts(self, address: str) -> list[TokenAccount]:
        """All SPL token accounts owned by address, unique by account address."""
        validate_pubkey(address)
        result = await self._rpc(
            "getTokenAccountsByOwner",
            [
                address,
                {"programId": TOKEN_PROGRAM_ID},
                {"encoding": "jsonParsed", "commitment": self._commitment},
            ],
        )
        items = (result.get("value") if isinstance(result, dict) else None) or []
        accounts: dict[str, TokenAccount] = {}
        for item in items:
            try:
                account = _parse_token_account(item)
            except (KeyError, TypeError, ValueError) as e:
                pubkey = item.get("pubkey") if isinstance(item, dict) else None
                logger.warning("Skipping unparsable token account %s: %s", pubkey, e)
                continue
            accounts.setdefault(account.address, account)
        return list(accounts.values())

    async def get_empty_accounts(self, address: str) -> list[TokenAccount]:
        return [a for a in await self.get_token_accounts(address) if a.is_empty]

    async def get_bonk_balance(self, address: str) -> float:
        """BONK held by the wallet; 0 when it has no BONK account."""
        for account in await self.get_token_accounts(address):
            if account.mint == BONK_MINT:
                return account.amount
        return 0.0

    async def estimate_reclaimable_sol(self, address: str) -> float:
        return estimate_reclaimable(len(await self.get_empty_accounts(address)))

    async def snapshot(self, address: str) -> WalletSnapshot:
        """Balance and token accounts in two calls; everything else derived from the same list."""
        validate_pubkey(address)
        balance = await self.get_balance(address)
        accounts = await self.get_token_accounts(address)
        bonk = next((a.amount for a in accounts if a.mint == BONK_MINT), 0.0)
        return WalletSnapshot(
            address=address,
            sol_balance=balance,
            token_accounts=accounts,
            bonk_balance=bonk,
        )
