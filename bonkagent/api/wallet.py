"""Wallet read routes and the watched-wallet dashboard routes."""

from fastapi import APIRouter, Depends

from bonkagent.api.deps import get_services
from bonkagent.api.errors import failure_message
from bonkagent.api.schemas import (
    BalanceResponse,
    BonkBalanceResponse,
    EmptyAccountsResponse,
    TokenAccountOut,
    TokensResponse,
    WalletSnapshotOut,
    WatchedWalletResponse,
    WatchWalletRequest,
)
from bonkagent.services import Services
from bonkagent.wallet.models import estimate_reclaimable
from bonkagent.wallet.pubkey import validate_pubkey

router = APIRouter(prefix="/wallet", tags=["wallet"])
dashboard_router = APIRouter(prefix="/dashboard/wallet", tags=["wallet"])


@router.get("/balance/{address}", response_model=BalanceResponse)
async def get_balance(address: str, services: Services = Depends(get_services)) -> BalanceResponse:
    validate_pubkey(address)
    with failure_message("Failed to get SOL balance"):
        balance = await services.wallet_reader.get_balance(address)
    return BalanceResponse(address=address, balance=balance)


@router.get("/tokens/{address}", response_model=TokensResponse)
async def get_tokens(address: str, services: Services = Depends(get_services)) -> TokensResponse:
    validate_pubkey(address)
    with failure_message("Failed to get token accounts"):
        accounts = await services.wallet_reader.get_token_accounts(address)
    return TokensResponse(
        address=address, tokens=[TokenAccountOut.from_account(a) for a in accounts]
    )


@router.get("/empty-accounts/{address}", response_model=EmptyAccountsResponse)
async def get_empty_accounts(
    address: str, services: Services = Depends(get_services)
) -> EmptyAccountsResponse:
    validate_pubkey(address)
    with failure_message("Failed to get empty token accounts"):
        empty = await services.wallet_reader.get_empty_accounts(address)
    return EmptyAccountsResponse(
        address=address,
        empty_accounts=[TokenAccountOut.from_account(a) for a in empty],
        count=len(empty),
        reclaimable_sol=estimate_reclaimable(len(empty)),
    )


@router.get("/bonk/{address}", response_model=BonkBalanceResponse)
async def get_bonk(address: str, services: Services = Depends(get_services)) -> BonkBalanceResponse:
    validate_pubkey(address)
    with failure_message("Failed to get BONK balance"):
        bonk = await services.wallet_reader.get_bonk_balance(address)
    return BonkBalanceResponse(address=address, bonk_balance=bonk)


def _watched(services: Services) -> WatchedWalletResponse:
    monitor = services.wallet_monitor
    snapshot = monitor.snapshot
    return WatchedWalletResponse(
        address=monitor.address,
        snapshot=WalletSnapshotOut.from_snapshot(snapshot) if snapshot else None,
        error=monitor.error,
    )


@dashboard_router.put("", response_model=WatchedWalletResponse)
async def watch_wallet(
    body: WatchWalletRequest, services: Services = Depends(get_services)
) -> WatchedWalletResponse:
    """Watch a wallet: refresh now and on the configured timer."""
    await services.wallet_monitor.watch(body.address)
    return _watched(services)


@dashboard_router.get("", response_model=WatchedWalletResponse)
async def get_watched_wallet(services: Services = Depends(get_services)) -> WatchedWalletResponse:
    return _watched(services)


@dashboard_router.post("/refresh", response_model=WatchedWalletResponse)
async def refresh_wallet(services: Services = Depends(get_services)) -> WatchedWalletResponse:
    await services.wallet_monitor.refresh()
    return _watched(services)


@dashboard_router.delete("", response_model=WatchedWalletResponse)
async def unwatch_wallet(services: Services = Depends(get_services)) -> WatchedWalletResponse:
    await services.wallet_monitor.stop()
    return _watched(services)
