"""WalletMonitor: keeps a fresh snapshot of one watched wallet on a fixed timer."""

import asyncio
import logging

from bonkagent.errors import DashboardError
from bonkagent.wallet.models import WalletSnapshot
from bonkagent.wallet.pubkey import validate_pubkey
from bonkagent.wallet.reader import WalletReader

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 30.0


class WalletMonitor:
    """Periodic full refresh. A failed refresh keeps the last good snapshot."""

    def __init__(
        self, reader: WalletReader, refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    ) -> None:
        self._reader = reader
        self._refresh_interval = refresh_interval
        self._address: str | None = None
        self._snapshot: WalletSnapshot | None = None
        self._error: str | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def address(self) -> str | None:
        return self._address

    @property
    def snapshot(self) -> WalletSnapshot | None:
        return self._snapshot

    @property
    def error(self) -> str | None:
        return self._error

    async def watch(self, address: str) -> WalletSnapshot | None:
        """Switch to address, refresh now, and start the refresh timer."""
        validate_pubkey(address)
        if address != self._address:
            await self.stop()
            self._address = address
            self._snapshot = None
            self._error = None
        await self.refresh()
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
        return self._snapshot

    async def refresh(self) -> WalletSnapshot | None:
        """Rebuild the snapshot. Replaces it whole on success; records the error otherwise."""
        address = self._address
        if address is None:
            return None
        try:
            snapshot = await self._reader.snapshot(address)
        except DashboardError as e:
            logger.warning("Wallet refresh failed: %s", e)
            if address == self._address:
                self._error = e.message
            return self._snapshot
        if address != self._address:
            return self._snapshot
        self._snapshot = snapshot
        self._error = None
        return snapshot

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._refresh_interval)
            try:
                await self.refresh()
            except Exception as e:
                logger.exception("Wallet refresh for %s failed: %s", self._address, e)

    async def stop(self) -> None:
        """Cancel the refresh timer and forget the watched wallet."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._address = None
        self._snapshot = None
        self._error = None
