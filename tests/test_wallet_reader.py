"""Tests for bonkagent.wallet.reader against a mocked Solana JSON-RPC endpoint."""

import json

import pytest

from bonkagent.errors import InvalidAddress, UpstreamDomainError
from bonkagent.wallet.pubkey import BONK_MINT, TOKEN_PROGRAM_ID
from bonkagent.wallet.reader import WalletReader

RPC = "https://rpc.test.local"
WALLET = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def _account(pubkey: str, mint: str, ui_amount: float, decimals: int = 5) -> dict:
    return {
        "pubkey": pubkey,
        "account": {
            "data": {
                "parsed": {
                    "info": {
                        "mint": mint,
                        "owner": WALLET,
                        "tokenAmount": {
                            "amount": str(int(ui_amount * 10**decimals)),
                            "decimals": decimals,
                            "uiAmount": ui_amount,
                            "uiAmountString": str(ui_amount),
                        },
                    }
                },
                "program": "spl-token",
            },
            "lamports": 2039280,
        },
    }


def _token_accounts_response(accounts: list[dict]) -> dict:
    return {"jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": accounts}}


FOUR_ACCOUNTS = [
    _account("Acct1111111111111111111111111111111111111111", BONK_MINT, 1250000.5),
    _account("Acct2222222222222222222222222222222222222222", USDC_MINT, 0, decimals=6),
    _account("Acct3333333333333333333333333333333333333333", "Mint3", 0),
    _account("Acct4444444444444444444444444444444444444444", "Mint4", 0),
]


@pytest.fixture
def reader() -> WalletReader:
    return WalletReader(rpc_url=RPC)


class TestTokenAccounts:
    @pytest.mark.asyncio
    async def test_empty_accounts_and_reclaimable(self, reader: WalletReader, httpx_mock) -> None:
        """Four accounts, three of them empty: 3 empty, 0.006 SOL reclaimable."""
        httpx_mock.add_response(method="POST", url=RPC, json=_token_accounts_response(FOUR_ACCOUNTS))
        httpx_mock.add_response(method="POST", url=RPC, json=_token_accounts_response(FOUR_ACCOUNTS))

        empty = await reader.get_empty_accounts(WALLET)
        assert len(empty) == 3
        assert await reader.estimate_reclaimable_sol(WALLET) == pytest.approx(0.006)

    @pytest.mark.asyncio
    async def test_request_shape(self, reader: WalletReader, httpx_mock) -> None:
        httpx_mock.add_response(method="POST", url=RPC, json=_token_accounts_response([]))
        await reader.get_token_accounts(WALLET)
        body = json.loads(httpx_mock.get_requests()[0].content)
        assert body["method"] == "getTokenAccountsByOwner"
        assert body["params"][0] == WALLET
        assert body["params"][1] == {"programId": TOKEN_PROGRAM_ID}
        assert body["params"][2]["encoding"] == "jsonParsed"

    @pytest.mark.asyncio
    async def test_duplicates_and_unparsable_skipped(self, reader: WalletReader, httpx_mock) -> None:
        accounts = [
            FOUR_ACCOUNTS[0],
            FOUR_ACCOUNTS[0],
            {"pubkey": "broken", "account": {}},
            "not-an-object",
            None,
        ]
        httpx_mock.add_response(method="POST", url=RPC, json=_token_accounts_response(accounts))
        result = await reader.get_token_accounts(WALLET)
        assert [a.address for a in result] == [FOUR_ACCOUNTS[0]["pubkey"]]

    @pytest.mark.asyncio
    async def test_bonk_balance(self, reader: WalletReader, httpx_mock) -> None:
        httpx_mock.add_response(method="POST", url=RPC, json=_token_accounts_response(FOUR_ACCOUNTS))
        assert await reader.get_bonk_balance(WALLET) == 1250000.5

    @pytest.mark.asyncio
    async def test_bonk_balance_zero_when_absent(self, reader: WalletReader, httpx_mock) -> None:
        httpx_mock.add_response(
            method="POST", url=RPC, json=_token_accounts_response(FOUR_ACCOUNTS[1:])
        )
        assert await reader.get_bonk_balance(WALLET) == 0


class TestBalanceAndErrors:
    @pytest.mark.asyncio
    async def test_balance_in_sol(self, reader: WalletReader, httpx_mock) -> None:
        httpx_mock.add_response(
            method="POST",
            url=RPC,
            json={"jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": 1_500_000_000}},
        )
        assert await reader.get_balance(WALLET) == 1.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method",
        [
            "get_balance",
            "get_token_accounts",
            "get_bonk_balance",
            "get_empty_accounts",
            "estimate_reclaimable_sol",
            "snapshot",
        ],
    )
    async def test_invalid_address_rejected_before_network(
        self, reader: WalletReader, httpx_mock, method: str
    ) -> None:
        with pytest.raises(InvalidAddress):
            await getattr(reader, method)("not-a-wallet")
        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_rpc_error_object(self, reader: WalletReader, httpx_mock) -> None:
        httpx_mock.add_response(
            method="POST",
            url=RPC,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}},
        )
        with pytest.raises(UpstreamDomainError) as exc_info:
            await reader.get_balance(WALLET)
        assert "Invalid param" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_snapshot(self, reader: WalletReader, httpx_mock) -> None:
        httpx_mock.add_response(
            method="POST", url=RPC, json={"jsonrpc": "2.0", "id": 1, "result": {"value": 2_000_000}}
        )
        httpx_mock.add_response(method="POST", url=RPC, json=_token_accounts_response(FOUR_ACCOUNTS))
        snapshot = await reader.snapshot(WALLET)
        assert snapshot.sol_balance == pytest.approx(0.002)
        assert snapshot.bonk_balance == 1250000.5
        assert len(snapshot.empty_accounts) == 3
        assert snapshot.reclaimable_sol == pytest.approx(0.006)
