"""Tests for bonkagent.wallet.pubkey."""

import pytest

from bonkagent.errors import InvalidAddress, ValidationError
from bonkagent.wallet.pubkey import (
    BONK_MINT,
    TOKEN_PROGRAM_ID,
    b58decode,
    is_valid_pubkey,
    validate_pubkey,
)


@pytest.mark.parametrize(
    "address",
    [
        TOKEN_PROGRAM_ID,
        BONK_MINT,
        "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        "So11111111111111111111111111111111111111112",
        "11111111111111111111111111111111",
    ],
)
def test_known_addresses_are_valid(address: str) -> None:
    assert is_valid_pubkey(address) is True
    assert validate_pubkey(address) == address


@pytest.mark.parametrize(
    "address",
    [
        "",
        "not-a-wallet",
        "abc",
        "0OIl0OIl0OIl0OIl0OIl0OIl0OIl0OIl",
        "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263DezXAZ8z",
    ],
)
def test_malformed_addresses_are_rejected(address: str) -> None:
    assert is_valid_pubkey(address) is False
    with pytest.raises(InvalidAddress) as exc_info:
        validate_pubkey(address)
    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.message == "Invalid wallet address"


def test_b58decode_keeps_leading_zero_bytes() -> None:
    assert b58decode("11") == b"\x00\x00"
    assert b58decode("112") == b"\x00\x00\x01"


def test_b58decode_rejects_outside_alphabet() -> None:
    with pytest.raises(ValueError):
        b58decode("0abc")
