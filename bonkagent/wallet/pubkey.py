"""Canonical Solana public-key format check (base58, 32 bytes)."""

from bonkagent.errors import InvalidAddress

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {ch: i for i, ch in enumerate(_ALPHABET)}

PUBKEY_LENGTH = 32

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


def b58decode(value: str) -> bytes:
    """Decode a base58 string. Raises ValueError on characters outside the alphabet."""
    num = 0
    for ch in value:
        digit = _INDEX.get(ch)
        if digit is None:
            raise ValueError(f"invalid base58 character {ch!r}")
        num = num * 58 + digit
    leading_zeros = len(value) - len(value.lstrip("1"))
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading_zeros + body


def is_valid_pubkey(address: str) -> bool:
    if not isinstance(address, str) or not 32 <= len(address) <= 44:
        return False
    try:
        return len(b58decode(address)) == PUBKEY_LENGTH
    except ValueError:
        return False


def validate_pubkey(address: str) -> str:
    """Return the address unchanged or raise InvalidAddress."""
    if not is_valid_pubkey(address):
        raise InvalidAddress(address)
    return address
