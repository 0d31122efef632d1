"""
Token amount and content URI helpers.

Amounts cross the chain boundary as integers in base units; the
ledger keeps human-readable Decimals.
"""

from decimal import Decimal, InvalidOperation

from .curation_constants import IPFS_URI_PREFIX


def to_base_unit(amount: Decimal | str | int, decimals: int) -> int:
    """
    Convert a human-readable amount to token base units.

    Args:
        amount: Amount in token units (e.g. Decimal("10.0"))
        decimals: Token decimals

    Returns:
        Integer amount in base units

    Raises:
        ValueError: If the amount is not a number or has more
            fractional digits than the token supports
    """
    try:
        value = Decimal(str(amount)) * (Decimal(10) ** decimals)
    except InvalidOperation as e:
        raise ValueError(f"Invalid token amount: {amount!r}") from e

    if value != value.to_integral_value():
        raise ValueError(
            f"Amount {amount} has more than {decimals} fractional digits"
        )
    return int(value)


def from_base_unit(value: int | str, decimals: int) -> Decimal:
    """
    Convert base units to a human-readable amount.

    Examples:
        >>> from_base_unit(10_000_000, 6)
        Decimal('10')
    """
    return Decimal(int(value)) / (Decimal(10) ** decimals)


def is_valid_uri(uri: str | None) -> bool:
    """Check the URI uses the content-addressed scheme."""
    return bool(uri) and uri.startswith(IPFS_URI_PREFIX)


def extract_cid(uri: str) -> str:
    """Strip the scheme from a content URI."""
    return uri[len(IPFS_URI_PREFIX):] if is_valid_uri(uri) else uri


def same_address(a: str | None, b: str | None) -> bool:
    """Compare two addresses case-insensitively."""
    if not a or not b:
        return False
    return a.lower() == b.lower()


def to_hex(value: bytes | str) -> str:
    """
    Normalize a hash-like value to lowercase 0x-prefixed hex.

    HexBytes.hex() drops the prefix on recent versions, so the
    prefix is re-added here.
    """
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).hex()
    value = value.lower()
    return value if value.startswith("0x") else f"0x{value}"
