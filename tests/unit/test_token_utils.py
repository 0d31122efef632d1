"""Tests for token amount and content URI helpers."""

from decimal import Decimal

import pytest

from app.services.blockchain import (
    extract_cid,
    from_base_unit,
    is_valid_uri,
    same_address,
    to_base_unit,
)
from app.services.blockchain.token_utils import to_hex


class TestAmounts:

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (Decimal("10.0"), 10_000_000),
            ("0.000001", 1),
            (Decimal("10.00000000"), 10_000_000),
            (3, 3_000_000),
        ],
    )
    def test_to_base_unit(self, amount, expected):
        assert to_base_unit(amount, 6) == expected

    def test_to_base_unit_rejects_excess_precision(self):
        with pytest.raises(ValueError):
            to_base_unit(Decimal("0.0000001"), 6)

    def test_to_base_unit_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_base_unit("ten", 6)

    def test_from_base_unit(self):
        assert from_base_unit(10_000_000, 6) == Decimal("10")
        assert from_base_unit("123456", 6) == Decimal("0.123456")


class TestUris:

    def test_ipfs_uri_is_valid(self):
        assert is_valid_uri("ipfs://QmArticleCid")

    @pytest.mark.parametrize("uri", ["", None, "https://ipfs.io/ipfs/Qm", "QmArticleCid"])
    def test_other_uris_are_invalid(self, uri):
        assert not is_valid_uri(uri)

    def test_extract_cid(self):
        assert extract_cid("ipfs://QmArticleCid") == "QmArticleCid"


class TestAddresses:

    def test_same_address_ignores_case(self):
        assert same_address("0xAbC0000000000000000000000000000000000001", "0xabc0000000000000000000000000000000000001")

    def test_missing_address_never_matches(self):
        assert not same_address(None, None)
        assert not same_address("0xabc", "")

    def test_to_hex_normalizes(self):
        assert to_hex(b"\x01\xab") == "0x01ab"
        assert to_hex("0xABCD") == "0xabcd"
        assert to_hex("abcd") == "0xabcd"
