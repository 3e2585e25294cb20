"""Checks of filter headers against known checkpoints."""

from enum import IntEnum
from typing import Mapping, Optional


class Network(IntEnum):
    """Network magic values identifying a chain."""

    MAINNET = 0xE8F3E1E3
    TESTNET3 = 0xF4F3E5F4
    REGTEST = 0xFABFB5DA
    SIMNET = 0x12141C16


class CFilterType(IntEnum):
    """Compact filter types known on the wire."""

    GCS_FILTER_REGULAR = 0


class CheckpointMismatchError(Exception):
    """A filter header does not match the checkpoint at its height."""

    def __init__(self, message: str = "checkpoint doesn't match") -> None:
        super().__init__(message)


def _hash_from_str(text: str) -> bytes:
    # Hashes are displayed byte-reversed.
    return bytes.fromhex(text)[::-1]


FILTER_HEADER_CHECKPOINTS: Mapping[Network, Mapping[int, bytes]] = {
    Network.MAINNET: {
        100000: _hash_from_str("075e4781d68abed9a923a0deb6bf2f73e9b5cdb15b7f1ff07b719bfa8b05de0f"),
        200000: _hash_from_str("2e77f07befefcf07b7b8fd158c4dc3d28502f89667b921730ed4ff56dfa5da93"),
        300000: _hash_from_str("b36d11b85d9cf49f974a71d8c0534223dc65fe3f3ed49479d81e4d89a4439d2a"),
        400000: _hash_from_str("9b9c91f0e234418281506470dfecb3284c6863a00643e037481fe3fbc24242d4"),
        500000: _hash_from_str("a90ee1fd88c0007747b1750f59b6325157857ded949cc91394d8aafada6d1358"),
        540000: _hash_from_str("c87b13603861d20fc37679966513a306b785013aa8cfba71b79be8aa7453482e"),
    },
    Network.TESTNET3: {
        100000: _hash_from_str("06be769fee8fee75dcc9c4165b1838fed8c8f780efb464cefe3a1e7eecb64603"),
        200000: _hash_from_str("1c8266e0f7fd7463f652f9c97841c7aa4150d845637104e8404a3246d6d45938"),
        400000: _hash_from_str("f6101ef9d252396045fac30ca2b8991866a08b20d9df5347af994ae1e3d0e463"),
        600000: _hash_from_str("e0dceedc20598d5b68f90782c59d0279a91e3d02016d70ae8d32d3195c316c2d"),
        800000: _hash_from_str("4d1749da2c71bdcb8d5c3315fbf53089ee57bb4a1c92f89353b099ab9e1cfb32"),
        1000000: _hash_from_str("9e3b4677dd3f6371f6c1acdb2a32fc81ae24d51506ce6a430755153cde266933"),
        1200000: _hash_from_str("49cb93219a1ce7360e4743528e61dc9c640cdb372b63087f269ce3be7fb465ee"),
        1300000: _hash_from_str("c28ecc10a583bb6232f05ce29074ba4dece8d438cc37d66cbdd7464ff67ee448"),
    },
}


def control_cf_header(
    net: int,
    filter_type: int,
    height: int,
    filter_header: bytes,
    checkpoints: Optional[Mapping[int, Mapping[int, bytes]]] = None,
) -> None:
    """Raise CheckpointMismatchError if a checkpoint at ``height`` disagrees.

    Heights or networks without a checkpoint pass unchecked.
    """
    if filter_type != CFilterType.GCS_FILTER_REGULAR:
        raise ValueError(f"unsupported filter type {filter_type}")

    if checkpoints is None:
        checkpoints = FILTER_HEADER_CHECKPOINTS

    control = checkpoints.get(net)
    if control is None:
        return

    expected = control.get(height)
    if expected is None:
        return

    if bytes(filter_header) != expected:
        raise CheckpointMismatchError()