import pytest

from bchlight.blockheader import BlockHeader, hash_to_str
from bchlight.notifications import BlockNotification, Connected, Disconnected

EMPTY = BlockHeader()


def test_connected_fields():
    header = BlockHeader(nonce=7)
    ntfn = Connected(header, 5)
    assert ntfn.header == header
    assert ntfn.height == 5
    assert ntfn.chain_tip() == header
    assert isinstance(ntfn, BlockNotification)


def test_disconnected_fields():
    old = BlockHeader(nonce=1)
    tip = BlockHeader(nonce=2)
    ntfn = Disconnected(old, 9, tip)
    assert ntfn.header == old
    assert ntfn.height == 9
    assert ntfn.chain_tip() == tip
    assert isinstance(ntfn, BlockNotification)


def test_connected_str():
    ntfn = Connected(EMPTY, 3)
    expected_hash = hash_to_str(EMPTY.block_hash())
    assert str(ntfn) == f"block connected (height=3, hash={expected_hash})"


def test_disconnected_str():
    header = BlockHeader(nonce=4)
    ntfn = Disconnected(header, 11, EMPTY)
    expected_hash = hash_to_str(header.block_hash())
    assert str(ntfn) == f"block disconnected (height=11, hash={expected_hash})"


def test_base_is_abstract():
    with pytest.raises(TypeError):
        BlockNotification()