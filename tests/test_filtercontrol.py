import pytest

from bchlight.filtercontrol import (
    CFilterType,
    CheckpointMismatchError,
    FILTER_HEADER_CHECKPOINTS,
    Network,
    control_cf_header,
)


def _hash(text):
    return bytes.fromhex(text)[::-1]


def test_control_cf_header():
    height = 999
    header = _hash("4a242283a406a7c089f671bb8df7671e5d5e9ba577cea1047d30a7f4919df193")
    checkpoints = {Network.MAINNET: {height: header}}

    assert (
        control_cf_header(
            Network.MAINNET, CFilterType.GCS_FILTER_REGULAR, height, header, checkpoints
        )
        is None
    )

    bad = _hash("000000000006a7c089f671bb8df7671e5d5e9ba577cea1047d30a7f4919df193")
    with pytest.raises(CheckpointMismatchError):
        control_cf_header(
            Network.MAINNET, CFilterType.GCS_FILTER_REGULAR, height, bad, checkpoints
        )

    assert (
        control_cf_header(
            Network.MAINNET, CFilterType.GCS_FILTER_REGULAR, 99, bad, checkpoints
        )
        is None
    )


def test_unsupported_filter_type():
    with pytest.raises(ValueError, match="unsupported filter type"):
        control_cf_header(Network.MAINNET, 7, 100000, b"\x00" * 32)


def test_unknown_network_passes():
    assert (
        control_cf_header(
            Network.SIMNET, CFilterType.GCS_FILTER_REGULAR, 100000, b"\x00" * 32
        )
        is None
    )


def test_builtin_mainnet_checkpoint():
    good = _hash("075e4781d68abed9a923a0deb6bf2f73e9b5cdb15b7f1ff07b719bfa8b05de0f")
    assert FILTER_HEADER_CHECKPOINTS[Network.MAINNET][100000] == good
    control_cf_header(Network.MAINNET, CFilterType.GCS_FILTER_REGULAR, 100000, good)
    with pytest.raises(CheckpointMismatchError, match="checkpoint doesn't match"):
        control_cf_header(
            Network.MAINNET, CFilterType.GCS_FILTER_REGULAR, 100000, good[::-1]
        )


def test_builtin_testnet_checkpoint_mismatch():
    with pytest.raises(CheckpointMismatchError):
        control_cf_header(
            Network.TESTNET3, CFilterType.GCS_FILTER_REGULAR, 1300000, b"\x01" * 32
        )