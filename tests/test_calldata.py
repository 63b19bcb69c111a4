import pytest
from eth_abi import decode, encode

from eth_trading_mcp.calldata import (
    EXACT_INPUT_SINGLE_SELECTOR,
    build_params,
    decode_amount_out,
    encode_exact_input_single,
)
from eth_trading_mcp.contracts import EXACT_INPUT_SINGLE_INPUT_TYPES

from conftest import SIGNER, USDC, WETH

NOW = 1_700_000_000


def _params(now=NOW, minimum=990):
    return build_params(
        token_in=WETH,
        token_out=USDC,
        fee=3000,
        recipient=SIGNER,
        amount_in=10**18,
        amount_out_minimum=minimum,
        now=now,
    )


def test_selector_matches_swap_router():
    assert EXACT_INPUT_SINGLE_SELECTOR == bytes.fromhex("414bf389")


def test_calldata_is_deterministic():
    first = encode_exact_input_single(_params())
    second = encode_exact_input_single(_params())
    assert first == second
    assert len(first) == 4 + 8 * 32


def test_calldata_changes_with_now():
    assert encode_exact_input_single(_params(now=NOW)) != encode_exact_input_single(_params(now=NOW + 1))


def test_calldata_round_trips_arguments():
    data = encode_exact_input_single(_params())
    assert data[:4] == EXACT_INPUT_SINGLE_SELECTOR

    (decoded,) = decode(EXACT_INPUT_SINGLE_INPUT_TYPES, data[4:])
    token_in, token_out, fee, recipient, deadline, amount_in, minimum, limit = decoded
    assert token_in.lower() == WETH.lower()
    assert token_out.lower() == USDC.lower()
    assert fee == 3000
    assert recipient.lower() == SIGNER.lower()
    assert deadline == NOW + 1200
    assert amount_in == 10**18
    assert minimum == 990
    assert limit == 0


def test_custom_deadline_buffer():
    params = build_params(WETH, USDC, 500, SIGNER, 1, 1, now=NOW, deadline_buffer=600)
    assert params.deadline == NOW + 600


def test_build_params_validation():
    with pytest.raises(ValueError):
        build_params(WETH, USDC, 500, SIGNER, 1, 1, now=NOW, deadline_buffer=0)
    with pytest.raises(OverflowError):
        build_params(WETH, USDC, 500, SIGNER, 2**256, 1, now=NOW)


def test_decode_amount_out():
    assert decode_amount_out(encode(["uint256"], [123456])) == 123456
    assert decode_amount_out(b"") is None
    assert decode_amount_out(b"\x01\x02") is None
