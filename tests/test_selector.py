from __future__ import annotations

import pytest

from conftest import make_option
from vault_payload.exceptions import NoOptionsAvailableError, NoQuotesAvailableError
from vault_payload.pipeline.selector import select_option, select_quote
from vault_payload.types import OperationKind


def test_deposit_prefers_matching_first_input() -> None:
    options = [make_option("WETH"), make_option("USDC"), make_option("USDC", "DAI")]

    assert select_option(options, OperationKind.DEPOSIT) is options[1]


def test_withdraw_prefers_matching_wanted_output() -> None:
    options = [make_option("share", "WETH"), make_option("share", "USDC")]

    assert select_option(options, OperationKind.WITHDRAW) is options[1]


def test_withdraw_accepts_camel_case_outputs() -> None:
    options = [
        {"inputs": [{"id": "share"}], "wantedOutputs": [{"id": "WETH"}]},
        {"inputs": [{"id": "share"}], "wantedOutputs": [{"id": "USDC"}]},
    ]

    assert select_option(options, OperationKind.WITHDRAW) is options[1]


def test_falls_back_to_first_option() -> None:
    options = [make_option("WETH"), make_option("ARB")]

    assert select_option(options, OperationKind.DEPOSIT) is options[0]


def test_custom_preferred_token() -> None:
    options = [make_option("USDC"), make_option("crvUSD")]

    assert select_option(options, OperationKind.DEPOSIT, "crvUSD") is options[1]


def test_selection_is_repeatable() -> None:
    options = [make_option("WETH"), make_option("USDC"), make_option("USDC")]

    first = select_option(options, OperationKind.DEPOSIT)
    second = select_option(list(options), OperationKind.DEPOSIT)

    assert first is second is options[1]


def test_options_with_empty_tokens_are_skipped() -> None:
    options = [{"inputs": []}, make_option("USDC")]

    assert select_option(options, OperationKind.DEPOSIT) is options[1]


def test_no_options_raises() -> None:
    with pytest.raises(NoOptionsAvailableError) as exc_info:
        select_option([], OperationKind.WITHDRAW, vault_id="curve-arb-crvusd-usdt")
    assert exc_info.value.vault_id == "curve-arb-crvusd-usdt"
    assert "withdraw" in exc_info.value.message


def test_first_quote_is_selected() -> None:
    assert select_quote(["q1", "q2"]) == "q1"


def test_no_quotes_raises() -> None:
    with pytest.raises(NoQuotesAvailableError):
        select_quote([])
