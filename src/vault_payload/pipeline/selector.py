"""Deterministic selection among aggregator options and quotes."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..constants import DEFAULT_PREFERRED_TOKEN
from ..exceptions import NoOptionsAvailableError, NoQuotesAvailableError
from ..types import OperationKind
from ..utils import read_field

logger = logging.getLogger(__name__)


def option_tokens(option: Any, kind: OperationKind) -> Sequence[Any]:
    """Tokens an option is keyed on: inputs for deposits, wanted outputs for withdrawals."""
    if kind is OperationKind.DEPOSIT:
        tokens = read_field(option, "inputs")
    else:
        tokens = read_field(option, "wanted_outputs", "wantedOutputs")
    return tokens or ()


def token_id(token: Any) -> str | None:
    return read_field(token, "id")


def select_option(
    options: Sequence[Any],
    kind: OperationKind,
    preferred_token: str = DEFAULT_PREFERRED_TOKEN,
    *,
    vault_id: str | None = None,
) -> Any:
    """Pick the first option keyed on ``preferred_token``, else the first option."""
    if not options:
        raise NoOptionsAvailableError(
            f"No {kind.value} options available", vault_id=vault_id
        )

    for option in options:
        tokens = option_tokens(option, kind)
        if tokens and token_id(tokens[0]) == preferred_token:
            return option

    logger.info(
        "No %s option keyed on %s; falling back to the first of %s",
        kind.value,
        preferred_token,
        len(options),
    )
    return options[0]


def select_quote(quotes: Sequence[Any], *, vault_id: str | None = None) -> Any:
    """Take the aggregator's first quote; it already orders by preference."""
    if not quotes:
        raise NoQuotesAvailableError("No quotes available for the selected option", vault_id=vault_id)
    return quotes[0]
