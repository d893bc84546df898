"""Interfaces of the external collaborators the pipeline drives."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from ..types import AmountSpec

StateGetter = Callable[[], Any]
AddressGetter = Callable[[], str]
WalletBinder = Callable[[str], Awaitable[Any]]


class TransactApi(Protocol):
    """Aggregator/quoting service offering vault deposit and withdraw routes."""

    async def fetch_deposit_options_for(
        self, vault_id: str, get_state: StateGetter
    ) -> Sequence[Any]: ...

    async def fetch_withdraw_options_for(
        self, vault_id: str, get_state: StateGetter
    ) -> Sequence[Any]: ...

    async def fetch_deposit_quotes_for(
        self, options: Sequence[Any], amounts: Sequence[AmountSpec], get_state: StateGetter
    ) -> Sequence[Any]: ...

    async def fetch_withdraw_quotes_for(
        self, options: Sequence[Any], amounts: Sequence[AmountSpec], get_state: StateGetter
    ) -> Sequence[Any]: ...

    async def fetch_deposit_step(
        self, quote: Any, get_state: StateGetter, get_wallet_address: AddressGetter
    ) -> Any: ...

    async def fetch_withdraw_step(
        self, quote: Any, get_state: StateGetter, get_wallet_address: AddressGetter
    ) -> Any: ...


class StateContainer(Protocol):
    """Read-only snapshot access plus the dispatch entry point for step actions."""

    def get_state(self) -> Any: ...

    async def dispatch(self, action: Any) -> Any: ...
