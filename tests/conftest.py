"""Shared fakes for provider and pipeline tests."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from hexbytes import HexBytes
from web3.exceptions import TransactionNotFound

from vault_payload.config import NodeConfig
from vault_payload.provider.connections import NodeConnection

TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
READ_ONLY_ADDRESS = "0x000000000000000000000000000000000000dEaD"
VAULT_ADDRESS = "0x00000000000000000000000000000000000000aa"
ARBITRUM_CHAIN_ID = 42161


class DummyEth:
    """Records every node interaction the provider performs."""

    def __init__(self, chain_id: int = ARBITRUM_CHAIN_ID) -> None:
        self._chain_id = chain_id
        self.calls: list[tuple[Any, ...]] = []
        self.default_account: str | None = None
        self.receipts: dict[str, dict[str, Any]] = {}

    @property
    def chain_id(self):
        self.calls.append(("chain_id",))

        async def _value() -> int:
            return self._chain_id

        return _value()

    @property
    def gas_price(self):
        self.calls.append(("gas_price",))

        async def _value() -> int:
            return 100_000_000

        return _value()

    async def estimate_gas(self, tx: dict[str, Any], block: Any = None) -> int:
        self.calls.append(("estimate_gas", tx, block))
        return 21000

    async def call(self, tx: dict[str, Any], block: Any = None) -> HexBytes:
        self.calls.append(("call", tx, block))
        return HexBytes("0x" + "00" * 31 + "2a")

    async def get_balance(self, address: str, block: Any = None) -> int:
        self.calls.append(("get_balance", address, block))
        return 1_500_000_000_000_000_000

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any]:
        self.calls.append(("get_transaction_receipt", tx_hash))
        if tx_hash not in self.receipts:
            raise TransactionNotFound(f"Transaction with hash: '{tx_hash}' not found.")
        return self.receipts[tx_hash]

    async def send_transaction(self, tx: dict[str, Any]) -> HexBytes:
        self.calls.append(("send_transaction", tx))
        return HexBytes("0x" + "ab" * 32)

    async def get_transaction_count(self, address: str, block: Any = None) -> int:
        self.calls.append(("get_transaction_count", address, block))
        return 7


class DummyManager:
    def __init__(self) -> None:
        self.calls: list[tuple[str, list[Any]]] = []

    async def coro_request(self, method: str, params: list[Any]) -> Any:
        self.calls.append((method, params))
        return {"echo": method, "params": params}


class DummyOnion:
    def __init__(self) -> None:
        self.injected: list[tuple[Any, int | None]] = []

    def inject(self, middleware: Any, layer: int | None = None) -> None:
        self.injected.append((middleware, layer))


class DummyWeb3:
    def __init__(self, chain_id: int = ARBITRUM_CHAIN_ID) -> None:
        self.eth = DummyEth(chain_id)
        self.manager = DummyManager()
        self.middleware_onion = DummyOnion()

    @property
    def node_calls(self) -> list[Any]:
        return [*self.eth.calls, *self.manager.calls]


@pytest.fixture
def web3() -> DummyWeb3:
    return DummyWeb3()


@pytest.fixture
def connection(web3: DummyWeb3) -> NodeConnection:
    return NodeConnection(NodeConfig(rpc_url="https://node.test"), web3=web3)  # type: ignore[arg-type]


# ----------------------------------------------------------------------
# Aggregator and state container fakes
# ----------------------------------------------------------------------
def make_option(input_id: str, output_id: str | None = None) -> Any:
    return SimpleNamespace(
        id=f"{input_id}-{output_id or input_id}",
        inputs=[{"id": input_id}],
        wanted_outputs=[{"id": output_id or input_id}],
    )


class DummyTransactApi:
    """Aggregator fake returning canned options, quotes and steps."""

    def __init__(
        self,
        *,
        deposit_options: list[Any] | None = None,
        withdraw_options: list[Any] | None = None,
        quotes: list[Any] | None = None,
        readiness_counts: list[int] | None = None,
    ) -> None:
        self.deposit_options = deposit_options if deposit_options is not None else []
        self.withdraw_options = withdraw_options if withdraw_options is not None else []
        self.quotes = quotes if quotes is not None else []
        self._readiness_counts = list(readiness_counts or [])
        self.calls: list[tuple[Any, ...]] = []
        self.step_addresses: list[str] = []

    async def fetch_deposit_options_for(self, vault_id: str, get_state: Any) -> list[Any]:
        self.calls.append(("deposit_options", vault_id))
        get_state()
        if self._readiness_counts:
            return self.deposit_options[: self._readiness_counts.pop(0)]
        return list(self.deposit_options)

    async def fetch_withdraw_options_for(self, vault_id: str, get_state: Any) -> list[Any]:
        self.calls.append(("withdraw_options", vault_id))
        return list(self.withdraw_options)

    async def fetch_deposit_quotes_for(self, options: Any, amounts: Any, get_state: Any) -> list[Any]:
        self.calls.append(("deposit_quotes", list(options), list(amounts)))
        return list(self.quotes)

    async def fetch_withdraw_quotes_for(self, options: Any, amounts: Any, get_state: Any) -> list[Any]:
        self.calls.append(("withdraw_quotes", list(options), list(amounts)))
        return list(self.quotes)

    async def fetch_deposit_step(self, quote: Any, get_state: Any, get_address: Any) -> Any:
        self.calls.append(("deposit_step", quote))
        self.step_addresses.append(get_address())
        return SimpleNamespace(action={"kind": "deposit", "quote": quote})

    async def fetch_withdraw_step(self, quote: Any, get_state: Any, get_address: Any) -> Any:
        self.calls.append(("withdraw_step", quote))
        self.step_addresses.append(get_address())
        return SimpleNamespace(action={"kind": "withdraw", "quote": quote})


class DummyStore:
    def __init__(self, result: Any | None = None) -> None:
        self.state = {"entities": {"vaults": {}}}
        self.dispatched: list[Any] = []
        self.result = (
            result
            if result is not None
            else {"to": VAULT_ADDRESS, "data": "0xb6b55f25", "value": "0"}
        )

    def get_state(self) -> Any:
        return self.state

    async def dispatch(self, action: Any) -> Any:
        self.dispatched.append(action)
        return self.result
