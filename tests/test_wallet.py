from __future__ import annotations

import base64
from typing import Any

import pytest

from conftest import READ_ONLY_ADDRESS, DummyWeb3
from vault_payload.config import NodeConfig
from vault_payload.exceptions import UpstreamFailureError
from vault_payload.provider import wallet as wallet_module
from vault_payload.provider.account import resolve_account
from vault_payload.provider.connections import NodeConnection
from vault_payload.provider.dispatcher import build_provider
from vault_payload.provider.wallet import InjectedBackendWallet

OTHER_ADDRESS = "0x00000000000000000000000000000000000000bB"


@pytest.fixture
def created(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, str, Any]]:
    calls: list[tuple[str, str, Any]] = []

    async def fake_create_provider(rpc_url: str, credential: str, *, request_timeout: Any = None):
        calls.append((rpc_url, credential, request_timeout))
        connection = NodeConnection(NodeConfig(rpc_url=rpc_url), web3=DummyWeb3())  # type: ignore[arg-type]
        return build_provider(resolve_account(connection, credential))

    monkeypatch.setattr(wallet_module, "create_provider", fake_create_provider)
    return calls


def test_icon_is_svg_data_url() -> None:
    icon = InjectedBackendWallet.get_icon()

    assert icon.startswith("data:image/svg+xml;base64,")
    assert b"<svg" in base64.b64decode(icon.split(",", 1)[1])
    assert InjectedBackendWallet.label == "Injected Backend Wallet"


def test_provider_before_connect_raises() -> None:
    with pytest.raises(UpstreamFailureError):
        InjectedBackendWallet(READ_ONLY_ADDRESS).provider


@pytest.mark.asyncio
async def test_interface_lists_account_and_chain(created: list[Any]) -> None:
    wallet = InjectedBackendWallet(READ_ONLY_ADDRESS, NodeConfig(rpc_url="https://node.test"))

    interface = await wallet.get_interface()

    assert interface.accounts == [{"address": READ_ONLY_ADDRESS}]
    assert interface.chains == [{"id": "0xa4b1"}]
    assert interface.instance is interface.provider
    assert interface.as_dict()["provider"] is wallet.provider
    assert created == [("https://node.test", READ_ONLY_ADDRESS, 10.0)]


@pytest.mark.asyncio
async def test_interface_reuses_provider(created: list[Any]) -> None:
    wallet = InjectedBackendWallet(READ_ONLY_ADDRESS)

    await wallet.get_interface()
    await wallet.get_interface()

    assert len(created) == 1


@pytest.mark.asyncio
async def test_reinject_rebinds_to_new_address(created: list[Any]) -> None:
    wallet = InjectedBackendWallet(READ_ONLY_ADDRESS)
    first = await wallet.get_interface()

    interface = await wallet.reinject(OTHER_ADDRESS, "https://other.test")

    assert interface.accounts == [{"address": OTHER_ADDRESS}]
    assert wallet.rpc_url == "https://other.test"
    assert not first.provider.account.connection.is_connected()
    assert created[-1][:2] == ("https://other.test", OTHER_ADDRESS)
    assert await interface.provider.request("eth_accounts") == [OTHER_ADDRESS]


@pytest.mark.asyncio
async def test_disconnect_drops_provider(created: list[Any]) -> None:
    wallet = InjectedBackendWallet(READ_ONLY_ADDRESS)
    interface = await wallet.get_interface()

    wallet.disconnect()
    wallet.disconnect()

    assert not interface.provider.account.connection.is_connected()
    with pytest.raises(UpstreamFailureError):
        wallet.provider
