"""Droppable wallet descriptor exposing the injected backend provider."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any

from ..config import NodeConfig
from ..constants import WALLET_ICON_SVG, WALLET_LABEL
from ..exceptions import UpstreamFailureError
from .dispatcher import BackendProvider, create_provider

logger = logging.getLogger(__name__)


@dataclass
class WalletInterface:
    """What a wallet-connection layer receives once the wallet is selected."""

    provider: BackendProvider
    accounts: list[dict[str, str]] = field(default_factory=list)
    chains: list[dict[str, str]] = field(default_factory=list)

    @property
    def instance(self) -> BackendProvider:
        return self.provider

    def as_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "instance": self.provider,
            "accounts": list(self.accounts),
            "chains": list(self.chains),
        }


class InjectedBackendWallet:
    """Wallet that answers requests for a fixed account without user interaction."""

    label = WALLET_LABEL

    def __init__(self, credential: str, node: NodeConfig | None = None):
        self._credential = credential
        self._node = node or NodeConfig()
        self._provider: BackendProvider | None = None

    @property
    def rpc_url(self) -> str:
        return self._node.rpc_url

    @property
    def provider(self) -> BackendProvider:
        if self._provider is None:
            raise UpstreamFailureError(
                "Injected wallet not connected; call get_interface() first",
                endpoint=self._node.rpc_url,
            )
        return self._provider

    @staticmethod
    def get_icon() -> str:
        encoded = base64.b64encode(WALLET_ICON_SVG.encode("utf-8")).decode("ascii")
        return f"data:image/svg+xml;base64,{encoded}"

    async def get_interface(self) -> WalletInterface:
        if self._provider is None:
            self._provider = await create_provider(
                self._node.rpc_url,
                self._credential,
                request_timeout=self._node.request_timeout,
            )

        provider = self._provider
        chain_id_hex = await provider.account.chain_id_hex()
        return WalletInterface(
            provider=provider,
            accounts=[{"address": provider.address}],
            chains=[{"id": chain_id_hex}],
        )

    def disconnect(self) -> None:
        """Drop the current provider and its node connection, if any."""

        previous, self._provider = self._provider, None
        if previous is not None:
            previous.account.connection.disconnect()

    async def reinject(self, credential: str, rpc_url: str | None = None) -> WalletInterface:
        """Rebind to another credential (and optionally another node)."""

        if rpc_url is not None and rpc_url != self._node.rpc_url:
            self._node = NodeConfig(rpc_url=rpc_url, request_timeout=self._node.request_timeout)

        self.disconnect()
        self._credential = credential

        interface = await self.get_interface()
        logger.info("Injected wallet rebound to %s on %s", interface.provider.address, self.rpc_url)
        return interface
