"""Connection helpers for the injected backend provider."""

from __future__ import annotations

import logging

from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ..config import NodeConfig
from ..exceptions import UpstreamFailureError

logger = logging.getLogger(__name__)


class NodeConnection:
    """Manage the async Web3 provider bound to one JSON-RPC endpoint."""

    def __init__(self, config: NodeConfig, *, web3: AsyncWeb3 | None = None):
        self.config = config
        self._web3: AsyncWeb3 | None = web3
        self._connected = web3 is not None
        self._signer_address: str | None = None

    @property
    def rpc_url(self) -> str:
        return self.config.rpc_url

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        """Build the HTTP provider and confirm the node answers."""

        if self._connected:
            return

        provider = AsyncHTTPProvider(
            self.config.rpc_url, request_kwargs={"timeout": self.config.request_timeout}
        )
        web3 = AsyncWeb3(provider)
        if not await web3.is_connected():
            raise UpstreamFailureError("Unable to connect to RPC node", endpoint=self.config.rpc_url)

        self._web3 = web3
        self._connected = True
        logger.info("Connected to RPC node at %s", self.config.rpc_url)

    def disconnect(self) -> None:
        self._web3 = None
        self._connected = False
        self._signer_address = None

    def is_connected(self) -> bool:
        return self._connected and self._web3 is not None

    def ensure_connected(self) -> None:
        if not self.is_connected():
            raise UpstreamFailureError("RPC node is not connected", endpoint=self.config.rpc_url)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def web3(self) -> AsyncWeb3:
        if self._web3 is None:
            raise UpstreamFailureError(
                "RPC provider not connected; call connect() first",
                endpoint=self.config.rpc_url,
            )
        return self._web3

    @property
    def signer_address(self) -> str | None:
        return self._signer_address

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------
    def apply_signer(self, account: LocalAccount) -> None:
        """Sign and broadcast raw transactions sent from ``account``."""

        web3 = self.web3
        web3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(account), layer=0)
        web3.eth.default_account = account.address
        self._signer_address = account.address
        logger.debug("Signing middleware installed for %s", account.address)
