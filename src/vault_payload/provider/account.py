"""Account contexts bound to a node connection."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.types import ChecksumAddress

from ..exceptions import InvalidInputError
from ..utils import to_hex_quantity
from .connections import NodeConnection

logger = logging.getLogger(__name__)


class AccountContext(ABC):
    """Identity a provider acts for: an address, a chain and maybe a signer.

    The chain id is read from the node on first use and cached for the
    lifetime of the context; later chain switches on the node are not
    observed.
    """

    def __init__(self, connection: NodeConnection, address: ChecksumAddress):
        self._connection = connection
        self._address = address
        self._chain_id: int | None = None

    @property
    def address(self) -> ChecksumAddress:
        return self._address

    @property
    def connection(self) -> NodeConnection:
        return self._connection

    @property
    @abstractmethod
    def can_sign(self) -> bool:
        pass

    async def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(await self._connection.web3.eth.chain_id)
            logger.debug("Resolved chain id %s from %s", self._chain_id, self._connection.rpc_url)
        return self._chain_id

    async def chain_id_hex(self) -> str:
        return to_hex_quantity(await self.chain_id())


class ReadOnlyAccount(AccountContext):
    """Context that can answer reads for an address but never sign."""

    @property
    def can_sign(self) -> bool:
        return False


class SigningAccount(AccountContext):
    """Context holding a local private key able to sign transactions."""

    def __init__(self, connection: NodeConnection, signer: LocalAccount):
        super().__init__(connection, cast(ChecksumAddress, signer.address))
        self._signer = signer

    @property
    def can_sign(self) -> bool:
        return True

    @property
    def signer(self) -> LocalAccount:
        return self._signer


def resolve_account(connection: NodeConnection, credential: str) -> AccountContext:
    """Return a read-only context for an address, a signing one for a private key."""

    if not isinstance(credential, str) or not credential.strip():
        raise InvalidInputError("A wallet address or private key is required", field="credential")

    credential = credential.strip()
    if Web3.is_address(credential):
        return ReadOnlyAccount(connection, Web3.to_checksum_address(credential))

    try:
        signer = cast(LocalAccount, Account.from_key(credential))
    except Exception as exc:
        # never echo the credential itself
        raise InvalidInputError(
            "Credential is neither an address nor a valid private key",
            field="credential",
            details={"error": type(exc).__name__},
        ) from exc

    return SigningAccount(connection, signer)
