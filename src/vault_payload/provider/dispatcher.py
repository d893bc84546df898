"""Wallet-style request dispatcher backed by a node and an account context."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping, Sequence
from functools import partial
from typing import Any

from eth_account.messages import encode_defunct
from web3 import Web3
from web3.exceptions import TransactionNotFound
from web3.types import RPCEndpoint

from ..config import NodeConfig
from ..constants import RpcMethod
from ..exceptions import InvalidInputError, SigningUnavailableError
from ..types import Capability, RpcRequest
from ..utils import first_param, normalise_tx_params, serialise_receipt
from .account import AccountContext, ReadOnlyAccount, SigningAccount, resolve_account
from .connections import NodeConnection

logger = logging.getLogger(__name__)

Handler = Callable[[Sequence[Any]], Awaitable[Any]]

ETH_SIGN = "eth_sign"
PERSONAL_SIGN = "personal_sign"
SIGN_TRANSACTION = "eth_signTransaction"
SIGN_TYPED_DATA = "eth_signTypedData"
SIGN_TYPED_DATA_V3 = "eth_signTypedData_v3"
SIGN_TYPED_DATA_V4 = "eth_signTypedData_v4"

WRITE_METHODS = frozenset(
    {
        RpcMethod.SEND_TRANSACTION.value,
        SIGN_TRANSACTION,
        ETH_SIGN,
        PERSONAL_SIGN,
        SIGN_TYPED_DATA,
        SIGN_TYPED_DATA_V3,
        SIGN_TYPED_DATA_V4,
    }
)


class BackendProvider(ABC):
    """Answer standardised wallet requests on behalf of one account.

    Reads are served from the node; methods in :data:`WRITE_METHODS` are
    handled by the concrete variant, and any method without a handler is
    forwarded verbatim. Node failures propagate unchanged.
    """

    def __init__(self, account: AccountContext):
        self._account = account
        self._handlers: dict[str, Handler] = {
            RpcMethod.REQUEST_ACCOUNTS.value: self._accounts,
            RpcMethod.ACCOUNTS.value: self._accounts,
            RpcMethod.CHAIN_ID.value: self._chain_id,
            RpcMethod.ESTIMATE_GAS.value: self._estimate_gas,
            RpcMethod.CALL.value: self._call,
            RpcMethod.GET_BALANCE.value: self._get_balance,
            RpcMethod.GET_TRANSACTION_RECEIPT.value: self._get_transaction_receipt,
            RpcMethod.GAS_PRICE.value: self._gas_price,
        }
        for method in WRITE_METHODS:
            self._handlers[method] = partial(self._write, method)

    @property
    def account(self) -> AccountContext:
        return self._account

    @property
    def address(self) -> str:
        return self._account.address

    @property
    @abstractmethod
    def capabilities(self) -> frozenset[Capability]:
        pass

    @property
    def can_sign(self) -> bool:
        return Capability.WRITE in self.capabilities

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------
    async def request(self, method: str, params: Sequence[Any] | None = None) -> Any:
        params = tuple(params or ())
        handler = self._handlers.get(method)
        if handler is None:
            logger.debug("Forwarding %s to node", method)
            return await self._passthrough(method, params)

        logger.debug("Dispatching %s", method)
        return await handler(params)

    async def request_from(self, request: RpcRequest | Mapping[str, Any]) -> Any:
        """Dispatch an :class:`RpcRequest` or its ``{method, params}`` mapping."""

        if not isinstance(request, RpcRequest):
            request = RpcRequest.from_dict(request)
        return await self.request(request.method, request.params)

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        """Accept a subscription; this provider never emits events."""

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> None:
        """Accept an unsubscription; nothing was ever registered."""

    # ------------------------------------------------------------------
    # Read handlers
    # ------------------------------------------------------------------
    @property
    def _web3(self):
        return self._account.connection.web3

    async def _accounts(self, params: Sequence[Any]) -> list[str]:
        return [self._account.address]

    async def _chain_id(self, params: Sequence[Any]) -> str:
        return await self._account.chain_id_hex()

    async def _estimate_gas(self, params: Sequence[Any]) -> str:
        tx = normalise_tx_params(first_param(params, RpcMethod.ESTIMATE_GAS.value))
        if len(params) > 1:
            gas = await self._web3.eth.estimate_gas(tx, params[1])
        else:
            gas = await self._web3.eth.estimate_gas(tx)
        return str(gas)

    async def _call(self, params: Sequence[Any]) -> str:
        tx = normalise_tx_params(first_param(params, RpcMethod.CALL.value))
        block = params[1] if len(params) > 1 else None
        result = await self._web3.eth.call(tx, block)
        return result.to_0x_hex()

    async def _get_balance(self, params: Sequence[Any]) -> str:
        address = first_param(params, RpcMethod.GET_BALANCE.value)
        if not Web3.is_address(address):
            raise InvalidInputError("Invalid address for balance query", field="address", value=address)
        block = params[1] if len(params) > 1 else None
        balance = await self._web3.eth.get_balance(Web3.to_checksum_address(address), block)
        return str(balance)

    async def _get_transaction_receipt(self, params: Sequence[Any]) -> dict[str, Any] | None:
        tx_hash = first_param(params, RpcMethod.GET_TRANSACTION_RECEIPT.value)
        try:
            receipt = await self._web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        return serialise_receipt(receipt)

    async def _gas_price(self, params: Sequence[Any]) -> str:
        return str(await self._web3.eth.gas_price)

    async def _passthrough(self, method: str, params: Sequence[Any]) -> Any:
        return await self._web3.manager.coro_request(RPCEndpoint(method), list(params))

    # ------------------------------------------------------------------
    # Write handlers
    # ------------------------------------------------------------------
    @abstractmethod
    async def _write(self, method: str, params: Sequence[Any]) -> Any:
        pass


class ReadOnlyProvider(BackendProvider):
    """Provider for a bare address; every write fails before touching the node."""

    def __init__(self, account: ReadOnlyAccount):
        super().__init__(account)

    @property
    def capabilities(self) -> frozenset[Capability]:
        return frozenset({Capability.READ})

    async def _write(self, method: str, params: Sequence[Any]) -> Any:
        logger.warning("Rejected %s for read-only account %s", method, self._account.address)
        raise SigningUnavailableError(method, self._account.address)


class SigningProvider(BackendProvider):
    """Provider holding a local key: signs and broadcasts on the caller's behalf."""

    def __init__(self, account: SigningAccount):
        super().__init__(account)
        self._signing_account = account
        self._writers: dict[str, Handler] = {
            RpcMethod.SEND_TRANSACTION.value: self._send_transaction,
            SIGN_TRANSACTION: self._sign_transaction,
            ETH_SIGN: self._eth_sign,
            PERSONAL_SIGN: self._personal_sign,
            SIGN_TYPED_DATA: self._sign_typed_data,
            SIGN_TYPED_DATA_V3: self._sign_typed_data,
            SIGN_TYPED_DATA_V4: self._sign_typed_data,
        }
        if account.connection.signer_address != account.address:
            account.connection.apply_signer(account.signer)

    @property
    def capabilities(self) -> frozenset[Capability]:
        return frozenset({Capability.READ, Capability.WRITE})

    async def _write(self, method: str, params: Sequence[Any]) -> Any:
        return await self._writers[method](params)

    async def _send_transaction(self, params: Sequence[Any]) -> str:
        tx = normalise_tx_params(first_param(params, RpcMethod.SEND_TRANSACTION.value))
        self._check_sender(tx.setdefault("from", self._account.address))

        tx_hash = await self._web3.eth.send_transaction(tx)
        tx_hex = tx_hash.to_0x_hex()
        logger.info("Transaction sent from %s hash=%s", self._account.address, tx_hex)
        return tx_hex

    async def _sign_transaction(self, params: Sequence[Any]) -> str:
        tx = normalise_tx_params(first_param(params, SIGN_TRANSACTION))
        self._check_sender(tx.pop("from", self._account.address))

        # fields the caller left out are filled from the node
        if "chainId" not in tx:
            tx["chainId"] = await self._account.chain_id()
        if "nonce" not in tx:
            tx["nonce"] = await self._web3.eth.get_transaction_count(self._account.address, "pending")
        if "gas" not in tx:
            tx["gas"] = await self._web3.eth.estimate_gas({**tx, "from": self._account.address})
        if "gasPrice" not in tx and "maxFeePerGas" not in tx:
            tx["gasPrice"] = await self._web3.eth.gas_price

        try:
            signed = self._signing_account.signer.sign_transaction(tx)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(
                "Transaction cannot be signed", field="params[0]", details={"error": str(exc)}
            ) from exc
        logger.debug("Signed transaction nonce=%s for %s", tx["nonce"], self._account.address)
        return signed.raw_transaction.to_0x_hex()

    async def _eth_sign(self, params: Sequence[Any]) -> str:
        if len(params) < 2:
            raise InvalidInputError(f"{ETH_SIGN} requires an address and data", field="params")
        self._check_sender(params[0])
        return self._sign_message(params[1])

    async def _personal_sign(self, params: Sequence[Any]) -> str:
        message = first_param(params, PERSONAL_SIGN)
        if len(params) > 1:
            self._check_sender(params[1])
        return self._sign_message(message)

    async def _sign_typed_data(self, params: Sequence[Any]) -> str:
        if len(params) < 2:
            raise InvalidInputError(
                "Typed data signing requires an address and typed data", field="params"
            )
        self._check_sender(params[0])

        typed_data = params[1]
        if isinstance(typed_data, str):
            try:
                typed_data = json.loads(typed_data)
            except json.JSONDecodeError as exc:
                raise InvalidInputError("Typed data is not valid JSON", field="params[1]") from exc
        if not isinstance(typed_data, Mapping):
            # legacy v1 payloads are a list of typed values
            raise InvalidInputError(
                "Only EIP-712 typed data objects can be signed", field="params[1]", value=typed_data
            )

        signed = self._signing_account.signer.sign_typed_data(full_message=dict(typed_data))
        return signed.signature.to_0x_hex()

    def _sign_message(self, message: Any) -> str:
        if isinstance(message, str) and message.startswith("0x"):
            signable = encode_defunct(hexstr=message)
        else:
            signable = encode_defunct(text=str(message))
        signed = self._signing_account.signer.sign_message(signable)
        return signed.signature.to_0x_hex()

    def _check_sender(self, address: Any) -> None:
        if not Web3.is_address(address) or Web3.to_checksum_address(address) != self._account.address:
            raise InvalidInputError(
                "Request sender does not match the configured account",
                field="from",
                value=address,
            )


def build_provider(account: AccountContext) -> BackendProvider:
    """Wrap an account context in the provider variant matching its capability."""

    if isinstance(account, SigningAccount):
        return SigningProvider(account)
    if isinstance(account, ReadOnlyAccount):
        return ReadOnlyProvider(account)
    raise InvalidInputError("Unsupported account context", field="account", value=type(account).__name__)


async def create_provider(
    rpc_url: str,
    credential: str,
    *,
    request_timeout: float | None = None,
) -> BackendProvider:
    """Connect to ``rpc_url`` and build a provider for ``credential``.

    ``credential`` is either a bare address (read-only) or a private key
    (signing). The chain id is resolved here so later ``eth_chainId``
    requests are served from the cached value.
    """

    config = NodeConfig(rpc_url=rpc_url)
    if request_timeout is not None:
        config = NodeConfig(rpc_url=rpc_url, request_timeout=request_timeout)

    account = resolve_account(NodeConnection(config), credential)
    await account.connection.connect()
    await account.chain_id()
    return build_provider(account)
