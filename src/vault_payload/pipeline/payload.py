"""Vault deposit/withdraw payload generation through the aggregator."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from web3 import Web3

from ..config import PayloadSettings
from ..constants import AMOUNT_ALL
from ..exceptions import (
    InvalidInputError,
    PayloadError,
    PipelineCancelledError,
    UpstreamFailureError,
)
from ..provider.wallet import InjectedBackendWallet
from ..types import (
    AmountSpec,
    OperationKind,
    PipelineResult,
    TransactionPayload,
    VaultOperationRequest,
)
from ..utils import read_field
from .collaborators import StateContainer, TransactApi, WalletBinder
from .poller import ReadinessPoller
from .selector import select_option, select_quote

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PipelineStage(str, Enum):
    """States of a single payload run, in execution order."""

    PARSING_INPUT = "parsing_input"
    BINDING_WALLET = "binding_wallet"
    AWAITING_READINESS = "awaiting_readiness"
    FETCHING_OPTIONS = "fetching_options"
    SELECTING_OPTION = "selecting_option"
    BUILDING_AMOUNT_SPEC = "building_amount_spec"
    FETCHING_QUOTES = "fetching_quotes"
    SELECTING_QUOTE = "selecting_quote"
    FETCHING_STEP = "fetching_step"
    DISPATCHING = "dispatching"
    DONE = "done"


# ----------------------------------------------------------------------
# Input parsing and amount building
# ----------------------------------------------------------------------
def parse_request(params: Mapping[str, Any]) -> VaultOperationRequest:
    """Validate entry-point parameters into a :class:`VaultOperationRequest`.

    Accepts ``vaultId``/``vault_id``, ``type``, ``amount`` (decimal string or
    ``"all"``, the default) and an optional ``wallet`` address.
    """

    vault_id = params.get("vaultId") or params.get("vault_id")
    if not isinstance(vault_id, str) or not vault_id.strip():
        raise InvalidInputError("Missing vaultId", field="vaultId", value=vault_id)

    raw_type = params.get("type")
    try:
        kind = OperationKind(raw_type)
    except ValueError as exc:
        raise InvalidInputError(
            "Type must be deposit or withdraw", field="type", value=raw_type
        ) from exc

    amount = _parse_amount(params.get("amount"))

    wallet = params.get("wallet")
    if wallet in (None, ""):
        wallet_address = None
    elif isinstance(wallet, str) and Web3.is_address(wallet):
        wallet_address = Web3.to_checksum_address(wallet)
    else:
        raise InvalidInputError("Invalid wallet address", field="wallet", value=wallet)

    return VaultOperationRequest(
        vault_id=vault_id.strip(),
        kind=kind,
        amount=amount,
        wallet_address=wallet_address,
    )


def _parse_amount(raw: Any) -> Decimal | str:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return AMOUNT_ALL
    if isinstance(raw, str) and raw.strip().lower() == AMOUNT_ALL:
        return AMOUNT_ALL

    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise InvalidInputError("Invalid amount", field="amount", value=raw) from exc
    if not amount.is_finite():
        raise InvalidInputError("Invalid amount", field="amount", value=raw)
    return amount


def build_amount_specs(
    option: Any,
    request: VaultOperationRequest,
    settings: PayloadSettings,
) -> list[AmountSpec]:
    """Build the single amount spec handed to the quote fetchers.

    Deposits never use max semantics; ``"all"`` deposits the configured
    literal amount. Withdrawals of ``"all"`` or a non-positive amount set
    ``is_max`` with a small positive placeholder, since the aggregator
    rejects zero even when max is set.
    """

    inputs = read_field(option, "inputs") or ()
    if not inputs:
        raise UpstreamFailureError(
            "Selected option has no input token", endpoint="option", details={"option": repr(option)}
        )
    token = inputs[0]

    amount = request.amount
    if request.kind is OperationKind.DEPOSIT:
        if not isinstance(amount, Decimal):
            amount = settings.deposit_all_amount
        if amount <= 0:
            raise InvalidInputError("Deposit amount must be positive", field="amount", value=str(amount))
        return [AmountSpec(token=token, amount=amount, is_max=False)]

    if not isinstance(amount, Decimal) or amount <= 0:
        return [AmountSpec(token=token, amount=settings.withdraw_all_placeholder, is_max=True)]
    return [AmountSpec(token=token, amount=amount, is_max=False)]


def extract_payload(result: Any, from_address: str | None) -> TransactionPayload:
    """Pull ``{to, data, value}`` out of the value a dispatched step resolved to."""

    to = read_field(result, "to")
    data = read_field(result, "data")
    if not to or not data:
        raise UpstreamFailureError(
            "Execution step resolved without a transaction payload",
            endpoint="dispatch",
            details={"result": repr(result)},
        )

    value = read_field(result, "value")
    return TransactionPayload(
        to=str(to),
        data=str(data),
        value=None if value is None else str(value),
        from_address=from_address,
    )


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------
class PayloadPipeline:
    """Drive option -> quote -> step -> dispatch for one vault operation per run.

    Runs share no state: each :meth:`run` parses its own request and
    returns its own :class:`PipelineResult`. Every failure is folded into
    the result; ``ready`` is always true once the run is done.
    """

    def __init__(
        self,
        api: TransactApi,
        store: StateContainer,
        *,
        settings: PayloadSettings | None = None,
        poller: ReadinessPoller | None = None,
        wallet_binder: WalletBinder | None = None,
    ) -> None:
        self._api = api
        self._store = store
        self._settings = settings or PayloadSettings()
        self._poller = poller or ReadinessPoller.from_settings(self._settings)
        self._wallet_binder = wallet_binder

    async def run(
        self,
        request: VaultOperationRequest | Mapping[str, Any],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> PipelineResult:
        result = PipelineResult()
        try:
            result.payload = await self._execute(request, cancel_event)
        except PayloadError as exc:
            logger.error("Payload run failed (%s): %s", exc.code, exc.message)
            result.error = exc.message
            result.error_code = exc.code
        except Exception as exc:
            logger.exception("Unexpected payload run failure")
            result.error = str(exc) or type(exc).__name__
            result.error_code = UpstreamFailureError.code

        result.ready = True
        logger.debug("Stage payload [%s]: run finished (error=%s)", PipelineStage.DONE.value, result.error)
        return result

    async def _execute(
        self,
        raw_request: VaultOperationRequest | Mapping[str, Any],
        cancel_event: asyncio.Event | None,
    ) -> TransactionPayload:
        self._enter(PipelineStage.PARSING_INPUT, cancel_event)
        if isinstance(raw_request, VaultOperationRequest):
            request = raw_request
        else:
            request = parse_request(raw_request)

        vault_id = request.vault_id
        kind = request.kind
        get_state = self._store.get_state

        def get_wallet_address() -> str:
            return request.wallet_address or ""

        if request.wallet_address and self._wallet_binder is not None:
            self._enter(PipelineStage.BINDING_WALLET, cancel_event)
            await self._upstream(
                PipelineStage.BINDING_WALLET, self._wallet_binder(request.wallet_address)
            )

        self._enter(PipelineStage.AWAITING_READINESS, cancel_event)

        async def probe() -> int:
            return len(await self._api.fetch_deposit_options_for(vault_id, get_state))

        outcome = await self._poller.poll(
            probe, label=f"deposit options for {vault_id}", cancel_event=cancel_event
        )
        self._check_cancelled(PipelineStage.AWAITING_READINESS, cancel_event)
        if not outcome.ready:
            logger.warning(
                "Aggregator readiness not reached for %s (%s option(s)); continuing",
                vault_id,
                outcome.count,
            )

        self._enter(PipelineStage.FETCHING_OPTIONS, cancel_event)
        if kind is OperationKind.DEPOSIT:
            options = await self._upstream(
                PipelineStage.FETCHING_OPTIONS,
                self._api.fetch_deposit_options_for(vault_id, get_state),
            )
        else:
            options = await self._upstream(
                PipelineStage.FETCHING_OPTIONS,
                self._api.fetch_withdraw_options_for(vault_id, get_state),
            )
        logger.debug("Stage payload [%s]: %s option(s) for %s", kind.value, len(options), vault_id)

        self._enter(PipelineStage.SELECTING_OPTION, cancel_event)
        option = select_option(
            options, kind, self._settings.preferred_token, vault_id=vault_id
        )

        self._enter(PipelineStage.BUILDING_AMOUNT_SPEC, cancel_event)
        amounts = build_amount_specs(option, request, self._settings)
        logger.debug(
            "Stage payload [%s]: amount=%s max=%s", kind.value, amounts[0].amount, amounts[0].is_max
        )

        self._enter(PipelineStage.FETCHING_QUOTES, cancel_event)
        if kind is OperationKind.DEPOSIT:
            quotes = await self._upstream(
                PipelineStage.FETCHING_QUOTES,
                self._api.fetch_deposit_quotes_for([option], amounts, get_state),
            )
        else:
            quotes = await self._upstream(
                PipelineStage.FETCHING_QUOTES,
                self._api.fetch_withdraw_quotes_for([option], amounts, get_state),
            )

        self._enter(PipelineStage.SELECTING_QUOTE, cancel_event)
        quote = select_quote(quotes, vault_id=vault_id)

        self._enter(PipelineStage.FETCHING_STEP, cancel_event)
        if kind is OperationKind.DEPOSIT:
            step = await self._upstream(
                PipelineStage.FETCHING_STEP,
                self._api.fetch_deposit_step(quote, get_state, get_wallet_address),
            )
        else:
            step = await self._upstream(
                PipelineStage.FETCHING_STEP,
                self._api.fetch_withdraw_step(quote, get_state, get_wallet_address),
            )

        action = read_field(step, "action")
        if action is None:
            raise UpstreamFailureError(
                "Execution step carries no action", endpoint=PipelineStage.FETCHING_STEP.value
            )

        self._enter(PipelineStage.DISPATCHING, cancel_event)
        dispatched = await self._upstream(PipelineStage.DISPATCHING, self._store.dispatch(action))

        payload = extract_payload(dispatched, request.wallet_address)
        logger.info("Generated %s payload for %s to=%s", kind.value, vault_id, payload.to)
        return payload

    @staticmethod
    def _check_cancelled(stage: PipelineStage, cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError(stage.value)

    def _enter(self, stage: PipelineStage, cancel_event: asyncio.Event | None) -> None:
        self._check_cancelled(stage, cancel_event)
        logger.debug("Stage payload [%s]: enter", stage.value)

    @staticmethod
    async def _upstream(stage: PipelineStage, call: Awaitable[T]) -> T:
        try:
            return await call
        except PayloadError:
            raise
        except Exception as exc:
            raise UpstreamFailureError(
                f"{stage.value.replace('_', ' ').capitalize()} failed: {exc}",
                endpoint=stage.value,
                details={"error": str(exc), "type": type(exc).__name__},
            ) from exc


async def generate_payload(
    params: Mapping[str, Any],
    *,
    api: TransactApi,
    store: StateContainer,
    settings: PayloadSettings | None = None,
    wallet: InjectedBackendWallet | None = None,
    cancel_event: asyncio.Event | None = None,
) -> PipelineResult:
    """Entry point: run one payload generation from raw request parameters.

    ``wallet`` is the injected wallet the caller wired into its
    collaborators. When ``params`` names a ``wallet`` address, that wallet
    is rebound to it as a read-only account before the aggregator is
    queried, so the dispatch step sees the new account. Without an
    injected wallet the address only feeds the step fetchers and the
    payload's ``from``.
    """

    settings = settings or PayloadSettings()
    binder: WalletBinder | None = None
    if wallet is not None:

        async def rebind(address: str) -> None:
            await wallet.reinject(address, settings.rpc_url)

        binder = rebind

    pipeline = PayloadPipeline(api, store, settings=settings, wallet_binder=binder)
    return await pipeline.run(params, cancel_event=cancel_event)
