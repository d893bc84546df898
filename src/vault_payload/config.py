"""Configuration containers for the provider and the payload pipeline."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from .constants import (
    ARBITRUM_ONE_RPC_URL,
    DEFAULT_PREFERRED_TOKEN,
    DEFAULT_READINESS_INTERVAL,
    DEFAULT_READINESS_MAX_ATTEMPTS,
    DEFAULT_READINESS_MIN_OPTIONS,
    DEPOSIT_ALL_AMOUNT,
    WITHDRAW_ALL_PLACEHOLDER,
)
from .exceptions import InvalidInputError

DEFAULT_REQUEST_TIMEOUT = 10.0
ENV_PREFIX = "VAULT_PAYLOAD_"


@dataclass(frozen=True)
class NodeConfig:
    """Connection settings for a single JSON-RPC node."""

    rpc_url: str = ARBITRUM_ONE_RPC_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass(frozen=True)
class PayloadSettings:
    """Aggregated settings used to construct providers and pipelines."""

    rpc_url: str = ARBITRUM_ONE_RPC_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    preferred_token: str = DEFAULT_PREFERRED_TOKEN
    readiness_min_options: int = DEFAULT_READINESS_MIN_OPTIONS
    readiness_max_attempts: int = DEFAULT_READINESS_MAX_ATTEMPTS
    readiness_interval: float = DEFAULT_READINESS_INTERVAL
    withdraw_all_placeholder: Decimal = WITHDRAW_ALL_PLACEHOLDER
    deposit_all_amount: Decimal = DEPOSIT_ALL_AMOUNT

    def __post_init__(self) -> None:
        if self.readiness_max_attempts < 1:
            raise InvalidInputError(
                "Readiness polling needs at least one attempt",
                field="readiness_max_attempts",
                value=self.readiness_max_attempts,
            )
        if self.readiness_interval < 0:
            raise InvalidInputError(
                "Readiness interval cannot be negative",
                field="readiness_interval",
                value=self.readiness_interval,
            )
        if self.withdraw_all_placeholder <= 0:
            raise InvalidInputError(
                "Withdraw-all placeholder must be strictly positive",
                field="withdraw_all_placeholder",
                value=self.withdraw_all_placeholder,
            )
        if self.deposit_all_amount <= 0:
            raise InvalidInputError(
                "Deposit-all amount must be strictly positive",
                field="deposit_all_amount",
                value=self.deposit_all_amount,
            )

    @property
    def node(self) -> NodeConfig:
        return NodeConfig(rpc_url=self.rpc_url, request_timeout=self.request_timeout)

    def with_overrides(self, **changes: Any) -> PayloadSettings:
        """Return a copy with the given fields replaced, ignoring ``None`` values."""

        return replace(self, **{key: value for key, value in changes.items() if value is not None})

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PayloadSettings:
        """Build settings from ``VAULT_PAYLOAD_*`` environment variables.

        Unset variables keep their defaults. Malformed values raise
        :class:`InvalidInputError` naming the offending variable.
        """

        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        converters: dict[str, Any] = {
            "rpc_url": str,
            "request_timeout": float,
            "preferred_token": str,
            "readiness_min_options": int,
            "readiness_max_attempts": int,
            "readiness_interval": float,
            "withdraw_all_placeholder": Decimal,
            "deposit_all_amount": Decimal,
        }
        for name, convert in converters.items():
            key = ENV_PREFIX + name.upper()
            raw = env.get(key)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[name] = convert(raw.strip())
            except (ValueError, InvalidOperation) as exc:
                raise InvalidInputError(
                    f"Invalid value for {key}",
                    field=key,
                    value=raw,
                    details={"error": str(exc)},
                ) from exc

        return cls(**values)
