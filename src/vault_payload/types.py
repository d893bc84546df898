"""Type definitions and data models for vault payload generation."""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from .constants import AMOUNT_ALL
from .exceptions import InvalidInputError

Address = str  # Ethereum address
JsonValue = Any


class OperationKind(str, Enum):
    """Vault operations the pipeline can produce payloads for."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class Capability(str, Enum):
    """What a provider can do on behalf of its account."""

    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class RpcRequest:
    """A single standardised wallet request."""

    method: str
    params: tuple[JsonValue, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RpcRequest":
        """Construct a request from the ``{method, params}`` mapping form."""

        method = data.get("method")
        if not isinstance(method, str) or not method:
            raise InvalidInputError("RPC request requires a method", field="method", value=method)

        params = data.get("params") or ()
        if isinstance(params, str | bytes) or not isinstance(params, Sequence):
            raise InvalidInputError(
                "RPC params must be an ordered sequence", field="params", value=params
            )
        return cls(method=method, params=tuple(params))


@dataclass(frozen=True)
class VaultOperationRequest:
    """Parsed entry-point parameters for one pipeline run."""

    vault_id: str
    kind: OperationKind
    amount: Decimal | Literal["all"] = AMOUNT_ALL
    wallet_address: Address | None = None

    @property
    def is_all(self) -> bool:
        return self.amount == AMOUNT_ALL


@dataclass(frozen=True)
class AmountSpec:
    """Amount of one token handed to the aggregator's quote fetchers."""

    token: Any
    amount: Decimal
    is_max: bool = False

    def as_dict(self) -> dict[str, Any]:
        """Return the ``{token, amount, max}`` shape the aggregator expects."""

        return {"token": self.token, "amount": self.amount, "max": self.is_max}


@dataclass(frozen=True)
class TransactionPayload:
    """Final transaction fields extracted from a dispatched execution step."""

    to: str | None
    data: str | None
    value: str | None = None
    from_address: Address | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.from_address, "to": self.to, "data": self.data, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransactionPayload":
        return cls(
            to=data.get("to"),
            data=data.get("data"),
            value=data.get("value"),
            from_address=data.get("from"),
        )


@dataclass
class PipelineResult:
    """Terminal, externally observable output of one pipeline run.

    ``ready`` signals that the run finished, not that it succeeded; callers
    must inspect ``error`` (and ``error_code`` to tell failure kinds apart).
    """

    ready: bool = False
    error: str | None = None
    payload: TransactionPayload | None = None
    error_code: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.ready and self.error is None and self.payload is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ready": self.ready,
            "error": self.error,
            "errorCode": self.error_code,
            "aggregatorPayload": self.payload.to_dict() if self.payload is not None else None,
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineResult":
        raw_payload = data.get("aggregatorPayload")
        return cls(
            ready=bool(data.get("ready", False)),
            error=data.get("error"),
            payload=TransactionPayload.from_dict(raw_payload) if raw_payload is not None else None,
            error_code=data.get("errorCode"),
        )

    @classmethod
    def from_json(cls, raw: str) -> "PipelineResult":
        return cls.from_dict(json.loads(raw))


@dataclass(frozen=True)
class PollOutcome:
    """Result of a bounded readiness wait."""

    count: int
    attempts: int
    minimum: int = field(default=0, compare=False)

    @property
    def ready(self) -> bool:
        return self.count >= self.minimum
