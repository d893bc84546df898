"""Vault Payload - transaction payloads for vault deposits and withdrawals.

This library emulates a browser wallet against a remote node (the injected
backend provider) and drives an external aggregator from vault options down
to a ready-to-send ``{to, data, value}`` transaction payload.
"""

from .config import NodeConfig, PayloadSettings
from .exceptions import (
    InvalidInputError,
    NoOptionsAvailableError,
    NoQuotesAvailableError,
    PayloadError,
    PipelineCancelledError,
    SigningUnavailableError,
    UpstreamFailureError,
)
from .pipeline import (
    PayloadPipeline,
    PipelineStage,
    ReadinessPoller,
    StateContainer,
    TransactApi,
    generate_payload,
    parse_request,
    poll_until_ready,
    select_option,
    select_quote,
)
from .provider import (
    BackendProvider,
    InjectedBackendWallet,
    ReadOnlyProvider,
    SigningProvider,
    create_provider,
)
from .types import (
    AmountSpec,
    Capability,
    OperationKind,
    PipelineResult,
    PollOutcome,
    RpcRequest,
    TransactionPayload,
    VaultOperationRequest,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "NodeConfig",
    "PayloadSettings",
    # Provider
    "BackendProvider",
    "ReadOnlyProvider",
    "SigningProvider",
    "InjectedBackendWallet",
    "create_provider",
    # Pipeline
    "PayloadPipeline",
    "PipelineStage",
    "ReadinessPoller",
    "StateContainer",
    "TransactApi",
    "generate_payload",
    "parse_request",
    "poll_until_ready",
    "select_option",
    "select_quote",
    # Types
    "AmountSpec",
    "Capability",
    "OperationKind",
    "PipelineResult",
    "PollOutcome",
    "RpcRequest",
    "TransactionPayload",
    "VaultOperationRequest",
    # Exceptions
    "PayloadError",
    "InvalidInputError",
    "NoOptionsAvailableError",
    "NoQuotesAvailableError",
    "SigningUnavailableError",
    "UpstreamFailureError",
    "PipelineCancelledError",
]
