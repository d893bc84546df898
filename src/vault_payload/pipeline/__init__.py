"""Payload pipeline: aggregator options, quotes and steps down to a transaction."""

from .collaborators import StateContainer, TransactApi
from .payload import (
    PayloadPipeline,
    PipelineStage,
    build_amount_specs,
    extract_payload,
    generate_payload,
    parse_request,
)
from .poller import ReadinessPoller, poll_until_ready
from .selector import select_option, select_quote

__all__ = [
    "StateContainer",
    "TransactApi",
    "PayloadPipeline",
    "PipelineStage",
    "build_amount_specs",
    "extract_payload",
    "generate_payload",
    "parse_request",
    "ReadinessPoller",
    "poll_until_ready",
    "select_option",
    "select_quote",
]
