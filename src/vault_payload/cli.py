"""Command-line entry point for payload generation and provider requests.

Usage:
    vault-payload generate --vault-id ID --type deposit|withdraw \
        [--amount 0.1|all] [--wallet 0x...] --api package.module:factory
    vault-payload rpc METHOD [PARAMS_JSON] [--credential 0x...]

The ``--api`` factory is called with the resolved :class:`PayloadSettings`
and the :class:`InjectedBackendWallet` built for ``--wallet`` (``None``
without it), and must return ``(transact_api, state_container)``; it may
be a coroutine function. The wallet is rebound before the aggregator is
queried and disconnected when the command ends.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import inspect
import json
import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from dotenv import load_dotenv

from .config import ENV_PREFIX, PayloadSettings
from .exceptions import InvalidInputError, PayloadError, UpstreamFailureError
from .pipeline.payload import generate_payload
from .provider.dispatcher import create_provider
from .provider.wallet import InjectedBackendWallet
from .types import PipelineResult

logger = logging.getLogger(__name__)


def load_factory(spec: str) -> Any:
    """Import ``module:attribute`` and return the attribute."""

    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        raise InvalidInputError("Factory must look like 'module:attribute'", field="api", value=spec)

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidInputError(
            f"Cannot import {module_name}", field="api", value=spec, details={"error": str(exc)}
        ) from exc

    factory = getattr(module, attribute, None)
    if factory is None:
        raise InvalidInputError(f"{module_name} has no attribute {attribute}", field="api", value=spec)
    return factory


async def _run_generate(args: argparse.Namespace, settings: PayloadSettings) -> PipelineResult:
    wallet = InjectedBackendWallet(args.wallet, settings.node) if args.wallet else None
    try:
        try:
            factory = load_factory(args.api)
            collaborators = factory(settings, wallet)
            if inspect.isawaitable(collaborators):
                collaborators = await collaborators
            api, store = collaborators
        except PayloadError as exc:
            return PipelineResult(ready=True, error=exc.message, error_code=exc.code)
        except Exception as exc:
            logger.exception("Aggregator factory %s failed", args.api)
            return PipelineResult(ready=True, error=str(exc), error_code=UpstreamFailureError.code)

        params = {
            "vaultId": args.vault_id,
            "type": args.type,
            "amount": args.amount,
            "wallet": args.wallet,
        }
        return await generate_payload(
            params, api=api, store=store, settings=settings, wallet=wallet
        )
    finally:
        if wallet is not None:
            wallet.disconnect()


async def _run_rpc(args: argparse.Namespace, settings: PayloadSettings) -> Any:
    credential = args.credential or os.environ.get(ENV_PREFIX + "CREDENTIAL")
    if not credential:
        raise InvalidInputError(
            f"Pass --credential or set {ENV_PREFIX}CREDENTIAL", field="credential"
        )

    params: list[Any] = []
    if args.params:
        try:
            params = json.loads(args.params)
        except json.JSONDecodeError as exc:
            raise InvalidInputError("PARAMS_JSON is not valid JSON", field="params") from exc
        if not isinstance(params, list):
            params = [params]

    provider = await create_provider(
        settings.rpc_url, credential, request_timeout=settings.request_timeout
    )
    try:
        return await provider.request(args.method, params)
    finally:
        provider.account.connection.disconnect()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault-payload",
        description="Generate vault transaction payloads or query the injected provider.",
    )
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint (default from environment)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a deposit or withdraw payload")
    generate.add_argument("--vault-id", required=True)
    generate.add_argument("--type", required=True, help="deposit or withdraw")
    generate.add_argument("--amount", default="all", help="Decimal amount or 'all' (default)")
    generate.add_argument("--wallet", help="Read-only address to bind before running")
    generate.add_argument(
        "--api", required=True, help="Aggregator factory as 'module:callable'"
    )

    rpc = subparsers.add_parser("rpc", help="Send one request through the injected provider")
    rpc.add_argument("method", help="Wallet method name, e.g. eth_chainId")
    rpc.add_argument("params", nargs="?", help="JSON array of positional parameters")
    rpc.add_argument("--credential", help="Address (read-only) or private key (signing)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = PayloadSettings.from_env().with_overrides(rpc_url=args.rpc_url)
    except PayloadError as exc:
        logger.error("Invalid configuration: %s", exc.message)
        return 1

    if args.command == "generate":
        result = asyncio.run(_run_generate(args, settings))
        print(result.to_json())
        return 0 if result.error is None else 1

    try:
        answer = asyncio.run(_run_rpc(args, settings))
    except PayloadError as exc:
        print(json.dumps({"error": exc.message, "errorCode": exc.code}, indent=2))
        return 1
    except Exception as exc:
        logger.exception("Provider request failed")
        print(json.dumps({"error": str(exc), "errorCode": "upstream_failure"}, indent=2))
        return 1

    print(json.dumps(answer, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
