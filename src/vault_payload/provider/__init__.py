"""Injected backend provider: wallet-style requests served from a node."""

from .account import AccountContext, ReadOnlyAccount, SigningAccount, resolve_account
from .connections import NodeConnection
from .dispatcher import (
    WRITE_METHODS,
    BackendProvider,
    ReadOnlyProvider,
    SigningProvider,
    build_provider,
    create_provider,
)
from .wallet import InjectedBackendWallet, WalletInterface

__all__ = [
    "AccountContext",
    "ReadOnlyAccount",
    "SigningAccount",
    "resolve_account",
    "NodeConnection",
    "BackendProvider",
    "ReadOnlyProvider",
    "SigningProvider",
    "WRITE_METHODS",
    "build_provider",
    "create_provider",
    "InjectedBackendWallet",
    "WalletInterface",
]
