"""Wallet backends consumed by the submission orchestrator."""

from .base import WalletBackend, classify_rpc_error
from .local_account import LocalAccountWallet
from .wallet_rpc import WalletRpcWallet

__all__ = ["LocalAccountWallet", "WalletBackend", "WalletRpcWallet", "classify_rpc_error"]
