"""Constants shared by the injected provider and the payload pipeline."""

from decimal import Decimal
from enum import Enum

ARBITRUM_ONE_RPC_URL = "https://arb1.arbitrum.io/rpc"

WALLET_LABEL = "Injected Backend Wallet"
WALLET_ICON_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="40" height="40">'
    '<rect width="40" height="40" fill="#59A662" rx="8"/>'
    '<text x="20" y="25" font-size="20" fill="#fff" text-anchor="middle">SL</text>'
    "</svg>"
)

DEFAULT_PREFERRED_TOKEN = "USDC"
DEFAULT_READINESS_MIN_OPTIONS = 2
DEFAULT_READINESS_MAX_ATTEMPTS = 5
DEFAULT_READINESS_INTERVAL = 1.0

# The aggregator rejects a zero amount even for max withdrawals.
WITHDRAW_ALL_PLACEHOLDER = Decimal("0.000001")
# There is no deposit-all concept upstream; "all" deposits this literal amount.
DEPOSIT_ALL_AMOUNT = Decimal("1")

AMOUNT_ALL = "all"


class RpcMethod(str, Enum):
    """Standardised wallet methods with dedicated handling."""

    REQUEST_ACCOUNTS = "eth_requestAccounts"
    ACCOUNTS = "eth_accounts"
    CHAIN_ID = "eth_chainId"
    SEND_TRANSACTION = "eth_sendTransaction"
    ESTIMATE_GAS = "eth_estimateGas"
    CALL = "eth_call"
    GET_BALANCE = "eth_getBalance"
    GET_TRANSACTION_RECEIPT = "eth_getTransactionReceipt"
    GAS_PRICE = "eth_gasPrice"
