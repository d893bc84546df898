"""Query a node through the injected backend provider."""

import asyncio
import os

from dotenv import load_dotenv

from vault_payload import SigningUnavailableError, create_provider

load_dotenv()


async def main():
    rpc_url = os.getenv("VAULT_PAYLOAD_RPC_URL", "https://arb1.arbitrum.io/rpc")
    address = os.getenv("WALLET_ADDRESS")
    if not address:
        raise ValueError("WALLET_ADDRESS not found in environment variables")

    # A bare address gives a read-only provider
    provider = await create_provider(rpc_url, address)

    print(f"Accounts: {await provider.request('eth_accounts')}")
    print(f"Chain id: {await provider.request('eth_chainId')}")
    print(f"Balance (wei): {await provider.request('eth_getBalance', [address, 'latest'])}")
    print(f"Gas price (wei): {await provider.request('eth_gasPrice')}")
    print(f"Block number: {await provider.request('eth_blockNumber')}")

    try:
        await provider.request("eth_sendTransaction", [{"to": address, "value": "0x0"}])
    except SigningUnavailableError as exc:
        print(f"Write rejected as expected: {exc.message}")


if __name__ == "__main__":
    asyncio.run(main())
