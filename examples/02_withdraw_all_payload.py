"""Generate a withdraw-all payload against an aggregator you supply.

The aggregator and state container are external collaborators. This
example wires in static stand-ins so the flow can be followed end to end;
replace them with your own ``TransactApi`` and ``StateContainer``.
"""

import asyncio
import logging

from vault_payload import PayloadSettings, generate_payload

logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

VAULT_ID = "curve-arb-crvusd-usdt"


class StaticTransactApi:
    def __init__(self):
        self._options = [
            {"inputs": [{"id": "mooCurveCrvUsdUsdt"}], "wantedOutputs": [{"id": "USDT"}]},
            {"inputs": [{"id": "mooCurveCrvUsdUsdt"}], "wantedOutputs": [{"id": "USDC"}]},
        ]

    async def fetch_deposit_options_for(self, vault_id, get_state):
        return self._options

    async def fetch_withdraw_options_for(self, vault_id, get_state):
        return self._options

    async def fetch_deposit_quotes_for(self, options, amounts, get_state):
        return [{"option": options[0], "amounts": amounts}]

    async def fetch_withdraw_quotes_for(self, options, amounts, get_state):
        return [{"option": options[0], "amounts": amounts}]

    async def fetch_deposit_step(self, quote, get_state, get_wallet_address):
        return {"action": {"quote": quote}}

    async def fetch_withdraw_step(self, quote, get_state, get_wallet_address):
        return {"action": {"quote": quote}}


class StaticStore:
    def get_state(self):
        return {}

    async def dispatch(self, action):
        return {"to": "0x00000000000000000000000000000000000000aa", "data": "0x853828b6", "value": "0"}


async def main():
    settings = PayloadSettings(readiness_interval=0.1)
    result = await generate_payload(
        {"vaultId": VAULT_ID, "type": "withdraw", "amount": "all"},
        api=StaticTransactApi(),
        store=StaticStore(),
        settings=settings,
    )
    print(result.to_json())


if __name__ == "__main__":
    asyncio.run(main())
