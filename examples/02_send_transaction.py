"""Ask the uPort app to sign and send a transaction."""

import asyncio
import os

from dotenv import load_dotenv
from web3 import Web3

from uport_connect import Connect

load_dotenv()

ERC20_ABI = [
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


async def main():
    recipient = os.getenv("RECIPIENT_ADDRESS")
    if not recipient:
        raise ValueError("RECIPIENT_ADDRESS not found in environment variables")

    connect = Connect(
        os.getenv("UPORT_APP_NAME", "uport-connect-example"),
        client_id=os.getenv("UPORT_CLIENT_ID"),
        is_mobile=False,
    )

    # Plain value transfer: 0.01 ETH
    tx_hash = await connect.send_transaction(
        {"to": recipient, "value": hex(Web3.to_wei(0.01, "ether"))}
    )
    print(f"Value transfer sent: {tx_hash}")

    # Contract call rendered as a function signature for the signing app
    token_address = os.getenv("TOKEN_ADDRESS")
    if token_address:
        token = connect.contract(ERC20_ABI).at(token_address)
        tx_hash = await token.transfer(recipient, 10**18)
        print(f"Token transfer sent: {tx_hash}")


if __name__ == "__main__":
    asyncio.run(main())
