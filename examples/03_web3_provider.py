"""Use uPort as the account behind an AsyncWeb3 instance."""

import asyncio
import os

from dotenv import load_dotenv

from uport_connect import Connect

load_dotenv()


async def main():
    connect = Connect(
        os.getenv("UPORT_APP_NAME", "uport-connect-example"),
        rpc_url=os.getenv("UPORT_RPC_URL"),
        is_mobile=False,
    )
    web3 = connect.get_web3()

    accounts = await web3.eth.accounts
    print(f"uPort account: {accounts[0]}")

    balance = await web3.eth.get_balance(accounts[0])
    print(f"Balance: {web3.from_wei(balance, 'ether')} ETH")


if __name__ == "__main__":
    asyncio.run(main())
