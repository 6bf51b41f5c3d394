"""Request the user's address by showing a QR code in the terminal."""

import asyncio
import os

from dotenv import load_dotenv

from uport_connect import Connect, TopicError, VerificationError

# Load environment variables from .env file
load_dotenv()


async def main():
    connect = Connect(
        os.getenv("UPORT_APP_NAME", "uport-connect-example"),
        client_id=os.getenv("UPORT_CLIENT_ID"),
        rpc_url=os.getenv("UPORT_RPC_URL"),
        is_mobile=False,
    )

    print("=" * 50)
    print("Scan the code below with the uPort app")
    print("=" * 50)

    try:
        profile = await connect.request_credentials()
    except TopicError as exc:
        print(f"No response from uPort: {exc}")
        return
    except VerificationError as exc:
        print(f"Untrusted response: {exc} ({exc.reason})")
        return

    print(f"Address: {profile.address}")
    for claim, value in profile.claims.items():
        print(f"  {claim}: {value}")


if __name__ == "__main__":
    asyncio.run(main())
