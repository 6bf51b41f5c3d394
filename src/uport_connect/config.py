"""Configuration container for the Connect facade."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .constants import DEFAULT_APP_NAME, INFURA_ROPSTEN


@dataclass(frozen=True)
class ConnectConfig:
    """Process-wide settings fixed when a Connect instance is built."""

    app_name: str = DEFAULT_APP_NAME
    client_id: str | None = None
    rpc_url: str | None = None
    infura_api_key: str | None = None
    is_mobile: bool = False
    use_builtin_display: bool = True

    def resolved_infura_api_key(self) -> str:
        """Return the Infura key, deriving one from the app name if unset."""

        if self.infura_api_key:
            return self.infura_api_key
        return re.sub(r"\W+", "-", self.app_name)

    def resolved_rpc_url(self) -> str:
        """Return the JSON-RPC endpoint, defaulting to Infura's testnet."""

        if self.rpc_url:
            return self.rpc_url
        return f"{INFURA_ROPSTEN}/{self.resolved_infura_api_key()}"
