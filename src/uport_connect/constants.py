"""Constants shared across uport-connect."""

from enum import Enum

URI_SCHEME = "me.uport"

# Identity target used when requesting credentials rather than a transaction.
SELF_TARGET = "me"

DEFAULT_APP_NAME = "uport-connect-app"

INFURA_ROPSTEN = "https://ropsten.infura.io"

CHASQUI_URL = "https://chasqui.uport.me/api/v1/topic/"

DEFAULT_POLLING_INTERVAL = 2.0
DEFAULT_MAX_POLLS = 150
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_REDIRECT_TIMEOUT = DEFAULT_POLLING_INTERVAL * DEFAULT_MAX_POLLS

TOPIC_ID_BYTES = 8

# Order in which app identity fields follow the call parameters.
APP_PARAMETERS = ("label", "callback_url", "client_id")

# Characters encodeURIComponent leaves untouched beyond the unreserved set.
URI_COMPONENT_SAFE = "!*'()"


class TopicKind(str, Enum):
    """Semantic request types carried by a correlation topic."""

    ACCESS_TOKEN = "access_token"
    TX = "tx"
