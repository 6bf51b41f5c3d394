"""uport-connect - request credentials and transactions from the uPort app.

Requests are delivered as ``me.uport:`` URIs (QR code or mobile redirect) and
answered asynchronously through a correlation topic.
"""

from .config import ConnectConfig
from .connect import Connect
from .constants import TopicKind
from .contract import ContractFactory, ContractInstance
from .credentials import Credentials
from .dispatch import DisplayDispatcher, Dispatcher, RedirectDispatcher, select_dispatcher
from .display import TerminalQRDisplay
from .environment import is_mobile_user_agent
from .exceptions import (
    DispatchError,
    RequestRejectedError,
    TopicError,
    TopicTimeoutError,
    UportConnectError,
    ValidationError,
    VerificationError,
)
from .lifecycle import await_settlement
from .provider import UportProvider
from .topics import (
    ChasquiTopic,
    ChasquiTopicFactory,
    RedirectTopic,
    RedirectTopicFactory,
    Topic,
    default_topic_factory,
)
from .types import Profile, RequestEnvelope
from .uri import encode_request_uri, validate_intent

__version__ = "0.1.0"

__all__ = [
    # Facade
    "Connect",
    "ConnectConfig",
    # Request pipeline
    "encode_request_uri",
    "validate_intent",
    "Dispatcher",
    "DisplayDispatcher",
    "RedirectDispatcher",
    "select_dispatcher",
    "await_settlement",
    # Topics
    "Topic",
    "TopicKind",
    "ChasquiTopic",
    "ChasquiTopicFactory",
    "RedirectTopic",
    "RedirectTopicFactory",
    "default_topic_factory",
    # Collaborators
    "Credentials",
    "TerminalQRDisplay",
    "is_mobile_user_agent",
    "ContractFactory",
    "ContractInstance",
    "UportProvider",
    # Types
    "Profile",
    "RequestEnvelope",
    # Exceptions
    "UportConnectError",
    "ValidationError",
    "DispatchError",
    "TopicError",
    "TopicTimeoutError",
    "RequestRejectedError",
    "VerificationError",
]
