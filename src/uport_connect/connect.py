"""Main entry point for requesting credentials and transactions from uPort."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from web3 import AsyncWeb3

from .config import ConnectConfig
from .constants import DEFAULT_APP_NAME, SELF_TARGET, TopicKind
from .contract import ContractFactory
from .credentials import Credentials
from .dispatch import select_dispatcher
from .display import TerminalQRDisplay
from .environment import is_mobile_user_agent, open_uri
from .exceptions import DispatchError, VerificationError
from .lifecycle import await_settlement, run_close_handler
from .provider import UportProvider
from .topics import TopicFactory, default_topic_factory
from .types import CallIntent, CloseHandler, Profile, RequestEnvelope, UriHandler
from .uri import encode_request_uri, validate_intent

logger = logging.getLogger(__name__)


class Connect:
    """Request credentials and transaction signatures from the uPort app.

    Requests leave as ``me.uport:`` URIs, either shown as a QR code or opened
    directly on mobile, and responses come back through a correlation topic.

    Args:
        app_name: Name shown to the user in the signing app.
        client_id: uPort identity of the application.
        rpc_url: JSON-RPC endpoint; defaults to Infura's testnet.
        infura_api_key: Key used in the default endpoint; derived from
            ``app_name`` when omitted.
        credentials: Collaborator verifying credential responses.
        topic_factory: Callable creating a topic for a request kind.
        uri_handler: Shows a request URI on non-mobile clients. Omit it to use
            the built-in terminal QR display.
        mobile_uri_handler: Opens a request URI on mobile clients.
        close_uri_handler: Hides what ``uri_handler`` showed once the request
            settles. Defaults to the built-in display's close.
        is_mobile: Forces the environment classification.
        user_agent: Classified when ``is_mobile`` is not given.
        mobile_callback_url: Where the signing app redirects back to on mobile.
    """

    def __init__(
        self,
        app_name: str | None = None,
        *,
        client_id: str | None = None,
        rpc_url: str | None = None,
        infura_api_key: str | None = None,
        credentials: Any | None = None,
        topic_factory: TopicFactory | None = None,
        uri_handler: UriHandler | None = None,
        mobile_uri_handler: UriHandler | None = None,
        close_uri_handler: CloseHandler | None = None,
        is_mobile: bool | None = None,
        user_agent: str | None = None,
        mobile_callback_url: str | None = None,
    ) -> None:
        on_mobile = is_mobile if is_mobile is not None else is_mobile_user_agent(user_agent)

        self.display: TerminalQRDisplay | None = None
        if uri_handler is None:
            self.display = TerminalQRDisplay()
            uri_handler = self.display.open
            if close_uri_handler is None:
                close_uri_handler = self.display.close

        self._config = ConnectConfig(
            app_name=app_name or DEFAULT_APP_NAME,
            client_id=client_id,
            rpc_url=rpc_url,
            infura_api_key=infura_api_key,
            is_mobile=on_mobile,
            use_builtin_display=self.display is not None,
        )

        self.app_name = self._config.app_name
        self.client_id = client_id
        self.infura_api_key = self._config.resolved_infura_api_key()
        self.rpc_url = self._config.resolved_rpc_url()
        self.topic_factory = topic_factory or default_topic_factory(
            on_mobile, mobile_callback_url=mobile_callback_url
        )
        self.close_uri_handler = close_uri_handler
        self.credentials = credentials or Credentials(audience=client_id)
        settings = getattr(self.credentials, "settings", None)
        self.can_sign = getattr(settings, "signer", None) is not None

        self._uri_handler = uri_handler
        self._mobile_uri_handler = mobile_uri_handler or open_uri
        self._dispatcher = select_dispatcher(
            on_mobile,
            uri_handler=self._uri_handler,
            mobile_uri_handler=self._mobile_uri_handler,
        )
        self._provider: UportProvider | None = None

    @property
    def config(self) -> ConnectConfig:
        return self._config

    # The dispatcher is bound to these at construction, so they are read-only.
    @property
    def is_on_mobile(self) -> bool:
        return self._config.is_mobile

    @property
    def uri_handler(self) -> UriHandler:
        return self._uri_handler

    @property
    def mobile_uri_handler(self) -> UriHandler:
        return self._mobile_uri_handler

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    async def request_credentials(
        self,
        request: Mapping[str, Any] | None = None,
        uri_handler: UriHandler | None = None,
    ) -> Profile:
        """Ask the user to share their identity and return the verified profile.

        ``request`` is accepted for API compatibility only; the ``me.uport``
        scheme has no parameter that carries it.
        """

        if request:
            logger.debug("Credential request options are not transmitted: %s", sorted(request))

        response = await self._request({"to": SELF_TARGET}, TopicKind.ACCESS_TOKEN, uri_handler)
        return await self._verify(response)

    async def request_address(self, uri_handler: UriHandler | None = None) -> str:
        profile = await self.request_credentials(uri_handler=uri_handler)
        return profile.address

    async def send_transaction(
        self, tx: CallIntent, uri_handler: UriHandler | None = None
    ) -> Any:
        """Ask the user to sign a transaction and return what the signing app posts."""

        return await self._request(tx, TopicKind.TX, uri_handler)

    async def request(self, envelope: RequestEnvelope) -> Any:
        """Dispatch a prepared request and wait for its response."""

        try:
            self._dispatcher.dispatch(envelope.uri, envelope.uri_handler)
        except DispatchError:
            _discard_topic(envelope.topic)
            if self._dispatcher.engages_display and self.close_uri_handler is not None:
                run_close_handler(self.close_uri_handler)
            raise

        logger.debug("Request dispatched; awaiting response on %s", envelope.topic.url)
        close_handler = self.close_uri_handler if self._dispatcher.engages_display else None
        try:
            response = await await_settlement(envelope.topic, close_handler)
        except asyncio.CancelledError:
            _discard_topic(envelope.topic)
            raise
        except Exception as exc:
            logger.debug("Request on %s failed: %s", envelope.topic.url, exc)
            raise
        logger.debug("Request on %s settled", envelope.topic.url)
        return response

    async def _request(
        self, intent: CallIntent, kind: TopicKind, uri_handler: UriHandler | None
    ) -> Any:
        validate_intent(intent)

        topic = self.topic_factory(kind)
        logger.debug("Created %s topic %s", kind.value, topic.url)
        uri = encode_request_uri(self.add_app_parameters(intent, topic.url))
        return await self.request(RequestEnvelope(uri=uri, topic=topic, uri_handler=uri_handler))

    async def _verify(self, response: Any) -> Profile:
        try:
            profile = self.credentials.receive(response)
            if inspect.isawaitable(profile):
                profile = await profile
        except VerificationError:
            raise
        except Exception as exc:
            raise VerificationError(
                "Credential response could not be verified",
                reason="credentials",
                details={"error": str(exc)},
            ) from exc
        return profile

    def add_app_parameters(self, intent: CallIntent, callback_url: str | None) -> dict[str, Any]:
        """Return a copy of ``intent`` carrying this app's identity fields."""

        app_intent = dict(intent)
        if callback_url:
            app_intent["callback_url"] = callback_url
        if self.app_name:
            app_intent["label"] = self.app_name
        if self.client_id:
            app_intent["client_id"] = self.client_id
        return app_intent

    # ------------------------------------------------------------------
    # Web3 integration
    # ------------------------------------------------------------------
    def get_web3_provider(self) -> UportProvider:
        if self._provider is None:
            self._provider = UportProvider(
                self.request_address, self.send_transaction, self.rpc_url
            )
        return self._provider

    def get_web3(self) -> AsyncWeb3:
        return AsyncWeb3(self.get_web3_provider())

    def contract(self, abi: Sequence[Mapping[str, Any]]) -> ContractFactory:
        return ContractFactory(abi, self.send_transaction, web3_factory=self.get_web3)


def _discard_topic(topic: Any) -> None:
    cancel = getattr(topic, "cancel", None)
    if callable(cancel):
        cancel()
