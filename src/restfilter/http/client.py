# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""REST client: endpoint identity, configuration hooks and shared transport state."""

from __future__ import annotations

from ..config import ClientSettings, load_client_settings
from .chain import FilterChain, FilterLink, execute_request
from .filters import execute_transport_request, set_content_headers
from .hooks import DEFAULT_CONFIG_HOOKS, ConfigHook
from .httpx_transport import HttpxTransport
from .models import CLASS_DESTROYED, HttpMethod, RestRequest, RestResponse
from .shared import SharedTransportState, TransportFactory
from .transport import Transport


class RestClient:
    """
    Endpoint configuration shared by any number of concurrent requests.

    The host may carry ``http://`` or ``https://`` to force the scheme; a
    ``port`` of 0 keeps the scheme's default port, and without a scheme port
    443 selects https. Each
    client owns one SharedTransportState for its whole life, so connections,
    TLS sessions and cookies are reused between requests. Do not destroy a
    client while requests against it are still running.
    """

    def __init__(
        self,
        host: str,
        port: int = 0,
        *,
        settings: ClientSettings | None = None,
        transport: Transport | None = None,
        transport_factory: TransportFactory | None = None,
    ):
        self.host = host
        self.port = port
        self.settings = settings or load_client_settings()
        self.proxy_host: str | None = None
        self.proxy_port = -1
        self.proxy_user: str | None = None
        self.proxy_pass: str | None = None
        self.transport: Transport = transport or HttpxTransport(transport_factory)
        self.shared_state: SharedTransportState | None = SharedTransportState(transport_factory)
        self._config_hooks: list[ConfigHook] = list(DEFAULT_CONFIG_HOOKS)
        self._destroyed = False

    @property
    def class_name(self) -> str:
        return CLASS_DESTROYED if self._destroyed else type(self).__name__

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def config_hooks(self) -> tuple[ConfigHook, ...]:
        return tuple(self._config_hooks)

    def add_config_hook(self, hook: ConfigHook) -> None:
        """Append a hook; hooks run in the order they were added."""
        self._config_hooks.append(hook)

    def set_proxy(
        self,
        proxy_host: str | None,
        proxy_port: int = -1,
        proxy_user: str | None = None,
        proxy_pass: str | None = None,
    ) -> None:
        """
        Route requests through a proxy.

        ``proxy_host=None`` disables proxying, ``proxy_port=-1`` selects the
        default port (1080) and ``proxy_user=None`` disables proxy
        authentication.
        """
        self.proxy_host = proxy_host
        self.proxy_port = proxy_port
        self.proxy_user = proxy_user
        self.proxy_pass = proxy_pass

    def new_request(self, uri: str, method: HttpMethod | str = HttpMethod.GET, *, uri_encoded: bool = False) -> RestRequest:
        """Request whose header list is bounded by the client's ``max_headers`` setting."""
        return RestRequest(uri, method, uri_encoded=uri_encoded, max_headers=self.settings.max_headers)

    def new_response(self) -> RestResponse:
        """Response that keeps at most ``max_headers`` header lines."""
        return RestResponse(max_headers=self.settings.max_headers)

    def execute(self, chain: FilterChain | FilterLink | None, request: RestRequest, response: RestResponse) -> RestResponse:
        """Run ``request`` through ``chain``; transport failures land on ``response``."""
        execute_request(self, chain, request, response)
        return response

    def destroy(self) -> None:
        """Release the shared transport state; a second call does nothing."""
        if self._destroyed:
            return
        if self.shared_state is not None:
            self.shared_state.close()
            self.shared_state = None
        self._config_hooks.clear()
        self.proxy_host = self.proxy_user = self.proxy_pass = None
        self.proxy_port = -1
        self._destroyed = True

    def close(self) -> None:
        self.destroy()

    def __enter__(self) -> RestClient:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.destroy()


def create_default_chain() -> FilterChain:
    """Content-header filter in front of the transport filter."""
    return FilterChain.of(set_content_headers, execute_transport_request)


__all__ = ["RestClient", "create_default_chain"]
