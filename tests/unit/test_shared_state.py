# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading

import httpx
import pytest

from restfilter.http.client import RestClient
from restfilter.http.hooks import (
    DEFAULT_CONFIG_HOOKS,
    disable_ssl_cert_check,
    proxy_config,
    shared_state_config,
    verbose_config,
)
from restfilter.http.shared import PoolKey, SharedData, SharedTransportState
from restfilter.http.transport import TransferHandle


class ClosingTransport(httpx.BaseTransport):
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def state():
    s = SharedTransportState(ClosingTransport)
    yield s
    s.close()


def test_pools_are_cached_per_key(state):
    first = state.connection_pool(PoolKey())
    assert state.connection_pool(PoolKey()) is first
    other = state.connection_pool(PoolKey(verify_ssl=False))
    assert other is not first
    assert state.pool_count == 2
    assert first.kwargs["verify"] is state.ssl_context(True)


def test_pool_key_hides_proxy_credentials():
    key = PoolKey(proxy="http://p:1080", proxy_auth=("user", "secret"))
    assert "secret" not in repr(key)
    assert key != PoolKey(proxy="http://p:1080")


def test_close_is_idempotent_and_closes_pools(state):
    pool = state.connection_pool(PoolKey())
    state.close()
    state.close()
    assert pool.closed
    assert state.pool_count == 0
    with pytest.raises(RuntimeError):
        state.connection_pool(PoolKey())


def test_locked_serializes_access(state):
    counter = {"value": 0}

    def bump():
        for _ in range(1000):
            with state.locked(SharedData.COOKIE):
                value = counter["value"]
                counter["value"] = value + 1

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter["value"] == 4000


def test_lock_released_on_error(state):
    with pytest.raises(ValueError):
        with state.locked(SharedData.CONNECT):
            raise ValueError("boom")
    state.lock(SharedData.DNS)
    state.unlock(SharedData.DNS)


def test_default_hooks_fill_handle():
    client = RestClient("example.org", transport_factory=ClosingTransport)
    client.set_proxy("proxy.local", 8080, "user", "pw")
    handle = TransferHandle()
    try:
        assert client.config_hooks == DEFAULT_CONFIG_HOOKS
        assert not any(hook(client, handle) for hook in client.config_hooks)
        assert handle.proxy == "proxy.local"
        assert handle.proxy_port == 8080
        assert handle.proxy_user == "user"
        assert handle.proxy_password == "pw"
        assert handle.share is client.shared_state
    finally:
        client.destroy()


def test_proxy_hook_without_proxy_leaves_handle_alone():
    client = RestClient("example.org", transport_factory=ClosingTransport)
    handle = TransferHandle()
    client.destroy()
    assert proxy_config(client, handle) is False
    assert shared_state_config(client, handle) is False
    assert handle.proxy is None
    assert handle.share is None


def test_optional_hooks():
    handle = TransferHandle()
    assert disable_ssl_cert_check(None, handle) is False
    assert verbose_config(None, handle) is False
    assert handle.verify_ssl is False
    assert handle.verbose is True
