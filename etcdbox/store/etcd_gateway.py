"""etcd v3 client speaking the gRPC-gateway JSON API over ``httpx``.

etcd exposes its KV, auth and maintenance services as JSON at ``/v3/...``.
Keys and values travel base64-encoded; prefix reads are expressed as a
``[key, range_end)`` interval.
"""

from __future__ import annotations

import base64
import logging

import httpx

from ..errors import ConnectionFailure, QueryError, StoreConnectionError

logger = logging.getLogger(__name__)

AUTHENTICATE_PATH = "/v3/auth/authenticate"
STATUS_PATH = "/v3/maintenance/status"
RANGE_PATH = "/v3/kv/range"
KEY_ENCODING = "utf-8"
# Keys are raw bytes in etcd; surrogateescape keeps non-UTF-8 keys round-trippable.
KEY_ERRORS = "surrogateescape"


def encode_key(key: str) -> bytes:
    return key.encode(KEY_ENCODING, KEY_ERRORS)


def decode_key(raw: bytes) -> str:
    return raw.decode(KEY_ENCODING, KEY_ERRORS)


def prefix_range_end(prefix: bytes) -> bytes:
    """Smallest key greater than every key starting with ``prefix``.

    Mirrors etcd's ``GetPrefixRangeEnd``: increment the last byte below
    ``0xff`` and truncate after it; an empty or all-``0xff`` prefix maps to
    ``b"\\0"`` (every key).
    """
    end = bytearray(prefix)
    for idx in range(len(end) - 1, -1, -1):
        if end[idx] < 0xFF:
            end[idx] += 1
            return bytes(end[: idx + 1])
    return b"\0"


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _unb64(text: str) -> bytes:
    return base64.b64decode(text)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message:
            return message
    return f"HTTP {response.status_code}"


class EtcdGatewayClient:
    """``StoreClient`` for one etcd endpoint.

    Use :meth:`connect` to construct; it authenticates when a username is
    configured and attaches the issued token to every later request.
    """

    def __init__(self, http: httpx.Client, endpoint: str) -> None:
        self._http = http
        self.endpoint = endpoint

    @classmethod
    def connect(
        cls,
        endpoint: str,
        username: str = "",
        password: str = "",
        timeout: float = 2.0,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> EtcdGatewayClient:
        try:
            http = httpx.Client(base_url=endpoint, timeout=timeout, transport=transport)
        except (httpx.InvalidURL, ValueError) as exc:
            raise StoreConnectionError(ConnectionFailure.UNREACHABLE, f"invalid endpoint {endpoint!r}: {exc}") from exc
        client = cls(http, endpoint)
        if username:
            try:
                client._authenticate(username, password, timeout)
            except Exception:
                client.close()
                raise
        return client

    def _authenticate(self, username: str, password: str, timeout: float) -> None:
        response = self._post_for_connection(
            AUTHENTICATE_PATH,
            {"name": username, "password": password},
            timeout,
        )
        if response.status_code != 200:
            raise StoreConnectionError(ConnectionFailure.AUTH_FAILED, _error_message(response))
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreConnectionError(ConnectionFailure.AUTH_FAILED, "authenticate response is not JSON") from exc
        token = payload.get("token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise StoreConnectionError(ConnectionFailure.AUTH_FAILED, "no token in authenticate response")
        self._http.headers["Authorization"] = token
        logger.debug("etcd.authenticated endpoint=%s user=%s", self.endpoint, username)

    def _post_for_connection(self, url: str, body: dict[str, object], timeout: float) -> httpx.Response:
        try:
            return self._http.post(url, json=body, timeout=timeout)
        except httpx.TimeoutException as exc:
            raise StoreConnectionError(ConnectionFailure.TIMEOUT, str(exc) or "timed out") from exc
        except httpx.TransportError as exc:
            raise StoreConnectionError(ConnectionFailure.UNREACHABLE, str(exc) or type(exc).__name__) from exc
        except httpx.HTTPError as exc:
            raise StoreConnectionError(ConnectionFailure.UNREACHABLE, str(exc) or type(exc).__name__) from exc

    def probe(self, endpoint: str, timeout: float) -> None:
        """Liveness check via the maintenance status call."""
        url = endpoint.rstrip("/") + STATUS_PATH if endpoint else STATUS_PATH
        response = self._post_for_connection(url, {}, timeout)
        if response.status_code == 401:
            raise StoreConnectionError(ConnectionFailure.AUTH_FAILED, _error_message(response))
        if response.status_code != 200:
            raise StoreConnectionError(ConnectionFailure.UNREACHABLE, _error_message(response))

    def _range(self, body: dict[str, object], timeout: float | None) -> list[dict[str, object]]:
        try:
            response = self._http.post(RANGE_PATH, json=body, timeout=timeout)
        except httpx.HTTPError as exc:
            raise QueryError(f"range request failed: {exc}") from exc
        if response.status_code != 200:
            raise QueryError(f"range request failed: {_error_message(response)}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise QueryError("range response is not JSON") from exc
        kvs = payload.get("kvs", []) if isinstance(payload, dict) else None
        if not isinstance(kvs, list):
            raise QueryError("range response has no kvs list")
        return kvs

    def get_by_prefix(
        self,
        prefix: str,
        keys_only: bool = True,
        timeout: float | None = None,
    ) -> list[str]:
        raw_prefix = encode_key(prefix)
        body: dict[str, object] = {
            "key": _b64(raw_prefix or b"\0"),
            "range_end": _b64(prefix_range_end(raw_prefix)),
            "keys_only": keys_only,
        }
        kvs = self._range(body, timeout)
        try:
            keys = [decode_key(_unb64(str(kv["key"]))) for kv in kvs]
        except (KeyError, TypeError, ValueError) as exc:
            raise QueryError("malformed key in range response") from exc
        logger.debug("etcd.range prefix=%r keys=%d", prefix, len(keys))
        return keys

    def get_value(self, key: str, timeout: float | None = None) -> bytes:
        kvs = self._range({"key": _b64(encode_key(key))}, timeout)
        if not kvs:
            raise QueryError(f"key not found: {key!r}")
        entry = kvs[0]
        if not isinstance(entry, dict):
            raise QueryError(f"malformed entry for key {key!r}")
        # Values of empty keys are omitted from the gateway JSON.
        raw_value = entry.get("value", "")
        try:
            return _unb64(str(raw_value))
        except ValueError as exc:
            raise QueryError(f"malformed value for key {key!r}") from exc

    def close(self) -> None:
        self._http.close()


def connect_etcd(endpoint: str, username: str, password: str, timeout: float) -> EtcdGatewayClient:
    """Default ``StoreClientFactory``."""
    return EtcdGatewayClient.connect(endpoint, username, password, timeout)


__all__ = [
    "EtcdGatewayClient",
    "connect_etcd",
    "prefix_range_end",
    "encode_key",
    "decode_key",
]
