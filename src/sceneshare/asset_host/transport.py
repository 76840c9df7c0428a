"""Async HTTP transport for the asset host.

The transport handles one request lifecycle:

1. Send the HTTP request (httpx) with the configured timeout and proxy.
2. On ``2xx`` -- return the parsed JSON response.
3. On timeout / connection failure -- raise :class:`AssetHostNetworkError`.
4. On any other status -- raise :class:`AssetHostRejectedError`.
5. On a ``2xx`` whose body is not a JSON object -- raise
   :class:`AssetHostResponseError`.

Uploads are attempted exactly once; there is no retry loop.
"""

from __future__ import annotations

import json as _json
import sys
import time
from typing import Any

import httpx

from sceneshare.config import SceneShareConfig
from sceneshare.errors import (
    AssetHostNetworkError,
    AssetHostRejectedError,
    AssetHostResponseError,
)
from sceneshare.observability import get_logger, resolve_metrics
from sceneshare.observability import metrics as m

log = get_logger("transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _host_message(response: httpx.Response) -> str:
    """Pull the human-readable error out of an asset-host error body.

    Cloudinary-style hosts answer ``{"error": {"message": "..."}}``; anything
    else falls back to the start of the raw body.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return response.text[:500]


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise :class:`AssetHostRejectedError` for any non-2xx response."""
    status = response.status_code
    host_message = _host_message(response)
    raise AssetHostRejectedError(
        message=f"Asset host rejected {method} {path} with {status}: {host_message}",
        context={"status_code": status, "host_message": host_message, "path": path},
    )


def _dump_exchange(
    config: SceneShareConfig,
    method: str,
    url: str,
    request_fields: dict[str, Any],
    response_status: int | None,
    response_body: Any | None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from sceneshare.utils.redact import redact

    dump: dict[str, Any] = {"method": method, "url": url}
    dump.update(request_fields)
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, secrets=(config.upload_preset,))
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


def _emit_debug_dump(
    config: SceneShareConfig,
    method: str,
    response: httpx.Response,
    kwargs: dict[str, Any],
) -> None:
    if not config.debug_dump_payload:
        return
    try:
        resp_body = response.json()
    except ValueError:
        resp_body = response.text[:1000]
    request_fields = {
        key: kwargs[key] for key in ("data", "files", "json", "params") if key in kwargs
    }
    _dump_exchange(
        config, method, str(response.url), request_fields,
        response.status_code, resp_body,
    )


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncAssetHostTransport:
    """Asynchronous single-attempt HTTP transport for the asset host.

    Parameters
    ----------
    config:
        A :class:`SceneShareConfig` controlling base URL, timeout, proxy,
        metrics, and debug dumps.
    client:
        Optional pre-built :class:`httpx.AsyncClient`.  Tests pass one
        backed by :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        config: SceneShareConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._metrics = resolve_metrics(config.metrics)

        if client is None:
            proxy: httpx.URL | str | None = config.http_proxy
            client = httpx.AsyncClient(
                base_url=config.asset_host_url,
                timeout=httpx.Timeout(config.timeout_seconds),
                proxy=proxy,
            )
        self._client = client

    # -- public API --------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Execute one HTTP request against the asset host.

        Parameters
        ----------
        method:
            HTTP method.
        path:
            Path relative to ``asset_host_url``.
        **kwargs:
            Forwarded to :meth:`httpx.AsyncClient.request` (``data=``,
            ``files=``, ``json=``, ``params=``, ``headers=``).

        Returns
        -------
        dict
            Parsed JSON response body.

        Raises
        ------
        AssetHostNetworkError
            On timeouts and connection failures.
        AssetHostRejectedError
            On any non-2xx response.
        AssetHostResponseError
            When a 2xx body is not a JSON object.
        """
        t0 = time.monotonic()
        try:
            response = await self._client.request(method, path, **kwargs)
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            self._metrics.increment(
                m.REQUESTS_TOTAL,
                tags={"method": method, "status": "error"},
            )
            log.warning(
                "Asset host network error",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "error": str(exc) or type(exc).__name__,
                    }
                },
            )
            raise AssetHostNetworkError(
                message=f"Network error on {method} {path}: {exc or type(exc).__name__}",
                context={"url": path},
                cause=exc,
            ) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000

        status = str(response.status_code)
        self._metrics.increment(
            m.REQUESTS_TOTAL,
            tags={"method": method, "status": status},
        )
        self._metrics.timing(
            m.REQUEST_DURATION_MS,
            elapsed_ms,
            tags={"method": method, "status": status},
        )
        _emit_debug_dump(self._config, method, response, kwargs)

        if not 200 <= response.status_code < 300:
            log.warning(
                "Asset host rejected request",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                    }
                },
            )
            _raise_for_status(response, method, path)

        try:
            result = response.json()
        except ValueError as exc:
            raise AssetHostResponseError(
                message=f"Asset host returned a non-JSON body for {method} {path}",
                context={"status_code": response.status_code, "reason": "invalid_json"},
                cause=exc,
            ) from exc
        if not isinstance(result, dict):
            raise AssetHostResponseError(
                message=f"Asset host returned a non-object body for {method} {path}",
                context={"status_code": response.status_code, "reason": "not_an_object"},
            )
        return result

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncAssetHostTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
