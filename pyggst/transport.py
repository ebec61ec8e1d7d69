# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
HTTP transport for the pyggst SDK.

The codec never talks to the network itself. It hands request bodies to a
Transport and gets raw response bytes back. Swap the transport to add
caching, retries or a recorded-traffic replayer for tests.
"""

from __future__ import annotations

import logging
import socket
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .exceptions import HTTPStatusError, TransportError, TransportTimeoutError
from .tls import TLSConfig

if TYPE_CHECKING:
    from .models import ClientConfig

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Moves request bytes to the service and response bytes back."""

    @abstractmethod
    def post_form(self, url: str, fields: dict[str, str]) -> bytes:
        """POST an ``application/x-www-form-urlencoded`` body and return the raw response."""

    @abstractmethod
    def get(self, url: str) -> bytes:
        """GET a URL and return the raw response."""

    def close(self) -> None:
        pass


class HTTPTransport(Transport):
    """
    Transport backed by ``urllib.request``.

    Timeouts raise TransportTimeoutError, non-2xx responses raise
    HTTPStatusError and any other socket failure raises TransportError.
    Nothing is retried.
    """

    def __init__(
        self,
        *,
        timeout_ms: int = 30000,
        tls: TLSConfig | None = None,
        user_agent: str = "pyggst",
    ) -> None:
        self._timeout = timeout_ms / 1000.0
        self._ssl_context = (tls or TLSConfig()).create_context()
        self._user_agent = user_agent

    @classmethod
    def from_config(cls, config: ClientConfig) -> HTTPTransport:
        tls = TLSConfig(
            ca_file=config.tls_ca_file,
            insecure_skip_verify=config.tls_insecure_skip_verify,
        )
        return cls(timeout_ms=config.request_timeout_ms, tls=tls, user_agent=config.user_agent)

    def post_form(self, url: str, fields: dict[str, str]) -> bytes:
        body = urllib.parse.urlencode(fields).encode("ascii")
        request = urllib.request.Request(
            url,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": self._user_agent,
            },
        )
        return self._send(request)

    def get(self, url: str) -> bytes:
        request = urllib.request.Request(url, method="GET", headers={"User-Agent": self._user_agent})
        return self._send(request)

    def _send(self, request: urllib.request.Request) -> bytes:
        url = request.full_url
        logger.debug(f"{request.get_method()} {url}")
        try:
            with urllib.request.urlopen(request, timeout=self._timeout, context=self._ssl_context) as response:
                data = response.read()
        except urllib.error.HTTPError as e:
            raise HTTPStatusError(e.code, url, str(e.reason)) from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise TransportTimeoutError(f"Request to {url} timed out", url) from e
            raise TransportError(f"Request to {url} failed: {e.reason}", url) from e
        except socket.timeout as e:
            raise TransportTimeoutError(f"Request to {url} timed out", url) from e
        except OSError as e:
            raise TransportError(f"Request to {url} failed: {e}", url) from e

        logger.debug(f"{url} returned {len(data)} bytes")
        return data
