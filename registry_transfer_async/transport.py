#!/usr/bin/env python

"""AIOHTTP based HTTP transport."""

import asyncio
import logging
import os

from ssl import create_default_context, SSLContext
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

from aiohttp import (
    AsyncResolver,
    ClientError,
    ClientResponse,
    ClientSession,
    Fingerprint,
    TCPConnector,
)
from aiohttp.helpers import BasicAuth
from aiohttp.typedefs import LooseHeaders

from .errors import TransportError

LOGGER = logging.getLogger(__name__)


class Transport:
    # pylint: disable=too-many-instance-attributes
    """
    Executes one HTTP request at a time against a registry; no retries, and no
    redirect-following unless explicitly requested.
    """

    DEBUG = os.environ.get("RTA_DEBUG", "")

    def __init__(
        self,
        *,
        client_session: ClientSession = None,
        client_session_kwargs: Dict = None,
        no_proxy: str = None,
        proxies: Dict[str, str] = None,
        proxy_auth: BasicAuth = None,
        resolver_kwargs: Dict = None,
        ssl: Union[None, bool, Fingerprint, SSLContext] = None,
        tcp_connector_kwargs: Dict = None,
    ):
        # pylint: disable=too-many-arguments
        """
        Args:
            client_session: The underlying client session to use when making connections.
            client_session_kwargs: Arguments to be passed to the client session.
            no_proxy: A comma separated list of domains to exclude from proxying.
            proxies: Mapping of protocols to proxy urls, optionally including credentials.
            proxy_auth: The credentials to use when proxying.
            resolver_kwargs: Arguments to be passed to the resolver.
            ssl: SSL context.
            tcp_connector_kwargs: Arguments to be passed to the TCP connector.
        """
        if not client_session_kwargs:
            client_session_kwargs = {}
        proxies = dict(proxies or {})
        http_proxy = os.environ.get("HTTP_PROXY", os.environ.get("http_proxy"))
        if http_proxy and "http" not in proxies:
            proxies["http"] = http_proxy
        https_proxy = os.environ.get("HTTPS_PROXY", os.environ.get("https_proxy"))
        if https_proxy and "https" not in proxies:
            proxies["https"] = https_proxy
        if not no_proxy:
            no_proxy = os.environ.get("NO_PROXY", os.environ.get("no_proxy"))
        no_proxy = no_proxy.split(",") if no_proxy else []
        if not resolver_kwargs:
            resolver_kwargs = {}
        if ssl is None:
            cacerts = os.environ.get("RTA_CACERTS", None)
            if cacerts:
                if Transport.DEBUG:
                    LOGGER.debug("Using cacerts: %s", cacerts)
                ssl = create_default_context(cafile=str(cacerts))
        if isinstance(ssl, SSLContext) and Transport.DEBUG:
            LOGGER.debug("SSL Context: %s", ssl.cert_store_stats())
        if not tcp_connector_kwargs:
            tcp_connector_kwargs = {}

        self.client_session = client_session
        self.client_session_kwargs = client_session_kwargs
        self.proxies = proxies
        self.proxy_auth = proxy_auth
        self.proxy_no = no_proxy
        self.resolver_kwargs = resolver_kwargs
        self.ssl = ssl
        self.tcp_connector_kwargs = tcp_connector_kwargs

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self):
        """Gracefully closes this instance."""
        if self.client_session:
            await self.client_session.close()
        self.client_session = None

    async def _get_client_session(self) -> ClientSession:
        """
        Initializes and / or retrieves an AIOHTTP client session.

        Returns:
            The AIOHTTP client session.
        """
        if not self.client_session:
            if "resolver" not in self.tcp_connector_kwargs:
                self.tcp_connector_kwargs["resolver"] = AsyncResolver(
                    **self.resolver_kwargs
                )
            if "ssl" not in self.tcp_connector_kwargs and self.ssl is not None:
                self.tcp_connector_kwargs["ssl"] = self.ssl
            if "connector" not in self.client_session_kwargs:
                self.client_session_kwargs["connector"] = TCPConnector(
                    **self.tcp_connector_kwargs
                )
            self.client_session = ClientSession(**self.client_session_kwargs)

        return self.client_session

    def _get_proxy(self, *, url: str) -> Optional[str]:
        """
        Retrieves the proxy configuration for a given url.

        Args:
            url: The url for which to retrieve the proxy configuration.
        """
        parts = urlparse(url)
        result = None
        if parts.hostname not in self.proxy_no and parts.netloc not in self.proxy_no:
            result = self.proxies.get(parts.scheme, None)
        return result

    async def request(
        self,
        method: str,
        url: str,
        *,
        allow_redirects: bool = False,
        data: Any = None,
        headers: LooseHeaders = None,
        params: Dict[str, str] = None,
    ) -> ClientResponse:
        """
        Issues a single HTTP request.

        Args:
            method: The HTTP method.
            url: The absolute request url.
            allow_redirects: If True, redirects are followed by the underlying session.
            data: Request body; bytes, or an async iterable of bytes for streaming.
            headers: Request headers.
            params: Query parameters.

        Returns:
            The client response; the body has not been read.
        """
        client_session = await self._get_client_session()
        kwargs = {}
        if self.ssl is not None:
            kwargs["ssl"] = self.ssl
        try:
            return await client_session.request(
                method,
                url,
                allow_redirects=allow_redirects,
                data=data,
                headers=headers,
                params=params,
                proxy=self._get_proxy(url=url),
                proxy_auth=self.proxy_auth,
                raise_for_status=False,
                **kwargs,
            )
        except (ClientError, asyncio.TimeoutError) as exception:
            raise TransportError(f"{method} {url} failed: {exception}") from exception
