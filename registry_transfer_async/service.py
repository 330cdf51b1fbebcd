#!/usr/bin/env python

"""Common base of the registry services."""

from typing import Any, Dict

from aiohttp import ClientResponse
from aiohttp.typedefs import LooseHeaders

from .credentials import Credentials
from .location import RegistryLocation
from .specs import Headers
from .transport import Transport


class RegistryService:
    """
    Binds a fixed (location, credentials, transport) triple; every request made by a
    service is scoped to that repository and authorized with those credentials.
    """

    def __init__(
        self,
        location: RegistryLocation,
        transport: Transport,
        *,
        credentials: Credentials = None,
        protocol: str = None,
    ):
        """
        Args:
            location: The registry host and repository.
            transport: The transport used to issue requests.
            credentials: Provider of the "Authorization" header value.
            protocol: Protocol to use when connecting to the registry.
        """
        if credentials is None:
            credentials = Credentials()

        self.credentials = credentials
        self.location = location
        self.protocol = protocol
        self.transport = transport

    def _get_request_headers(self, headers: LooseHeaders = None) -> LooseHeaders:
        """
        Generates request headers that contain the registry credentials.

        Args:
            headers: Optional supplemental request headers to be returned.

        Returns:
            The generated request headers.
        """
        headers = dict(headers) if headers else {}

        if Headers.USER_AGENT not in headers:
            # Note: This cannot be imported above, as it causes a circular import!
            from . import __version__  # pylint: disable=import-outside-toplevel

            headers[Headers.USER_AGENT] = f"registry-transfer-async/{__version__}"

        authorization = self.credentials.get_authorization()
        if authorization:
            headers[Headers.AUTHORIZATION] = authorization

        return headers

    def _url(self, path: str) -> str:
        return self.location.url(path, protocol=self.protocol)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        data: Any = None,
        headers: LooseHeaders = None,
        params: Dict[str, str] = None,
        **kwargs,
    ) -> ClientResponse:
        """
        Issues an authorized request through the transport.

        Args:
            method: The HTTP method.
            url: The absolute request url.
            data: Request body.
            headers: Optional supplemental request headers.
            params: Query parameters.

        Returns:
            The underlying client response.
        """
        return await self.transport.request(
            method,
            url,
            data=data,
            headers=self._get_request_headers(headers),
            params=params,
            **kwargs,
        )
