#!/usr/bin/env python

"""Blob existence probes and downloads."""

import logging

from http import HTTPStatus
from typing import AsyncIterator, Optional, Union
from urllib.parse import urljoin

from aiohttp import ClientResponse

from .errors import DigestMismatchError, RedirectLoopError, UnexpectedStatusError
from .formattedsha256 import FormattedSHA256
from .service import RegistryService
from .specs import Headers
from .typing import UtilsChunkToFile
from .utils import chunk_to_file, drain, CHUNK_SIZE

LOGGER = logging.getLogger(__name__)


class BlobStream:
    """
    Paused byte source for a blob download; nothing is read from the connection until a
    consumer iterates over it, or reads from it.
    """

    def __init__(self, client_response: ClientResponse):
        """
        Args:
            client_response: The (unread) client response carrying the blob.
        """
        self.client_response = client_response

    async def __aenter__(self) -> "BlobStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.iter_chunked()

    @property
    def content_length(self) -> Optional[int]:
        """Size of the blob as announced by the registry, if any."""
        return self.client_response.content_length

    async def iter_chunked(self, size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """
        Iterates over the blob content.

        Args:
            size: Maximum chunk size.
        """
        async for chunk in self.client_response.content.iter_chunked(size):
            yield chunk

    async def read(self) -> bytes:
        """Reads the (remaining) blob content."""
        return await self.client_response.read()

    def release(self):
        """Releases the underlying connection."""
        self.client_response.release()


class BlobReader(RegistryService):
    """
    Existence probe and content fetch with bounded redirect chasing.
    """

    MAX_REDIRECTS = 5

    async def exists(self, digest: FormattedSHA256) -> bool:
        """
        Check a blob for existence; no content is transferred.

        Args:
            digest: Digest of the blob.

        Returns:
            True if the registry answered 200, False otherwise.
        """
        client_response = await self._request(
            "HEAD", self._url(f"blobs/{digest}"), allow_redirects=True
        )
        client_response.release()
        return client_response.status == HTTPStatus.OK

    async def _resolve(self, digest: FormattedSHA256) -> ClientResponse:
        """
        Follows redirects until the response that carries the blob.

        Args:
            digest: Digest of the blob.

        Returns:
            The unread client response for the blob content.
        """
        url = self._url(f"blobs/{digest}")
        for _ in range(BlobReader.MAX_REDIRECTS):
            client_response = await self._request("GET", url)
            location = client_response.headers.get(Headers.LOCATION)
            if not (300 <= client_response.status < 400 and location):
                break
            # Superseded hops are consumed so their connections return to the pool
            await drain(client_response)
            url = urljoin(url, location)
            LOGGER.debug("Blob %s redirected to: %s", digest, url)
        else:
            raise RedirectLoopError(url)

        if client_response.status != HTTPStatus.OK:
            body = await client_response.read()
            raise UnexpectedStatusError(
                client_response.status, body, f"Unable to retrieve blob {digest}"
            )
        return client_response

    async def fetch(
        self, digest: FormattedSHA256, *, stream: bool = False
    ) -> Union[bytes, BlobStream]:
        """
        Retrieve the blob identified by digest.

        Args:
            digest: Digest of the blob.
            stream: If True, return a paused stream instead of the buffered content.

        Returns:
            The blob content, or a BlobStream from which to read it.
        """
        client_response = await self._resolve(digest)
        if stream:
            return BlobStream(client_response)
        return await client_response.read()

    async def fetch_to_disk(
        self, digest: FormattedSHA256, file, *, file_is_async: bool = True
    ) -> UtilsChunkToFile:
        """
        Retrieve the blob identified by digest into a file, verifying its digest.

        Args:
            digest: Digest of the blob.
            file: The file to which to store the blob.
            file_is_async: If True, all file IO operations will be awaited.

        Returns:
            dict:
                digest: The digest value of the stored data.
                size: The byte size of the stored data.
        """
        client_response = await self._resolve(digest)
        try:
            result = await chunk_to_file(
                client_response, file, file_is_async=file_is_async
            )
        finally:
            client_response.release()
        if result.digest != digest:
            raise DigestMismatchError(digest, result.digest)
        return result
