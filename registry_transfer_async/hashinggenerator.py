#!/usr/bin/env python

"""Generators that hash the data they relay."""

import hashlib

from .formattedsha256 import FormattedSHA256
from .utils import async_wrap, CHUNK_SIZE


class HashingGenerator:
    """
    Async generator that hashes and counts every chunk it yields, in order.

    Suitable as the request body of an aiohttp streaming upload; once exhausted, the
    digest and size describe exactly the bytes that were handed to the transport.
    """

    def __init__(self, source, *, file_is_async: bool = True):
        """
        Args:
            source: A file object, or an async iterable of bytes.
            file_is_async: If True, all file IO operations will be awaited.
        """
        self.file_is_async = file_is_async
        self.hasher = hashlib.sha256()
        self.size = 0
        self.source = source

    async def _chunks(self):
        if not hasattr(self.source, "read"):
            async for chunk in self.source:
                yield chunk
            return

        coroutine = (
            self.source.read if self.file_is_async else async_wrap(self.source.read)
        )
        while True:
            chunk = await coroutine(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk

    async def __aiter__(self):
        # https://docs.aiohttp.org/en/stable/client_quickstart.html#streaming-uploads
        async for chunk in self._chunks():
            if not chunk:
                continue
            self.hasher.update(chunk)
            self.size += len(chunk)
            yield chunk

    def get_digest(self) -> FormattedSHA256:
        """Retrieves the digest value of the relayed data."""
        return FormattedSHA256(self.hasher.hexdigest())

    def get_size(self) -> int:
        """Retrieves the size (length) of the relayed data."""
        return self.size
