#!/usr/bin/env python

"""Utility functions."""

import hashlib
import os

from functools import wraps, partial

import asyncio

from aiohttp import ClientResponse

from .formattedsha256 import FormattedSHA256
from .typing import UtilsChunkToFile

# https://github.com/docker/docker-py/blob/master/docker/constants.py
CHUNK_SIZE = int(os.environ.get("RTA_CHUNK_SIZE", 2097152))


def async_wrap(func):
    """Decorates a given function for execution via an executor."""

    @wraps(func)
    async def run_in_executor(*args, loop=None, executor=None, **kwargs):
        if loop is None:
            loop = asyncio.get_running_loop()
        partial_func = partial(func, *args, **kwargs)
        return await loop.run_in_executor(executor, partial_func)

    return run_in_executor


async def be_kind_rewind(file, *, file_is_async: bool = True):
    """
    Reset the file position (offset) to the absolute beginning.

    Args:
        file: The file for which to reset the offset.
        file_is_async: If True, all file IO operations will be awaited.
    """
    if file_is_async:
        coroutine = file.seek(0)
    else:
        coroutine = async_wrap(file.seek)(0)
    await coroutine


async def chunk_to_file(
    client_response: ClientResponse, file, *, file_is_async: bool = True
) -> UtilsChunkToFile:
    """
    Asynchronously stores response chunks to a given file, hashing them on the way.

    Args:
        client_response: The client response from which to read the file chunks.
        file: The file to which to store the file chunks.
        file_is_async: If True, all file IO operations will be awaited.

    Returns:
        dict:
            digest: The digest value of the chunked data.
            size: The byte size of the chunked data in bytes.
    """
    hasher = hashlib.sha256()
    size = 0
    coroutine = file.write if file_is_async else async_wrap(file.write)
    async for chunk in client_response.content.iter_chunked(CHUNK_SIZE):
        await coroutine(chunk)
        hasher.update(chunk)
        size += len(chunk)

    await be_kind_rewind(file, file_is_async=file_is_async)

    return UtilsChunkToFile(digest=FormattedSHA256(hasher.hexdigest()), size=size)


async def drain(client_response: ClientResponse):
    """
    Reads and discards the remainder of a response body, then releases the connection.

    Args:
        client_response: The client response to be drained.
    """
    async for _ in client_response.content.iter_chunked(CHUNK_SIZE):
        pass
    client_response.release()
