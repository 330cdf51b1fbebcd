#!/usr/bin/env python

# pylint: disable=missing-class-docstring,too-few-public-methods

"""Typing classes."""

from enum import Enum
from typing import Any, List, NamedTuple, Optional

from .formattedsha256 import FormattedSHA256


class UploadState(Enum):
    INIT = "init"
    SESSION_STARTED = "session_started"
    CHUNK_APPENDED = "chunk_appended"
    COMMITTED = "committed"
    FAILED = "failed"


class UploadSession(NamedTuple):
    """Server-side upload resource, as observed by the client."""

    upload_id: Optional[str]
    bytes_written: int = 0
    digest: Optional[FormattedSHA256] = None
    state: UploadState = UploadState.INIT


class KnownLength(NamedTuple):
    """A pre-sized buffer; uploaded monolithically."""

    data: bytes
    digest: Optional[FormattedSHA256] = None


class UnknownLength(NamedTuple):
    """
    A stream of unknown length; uploaded as a hashed chunk. The stream is either a
    file object or an async iterable of bytes.
    """

    stream: Any
    file_is_async: bool = True


class UploadResult(NamedTuple):
    content_length: int
    digest: FormattedSHA256


class PutManifestResult(NamedTuple):
    status: int
    digest: FormattedSHA256
    body: bytes


class MountResult(NamedTuple):
    digest: FormattedSHA256
    location: Optional[str]


class Layer(NamedTuple):
    media_type: str
    size: int
    digest: FormattedSHA256
    urls: Optional[List[str]] = None


class TagResult(NamedTuple):
    name: str
    tags: List[str]
    child: Optional[List[Any]] = None


class RegistryLocationParseString(NamedTuple):
    host: Optional[str]
    repository: str


class UtilsChunkToFile(NamedTuple):
    digest: FormattedSHA256
    size: int
