#!/usr/bin/env python

"""Exceptions raised by the registry transfer services."""

from typing import Optional


class RegistryError(Exception):
    """Base class for all registry transfer errors."""


class TransportError(RegistryError):
    """No response could be obtained from the registry."""


class UnexpectedStatusError(RegistryError):
    """
    A response was received, but its status is outside of the accepted set.
    """

    def __init__(self, status: int, body: bytes = b"", msg: str = None):
        """
        Args:
            status: The HTTP status of the response.
            body: The raw response body, for diagnostics.
            msg: Optional message describing the failed operation.
        """
        if msg is None:
            msg = "Unexpected status code"
        super().__init__(f"{msg}: {status} {body!r}")
        self.body = body
        self.status = status


class NotFoundError(UnexpectedStatusError):
    """The requested manifest could not be retrieved."""


class UploadError(UnexpectedStatusError):
    """The registry rejected a manifest or blob commit."""


class ChunkUploadError(UnexpectedStatusError):
    """The registry rejected an appended chunk."""

    def __init__(self, status: int, body: bytes = b"", *, upload_id: str = None):
        super().__init__(status, body, f"Chunk upload failed for session {upload_id}")
        self.upload_id = upload_id


class ProtocolError(RegistryError):
    """The response is unparsable, or a required header or field is missing."""


class UploadInitError(ProtocolError):
    """The registry did not provide an upload session identifier."""

    def __init__(self, status: int, body: bytes = b""):
        super().__init__(
            f"Request to start upload did not provide an upload session id: {status} {body!r}"
        )
        self.body = body
        self.status = status


class DigestMismatchError(ProtocolError):
    """Locally computed digest does not match the expected digest."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Digest mismatch: {actual} != {expected}")
        self.actual = actual
        self.expected = expected


class RedirectLoopError(RegistryError):
    """Too many redirects were encountered while fetching a blob."""

    def __init__(self, last_url: str):
        super().__init__(f"Redirect limit exceeded at: {last_url}")
        self.last_url = last_url


class MountError(RegistryError):
    """
    A blob could not be mounted from another repository.

    When the registry answers by opening an upload session instead (202), the session
    identifier is available as upload_id and the caller may upload the blob there.
    """

    def __init__(
        self,
        digest: str,
        source: str,
        destination: str,
        *,
        status: int = None,
        upload_id: Optional[str] = None,
    ):
        super().__init__(
            f"Mount failed for {digest} from {source} to {destination}: {status}"
        )
        self.destination = destination
        self.digest = digest
        self.source = source
        self.status = status
        self.upload_id = upload_id
