#!/usr/bin/env python

"""Blob upload orchestration."""

import logging

from http import HTTPStatus
from typing import Union

from aiohttp import ClientResponse

from .errors import ChunkUploadError, UploadError, UploadInitError
from .formattedsha256 import FormattedSHA256
from .hashinggenerator import HashingGenerator
from .service import RegistryService
from .specs import Headers, MediaTypes
from .typing import (
    KnownLength,
    UnknownLength,
    UploadResult,
    UploadSession,
    UploadState,
)
from .utils import drain

LOGGER = logging.getLogger(__name__)


class BlobWriter(RegistryService):
    """
    Upload state machine:

        INIT -> SESSION_STARTED -> COMMITTED                    (monolithic)
        INIT -> SESSION_STARTED -> CHUNK_APPENDED -> COMMITTED  (chunked)

    A session value is threaded through each transition; the server may rotate the
    upload id on append. Any failure aborts the upload at the failing step, and the
    server-side session is abandoned.

    The digest returned to the caller is always computed from bytes that the client
    observed leaving it; the digest reported by the registry is advisory only.
    """

    async def _initiate(self) -> UploadSession:
        """
        Initiate a resumable blob upload.

        Returns:
            The newly started session.
        """
        client_response = await self._request(
            "POST",
            self._url("blobs/uploads/"),
            data=b"",
        )
        upload_id = client_response.headers.get(Headers.DOCKER_UPLOAD_UUID)
        if not upload_id:
            body = await client_response.read()
            raise UploadInitError(client_response.status, body)
        await drain(client_response)

        LOGGER.debug("Started upload session: %s", upload_id)
        return UploadSession(upload_id=upload_id, state=UploadState.SESSION_STARTED)

    async def _append(
        self, session: UploadSession, source: UnknownLength
    ) -> UploadSession:
        """
        Stream the source as a single chunk, hashing and counting every byte sent.

        Args:
            session: A started session.
            source: The stream to be uploaded.

        Returns:
            The session after the chunk was accepted.
        """
        hashing_generator = HashingGenerator(
            source.stream, file_is_async=source.file_is_async
        )
        client_response = await self._request(
            "PATCH",
            self._url(f"blobs/uploads/{session.upload_id}"),
            data=hashing_generator,
            headers={Headers.CONTENT_TYPE: MediaTypes.APPLICATION_OCTET_STREAM},
        )
        body = await client_response.read()
        if client_response.status != HTTPStatus.NO_CONTENT:
            raise ChunkUploadError(
                client_response.status, body, upload_id=session.upload_id
            )

        upload_id = client_response.headers.get(
            Headers.DOCKER_UPLOAD_UUID, session.upload_id
        )
        if upload_id != session.upload_id:
            LOGGER.debug("Upload session rotated: %s -> %s", session.upload_id, upload_id)
        return session._replace(
            bytes_written=hashing_generator.get_size(),
            digest=hashing_generator.get_digest(),
            state=UploadState.CHUNK_APPENDED,
            upload_id=upload_id,
        )

    async def _finalize(
        self, session: UploadSession, digest: FormattedSHA256, *, data: bytes = b""
    ) -> UploadSession:
        """
        Complete the upload, optionally carrying the content as the final chunk.

        Args:
            session: The session to be committed.
            digest: Digest of the (total) blob.
            data: Binary data.

        Returns:
            The committed session.
        """
        client_response = await self._request(
            "PUT",
            self._url(f"blobs/uploads/{session.upload_id}"),
            data=data,
            headers={Headers.CONTENT_TYPE: MediaTypes.APPLICATION_OCTET_STREAM},
            params={"digest": str(digest)},
        )
        body = await client_response.read()
        if client_response.status != HTTPStatus.CREATED:
            raise UploadError(
                client_response.status,
                body,
                f"Unable to finalize upload session {session.upload_id}",
            )
        self._check_advisory_digest(client_response, digest)

        return session._replace(digest=digest, state=UploadState.COMMITTED)

    @staticmethod
    def _check_advisory_digest(client_response: ClientResponse, digest: FormattedSHA256):
        remote = client_response.headers.get(Headers.DOCKER_CONTENT_DIGEST)
        if remote and remote != digest:
            LOGGER.warning(
                "Registry reported digest %s for upload of %s", remote, digest
            )

    async def _upload_monolithic(
        self, session: UploadSession, source: KnownLength
    ) -> UploadResult:
        digest = source.digest
        if digest is None:
            digest = FormattedSHA256.calculate(source.data)
        session = await self._finalize(session, digest, data=source.data)
        LOGGER.debug("Committed monolithic upload: %s", session.digest)
        return UploadResult(content_length=len(source.data), digest=digest)

    async def _upload_chunked(
        self, session: UploadSession, source: UnknownLength
    ) -> UploadResult:
        session = await self._append(session, source)
        # Always the locally accumulated digest; never one reported by the registry
        session = await self._finalize(session, session.digest)
        LOGGER.debug(
            "Committed chunked upload: %s (%d bytes)",
            session.digest,
            session.bytes_written,
        )
        return UploadResult(content_length=session.bytes_written, digest=session.digest)

    async def upload(self, source: Union[KnownLength, UnknownLength]) -> UploadResult:
        """
        Upload a blob.

        Args:
            source:
                KnownLength for a pre-sized buffer (uploaded in a single request), or
                UnknownLength for a stream (uploaded as a hashed chunk).

        Returns:
            dict:
                content_length: The number of bytes uploaded.
                digest: The digest of the uploaded bytes.
        """
        if isinstance(source, KnownLength):
            transfer = self._upload_monolithic
        elif isinstance(source, UnknownLength):
            transfer = self._upload_chunked
        else:
            raise TypeError(f"Unsupported upload source: {type(source)}")

        session = UploadSession(upload_id=None)
        try:
            session = await self._initiate()
            return await transfer(session, source)
        except Exception:
            LOGGER.debug(
                "Upload failed in state %s; abandoning session: %s",
                session.state.name,
                session.upload_id,
            )
            raise
