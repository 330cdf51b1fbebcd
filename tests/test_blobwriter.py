#!/usr/bin/env python

# pylint: disable=protected-access

"""BlobWriter tests."""

import io

from http import HTTPStatus

import aiofiles
import pytest

from registry_transfer_async import (
    BlobWriter,
    ChunkUploadError,
    FormattedSHA256,
    KnownLength,
    TransportError,
    UnknownLength,
    UploadError,
    UploadInitError,
    UploadSession,
    UploadState,
)

from .testutils import async_chunks, EMPTY_DIGEST, FakeResponse, sha256

pytestmark = [pytest.mark.asyncio]

UPLOAD_URL = "https://registry.example.com/v2/ns/image/blobs/uploads/"


def initiated(upload_id: str = "uuid-1") -> FakeResponse:
    """Response to a successful session start."""
    return FakeResponse(
        HTTPStatus.ACCEPTED, headers={"Docker-Upload-UUID": upload_id}
    )


def appended(upload_id: str = None) -> FakeResponse:
    """Response to a successful chunk append."""
    headers = {"Docker-Upload-UUID": upload_id} if upload_id else {}
    return FakeResponse(HTTPStatus.NO_CONTENT, headers=headers)


def committed(digest: str = None) -> FakeResponse:
    """Response to a successful commit."""
    headers = {"Docker-Content-Digest": digest} if digest else {}
    return FakeResponse(HTTPStatus.CREATED, headers=headers)


async def test_upload_monolithic(service_kwargs):
    """Test that a known buffer is uploaded with exactly two requests."""
    data = b"monolithic blob content"
    kwargs = service_kwargs(initiated(), committed())
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(KnownLength(data=data))
    requests = kwargs["transport"].requests

    assert len(requests) == 2
    assert requests[0].method == "POST"
    assert requests[0].url == UPLOAD_URL
    assert requests[0].body == b""
    assert requests[1].method == "PUT"
    assert requests[1].url == f"{UPLOAD_URL}uuid-1"
    assert requests[1].params == {"digest": sha256(data)}
    assert requests[1].body == data
    assert requests[1].headers["Content-Type"] == "application/octet-stream"
    assert all(r.headers["Authorization"] == "Bearer test-token" for r in requests)

    assert result.content_length == len(data)
    assert result.digest == sha256(requests[1].body)


async def test_upload_monolithic_precomputed_digest(service_kwargs):
    """Test that a caller supplied digest is sent and returned verbatim."""
    data = b"precomputed"
    digest = sha256(data)
    kwargs = service_kwargs(initiated(), committed())
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(KnownLength(data=data, digest=digest))

    assert kwargs["transport"].requests[1].params["digest"] == digest
    assert result.digest == digest
    assert result.content_length == len(data)


async def test_upload_monolithic_ignores_server_digest(service_kwargs):
    """Test that the digest reported by the registry does not replace the local one."""
    data = b"trust no one"
    bogus = FormattedSHA256.calculate(b"something else")
    kwargs = service_kwargs(initiated(), committed(bogus))
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(KnownLength(data=data))
    assert result.digest == sha256(data)
    assert result.digest != bogus


async def test_upload_monolithic_empty(service_kwargs):
    """Test that a zero-length buffer is uploaded with two requests."""
    kwargs = service_kwargs(initiated(), committed())
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(KnownLength(data=b""))

    assert len(kwargs["transport"].requests) == 2
    assert result.content_length == 0
    assert result.digest == EMPTY_DIGEST
    assert (
        result.digest
        == "sha256:e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


async def test_upload_monolithic_rejected(service_kwargs):
    """Test that a commit without 201 fails."""
    kwargs = service_kwargs(
        initiated(), FakeResponse(HTTPStatus.BAD_REQUEST, body=b"DIGEST_INVALID")
    )
    blob_writer = BlobWriter(**kwargs)

    with pytest.raises(UploadError) as exc_info:
        await blob_writer.upload(KnownLength(data=b"data"))
    assert exc_info.value.status == HTTPStatus.BAD_REQUEST
    assert exc_info.value.body == b"DIGEST_INVALID"


async def test_upload_chunked(service_kwargs):
    """Test that a stream is uploaded with exactly three requests."""
    chunks = [b"first chunk;", b"second chunk;", b"third"]
    data = b"".join(chunks)
    kwargs = service_kwargs(initiated(), appended(), committed())
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(UnknownLength(stream=async_chunks(*chunks)))
    requests = kwargs["transport"].requests

    assert [r.method for r in requests] == ["POST", "PATCH", "PUT"]
    assert requests[1].url == f"{UPLOAD_URL}uuid-1"
    assert requests[1].body == data
    assert requests[2].url == f"{UPLOAD_URL}uuid-1"
    assert requests[2].body == b""
    assert requests[2].params == {"digest": sha256(data)}

    assert result.content_length == len(data)
    assert result.digest == sha256(requests[1].body)


async def test_upload_chunked_sync_file(service_kwargs):
    """Test that a synchronous file can be streamed."""
    data = b"0123456789" * 1000
    kwargs = service_kwargs(initiated(), appended(), committed())
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(
        UnknownLength(stream=io.BytesIO(data), file_is_async=False)
    )
    assert kwargs["transport"].requests[1].body == data
    assert result.content_length == len(data)
    assert result.digest == sha256(data)


async def test_upload_chunked_async_file(service_kwargs, tmp_path):
    """Test that an asynchronous file can be streamed."""
    data = b"async file content"
    path = tmp_path.joinpath("blob")
    path.write_bytes(data)
    kwargs = service_kwargs(initiated(), appended(), committed())
    blob_writer = BlobWriter(**kwargs)

    async with aiofiles.open(path, mode="rb") as file:
        result = await blob_writer.upload(UnknownLength(stream=file))
    assert kwargs["transport"].requests[1].body == data
    assert result.digest == sha256(data)


async def test_upload_chunked_rotated_session(service_kwargs):
    """Test that a session id rotated by the append response is used to commit."""
    kwargs = service_kwargs(initiated("uuid-1"), appended("uuid-2"), committed())
    blob_writer = BlobWriter(**kwargs)

    await blob_writer.upload(UnknownLength(stream=async_chunks(b"data")))
    requests = kwargs["transport"].requests
    assert requests[1].url == f"{UPLOAD_URL}uuid-1"
    assert requests[2].url == f"{UPLOAD_URL}uuid-2"


async def test_upload_chunked_ignores_server_digest(service_kwargs):
    """Test that the commit and the result carry the client accumulated digest."""
    data = b"chunked"
    bogus = FormattedSHA256.calculate(b"substituted")
    kwargs = service_kwargs(initiated(), appended(), committed(bogus))
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(UnknownLength(stream=async_chunks(data)))
    assert kwargs["transport"].requests[2].params["digest"] == sha256(data)
    assert result.digest == sha256(data)


async def test_upload_chunked_empty(service_kwargs):
    """Test that a zero-length stream still appends an empty chunk before committing."""
    kwargs = service_kwargs(initiated(), appended(), committed())
    blob_writer = BlobWriter(**kwargs)

    result = await blob_writer.upload(UnknownLength(stream=async_chunks()))
    requests = kwargs["transport"].requests

    assert [r.method for r in requests] == ["POST", "PATCH", "PUT"]
    assert requests[1].body == b""
    assert requests[2].params == {"digest": EMPTY_DIGEST}
    assert result.content_length == 0
    assert result.digest == EMPTY_DIGEST


async def test_upload_chunked_append_rejected(service_kwargs):
    """Test that an append without 204 fails before committing."""
    kwargs = service_kwargs(
        initiated(), FakeResponse(HTTPStatus.ACCEPTED, body=b"accepted?")
    )
    blob_writer = BlobWriter(**kwargs)

    with pytest.raises(ChunkUploadError) as exc_info:
        await blob_writer.upload(UnknownLength(stream=async_chunks(b"data")))
    assert exc_info.value.status == HTTPStatus.ACCEPTED
    assert exc_info.value.upload_id == "uuid-1"
    assert len(kwargs["transport"].requests) == 2


async def test_upload_chunked_commit_rejected(service_kwargs):
    """Test that a commit without 201 fails."""
    kwargs = service_kwargs(
        initiated(), appended(), FakeResponse(HTTPStatus.NO_CONTENT)
    )
    blob_writer = BlobWriter(**kwargs)

    with pytest.raises(UploadError) as exc_info:
        await blob_writer.upload(UnknownLength(stream=async_chunks(b"data")))
    assert exc_info.value.status == HTTPStatus.NO_CONTENT


async def test_upload_missing_session_id(service_kwargs):
    """Test that a session start without an upload id is fatal."""
    kwargs = service_kwargs(FakeResponse(HTTPStatus.ACCEPTED, body=b"no uuid"))
    blob_writer = BlobWriter(**kwargs)

    with pytest.raises(UploadInitError) as exc_info:
        await blob_writer.upload(KnownLength(data=b"data"))
    assert exc_info.value.status == HTTPStatus.ACCEPTED
    assert exc_info.value.body == b"no uuid"
    assert len(kwargs["transport"].requests) == 1


async def test_upload_transport_failure(service_kwargs):
    """Test that a transport failure aborts the upload without retrying."""
    kwargs = service_kwargs(initiated(), TransportError("connection reset"))
    blob_writer = BlobWriter(**kwargs)

    with pytest.raises(TransportError):
        await blob_writer.upload(UnknownLength(stream=async_chunks(b"data")))
    assert len(kwargs["transport"].requests) == 2


async def test_upload_unsupported_source(service_kwargs):
    """Test that sources must be one of the explicit variants."""
    kwargs = service_kwargs()
    blob_writer = BlobWriter(**kwargs)

    with pytest.raises(TypeError):
        await blob_writer.upload(b"raw bytes")
    assert not kwargs["transport"].requests


async def test__append(service_kwargs):
    """Test that appending threads the running length and digest into the session."""
    kwargs = service_kwargs(appended("uuid-2"))
    blob_writer = BlobWriter(**kwargs)
    session = UploadSession(upload_id="uuid-1", state=UploadState.SESSION_STARTED)

    result = await blob_writer._append(
        session, UnknownLength(stream=async_chunks(b"ab", b"cd"))
    )
    assert result.bytes_written == 4
    assert result.digest == sha256(b"abcd")
    assert result.state == UploadState.CHUNK_APPENDED
    assert result.upload_id == "uuid-2"
    assert session.upload_id == "uuid-1"


async def test__initiate(service_kwargs):
    """Test that the session start response is consumed before it is released."""
    response = FakeResponse(
        HTTPStatus.ACCEPTED,
        body=b'{"status": "started"}',
        headers={"Docker-Upload-UUID": "uuid-1"},
    )
    blob_writer = BlobWriter(**service_kwargs(response))

    session = await blob_writer._initiate()
    assert session.upload_id == "uuid-1"
    assert session.state == UploadState.SESSION_STARTED
    assert response.content.at_eof()
    assert response.released
