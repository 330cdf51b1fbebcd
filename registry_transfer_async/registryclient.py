#!/usr/bin/env python

"""Asynchronous registry transfer client."""

from typing import Any, Optional, Union

from .blobreader import BlobReader, BlobStream
from .blobwriter import BlobWriter
from .credentials import Credentials
from .formattedsha256 import FormattedSHA256
from .jsonbytes import JsonBytes
from .location import RegistryLocation
from .manifest import Manifest
from .manifestservice import ManifestService
from .mountservice import MountService
from .transport import Transport
from .typing import (
    KnownLength,
    MountResult,
    PutManifestResult,
    TagResult,
    UnknownLength,
    UploadResult,
    UtilsChunkToFile,
)


class RegistryClient:
    # pylint: disable=too-many-instance-attributes
    """
    Moves blobs and manifests between this process and a single registry repository.
    """

    def __init__(
        self,
        registry: str,
        repository: str,
        credentials: Credentials = None,
        *,
        protocol: str = None,
        transport: Transport = None,
        **kwargs,
    ):
        """
        Args:
            registry: Registry endpoint (<hostname>:[<port>]).
            repository: Name of the repository, with namespace.
            credentials: Provider of the "Authorization" header value.
            protocol: Protocol to use when connecting to the registry.
            transport: The transport used to issue requests; not closed by this instance.
        Keyword Args:
            Passed to the Transport when one is created by this instance.
        """
        self.location = RegistryLocation(host=registry, repository=repository)
        self.owns_transport = transport is None
        if transport is None:
            transport = Transport(**kwargs)
        self.transport = transport

        service_kwargs = {
            "credentials": credentials,
            "location": self.location,
            "protocol": protocol,
            "transport": transport,
        }
        self.blob_reader = BlobReader(**service_kwargs)
        self.blob_writer = BlobWriter(**service_kwargs)
        self.manifest_service = ManifestService(**service_kwargs)
        self.mount_service = MountService(**service_kwargs)

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def from_location(location: str, credentials: Credentials = None, **kwargs):
        """
        Initializes a RegistryClient from a host[:port]/repository string.

        Args:
            location: The location to be parsed.
            credentials: Provider of the "Authorization" header value.

        Returns:
            The newly initialized object.
        """
        parsed = RegistryLocation.parse(location)
        return RegistryClient(parsed.host, parsed.repository, credentials, **kwargs)

    async def close(self):
        """Gracefully closes this instance."""
        if self.owns_transport:
            await self.transport.close()

    async def tags(self, **kwargs) -> TagResult:
        """Fetch the tags under the repository. See ManifestService.list_tags()."""
        return await self.manifest_service.list_tags(**kwargs)

    async def manifest(self, reference: str) -> Manifest:
        """Fetch a manifest by tag or digest. See ManifestService.fetch_manifest()."""
        return await self.manifest_service.fetch_manifest(reference)

    async def put_manifest(
        self, tag: Optional[str], manifest: Union[bytes, JsonBytes, Any]
    ) -> PutManifestResult:
        """Put a manifest, optionally tagged. See ManifestService.put_manifest()."""
        return await self.manifest_service.put_manifest(tag, manifest)

    async def blob_exists(self, digest: FormattedSHA256) -> bool:
        """Check a blob for existence. See BlobReader.exists()."""
        return await self.blob_reader.exists(digest)

    async def blob(
        self, digest: FormattedSHA256, *, stream: bool = False
    ) -> Union[bytes, BlobStream]:
        """Retrieve a blob, buffered or streaming. See BlobReader.fetch()."""
        return await self.blob_reader.fetch(digest, stream=stream)

    async def blob_to_disk(
        self, digest: FormattedSHA256, file, *, file_is_async: bool = True
    ) -> UtilsChunkToFile:
        """Retrieve a blob into a file. See BlobReader.fetch_to_disk()."""
        return await self.blob_reader.fetch_to_disk(
            digest, file, file_is_async=file_is_async
        )

    async def upload(
        self, blob, *, digest: FormattedSHA256 = None, file_is_async: bool = True
    ) -> UploadResult:
        """
        Upload a blob.

        Args:
            blob:
                Bytes are uploaded in a single request; anything else (a file object, or
                an async iterable of bytes) is streamed and hashed as a single chunk.
            digest: Optional precomputed digest of a bytes blob.
            file_is_async: If True, all file IO operations will be awaited.

        Returns:
            dict:
                content_length: The number of bytes uploaded.
                digest: The digest of the uploaded bytes.
        """
        if isinstance(blob, (bytes, bytearray)):
            source = KnownLength(data=bytes(blob), digest=digest)
        else:
            source = UnknownLength(stream=blob, file_is_async=file_is_async)
        return await self.blob_writer.upload(source)

    async def upload_source(
        self, source: Union[KnownLength, UnknownLength]
    ) -> UploadResult:
        """Upload a blob from an explicit source variant. See BlobWriter.upload()."""
        return await self.blob_writer.upload(source)

    async def mount(
        self, digest: FormattedSHA256, from_repository: str
    ) -> MountResult:
        """Mount a blob from another repository. See MountService.mount()."""
        return await self.mount_service.mount(digest, from_repository)
