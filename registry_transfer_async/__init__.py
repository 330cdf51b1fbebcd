#!/usr/bin/env python

"""An AIOHTTP based Python client for moving blobs and manifests to and from a container registry."""

from .blobreader import BlobReader, BlobStream
from .blobwriter import BlobWriter
from .credentials import Credentials, load_credentials
from .errors import (
    ChunkUploadError,
    DigestMismatchError,
    MountError,
    NotFoundError,
    ProtocolError,
    RedirectLoopError,
    RegistryError,
    TransportError,
    UnexpectedStatusError,
    UploadError,
    UploadInitError,
)
from .formattedsha256 import FormattedSHA256
from .jsonbytes import JsonBytes
from .location import RegistryLocation
from .manifest import Manifest
from .manifestservice import ManifestService
from .mountservice import MountService
from .registryclient import RegistryClient
from .specs import DockerMediaTypes, Indices, MediaTypes, OCIMediaTypes
from .transport import Transport
from .typing import (
    KnownLength,
    Layer,
    MountResult,
    PutManifestResult,
    TagResult,
    UnknownLength,
    UploadResult,
    UploadSession,
    UploadState,
)

__version__ = "0.1.0"
