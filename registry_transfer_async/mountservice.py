#!/usr/bin/env python

"""Cross-repository blob mounting."""

import logging

from http import HTTPStatus

from .errors import MountError
from .formattedsha256 import FormattedSHA256
from .service import RegistryService
from .specs import Headers
from .typing import MountResult
from .utils import drain

LOGGER = logging.getLogger(__name__)


class MountService(RegistryService):
    """
    Registers a blob that already exists in another repository of the same registry,
    without re-uploading it.
    """

    async def mount(self, digest: FormattedSHA256, source_repository: str) -> MountResult:
        """
        Mount a blob from another repository into this one.

        A registry that cannot mount may open a regular upload session instead (202);
        that is reported as a MountError carrying the offered upload id, and it is up
        to the caller to upload the blob.

        Args:
            digest: Digest of the blob.
            source_repository: The repository from which to mount the blob.

        Returns:
            dict:
                digest: Digest of the mounted blob.
                location: The canonical location of the blob, if reported.
        """
        client_response = await self._request(
            "POST",
            self._url("blobs/uploads"),
            data=b"",
            params={"from": source_repository, "mount": str(digest)},
        )
        await drain(client_response)
        if client_response.status != HTTPStatus.CREATED:
            raise MountError(
                digest,
                source_repository,
                self.location.repository,
                status=client_response.status,
                upload_id=client_response.headers.get(Headers.DOCKER_UPLOAD_UUID),
            )

        LOGGER.debug(
            "Mounted %s from %s to %s", digest, source_repository, self.location.repository
        )
        return MountResult(
            digest=digest, location=client_response.headers.get(Headers.LOCATION)
        )
