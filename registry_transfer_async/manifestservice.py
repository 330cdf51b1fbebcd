#!/usr/bin/env python

"""Manifest retrieval, publication and tag listing."""

import json
import logging

from http import HTTPStatus
from typing import Any, Optional, Union

from .errors import NotFoundError, ProtocolError, UnexpectedStatusError, UploadError
from .jsonbytes import JsonBytes
from .manifest import Manifest
from .service import RegistryService
from .specs import DockerMediaTypes, Headers, MediaTypes
from .typing import PutManifestResult, TagResult

LOGGER = logging.getLogger(__name__)


class ManifestService(RegistryService):
    """
    Fetch / put manifests by tag or digest.
    """

    ACCEPTED_PUT_STATUSES = (HTTPStatus.OK, HTTPStatus.CREATED)

    async def fetch_manifest(self, reference: str) -> Manifest:
        """
        Fetch the manifest identified by reference, where reference can be a tag or digest.

        Args:
            reference: The tag or digest of the manifest.

        Returns:
            The corresponding Manifest.
        """
        if not reference:
            raise ValueError("A manifest reference is required")

        client_response = await self._request(
            "GET",
            self._url(f"manifests/{reference}"),
            headers={Headers.ACCEPT: DockerMediaTypes.DISTRIBUTION_MANIFEST_V2},
        )
        body = await client_response.read()
        if client_response.status != HTTPStatus.OK:
            raise NotFoundError(
                client_response.status, body, f"Unable to retrieve manifest {reference}"
            )
        try:
            manifest = Manifest(body)
        except ValueError as exception:
            raise ProtocolError(
                f"Manifest {reference} is not valid JSON: {body!r}"
            ) from exception
        if not isinstance(manifest.json, dict) or not manifest.json.get("config"):
            raise NotFoundError(
                client_response.status,
                body,
                f"Manifest {reference} does not declare a config",
            )

        LOGGER.debug("Retrieved manifest %s: %s", reference, manifest.get_digest())
        return manifest

    async def put_manifest(
        self, tag: Optional[str], manifest: Union[bytes, JsonBytes, Any]
    ) -> PutManifestResult:
        """
        Put a manifest; the only way to set a tag on a manifest.

        Args:
            tag: The tag to point at the manifest, or None to address the manifest by digest only.
            manifest: The raw manifest bytes, a Manifest, or a JSON object.

        Returns:
            dict:
                body: The raw response body.
                digest: The locally computed digest of the manifest bytes.
                status: The response status.
        """
        if isinstance(manifest, (bytes, bytearray)):
            manifest = Manifest(bytes(manifest))
        elif isinstance(manifest, JsonBytes) and not isinstance(manifest, Manifest):
            manifest = Manifest(manifest.get_bytes())
        elif not isinstance(manifest, Manifest):
            manifest = Manifest.from_json(manifest)

        digest = manifest.get_digest()
        # The protocol requires a reference; without a tag, the digest is the reference
        reference = tag if tag else digest

        client_response = await self._request(
            "PUT",
            self._url(f"manifests/{reference}"),
            data=manifest.get_bytes(),
            headers={Headers.CONTENT_TYPE: manifest.get_media_type()},
        )
        body = await client_response.read()
        if client_response.status not in ManifestService.ACCEPTED_PUT_STATUSES:
            raise UploadError(
                client_response.status, body, f"Unable to put manifest {reference}"
            )

        LOGGER.debug("Put manifest %s: %s", reference, digest)
        return PutManifestResult(body=body, digest=digest, status=client_response.status)

    async def list_tags(self, *, last: str = None, n: int = None) -> TagResult:
        """
        Fetch the tags under the repository.

        Args:
            last: Result set will include values lexically after last.
            n: Limit the number of entries in the response.

        Returns:
            dict:
                child: Child repositories, when reported by the registry.
                name: The name of the repository.
                tags: The list of tags.
        """
        params = {}
        if last is not None:
            params["last"] = last
        if n is not None:
            params["n"] = str(n)

        client_response = await self._request(
            "GET",
            self._url("tags/list"),
            headers={Headers.ACCEPT: MediaTypes.APPLICATION_JSON},
            params=params,
        )
        body = await client_response.read()
        if client_response.status != HTTPStatus.OK:
            raise UnexpectedStatusError(
                client_response.status, body, "Unable to list tags"
            )
        try:
            payload = json.loads(body)
        except ValueError as exception:
            raise ProtocolError(f"Tag list is not valid JSON: {body!r}") from exception
        if not isinstance(payload, dict):
            raise ProtocolError(f"Tag list is not a JSON object: {body!r}")

        return TagResult(
            child=payload.get("child"),
            name=payload.get("name", self.location.repository),
            tags=payload.get("tags") or [],
        )
