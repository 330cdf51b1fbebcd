#!/usr/bin/env python

"""
Abstraction of an image manifest, as defined in:

* https://github.com/docker/distribution/blob/master/docs/spec/manifest-v2-2.md
* https://github.com/opencontainers/image-spec/blob/master/manifest.md
"""

from typing import List, Optional

from .formattedsha256 import FormattedSHA256
from .jsonbytes import JsonBytes
from .specs import DockerMediaTypes, OCIMediaTypes
from .typing import Layer


class Manifest(JsonBytes):
    """
    Image manifest: a config descriptor and an ordered list of layer descriptors.
    """

    def __init__(self, manifest: bytes, *, media_type: str = None):
        """
        Args:
            manifest: The raw image manifest value.
            media_type: The media type of the image manifest.
        """
        self.media_type = media_type
        super().__init__(manifest)

    @staticmethod
    def _get_layer(descriptor) -> Layer:
        return Layer(
            digest=FormattedSHA256.parse(descriptor["digest"]),
            media_type=descriptor.get("mediaType"),
            size=descriptor.get("size"),
            urls=descriptor.get("urls"),
        )

    def _detect_media_type(self):
        """
        Attempts to detect the media type of the image manifest.
        """
        _json = self.json if isinstance(self.json, dict) else {}

        # Is there a declared media type (applies to all of Docker manifest v2.2)?
        if "mediaType" in _json:
            self.media_type = _json["mediaType"]

        # Is this an OCI image index?
        elif "manifests" in _json:
            self.media_type = OCIMediaTypes.IMAGE_INDEX_V1

        # Registries expect a schema 2 manifest when nothing else is declared
        else:
            self.media_type = DockerMediaTypes.DISTRIBUTION_MANIFEST_V2

    def _set_bytes(self, _bytes: bytes):
        super()._set_bytes(_bytes)
        if not self.media_type:
            self._detect_media_type()

    def get_config(self) -> Optional[Layer]:
        """
        Retrieves the image configuration descriptor.

        Returns:
            The config descriptor, or None if the manifest does not declare one.
        """
        if not self.json.get("config"):
            return None
        return Manifest._get_layer(self.json["config"])

    def get_layers(self) -> List[Layer]:
        """
        Retrieves the layer descriptors, in order.

        Returns:
            The list of layer descriptors.
        """
        return [Manifest._get_layer(layer) for layer in self.json.get("layers", [])]

    def get_media_type(self) -> str:
        """Retrieves the media type of the image manifest."""
        return self.media_type

    def get_schema_version(self) -> Optional[int]:
        """Retrieves the declared schema version."""
        return self.json.get("schemaVersion")
