#!/usr/bin/env python

# pylint: disable=too-few-public-methods

"""Reusable string literals."""


class DockerMediaTypes:
    """https://github.com/docker/distribution/blob/master/docs/spec/manifest-v2-2.md#manifest-list"""

    DISTRIBUTION_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"


class Headers:
    """Registry request and response headers."""

    ACCEPT = "Accept"
    AUTHORIZATION = "Authorization"
    CONTENT_TYPE = "Content-Type"
    DOCKER_CONTENT_DIGEST = "Docker-Content-Digest"
    DOCKER_UPLOAD_UUID = "Docker-Upload-Uuid"
    LOCATION = "Location"
    USER_AGENT = "User-Agent"


class Indices:
    """Common registry indices."""

    DOCKERHUB = "index.docker.io"


class MediaTypes:
    """Generic mime types."""

    APPLICATION_JSON = "application/json"
    APPLICATION_OCTET_STREAM = "application/octet-stream"


class OCIMediaTypes:
    """https://github.com/opencontainers/image-spec/blob/master/media-types.md"""

    IMAGE_INDEX_V1 = "application/vnd.oci.image.index.v1+json"
