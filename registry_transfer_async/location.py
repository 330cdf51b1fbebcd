#!/usr/bin/env python

"""Remote namespace addressed by a registry client."""

import os

from typing import NamedTuple

from .specs import Indices
from .typing import RegistryLocationParseString

DEFAULT_HOST = os.environ.get("RTA_DEFAULT_REGISTRY", Indices.DOCKERHUB)
DEFAULT_NAMESPACE = os.environ.get("RTA_DEFAULT_NAMESPACE", "library")
DEFAULT_PROTOCOL = os.environ.get("RTA_DEFAULT_PROTOCOL", "https")


class RegistryLocation(NamedTuple):
    """
    Immutable (host, repository) pair; fixes the remote namespace of all requests made
    on behalf of a single client.
    """

    host: str
    repository: str

    def __str__(self):
        return f"{self.host}/{self.repository}"

    @staticmethod
    def _parse_string(string: str) -> RegistryLocationParseString:
        """
        Parses the host and repository from a given string.

        Args:
            string: The string to be parsed; host[:port]/[ns0..n/]repository.

        Returns:
            dict:
                host: The registry host; address with optional port, or None.
                repository: The name of the repository, with namespace.
        """
        if not string or any(x in string for x in ["@", " "]):
            raise ValueError(f"Unable to parse string: {string}")

        host = None
        segments = string.strip("/").split("/")

        # Assumption: That host addresses will contain at least one '.' (period) or ':' (port) character, and by
        #             convention repository namespaces will not.
        if len(segments) > 1 and (
            any(x in segments[0] for x in [":", "."]) or segments[0] == "localhost"
        ):
            host = segments.pop(0)
        repository = "/".join(segments)
        if not repository or ":" in repository:
            raise ValueError(f"Unable to parse string: {string}")

        return RegistryLocationParseString(host=host, repository=repository)

    @staticmethod
    def parse(string: str) -> "RegistryLocation":
        """
        Initializes a RegistryLocation from a given string.

        Args:
            string: String containing the location to be parsed.

        Returns:
            The newly initialized object.
        """
        parsed = RegistryLocation._parse_string(string)
        host = parsed.host if parsed.host else DEFAULT_HOST
        repository = parsed.repository
        if host == Indices.DOCKERHUB and "/" not in repository:
            repository = f"{DEFAULT_NAMESPACE}/{repository}"
        return RegistryLocation(host=host, repository=repository)

    def url(self, path: str, *, protocol: str = None) -> str:
        """
        Constructs the URL of an API endpoint within this repository.

        Args:
            path: Endpoint path, relative to /v2/<repository>/.
            protocol: Protocol to use when connecting to the host.

        Returns:
            The absolute URL.
        """
        if protocol is None:
            protocol = DEFAULT_PROTOCOL
        return f"{protocol}://{self.host}/v2/{self.repository}/{path}"
