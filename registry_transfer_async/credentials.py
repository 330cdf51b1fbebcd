#!/usr/bin/env python

"""Registry credentials."""

import json
import logging
import os

from pathlib import Path
from typing import NamedTuple, Optional
from urllib.parse import urlparse

import aiofiles

from aiohttp.helpers import BasicAuth

LOGGER = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_STORE = Path.home().joinpath(".docker/config.json")


class Credentials(NamedTuple):
    """
    Bearer token or username / secret pair used to authorize registry requests.

    Any object providing get_authorization() may be used in its place; the services
    call it once per request and never cache the result.
    """

    token: Optional[str] = None
    username: Optional[str] = None
    secret: Optional[str] = None

    def get_authorization(self) -> Optional[str]:
        """
        Generates the value of the "Authorization" request header.

        Returns:
            The header value, preferring the bearer token, or None for anonymous access.
        """
        if self.token:
            return f"Bearer {self.token}"
        if self.username:
            return BasicAuth(self.username, self.secret or "").encode()
        return None


def _get_endpoint(endpoint: str) -> str:
    """Converts legacy endpoint formats (protocol and path segments) to an address."""
    # Note: urlparse stores 'netloc' in 'path' if no protocol is specified.
    if "://" not in endpoint:
        endpoint = f"proto://{endpoint}"
    return urlparse(endpoint).netloc


async def load_credentials(
    endpoint: str, *, credentials_store: Path = None
) -> Credentials:
    """
    Retrieves registry credentials for a given endpoint from a docker credentials store.

    Args:
        endpoint: Registry endpoint (<hostname>:[<port>]) for which to retrieve the credentials.
        credentials_store: Path to the docker registry credentials store.

    Returns:
        The corresponding credentials; empty (anonymous) if none are stored.
    """
    if not credentials_store:
        credentials_store = Path(
            os.environ.get("RTA_CREDENTIALS_STORE", DEFAULT_CREDENTIALS_STORE)
        )
    if not credentials_store.is_file():
        return Credentials()

    LOGGER.debug("Loading credentials from store: %s", credentials_store)
    async with aiofiles.open(credentials_store, mode="rb") as file:
        auths = json.loads(await file.read()).get("auths", {})

    for key, auth in auths.items():
        if _get_endpoint(key) != endpoint:
            continue
        if auth.get("registrytoken"):
            return Credentials(token=auth["registrytoken"])
        if auth.get("auth"):
            basic_auth = BasicAuth.decode(f"Basic {auth['auth']}")
            return Credentials(username=basic_auth.login, secret=basic_auth.password)
    return Credentials()
