#!/usr/bin/env python

"""Configures execution of pytest."""

import pytest

from registry_transfer_async import Credentials, RegistryLocation

from .testutils import FakeTransport


@pytest.fixture
def credentials() -> Credentials:
    """Provides bearer token credentials."""
    return Credentials(token="test-token")


@pytest.fixture
def location() -> RegistryLocation:
    """Provides the location of the repository under test."""
    return RegistryLocation(host="registry.example.com", repository="ns/image")


@pytest.fixture
def service_kwargs(credentials: Credentials, location: RegistryLocation):
    """Provides a factory of keyword arguments for the registry services."""

    def _service_kwargs(*responses):
        return {
            "credentials": credentials,
            "location": location,
            "transport": FakeTransport(*responses),
        }

    return _service_kwargs
