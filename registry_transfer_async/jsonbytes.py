#!/usr/bin/env python

"""
JSON documents that keep track of their exact bytes; the bytes are what get hashed.
"""

import json

from typing import Any

import canonicaljson

from .formattedsha256 import FormattedSHA256


class JsonBytes:
    """
    Base class that tracks both the parsed JSON and the raw bytes representation.
    """

    def __init__(self, _bytes: bytes):
        """
        Args:
            _bytes: The raw bytes value.
        """
        self.bytes = self.json = None
        self._set_bytes(_bytes)

    def __bytes__(self):
        return self.get_bytes()

    def __str__(self):
        return self.get_bytes().decode("utf-8")

    @classmethod
    def from_json(cls, _json: Any, **kwargs) -> "JsonBytes":
        """
        Initializes an instance from a JSON object, serialized in canonical form.

        Args:
            _json: The JSON object.

        Returns:
            The newly initialized object.
        """
        return cls(canonicaljson.encode_canonical_json(_json), **kwargs)

    def _set_bytes(self, _bytes: bytes):
        """
        Assigns the raw bytes and updates the internal JSON object.

        Args:
            _bytes: The raw bytes value.
        """
        self.bytes = _bytes
        self.json = json.loads(self.bytes)

    def get_bytes(self) -> bytes:
        """Retrieves the raw bytes."""
        return self.bytes

    def get_digest(self) -> FormattedSHA256:
        """
        Retrieves the SHA256 digest value of the raw bytes value.

        Returns:
            The SHA256 digest value of the raw bytes.
        """
        return FormattedSHA256.calculate(self.get_bytes())
