#!/usr/bin/env python

"""Content digests."""

import hashlib
import re

PATTERN_SHA256 = re.compile(r"[0-9a-f]{64}")


class FormattedSHA256(str):
    """
    An algorithm prefixed SHA256 hash value; the canonical name of a blob or manifest.
    """

    ALGORITHM = "sha256"

    def __new__(cls, sha256: str):
        if sha256 and sha256.startswith(f"{FormattedSHA256.ALGORITHM}:"):
            sha256 = sha256[len(FormattedSHA256.ALGORITHM) + 1 :]
        if not sha256 or not PATTERN_SHA256.fullmatch(sha256):
            raise ValueError(sha256)
        obj = super().__new__(cls, f"{FormattedSHA256.ALGORITHM}:{sha256}")
        obj.sha256 = sha256
        return obj

    @staticmethod
    def parse(digest: str) -> "FormattedSHA256":
        """
        Initializes a FormattedSHA256 from its textual form.

        Args:
            digest: A digest value in form sha256:<64 lowercase hex characters>.

        Returns:
            The newly initialized object.
        """
        if not digest or not digest.startswith("sha256:") or len(digest) != 71:
            raise ValueError(digest)
        return FormattedSHA256(digest[7:])

    @staticmethod
    def calculate(data: bytes) -> "FormattedSHA256":
        """
        Calculates the digest value for given data.

        Args:
            data: The data for which to calculate the digest value.

        Returns:
            The FormattedSHA256 containing the corresponding digest value.
        """
        return FormattedSHA256(hashlib.sha256(data).hexdigest())
