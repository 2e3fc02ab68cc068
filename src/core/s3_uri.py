"""S3 URI parsing helpers.

This module validates ``s3://bucket/prefix`` sources for raw record loading.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import EscalationIngestError


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 location model."""

    bucket: str
    prefix: str


def parse_s3_uri(uri: str) -> S3Location:
    """Parse and validate an S3 URI.

    Args:
        uri: URI in format ``s3://bucket/prefix``.

    Returns:
        Parsed bucket and prefix pair.

    Raises:
        EscalationIngestError: If bucket or prefix is missing.
    """
    stripped_uri = uri.removeprefix("s3://")
    bucket, _, prefix = stripped_uri.partition("/")
    if not bucket or not prefix:
        raise EscalationIngestError(
            f"Invalid S3 URI '{uri}': expected s3://bucket/prefix. "
            "Provide both bucket and prefix."
        )
    return S3Location(bucket=bucket, prefix=prefix)
