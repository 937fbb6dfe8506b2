"""S3 URI parsing helpers.

This module validates ``s3://bucket/key`` source locations so the
ingest layer can fetch register extracts from object storage.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import RegisterIngestError


@dataclass(frozen=True)
class S3Location:
    """Parsed S3 object location."""

    bucket: str
    key: str

    @property
    def file_name(self) -> str:
        """Final path component of the object key."""
        return self.key.rstrip("/").rsplit("/", 1)[-1]


def is_s3_uri(uri: str) -> bool:
    """Return whether a source URI points at S3."""
    return uri.startswith("s3://")


def parse_s3_uri(uri: str) -> S3Location:
    """Parse and validate an S3 object URI.

    Args:
        uri: URI in format ``s3://bucket/key``.

    Returns:
        Parsed bucket and key pair.

    Raises:
        RegisterIngestError: If bucket or key is missing.
    """
    stripped_uri = uri.removeprefix("s3://")
    bucket, _, key = stripped_uri.partition("/")
    if not bucket or not key or key.endswith("/"):
        raise RegisterIngestError(
            f"Invalid S3 URI '{uri}': expected s3://bucket/key. "
            "Point the import at a single CSV object."
        )
    return S3Location(bucket=bucket, key=key)
