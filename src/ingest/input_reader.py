"""Source extract readers for ingestion.

This module resolves local or S3 register extracts to a local file,
fingerprints them by streaming hash, and exposes their lines as a
lazy sequence the batch loader pulls from.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from core.config import RegisterConfig
from core.constants import HASH_ALGORITHM, HASH_CHUNK_SIZE, SOURCE_ENCODING
from core.errors import RegisterDependencyError, RegisterIngestError
from core.s3_uri import S3Location, is_s3_uri, parse_s3_uri


@dataclass(frozen=True)
class SourceFingerprint:
    """Content fingerprint of a source extract."""

    file_sha256: str
    file_size: int


def resolve_source_path(source_uri: str, config: RegisterConfig) -> Path:
    """Return a readable local path for a source URI.

    Args:
        source_uri: Local file path or ``s3://bucket/key`` URI.
        config: Runtime configuration for downloads and S3 sessions.

    Returns:
        Local file path.

    Raises:
        RegisterIngestError: If the source is missing or cannot be fetched.
    """
    if is_s3_uri(source_uri):
        return _download_s3_source(parse_s3_uri(source_uri), config)
    source_path = Path(source_uri).expanduser()
    if not source_path.exists():
        raise RegisterIngestError(
            f"Failed to read source at {source_path}: path does not exist. "
            "Download the register extract before importing."
        )
    if not source_path.is_file():
        raise RegisterIngestError(
            f"Failed to read source at {source_path}: not a regular file. "
            "Provide the path of a single CSV extract."
        )
    return source_path


def fingerprint_source(source_path: Path) -> SourceFingerprint:
    """Hash a source file in fixed-size chunks.

    Args:
        source_path: Local source file.

    Returns:
        SHA-256 digest and byte size.

    Raises:
        RegisterIngestError: If the file cannot be read.
    """
    digest = hashlib.new(HASH_ALGORITHM)
    file_size = 0
    try:
        with source_path.open("rb") as handle:
            while chunk := handle.read(HASH_CHUNK_SIZE):
                digest.update(chunk)
                file_size += len(chunk)
    except OSError as error:
        raise RegisterIngestError(
            f"Failed to hash source at {source_path}: {error}. "
            "Check file permissions and retry import."
        ) from error
    return SourceFingerprint(file_sha256=digest.hexdigest(), file_size=file_size)


def iter_source_lines(source_path: Path) -> Iterator[str]:
    """Yield source lines without terminators, one at a time.

    Blank lines are dropped. The generator is finite and cannot be
    restarted; callers pull lines as they process them.

    Args:
        source_path: Local source file.

    Yields:
        Non-blank lines in file order.

    Raises:
        RegisterIngestError: If the file cannot be opened or read.
    """
    try:
        with source_path.open("r", encoding=SOURCE_ENCODING, errors="replace") as handle:
            for raw_line in handle:
                line = raw_line.rstrip("\r\n")
                if line.strip():
                    yield line
    except OSError as error:
        raise RegisterIngestError(
            f"Failed to read source at {source_path}: {error}. "
            "Check file permissions and retry import."
        ) from error


def _download_s3_source(location: S3Location, config: RegisterConfig) -> Path:
    """Download an S3 object into the local downloads directory.

    Args:
        location: Parsed S3 location.
        config: Runtime config with downloads dir and session settings.

    Returns:
        Local path of the downloaded object.

    Raises:
        RegisterIngestError: If the download fails.
    """
    s3_client = _create_s3_client(config)
    config.downloads_dir.mkdir(parents=True, exist_ok=True)
    target_path = config.downloads_dir / location.file_name
    try:
        s3_client.download_file(location.bucket, location.key, str(target_path))
    except Exception as error:
        raise RegisterIngestError(
            f"Failed to download s3://{location.bucket}/{location.key}: {error}. "
            "Check AWS credentials and the object key."
        ) from error
    return target_path


def _create_s3_client(config: RegisterConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        RegisterDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise RegisterDependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install boto3 to import from s3:// sources."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")
