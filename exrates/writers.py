"""Snapshot sinks: local filesystem and S3."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console

from exrates.config import Settings, settings as default_settings
from exrates.data.symbols import pinned_ids_json
from exrates.errors import WriterError

RATES_KEY = "rates"
WHITELIST_KEY = "whitelist"

console = Console()


class FileSystemWriter:
    """Writes the snapshot and whitelist as files in a directory."""

    def __init__(self, out_path: str | Path):
        self.out_path = Path(out_path)

    def _write_file(self, name: str, data: bytes) -> None:
        file_path = self.out_path / name
        try:
            file_path.write_bytes(data)
        except OSError as e:
            raise WriterError(f"Failed to write {file_path}: {e}") from e
        console.print(f"[dim]Wrote {file_path}[/dim]")

    def write(self, data: bytes) -> None:
        """Write the rates file, then the whitelist file."""
        self._write_file(RATES_KEY, data)
        self._write_file(WHITELIST_KEY, pinned_ids_json())


class S3Writer:
    """Uploads the snapshot and whitelist to an S3 bucket."""

    def __init__(self, region: str, bucket: str, client: Any | None = None):
        self.region = region
        self.bucket = bucket
        if client is None:
            session = boto3.Session(region_name=region)
            client = session.client("s3")
        self.s3 = client

    def _put(self, key: str, data: bytes) -> None:
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentLength=len(data),
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as e:
            raise WriterError(f"Failed to upload s3://{self.bucket}/{key}: {e}") from e
        console.print(f"[dim]Uploaded s3://{self.bucket}/{key}[/dim]")

    def write(self, data: bytes) -> None:
        """Upload the rates object, then the whitelist object."""
        self._put(RATES_KEY, data)
        self._put(WHITELIST_KEY, pinned_ids_json())


def build_writers(settings: Settings | None = None) -> list[FileSystemWriter | S3Writer]:
    """Create the writers enabled by the configuration.

    The filesystem writer comes first when both are configured.
    """
    settings = settings or default_settings
    writers: list[FileSystemWriter | S3Writer] = []

    if settings.out_path:
        writers.append(FileSystemWriter(settings.out_path))

    if settings.aws_s3_region:
        writers.append(S3Writer(settings.aws_s3_region, settings.aws_s3_bucket))

    return writers
