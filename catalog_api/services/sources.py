"""
By-reference record sources.

A record may arrive as a pointer ({"href": ...}) instead of inline. This
module fetches the pointed-to JSON document from S3 or over HTTP.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import SourceFetchError, UnsupportedSourceError

logger = logging.getLogger(__name__)


class ReferenceFetcher:
    """
    Resolves record references to JSON documents.

    The S3 client and HTTP session are created on first use. Both
    libraries are blocking, so fetches run in a worker thread.

    Attributes:
        aws_region: Region for the S3 client (None uses the boto3 default chain)
        timeout: HTTP timeout in seconds
    """

    def __init__(self, aws_region: Optional[str] = None, timeout: int = 10):
        self.aws_region = aws_region
        self.timeout = timeout
        self._s3 = None
        self._session: Optional[requests.Session] = None

    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = boto3.client("s3", region_name=self.aws_region)
        return self._s3

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    async def fetch(self, href: str) -> Dict[str, Any]:
        """
        Fetch the JSON document at href.

        Args:
            href: An s3:// or http(s):// URI

        Returns:
            The decoded JSON document

        Raises:
            UnsupportedSourceError: For any other URI scheme
            SourceFetchError: If the fetch or JSON decoding fails
        """
        parsed = urlparse(href)
        if parsed.scheme == "s3":
            bucket = parsed.netloc
            key = parsed.path.lstrip("/")
            return await asyncio.to_thread(self._read_s3, href, bucket, key)
        if parsed.scheme in ("http", "https"):
            return await asyncio.to_thread(self._read_http, href)
        raise UnsupportedSourceError(href)

    def _read_s3(self, href: str, bucket: str, key: str) -> Dict[str, Any]:
        logger.debug(f"Fetching s3://{bucket}/{key}")
        try:
            response = self.s3.get_object(Bucket=bucket, Key=key)
            return json.loads(response["Body"].read())
        except (BotoCoreError, ClientError, ValueError) as e:
            logger.error(f"Failed to read {href}: {e}")
            raise SourceFetchError(href, str(e)) from e

    def _read_http(self, href: str) -> Dict[str, Any]:
        logger.debug(f"Fetching {href}")
        try:
            response = self.session.get(href, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Failed to read {href}: {e}")
            raise SourceFetchError(href, str(e)) from e

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
