"""
CDX API Client for Internet Archive Wayback Machine

This module handles communication with the Internet Archive's CDX Server API
to list every capture recorded under a domain. The plain-text CDX output is
read lazily, line by line, so large indexes never need to fit in memory.
"""

import requests
from typing import Iterator, Optional
import logging

from .exceptions import IndexBadStatus, IndexStreamError, IndexUnavailable
from .task_filter import DEFAULT_ARCHIVE_HOST


class CDXClient:
    """
    Client for the Internet Archive CDX Server API.

    A single request per run is made: every subdomain of the target is
    matched with a "*.domain" wildcard and captures are collapsed by urlkey
    on the server side.
    """

    CDX_URL_TEMPLATE = "https://{host}/cdx/search/cdx?url=*.{domain}&collapse=urlkey"

    def __init__(self,
                 archive_host: str = DEFAULT_ARCHIVE_HOST,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the CDX client.

        Args:
            archive_host: Host serving both the CDX index and the snapshots
            timeout: Per-request timeout in seconds (None = transport default)
            session: Optional pre-built session (tests inject fakes here)
            logger: Logger to report progress to
        """
        self.archive_host = archive_host
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._owns_session = session is None
        self.session = session or requests.Session()

    def index_url(self, domain: str) -> str:
        """Build the CDX query URL for a domain."""
        return self.CDX_URL_TEMPLATE.format(host=self.archive_host, domain=domain)

    def open_index(self, domain: str) -> requests.Response:
        """
        Issue the CDX request and return the streaming response.

        Args:
            domain: Target domain, already validated (e.g. "example.com")

        Returns:
            Response whose body has not been read yet

        Raises:
            IndexUnavailable: If the request fails at the transport level
            IndexBadStatus: If the service answers with a non-200 status
        """
        url = self.index_url(domain)
        self.logger.info(f"Fetching list from: {url}")

        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise IndexUnavailable(f"Error fetching CDX API: {e}") from e

        if response.status_code != 200:
            response.close()
            raise IndexBadStatus(
                f"Failed to fetch CDX API: status {response.status_code} {response.reason or ''}".rstrip(),
                status_code=response.status_code,
            )

        return response

    def iter_records(self, response: requests.Response) -> Iterator[str]:
        """
        Yield the raw text lines of a CDX response.

        Raises:
            IndexStreamError: If reading the body fails mid-stream
        """
        try:
            for raw in response.iter_lines():
                if not raw:
                    continue
                if isinstance(raw, bytes):
                    raw = raw.decode('utf-8', errors='replace')
                yield raw
        except requests.RequestException as e:
            raise IndexStreamError(f"Error reading CDX response: {e}") from e

    def fetch_index_lines(self, domain: str) -> Iterator[str]:
        """
        Open the index for a domain and iterate its lines.

        The response is closed once iteration ends, including when the
        consumer stops early.
        """
        response = self.open_index(domain)
        try:
            yield from self.iter_records(response)
        finally:
            response.close()

    def close(self):
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()
