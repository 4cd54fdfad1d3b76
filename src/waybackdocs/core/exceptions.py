"""
Exception hierarchy for the waybackdocs pipeline.

Fatal errors (output directory, index fetch) abort the whole run and are
turned into a non-zero exit status by the CLI. Per-task failures never
raise past a download worker; they are logged and returned as results.
"""

from typing import Optional


class WaybackDocsError(RuntimeError):
    """Base exception for all waybackdocs failures."""


class OutputDirectoryError(WaybackDocsError):
    """Raised when the output directory cannot be created."""


class IndexFetchError(WaybackDocsError):
    """Base for failures while obtaining the CDX index. Always fatal."""


class IndexUnavailable(IndexFetchError):
    """Raised when the CDX request itself fails at the transport level."""


class IndexBadStatus(IndexFetchError):
    """Raised when the CDX service answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class IndexStreamError(IndexFetchError):
    """Raised when reading the CDX response body fails mid-scan."""


class ChannelClosed(WaybackDocsError):
    """Raised by a TaskChannel operation once the channel has been closed."""
