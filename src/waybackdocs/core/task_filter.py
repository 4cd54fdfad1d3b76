"""
Task filtering for CDX index records.

Turns raw CDX lines into DownloadTask objects, keeping only document
URLs and optionally stopping after the first N matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple


ALLOWED_EXTENSIONS = (".doc", ".docx", ".pdf")
DEFAULT_ARCHIVE_HOST = "web.archive.org"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadTask:
    timestamp: str
    original_url: str

    def wayback_url(self, archive_host: str = DEFAULT_ARCHIVE_HOST) -> str:
        return f"https://{archive_host}/web/{self.timestamp}/{self.original_url}"


def parse_record(line: str) -> Optional[Tuple[str, str]]:
    """
    Split one CDX line into (timestamp, original_url).

    CDX text output is "urlkey timestamp original mimetype ...". Lines with
    fewer than three fields are malformed and yield None.
    """
    fields = line.split()
    if len(fields) < 3:
        return None
    return fields[1], fields[2]


def is_document_url(url: str) -> bool:
    return url.lower().endswith(ALLOWED_EXTENSIONS)


def iter_tasks(lines: Iterable[str], max_tasks: int = 0) -> Iterator[DownloadTask]:
    """
    Lazily yield document tasks from CDX lines in stream order.

    When max_tasks > 0, iteration stops as soon as that many tasks have
    been accepted and the remaining lines are never read.
    """
    accepted = 0
    for line in lines:
        record = parse_record(line)
        if record is None:
            logger.debug(f"Skipping malformed index line: {line!r}")
            continue
        timestamp, original_url = record
        if not is_document_url(original_url):
            continue
        yield DownloadTask(timestamp=timestamp, original_url=original_url)
        accepted += 1
        if max_tasks > 0 and accepted >= max_tasks:
            return


def build_tasks(lines: Iterable[str], max_tasks: int = 0) -> List[DownloadTask]:
    """Collect the filtered tasks into a list (may be empty)."""
    return list(iter_tasks(lines, max_tasks))
