"""
File Management Utilities

This module owns the output directory: it creates it, resolves the
filename a downloaded snapshot is stored under, and opens destination
files for writing.
"""

import os
import re
import posixpath
from pathlib import Path
from typing import BinaryIO, Mapping, Optional
from urllib.parse import unquote
import logging

from ..core.exceptions import OutputDirectoryError


DEFAULT_OUTPUT_DIR = "output"

# Patterns tried in order: RFC 5987 extended value, quoted, bare token
_DISPOSITION_PATTERNS = (
    re.compile(r"filename\*\s*=\s*([^;]+)", re.IGNORECASE),
    re.compile(r'filename\s*=\s*"([^"]*)"', re.IGNORECASE),
    re.compile(r"filename\s*=\s*([^\";\s][^;]*)", re.IGNORECASE),
)

# Characters most filesystems refuse in a name
_UNSAFE_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')


def filename_from_url(original_url: str) -> str:
    """
    Return the final '/'-separated segment of a URL, query string included.

    "https://example.com/files/doc1.docx" -> "doc1.docx"
    "http://example.com/get.php?f=a.pdf" -> "get.php_f=a.pdf"
    """
    name = posixpath.basename(original_url.rstrip('/'))
    return _UNSAFE_CHARS.sub('_', name)


def _decode_extended_value(value: str) -> str:
    # charset'lang'percent-encoded
    parts = value.split("'", 2)
    if len(parts) != 3:
        return unquote(value)
    charset, _, encoded = parts
    try:
        return unquote(encoded, encoding=charset or 'utf-8', errors='replace')
    except LookupError:
        return unquote(encoded)


def filename_from_content_disposition(header: Optional[str]) -> Optional[str]:
    """
    Extract the filename parameter of a Content-Disposition header.

    Returns None when the header is missing or carries no usable filename
    (including an unterminated quoted value). Directory components are
    stripped so the result always names a file directly inside the output
    directory.
    """
    if not header:
        return None

    for pattern in _DISPOSITION_PATTERNS:
        match = pattern.search(header)
        if not match:
            continue
        value = match.group(1).strip().strip('"').strip()
        if pattern is _DISPOSITION_PATTERNS[0]:
            value = _decode_extended_value(value)
        value = value.replace('\\', '/')
        value = posixpath.basename(value)
        if value and value not in ('.', '..'):
            return value
    return None

    for pattern in _DISPOSITION_PATTERNS:
        match = pattern.search(header)
        if not match:
            continue
        value = match.group(1).strip().strip('"').strip()
        if pattern is _DISPOSITION_PATTERNS[0]:
            # charset'lang'percent-encoded
            _, sep, encoded = value.partition("''")
            value = unquote(encoded if sep else value)
        value = value.replace('\\', '/')
        value = posixpath.basename(value)
        if value and value not in ('.', '..'):
            return value
    return None


class FileManager:
    """
    Manages the output directory for downloaded documents.

    Every file lands directly in the output directory. Two tasks that
    resolve to the same name overwrite each other (last writer wins).
    """

    def __init__(self, base_output_dir: str = DEFAULT_OUTPUT_DIR, logger: Optional[logging.Logger] = None):
        """
        Initialize the file manager.

        Args:
            base_output_dir: Directory that receives all downloaded files
        """
        self.base_output_dir = Path(base_output_dir)
        self.logger = logger or logging.getLogger(__name__)

    def create_output_directory(self) -> Path:
        """
        Create the output directory if it does not exist.

        Raises:
            OutputDirectoryError: If the directory cannot be created
        """
        try:
            self.base_output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(f"Error creating output directory {self.base_output_dir}: {e}") from e

        self.logger.debug(f"Output directory ready at: {self.base_output_dir.absolute()}")
        return self.base_output_dir

    def resolve_filename(self, original_url: str, headers: Optional[Mapping[str, str]] = None) -> str:
        """
        Pick the filename for a downloaded snapshot.

        Args:
            original_url: The archived document's original URL
            headers: Response headers of the snapshot request

        Returns:
            The Content-Disposition filename when present and parseable,
            otherwise the basename of the original URL
        """
        filename = filename_from_url(original_url)
        if headers:
            hinted = filename_from_content_disposition(headers.get('Content-Disposition'))
            if hinted:
                filename = hinted
        return filename

    def get_file_path(self, filename: str) -> str:
        return os.path.join(str(self.base_output_dir), filename)

    def open_destination(self, filename: str) -> BinaryIO:
        """
        Create (or truncate) the destination file for writing.

        Raises:
            OSError: If the file cannot be created
        """
        return open(self.get_file_path(filename), 'wb')
