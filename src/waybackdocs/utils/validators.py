"""
Input Validation Utilities

Validation and normalization of the target domain handed to the CDX
index query.
"""

import re
from urllib.parse import urlparse
from typing import Tuple, Optional
import logging


class DomainValidator:
    """
    Validates and normalizes a target domain for the CDX wildcard query.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        self.domain_pattern = re.compile(
            r'^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$'
        )

    def validate_and_normalize(self, domain: str) -> Tuple[bool, str, str]:
        """
        Validate and normalize a domain.

        Accepts bare hosts ("example.com") as well as pasted URLs
        ("https://www.example.com/path"); the scheme, path, port and a
        leading wildcard are dropped.

        Args:
            domain: The domain to validate

        Returns:
            Tuple of (is_valid, normalized_domain, error_message)
        """
        if not domain or not isinstance(domain, str):
            return False, "", "Domain cannot be empty"

        candidate = domain.strip()
        if not candidate:
            return False, "", "Domain cannot be empty"

        if '://' in candidate:
            parsed = urlparse(candidate)
            if parsed.scheme not in ['http', 'https']:
                return False, "", "URL must use HTTP or HTTPS protocol"
            candidate = parsed.netloc
        else:
            candidate = candidate.split('/', 1)[0]

        candidate = candidate.lower()
        if candidate.startswith('*.'):
            candidate = candidate[2:]
        # Remove port if present
        if ':' in candidate:
            candidate = candidate.split(':')[0]
        candidate = candidate.rstrip('.')

        if not candidate or not self.domain_pattern.match(candidate):
            return False, "", f"Invalid domain format: {domain!r}"

        return True, candidate, ""


_validator_instance: Optional[DomainValidator] = None


def get_validator() -> DomainValidator:
    """Return the global DomainValidator instance."""
    global _validator_instance
    if _validator_instance is None:
        _validator_instance = DomainValidator()
    return _validator_instance


def validate_domain(domain: str) -> Tuple[bool, str, str]:
    """
    Validate and normalize a domain.

    Returns:
        Tuple of (is_valid, normalized_domain, error_message)
    """
    return get_validator().validate_and_normalize(domain)
