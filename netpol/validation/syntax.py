"""
Kubernetes identifier, label and port grammars shared by the validator and
the policy compiler.
"""

import re
from enum import Enum
from typing import Optional

DNS_1123_LABEL_PATTERN = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?")
LABEL_PART_PATTERN = re.compile(r"[A-Za-z0-9]([A-Za-z0-9_.-]{0,61}[A-Za-z0-9])?")
MAX_LABEL_LENGTH = 63

PORT_NUMBER_PATTERN = re.compile(r"[0-9]+")
PORT_RANGE_PATTERN = re.compile(r"([0-9]+)-([0-9]+)")
MIN_PORT = 1
MAX_PORT = 65535
ANY_PORT = "any"


class PortFormat(str, Enum):
    """Classification of a port string."""
    EMPTY = "empty"
    ANY = "any"
    NUMBER = "number"
    NUMBER_OUT_OF_RANGE = "number_out_of_range"
    RANGE = "range"
    NAMED = "named"
    INVALID = "invalid"


def is_dns1123_label(value: Optional[str]) -> bool:
    """Non-empty, at most 63 characters, lowercase alphanumerics and inner dashes."""
    if not value or len(value) > MAX_LABEL_LENGTH:
        return False
    return DNS_1123_LABEL_PATTERN.fullmatch(value) is not None


def is_label_part(value: str) -> bool:
    """Label key name or non-empty label value grammar."""
    if len(value) > MAX_LABEL_LENGTH:
        return False
    return LABEL_PART_PATTERN.fullmatch(value) is not None


def is_any_port(value: Optional[str]) -> bool:
    return value is not None and value.lower() == ANY_PORT


def _in_port_range(number: int) -> bool:
    return MIN_PORT <= number <= MAX_PORT


def classify_port(value: Optional[str]) -> PortFormat:
    """
    Classify a port string.

    Precedence: empty, 'any' (case-insensitive), all digits, N-M range,
    DNS-1123 named port, invalid. Whitespace is never trimmed, so a blank
    string is invalid rather than empty. Any N-M token is a range whatever
    its endpoints.
    """
    if not value:
        return PortFormat.EMPTY
    if is_any_port(value):
        return PortFormat.ANY
    if PORT_NUMBER_PATTERN.fullmatch(value):
        return PortFormat.NUMBER if _in_port_range(int(value)) else PortFormat.NUMBER_OUT_OF_RANGE
    if PORT_RANGE_PATTERN.fullmatch(value):
        return PortFormat.RANGE
    if is_dns1123_label(value):
        return PortFormat.NAMED
    return PortFormat.INVALID
