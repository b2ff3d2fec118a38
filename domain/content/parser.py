"""Split raw document text into header metadata and body."""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime

import frontmatter
import yaml

from domain.schemas import Metadata, MetadataValue

logger = logging.getLogger(__name__)


class HeaderParseError(ValueError):
    """Raised when a fenced header block exists but is not valid YAML."""


@dataclass(frozen=True)
class ParsedDocument:
    metadata: Metadata = field(default_factory=dict)
    body: str = ""


def _coerce_scalar(value: object) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def coerce_metadata_value(value: object) -> MetadataValue:
    """
    Coerce a YAML value into the closed metadata value union.

    - bool / int / finite float / str / None pass through unchanged
    - NaN and infinities become their string form (JSON cannot hold them)
    - dates and datetimes become ISO-8601 strings
    - sequences become lists of strings (null items dropped)
    - anything else (e.g. nested mappings) becomes its string form
    """
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return [_coerce_scalar(v) for v in value if v is not None]
    return str(value)


def parse_document(raw_text: str, *, strict: bool = True) -> ParsedDocument:
    """
    Parse a document into (metadata, body).

    A missing or unterminated header is not an error: metadata is empty and the
    body is the full text. A header that is not a mapping also yields empty
    metadata. A correctly fenced header whose YAML cannot be parsed raises
    HeaderParseError in strict mode; otherwise it degrades the same way.

    Args:
        raw_text: Full document text
        strict: Raise on invalid YAML inside a fenced header

    Returns:
        ParsedDocument with coerced metadata and body text

    Raises:
        HeaderParseError: If strict and the header YAML is invalid
    """
    try:
        raw_metadata, body = frontmatter.parse(raw_text)
    except yaml.YAMLError as exc:
        if strict:
            raise HeaderParseError(f"Invalid header block: {exc}") from exc
        logger.warning("Ignoring invalid header block: %s", exc)
        return ParsedDocument(metadata={}, body=raw_text)

    metadata: Metadata = {str(k): coerce_metadata_value(v) for k, v in (raw_metadata or {}).items()}
    return ParsedDocument(metadata=metadata, body=body)
