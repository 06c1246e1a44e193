"""YAML front matter utilities for .mdx documents.

Uses '---' delimiters to separate YAML front matter from the body.

Example document with front matter:
    ---
    title: Portugal Golden Visa
    tags: [real estate, golden visa]
    minInvestment: 500000
    ---
    Portugal offers residency through investment...

    ### Eligibility
    ...
"""

import re
from typing import Any

import yaml

from content_hub.domain.model import ContentHubError


# Front matter delimiter (3 dashes)
DELIMITER = "---"

_FRONT_MATTER_PATTERN = re.compile(
    rf"\A\ufeff?{re.escape(DELIMITER)}[ \t]*\r?\n(.*?)(?:\r?\n)?^{re.escape(DELIMITER)}[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


class FrontMatterError(ContentHubError):
    """Raised when a front matter block exists but cannot be used."""


def parse_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML front matter from document content.

    Args:
        content: Full document content including front matter

    Returns:
        Tuple of (front_matter_dict, body)
        If no front matter block is present, returns (empty dict, original content)

    Raises:
        FrontMatterError: The block is not valid YAML, holds an unconstructible
            scalar or is not a mapping

    Example:
        >>> metadata, body = parse_front_matter("---\\ntitle: Malta\\n---\\nBody")
        >>> metadata["title"]
        'Malta'
        >>> body
        'Body'
    """
    match = _FRONT_MATTER_PATTERN.match(content)
    if not match:
        return {}, content

    yaml_text = match.group(1)
    body = content[match.end() :]

    try:
        metadata = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid YAML front matter: {exc}") from exc
    except (ValueError, RecursionError) as exc:
        # Scalar constructors (e.g. ints past the digit limit) raise outside YAMLError
        raise FrontMatterError(f"Unusable YAML front matter: {exc}") from exc

    if metadata is None:
        return {}, body
    if not isinstance(metadata, dict):
        raise FrontMatterError(f"Front matter must be a mapping, got {type(metadata).__name__}")

    return {str(key): value for key, value in metadata.items()}, body
