"""Escaping between repository names and on-disk (platform) names.

Repository names may carry a namespace prefix (``jcr:content``) and
characters that are not safe on every filesystem. On disk they are
stored as:

    jcr:content      ->  _jcr_content
    _jcr_content     ->  __jcr_content   (literal leading underscore)
    a*b              ->  a%2ab

The mapping is reversible segment by segment.
"""

import string
from typing import Dict

_HEX_DIGITS = set(string.hexdigits)

# Characters escaped as %xx in platform names
_ESCAPED_CHARS: Dict[str, str] = {
    "%": "%25",
    "\\": "%5c",
    "/": "%2f",
    ":": "%3a",
    "*": "%2a",
    "?": "%3f",
    '"': "%22",
    "<": "%3c",
    ">": "%3e",
    "|": "%7c",
}


def _escape(text: str) -> str:
    return "".join(_ESCAPED_CHARS.get(c, c) for c in text)


def _unescape(text: str) -> str:
    result = []
    i = 0
    while i < len(text):
        c = text[i]
        hex_part = text[i + 1:i + 3]
        if c == "%" and len(hex_part) == 2 and all(h in _HEX_DIGITS for h in hex_part):
            result.append(chr(int(hex_part, 16)))
            i += 3
            continue
        result.append(c)
        i += 1
    return "".join(result)


def get_platform_name(repository_name: str) -> str:
    """Convert a repository name to its on-disk form.

    Args:
        repository_name: Single path segment, e.g. ``jcr:content``

    Returns:
        Platform-safe name, e.g. ``_jcr_content``
    """
    colon = repository_name.find(":")
    if colon > 0:
        prefix = repository_name[:colon]
        local = repository_name[colon + 1:]
        if "_" not in prefix and "%" not in prefix:
            return f"_{_escape(prefix)}_{_escape(local)}"

    escaped = _escape(repository_name)
    # A literal "_x_..." would read back as a namespace prefix
    if escaped.startswith("_") and "_" in escaped[1:]:
        return "_" + escaped
    return escaped


def get_repository_name(platform_name: str) -> str:
    """Convert an on-disk name back to its repository form.

    Args:
        platform_name: Single path segment as found on disk

    Returns:
        Repository name
    """
    if platform_name.startswith("__"):
        return _unescape(platform_name[1:])

    if platform_name.startswith("_"):
        second = platform_name.find("_", 1)
        if second > 1:
            prefix = platform_name[1:second]
            local = platform_name[second + 1:]
            return f"{_unescape(prefix)}:{_unescape(local)}"

    return _unescape(platform_name)


def get_platform_path(repository_path: str) -> str:
    """Convert every segment of a ``/``-separated repository path."""
    return "/".join(get_platform_name(segment) if segment else segment
                    for segment in repository_path.split("/"))


def get_repository_path(platform_path: str) -> str:
    """Convert every segment of a ``/``-separated platform path."""
    return "/".join(get_repository_name(segment) if segment else segment
                    for segment in platform_path.split("/"))
