"""Shared query parameter parsing utilities for framework adapters.

This module provides utilities for parsing the query parameters a log
drain URL may carry, shared by the ASGI and FastAPI adapters.
"""


def _parse_tags_param(params: dict[str, list[str]]) -> tuple[str, ...]:
    """Parse the 'tags' query parameter.

    Args:
        params: Parsed query string parameters (as returned by urllib.parse.parse_qs).

    Returns:
        Tuple of tags from every 'tags' value, split on commas. Empty items
        are dropped. Empty tuple if missing.
    """
    tags: list[str] = []
    for raw in params.get("tags", []):
        tags.extend(tag.strip() for tag in raw.split(",") if tag.strip())
    return tuple(tags)


def _parse_prefix_param(params: dict[str, list[str]]) -> str:
    """Parse the 'prefix' query parameter.

    Args:
        params: Parsed query string parameters (as returned by urllib.parse.parse_qs).

    Returns:
        The first 'prefix' value, or an empty string if missing.
    """
    prefix_list = params.get("prefix", [""])
    return prefix_list[0] if prefix_list else ""
