# tag_scanner.py
"""
Forward-only scanning of literal markers in page text.

No tree is built. Every call takes the current cursor and an optional
upper bound and either returns a new cursor at or beyond the old one, or
None when the marker is missing or would end past the bound.
"""


def _resolve_bound(text: str, bound: int | None) -> int:
    if bound is None or bound > len(text):
        return len(text)
    return bound


def find_marker(text: str, marker: str, position: int = 0, bound: int | None = None) -> int | None:
    """Return the start index of `marker` at or after `position`, or None."""
    limit = _resolve_bound(text, bound)
    found = text.find(marker, position)
    if found == -1 or found + len(marker) > limit:
        return None
    return found


def advance_past(text: str, marker: str, position: int = 0, bound: int | None = None) -> int | None:
    """Return the cursor just past the next `marker`, or None."""
    found = find_marker(text, marker, position, bound)
    if found is None:
        return None
    return found + len(marker)


def extract_between(
    text: str,
    start_marker: str,
    end_marker: str,
    position: int = 0,
    bound: int | None = None,
) -> tuple[str, int] | None:
    """
    Return the text strictly between `start_marker` and the following
    `end_marker`, plus the cursor just past `end_marker`.

    Fails (None) if either marker is missing or `end_marker` would end
    beyond `bound`, even when it occurs later in the text.
    """
    token_start = advance_past(text, start_marker, position, bound)
    if token_start is None:
        return None

    token_end = find_marker(text, end_marker, token_start, bound)
    if token_end is None:
        return None

    return text[token_start:token_end], token_end + len(end_marker)
