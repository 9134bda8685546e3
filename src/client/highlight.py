"""Text helpers for rendering client rows."""
import re


def highlight_segments(text: str | None, query: str | None) -> list[tuple[str, bool]]:
    """
    Split text into segments, flagging the ones that match the query.

    Matching is case-insensitive and the query is taken literally. Joining the
    segments gives back the original text.

    Example:
        >>> highlight_segments("Sarah Johnson", "sa")
        [('Sa', True), ('rah Johnson', False)]
    """
    if not text:
        return []
    if not query:
        return [(text, False)]

    pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
    return [
        (part, index % 2 == 1)
        for index, part in enumerate(pattern.split(text))
        if part
    ]


def client_initials(first_name: str | None, last_name: str | None) -> str:
    """Upper-case initials, e.g. "JD" for John Doe."""
    first = (first_name or "")[:1].upper()
    last = (last_name or "")[:1].upper()
    return f"{first}{last}"
