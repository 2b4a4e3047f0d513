"""New-document skeleton and "last modified" timestamps."""

from __future__ import annotations

import html
from datetime import datetime

from .config import HelperConfig
from .constants import TIMESTAMP_PREFIX
from .exceptions import TimestampError


def format_timestamp(config: HelperConfig, now: datetime | None = None) -> str:
    """Render `now` (local time by default) with the configured format.

    Runs of whitespace are collapsed so an empty ``%Z`` on a naive datetime
    does not leave a double space.
    """
    now = now or datetime.now().astimezone()
    return " ".join(now.strftime(config.timestamp_format).split())


def timestamp_block(config: HelperConfig, now: datetime | None = None) -> str:
    return (
        f"{config.timestamp_start}\n"
        f"{TIMESTAMP_PREFIX}{format_timestamp(config, now)}\n"
        f"{config.timestamp_end}"
    )


def build_skeleton(config: HelperConfig | None = None, title: str = "", now: datetime | None = None) -> str:
    """Render a new HTML document.

    Args:
        config: Supplies the doctype, author address and timestamp settings.
        title: Document title, used for ``<title>`` and the top heading.
        now: Time written into the timestamp block; defaults to now.

    Returns:
        str: The document text, ending with a newline.

    Examples:
        build_skeleton(HelperConfig(address="me@example.org"), title="Notes")
    """
    config = config or HelperConfig()
    title = html.escape(title, quote=False)
    lines = [
        config.doctype,
        "<html> <head>",
        f"<title>{title}</title>",
        "</head>",
        "",
        "<body>",
        f"<h1>{title}</h1>",
        "",
        "",
        "<hr>",
        f"<address>{config.address}</address>",
        timestamp_block(config, now),
        "</body> </html>",
    ]
    if not config.doctype:
        lines.pop(0)
    return "\n".join(lines) + "\n"


def update_timestamp(text: str, config: HelperConfig | None = None, now: datetime | None = None) -> str:
    """Rewrite the first timestamp block of a document.

    Everything between the start and end markers is replaced with a fresh
    "Last modified" line; the rest of the text is kept as is.

    Raises:
        TimestampError: If the start marker, or an end marker after it, is missing.

    Examples:
        update_timestamp("<!-- hhmts start -->\\n<!-- hhmts end -->\\n")
    """
    config = config or HelperConfig()
    start = text.find(config.timestamp_start)
    if start < 0:
        raise TimestampError(config.timestamp_start, config.timestamp_end)
    end = text.find(config.timestamp_end, start + len(config.timestamp_start))
    if end < 0:
        raise TimestampError(config.timestamp_start, config.timestamp_end)

    return text[:start] + timestamp_block(config, now) + text[end + len(config.timestamp_end) :]
