"""
html-helper: authoring helpers for HTML documents.

The core is a heuristic indentation engine for HTML and CSS-like markup: it
looks backward for the nearest list or item tag and indents the current line
from it, without parsing the document. The package also inserts list items,
generates skeleton documents, and refreshes "last modified" timestamps.

CLI Usage:
    html-helper indent index.html
    html-helper context index.html --line 12

Library Usage:
    from html_helper import Indenter, TextBuffer

    buffer = TextBuffer("<ul>\\n<li>one\\n</ul>\\n", cursor=5)
    Indenter().indent_current_line(buffer)
    buffer.text  # "<ul>\\n  <li>one\\n</ul>\\n"
"""

__version__ = "0.1.0"

from .buffer import EditorBuffer, TextBuffer
from .classifier import classify_previous_context, describe_context
from .config import ConfigError, HelperConfig
from .exceptions import BufferRangeError, HelperError, TimestampError
from .indenter import Indenter
from .items import insert_item, nearest_item_kind
from .models import Context, IndentReport, ItemKind, Role, TokenMatch
from .patterns import TokenPattern, TokenPatterns
from .skeleton import build_skeleton, update_timestamp

__all__ = [
    # Core functionality
    "Indenter",
    "classify_previous_context",
    "describe_context",
    "insert_item",
    "nearest_item_kind",
    "build_skeleton",
    "update_timestamp",
    # Buffers and patterns
    "EditorBuffer",
    "TextBuffer",
    "TokenPattern",
    "TokenPatterns",
    # Data models
    "Context",
    "IndentReport",
    "ItemKind",
    "Role",
    "TokenMatch",
    "HelperConfig",
    # Exceptions
    "BufferRangeError",
    "ConfigError",
    "HelperError",
    "TimestampError",
    # Version
    "__version__",
]
