"""Constants used across the html-helper package."""

from __future__ import annotations

from .config import HelperConfig

# CSS rule blocks nest like lists
BRACE_OPEN = "{"
BRACE_CLOSE = "}"

# Anchors considered by smart item insertion
ITEM_ANCHOR_TAGS = ("li", "dt", "dd")
LIST_ANCHOR_TAGS = ("ul", "ol", "menu", "dir", "dl")
DEFINITION_TAGS = ("dt", "dl", "dd")

# Documents
TIMESTAMP_PREFIX = "Last modified: "
DEFAULT_MAX_FILE_SIZE = HelperConfig().max_file_size
HTML_EXTENSIONS = (".html", ".htm", ".shtml", ".xhtml", ".css")
