"""Token patterns for indentation context.

Each pattern is a union of role-tagged branches, so a match reports the
`Role` that fired instead of an alternative index.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .config import HelperConfig
from .constants import BRACE_CLOSE, BRACE_OPEN
from .models import Role, TokenMatch

# Characters that can begin a token; the backward scan only stops on these.
TOKEN_LEADERS = ("<", BRACE_OPEN, BRACE_CLOSE)

_TAG_NAME_PATTERN = re.compile(r"</?\s*([A-Za-z][\w-]*)")


def _alternation(tags: Iterable[str]) -> str:
    # Longest first so "thead" is tried before "th".
    ordered = sorted(set(tags), key=lambda tag: (-len(tag), tag))
    return "|".join(re.escape(tag) for tag in ordered)


def open_tag_source(tags: Iterable[str]) -> str:
    """Regex source for opening tags, with or without attributes.

    The tag name must be followed by whitespace, ``>`` or ``/``, which keeps
    ``<li`` from matching ``<link`` and ``<tr`` from matching ``<track``.

    Examples:
        re.match(open_tag_source(["li"]), "<li class='x'>")  # matches "<li"
        re.match(open_tag_source(["li"]), "<link href='x'>")  # None
    """
    return rf"<(?:{_alternation(tags)})(?=[\s>/])"


def close_tag_source(tags: Iterable[str]) -> str:
    """Regex source for closing tags such as ``</ul >``."""
    return rf"</(?:{_alternation(tags)})\s*>"


def token_name(token: str) -> str:
    """Return the lowercase tag name of a token, or the brace itself.

    Examples:
        token_name("<UL class='x'")  # "ul"
        token_name("}")  # "}"
    """
    match = _TAG_NAME_PATTERN.match(token)
    if match is None:
        return token.strip()
    return match.group(1).lower()


class TokenPattern:
    """A compiled union of role-tagged regex branches.

    Args:
        branches: ``(role, regex source)`` pairs; a role may appear only once.

    Examples:
        pattern = TokenPattern([(Role.LIST_START, open_tag_source(["ul"]))])
        pattern.match("<ul>", 0)  # TokenMatch(role=Role.LIST_START, ...)
    """

    def __init__(self, branches: Iterable[tuple[Role, str]]):
        self.branches = tuple(branches)
        self.roles = tuple(role for role, _ in self.branches)
        if len(set(self.roles)) != len(self.roles):
            raise ValueError("Each role may only appear once in a token pattern")
        source = "|".join(f"(?P<{role.name}>{branch})" for role, branch in self.branches)
        self.regex = re.compile(source, re.IGNORECASE)

    def __repr__(self) -> str:
        roles = ", ".join(str(role) for role in self.roles)
        return f"TokenPattern({roles})"

    def match(self, text: str, pos: int, endpos: int | None = None) -> TokenMatch | None:
        """Match a token starting exactly at `pos`.

        Args:
            text: Document text.
            pos: Offset where the token must start.
            endpos: Offset the token must not extend past; defaults to the end
                of `text`.

        Returns:
            TokenMatch | None: The tagged match, or None.
        """
        if endpos is None:
            endpos = len(text)
        found = self.regex.match(text, pos, endpos)
        if found is None:
            return None
        return TokenMatch(
            role=Role[found.lastgroup],
            start=found.start(),
            end=found.end(),
            name=token_name(found.group()),
        )

    def search_backward(self, text: str, start: int, limit: int) -> TokenMatch | None:
        """Find the token closest before `start`.

        Only the window ``[max(0, start - limit), start)`` is examined and a
        token must lie entirely inside it. The scan visits token leader
        characters only, so its cost is bounded by `limit` regardless of the
        document size.

        Args:
            text: Document text.
            start: Offset to search backward from.
            limit: Maximum number of characters to examine.

        Returns:
            TokenMatch | None: The nearest token, or None when the window holds
            no token.
        """
        start = min(max(start, 0), len(text))
        lower = max(0, start - limit)

        found = {char: text.rfind(char, lower, start) for char in TOKEN_LEADERS}
        while True:
            pos = max(found.values())
            if pos < 0:
                return None
            token = self.match(text, pos, start)
            if token is not None:
                return token
            char = text[pos]
            found[char] = text.rfind(char, lower, pos)


class TokenPatterns:
    """The five token patterns used by the indentation engine.

    Attributes:
        list_start: Opening container tags and ``{``.
        list_end: Closing container tags and ``}``.
        item_start: Opening item tags.
        item_end: Closing item tags.
        combined: Union of the four above; classifies a line's leading token.
        anchors: Tokens the backward context search may stop on. Closing item
            tags are left out; they are not reliable indentation anchors.
    """

    def __init__(self, list_tags: Iterable[str], item_tags: Iterable[str]):
        list_tags = tuple(list_tags)
        item_tags = tuple(item_tags)

        list_start = rf"{open_tag_source(list_tags)}|{re.escape(BRACE_OPEN)}"
        list_end = rf"{close_tag_source(list_tags)}|{re.escape(BRACE_CLOSE)}"
        item_start = open_tag_source(item_tags)
        item_end = close_tag_source(item_tags)

        self.list_start = TokenPattern([(Role.LIST_START, list_start)])
        self.list_end = TokenPattern([(Role.LIST_END, list_end)])
        self.item_start = TokenPattern([(Role.ITEM_START, item_start)])
        self.item_end = TokenPattern([(Role.ITEM_END, item_end)])
        self.combined = TokenPattern(
            [
                (Role.LIST_START, list_start),
                (Role.LIST_END, list_end),
                (Role.ITEM_START, item_start),
                (Role.ITEM_END, item_end),
            ]
        )
        self.anchors = TokenPattern(
            [
                (Role.LIST_START, list_start),
                (Role.LIST_END, list_end),
                (Role.ITEM_START, item_start),
            ]
        )

    @classmethod
    def from_config(cls, config: HelperConfig) -> TokenPatterns:
        return cls(config.list_tags, config.item_tags)

    def classify(self, line: str) -> Role:
        """Classify the leading token of a line of text.

        Leading whitespace is skipped; anything else before a token means the
        line does not start with one.

        Examples:
            TokenPatterns.from_config(HelperConfig()).classify("  </ul>")  # Role.LIST_END
            TokenPatterns.from_config(HelperConfig()).classify("<link>")  # Role.NONE
        """
        stripped = line.lstrip(" \t")
        token = self.combined.match(stripped, 0)
        return token.role if token is not None else Role.NONE
