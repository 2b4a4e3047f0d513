"""Configuration loading and management."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

_TAG_NAME = re.compile(r"^[a-z][a-z0-9-]*$")


@dataclass
class HelperConfig:
    """Configuration for the HTML indentation engine and document helpers.

    Attributes:
        base_indent: Columns added when entering a nested list.
        item_continue_indent: Columns added for text continuing an item, and
            removed when an item or list boundary follows a list end.
        search_limit: Maximum number of characters scanned backward when
            looking for the previous context.
        indent_disabled: When True, indent requests leave lines untouched.
        verbose: When True, every indent operation is reported.
        tab_width: Column width of a tab character.
        use_tabs: Whether indentation is written with tabs where possible.
        list_tags: Tag names that open an indentable container.
        item_tags: Tag names that open a single list entry.
        doctype: First line of generated skeleton documents.
        address: Author address placed in generated skeleton documents.
        timestamp_start: Comment that opens the "last modified" block.
        timestamp_end: Comment that closes the "last modified" block.
        timestamp_format: ``strftime`` format used for timestamps.
        max_file_size: Maximum file size in bytes that will be processed.

    Examples:
        HelperConfig(base_indent=4, item_continue_indent=0)
    """

    # Indentation
    base_indent: int = 2
    item_continue_indent: int = 2
    search_limit: int = 20_000
    indent_disabled: bool = False
    verbose: bool = False

    # Whitespace representation
    tab_width: int = 8
    use_tabs: bool = False

    # Token vocabularies
    list_tags: tuple[str, ...] = (
        "dl",
        "ul",
        "ol",
        "menu",
        "dir",
        "form",
        "select",
        "table",
        "tr",
        "style",
        "div",
    )
    item_tags: tuple[str, ...] = ("li", "dt", "dd", "option", "th", "td", "thead", "tbody")

    # Document templates
    doctype: str = "<!DOCTYPE html>"
    address: str = ""
    timestamp_start: str = "<!-- hhmts start -->"
    timestamp_end: str = "<!-- hhmts end -->"
    timestamp_format: str = "%a %b %d %H:%M:%S %Z %Y"

    # Limits
    max_file_size: int = 10 * 1024 * 1024


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`search_limit` must be a positive integer")
    """


def load_config(search_path: Path) -> HelperConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.html-helper]`` table from `pyproject.toml` and the
    ``[html-helper]`` or ``[tool.html-helper]`` table from `.html-helper.toml`
    when present. Returns default values when no configuration is found. TOML
    files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        HelperConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("site"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "html-helper")]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / ".html-helper.toml",
            table_paths=[("html-helper",), ("tool", "html-helper")],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return HelperConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> HelperConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> HelperConfig:
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return HelperConfig()

    try:
        return HelperConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def normalize_config(config: HelperConfig) -> HelperConfig:
    """Coerce tag vocabularies to lowercase tuples.

    TOML arrays arrive as lists; a bare string is treated as a
    whitespace-separated list of tag names.
    """
    return replace(
        config,
        list_tags=_normalize_tags(config.list_tags),
        item_tags=_normalize_tags(config.item_tags),
    )


def _normalize_tags(tags: object) -> object:
    if isinstance(tags, str):
        tags = tags.split()
    if isinstance(tags, (list, tuple)):
        return tuple(tag.strip().lower() if isinstance(tag, str) else tag for tag in tags)
    return tags


def validate_config(config: HelperConfig) -> None:
    """Validate a `HelperConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If indentation amounts are negative, limits are
            non-positive, flags are not booleans, tag vocabularies are empty or
            malformed, or timestamp settings are empty.

    Examples:
        validate_config(HelperConfig(base_indent=4))
    """
    config = normalize_config(config)

    _ensure_integers(
        {
            "base_indent": config.base_indent,
            "item_continue_indent": config.item_continue_indent,
            "search_limit": config.search_limit,
            "tab_width": config.tab_width,
            "max_file_size": config.max_file_size,
        }
    )
    _ensure_non_negative(
        {
            "base_indent": config.base_indent,
            "item_continue_indent": config.item_continue_indent,
        }
    )
    _ensure_positive(
        {
            "search_limit": config.search_limit,
            "tab_width": config.tab_width,
            "max_file_size": config.max_file_size,
        }
    )

    for key in ("indent_disabled", "verbose", "use_tabs"):
        if not isinstance(getattr(config, key), bool):
            raise ConfigError(f"`{key}` must be a boolean")

    for key in ("list_tags", "item_tags"):
        tags = getattr(config, key)
        if not isinstance(tags, tuple) or not tags:
            raise ConfigError(f"`{key}` must be a non-empty list of tag names")
        for tag in tags:
            if not isinstance(tag, str) or not _TAG_NAME.match(tag):
                raise ConfigError(f"`{key}` contains an invalid tag name: {tag!r}")

    for key in ("doctype", "address"):
        if not isinstance(getattr(config, key), str):
            raise ConfigError(f"`{key}` must be a string")

    for key in ("timestamp_start", "timestamp_end", "timestamp_format"):
        value = getattr(config, key)
        if not isinstance(value, str) or not value:
            raise ConfigError(f"`{key}` must not be empty")


def apply_overrides(config: HelperConfig, **overrides: object) -> HelperConfig:
    """Apply override values to a `HelperConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        HelperConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        ConfigError: If an override name is not defined on `HelperConfig`.

    Examples:
        updated = apply_overrides(config, base_indent=4, verbose=None)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    known = {field.name for field in fields(HelperConfig)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> HelperConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        HelperConfig: Validated configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), base_indent=4)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_non_negative(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value < 0:
            raise ConfigError(f"`{key}` must be >= 0")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
