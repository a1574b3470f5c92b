"""
Tabledash Dashboard - Config Resolver.

Turns the JSON blobs from the environment into one immutable
``DashboardConfig``. Every section is parsed on its own: a malformed or
wrongly-shaped blob is logged and becomes an empty section, it never stops
the application from starting.

Ordering is significant everywhere (column order drives display and form
order, the first view is the default view), so sections are stored as
tuples of pairs rather than dicts.
"""

import dataclasses
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any

from tabledash.config import DashboardSettings

logger = logging.getLogger(__name__)

SHOW_NAME_KEY = "show_name"
VIEW_TABLE = "table"
VIEW_CARD = "card"
SUPPORTED_VIEWS = (VIEW_TABLE, VIEW_CARD)


@dataclass(frozen=True)
class TableConfig:
    """Display name and ordered (column, label) pairs of one table."""

    name: str
    show_name: str | None = None
    columns: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class CardFlip:
    """Fields used for the picture side of a flip card."""

    image_field: str
    keyword_field: str


@dataclass(frozen=True)
class DashboardConfig:
    """Normalized, read-only browse configuration."""

    tables: tuple[TableConfig, ...] = ()
    category_columns: tuple[tuple[str, str], ...] = ()
    category_enabled: tuple[str, ...] = ()
    thumbnail_columns: tuple[tuple[str, tuple[str, ...]], ...] = ()
    views: tuple[tuple[str, tuple[str, ...]], ...] = ()
    search_columns: tuple[tuple[str, tuple[str, ...]], ...] = ()
    hidden_columns: tuple[str, ...] = ()
    card_flips: tuple[tuple[str, CardFlip], ...] = ()
    card_flip_default_image: str = ""
    page_size: int = 8
    navigation_page_size: int = 32
    navigation_table: str = "navigation"

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def table(self, name: str) -> TableConfig | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def display_name(self, name: str) -> str:
        table = self.table(name)
        return table.show_name if table and table.show_name else name

    def columns(self, name: str) -> list[tuple[str, str]]:
        table = self.table(name)
        return list(table.columns) if table else []

    def visible_columns(self, name: str) -> list[tuple[str, str]]:
        """Configured columns minus the globally hidden ones."""
        hidden = set(self.hidden_columns)
        return [(col, label) for col, label in self.columns(name) if col not in hidden]

    def editable_fields(self, name: str) -> list[str]:
        return [col for col, _ in self.columns(name)]

    def is_category_enabled(self, name: str) -> bool:
        return name in self.category_enabled

    def category_column(self, name: str) -> str | None:
        """The category column, only when filtering is enabled for the table."""
        if not self.is_category_enabled(name):
            return None
        return _lookup(self.category_columns, name)

    def search_columns_for(self, name: str) -> tuple[str, ...]:
        return _lookup(self.search_columns, name) or ()

    def thumbnail_columns_for(self, name: str) -> tuple[str, ...]:
        return _lookup(self.thumbnail_columns, name) or ()

    def views_for(self, name: str) -> tuple[str, ...]:
        return _lookup(self.views, name) or ()

    def default_view(self, name: str) -> str:
        views = self.views_for(name)
        return views[0] if views else VIEW_TABLE

    def card_flip(self, name: str) -> CardFlip | None:
        return _lookup(self.card_flips, name)

    def page_size_for(self, name: str) -> int:
        if name == self.navigation_table:
            return self.navigation_page_size
        return self.page_size

    def fingerprint(self) -> str:
        """Stable digest of the whole configuration, used in cache keys."""
        encoded = json.dumps(dataclasses.asdict(self), ensure_ascii=False, separators=(",", ":"))
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:16]


def _lookup(pairs: tuple[tuple[str, Any], ...], key: str) -> Any:
    for k, v in pairs:
        if k == key:
            return v
    return None


# =============================================================================
# Parsing
# =============================================================================


def _load_object(raw: str, section: str) -> dict[str, Any]:
    """Parse one JSON section, returning {} on any problem."""
    if not raw or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {section}: {e}")
        return {}
    if not isinstance(parsed, dict):
        logger.error(f"Failed to parse {section}: expected a JSON object, got {type(parsed).__name__}")
        return {}
    return parsed


def split_names(value: Any) -> tuple[str, ...]:
    """
    Flatten a string or list of strings into trimmed names.

    Entries may themselves be comma-joined ("a, b"). Empty names are dropped
    and first occurrence wins.
    """
    if value is None:
        return ()
    items = [value] if isinstance(value, str) else value
    if not isinstance(items, (list, tuple)):
        return ()

    names: list[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        for part in item.split(","):
            part = part.strip()
            if part and part not in names:
                names.append(part)
    return tuple(names)


def _parse_tables(raw: str) -> tuple[TableConfig, ...]:
    tables = []
    for name, entry in _load_object(raw, "SUPABASE_TABLE_DIC").items():
        if not isinstance(entry, dict):
            logger.error(f"SUPABASE_TABLE_DIC: entry for '{name}' is not an object, skipped")
            continue
        show_name = entry.get(SHOW_NAME_KEY)
        columns = tuple(
            (column, label if isinstance(label, str) else str(label))
            for column, label in entry.items()
            if column != SHOW_NAME_KEY
        )
        tables.append(
            TableConfig(
                name=name,
                show_name=str(show_name) if show_name not in (None, "") else None,
                columns=columns,
            )
        )
    return tuple(tables)


def _parse_category_columns(raw: str) -> tuple[tuple[str, str], ...]:
    pairs = []
    for name, column in _load_object(raw, "SUPABASE_TABLE_CATEGORY_COL").items():
        if isinstance(column, str) and column.strip():
            pairs.append((name, column.strip()))
    return tuple(pairs)


def _is_enabled(value: Any) -> bool:
    """Booleans and numbers by truthiness; strings only when they spell "true"."""
    if isinstance(value, (bool, int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _parse_category_enabled(raw: str) -> tuple[str, ...]:
    return tuple(
        name
        for name, value in _load_object(raw, "SUPABASE_TABLE_CATEGORY_ENABLE").items()
        if _is_enabled(value)
    )


def _parse_name_lists(raw: str, section: str) -> tuple[tuple[str, tuple[str, ...]], ...]:
    return tuple((name, split_names(value)) for name, value in _load_object(raw, section).items())


def _parse_views(raw: str) -> tuple[tuple[str, tuple[str, ...]], ...]:
    pairs = []
    for name, views in _parse_name_lists(raw, "SUPABASE_TABLE_SHOW_VIEWS"):
        unknown = [v for v in views if v not in SUPPORTED_VIEWS]
        if unknown:
            logger.warning(f"SUPABASE_TABLE_SHOW_VIEWS: unknown views {unknown} for '{name}' ignored")
        pairs.append((name, tuple(v for v in views if v in SUPPORTED_VIEWS)))
    return tuple(pairs)


def _parse_card_flips(raw: str) -> tuple[tuple[str, CardFlip], ...]:
    pairs = []
    for name, fields in _load_object(raw, "SUPABASE_TABLE_CARD_FLIP").items():
        names = split_names(fields)
        if len(names) < 2:
            logger.error(f"SUPABASE_TABLE_CARD_FLIP: '{name}' needs [image_field, keyword_field], skipped")
            continue
        pairs.append((name, CardFlip(image_field=names[0], keyword_field=names[1])))
    return tuple(pairs)


def parse_dashboard_config(settings: DashboardSettings) -> DashboardConfig:
    """Build the normalized configuration from raw settings."""
    config = DashboardConfig(
        tables=_parse_tables(settings.table_dic),
        category_columns=_parse_category_columns(settings.category_col),
        category_enabled=_parse_category_enabled(settings.category_enable),
        thumbnail_columns=_parse_name_lists(settings.show_col_thumb, "SUPABASE_TABLE_SHOW_COL_THUMB"),
        views=_parse_views(settings.show_views),
        search_columns=_parse_name_lists(settings.default_search, "SUPABASE_TABLE_DEFAULT_SEARCH"),
        hidden_columns=split_names(settings.not_show_col),
        card_flips=_parse_card_flips(settings.card_flip),
        card_flip_default_image=settings.card_flip_default_img.strip(),
        page_size=settings.page_size,
        navigation_page_size=settings.navigation_page_size,
        navigation_table=settings.navigation_table,
    )
    logger.info(f"Dashboard config loaded: tables={config.table_names()} fingerprint={config.fingerprint()}")
    return config
