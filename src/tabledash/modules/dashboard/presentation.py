"""
Tabledash Dashboard - Cell Presentation.

Display rules shared by the table and card views:
- http(s) values become links;
- thumbnail columns are truncated, with the full value as tooltip;
- everything else is shown in full.
"""

import json
import re

from tabledash.modules.dashboard.config_resolver import DashboardConfig
from tabledash.modules.dashboard.schemas import CardFace, Cell, ColumnInfo, RenderedRow
from tabledash.schemas import Row, RowValue

_HTTP_LINK = re.compile(r"^https?://", re.IGNORECASE)


def display_text(value: RowValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def render_cell(column: str, value: RowValue, thumbnail_columns: tuple[str, ...] | set[str]) -> Cell:
    text = display_text(value)
    is_link = isinstance(value, str) and bool(_HTTP_LINK.match(value))
    truncated = column in thumbnail_columns

    return Cell(
        column=column,
        text=text,
        href=value if is_link else None,
        truncated=truncated,
        tooltip=text if (truncated or is_link) else None,
    )


def column_infos(config: DashboardConfig, table: str) -> list[ColumnInfo]:
    thumbs = config.thumbnail_columns_for(table)
    return [
        ColumnInfo(name=col, label=label, thumbnail=col in thumbs)
        for col, label in config.visible_columns(table)
    ]


def card_face(config: DashboardConfig, table: str, row: Row) -> CardFace | None:
    """Picture side for tables with a card flip configured, else None."""
    flip = config.card_flip(table)
    if flip is None:
        return None
    image = row.get(flip.image_field) or config.card_flip_default_image or None
    keyword = row.get(flip.keyword_field)
    return CardFace(
        image_url=display_text(image) if image else None,
        keyword=display_text(keyword) if keyword not in (None, "") else None,
    )


def render_rows(config: DashboardConfig, table: str, rows: list[Row]) -> list[RenderedRow]:
    thumbs = config.thumbnail_columns_for(table)
    visible = [col for col, _ in config.visible_columns(table)]
    return [
        RenderedRow(
            cells=[render_cell(col, row.get(col), thumbs) for col in visible],
            card=card_face(config, table, row),
        )
        for row in rows
    ]
