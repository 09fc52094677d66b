import json
import re

from psycopg.rows import dict_row

from customs_worker.database.connection import get_connection
from customs_worker.ocr.models import ProductKeywordGroup

_LIST_SEPARATOR_RE = re.compile(r"\r?\n|,")


class KeywordGroupRepository:
    """Reads product keyword groups from the reference_data table."""

    DATA_TYPE = "product_keyword_group"

    def list_keyword_groups(self) -> list[ProductKeywordGroup]:
        """Return configured keyword groups. Groups without keywords are skipped."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT title, content
                    FROM reference_data
                    WHERE data_type = %s
                    ORDER BY id
                    """,
                    (self.DATA_TYPE,),
                )
                rows = cur.fetchall()

        groups: list[ProductKeywordGroup] = []
        for row in rows:
            keywords = parse_keyword_content(row["content"])
            if not keywords:
                continue
            name = (row["title"] or "").strip() or "Nhóm không tên"
            groups.append(ProductKeywordGroup(name=name, keywords=keywords))
        return groups


def parse_keyword_content(content: str | None) -> tuple[str, ...]:
    """Parse a JSON array, falling back to a newline or comma separated list."""
    if not content:
        return ()
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list):
        items = [str(item).strip() for item in parsed]
    else:
        items = [item.strip() for item in _LIST_SEPARATOR_RE.split(content)]
    return tuple(item for item in items if item)
