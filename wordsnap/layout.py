"""Two-column vocabulary sheet: rows 1..N on the left, N+1..2N on the right."""
from __future__ import annotations

from wordsnap.models import ReconciledRecord, SheetRow

SHEET_HEADER = ["#", "단어", "뜻", "#", "단어", "뜻"]


def sheet_rows(records: list[ReconciledRecord], rows: int = 30) -> list[SheetRow]:
    """Fill the left column top to bottom, then the right column."""
    out: list[SheetRow] = []
    for i in range(rows):
        j = i + rows
        out.append(SheetRow(
            left_no=i + 1,
            right_no=j + 1,
            left=records[i] if i < len(records) else None,
            right=records[j] if j < len(records) else None,
        ))
    return out
