from __future__ import annotations

import io

import pandas as pd

from .model import RosterSnapshot

COLUMNS = ["lecture_id", "date", "student_id", "student_name", "status", "time", "marked_at_ms"]


def roster_frame(snapshot: RosterSnapshot) -> pd.DataFrame:
    """One row per ledger record, in ledger order."""
    frame = pd.DataFrame([r.to_dict() for r in snapshot.records], columns=COLUMNS)
    # absent rows have no scan time; keep the column integral
    frame["marked_at_ms"] = pd.to_numeric(frame["marked_at_ms"]).astype("Int64")
    return frame


def to_csv_bytes(snapshot: RosterSnapshot) -> bytes:
    # BOM so Excel opens non-ASCII names correctly
    return roster_frame(snapshot).to_csv(index=False).encode("utf-8-sig")


def to_xlsx_bytes(snapshot: RosterSnapshot) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        roster_frame(snapshot).to_excel(writer, index=False, sheet_name="Attendance")
    return output.getvalue()
