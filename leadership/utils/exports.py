from __future__ import annotations

import io

import pandas as pd

from ..infrastructure.csv_sink import HEADER_COLUMNS


def make_xlsx_export_bytes(results_df: pd.DataFrame | None) -> bytes:
    """Single-sheet Excel export of the CSV result history."""

    if results_df is None:
        results_df = pd.DataFrame(columns=list(HEADER_COLUMNS))

    frame = results_df.copy()

    # Keep the sheet layout stable for consumers opening it in Excel
    for column in HEADER_COLUMNS:
        if column not in frame.columns:
            frame[column] = pd.NA
    frame = frame[list(HEADER_COLUMNS)]

    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        frame.to_excel(writer, index=False, sheet_name="Results")
    return bio.getvalue()
