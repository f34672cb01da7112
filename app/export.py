from __future__ import annotations

import io

import pandas as pd

EXPORT_COLUMNS: dict[str, str] = {
    "date": "Fecha",
    "operator": "Operario",
    "model": "Modelo",
    "quantity": "Producido",
    "rejected_quantity": "Rechazado",
    "rejection_rate": "% Rechazo",
    "primary_reason": "Motivo",
}

EXPORT_FORMATS = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def records_frame(records: list[dict]) -> pd.DataFrame:
    """Return the detail table as a DataFrame with display column names."""
    df = pd.DataFrame(list(records or []), columns=list(EXPORT_COLUMNS))
    return df.rename(columns=EXPORT_COLUMNS)


def export_records(records: list[dict], fmt: str) -> bytes:
    """Serialise ``records`` as CSV or XLSX bytes.

    Raises:
        ValueError: if ``fmt`` is not a supported export format.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")

    df = records_frame(records)
    if fmt == "csv":
        return df.to_csv(index=False).encode("utf-8")

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Detalle")
    return buffer.getvalue()
