from typing import List, Dict
import pandas as pd

from shared.core.schemas import ExportResponse


def export_to_excel(
    data: List[Dict],
    filename: str = "export.xlsx",
    column_map: Dict[str, str] | None = None,
) -> ExportResponse:
    """
    Shape rows for a spreadsheet download.

    Args:
        data: List of dictionaries (each dict = row)
        filename: Name of the file offered to the client
        column_map: Mapping of data keys -> friendly column names, also fixes column order
    """
    if not data:
        return ExportResponse(filename=filename, data=[])

    df = pd.DataFrame(data)

    if column_map:
        for key in column_map.keys():
            if key not in df.columns:
                df[key] = None
        df = df[list(column_map.keys())].rename(columns=column_map)

    # NaN is not valid JSON
    df = df.astype(object).where(pd.notnull(df), None)
    return ExportResponse(filename=filename, data=df.to_dict(orient="records"))
