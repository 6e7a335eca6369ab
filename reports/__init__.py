"""Exports for generated seating plans (tables, workbooks, charts)."""

from .plan_export import (
    df_to_markdown,
    parse_session_info,
    plan_seats_df,
    plans_workbook_bytes,
    plans_zip_bytes,
    registration_number,
    seat_chart_png_bytes,
    seat_grid_df,
)

__all__ = [
    "df_to_markdown",
    "parse_session_info",
    "plan_seats_df",
    "plans_workbook_bytes",
    "plans_zip_bytes",
    "registration_number",
    "seat_chart_png_bytes",
    "seat_grid_df",
]
