from __future__ import annotations

import io
import re
import zipfile
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from seating.allocation_engine import SeatingPlan, compute_plan_metrics


_YEAR_RE = re.compile(r"\b(20\d{2})\b")
_DEPT_RE = re.compile(r"\b([A-Z]{2,3})\b", re.IGNORECASE)

EMPTY_LABEL = "Empty"


# ----------------------------
# Registration numbers
# ----------------------------


def parse_session_info(session_name: str) -> Tuple[str, str]:
    """Extract (year, department) from a session name such as "2024 CS".

    Falls back to the current year and "GEN" when a part is missing.
    """

    name = str(session_name or "")
    year_match = _YEAR_RE.search(name)
    dept_match = _DEPT_RE.search(name)

    year = year_match.group(1) if year_match else str(date.today().year)
    dept = dept_match.group(1).upper() if dept_match else "GEN"
    return year, dept


def registration_format(year: str, dept: str) -> str:
    return f"{year}-{dept}-ROLLNO"


def registration_number(year: str, dept: str, roll_no: str) -> str:
    return f"{year}-{dept}-{roll_no}"


def registration_numbers_by_session(session_names: Mapping[str, str]) -> Dict[str, Tuple[str, str]]:
    """Map session_id -> (year, dept) parsed from each session's name."""

    return {sid: parse_session_info(name) for sid, name in session_names.items()}


# ----------------------------
# DataFrames
# ----------------------------


def plan_seats_df(
    plan: SeatingPlan,
    *,
    session_names: Optional[Mapping[str, str]] = None,
    include_empty: bool = True,
) -> pd.DataFrame:
    """One row per seat, row/seat numbers 1-indexed.

    If `session_names` is given, each occupied seat gets a registration number
    built from its session's year and department.
    """

    info = registration_numbers_by_session(session_names or {})

    rows = []
    for seat_row in plan.seats:
        for seat in seat_row:
            if seat["is_empty"] and not include_empty:
                continue
            sid = seat["session_id"]
            reg = ""
            if not seat["is_empty"]:
                if sid in info:
                    year, dept = info[sid]
                    reg = registration_number(year, dept, str(seat["student_id"]))
                else:
                    reg = str(seat["student_id"])
            rows.append(
                {
                    "room_id": plan.room_id,
                    "row": int(seat["row"]) + 1,
                    "seat": int(seat["col"]) + 1,
                    "session_id": sid or "",
                    "section_id": seat["section_id"] or "",
                    "roll_no": seat["student_id"] or "",
                    "registration_number": reg if reg else EMPTY_LABEL,
                    "is_empty": bool(seat["is_empty"]),
                }
            )
    return pd.DataFrame(
        rows,
        columns=["room_id", "row", "seat", "session_id", "section_id", "roll_no", "registration_number", "is_empty"],
    )


def seat_grid_df(plan: SeatingPlan, *, label: str = "roll_no") -> pd.DataFrame:
    """Room-shaped table: one DataFrame row per seat row, columns "1".."N".

    `label` picks what is shown in a cell: "roll_no" or "session_id".
    """

    key = "student_id" if label == "roll_no" else "session_id"
    table: List[List[str]] = []
    for seat_row in plan.seats:
        table.append(["" if seat["is_empty"] else str(seat[key]) for seat in seat_row])

    columns = [str(c) for c in range(1, plan.columns + 1)]
    df = pd.DataFrame(table, columns=columns)
    df.insert(0, "ROW", [str(r) for r in range(1, plan.rows + 1)])
    return df


def session_summary_df(plans: Sequence[SeatingPlan]) -> pd.DataFrame:
    """Students seated per (room, session)."""

    rows = []
    for plan in plans:
        for seat in plan.occupied_seats():
            rows.append({"room_id": plan.room_id, "session_id": seat["session_id"]})
    if not rows:
        return pd.DataFrame(columns=["room_id", "session_id", "students"])

    df = pd.DataFrame(rows)
    return (
        df.groupby(["room_id", "session_id"], sort=False)
        .size()
        .reset_index(name="students")
    )


def _safe_sheet_name(name: str) -> str:
    """Excel sheet names: max 31 chars, cannot contain: `: \\ / ? * [ ]`."""

    bad = [":", "\\", "/", "?", "*", "[", "]"]
    out = str(name or "Sheet")
    for b in bad:
        out = out.replace(b, "-")
    out = out.strip() or "Sheet"
    return out[:31]


# ----------------------------
# Workbook / archive
# ----------------------------


def plans_workbook_bytes(
    plans: Sequence[SeatingPlan],
    *,
    time_label: str = "",
    session_names: Optional[Mapping[str, str]] = None,
    room_names: Optional[Mapping[str, str]] = None,
) -> bytes:
    """Build a multi-sheet Excel workbook.

    Includes:
    - Summary (metrics + students per room/session)
    - Per room: a header block, the room-shaped grid and the seat list
    """

    session_names = dict(session_names or {})
    room_names = dict(room_names or {})

    metrics = compute_plan_metrics(plans)
    metrics_df = pd.DataFrame(sorted(metrics.items()), columns=["Metric", "Value"])
    summary_df = session_summary_df(plans)

    # First session's name decides the printed registration format.
    fmt = ""
    if session_names:
        year, dept = parse_session_info(next(iter(session_names.values())))
        fmt = registration_format(year, dept)

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        metrics_df.to_excel(writer, sheet_name="Summary", index=False, startrow=0)
        summary_df.to_excel(writer, sheet_name="Summary", index=False, startrow=len(metrics_df) + 2)

        used_names = {"Summary"}
        for plan in plans:
            header_rows = [
                ["TIME SLOT", time_label or plan.time_slot_id],
                ["ROOM", room_names.get(plan.room_id, plan.room_id)],
                ["DIMENSIONS", f"{plan.rows} rows x {plan.columns} columns"],
                ["SESSIONS", ", ".join(session_names.values())],
                ["REGISTRATION FORMAT", fmt],
                ["GENERATED AT", plan.generated_at],
            ]
            header_df = pd.DataFrame(header_rows, columns=["Field", "Value"])
            grid_df = seat_grid_df(plan)
            seats_df = plan_seats_df(plan, session_names=session_names)

            sheet = _safe_sheet_name(f"Room-{plan.room_id}")
            base, n = sheet, 2
            while sheet in used_names:
                suffix = f"~{n}"
                sheet = base[: 31 - len(suffix)] + suffix
                n += 1
            used_names.add(sheet)

            header_df.to_excel(writer, sheet_name=sheet, index=False, startrow=0)
            grid_start = len(header_df) + 2
            grid_df.to_excel(writer, sheet_name=sheet, index=False, startrow=grid_start)
            seats_df.to_excel(writer, sheet_name=sheet, index=False, startrow=grid_start + len(grid_df) + 2)

    return out.getvalue()


def plans_zip_bytes(
    plans: Sequence[SeatingPlan],
    *,
    time_label: str = "",
    session_names: Optional[Mapping[str, str]] = None,
    room_names: Optional[Mapping[str, str]] = None,
) -> bytes:
    """ZIP with the workbook plus one seat-list CSV and one grid CSV per room."""

    wb = plans_workbook_bytes(plans, time_label=time_label, session_names=session_names, room_names=room_names)

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as z:
        z.writestr("seating_plans.xlsx", wb)
        z.writestr("tables/session_summary.csv", session_summary_df(plans).to_csv(index=False).encode("utf-8"))
        for plan in plans:
            seats_df = plan_seats_df(plan, session_names=session_names)
            z.writestr(f"rooms/{plan.room_id}/seats.csv", seats_df.to_csv(index=False).encode("utf-8"))
            z.writestr(f"rooms/{plan.room_id}/grid.csv", seat_grid_df(plan).to_csv(index=False).encode("utf-8"))

    return buf.getvalue()


# ----------------------------
# Text / image
# ----------------------------


def df_to_markdown(df: pd.DataFrame) -> str:
    """Convert DataFrame to a GitHub-flavored Markdown table."""

    # pandas to_markdown needs tabulate; not worth the extra dependency.
    cols = list(df.columns)
    rows = df.astype(str).values.tolist()

    def esc(s: str) -> str:
        return str(s).replace("\n", " ").replace("|", "\\|")

    header = "| " + " | ".join(esc(c) for c in cols) + " |"
    sep = "| " + " | ".join(["---"] * len(cols)) + " |"
    body = ["| " + " | ".join(esc(v) for v in r) + " |" for r in rows]
    return "\n".join([header, sep] + body) + "\n"


@dataclass(frozen=True)
class ChartOptions:
    title: Optional[str] = None
    font_size: int = 8
    cell_size: float = 0.9


def _session_colors(session_ids: Iterable[str]) -> Dict[str, str]:
    palette = [
        "#cfe2ff", "#d1e7dd", "#fff3cd", "#f8d7da", "#e2d9f3",
        "#d2f4ea", "#ffe5d0", "#e9ecef", "#f7d6e6", "#dbe4ff",
    ]
    return {sid: palette[i % len(palette)] for i, sid in enumerate(dict.fromkeys(session_ids))}


def seat_chart_png_bytes(plan: SeatingPlan, *, options: ChartOptions = ChartOptions()) -> bytes:
    """Render a room as a PNG grid, one colour per session.

    Uses matplotlib's table artist.
    """

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    grid = seat_grid_df(plan).drop(columns=["ROW"])
    colors = _session_colors(s["session_id"] for s in plan.occupied_seats())

    fig_w = max(3.0, float(options.cell_size) * (plan.columns + 1))
    fig_h = max(2.0, float(options.cell_size) * 0.5 * (plan.rows + 2))

    fig, ax = plt.subplots(figsize=(fig_w, fig_h))
    ax.axis("off")
    ax.set_title(options.title or f"Room {plan.room_id}", fontsize=options.font_size + 2, pad=12)

    if grid.empty:
        cell_text = [[""]]
        col_labels = [""]
    else:
        cell_text = grid.values.tolist()
        col_labels = list(grid.columns)

    tbl = ax.table(cellText=cell_text, colLabels=col_labels, cellLoc="center", loc="center")
    tbl.auto_set_font_size(False)
    tbl.set_fontsize(options.font_size)
    tbl.scale(1.0, 1.4)

    for (r, c), cell in tbl.get_celld().items():
        cell.set_linewidth(0.6)
        if r == 0:
            cell.set_facecolor("#f0f2f6")
            cell.set_text_props(weight="bold")
            continue
        if r - 1 < plan.rows and c < plan.columns:
            seat = plan.seats[r - 1][c]
            if not seat["is_empty"]:
                cell.set_facecolor(colors.get(seat["session_id"], "#ffffff"))

    buf = io.BytesIO()
    fig.tight_layout()
    fig.savefig(buf, format="png", dpi=150, bbox_inches="tight")
    plt.close(fig)
    return buf.getvalue()
