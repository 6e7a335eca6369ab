"""Demo runner: generate seating plans from sample JSON.

This is meant for quick validation and for demos.

Usage:
    python scripts/run_seating_demo.py
    python scripts/run_seating_demo.py --time-slot T001 --rooms R101 R102 --xlsx plans.xlsx

The data file defaults to `data/sample_seating_problem.json` (override with
`--data` or the `SEAT_PLANNER_DATA` env var).
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
import sys

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reports.plan_export import df_to_markdown, plans_workbook_bytes, seat_grid_df
from seating import AllocationEngine, SeatingError, compute_plan_metrics, load_store_from_json
from seating.stores import default_data_path


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate exam seating plans from a JSON data file.")
    p.add_argument("--data", default=str(default_data_path()), help="JSON data file")
    p.add_argument("--time-slot", default="T001")
    p.add_argument("--rooms", nargs="*", default=None, help="Room IDs (default: all rooms in the file)")
    p.add_argument("--user", default=None, help="Requester ID (default: top-level owner_id)")
    p.add_argument("--xlsx", default=None, help="Also write an Excel workbook here")
    p.add_argument("--log-level", default=os.getenv("SEAT_PLANNER_LOG_LEVEL", "INFO"))
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    store = load_store_from_json(args.data)
    time_slot = store.get_time_slot(args.time_slot)
    user = args.user or (time_slot.owner_id if time_slot else "")
    room_ids = args.rooms if args.rooms else list(store.rooms.keys())

    try:
        result = AllocationEngine(store).generate(args.time_slot, room_ids, user)
    except SeatingError as e:
        print(f"Generation failed ({e.kind}): {e}", file=sys.stderr)
        return 1

    for plan in result.plans:
        print(f"\n=== Room {plan.room_id} ({plan.rows} x {plan.columns}) ===")
        print(df_to_markdown(seat_grid_df(plan)))

    print("=== Metrics ===")
    for k, v in compute_plan_metrics(result.plans).items():
        print(f"{k}: {v}")

    if args.xlsx:
        session_names = {sid: store.sessions[sid].name for sid in time_slot.session_ids}
        room_names = {rid: store.rooms[rid].name for rid in room_ids}
        data = plans_workbook_bytes(
            result.plans,
            time_label=time_slot.time,
            session_names=session_names,
            room_names=room_names,
        )
        Path(args.xlsx).write_bytes(data)
        print(f"\nWrote {args.xlsx}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
