"""Run the low-attendance check for a list of students.

Meant for a scheduler (cron, systemd timer):

    python scripts/check_low_attendance.py 101 102 103 --from 2025-04-14 --to 2025-07-15
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_attendance.school_attendance.attendance.model import DateRange
from src.school_attendance.school_attendance.common.datetime_utils import parse_iso_date
from src.school_attendance.school_attendance.common.logging_setup import setup_logging
from src.school_attendance.school_attendance.container import build_container


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("student_ids", nargs="+", type=int)
    parser.add_argument("--from", dest="date_from", type=parse_iso_date)
    parser.add_argument("--to", dest="date_to", type=parse_iso_date)
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        correction_window_hours=float(settings.CORRECTION_WINDOW_HOURS),
        low_attendance_threshold=float(settings.LOW_ATTENDANCE_THRESHOLD),
        admin_role=str(settings.ADMIN_ROLE),
        log_alerts_as_sent=bool(getattr(settings, "LOG_ALERTS_AS_SENT", False)),
    )

    date_range = None
    if args.date_from or args.date_to:
        date_range = DateRange(start=args.date_from, end=args.date_to)

    results = container.alert_service.batch_check_low_attendance(args.student_ids, date_range)
    for r in results:
        flag = "LOW" if r.below_threshold else "ok"
        print(f"{r.student_id}\t{r.attendance_percentage:.2f}%\t{flag}\talert_sent={r.alert_sent}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
