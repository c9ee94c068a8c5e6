#!/usr/bin/env python3
"""
export_progress.py - Export the admin progress report to CSV.

One row per approved enrollment: completed/total capsules, progress
percentage and last activity.

Usage:
  python scripts/export_progress.py --output progress.csv
  python scripts/export_progress.py --course graph-basics --output graph_basics.csv
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd

from knowgraph.config import load_settings, setup_logging
from knowgraph.classroom import CourseLoader, CourseNavigator, EnrollmentBook, ProgressTracker

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "course_id",
    "course_title",
    "user_id",
    "completed_capsules",
    "total_capsules",
    "progress_percent",
    "last_activity",
]


def build_progress_frame(navigator: CourseNavigator, course_id: str | None = None) -> pd.DataFrame:
    """Admin progress report as a DataFrame sorted by course, then progress."""
    rows = [row.model_dump() for row in navigator.get_student_progress(course_id)]
    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    if df.empty:
        return df
    return df.sort_values(
        ["course_title", "progress_percent", "user_id"],
        ascending=[True, False, True],
    ).reset_index(drop=True)


def main():
    settings = load_settings()

    parser = argparse.ArgumentParser(
        description="Export learner progress to CSV.",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=settings.db_path,
        help=f"KnowGraph database (default: {settings.db_path})",
    )
    parser.add_argument(
        "--course",
        default=None,
        help="Only include this course ID",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("progress.csv"),
        help="Output CSV file (default: progress.csv)",
    )

    args = parser.parse_args()
    setup_logging(settings.log_level)

    if not args.db.exists():
        print(f"ERROR: Database not found: {args.db}")
        sys.exit(1)

    navigator = CourseNavigator(
        CourseLoader(args.db),
        ProgressTracker(args.db),
        EnrollmentBook(args.db),
    )
    df = build_progress_frame(navigator, args.course)
    df.to_csv(args.output, index=False)

    logger.info(f"Wrote {len(df)} rows to {args.output}")
    if not df.empty:
        print(f"\nAverage progress: {df['progress_percent'].mean():.1f}%")


if __name__ == "__main__":
    main()
