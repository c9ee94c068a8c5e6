#!/usr/bin/env python3
"""
seed_courses.py - Load YAML course definitions into the KnowGraph database.

Writes courses, learning paths, capsules and prerequisite edges from
courses/*.yaml. Prerequisite cycles are rejected while seeding, and the
final database is audited for cycles left by older imports.

Usage:
  python scripts/seed_courses.py
  python scripts/seed_courses.py --courses graph_basics --db data/knowgraph.db --reset
"""

import argparse
import logging
import sqlite3
import sys
from pathlib import Path

import yaml

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from knowgraph.config import load_settings, setup_logging
from knowgraph.classroom import CourseAuthor, PrerequisiteCycleError
from knowgraph.utils import get_available_courses, load_course_definition, seed_course

logger = logging.getLogger(__name__)


def main():
    settings = load_settings()

    parser = argparse.ArgumentParser(
        description="Load YAML course definitions into the KnowGraph database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/seed_courses.py
  python scripts/seed_courses.py --courses graph_basics --reset
  python scripts/seed_courses.py --courses-dir my_courses --db /tmp/knowgraph.db
        """,
    )
    parser.add_argument(
        "--courses-dir",
        type=Path,
        default=settings.courses_dir,
        help=f"Directory with course YAML files (default: {settings.courses_dir})",
    )
    parser.add_argument(
        "--courses",
        nargs="*",
        default=None,
        help="Course names to load (default: all files in --courses-dir)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=settings.db_path,
        help=f"Output SQLite database (default: {settings.db_path})",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete the existing database first",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.reset and args.db.exists():
        args.db.unlink()
        logger.info(f"Removed existing database: {args.db}")

    names = args.courses or get_available_courses(args.courses_dir)
    if not names:
        print(f"ERROR: No course files found in {args.courses_dir}")
        sys.exit(1)

    author = CourseAuthor(args.db)
    failures = 0
    for name in names:
        try:
            definition = load_course_definition(name, args.courses_dir)
            seed_course(definition, author)
        except PrerequisiteCycleError as e:
            logger.error(f"{name}: {e}")
            failures += 1
        except sqlite3.IntegrityError as e:
            logger.error(f"{name}: already seeded ({e})")
            failures += 1
        except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
            logger.error(f"{name}: {e}")
            failures += 1

    cycles = author.audit_prerequisite_cycles()

    print(f"\nSeeded {len(names) - failures}/{len(names)} courses into {args.db}")
    if cycles:
        print(f"  - WARNING: {len(cycles)} prerequisite cycles in stored data")

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
