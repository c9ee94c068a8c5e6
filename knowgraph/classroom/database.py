"""
Database - SQLite schema and connection helpers shared by the stores.

One database file holds both content (courses, paths, capsules,
prerequisites) and learner state (progress, enrollments).
"""

import sqlite3
from pathlib import Path


SCHEMA = """
-- Courses table
CREATE TABLE IF NOT EXISTS courses (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    is_published INTEGER NOT NULL DEFAULT 0
);

-- Learning paths (modules) table
CREATE TABLE IF NOT EXISTS learning_paths (
    id TEXT PRIMARY KEY,
    course_id TEXT NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT,
    order_index INTEGER NOT NULL
);

-- Capsules table
CREATE TABLE IF NOT EXISTS capsules (
    id TEXT PRIMARY KEY,
    learning_path_id TEXT NOT NULL REFERENCES learning_paths(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT,
    duration_minutes INTEGER,
    order_index INTEGER NOT NULL
);

-- Prerequisite edges: capsule_id requires prerequisite_capsule_id
CREATE TABLE IF NOT EXISTS capsule_prerequisites (
    capsule_id TEXT NOT NULL REFERENCES capsules(id) ON DELETE CASCADE,
    prerequisite_capsule_id TEXT NOT NULL REFERENCES capsules(id) ON DELETE CASCADE,
    created_at TEXT NOT NULL,
    PRIMARY KEY (capsule_id, prerequisite_capsule_id)
);

-- Per-learner capsule progress (upserted by key)
CREATE TABLE IF NOT EXISTS progress (
    user_id TEXT NOT NULL,
    capsule_id TEXT NOT NULL REFERENCES capsules(id) ON DELETE CASCADE,
    is_completed INTEGER NOT NULL DEFAULT 0,
    completed_at TEXT,
    watch_percentage INTEGER,
    last_watched_at TEXT NOT NULL,
    PRIMARY KEY (user_id, capsule_id)
);

-- Course enrollments
CREATE TABLE IF NOT EXISTS enrollments (
    user_id TEXT NOT NULL,
    course_id TEXT NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
    status TEXT NOT NULL DEFAULT 'pending',
    payment_reference TEXT,
    enrolled_at TEXT NOT NULL,
    approved_at TEXT,
    PRIMARY KEY (user_id, course_id)
);

-- Indexes for common queries
CREATE INDEX IF NOT EXISTS idx_paths_course ON learning_paths(course_id);
CREATE INDEX IF NOT EXISTS idx_capsules_path ON capsules(learning_path_id);
CREATE INDEX IF NOT EXISTS idx_prereqs_prereq ON capsule_prerequisites(prerequisite_capsule_id);
CREATE INDEX IF NOT EXISTS idx_progress_user ON progress(user_id);
CREATE INDEX IF NOT EXISTS idx_enrollments_course ON enrollments(course_id);
"""


def ensure_database(db_path: Path):
    """Create database and tables if they don't exist."""
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()


def connect(db_path: Path) -> sqlite3.Connection:
    """Open a connection with Row access and foreign keys enforced."""
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def placeholders(count: int) -> str:
    """'?, ?, ?' for an IN clause of the given size."""
    return ", ".join("?" for _ in range(count))
