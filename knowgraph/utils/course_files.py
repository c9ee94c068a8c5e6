"""
Course file utilities for KnowGraph.

Loads YAML course definitions from the courses/ directory and seeds
them into the database through CourseAuthor.
"""

import logging
from pathlib import Path

import yaml

from knowgraph.config import DEFAULT_COURSES_DIR
from knowgraph.classroom import PrerequisiteCycleError, find_prerequisite_cycles
from knowgraph.schemas import Course, CourseDefinition

logger = logging.getLogger(__name__)


def load_course_definition(name: str | Path, courses_dir: Path | None = None) -> CourseDefinition:
    """
    Load a course definition by name or path.

    Args:
        name: Course file name without .yaml extension (e.g., "graph_basics"),
            or a path to a YAML file
        courses_dir: Optional custom courses directory

    Returns:
        Validated CourseDefinition

    Raises:
        FileNotFoundError: If course file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If the file doesn't match the course schema
    """
    file_path = Path(name)
    if file_path.suffix not in (".yaml", ".yml"):
        file_path = (courses_dir or DEFAULT_COURSES_DIR) / f"{name}.yaml"

    if not file_path.exists():
        raise FileNotFoundError(f"Course file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return CourseDefinition.model_validate(data)


def get_available_courses(courses_dir: Path | None = None) -> list[str]:
    """
    List all available course files.

    Args:
        courses_dir: Optional custom courses directory

    Returns:
        Sorted list of course names (without .yaml extension)
    """
    dir_path = courses_dir or DEFAULT_COURSES_DIR
    if not dir_path.exists():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))


def check_definition_cycles(definition: CourseDefinition):
    """
    Reject a course file whose own `requires` lists form a cycle.

    Raises:
        PrerequisiteCycleError: For the first cycle found, reported on the
            edge that closes it
    """
    cycles = find_prerequisite_cycles(definition.iter_edges())
    if cycles:
        cycle = cycles[0]
        raise PrerequisiteCycleError(cycle[0], cycle[-1], cycle + cycle[:1])


def seed_course(definition: CourseDefinition, author) -> Course:
    """
    Write a course definition to the database.

    The file's prerequisite graph is checked for cycles before anything is
    written. Paths and capsules are then appended in file order and edges
    go through CourseAuthor.add_prerequisite. If any later write fails, the
    course is deleted again so the file can be fixed and re-seeded.

    Args:
        definition: Parsed course definition
        author: CourseAuthor bound to the target database

    Returns:
        The created Course

    Raises:
        PrerequisiteCycleError: If the file's prerequisites form a cycle
        ValueError: If a capsule requires an unknown capsule
        sqlite3.IntegrityError: If the course or a capsule ID already exists
    """
    check_definition_cycles(definition)

    course = author.create_course(
        title=definition.title,
        description=definition.description,
        is_published=definition.is_published,
        course_id=definition.id,
    )

    capsule_count = 0
    edges = definition.iter_edges()
    try:
        for path_def in definition.paths:
            path = author.add_learning_path(
                course.id,
                path_def.title,
                description=path_def.description,
                path_id=path_def.id,
            )
            for capsule_def in path_def.capsules:
                author.add_capsule(
                    path.id,
                    capsule_def.title,
                    description=capsule_def.description,
                    duration_minutes=capsule_def.duration_minutes,
                    capsule_id=capsule_def.id,
                )
                capsule_count += 1

        for edge in edges:
            author.add_prerequisite(edge.capsule_id, edge.prerequisite_capsule_id)
    except Exception:
        logger.warning(f"Seeding course {course.id} failed, removing partial data")
        author.delete_course(course.id)
        raise

    logger.info(
        f"Seeded course {course.id}: {len(definition.paths)} paths, "
        f"{capsule_count} capsules, {len(edges)} prerequisites"
    )
    return course
