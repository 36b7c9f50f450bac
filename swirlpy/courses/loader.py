#!/usr/bin/env python3
"""
Loading courses installed under the courses directory.

Each installed course is a directory holding a ``course.py`` that defines a
module-level ``course`` (a swirlpy Course).
"""

import importlib.util
import logging
from pathlib import Path
from typing import List

from ..tutoring.questions import Course

logger = logging.getLogger(__name__)

COURSE_FILE = 'course.py'


class CourseLoadError(Exception):
    """An installed course file could not be loaded"""


def load_course_file(path: Path) -> Course:
    """Import a course.py file and return its ``course``"""
    path = Path(path)
    module_name = f"swirlpy_course_{path.parent.name}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise CourseLoadError(f"{path} is not a Python file")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise CourseLoadError(f"Failed to load course from {path}: {e}") from e

    course = getattr(module, 'course', None)
    if not isinstance(course, Course):
        raise CourseLoadError(f"{path} does not define a Course named 'course'")
    return course


def find_course_files(courses_dir: Path) -> List[Path]:
    """course.py files one level below the courses directory"""
    courses_dir = Path(courses_dir)
    if not courses_dir.is_dir():
        return []
    return sorted(
        entry / COURSE_FILE
        for entry in courses_dir.iterdir()
        if entry.is_dir() and (entry / COURSE_FILE).is_file()
    )


def load_installed_courses(courses_dir: Path) -> List[Course]:
    """Every installed course that loads; failures are logged and skipped"""
    courses = []
    for path in find_course_files(courses_dir):
        try:
            courses.append(load_course_file(path))
        except CourseLoadError as e:
            logger.warning("%s", e)
    return courses
