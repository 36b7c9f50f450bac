"""Course provider: the built-in course plus any installed ones."""

from pathlib import Path
from typing import List, Optional

from ..tutoring.questions import Course
from .builtin import create_python_basics_course
from .loader import CourseLoadError, load_course_file, load_installed_courses


def get_available_courses(courses_dir: Optional[Path] = None) -> List[Course]:
    """All courses, built-in first"""
    if courses_dir is None:
        from ..config import get_courses_dir
        courses_dir = get_courses_dir()

    courses = [create_python_basics_course()]
    courses.extend(load_installed_courses(courses_dir))
    return courses


__all__ = [
    "CourseLoadError",
    "create_python_basics_course",
    "get_available_courses",
    "load_course_file",
]
