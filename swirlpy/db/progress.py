#!/usr/bin/env python3
"""
Lesson progress persistence.
One JSON file per (course, lesson) under the progress directory, so a
session can be interrupted and resumed where it left off.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

PROGRESS_SUFFIX = '.json'
# slugify never produces a double underscore
KEY_SEPARATOR = '__'


def slugify(name: str) -> str:
    """File-name safe form of a course or lesson name"""
    return re.sub(r'[^a-zA-Z0-9-]+', '_', name).strip('_')


@dataclass
class Progress:
    """Where a learner is in one lesson"""
    course_name: str
    lesson_name: str
    current_question_index: int = 1      # 1-based; len + 1 means finished
    completed: bool = False
    correct_answers: int = 0
    attempts: int = 0                    # graded submissions
    multistep_cursor: Dict[int, int] = field(default_factory=dict)  # question -> step

    def to_dict(self) -> Dict:
        """Serialize progress to dictionary"""
        return {
            'course_name': self.course_name,
            'lesson_name': self.lesson_name,
            'current_question_index': self.current_question_index,
            'completed': self.completed,
            'correct_answers': self.correct_answers,
            'attempts': self.attempts,
            # JSON object keys are strings
            'multistep_cursor': {str(k): v for k, v in self.multistep_cursor.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Progress':
        """Deserialize progress from dictionary"""
        progress = cls(
            course_name=data['course_name'],
            lesson_name=data['lesson_name'],
            current_question_index=int(data.get('current_question_index', 1)),
            completed=bool(data.get('completed', False)),
            correct_answers=int(data.get('correct_answers', 0)),
            attempts=int(data.get('attempts', 0)),
            multistep_cursor={
                int(k): int(v) for k, v in (data.get('multistep_cursor') or {}).items()
            },
        )
        # positions are 1-based
        if progress.current_question_index < 1:
            raise ValueError(f"Invalid question index: {progress.current_question_index}")
        if any(k < 1 or v < 1 for k, v in progress.multistep_cursor.items()):
            raise ValueError(f"Invalid multi-step cursor: {progress.multistep_cursor}")
        return progress


class ProgressStore:
    """Load, save and reset lesson progress records"""

    def __init__(self, progress_dir: Optional[Path] = None):
        if progress_dir is None:
            from ..config import get_progress_dir
            progress_dir = get_progress_dir()
        self.progress_dir = Path(progress_dir)

    def progress_path(self, course_name: str, lesson_name: str) -> Path:
        key = f"{slugify(course_name)}{KEY_SEPARATOR}{slugify(lesson_name)}"
        return self.progress_dir / f"{key}{PROGRESS_SUFFIX}"

    def _files(self) -> List[Path]:
        if not self.progress_dir.is_dir():
            return []
        return sorted(self.progress_dir.glob(f'*{PROGRESS_SUFFIX}'))

    def _read(self, path: Path) -> Progress:
        with open(path, 'r') as f:
            return Progress.from_dict(json.load(f))

    def _owner(self, path: Path) -> Optional[Tuple[str, str]]:
        """(course, lesson) stored in a record, None if it can't be read"""
        try:
            progress = self._read(path)
        except (OSError, ValueError, KeyError, TypeError, AttributeError):
            return None
        return progress.course_name, progress.lesson_name

    def get(self, course_name: str, lesson_name: str) -> Progress:
        """
        Get stored progress for a lesson.

        A missing or unreadable record gives a fresh one; corruption is
        logged, never raised.
        """
        path = self.progress_path(course_name, lesson_name)
        if path.exists():
            try:
                progress = self._read(path)
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning("Ignoring unreadable progress file %s: %s", path, e)
            else:
                if progress.course_name == course_name and progress.lesson_name == lesson_name:
                    return progress
                logger.warning("Progress file %s belongs to %s/%s, starting fresh",
                               path, progress.course_name, progress.lesson_name)
        return Progress(course_name=course_name, lesson_name=lesson_name)

    def save(self, progress: Progress) -> None:
        """Persist the full record"""
        self.progress_dir.mkdir(parents=True, exist_ok=True)
        path = self.progress_path(progress.course_name, progress.lesson_name)
        with open(path, 'w') as f:
            json.dump(progress.to_dict(), f, indent=2)
        logger.debug("Saved progress to %s", path)

    def reset_lesson(self, course_name: str, lesson_name: str) -> bool:
        """Delete one lesson's record. Returns True if there was one."""
        path = self.progress_path(course_name, lesson_name)
        if not path.exists():
            return False
        owner = self._owner(path)
        # names differing only in punctuation share a file
        if owner is not None and owner != (course_name, lesson_name):
            return False
        path.unlink()
        return True

    def reset_course(self, course_name: str) -> int:
        """Delete every record of a course. Returns how many were removed."""
        prefix = f"{slugify(course_name)}{KEY_SEPARATOR}"
        removed = 0
        for path in self._files():
            if not path.name.startswith(prefix):
                continue
            owner = self._owner(path)
            if owner is not None and owner[0] != course_name:
                continue
            path.unlink()
            removed += 1
        return removed

    def delete_all(self) -> int:
        """Delete every stored record. Returns how many were removed."""
        files = self._files()
        for path in files:
            path.unlink()
        return len(files)

    def list_all(self) -> List[Progress]:
        """Every readable record, corrupt ones skipped"""
        records = []
        for path in self._files():
            try:
                records.append(self._read(path))
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.debug("Skipping unreadable progress file %s: %s", path, e)
        return records
