#!/usr/bin/env python3
"""
State management for the tutoring session.
Tracks the session phase, the lesson being worked through, and the
evaluation context shared by every snippet the learner submits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum

from .display import DisplayText, as_display
from .evaluator import EvaluationContext
from .questions import Course, Lesson, Question
from ..db.progress import Progress


class SessionPhase(Enum):
    """Phases of a tutoring session"""
    MENU_COURSE = 'menu_course'                            # Choosing a course
    MENU_LESSON = 'menu_lesson'                            # Choosing a lesson
    AWAITING_RESTART_CONFIRM = 'awaiting_restart_confirm'  # Restart a completed lesson?
    AWAITING_RESET_ALL_CONFIRM = 'awaiting_reset_all'      # Reset every lesson in the course?
    DISPLAYING = 'displaying'                              # Showing the current question
    AWAITING_ANSWER = 'awaiting_answer'                    # Waiting for a scored answer
    MULTI_STEP = 'multi_step'                              # Collecting multi-step fragments
    COMPLETE = 'complete'                                  # Lesson finished, menu shown
    ENDED = 'ended'                                        # Session over


# Prompt shown while waiting in each phase
PROMPTS = {
    SessionPhase.MENU_COURSE: 'Selection: ',
    SessionPhase.MENU_LESSON: 'Selection: ',
    SessionPhase.COMPLETE: 'Selection: ',
    SessionPhase.AWAITING_RESTART_CONFIRM: '(yes/no) ',
    SessionPhase.AWAITING_RESET_ALL_CONFIRM: '(yes/no) ',
    SessionPhase.DISPLAYING: '> ',
    SessionPhase.AWAITING_ANSWER: '> ',
    SessionPhase.MULTI_STEP: '... ',
    SessionPhase.ENDED: '',
}

# (course name, lesson name, question index)
FragmentKey = Tuple[str, str, int]


@dataclass
class TutoringState:
    """Current state of the tutoring session"""
    phase: SessionPhase = SessionPhase.MENU_COURSE

    # What is loaded
    courses: List[Course] = field(default_factory=list)
    course: Optional[Course] = None
    lesson: Optional[Lesson] = None
    progress: Optional[Progress] = None

    # Per-question bookkeeping
    attempts: int = 0                # graded attempts on the current question
    step: int = 1                    # multi-step cursor
    fragments: List[str] = field(default_factory=list)

    # Fragments of multi-step questions left part way, kept for this process only
    fragment_cache: Dict[FragmentKey, List[str]] = field(default_factory=dict)

    # Lesson menu bookkeeping
    pending_lesson: Optional[int] = None     # lesson awaiting restart confirmation
    last_lesson: Optional[str] = None        # lesson the learner last worked on
    just_completed: bool = False

    # One namespace for the whole session
    context: EvaluationContext = field(default_factory=EvaluationContext)

    @property
    def finished(self) -> bool:
        return self.phase == SessionPhase.ENDED

    @property
    def in_lesson(self) -> bool:
        return self.lesson is not None and self.progress is not None

    def current_question(self) -> Optional[Question]:
        """Question at the stored position, or None past the end"""
        if not self.in_lesson:
            return None
        index = self.progress.current_question_index
        if 1 <= index <= len(self.lesson):
            return self.lesson.question(index)
        return None

    def fragment_key(self) -> FragmentKey:
        return (self.course.name, self.lesson.name, self.progress.current_question_index)

    def reset_question(self):
        """Clear per-question bookkeeping when moving to another question"""
        self.attempts = 0
        self.step = 1
        self.fragments = []

    def forget_fragments(self, course_name: str, lesson_name: Optional[str] = None):
        """Drop cached fragments for a course, or one lesson of it"""
        for key in list(self.fragment_cache):
            if key[0] == course_name and (lesson_name is None or key[1] == lesson_name):
                del self.fragment_cache[key]


@dataclass
class TutoringResponse:
    """What the engine wants shown after handling one input"""
    lines: List[DisplayText] = field(default_factory=list)
    prompt: str = '> '

    def show(self, text: Any, style: Optional[str] = None) -> 'TutoringResponse':
        """Queue a question text, hint or other displayable value"""
        display = as_display(text, style)
        if not display.is_empty():
            self.lines.append(display)
        return self

    def say(self, message: str, style: Optional[str] = None) -> 'TutoringResponse':
        """Queue a plain engine message"""
        self.lines.append(DisplayText(message, style=style))
        return self

    def text(self) -> str:
        """All queued lines rendered and joined"""
        return '\n'.join(line.render() for line in self.lines)
