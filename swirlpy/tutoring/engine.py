#!/usr/bin/env python3
"""
TutoringEngine - drives course and lesson menus and the question loop.

The engine keeps no session of its own. Callers hold a TutoringState and
feed every line of input through handle(), which returns the updated state
and a TutoringResponse to display:

    engine = TutoringEngine(get_available_courses, ProgressStore())
    state, response = engine.start()
    while not state.finished:
        state, response = engine.handle(state, read_line(response.prompt))
"""

import logging
import re
import webbrowser
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .evaluator import evaluate
from .questions import (
    EVALUATED_KINDS,
    Course,
    MultistepCodeQ,
    Question,
    QuestionKind,
)
from .state import PROMPTS, SessionPhase, TutoringResponse, TutoringState
from ..db.progress import Progress, ProgressStore
from ..repl.commands import (
    CONFIRM_WORDS,
    DONE_WORDS,
    EXIT_WORDS,
    HINT_WORDS,
    MENU_WORDS,
    RESTART_QUESTION_WORDS,
    SKIP_WORDS,
)

logger = logging.getLogger(__name__)

CourseSource = Union[Callable[[], List[Course]], Sequence[Course]]


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except ValueError:
        return None


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class TutoringEngine:
    """Sequences menus and questions for one learner"""

    def __init__(
        self,
        courses: CourseSource,
        store: ProgressStore,
        max_attempts: int = 3,
        link_opener: Callable[[str], object] = webbrowser.open,
    ):
        self.courses = courses
        self.store = store
        self.max_attempts = max(1, max_attempts)
        self.link_opener = link_opener

        self.phase_handlers = {
            SessionPhase.MENU_COURSE: self._handle_course_menu,
            SessionPhase.MENU_LESSON: self._handle_lesson_menu,
            SessionPhase.COMPLETE: self._handle_lesson_menu,
            SessionPhase.AWAITING_RESTART_CONFIRM: self._handle_restart_confirm,
            SessionPhase.AWAITING_RESET_ALL_CONFIRM: self._handle_reset_all_confirm,
            SessionPhase.DISPLAYING: self._handle_displaying,
            SessionPhase.AWAITING_ANSWER: self._handle_answer,
            SessionPhase.MULTI_STEP: self._handle_multistep,
            SessionPhase.ENDED: self._handle_ended,
        }

    def _list_courses(self) -> List[Course]:
        courses = self.courses() if callable(self.courses) else self.courses
        return list(courses)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def start(self, state: Optional[TutoringState] = None) -> Tuple[TutoringState, TutoringResponse]:
        """Begin a session at the course menu"""
        state = state or TutoringState()
        state.courses = self._list_courses()
        response = TutoringResponse()
        self._show_course_menu(state, response)
        return state, self._finish(state, response)

    def handle(self, state: TutoringState, user_input: str) -> Tuple[TutoringState, TutoringResponse]:
        """Process one line of input in the current phase"""
        response = TutoringResponse()
        text = user_input.strip()
        if text:
            handler = self.phase_handlers[state.phase]
            handler(state, text, response)
        return state, self._finish(state, response)

    def open_lesson(self, state: TutoringState, course: Course,
                    lesson_number: int) -> Tuple[TutoringState, TutoringResponse]:
        """Jump straight into a lesson, bypassing the menus"""
        response = TutoringResponse()
        state.course = course
        self._select_lesson(state, lesson_number, response)
        return state, self._finish(state, response)

    def _finish(self, state: TutoringState, response: TutoringResponse) -> TutoringResponse:
        response.prompt = PROMPTS[state.phase]
        return response

    # ------------------------------------------------------------------
    # Course menu
    # ------------------------------------------------------------------

    def _show_course_menu(self, state: TutoringState, response: TutoringResponse):
        state.phase = SessionPhase.MENU_COURSE
        state.course = None
        if not state.courses:
            response.say("No courses are installed.", 'error')
            response.say("Type 'exit' to quit.", 'info')
            return

        response.say("Available courses:", 'title')
        for i, course in enumerate(state.courses, 1):
            line = f"  {i}. {course.name}"
            if course.description:
                line += f" - {course.description}"
            response.say(f"{line} ({_plural(len(course.lessons), 'lesson')})")
        response.say("Enter a course number, or 0 to exit.", 'info')

    def _handle_course_menu(self, state: TutoringState, text: str, response: TutoringResponse):
        lower = text.lower()
        if lower in EXIT_WORDS or lower in ('0', '-1'):
            self._end(state, response)
            return

        choice = _parse_int(text)
        if choice is None or not 1 <= choice <= len(state.courses):
            response.say(f"Invalid choice. Enter a number between 1 and {len(state.courses)}, "
                         f"or 0 to exit.", 'error')
            return

        state.course = state.courses[choice - 1]
        state.last_lesson = None
        state.just_completed = False
        self._show_lesson_menu(state, response)

    # ------------------------------------------------------------------
    # Lesson menu
    # ------------------------------------------------------------------

    def _show_lesson_menu(self, state: TutoringState, response: TutoringResponse):
        state.phase = SessionPhase.MENU_LESSON
        course = state.course
        response.say(f"{course.name}", 'title')
        if course.description:
            response.say(course.description, 'info')

        for i, lesson in enumerate(course.lessons, 1):
            progress = self.store.get(course.name, lesson.name)
            mark = '[✓]' if progress.completed else '[ ]'
            line = f"  {mark} {i}. {lesson.title or lesson.name}"
            if lesson.name == state.last_lesson:
                line += "  ← just completed" if state.just_completed else "  ← in progress"
            response.say(line)
        response.say("Enter a lesson number, 'reset <n>', 'reset all', or 0 for the course menu.",
                     'info')

    def _handle_lesson_menu(self, state: TutoringState, text: str, response: TutoringResponse):
        lower = text.lower()
        course = state.course

        if lower in EXIT_WORDS or lower == '-1':
            self._end(state, response)
            return

        if lower == '0':
            self._show_course_menu(state, response)
            return

        match = re.match(r'^reset\s+(\S+)$', lower)
        if match:
            self._handle_reset(state, match.group(1), response)
            return
        if lower == 'reset':
            response.say("Invalid format. Use: reset <number> (e.g. 'reset 1') or 'reset all'",
                         'error')
            return

        choice = _parse_int(text)
        if choice is None or not 1 <= choice <= len(course.lessons):
            response.say(f"Invalid choice. Enter a lesson number between 1 and "
                         f"{len(course.lessons)}, 'reset <n>', 'reset all', or 0 to go back.",
                         'error')
            return

        self._select_lesson(state, choice, response)

    def _handle_reset(self, state: TutoringState, target: str, response: TutoringResponse):
        course = state.course
        if target == 'all':
            state.phase = SessionPhase.AWAITING_RESET_ALL_CONFIRM
            response.say(f"Are you sure you want to reset ALL lessons in {course.name}? (yes/no)")
            return

        number = _parse_int(target)
        if number is None or not 1 <= number <= len(course.lessons):
            response.say(f"Invalid lesson number. Enter a number between 1 and "
                         f"{len(course.lessons)}.", 'error')
            return

        lesson = course.lessons[number - 1]
        if self.store.reset_lesson(course.name, lesson.name):
            response.say(f"✓ Reset lesson: {lesson.title or lesson.name}", 'success')
        else:
            response.say(f"Lesson not started yet: {lesson.title or lesson.name}", 'info')
        state.forget_fragments(course.name, lesson.name)
        if state.last_lesson == lesson.name:
            state.last_lesson = None
        self._show_lesson_menu(state, response)

    def _handle_reset_all_confirm(self, state: TutoringState, text: str, response: TutoringResponse):
        course = state.course
        if text.lower() in CONFIRM_WORDS:
            count = self.store.reset_course(course.name)
            state.forget_fragments(course.name)
            state.last_lesson = None
            response.say(f"✓ Reset {_plural(count, 'lesson')}", 'success')
        else:
            response.say("Cancelled.", 'info')
        self._show_lesson_menu(state, response)

    def _select_lesson(self, state: TutoringState, number: int, response: TutoringResponse):
        lesson = state.course.lessons[number - 1]
        progress = self.store.get(state.course.name, lesson.name)
        if progress.completed:
            state.pending_lesson = number
            state.phase = SessionPhase.AWAITING_RESTART_CONFIRM
            response.say("You've already completed this lesson!")
            response.say("Restart it? (yes/no)")
            return
        self._enter_lesson(state, number, progress, response)

    def _handle_restart_confirm(self, state: TutoringState, text: str, response: TutoringResponse):
        number = state.pending_lesson
        state.pending_lesson = None
        if text.lower() in CONFIRM_WORDS and number is not None:
            lesson = state.course.lessons[number - 1]
            progress = Progress(course_name=state.course.name, lesson_name=lesson.name)
            self.store.save(progress)
            state.forget_fragments(state.course.name, lesson.name)
            self._enter_lesson(state, number, progress, response)
            return
        self._show_lesson_menu(state, response)

    # ------------------------------------------------------------------
    # Inside a lesson
    # ------------------------------------------------------------------

    def _enter_lesson(self, state: TutoringState, number: int, progress: Progress,
                      response: TutoringResponse):
        lesson = state.course.lessons[number - 1]
        state.lesson = lesson
        state.progress = progress
        state.last_lesson = lesson.name
        state.just_completed = False
        state.reset_question()

        response.say(f"| {lesson.title or lesson.name}", 'title')
        response.show(lesson.description, 'info')

        index = progress.current_question_index
        if 1 < index <= len(lesson):
            response.say(f"Resuming at question {index} of {len(lesson)}.", 'info')
            # earlier questions may have created bindings later ones rely on
            for earlier in lesson.questions[:index - 1]:
                self._run_setup(earlier, state, response)

        self._present(state, response)

    def _run_setup(self, question: Question, state: TutoringState, response: TutoringResponse):
        setup = getattr(question, 'setup', '')
        if not setup:
            return
        result = evaluate(setup, state.context)
        if not result.success:
            logger.warning("Setup for question failed: %s", result.error)
            response.say("Note: Some variables from previous questions may not be available.",
                         'info')

    def _present(self, state: TutoringState, response: TutoringResponse):
        """Show questions from the stored position until one needs input"""
        lesson = state.lesson
        progress = state.progress

        while True:
            state.phase = SessionPhase.DISPLAYING
            index = progress.current_question_index
            if index > len(lesson):
                self._complete(state, response)
                return

            question = lesson.question(index)
            self._run_setup(question, state, response)

            if question.is_scored():
                response.say(f"--- Question {lesson.scored_number(index)} of "
                             f"{lesson.scored_count()} ---", 'info')
            for line in question.display():
                response.show(line)

            if question.kind == QuestionKind.MESSAGE:
                self._advance(state)
                continue

            if question.kind == QuestionKind.MULTISTEP_CODE:
                self._begin_multistep(state, question, response)
            else:
                state.phase = SessionPhase.AWAITING_ANSWER
            return

    def _handle_displaying(self, state: TutoringState, text: str, response: TutoringResponse):
        self._present(state, response)

    def _advance(self, state: TutoringState):
        """Move past the current question and persist"""
        progress = state.progress
        index = progress.current_question_index
        progress.multistep_cursor.pop(index, None)
        state.fragment_cache.pop(state.fragment_key(), None)
        progress.current_question_index = index + 1
        state.reset_question()
        self.store.save(progress)

    def _complete(self, state: TutoringState, response: TutoringResponse):
        lesson = state.lesson
        progress = state.progress
        progress.completed = True
        progress.current_question_index = len(lesson) + 1
        progress.multistep_cursor.clear()
        self.store.save(progress)

        response.say("=" * 60, 'title')
        response.say("| Congratulations!", 'title')
        response.say("=" * 60, 'title')
        response.say(f"You've completed {lesson.title or lesson.name}!", 'success')
        response.say(f"Score: {progress.correct_answers}/{lesson.scored_count()}")

        state.lesson = None
        state.progress = None
        state.just_completed = True
        self._show_lesson_menu(state, response)
        state.phase = SessionPhase.COMPLETE

    def _leave_lesson(self, state: TutoringState):
        """Persist the current position and drop in-lesson state"""
        question = state.current_question()
        if question is not None and question.kind == QuestionKind.MULTISTEP_CODE:
            state.fragment_cache[state.fragment_key()] = list(state.fragments)
        self.store.save(state.progress)
        state.lesson = None
        state.progress = None
        state.reset_question()

    def _end(self, state: TutoringState, response: TutoringResponse):
        state.phase = SessionPhase.ENDED
        response.say("Goodbye! Run swirlpy again to continue later.")

    def _handle_ended(self, state: TutoringState, text: str, response: TutoringResponse):
        pass

    def _navigation(self, state: TutoringState, question: Question, lower: str,
                    response: TutoringResponse) -> bool:
        """Handle commands shared by every answer prompt. True if one was handled."""
        if lower in HINT_WORDS:
            step = state.step if question.kind == QuestionKind.MULTISTEP_CODE else None
            hint = question.hint_text(step)
            if hint.is_empty():
                response.say("No hint available for this "
                             f"{'step' if step is not None else 'question'}.", 'hint')
            else:
                response.say("Hint:", 'hint')
                response.show(hint, 'hint')
            return True

        if lower in SKIP_WORDS:
            response.say("Skipping this question...", 'info')
            self._advance(state)
            self._present(state, response)
            return True

        if lower in MENU_WORDS:
            response.say("Saving progress and returning to lesson menu...", 'info')
            self._leave_lesson(state)
            self._show_lesson_menu(state, response)
            return True

        if lower in EXIT_WORDS:
            self._leave_lesson(state)
            response.say("Progress saved!", 'success')
            self._end(state, response)
            return True

        return False

    def _echo(self, question: Question, result, response: TutoringResponse):
        if question.kind in EVALUATED_KINDS and result.success and result.value is not None:
            response.say(repr(result.value))

    def _handle_answer(self, state: TutoringState, text: str, response: TutoringResponse):
        question = state.current_question()
        lower = text.lower()
        if self._navigation(state, question, lower, response):
            return

        if question.kind == QuestionKind.LINK:
            if lower in CONFIRM_WORDS:
                try:
                    self.link_opener(question.link)
                except Exception as e:
                    logger.warning("Could not open %s: %s", question.link, e)
                    response.say(f"Could not open the link. Visit {question.link}", 'error')
            self._advance(state)
            self._present(state, response)
            return

        outcome, result = question.check_answer(text, state.context)
        state.attempts += 1
        state.progress.attempts += 1
        self._echo(question, result, response)

        if outcome.correct:
            state.progress.correct_answers += 1
            response.say(outcome.message or "✓ Correct!", 'success')
            self._advance(state)
            self._present(state, response)
            return

        response.say(f"✗ {outcome.message or 'Not quite right.'}", 'error')
        if state.attempts < self.max_attempts:
            response.say(f"Try again (attempt {state.attempts + 1} of {self.max_attempts}, "
                         f"or type 'hint' for help)", 'hint')
            self.store.save(state.progress)
            return

        expected = question.expected_answer()
        if expected:
            response.say(f"The correct answer was: {expected}", 'info')
        hint = question.hint_text()
        if not hint.is_empty():
            response.show(hint, 'hint')
        self._advance(state)
        self._present(state, response)

    # ------------------------------------------------------------------
    # Multi-step questions
    # ------------------------------------------------------------------

    def _begin_multistep(self, state: TutoringState, question: MultistepCodeQ,
                         response: TutoringResponse):
        state.phase = SessionPhase.MULTI_STEP
        progress = state.progress
        index = progress.current_question_index

        cached = state.fragment_cache.pop(state.fragment_key(), None)
        if cached is not None:
            state.fragments = cached
            state.step = min(len(cached) + 1, question.required_steps + 1)
        else:
            # fragments from an earlier process are gone and the final check
            # re-runs all of them, so a stored step past 1 can't be honoured
            state.fragments = []
            state.step = 1
        progress.multistep_cursor[index] = state.step
        self.store.save(progress)

        response.say("Multi-step question: enter code line by line, then type 'done'.", 'info')
        self._prompt_step(state, question, response)

    def _prompt_step(self, state: TutoringState, question: MultistepCodeQ,
                     response: TutoringResponse):
        if state.step <= question.required_steps:
            response.say(f"Step {state.step} of {question.required_steps}:", 'info')
            prompt = question.step_prompt(state.step)
            if prompt is not None:
                response.show(prompt)
        else:
            response.say("All steps entered! Type 'done' to finish, or continue entering code.",
                         'info')

    def _handle_multistep(self, state: TutoringState, text: str, response: TutoringResponse):
        question = state.current_question()
        lower = text.lower()
        if self._navigation(state, question, lower, response):
            return

        if lower in RESTART_QUESTION_WORDS:
            response.say("Restarting question from step 1...", 'info')
            state.fragments = []
            state.step = 1
            state.progress.multistep_cursor[state.progress.current_question_index] = 1
            self.store.save(state.progress)
            self._prompt_step(state, question, response)
            return

        if lower in DONE_WORDS:
            self._finish_multistep(state, question, response)
            return

        result = evaluate(text, state.context)
        if not result.success:
            response.say(f"✗ Error: {result.error}", 'error')
            response.say("Try again, or type 'hint' for help.", 'hint')
            return

        self._echo(question, result, response)
        state.fragments.append(text)
        state.step = min(state.step + 1, question.required_steps + 1)
        state.progress.multistep_cursor[state.progress.current_question_index] = state.step
        self.store.save(state.progress)
        self._prompt_step(state, question, response)

    def _finish_multistep(self, state: TutoringState, question: MultistepCodeQ,
                          response: TutoringResponse):
        remaining = question.required_steps + 1 - state.step
        if remaining > 0:
            response.say(f"Please complete all {question.required_steps} steps. "
                         f"{_plural(remaining, 'step')} remaining", 'error')
            return

        outcome, result = question.check_final('\n'.join(state.fragments), state.context)
        state.progress.attempts += 1
        if outcome.correct:
            state.progress.correct_answers += 1
            response.say(outcome.message or "✓ Correct! You've completed all steps successfully!",
                         'success')
        else:
            response.say(f"✗ {outcome.message}", 'error')
        self._advance(state)
        self._present(state, response)
