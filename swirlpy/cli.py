#!/usr/bin/env python3
"""
swirlpy - Interactive Python lessons in the terminal

Usage:
    swirlpy                         # Start at the course menu
    swirlpy --list                  # List available courses
    swirlpy --progress              # Show saved progress
    swirlpy --reset-course "Python Basics"
"""

import argparse
import logging
from collections import defaultdict

from rich.logging import RichHandler

from .config import get_max_attempts, set_config_value
from .courses import get_available_courses
from .db import ProgressStore


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
    )


def list_courses() -> None:
    """Print available courses with their lessons"""
    courses = get_available_courses()
    if not courses:
        print("No courses installed.")
        return

    print("\nAvailable courses:")
    print("=" * 60)
    for course in courses:
        lessons = len(course.lessons)
        print(f"\n{course.name} ({lessons} lesson{'s' if lessons != 1 else ''})")
        if course.description:
            print(f"  {course.description}")
        for i, lesson in enumerate(course.lessons, 1):
            print(f"    {i}. {lesson.title or lesson.name}")


def show_progress(store: ProgressStore) -> None:
    """Print saved progress grouped by course"""
    records = store.list_all()
    if not records:
        print("No saved progress found.")
        return

    by_course = defaultdict(list)
    for progress in records:
        by_course[progress.course_name].append(progress)

    print("\nYour Progress:")
    print("=" * 60)
    for course_name in sorted(by_course):
        print(f"\n{course_name}")
        for progress in sorted(by_course[course_name], key=lambda p: p.lesson_name):
            if progress.completed:
                status = "✓ Completed"
            else:
                status = f"In progress (question {progress.current_question_index})"
            print(f"  {progress.lesson_name}: {status}, score {progress.correct_answers}")


def main(argv=None):
    """Main CLI entry point"""

    parser = argparse.ArgumentParser(
        description='swirlpy - Learn Python interactively in your terminal',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  swirlpy                                     # Start a session
  swirlpy --list                              # List courses
  swirlpy --progress                          # Show saved progress
  swirlpy --reset-lesson "Python Basics" Strings
  swirlpy --max-attempts 5                    # Allow 5 tries per question
        """
    )

    parser.add_argument('--list', action='store_true', help='List available courses')
    parser.add_argument('--progress', action='store_true', help='Show saved progress')
    parser.add_argument('--delete-progress', action='store_true',
                        help='Delete all saved progress')
    parser.add_argument('--reset-course', metavar='COURSE',
                        help='Delete saved progress for every lesson of a course')
    parser.add_argument('--reset-lesson', nargs=2, metavar=('COURSE', 'LESSON'),
                        help='Delete saved progress for one lesson')
    parser.add_argument('--max-attempts', type=int, metavar='N',
                        help='Attempts allowed per question (saved to config)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.max_attempts is not None:
        if args.max_attempts < 1:
            parser.error('--max-attempts must be at least 1')
        set_config_value('max_attempts', args.max_attempts)
        print(f"Max attempts set to {get_max_attempts()}.")
        return

    if args.list:
        list_courses()
        return

    store = ProgressStore()

    if args.progress:
        show_progress(store)
        return

    if args.delete_progress:
        count = store.delete_all()
        print(f"✓ All progress deleted ({count} record{'s' if count != 1 else ''})")
        return

    if args.reset_course:
        count = store.reset_course(args.reset_course)
        print(f"✓ Reset {count} lesson{'s' if count != 1 else ''} in {args.reset_course}")
        return

    if args.reset_lesson:
        course_name, lesson_name = args.reset_lesson
        if store.reset_lesson(course_name, lesson_name):
            print(f"✓ Reset lesson: {lesson_name}")
        else:
            print(f"Lesson not started yet: {lesson_name}")
        return

    from .repl.session import SwirlREPL
    SwirlREPL().run()


if __name__ == "__main__":
    main()
