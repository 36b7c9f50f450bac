#!/usr/bin/env python3
"""
Interactive tutoring engine for Python lessons.

A lesson is a list of questions. Code the learner types is evaluated in one
namespace shared across the session, checked by validators, and progress is
saved after every scored question so lessons can be resumed.
"""

from .display import DisplayText, md
from .evaluator import EvaluationContext, EvaluationResult, evaluate
from .questions import (
    QuestionKind,
    Question,
    MessageQ,
    CodeQ,
    MultistepCodeQ,
    StringQ,
    NumericQ,
    ChoiceQ,
    MultipleChoiceQ,
    LinkQ,
    Lesson,
    Course,
)
from .state import SessionPhase, TutoringState, TutoringResponse
from .engine import TutoringEngine

__all__ = [
    'DisplayText',
    'md',
    'EvaluationContext',
    'EvaluationResult',
    'evaluate',
    'QuestionKind',
    'Question',
    'MessageQ',
    'CodeQ',
    'MultistepCodeQ',
    'StringQ',
    'NumericQ',
    'ChoiceQ',
    'MultipleChoiceQ',
    'LinkQ',
    'Lesson',
    'Course',
    'SessionPhase',
    'TutoringState',
    'TutoringResponse',
    'TutoringEngine',
]
