#!/usr/bin/env python3
"""
Question, Lesson and Course definitions.

Every question has a kind. The kind decides whether the question is scored,
how it is displayed, how the learner's input is turned into an
EvaluationResult, and which validator is used when the question does not
supply its own.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from .display import DisplayText, as_display
from .evaluator import EvaluationContext, EvaluationResult, evaluate
from .validators import (
    EqualValueValidator,
    NumericAnswerValidator,
    StringAnswerValidator,
    ValidationOutcome,
    Validator,
    choice_validator,
    multiple_choice_validator,
)


class QuestionKind(Enum):
    """The closed set of question kinds"""
    MESSAGE = 'message'                    # display only
    CODE = 'code'                          # one snippet, value checked
    MULTISTEP_CODE = 'multistep_code'      # several snippets, finished with 'done'
    STRING = 'string'                      # raw text answer
    NUMERIC = 'numeric'                    # number, interval or set of numbers
    CHOICE = 'choice'                      # pick one numbered option
    MULTIPLE_CHOICE = 'multiple_choice'    # pick several numbered options
    LINK = 'link'                          # offer to open a link


# Kinds excluded from scoring and attempt accounting
UNSCORED_KINDS = frozenset({QuestionKind.MESSAGE, QuestionKind.LINK})

# Kinds whose input is run through the evaluator
EVALUATED_KINDS = frozenset({QuestionKind.CODE, QuestionKind.MULTISTEP_CODE, QuestionKind.NUMERIC})


@dataclass
class Question:
    """Fields shared by every question kind"""
    kind: ClassVar[QuestionKind]

    text: Any = ''
    hint: Any = ''

    def is_scored(self) -> bool:
        return self.kind not in UNSCORED_KINDS

    def display(self) -> List[DisplayText]:
        """Text for the question plus any kind-specific extras"""
        lines = [as_display(self.text)]
        extras = _DISPLAY_EXTRAS.get(self.kind)
        if extras:
            lines.extend(extras(self))
        return lines

    def default_validator(self) -> Optional[Validator]:
        factory = _DEFAULT_VALIDATORS.get(self.kind)
        return factory() if factory else None

    def effective_validator(self) -> Optional[Validator]:
        """The question's own validator if it has one, else the default"""
        validator = getattr(self, 'validator', None)
        return validator if validator is not None else self.default_validator()

    def evaluate_input(self, raw_input: str, context: EvaluationContext) -> EvaluationResult:
        """Turn what the learner typed into an EvaluationResult"""
        if self.kind in EVALUATED_KINDS:
            return evaluate(raw_input, context)
        return EvaluationResult.ok(raw_input.strip(), context)

    def check_answer(self, raw_input: str,
                     context: EvaluationContext) -> Tuple[ValidationOutcome, EvaluationResult]:
        """Evaluate the input and validate it"""
        result = self.evaluate_input(raw_input, context)
        if not result.success:
            return ValidationOutcome.failed(f"Error: {result.error}"), result

        validator = self.effective_validator()
        if validator is None:
            return ValidationOutcome.passed(), result
        return validator(raw_input, self, result), result

    def hint_text(self, step: Optional[int] = None) -> DisplayText:
        return as_display(self.hint)

    def expected_answer(self) -> str:
        """Human readable form of the expected answer ('' when there is none)"""
        answer = getattr(self, 'answer', None)
        return '' if answer is None else repr(answer)


@dataclass
class MessageQ(Question):
    """Display-only text; no answer required"""
    kind: ClassVar[QuestionKind] = QuestionKind.MESSAGE


@dataclass
class CodeQ(Question):
    """
    Single-step code question. The learner enters one snippet (several
    statements separated by ';' or newlines are fine) and its value is
    compared with ``answer``.

    Example:
        CodeQ(text="Add 5 and 3", answer=8, hint="Type: 5 + 3")
    """
    kind: ClassVar[QuestionKind] = QuestionKind.CODE

    answer: Any = None
    validator: Optional[Validator] = None
    setup: str = ''


@dataclass
class MultistepCodeQ(Question):
    """
    Code entered over several prompts, one fragment per step, finished with
    'done'. The fragments are joined and evaluated once more; the value is
    compared with ``answer`` (any successful run passes when it is None).
    """
    kind: ClassVar[QuestionKind] = QuestionKind.MULTISTEP_CODE

    answer: Any = None
    steps: List[Any] = field(default_factory=list)
    step_hints: List[Any] = field(default_factory=list)
    required_steps: Optional[int] = None
    validator: Optional[Validator] = None
    setup: str = ''

    def __post_init__(self):
        if self.required_steps is None:
            self.required_steps = len(self.steps)
        self.required_steps = max(1, self.required_steps)

    def step_prompt(self, step: int) -> Optional[DisplayText]:
        if 1 <= step <= len(self.steps):
            prompt = as_display(self.steps[step - 1])
            return None if prompt.is_empty() else prompt
        return None

    def hint_text(self, step: Optional[int] = None) -> DisplayText:
        """Hint for the current step, falling back to the question hint"""
        if step is not None and 1 <= step <= len(self.step_hints):
            step_hint = as_display(self.step_hints[step - 1])
            if not step_hint.is_empty():
                return step_hint
        return as_display(self.hint)

    def check_final(self, source: str,
                    context: EvaluationContext) -> Tuple[ValidationOutcome, EvaluationResult]:
        """Evaluate the joined fragments and compare with the answer"""
        result = evaluate(source, context)
        if not result.success:
            return ValidationOutcome.failed(f"Error in final evaluation: {result.error}"), result
        if self.validator is None and self.answer is None:
            return ValidationOutcome.passed(), result
        outcome = self.effective_validator()(source, self, result)
        if outcome.correct or self.validator is not None:
            return outcome, result
        return ValidationOutcome.failed(
            f"All steps executed, but the result doesn't match. "
            f"Your result: {result.value!r}. Expected: {self.answer!r}"
        ), result


@dataclass
class StringQ(Question):
    """
    Text answer. ``answer`` may be a string (exact match after stripping
    whitespace), a compiled regular expression (searched), or a callable
    taking the learner's text.
    """
    kind: ClassVar[QuestionKind] = QuestionKind.STRING

    answer: Any = ''
    validator: Optional[Validator] = None
    setup: str = ''

    def expected_answer(self) -> str:
        pattern = getattr(self.answer, 'pattern', None)
        if pattern is not None:
            return f"anything matching /{pattern}/"
        if callable(self.answer):
            return ''
        return str(self.answer)


@dataclass
class NumericQ(Question):
    """
    Numeric answer. ``answer`` is a number (exact), a ``(low, high)`` tuple
    (closed interval) or a container of accepted numbers.
    """
    kind: ClassVar[QuestionKind] = QuestionKind.NUMERIC

    answer: Any = None
    validator: Optional[Validator] = None
    setup: str = ''

    def expected_answer(self) -> str:
        if isinstance(self.answer, tuple):
            low, high = self.answer
            return f"a number between {low} and {high}"
        return super().expected_answer()


@dataclass
class ChoiceQ(Question):
    """Pick one of ``choices``; ``answer`` is the 1-based number of the right one"""
    kind: ClassVar[QuestionKind] = QuestionKind.CHOICE

    choices: List[Any] = field(default_factory=list)
    answer: int = 0
    validator: Optional[Validator] = None
    setup: str = ''

    def expected_answer(self) -> str:
        return _choice_label(self, self.answer)


@dataclass
class MultipleChoiceQ(Question):
    """Pick every correct option; ``answer`` lists their 1-based numbers"""
    kind: ClassVar[QuestionKind] = QuestionKind.MULTIPLE_CHOICE

    choices: List[Any] = field(default_factory=list)
    answer: List[int] = field(default_factory=list)
    validator: Optional[Validator] = None
    setup: str = ''

    def expected_answer(self) -> str:
        return ', '.join(_choice_label(self, i) for i in sorted(self.answer))


@dataclass
class LinkQ(Question):
    """Offer to open a link (a video, an article); not scored"""
    kind: ClassVar[QuestionKind] = QuestionKind.LINK

    link: str = ''


def _choice_label(question: Any, number: int) -> str:
    if 1 <= number <= len(question.choices):
        return f"{number} ({as_display(question.choices[number - 1]).render()})"
    return str(number)


def _choice_lines(question: Any) -> List[DisplayText]:
    lines = []
    for i, choice in enumerate(question.choices, 1):
        text = as_display(choice)
        lines.append(DisplayText(f"  {i}. {text.render()}", markdown=text.resolve().markdown))
    return lines


def _link_lines(question: LinkQ) -> List[DisplayText]:
    return [DisplayText(question.link, style='info'), DisplayText("Open link? (yes/no)")]


_DISPLAY_EXTRAS: Dict[QuestionKind, Callable[[Any], List[DisplayText]]] = {
    QuestionKind.CHOICE: _choice_lines,
    QuestionKind.MULTIPLE_CHOICE: _choice_lines,
    QuestionKind.LINK: _link_lines,
}

_DEFAULT_VALIDATORS: Dict[QuestionKind, Callable[[], Validator]] = {
    QuestionKind.CODE: EqualValueValidator,
    QuestionKind.MULTISTEP_CODE: EqualValueValidator,
    QuestionKind.STRING: StringAnswerValidator,
    QuestionKind.NUMERIC: NumericAnswerValidator,
    QuestionKind.CHOICE: choice_validator,
    QuestionKind.MULTIPLE_CHOICE: multiple_choice_validator,
}


@dataclass
class Lesson:
    """An ordered sequence of questions"""
    name: str                 # identity used for progress keys and menus
    title: Any = ''
    description: Any = ''
    questions: List[Question] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.questions)

    def question(self, index: int) -> Question:
        """Question by 1-based index"""
        if index < 1:
            raise IndexError(f"Question index must be 1 or more, got {index}")
        return self.questions[index - 1]

    def scored_count(self) -> int:
        return sum(1 for q in self.questions if q.is_scored())

    def scored_number(self, index: int) -> int:
        """Position of the question at ``index`` among scored questions"""
        return sum(1 for q in self.questions[:index] if q.is_scored())


@dataclass
class Course:
    """An ordered sequence of lessons"""
    name: str
    description: str = ''
    lessons: List[Lesson] = field(default_factory=list)

    def lesson_named(self, name: str) -> Optional[Lesson]:
        for lesson in self.lessons:
            if lesson.name == name:
                return lesson
        return None
