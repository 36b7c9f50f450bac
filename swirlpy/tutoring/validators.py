#!/usr/bin/env python3
"""
Validators decide whether a learner's answer is correct.

A validator is called as ``validator(raw_input, question, result)`` where
``raw_input`` is the text the learner typed, ``question`` the question being
answered (its ``answer`` is the usual reference) and ``result`` the
EvaluationResult for the input. It returns a ValidationOutcome and never
raises.

InputValidator inspects the typed text, OutputValidator the evaluated value.
all_of / any_of combine validators and are validators themselves:

    validator = all_of(
        same_type_validator(int),
        OutputValidator(lambda value, _: value > 0, "Not positive"),
    )
"""

import ast
import numbers
import operator
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from .evaluator import EvaluationResult


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of a validator: correct flag plus a message for the learner"""
    correct: bool
    message: str = ''

    @classmethod
    def passed(cls) -> 'ValidationOutcome':
        return cls(True, '')

    @classmethod
    def failed(cls, message: str) -> 'ValidationOutcome':
        return cls(False, message)

    def __iter__(self):
        # allows `correct, message = outcome`
        return iter((self.correct, self.message))


def _answer_of(question: Any) -> Any:
    return getattr(question, 'answer', None)


def _coerce_outcome(value: Any, message: str) -> ValidationOutcome:
    """Turn a predicate's return value into an outcome"""
    if isinstance(value, ValidationOutcome):
        return value
    if isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], bool):
        return ValidationOutcome(value[0], '' if value[0] else str(value[1]))
    return ValidationOutcome.passed() if value else ValidationOutcome.failed(message)


class Validator(ABC):
    """Base class for validators"""

    @abstractmethod
    def check(self, raw_input: str, question: Any, result: EvaluationResult) -> ValidationOutcome:
        """Decide correctness; may raise, __call__ turns errors into failures"""

    def __call__(self, raw_input: str, question: Any, result: EvaluationResult) -> ValidationOutcome:
        try:
            return self.check(raw_input, question, result)
        except Exception as e:
            return ValidationOutcome.failed(f"Could not check your answer: {type(e).__name__}: {e}")


class InputValidator(Validator):
    """Checks the raw input with ``predicate(raw_input, question_answer)``"""

    def __init__(self, predicate: Callable[[str, Any], Any], message: str = "Input is not correct"):
        self.predicate = predicate
        self.message = message

    def check(self, raw_input, question, result):
        return _coerce_outcome(self.predicate(raw_input, _answer_of(question)), self.message)


class OutputValidator(Validator):
    """Checks the evaluated value with ``predicate(value, question_answer)``"""

    def __init__(self, predicate: Callable[[Any, Any], Any], message: str = "Output is incorrect"):
        self.predicate = predicate
        self.message = message

    def check(self, raw_input, question, result):
        if result is None or not result.success:
            error = result.error if result is not None else 'nothing was evaluated'
            return ValidationOutcome.failed(f"Error: {error}")
        return _coerce_outcome(self.predicate(result.value, _answer_of(question)), self.message)


class EqualValueValidator(Validator):
    """
    Default validator for code questions: the evaluated value must equal the
    expected answer. The failure message reports what the code produced.
    """

    def __init__(self, answer: Any = None, cmp: Callable[[Any, Any], bool] = operator.eq):
        self.answer = answer
        self.cmp = cmp

    def check(self, raw_input, question, result):
        if not result.success:
            return ValidationOutcome.failed(f"Error: {result.error}")

        question_answer = _answer_of(question)
        expected = self.answer if question_answer is None else question_answer
        value = result.value

        if self.cmp(value, expected):
            return ValidationOutcome.passed()
        if type(value) is type(expected):
            return ValidationOutcome.failed(
                f"Not quite. You got {value!r}, the right type of answer, but not the expected answer."
            )
        return ValidationOutcome.failed(
            f"Your code produced {value!r} (type: {type(value).__name__})"
        )


class AllOf(Validator):
    """Correct when every validator is; stops at the first failure"""

    def __init__(self, validators: Sequence[Validator]):
        self.validators = tuple(validators)

    def check(self, raw_input, question, result):
        for validator in self.validators:
            outcome = validator(raw_input, question, result)
            if not outcome.correct:
                return outcome
        return ValidationOutcome.passed()


class AnyOf(Validator):
    """Correct when some validator is; otherwise reports the last failure"""

    def __init__(self, validators: Sequence[Validator]):
        self.validators = tuple(validators)

    def check(self, raw_input, question, result):
        outcome = ValidationOutcome.failed("No accepted answer matched")
        for validator in self.validators:
            outcome = validator(raw_input, question, result)
            if outcome.correct:
                return outcome
        return outcome


def all_of(*validators: Validator) -> AllOf:
    """AND combinator"""
    return AllOf(validators)


def any_of(*validators: Validator) -> AnyOf:
    """OR combinator"""
    return AnyOf(validators)


# --- expression helpers

WILDCARD = '_'


def _parse(source: str) -> ast.AST:
    """Parse source as a single expression if possible, else as statements.
    Raises SyntaxError."""
    source = source.strip()
    try:
        return ast.parse(source, mode='eval').body
    except SyntaxError:
        module = ast.parse(source, mode='exec')
        if len(module.body) == 1:
            stmt = module.body[0]
            return stmt.value if isinstance(stmt, ast.Expr) else stmt
        return module


def _same_tree(a: Any, b: Any, wildcard: bool = False) -> bool:
    """Structural equality of two AST nodes, ignoring positions"""
    if wildcard and isinstance(b, ast.Name) and b.id == WILDCARD:
        return True
    if isinstance(a, ast.AST) and isinstance(b, ast.AST):
        if type(a) is not type(b):
            return False
        for field in a._fields:
            if field == 'ctx':
                continue
            if not _same_tree(getattr(a, field, None), getattr(b, field, None), wildcard):
                return False
        return True
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(_same_tree(x, y, wildcard) for x, y in zip(a, b))
    return a == b


def _contains(tree: ast.AST, pattern: ast.AST) -> bool:
    return any(_same_tree(node, pattern, wildcard=True) for node in ast.walk(tree))


def _as_sequence(value: Any) -> tuple:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return (value,)
    return tuple(value)


def _called_name(node: ast.Call) -> Optional[str]:
    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


# --- validators checking the input

def same_expression_validator(answer: Any = None,
                              message: str = "Expression does not match the expected expression") -> InputValidator:
    """
    Input parses to the same expression as ``answer`` (or any of several).
    Whitespace and redundant parentheses do not matter.
    """
    def predicate(raw_input, question_answer):
        expected = question_answer if answer is None else answer
        try:
            user_tree = _parse(raw_input)
        except SyntaxError:
            return False
        return any(_same_tree(user_tree, _parse(target)) for target in _as_sequence(expected))

    return InputValidator(predicate, message)


def has_expression_validator(pattern: Any = None,
                             message: str = "Expression does not contain the expected sub-expression") -> InputValidator:
    """
    Input contains ``pattern`` as a sub-expression. ``_`` in the pattern
    matches any sub-expression, e.g. ``"math.exp(_)"``.
    """
    def predicate(raw_input, question_answer):
        target = question_answer if pattern is None else pattern
        try:
            tree = _parse(raw_input)
        except SyntaxError:
            return False
        return _contains(tree, _parse(target))

    return InputValidator(predicate, message)


def call_function_validator(name: Any = None,
                            message: str = "Expression does not contain the expected function call") -> InputValidator:
    """Input calls the function ``name`` somewhere"""
    def predicate(raw_input, question_answer):
        target = question_answer if name is None else name
        targets = {getattr(t, '__name__', t) for t in _as_sequence(target)}
        try:
            tree = ast.parse(raw_input.strip(), mode='exec')
        except SyntaxError:
            return False
        return any(isinstance(node, ast.Call) and _called_name(node) in targets
                   for node in ast.walk(tree))

    return InputValidator(predicate, message)


def match_input_validator(pattern: Any = None,
                          message: str = "Input does not match the expected pattern") -> InputValidator:
    """Raw input matches a regular expression"""
    def predicate(raw_input, question_answer):
        regex = question_answer if pattern is None else pattern
        return re.search(regex, raw_input) is not None

    return InputValidator(predicate, message)


# --- validators checking the output

def same_value_validator(answer: Any = None, cmp: Callable[[Any, Any], bool] = operator.eq,
                         message: str = "Value does not match answer") -> OutputValidator:
    """Evaluated value equals ``answer``"""
    def predicate(value, question_answer):
        expected = question_answer if answer is None else answer
        return cmp(value, expected)

    return OutputValidator(predicate, message)


def match_output_validator(pattern: Any = None,
                           message: str = "Output does not match the expected pattern") -> OutputValidator:
    """Evaluated value is a string matching a regular expression"""
    def predicate(value, question_answer):
        regex = question_answer if pattern is None else pattern
        return isinstance(value, str) and re.search(regex, value) is not None

    return OutputValidator(predicate, message)


def in_interval_validator(interval: Any = None,
                          message: str = "Value is not in the expected interval") -> OutputValidator:
    """Evaluated value lies in the closed interval ``(low, high)``"""
    def predicate(value, question_answer):
        low, high = question_answer if interval is None else interval
        return isinstance(value, numbers.Real) and low <= value <= high

    return OutputValidator(predicate, message)


def in_range_validator(choices: Any = None,
                       message: str = "Value is not one of the expected values") -> OutputValidator:
    """Evaluated value is a member of ``choices``"""
    def predicate(value, question_answer):
        container = question_answer if choices is None else choices
        return value in container

    return OutputValidator(predicate, message)


def same_type_validator(types: Any = None, message: str = "Wrong type") -> OutputValidator:
    """Evaluated value is an instance of ``types`` (a type or several)"""
    def predicate(value, question_answer):
        expected = question_answer if types is None else types
        return isinstance(value, tuple(_as_sequence(expected)))

    return OutputValidator(predicate, message)


class CreatesVariableValidator(Validator):
    """The context the input was evaluated in now binds ``name``"""

    def __init__(self, name: Any = None, message: str = "Variable was not defined"):
        self.name = name
        self.message = message

    def check(self, raw_input, question, result):
        name = _answer_of(question) if self.name is None else self.name
        context = result.context if result is not None else None
        if context is not None and str(name) in context:
            return ValidationOutcome.passed()
        return ValidationOutcome.failed(self.message)


def creates_var_validator(name: Any = None, message: str = "Variable was not defined") -> CreatesVariableValidator:
    return CreatesVariableValidator(name, message)


def creates_function_validator(samples: Any = None,
                               message: str = "Function did not evaluate correctly") -> OutputValidator:
    """
    Evaluated value is callable and maps every sample input to its output.
    ``samples`` is a dict or a sequence of (input, output) pairs; tuple
    inputs are passed as positional arguments.
    """
    def predicate(value, question_answer):
        pairs = question_answer if samples is None else samples
        if not callable(value):
            return False
        pairs = pairs.items() if isinstance(pairs, dict) else pairs
        for sample_input, expected in pairs:
            args = sample_input if isinstance(sample_input, tuple) else (sample_input,)
            try:
                if value(*args) != expected:
                    return False
            except Exception:
                return False
        return True

    return OutputValidator(predicate, message)


# --- default validators for typed questions

class StringAnswerValidator(Validator):
    """Exact match for str answers, regex search for patterns, else a predicate"""

    def check(self, raw_input, question, result):
        value = result.value if result.success else None
        if not isinstance(value, str):
            return ValidationOutcome.failed("Error: answer is not a string")
        answer = _answer_of(question)
        if isinstance(answer, str):
            return same_value_validator(
                answer.strip(), message=f"Not quite. You answered {value!r}."
            )(raw_input, question, result)
        if isinstance(answer, re.Pattern):
            return match_output_validator(answer)(raw_input, question, result)
        return _coerce_outcome(answer(value), "That is not the expected answer")


class NumericAnswerValidator(Validator):
    """Exact match for numbers, closed interval for tuples, membership otherwise"""

    def check(self, raw_input, question, result):
        if not result.success:
            return ValidationOutcome.failed(f"Error: {result.error}")
        value = result.value
        if not isinstance(value, numbers.Number) or isinstance(value, bool):
            return ValidationOutcome.failed("Error: answer is not a number")
        answer = _answer_of(question)
        if isinstance(answer, numbers.Number):
            return EqualValueValidator(answer)(raw_input, question, result)
        if isinstance(answer, tuple):
            return in_interval_validator(answer)(raw_input, question, result)
        return in_range_validator(answer)(raw_input, question, result)


def choice_validator() -> InputValidator:
    """Input is the number of the correct choice"""
    def predicate(raw_input, question_answer):
        try:
            choice = int(raw_input.strip())
        except ValueError:
            return ValidationOutcome.failed(
                "Please enter the corresponding number of the item you wish to select"
            )
        if choice == question_answer:
            return ValidationOutcome.passed()
        return ValidationOutcome.failed("Not quite, try again")

    return InputValidator(predicate)


def multiple_choice_validator() -> InputValidator:
    """Input lists the numbers of exactly the correct choices"""
    def predicate(raw_input, question_answer):
        parts = [p for p in re.split(r'[,\s]+', raw_input.strip()) if p]
        try:
            picked = {int(p) for p in parts}
        except ValueError:
            picked = None
        if not picked:
            return ValidationOutcome.failed(
                "Please enter comma-separated numbers for your selections (e.g. '1,3,4')"
            )
        correct = picked == set(question_answer)
        return ValidationOutcome(correct, '' if correct else "Not quite, try again")

    return InputValidator(predicate)
