#!/usr/bin/env python3
"""
Test suite for the validator algebra.
"""

import re

import pytest

from swirlpy.tutoring.evaluator import EvaluationContext, EvaluationResult, evaluate
from swirlpy.tutoring.questions import ChoiceQ, CodeQ, MultipleChoiceQ, NumericQ, StringQ
from swirlpy.tutoring.validators import (
    EqualValueValidator,
    InputValidator,
    OutputValidator,
    ValidationOutcome,
    all_of,
    any_of,
    call_function_validator,
    creates_function_validator,
    creates_var_validator,
    has_expression_validator,
    in_interval_validator,
    in_range_validator,
    match_input_validator,
    match_output_validator,
    same_expression_validator,
    same_type_validator,
    same_value_validator,
)


def check(validator, raw, question=None, context=None):
    """Evaluate raw input and run the validator on it"""
    context = context or EvaluationContext({'x': 10})
    question = question or CodeQ(text='')
    return validator(raw, question, evaluate(raw, context))


ALWAYS = InputValidator(lambda raw, answer: True)
NEVER_A = InputValidator(lambda raw, answer: False, "first failed")
NEVER_B = InputValidator(lambda raw, answer: False, "second failed")


class TestPrimitives:
    """Tests for InputValidator and OutputValidator"""

    def test_input_validator_sees_raw_text(self):
        validator = InputValidator(lambda raw, answer: raw.startswith('len'))
        assert check(validator, "len('abc')").correct
        assert not check(validator, "3").correct

    def test_input_validator_gets_question_answer(self):
        validator = InputValidator(lambda raw, answer: raw == str(answer))
        assert check(validator, "8", CodeQ(answer=8)).correct

    def test_output_validator_sees_value(self):
        validator = OutputValidator(lambda value, answer: value == 20, "wrong")
        assert check(validator, "x * 2").correct
        outcome = check(validator, "x")
        assert outcome == ValidationOutcome(False, "wrong")

    def test_output_validator_reports_evaluation_error(self):
        outcome = check(OutputValidator(lambda value, answer: True), "1 +")
        assert not outcome.correct
        assert outcome.message.startswith("Error: SyntaxError")

    def test_predicate_can_return_outcome_pair(self):
        validator = OutputValidator(lambda value, answer: (False, "custom message"))
        assert check(validator, "1").message == "custom message"

    def test_never_raises(self):
        """A predicate that blows up gives an incorrect outcome"""
        validator = OutputValidator(lambda value, answer: value['missing'])
        outcome = check(validator, "{}")
        assert not outcome.correct
        assert "KeyError" in outcome.message

    def test_outcome_unpacks(self):
        correct, message = ValidationOutcome.failed("nope")
        assert correct is False
        assert message == "nope"


class TestCombinators:
    """Tests for all_of / any_of"""

    def test_all_of_correct_when_all_are(self):
        assert check(all_of(ALWAYS, ALWAYS), "1").correct

    def test_all_of_reports_first_failure(self):
        assert check(all_of(NEVER_A, NEVER_B), "1").message == "first failed"
        assert check(all_of(ALWAYS, NEVER_B), "1").message == "second failed"

    def test_all_of_short_circuits(self):
        calls = []
        spy = InputValidator(lambda raw, answer: calls.append(raw) or True)
        check(all_of(NEVER_A, spy), "1")
        assert calls == []

    def test_any_of_first_success(self):
        assert check(any_of(NEVER_A, ALWAYS), "1").correct

    def test_any_of_reports_last_failure(self):
        assert check(any_of(NEVER_A, NEVER_B), "1").message == "second failed"

    def test_empty_combinators(self):
        assert check(all_of(), "1").correct
        assert not check(any_of(), "1").correct

    def test_alternative_expressions(self):
        """y = 2*x or y = 3*x accepted, y = 4*x rejected"""
        validator = any_of(
            same_expression_validator("y = 2*x"),
            same_expression_validator("y = 3*x"),
        )
        assert check(validator, "y = 2*x").correct
        assert check(validator, "y = 3 * x").correct
        assert not check(validator, "y = 4*x").correct

    def test_nesting(self):
        validator = all_of(any_of(NEVER_A, ALWAYS), any_of(all_of(ALWAYS), NEVER_B))
        assert check(validator, "1").correct


class TestValueValidators:
    """Tests for validators on the evaluated value"""

    def test_equal_value_correct(self):
        assert check(EqualValueValidator(), "4+4", CodeQ(answer=8)).correct

    def test_equal_value_reports_produced_value(self):
        outcome = check(EqualValueValidator(), "5+2", CodeQ(answer=8))
        assert not outcome.correct
        assert "7" in outcome.message

    def test_equal_value_reports_type(self):
        outcome = check(EqualValueValidator(), "'8'", CodeQ(answer=8))
        assert "type: str" in outcome.message

    @pytest.mark.parametrize('answer', [8, 2.5, 'text', [1, 2], {'a': 1}, (1, 'b'), True])
    def test_code_question_accepts_own_answer(self, answer):
        """Typing the answer itself satisfies the default validator"""
        question = CodeQ(answer=answer)
        outcome, _ = question.check_answer(repr(answer), EvaluationContext())
        assert outcome.correct

    def test_same_value(self):
        assert check(same_value_validator(20), "x * 2").correct
        assert not check(same_value_validator(21), "x * 2").correct

    def test_match_output(self):
        assert check(match_output_validator(r'^he'), "'hello'").correct
        assert not check(match_output_validator(r'^he'), "42").correct

    def test_in_interval(self):
        assert check(in_interval_validator((1, 5)), "5").correct
        assert not check(in_interval_validator((1, 5)), "5.5").correct

    def test_in_range(self):
        assert check(in_range_validator({1, 2}), "2").correct
        assert not check(in_range_validator({1, 2}), "3").correct

    def test_same_type(self):
        assert check(same_type_validator(int), "3").correct
        assert check(same_type_validator((int, float)), "3.0").correct
        assert not check(same_type_validator(int), "'3'").correct

    def test_creates_var(self):
        context = EvaluationContext()
        assert check(creates_var_validator('z'), "z = 1", context=context).correct
        assert not check(creates_var_validator('w'), "1", context=context).correct

    def test_creates_function(self):
        validator = creates_function_validator({1: 2, 5: 10})
        assert check(validator, "lambda n: n * 2").correct
        assert not check(validator, "lambda n: n + 1").correct
        assert not check(validator, "3").correct

    def test_creates_function_tuple_inputs(self):
        validator = creates_function_validator([((1, 2), 3), ((2, 2), 4)])
        assert check(validator, "lambda a, b: a + b").correct

    def test_creates_function_exception_is_mismatch(self):
        validator = creates_function_validator({0: 0})
        outcome = check(validator, "lambda n: 1 / n")
        assert not outcome.correct
        assert outcome.message == "Function did not evaluate correctly"


class TestExpressionValidators:
    """Tests for validators on the typed expression"""

    def test_same_expression_ignores_layout(self):
        assert check(same_expression_validator("x + 1"), "(x+1)").correct

    def test_same_expression_bad_syntax(self):
        assert not check(same_expression_validator("x + 1"), "x +").correct

    def test_has_expression(self):
        validator = has_expression_validator("x * 2")
        assert check(validator, "1 + x * 2").correct
        assert not check(validator, "1 + x * 3").correct

    def test_has_expression_wildcard(self):
        validator = has_expression_validator("abs(_)")
        assert check(validator, "1 + abs(x - 20)").correct
        assert not check(validator, "1 + round(x)").correct

    def test_call_function(self):
        assert check(call_function_validator('len'), "len('abc') + 1").correct
        assert check(call_function_validator(len), "len('abc')").correct
        assert not check(call_function_validator('len'), "'abc'.upper()").correct

    def test_match_input(self):
        assert check(match_input_validator(r'\bx\b'), "x + 1").correct
        assert not check(match_input_validator(r'\bx\b'), "10 + 1").correct


class TestQuestionDefaults:
    """Tests for the default validators of typed questions"""

    def test_string_exact(self):
        question = StringQ(answer='str')
        outcome, _ = question.check_answer("  str ", EvaluationContext())
        assert outcome.correct
        outcome, _ = question.check_answer("int", EvaluationContext())
        assert not outcome.correct

    def test_string_regex(self):
        question = StringQ(answer=re.compile(r'^py', re.IGNORECASE))
        assert question.check_answer("Python", EvaluationContext())[0].correct
        assert not question.check_answer("java", EvaluationContext())[0].correct

    def test_string_predicate(self):
        question = StringQ(answer=lambda text: text.isupper())
        assert question.check_answer("ABC", EvaluationContext())[0].correct
        assert not question.check_answer("abc", EvaluationContext())[0].correct

    def test_numeric_exact(self):
        question = NumericQ(answer=2.5)
        assert question.check_answer("10 / 4", EvaluationContext())[0].correct
        assert not question.check_answer("2", EvaluationContext())[0].correct

    def test_numeric_rejects_non_numbers(self):
        question = NumericQ(answer=1)
        outcome, _ = question.check_answer("True", EvaluationContext())
        assert not outcome.correct
        outcome, _ = question.check_answer("'1'", EvaluationContext())
        assert not outcome.correct

    def test_numeric_interval_and_set(self):
        assert NumericQ(answer=(3, 4)).check_answer("3.14", EvaluationContext())[0].correct
        assert NumericQ(answer={1, 2}).check_answer("2", EvaluationContext())[0].correct
        assert not NumericQ(answer={1, 2}).check_answer("3", EvaluationContext())[0].correct

    def test_numeric_evaluation_error(self):
        outcome, result = NumericQ(answer=1).check_answer("one", EvaluationContext())
        assert not outcome.correct
        assert not result.success
        assert outcome.message.startswith("Error: NameError")

    def test_choice(self):
        """Four options, answer 3"""
        question = ChoiceQ(choices=['a', 'b', 'c', 'd'], answer=3)
        assert question.check_answer("3", EvaluationContext())[0].correct
        assert not question.check_answer("2", EvaluationContext())[0].correct
        outcome, _ = question.check_answer("two", EvaluationContext())
        assert not outcome.correct
        assert "enter the corresponding number" in outcome.message

    def test_multiple_choice(self):
        question = MultipleChoiceQ(choices=['a', 'b', 'c', 'd'], answer=[2, 4])
        for raw in ("2,4", "4 2", "2, 4, 4"):
            assert question.check_answer(raw, EvaluationContext())[0].correct
        assert not question.check_answer("2", EvaluationContext())[0].correct
        outcome, _ = question.check_answer("b,d", EvaluationContext())
        assert "comma-separated numbers" in outcome.message

    def test_override_takes_precedence(self):
        question = CodeQ(answer=8, validator=same_value_validator(9))
        assert not question.check_answer("8", EvaluationContext())[0].correct
        assert question.check_answer("9", EvaluationContext())[0].correct

    def test_validator_given_failed_result(self):
        result = EvaluationResult.failed("NameError: name 'q' is not defined")
        outcome = EqualValueValidator()("q", CodeQ(answer=1), result)
        assert outcome.message == "Error: NameError: name 'q' is not defined"
