#!/usr/bin/env python3
"""
Tests for the question model and displayable text.
"""

import pytest

from swirlpy.tutoring.display import DisplayText, as_display, md
from swirlpy.tutoring.evaluator import EvaluationContext
from swirlpy.tutoring.questions import (
    ChoiceQ,
    CodeQ,
    Course,
    Lesson,
    LinkQ,
    MessageQ,
    MultipleChoiceQ,
    MultistepCodeQ,
    NumericQ,
    QuestionKind,
    StringQ,
)
from swirlpy.tutoring.validators import EqualValueValidator, InputValidator


class TestDisplayText:
    """Tests for DisplayText"""

    def test_plain(self):
        text = as_display("hello")
        assert text.render() == "hello"
        assert not text.markdown

    def test_markdown(self):
        assert md("**bold**").resolve().markdown

    def test_thunk_is_called_on_render(self):
        calls = []
        text = DisplayText(lambda: calls.append(1) or "computed")
        assert calls == []
        assert text.render() == "computed"

    def test_thunk_returning_display_text(self):
        text = as_display(lambda: md("*hi*"), style='hint')
        resolved = text.resolve()
        assert resolved.content == "*hi*"
        assert resolved.markdown
        assert resolved.style == 'hint'

    def test_empty(self):
        assert as_display(None).is_empty()
        assert as_display("  ").is_empty()
        assert not as_display("x").is_empty()


class TestQuestionKinds:
    """Tests for the per-kind question contract"""

    def test_scored(self):
        assert not MessageQ(text="hi").is_scored()
        assert not LinkQ(link="https://example.com").is_scored()
        for question in (CodeQ(), MultistepCodeQ(steps=['a']), StringQ(), NumericQ(),
                         ChoiceQ(), MultipleChoiceQ()):
            assert question.is_scored()

    def test_kind_tags(self):
        assert CodeQ.kind == QuestionKind.CODE
        assert MultistepCodeQ.kind == QuestionKind.MULTISTEP_CODE
        assert LinkQ.kind == QuestionKind.LINK

    def test_choice_display_enumerates(self):
        question = ChoiceQ(text="Pick one", choices=['red', 'green'], answer=1)
        rendered = [line.render() for line in question.display()]
        assert rendered == ["Pick one", "  1. red", "  2. green"]

    def test_link_display_shows_link(self):
        rendered = [line.render() for line in LinkQ(text="Docs", link="https://x.org").display()]
        assert "https://x.org" in rendered

    def test_default_validators(self):
        assert isinstance(CodeQ().default_validator(), EqualValueValidator)
        assert isinstance(ChoiceQ().default_validator(), InputValidator)
        assert MessageQ().default_validator() is None

    def test_string_input_not_evaluated(self):
        result = StringQ(answer='x').evaluate_input("undefined name", EvaluationContext())
        assert result.success
        assert result.value == "undefined name"

    def test_code_input_evaluated(self):
        result = CodeQ().evaluate_input("2 ** 3", EvaluationContext())
        assert result.value == 8

    def test_expected_answer_text(self):
        assert CodeQ(answer=8).expected_answer() == "8"
        assert CodeQ().expected_answer() == ""
        assert NumericQ(answer=(1, 2)).expected_answer() == "a number between 1 and 2"
        assert ChoiceQ(choices=['a', 'b'], answer=2).expected_answer() == "2 (b)"
        assert MultipleChoiceQ(choices=['a', 'b', 'c'], answer=[3, 1]).expected_answer() == "1 (a), 3 (c)"


class TestMultistep:
    """Tests for MultistepCodeQ"""

    def test_required_steps_default(self):
        assert MultistepCodeQ(steps=['a', 'b', 'c']).required_steps == 3
        assert MultistepCodeQ(steps=['a', 'b'], required_steps=1).required_steps == 1

    def test_step_hint_falls_back(self):
        question = MultistepCodeQ(steps=['a', 'b'], step_hints=['first', ''], hint='general')
        assert question.hint_text(1).render() == 'first'
        assert question.hint_text(2).render() == 'general'
        assert question.hint_text(3).render() == 'general'

    def test_final_check_matches_answer(self):
        question = MultistepCodeQ(steps=['a', 'b'], answer=6)
        outcome, result = question.check_final("a = 2\na * 3", EvaluationContext())
        assert outcome.correct
        assert result.value == 6

    def test_final_check_mismatch(self):
        question = MultistepCodeQ(steps=['a'], answer=6)
        outcome, _ = question.check_final("5", EvaluationContext())
        assert not outcome.correct
        assert "Your result: 5" in outcome.message

    def test_final_check_uses_default_validator(self):
        question = MultistepCodeQ(steps=['a'], answer=6)
        assert isinstance(question.effective_validator(), EqualValueValidator)
        outcome, _ = question.check_final("a = 2\na * 3.0", EvaluationContext())
        assert outcome.correct

    def test_final_check_custom_validator(self):
        question = MultistepCodeQ(
            steps=['a'],
            answer=0.3,
            validator=EqualValueValidator(cmp=lambda value, expected: abs(value - expected) < 1e-9),
        )
        outcome, _ = question.check_final("0.1 + 0.2", EvaluationContext())
        assert outcome.correct
        assert not MultistepCodeQ(steps=['a'], answer=0.3).check_final(
            "0.1 + 0.2", EvaluationContext())[0].correct

    def test_final_check_without_answer(self):
        outcome, _ = MultistepCodeQ(steps=['a']).check_final("x = 1", EvaluationContext())
        assert outcome.correct


class TestLessonAndCourse:
    """Tests for Lesson and Course"""

    def test_scored_numbering(self):
        lesson = Lesson(name='l', questions=[MessageQ(), CodeQ(), LinkQ(), CodeQ()])
        assert len(lesson) == 4
        assert lesson.scored_count() == 2
        assert lesson.scored_number(2) == 1
        assert lesson.scored_number(4) == 2
        assert isinstance(lesson.question(1), MessageQ)

    def test_question_index_is_one_based(self):
        lesson = Lesson(name='l', questions=[MessageQ(), CodeQ()])
        with pytest.raises(IndexError):
            lesson.question(0)
        with pytest.raises(IndexError):
            lesson.question(3)

    def test_lesson_named(self):
        course = Course(name='c', lessons=[Lesson(name='a'), Lesson(name='b')])
        assert course.lesson_named('b').name == 'b'
        assert course.lesson_named('z') is None
