"""Shared fixtures for the swirlpy test suite."""

from unittest.mock import Mock

import pytest

from swirlpy.db import ProgressStore
from swirlpy.tutoring import (
    ChoiceQ,
    CodeQ,
    Course,
    Lesson,
    LinkQ,
    MessageQ,
    MultistepCodeQ,
    TutoringEngine,
)


@pytest.fixture(autouse=True)
def swirlpy_home(tmp_path, monkeypatch):
    """Keep config and progress out of the real home directory"""
    home = tmp_path / 'home'
    monkeypatch.setenv('SWIRLPY_HOME', str(home))
    return home


def make_course() -> Course:
    return Course(
        name="Test Course",
        description="Used by the tests",
        lessons=[
            Lesson(
                name="Lesson One",
                title="Lesson One",
                questions=[
                    MessageQ(text="Welcome"),
                    CodeQ(text="Add two numbers to make 8", answer=8, hint="Type 4 + 4"),
                    ChoiceQ(text="Pick the third", choices=['a', 'b', 'c', 'd'], answer=3,
                            hint="It is c"),
                    LinkQ(text="Read more", link="https://example.com/docs"),
                ],
            ),
            Lesson(
                name="Steps",
                title="Steps",
                questions=[
                    MultistepCodeQ(
                        text="Build a value in two steps",
                        steps=["Set a to 2", "Multiply a by 3"],
                        step_hints=["Type: a = 2", ""],
                        answer=6,
                        hint="a = 2 then a * 3",
                    ),
                    CodeQ(text="Type 1", answer=1),
                ],
            ),
        ],
    )


@pytest.fixture
def course():
    return make_course()


@pytest.fixture
def store(tmp_path):
    return ProgressStore(tmp_path / 'progress')


@pytest.fixture
def link_opener():
    return Mock()


@pytest.fixture
def engine(course, store, link_opener):
    return TutoringEngine([course], store, max_attempts=3, link_opener=link_opener)


@pytest.fixture
def drive(engine):
    """Feed lines to the engine, returning the final state and all output"""
    def _drive(*lines, state=None):
        output = []
        if state is None:
            state, response = engine.start()
            output.append(response.text())
        for line in lines:
            state, response = engine.handle(state, line)
            output.append(response.text())
        return state, '\n'.join(output)

    return _drive
