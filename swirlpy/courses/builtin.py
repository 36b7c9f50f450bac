#!/usr/bin/env python3
"""
Built-in "Python Basics" course.
"""

import re

from ..tutoring.display import md
from ..tutoring.questions import (
    ChoiceQ,
    CodeQ,
    Course,
    Lesson,
    LinkQ,
    MessageQ,
    MultipleChoiceQ,
    MultistepCodeQ,
    NumericQ,
    StringQ,
)
from ..tutoring.validators import (
    all_of,
    any_of,
    call_function_validator,
    creates_function_validator,
    creates_var_validator,
    same_expression_validator,
    same_value_validator,
)


def _basic_math() -> Lesson:
    return Lesson(
        name="Basic Math",
        title="Basic Math",
        description="Numbers, operators and your first variable.",
        questions=[
            MessageQ(
                text="Python can be used as a calculator. Type an expression and "
                     "its value is shown straight away.",
            ),
            CodeQ(
                text="Add 5 and 3.",
                answer=8,
                hint="Type: 5 + 3",
            ),
            CodeQ(
                text="Create a variable called x holding the value 10.",
                answer=10,
                hint="Type: x = 10",
                validator=all_of(
                    creates_var_validator('x', "There is no variable called x yet"),
                    same_value_validator(10, message="x should hold 10"),
                ),
            ),
            NumericQ(
                text="What is x divided by 4? You can type an expression or the number.",
                answer=2.5,
                hint="Division with / always gives a float: x / 4",
                setup="x = 10",
            ),
            ChoiceQ(
                text="Which operator raises a number to a power?",
                choices=['^', '**', 'pow', '//'],
                answer=2,
                hint="^ is bitwise xor in Python.",
            ),
            LinkQ(
                text="The tutorial in the Python docs covers numbers in more depth.",
                link="https://docs.python.org/3/tutorial/introduction.html#numbers",
            ),
        ],
    )


def _strings() -> Lesson:
    return Lesson(
        name="Strings",
        title="Strings",
        description="Text, built-in functions and immutability.",
        questions=[
            MessageQ(text=md("Strings are written in quotes: `'hello'` or `\"hello\"`.")),
            CodeQ(
                text="Create a variable called name holding the string 'Python'.",
                answer="Python",
                hint="Type: name = 'Python'",
                validator=all_of(
                    creates_var_validator('name', "There is no variable called name yet"),
                    same_value_validator("Python", message="name should hold 'Python'"),
                ),
            ),
            CodeQ(
                text="Use the len() function to find how many characters name has.",
                answer=6,
                hint="Type: len(name)",
                setup="name = 'Python'",
                validator=all_of(
                    call_function_validator('len', "Use the len() function"),
                    same_value_validator(6),
                ),
            ),
            StringQ(
                text="What is the name of the type of 'hello'? Type just the name.",
                answer="str",
                hint="Try type('hello') at a prompt.",
            ),
            StringQ(
                text="Type any word that starts with 'py'.",
                answer=re.compile(r'^py', re.IGNORECASE),
                hint="For example: python",
            ),
            MultipleChoiceQ(
                text="Which of these types are immutable? Enter every number that applies.",
                choices=['list', 'tuple', 'dict', 'str'],
                answer=[2, 4],
                hint="Immutable objects cannot be changed after they are created.",
            ),
        ],
    )


def _functions() -> Lesson:
    return Lesson(
        name="Functions",
        title="Functions",
        description="Defining and calling functions.",
        questions=[
            MessageQ(text=md("Functions are defined with `def` and give back a value with `return`.")),
            MultistepCodeQ(
                text="Define a function and call it, one step at a time.",
                steps=[
                    "Define square(n) returning n * n on one line.",
                    "Call square with 4.",
                ],
                step_hints=[
                    "Type: def square(n): return n * n",
                    "Type: square(4)",
                ],
                answer=16,
                hint="Define square first, then call it.",
            ),
            CodeQ(
                text="Write a lambda that doubles its argument.",
                hint="Type: lambda n: n * 2",
                validator=creates_function_validator({1: 2, 5: 10, -3: -6}),
            ),
            CodeQ(
                text="Create y as either two times or three times x.",
                hint="Type: y = 2 * x",
                setup="x = 10",
                validator=any_of(
                    same_expression_validator("y = 2 * x"),
                    same_expression_validator("y = 3 * x"),
                ),
            ),
            NumericQ(
                text="How many arguments does square take?",
                answer=1,
                hint="Look at the parentheses in its definition.",
            ),
            ChoiceQ(
                text="What does a function without a return statement give back?",
                choices=['0', 'None', 'an empty string', 'an error'],
                answer=2,
            ),
        ],
    )


def create_python_basics_course() -> Course:
    """Build the course shipped with swirlpy"""
    return Course(
        name="Python Basics",
        description="A first look at Python",
        lessons=[_basic_math(), _strings(), _functions()],
    )
