#!/usr/bin/env python3
"""
Interactive REPL session: reads lines, feeds them to the tutoring engine and
renders what it returns.
"""

from typing import Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from rich.console import Console
from rich.panel import Panel
from rich.markdown import Markdown
from rich.text import Text

from ..config import get_config_dir, get_max_attempts
from ..courses import get_available_courses
from ..db import ProgressStore
from ..tutoring.display import DisplayText
from ..tutoring.engine import TutoringEngine
from ..tutoring.state import TutoringResponse
from .commands import get_command_help

# Semantic style tags mapped to rich styles
STYLES = {
    'success': 'green',
    'error': 'red',
    'hint': 'yellow',
    'info': 'dim',
    'title': 'bold blue',
}

HELP_WORD = 'commands'


class SwirlREPL:
    """Interactive REPL for lessons"""

    def __init__(
        self,
        engine: Optional[TutoringEngine] = None,
        console: Optional[Console] = None,
        input_func: Optional[Callable[[str], str]] = None,
    ):
        self.console = console or Console()
        self.engine = engine or TutoringEngine(
            get_available_courses,
            ProgressStore(),
            max_attempts=get_max_attempts(),
        )

        if input_func is None:
            history_path = get_config_dir() / 'repl_history'
            self.prompt_session = PromptSession(
                history=FileHistory(str(history_path)),
                auto_suggest=AutoSuggestFromHistory(),
            )
            input_func = self.prompt_session.prompt
        self.input_func = input_func

    def run(self):
        """Main REPL loop"""
        self._print_welcome()
        state, response = self.engine.start()
        self.render(response)

        while not state.finished:
            try:
                user_input = self.input_func(response.prompt)
            except KeyboardInterrupt:
                self.console.print("\n[dim]Use 'exit' to quit[/dim]")
                continue
            except EOFError:
                state, response = self.engine.handle(state, 'exit')
                self.render(response)
                break

            if user_input.strip().lower() == HELP_WORD:
                self.console.print(get_command_help())
                continue

            state, response = self.engine.handle(state, user_input)
            self.render(response)

        return state

    def _print_welcome(self):
        """Print welcome message"""
        welcome = """
[bold blue]swirlpy[/bold blue] - Learn Python interactively

Type Python at the prompt to answer questions.

[dim]At any question: hint, skip, menu, exit
Type 'commands' for the full list.[/dim]
"""
        self.console.print(Panel(welcome, border_style="blue"))

    def render(self, response: TutoringResponse):
        """Print every line of an engine response"""
        for line in response.lines:
            self.console.print(self._renderable(line))

    def _renderable(self, line: DisplayText):
        resolved = line.resolve()
        if resolved.markdown:
            return Markdown(resolved.content)
        return Text(resolved.content, style=STYLES.get(resolved.style, ''))
