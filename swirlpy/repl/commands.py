#!/usr/bin/env python3
"""
Reserved input vocabulary and command help for the lesson REPL.
Words are matched case-insensitively after stripping whitespace.
"""

# At an answer prompt
HINT_WORDS = ('hint', 'help', '?')
SKIP_WORDS = ('skip',)
MENU_WORDS = ('menu', 'back')
EXIT_WORDS = ('exit', 'quit', 'bye')

# Inside a multi-step question
DONE_WORDS = ('done',)
RESTART_QUESTION_WORDS = ('restart question', 'restart')

# At confirmation prompts; anything else means no
CONFIRM_WORDS = ('yes', 'y')

COMMANDS = {
    # Answering questions
    'hint': {
        'help': 'Show a hint for the current question or step (does not use an attempt)',
        'usage': 'hint',
        'examples': ['hint', 'help', '?'],
    },
    'skip': {
        'help': 'Skip the current question without credit',
        'usage': 'skip',
        'examples': ['skip'],
    },
    'restart': {
        'help': 'Start a multi-step question over from step 1',
        'usage': 'restart',
        'examples': ['restart', 'restart question'],
    },
    'done': {
        'help': 'Finish a multi-step question once every step is entered',
        'usage': 'done',
        'examples': ['done'],
    },

    # Navigation
    'menu': {
        'help': 'Save your place and return to the lesson list',
        'usage': 'menu',
        'examples': ['menu', 'back'],
    },
    'reset': {
        'help': 'At the lesson list, clear progress for one lesson or the whole course',
        'usage': 'reset <n> | reset all',
        'examples': ['reset 2', 'reset all'],
    },
    'exit': {
        'help': 'Save your place and leave',
        'usage': 'exit',
        'examples': ['exit', 'quit', 'bye'],
    },
}


def get_command_help(command: str = None) -> str:
    """Get help text for a command or all commands"""
    if command and command in COMMANDS:
        cmd = COMMANDS[command]
        lines = [
            f"  {command}: {cmd['help']}",
            f"  Usage: {cmd['usage']}",
        ]
        if cmd.get('examples'):
            lines.append(f"  Examples: {', '.join(cmd['examples'])}")
        return '\n'.join(lines)

    groups = {
        'In a lesson': ['hint', 'skip', 'done', 'restart'],
        'Navigation': ['menu', 'reset', 'exit'],
    }

    lines = ["Commands:\n"]
    for group, cmds in groups.items():
        lines.append(f"  {group}:")
        for cmd in cmds:
            lines.append(f"    {cmd:8} - {COMMANDS[cmd]['help']}")
        lines.append("")
    return '\n'.join(lines).rstrip()
