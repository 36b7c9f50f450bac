#!/usr/bin/env python3
"""
Evaluation of learner-submitted Python snippets.

Every snippet in a session runs against the same EvaluationContext, so a
variable created while answering one question is still there for the next.
Failures are captured in the result; evaluate() never raises for bad input.
"""

import ast
import builtins
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional


class EvaluationContext:
    """The namespace snippets are executed in"""

    def __init__(self, bindings: Optional[Dict[str, Any]] = None):
        self.namespace: Dict[str, Any] = {'__builtins__': builtins, '__name__': '__swirlpy__'}
        if bindings:
            self.namespace.update(bindings)

    def __contains__(self, name: str) -> bool:
        return name in self.namespace

    def __getitem__(self, name: str) -> Any:
        return self.namespace[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def get(self, name: str, default: Any = None) -> Any:
        return self.namespace.get(name, default)

    def names(self) -> list:
        """Names bound by snippets (dunder entries excluded)"""
        return [n for n in self.namespace if not (n.startswith('__') and n.endswith('__'))]


@dataclass
class EvaluationResult:
    """Outcome of evaluating one snippet"""
    success: bool
    value: Any = None
    error: Optional[str] = None
    context: Optional[EvaluationContext] = None

    @classmethod
    def ok(cls, value: Any, context: Optional[EvaluationContext] = None) -> 'EvaluationResult':
        return cls(success=True, value=value, context=context)

    @classmethod
    def failed(cls, error: str, context: Optional[EvaluationContext] = None) -> 'EvaluationResult':
        return cls(success=False, error=error, context=context)


def format_error(exc: BaseException) -> str:
    """Short one-line description of an exception"""
    if isinstance(exc, SyntaxError):
        detail = exc.msg or 'invalid syntax'
        if exc.lineno:
            detail += f" (line {exc.lineno})"
        return f"SyntaxError: {detail}"
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def _assigned_name(node: ast.stmt) -> Optional[str]:
    """Name bound by a simple `x = ...`, `x += ...` or `x: T = ...` statement"""
    if isinstance(node, ast.Assign):
        if len(node.targets) == 1 and isinstance(node.targets[0], ast.Name):
            return node.targets[0].id
        # chained assignment a = b = 1 binds the same value to every name
        if all(isinstance(t, ast.Name) for t in node.targets):
            return node.targets[-1].id
    elif isinstance(node, (ast.AugAssign, ast.AnnAssign)):
        if isinstance(node.target, ast.Name) and getattr(node, 'value', None) is not None:
            return node.target.id
    return None


def evaluate(snippet: str, context: EvaluationContext) -> EvaluationResult:
    """
    Evaluate a snippet against the shared context.

    Statements may be separated by newlines or semicolons; only the value of
    the last statement is reported. A trailing expression gives its value, a
    trailing simple assignment gives the value bound to its name, anything
    else gives None.
    """
    source = snippet.strip()
    if not source:
        return EvaluationResult.ok(None, context)

    try:
        tree = ast.parse(source, mode='exec')
    except SyntaxError as e:
        return EvaluationResult.failed(format_error(e), context)

    namespace = context.namespace
    body = tree.body
    last = body[-1] if body else None

    try:
        if isinstance(last, ast.Expr):
            if len(body) > 1:
                head = ast.Module(body=body[:-1], type_ignores=[])
                exec(compile(head, '<input>', 'exec'), namespace)
            expr = ast.Expression(body=last.value)
            value = eval(compile(expr, '<input>', 'eval'), namespace)
            return EvaluationResult.ok(value, context)

        exec(compile(tree, '<input>', 'exec'), namespace)
        name = _assigned_name(last) if last is not None else None
        value = namespace.get(name) if name else None
        return EvaluationResult.ok(value, context)
    except Exception as e:
        return EvaluationResult.failed(format_error(e), context)
