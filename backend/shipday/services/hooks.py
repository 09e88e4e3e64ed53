"""
Post-commit hooks — ordered best-effort side effects of a committed write.
Each hook runs in its own failure boundary: a failing hook is logged and the
remaining hooks still run. Hooks share a context dict so a later hook can use
what an earlier one produced.
"""

import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Hook = Callable[[dict], Any]


class PostCommitHooks:
    def __init__(self, label: str):
        self.label = label
        self._hooks: list[tuple[str, Hook]] = []

    def add(self, name: str, hook: Hook) -> "PostCommitHooks":
        self._hooks.append((name, hook))
        return self

    async def run(self, context: dict | None = None) -> dict:
        """Run every hook in order; returns the shared context with a `failed` list."""
        ctx = context if context is not None else {}
        ctx.setdefault("failed", [])
        for name, hook in self._hooks:
            try:
                result = hook(ctx)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                ctx["failed"].append(name)
                logger.error(f"[{self.label}] post-commit hook '{name}' failed: {e}")
        return ctx
