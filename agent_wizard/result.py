"""Explicit success/failure variants for wizard operations.

Callers that prefer branching over ``try``/``except`` wrap an operation with
:func:`attempt` and inspect the returned variant::

    outcome = attempt(service.review_agent, session_id)
    if isinstance(outcome, Err) and isinstance(outcome.error, SessionNotFoundError):
        ...

Only :class:`~agent_wizard.errors.WizardError` failures are captured; anything else is a
bug and propagates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from agent_wizard.errors import WizardError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: WizardError

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code


Outcome = Union[Ok[T], Err]


def attempt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    try:
        return Ok(fn(*args, **kwargs))
    except WizardError as exc:
        return Err(exc)
