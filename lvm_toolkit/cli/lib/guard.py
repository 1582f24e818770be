"""
Two-phase confirmation for irreversible operations.

A destructive tool called with ``confirm=false`` returns a prompt instead of
running anything. The caller confirms by re-issuing the same call with every
original argument plus ``confirm=true``; no state is kept between calls.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

from lvm_toolkit.cli.lib.schemas import ConfirmableArgs

logger = logging.getLogger(__name__)

CONFIRM_HINT = "Call again with the same arguments and confirm=true"

ArgsT = TypeVar("ArgsT", bound=ConfirmableArgs)


@dataclass(frozen=True)
class ConfirmationPrompt:
    """Result returned in place of execution while confirmation is pending."""

    message: str
    hint: str = CONFIRM_HINT

    status = "confirm"

    def to_dict(self) -> dict:
        return {"status": self.status, "message": self.message, "hint": self.hint}


def requires_confirmation(describe: Callable[[ArgsT], str]):
    """
    Guard an operation ``fn(args, executor)`` behind ``args.confirm``.

    Args:
        describe: Returns the human-readable target (e.g. "VG 'vg0'") for the prompt
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(args: ArgsT, *rest, **kwargs):
            if not args.confirm:
                target = describe(args)
                logger.info("Confirmation required to remove %s", target)
                return ConfirmationPrompt(message=f"Are you sure you want to remove {target}?")
            return fn(args, *rest, **kwargs)

        return wrapper

    return decorator
