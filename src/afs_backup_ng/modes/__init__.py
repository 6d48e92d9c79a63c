"""Run modes: how the selected volumes actually get backed up."""

from collections.abc import Callable

from ..config import MODE_GENERIC, MODE_TSM, MODE_VOSBACKUP
from ..core import PlanResult
from . import generic, tsm, vosbackup
from .common import RunContext, print_abandoned, print_plan

PLANNERS: dict[str, Callable[[RunContext], PlanResult]] = {
    MODE_TSM: tsm.plan,
    MODE_VOSBACKUP: vosbackup.plan,
    MODE_GENERIC: generic.plan,
}

RUNNERS: dict[str, Callable[[RunContext], int]] = {
    MODE_TSM: tsm.run,
    MODE_VOSBACKUP: vosbackup.run,
    MODE_GENERIC: generic.run,
}

__all__ = [
    "PLANNERS",
    "RUNNERS",
    "RunContext",
    "print_abandoned",
    "print_plan",
]
