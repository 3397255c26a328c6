"""Scheduling engine for generating monthly mentor schedules."""

from mentorshift.scheduling.heuristic_solver import FillOutcome, HeuristicSolver, RunState
from mentorshift.scheduling.scheduler import Schedule, ScheduleResult, Scheduler

__all__ = [
    "Schedule",
    "ScheduleResult",
    "Scheduler",
    "FillOutcome",
    "HeuristicSolver",
    "RunState",
]
