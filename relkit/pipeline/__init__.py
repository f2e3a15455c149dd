"""Dependency-graph pipeline engine.

This package knows nothing about releases: step types are opaque strings that
a `CapabilityResolver` classifies and a `StepExecutor` performs.
"""

from .engine import plan, run
from .errors import PipelineError
from .graph import StepGraph, build_graph
from .model import (
    CapabilityResolver,
    PipelineStep,
    PlanStatus,
    PlanStep,
    RunResult,
    RunStatus,
    RunSummary,
    StepExecutor,
    StepResult,
)

__all__ = [
    "CapabilityResolver",
    "PipelineError",
    "PipelineStep",
    "PlanStatus",
    "PlanStep",
    "RunResult",
    "RunStatus",
    "RunSummary",
    "StepExecutor",
    "StepGraph",
    "StepResult",
    "build_graph",
    "plan",
    "run",
]
