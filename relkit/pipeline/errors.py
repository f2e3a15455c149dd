"""Structural errors raised while building a step graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PipelineErrorKind = Literal["duplicate_id", "unknown_need", "cycle"]


@dataclass(frozen=True, slots=True)
class PipelineError:
    """The step list cannot form a valid graph; nothing was executed.

    Attributes:
        kind: Which structural rule was violated
        message: Description naming the offending step ids
        steps: The step ids involved (the cycle path for ``cycle``)
    """

    kind: PipelineErrorKind
    message: str
    steps: tuple[str, ...] = ()
    hint: str | None = None
