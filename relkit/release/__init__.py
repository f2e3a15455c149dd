"""Component release orchestration on top of the pipeline engine."""

from .errors import ReleaseError
from .model import ReleaseArtifact, ReleaseOptions, ReleasePlan, ReleaseRun
from .service import ReleaseEnvironment, load_release_environment, plan_release, run_release

__all__ = [
    "ReleaseArtifact",
    "ReleaseEnvironment",
    "ReleaseError",
    "ReleaseOptions",
    "ReleasePlan",
    "ReleaseRun",
    "load_release_environment",
    "plan_release",
    "run_release",
]
