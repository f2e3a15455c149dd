"""relkit: release orchestration for multi-component projects."""

__version__ = "0.1.0"
