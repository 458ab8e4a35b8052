"""flowstate - a stateful workflow-graph executor."""

__version__ = "0.1.0"
