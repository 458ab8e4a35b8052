"""Ready-made graphs built on the flowstate executor."""
