"""sbd-planner: squat / bench / deadlift training-plan generator."""

__version__ = "0.1.0"
