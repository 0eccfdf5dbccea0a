"""Background jobs: dramatiq broker, tasks and scheduler."""
