"""Runtime wiring of queues and background tasks."""
