"""syncboard - real-time collaborative kanban board synchronization."""

__version__ = "0.1.0"
