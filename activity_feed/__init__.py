"""Activity feed: renders a project-management audit log as human-readable sentences."""
