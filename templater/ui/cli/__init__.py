"""Terminal-facing collaborators for the click CLI."""
