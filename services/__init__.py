"""Case-management services used by the HTTP routes."""
