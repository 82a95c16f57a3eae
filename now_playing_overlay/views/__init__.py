"""HTML views for the setup pages."""
