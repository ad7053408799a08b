"""Core functionality for clinrec."""
