"""Presentation helpers shared by front ends (CLI, dashboards)."""
