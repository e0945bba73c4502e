"""Shared helpers for the chronopilot_pdf package."""
