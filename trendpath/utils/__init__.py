"""Utility helpers: paths, logging, issue formatting."""
