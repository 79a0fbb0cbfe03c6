"""Formatting helpers for reports."""
