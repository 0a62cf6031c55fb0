"""Bhojpuri Raas Stremio add-on package."""
