"""Signature lifecycle, counter and notification services."""
