"""Shared utilities for the snowfall overlay."""
