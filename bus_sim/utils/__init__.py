"""Utilities for bus network simulation: random source, logging, metrics and plots."""
