"""Unit and property tests for the intensity matrix engine."""
