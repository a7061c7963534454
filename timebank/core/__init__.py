"""Core configuration, error and utility helpers."""
