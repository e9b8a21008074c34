"""
Core application modules.
Contains configuration, logging, metrics, tracing and resilience helpers.
"""
