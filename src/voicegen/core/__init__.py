"""
Core Infrastructure for voicegen.

    - config.py: Configuration loading and validation
    - errors.py: Error codes and client-visible exceptions
    - logging/: Structured logging with numeric levels
    - metrics.py: Prometheus metrics collection
"""
