"""
Observability module for the gamification engine.

This module provides:
- Metrics collection with Prometheus
"""

__all__ = ["metrics"]
