"""
Monitoring and metrics module
"""
from .metrics import MetricsCollector
from .health import (
    HealthStatus,
    ComponentHealth,
    HealthCheckResult,
    HealthChecker
)

__all__ = [
    'MetricsCollector',
    'HealthStatus',
    'ComponentHealth',
    'HealthCheckResult',
    'HealthChecker',
]
