"""
Health checks for the shortcode cache
"""
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone
from enum import Enum
import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

READINESS_KEY = "_readiness_test"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    name: str
    status: HealthStatus
    message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class HealthCheckResult(BaseModel):
    status: HealthStatus
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    environment: str
    components: List[ComponentHealth] = Field(default_factory=list)


class HealthChecker:
    """Reports cache error rate and backend reachability"""

    def __init__(self, cache):
        self.cache = cache

    async def check_health(self) -> HealthCheckResult:
        components = [
            self._check_error_rate(),
            await self._check_backend(),
        ]

        return HealthCheckResult(
            status=self._determine_overall_status(components),
            environment=self.cache.settings.environment,
            components=components
        )

    def _check_error_rate(self) -> ComponentHealth:
        stats = self.cache.get_stats()
        error_rate = (stats['errors'] / max(stats['total_requests'], 1)) * 100

        if error_rate > 10:
            status = HealthStatus.UNHEALTHY
            message = f"High error rate: {error_rate:.1f}%"
        elif error_rate > 5:
            status = HealthStatus.DEGRADED
            message = f"Elevated error rate: {error_rate:.1f}%"
        else:
            status = HealthStatus.HEALTHY
            message = f"OK (hit rate: {stats['hit_rate']:.1f}%)"

        return ComponentHealth(name="cache", status=status, message=message, metadata=stats)

    async def _check_backend(self) -> ComponentHealth:
        """Store, fetch and delete a readiness test value"""
        backend = self.cache.backend
        namespace = self.cache.namespace
        try:
            await backend.set(READINESS_KEY, "ok", namespace, 10)
            value = await backend.get(READINESS_KEY, namespace)
            await backend.delete(READINESS_KEY, namespace)
        except Exception as e:
            logger.error(f"Backend health check failed: {e}")
            return ComponentHealth(
                name="backend",
                status=HealthStatus.UNHEALTHY,
                message=str(e),
                metadata={'type': type(backend).__name__}
            )

        if value != "ok":
            return ComponentHealth(
                name="backend",
                status=HealthStatus.DEGRADED,
                message="Readiness test value was not read back",
                metadata={'type': type(backend).__name__}
            )

        return ComponentHealth(
            name="backend",
            status=HealthStatus.HEALTHY,
            message="Connected",
            metadata={'type': type(backend).__name__}
        )

    def _determine_overall_status(self, components: List[ComponentHealth]) -> HealthStatus:
        if any(c.status == HealthStatus.UNHEALTHY for c in components):
            return HealthStatus.UNHEALTHY
        elif any(c.status == HealthStatus.DEGRADED for c in components):
            return HealthStatus.DEGRADED
        else:
            return HealthStatus.HEALTHY
