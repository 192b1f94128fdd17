"""
Prometheus metrics for the shortcode cache
"""
import logging

from prometheus_client import Counter, REGISTRY, generate_latest

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Metrics collector"""

    cache_hits_total = Counter(
        'shortcode_cache_hits_total',
        'Total number of cache hits',
        ['shortcode']
    )

    cache_misses_total = Counter(
        'shortcode_cache_misses_total',
        'Total number of cache misses',
        ['shortcode']
    )

    cache_stores_total = Counter(
        'shortcode_cache_stores_total',
        'Total number of generated outputs stored',
        ['shortcode']
    )

    errors_total = Counter(
        'shortcode_cache_errors_total',
        'Total number of storage backend errors',
        ['operation', 'shortcode']
    )

    registration_errors_total = Counter(
        'shortcode_cache_registration_errors_total',
        'Total number of failed external data registrations',
        ['error_code']
    )

    @classmethod
    def record_cache_hit(cls, shortcode: str):
        cls.cache_hits_total.labels(shortcode=shortcode).inc()

    @classmethod
    def record_cache_miss(cls, shortcode: str):
        cls.cache_misses_total.labels(shortcode=shortcode).inc()

    @classmethod
    def record_cache_store(cls, shortcode: str):
        cls.cache_stores_total.labels(shortcode=shortcode).inc()

    @classmethod
    def record_error(cls, operation: str, shortcode: str):
        cls.errors_total.labels(operation=operation, shortcode=shortcode).inc()

    @classmethod
    def record_registration_error(cls, error_code: str):
        cls.registration_errors_total.labels(error_code=error_code).inc()

    @classmethod
    def get_metrics(cls) -> bytes:
        """Metrics in Prometheus exposition format"""
        return generate_latest(REGISTRY)
