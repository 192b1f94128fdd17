"""
Integration presets for known shortcodes
"""
import logging
from typing import Any, Optional

from ..cache import ShortcodeCache
from ..models import RegistrationError
from ..monitoring.metrics import MetricsCollector
from ..utils.logging import AuditLogger
from .core import register_core_support
from .commerce import register_commerce_support

logger = logging.getLogger(__name__)


def register_support(cache: ShortcodeCache, store: Optional[Any] = None) -> bool:
    """
    Register built-in shortcode support, plus store shortcodes if a store is given

    Registration failures are logged and do not stop the remaining presets.

    Returns:
        True if every preset registered cleanly
    """
    presets = [('core', lambda: register_core_support(cache))]
    if store is not None:
        presets.append(('commerce', lambda: register_commerce_support(cache, store)))

    ok = True
    for preset_name, register in presets:
        try:
            register()
            logger.info(f"Registered {preset_name} shortcode cache support")
        except RegistrationError as e:
            ok = False
            AuditLogger().log_registration_error(e)
            if cache.settings.metrics_enabled:
                MetricsCollector.record_registration_error(e.error_code)
            logger.warning(f"{preset_name} shortcode cache support incomplete: {e}")

    return ok


__all__ = [
    'register_support',
    'register_core_support',
    'register_commerce_support',
]
