"""
Support for digital-downloads store shortcodes

The store object passed in must provide ``get_option(key, default)``,
``get_current_user_id()``, ``user_pending_verification()`` and
``get_query_var(name)``.
"""
from typing import Any, List, Tuple

from ..cache import ShortcodeCache
from ..models import Detailed, RegistrationError, RegistrationErrors, SourceKind

HOUR_IN_SECONDS = 3600

# Checkout flow is too stateful to cache
UNCACHEABLE = ('download_checkout', 'download_cart', 'download_discounts', 'edd_receipt')


def _option(store: Any, key: str, default: Any) -> Detailed:
    return Detailed(name=store.get_option, kind=SourceKind.CALLBACK, args=(key, default))


def _button_options(store: Any) -> dict:
    return {
        'style': _option(store, 'button_style', 'button'),
        'color': _option(store, 'checkout_color', 'blue'),
    }


def _user_state(store: Any, identifier: str, query_var: str) -> dict:
    return {
        'user_id': Detailed(name=store.get_current_user_id, kind=SourceKind.CALLBACK),
        'pending': Detailed(name=store.user_pending_verification, kind=SourceKind.CALLBACK),
        identifier: Detailed(name=query_var, kind=SourceKind.QUERY_GET),
    }


def _shortcodes(store: Any) -> List[Tuple[str, dict, int]]:
    """(tag, external data sources, duration) for every cacheable store shortcode"""
    history = [
        (tag, _user_state(store, 'edd_verify_success', 'edd-verify-success'), HOUR_IN_SECONDS)
        for tag in ('download_history', 'purchase_history')
    ]
    return [
        ('purchase_link', {
            'id': Detailed(name='post', kind=SourceKind.CONTENT_ENTITY),
            'displayed_form_ids': 'edd_displayed_form_ids',
            **_button_options(store),
        }, 0),
        ('purchase_collection', _button_options(store), HOUR_IN_SECONDS),
        *history,
        ('edd_login', {'redirect': _option(store, 'login_redirect_page', '')}, 0),
        ('edd_register', {'redirect': _option(store, 'purchase_history_page', '')}, 0),
        ('downloads', {
            'paged': Detailed(name=store.get_query_var, kind=SourceKind.CALLBACK, args=('paged',)),
        }, HOUR_IN_SECONDS),
        ('edd_price', {'id': Detailed(name='post', kind=SourceKind.CONTENT_ENTITY)}, 0),
        ('edd_profile_editor', _user_state(store, 'updated', 'updated'), HOUR_IN_SECONDS),
    ]


def register_commerce_support(cache: ShortcodeCache, store: Any):
    """
    Raises:
        RegistrationErrors: every source that failed; the other shortcodes
            are registered regardless
    """
    cache.disable_cache(*UNCACHEABLE)

    errors: List[RegistrationError] = []
    for tag, sources, duration in _shortcodes(store):
        try:
            cache.register_external_data_values(tag, sources)
        except RegistrationErrors as e:
            errors.extend(e.errors)
        cache.set_cache_duration(tag, duration)

    if errors:
        raise RegistrationErrors('commerce', errors)
