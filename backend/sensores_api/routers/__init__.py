"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .records import router as records_router, set_record_gateway, get_record_gateway
from .realtime import router as realtime_router, set_notifier, get_notifier

__all__ = [
    "records_router",
    "realtime_router",
    "set_record_gateway",
    "get_record_gateway",
    "set_notifier",
    "get_notifier",
]
