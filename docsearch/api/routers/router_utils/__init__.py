"""
Router utility functions.

Contains helpers shared by router endpoints to keep them clean.
"""

from docsearch.api.routers.router_utils.error_handling import handle_service_errors

__all__ = [
    "handle_service_errors",
]
