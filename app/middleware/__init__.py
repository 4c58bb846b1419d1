"""
Middleware components for request processing.
"""

from app.middleware.https_enforcement import HTTPSEnforcementMiddleware

__all__ = ["HTTPSEnforcementMiddleware"]
