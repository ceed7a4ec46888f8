"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .fluxo import router as fluxo_router
from .diario import router as diario_router

__all__ = [
    "fluxo_router",
    "diario_router",
]
