"""User management module for Rentora.

Provisioning of agents and employees and account administration.
"""

from .routers import router

__all__ = ["router"]
