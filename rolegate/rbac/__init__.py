"""
Authorization evaluation.

- PermissionSet: exact and wildcard matching for one role
- AuthorizationFacade: role / permission queries over loaded roles
- Authorizable: mixin exposing those queries on a subject model
"""

from .permissions import PermissionSet, wildcard_prefix
from .authorization import AuthorizationFacade, Authorizable

__all__ = [
    "PermissionSet",
    "wildcard_prefix",
    "AuthorizationFacade",
    "Authorizable",
]
