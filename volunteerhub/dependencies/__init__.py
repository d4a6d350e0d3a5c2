# volunteerhub/dependencies/__init__.py

from .permissions import (
    get_current_user,
    require_staff,
    require_volunteer,
)

__all__ = [
    "get_current_user",
    "require_staff",
    "require_volunteer",
]
