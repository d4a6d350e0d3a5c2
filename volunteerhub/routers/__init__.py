# volunteerhub/routers/__init__.py

from . import opportunities
from . import volunteer
from . import catalog
from . import hours

__all__ = [
    "opportunities",
    "volunteer",
    "catalog",
    "hours",
]
