"""
OS capability providers for the host monitor.
"""

from hostmon.system.base import SystemInterface
from hostmon.system.local import LocalSystem

__all__ = ["SystemInterface", "LocalSystem"]
