"""Container runtime integrations"""

from .base import BaseRuntime
from .docker import DockerRuntime

__all__ = ["BaseRuntime", "DockerRuntime"]
