from .user import User
from .roadmap import Roadmap
from .progress_log import ProgressLog

__all__ = ["User", "Roadmap", "ProgressLog"]
