"""Core session components."""

from focustube.core.config import Config, get_config
from focustube.core.controller import EvaluationResult, FilterAction, SessionController
from focustube.core.dispatcher import EvaluationDispatcher

__all__ = [
    "Config",
    "get_config",
    "EvaluationResult",
    "FilterAction",
    "SessionController",
    "EvaluationDispatcher",
]
