"""FocusTube: task-aware video feed filtering with a focus/break timer."""

__version__ = "0.1.0"
