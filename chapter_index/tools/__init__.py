"""Single-job tools: one module per tool (config, detect)."""

from chapter_index.tools.config import config_app
from chapter_index.tools.detect import run as detect_index

__all__ = ["config_app", "detect_index"]
