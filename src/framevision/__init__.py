"""Frame Vision - multimodal answers paged onto a wearable display."""

__version__ = "0.1.0"

from framevision.config import Config, load_config

__all__ = ["Config", "load_config", "__version__"]
