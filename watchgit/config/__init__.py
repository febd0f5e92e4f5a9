"""Configuration package.

Note: settings are never constructed at import time so that tests stay free
from environment requirements. Call ``load_settings()`` where needed.
"""

__all__: list[str] = []
