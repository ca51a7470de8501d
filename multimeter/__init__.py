"""
Multimeter - a terminal console and CPU/memory monitor for Screeps.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
