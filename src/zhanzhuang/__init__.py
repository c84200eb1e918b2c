"""Zhan Zhuang standing-meditation timer."""

__version__ = "0.1.0"
