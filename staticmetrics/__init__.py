"""Metric values, labelled metric vectors, a collector registry and a static metric definition parser."""

__version__ = "0.1.0"

__all__ = ["timer", "value", "vec", "registry", "util", "parser"]