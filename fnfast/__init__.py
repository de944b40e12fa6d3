"""Diagrammatic SPT and EFT predictions for cosmological n-point correlators."""

try:
    from importlib.metadata import version
    __version__ = version("fnfast")
except ImportError:
    __version__ = "0.1.0"

__author__ = "The fnfast developers"
