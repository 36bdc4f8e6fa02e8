"""Regression backends."""

from pylinmod.regression.backends.cpu import CPUQRBackend

__all__ = ["CPUQRBackend"]
