"""
CRAN Package Longevity Analysis

Survival analysis of how long packages stay on CRAN and what predicts it.
"""

__version__ = "0.1.0"

from .cli import main

__all__ = ["main"]
