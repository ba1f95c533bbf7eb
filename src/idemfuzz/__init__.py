"""
idemfuzz - Formatter idempotence fuzzing.

Generate random programs, format them twice, report when the passes disagree.
"""

from idemfuzz.checker import IdempotenceChecker, classify
from idemfuzz.controller import RunController, RunSettings

__version__ = "0.1.0"
__all__ = [
    "IdempotenceChecker",
    "RunController",
    "RunSettings",
    "__version__",
    "classify",
]
