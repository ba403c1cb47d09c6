"""Utility modules for cec-conformance."""

from cec_conformance.utils.strings import safename
from cec_conformance.utils.terminal import terminal

__all__ = [
    "safename",
    "terminal",
]
