"""
Timeline package: pull request assembly and flow metrics.
"""

from .builder import build_pull_request

__all__ = ["build_pull_request"]
