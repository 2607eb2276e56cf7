"""
Maintenance Use Cases
"""

from .purge_expired_use_case import PurgeExpiredResponse, PurgeExpiredUseCase

__all__ = ["PurgeExpiredUseCase", "PurgeExpiredResponse"]
