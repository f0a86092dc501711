"""
CryptoSignal Services

Service layer containing all engine logic.
Each service has a defined interface (contract) and implementation.
"""

from cryptosignal.services.base import BaseService

__all__ = ["BaseService"]
