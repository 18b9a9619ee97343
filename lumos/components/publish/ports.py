"""Publish component ports."""

from lumos.ports.clock import ClockPort
from lumos.ports.repo import StorePort

__all__ = ["ClockPort", "StorePort"]
