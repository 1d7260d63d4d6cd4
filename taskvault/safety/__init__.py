from .throttler import Throttler

__all__ = ["Throttler"]
