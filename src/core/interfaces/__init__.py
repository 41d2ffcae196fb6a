"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos o fakes.
- Permite invertir dependencias: el Core depende de abstracciones.
"""

from core.interfaces.portal import Clock, ErrorStatusText, LinkCache, RateLimiter

__all__ = [
    "Clock",
    "ErrorStatusText",
    "LinkCache",
    "RateLimiter",
]
