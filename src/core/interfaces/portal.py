"""Contratos de los colaboradores inyectables del motor.

Por qué Protocol:
- Define contratos estructurales (duck typing) sin herencia rígida.
- Permite sustituir reloj, limitador y tabla de códigos por fakes en tests
  sin acoplar el Core a implementaciones concretas.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ErrorStatusText(Protocol):
    """Tabla pura código numérico -> mensaje legible."""

    def __call__(self, code: int) -> str: ...


@runtime_checkable
class RateLimiter(Protocol):
    """Pausa de cortesía antes de cada petición dependiente."""

    def wait_turn(self) -> None:
        """Bloquea hasta que se permite la siguiente petición."""

        ...


@runtime_checkable
class LinkCache(Protocol):
    """Deduplicación de descargas por clave, con alcance de un recorrido."""

    def should_fetch(self, key: str) -> bool: ...

    def mark_fetched(self, key: str) -> None: ...


class Clock(Protocol):
    """Reloj monotónico + sleep (real en producción, manual en tests)."""

    def now(self) -> float: ...

    def sleep(self, seconds: float) -> None: ...
