"""Coordinación de descargas dependientes dentro de un recorrido.

- `LinkResolutionCache`: cada handle dispara como mucho una descarga.
- `IntervalRateLimiter`: pausa de cortesía mínima entre peticiones.
- `Deadline`: plazo opcional del llamador, comprobado en los dos puntos de
  suspensión (I/O de red y esperas del limitador).

Ambos objetos tienen alcance de una llamada de listado, no de proceso.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable

from core.errors import DeadlineExceeded
from core.interfaces.portal import Clock

logger = logging.getLogger(__name__)


class MonotonicClock:
    """Reloj real."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class Deadline:
    """Plazo absoluto calculado a partir de un timeout relativo."""

    def __init__(self, seconds: float, clock: Clock | None = None) -> None:
        self._clock = clock or MonotonicClock()
        self._expires_at = self._clock.now() + seconds

    @classmethod
    def optional(cls, seconds: float | None, clock: Clock | None = None) -> Deadline | None:
        return cls(seconds, clock) if seconds is not None else None

    def remaining(self) -> float:
        return self._expires_at - self._clock.now()

    def check(self, where: str = "") -> None:
        if self.remaining() <= 0:
            raise DeadlineExceeded(f"plazo del workflow agotado{f' ({where})' if where else ''}")


class LinkResolutionCache:
    """Conjunto de claves ya descargadas (o a omitir) en un recorrido."""

    def __init__(self, preseeded: Iterable[str] = ()) -> None:
        self._seen: set[str] = set(preseeded)

    def should_fetch(self, key: str) -> bool:
        return key not in self._seen

    def mark_fetched(self, key: str) -> None:
        self._seen.add(key)

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)


class IntervalRateLimiter:
    """Garantiza al menos `min_interval` segundos entre turnos.

    El primer turno espera el intervalo completo: la petición anterior (el
    listado) no pasa por el limitador.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Clock | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval debe ser >= 0")
        self.min_interval = min_interval
        self._clock = clock or MonotonicClock()
        self._deadline = deadline
        self._last_turn: float | None = None

    def wait_turn(self) -> None:
        if self._last_turn is None:
            wait = self.min_interval
        else:
            wait = self.min_interval - (self._clock.now() - self._last_turn)

        if wait > 0:
            if self._deadline is not None and self._deadline.remaining() < wait:
                raise DeadlineExceeded("el plazo expira antes del siguiente turno del limitador")
            logger.debug("rate limit: esperando %.2fs", wait)
            self._clock.sleep(wait)

        self._last_turn = self._clock.now()
