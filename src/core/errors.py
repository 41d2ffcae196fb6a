"""Taxonomía de errores del Core.

Por qué una jerarquía propia:
- Los adaptadores traducen errores de librerías (httpx, cryptography, codecs)
  en el borde; el Core y la CLI solo conocen estas clases.
- Ningún error se reintenta de forma transparente: una sesión con estado en el
  portal no se puede reproducir desde un paso intermedio.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import ResultOutcome


class PortalError(Exception):
    """Raíz de todos los errores del motor de navegación."""


class CredentialError(PortalError):
    """Certificado cliente, passphrase o CA inválidos. Fatal."""


class TransportError(PortalError):
    """Fallo de red/TLS o respuesta HTTP no utilizable."""


class DeadlineExceeded(TransportError):
    """El plazo del workflow expiró en un punto de suspensión."""


class EncodingError(PortalError):
    """Carácter fuera del repertorio Windows-31J (o bytes no decodificables)."""


class StructuralError(PortalError):
    """Falta un elemento esperado (formulario, menú, tabla).

    Suele indicar que el portal cambió su layout o que la sesión expiró.
    """


class NavigationError(StructuralError):
    """No existe una entrada de menú con la etiqueta pedida."""


class FormNotFoundError(StructuralError):
    """Ningún formulario de la página cumple el predicado de `action`."""


class ApplicationError(PortalError):
    """Rechazo de negocio: RET/RET_CODE distinto de cero o error resaltado."""

    def __init__(self, message: str, *, outcome: ResultOutcome | None = None) -> None:
        super().__init__(message)
        self.outcome = outcome
