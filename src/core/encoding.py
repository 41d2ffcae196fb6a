"""Puente de codificación UTF-8 <-> Windows-31J.

Por qué estricto:
- El portal acepta un cuerpo con caracteres sustituidos sin quejarse, así que
  un `errors="replace"` corrompería silenciosamente los valores enviados.
- Algunos caracteres (¢ £ ¬ ‖ − 〜) se codifican pero vuelven como su
  forma de ancho completo; también se rechazan para que el valor enviado sea
  el mismo que se leerá después.
- `cp932` es la variante de Shift_JIS que usan los navegadores y el portal
  (incluye los caracteres extendidos de NEC/IBM).
"""

from __future__ import annotations

from core.errors import EncodingError

LEGACY_CODEC = "cp932"


def to_legacy(text: str) -> bytes:
    """Codifica `text` para enviarlo al portal."""

    try:
        encoded = text.encode(LEGACY_CODEC, errors="strict")
    except UnicodeEncodeError as exc:
        bad = exc.object[exc.start : exc.end]
        raise EncodingError(
            f"carácter no representable en {LEGACY_CODEC} en la posición {exc.start}: {bad!r}"
        ) from exc
    if encoded.decode(LEGACY_CODEC) != text:
        position, bad = _first_lossy(text)
        raise EncodingError(
            f"carácter sin ida y vuelta en {LEGACY_CODEC} en la posición {position}: {bad!r}"
        )
    return encoded


def _first_lossy(text: str) -> tuple[int, str]:
    return next(
        ((position, char) for position, char in enumerate(text) if char.encode(LEGACY_CODEC).decode(LEGACY_CODEC) != char),
        (0, text),
    )


def from_legacy(data: bytes) -> str:
    """Decodifica una página o respuesta de control del portal."""

    try:
        return data.decode(LEGACY_CODEC, errors="strict")
    except UnicodeDecodeError as exc:
        raise EncodingError(
            f"bytes no decodificables como {LEGACY_CODEC} en la posición {exc.start}"
        ) from exc
