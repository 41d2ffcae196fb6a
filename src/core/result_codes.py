"""Clasificación de códigos RET / RET_CODE.

La tabla código -> mensaje es externa y se inyecta como función pura
(`ErrorStatusText`); este módulo solo normaliza y formatea.
"""

from __future__ import annotations

from core.interfaces.portal import ErrorStatusText


def unknown_status_text(code: int) -> str:
    """Lookup por defecto cuando no se inyecta una tabla real."""

    return f"código de error {code} (sin descripción)"


class ErrorClassifier:
    """Traduce códigos numéricos (como texto) a mensajes legibles."""

    def __init__(self, lookup: ErrorStatusText | None = None) -> None:
        self._lookup = lookup or unknown_status_text

    def text(self, code: str) -> str:
        """Mensaje para un código textual ("012", "4", "01").

        Un código no numérico se trata como 0, igual que el portal.
        """

        try:
            number = int(code)
        except ValueError:
            number = 0
        return self._lookup(number)

    def top_level(self, ret: str) -> str:
        return f"{ret}: {self.text(ret)}"

    def composite(self, interface_code: str, genre_code: str) -> str:
        """Mensaje combinado interfaz-luego-género.

        Devuelve "" si ninguno de los dos segmentos indica error.
        """

        message = ""
        if interface_code and interface_code != "000":
            message = f"{interface_code}: {self.text(interface_code)}"
        if genre_code and genre_code != "0":
            message += f"_{self.text(genre_code)}"
        return message
