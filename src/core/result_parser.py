"""Parser del protocolo de control en texto plano (Webトランザクション).

Formato de respuesta: una marca `CLAVE=VALOR` por línea. Las marcas son
independientes: una línea se prueba contra todas y el valor es el resto de la
línea tras el prefijo fijo de la marca. `RET_CODE=` puede repetirse.

RET_CODE compuesto (8 caracteres):
- `[4:7]` código de interfaz (distinto de "000" => error)
- `[7:]`  código de género  (distinto de "0"   => error, se concatena)
"""

from __future__ import annotations

from typing import Iterable

from core.domain.models import InterfaceError, ResultOutcome
from core.result_codes import ErrorClassifier

MARK_RET = "RET="
MARK_RET_CODE = "RET_CODE="
MARK_RECEP_NO = "RECEP_NO="
MARK_ADM_HANDLE = "ADM_JPNIC_HDL="
MARK_TECH1_HANDLE = "TECH1_JPNIC_HDL="
MARK_TECH2_HANDLE = "TECH2_JPNIC_HDL="

_HANDLE_MARKS = {
    MARK_RECEP_NO: "recep_no",
    MARK_ADM_HANDLE: "adm_handle",
    MARK_TECH1_HANDLE: "tech1_handle",
    MARK_TECH2_HANDLE: "tech2_handle",
}


def split_composite(code: str) -> tuple[str, str]:
    """Separa un RET_CODE en (interfaz, género)."""

    return code[4:7], code[7:]


def parse_result_lines(
    lines: Iterable[str],
    classifier: ErrorClassifier | None = None,
) -> ResultOutcome:
    """Convierte las líneas de respuesta en un `ResultOutcome`.

    No lanza: los errores de negocio quedan en el resultado para que el
    llamador vea RET y todos los RET_CODE juntos.
    """

    classifier = classifier or ErrorClassifier()
    ret = "00"
    ret_codes: list[str] = []
    fields: dict[str, str] = {}

    for raw in lines:
        line = raw.rstrip("\r\n")
        # Las marcas se comparan como subcadena (no prefijo), pero el valor se
        # corta siempre por la longitud del prefijo.
        if MARK_RET in line:
            ret = line[len(MARK_RET) :]
        if MARK_RET_CODE in line:
            ret_codes.append(line[len(MARK_RET_CODE) :])
        for mark, name in _HANDLE_MARKS.items():
            if mark in line:
                fields[name] = line[len(mark) :]

    outcome = ResultOutcome(overall_code=ret, **fields)
    if ret != "00":
        outcome.overall_message = classifier.top_level(ret)

    for code in ret_codes:
        interface_code, genre_code = split_composite(code)
        message = classifier.composite(interface_code, genre_code)
        if not message:
            continue
        outcome.interface_errors.append(
            InterfaceError(
                raw=code,
                interface_code=interface_code,
                genre_code=genre_code,
                message=message,
            )
        )
    return outcome


def marshal_transaction(fields: Iterable[tuple[str, str]]) -> str:
    """Serializa una transacción como líneas `CLAVE=VALOR` en orden."""

    return "".join(f"{key}={value}\n" for key, value in fields)
