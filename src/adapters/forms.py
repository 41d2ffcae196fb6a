"""Formularios del portal: extracción de tokens y construcción de envíos.

Por qué un builder de formato fijo (y no `urlencode`):
- El portal espera `nombre=valor` unidos por `&` SIN percent-encoding: algunos
  valores son bytes literales ya codificados (`%81%40%8C%9F%8D%F5%81%40`) o
  captions japoneses crudos (`　検索　`) que se transcodifican junto con el
  resto del cuerpo. Reintroducir `urlencode` rompe el formato aceptado.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from bs4 import BeautifulSoup
from bs4.element import Tag

from core.errors import FormNotFoundError, StructuralError

# Campos de control de Struts que aparecen en los formularios multi-paso.
TOKEN_FIELD = "org.apache.struts.taglib.html.TOKEN"
DESTDISP_FIELD = "destdisp"
APLYID_FIELD = "aplyid"
PREV_DISP_ID_FIELD = "prevDispId"

# Captions de botones ya codificados en Windows-31J.
ACTION_SEARCH_ENCODED = "%81%40%8C%9F%8D%F5%81%40"  # "　検索　"
ACTION_SEARCH_RAW = "　検索　"
ACTION_REQUEST = "%90%5C%90%BF"  # "申請"
ACTION_CONFIRM = "%8Am%94F"  # "確認"

ActionPredicate = Callable[[str], bool]


def action_contains(fragment: str) -> ActionPredicate:
    return lambda action: fragment in action


def any_action(action: str) -> bool:
    return True


@dataclass
class FormSeed:
    """Lo necesario para enviar un formulario ya renderizado."""

    action: str
    hidden: dict[str, str] = field(default_factory=dict)
    inputs: dict[str, str] = field(default_factory=dict)
    first_input_value: str | None = None

    def value(self, name: str, default: str = "") -> str:
        """Valor de un input (oculto o no) por nombre."""

        if name in self.hidden:
            return self.hidden[name]
        return self.inputs.get(name, default)

    def require(self, name: str, what: str | None = None) -> str:
        if name in self.hidden:
            return self.hidden[name]
        if name in self.inputs:
            return self.inputs[name]
        raise StructuralError(f"{what or name}: campo '{name}' no encontrado en el formulario")


def _seed_from(form: Tag, action: str) -> FormSeed:
    seed = FormSeed(action=action)
    inputs = form.find_all("input")
    if inputs and inputs[0].has_attr("value"):
        seed.first_input_value = str(inputs[0]["value"])

    for element in inputs:
        name = element.get("name")
        if not name or not element.has_attr("value"):
            continue
        value = str(element["value"])
        if str(element.get("type", "")).lower() == "hidden":
            seed.hidden[str(name)] = value
        else:
            seed.inputs.setdefault(str(name), value)
    return seed


def extract_form(html: str, predicate: ActionPredicate = any_action) -> FormSeed:
    """Primer formulario cuyo `action` cumple `predicate`.

    Raises:
        FormNotFoundError: página de error, sesión expirada o validación fallida.
    """

    soup = BeautifulSoup(html, "html.parser")
    forms = soup.find_all("form")
    for form in forms:
        action = form.get("action")
        if action is None:
            continue
        if predicate(str(action)):
            return _seed_from(form, str(action))
    raise FormNotFoundError(f"no se encontró un formulario esperado ({len(forms)} formularios en la página)")


class FormSubmission:
    """Cuerpo `nombre=valor&...` en orden de inserción, sin escapar.

    Admite nombres repetidos (p.ej. varios `netwrkId`).
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._pairs: list[tuple[str, str]] = list(pairs)

    def add(self, name: str, value: str) -> FormSubmission:
        self._pairs.append((name, value))
        return self

    def extend(self, pairs: Iterable[tuple[str, str]]) -> FormSubmission:
        self._pairs.extend(pairs)
        return self

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def names(self) -> list[str]:
        return [name for name, _ in self._pairs]

    def encode(self) -> str:
        return "&".join(f"{name}={value}" for name, value in self._pairs)

    def __str__(self) -> str:
        return self.encode()


def checkbox(value: bool) -> str:
    """Valor de un checkbox tal como lo envía el navegador."""

    return "on" if value else ""
