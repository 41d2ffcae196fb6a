"""Sesión HTTP autenticada contra el portal (wrapper de httpx).

Por qué un wrapper:
- Estandariza timeouts, headers, mutual TLS y cookies para todos los workflows.
- El estado del portal (login, "paso actual" del workflow) vive en la cookie,
  así que un workflow usa una única sesión y peticiones secuenciales.
- Facilita testeo: se puede construir sobre un `httpx.MockTransport`.
"""

from __future__ import annotations

import logging
import ssl

import httpx

from adapters.credentials import CredentialMaterial, build_ssl_context, decode_client_identity
from core.config import AppSettings
from core.encoding import from_legacy, to_legacy
from core.errors import TransportError
from core.traversal import Deadline

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
# El endpoint de transacciones espera este Content-Type aunque el cuerpo sean
# líneas CLAVE=VALOR.
TRANSACTION_CONTENT_TYPE = "text/html"
PORTAL_PREFIX = "/jpnic/"
LOGIN_PATH = "/jpnic/certmemberlogin.do"


def build_client(
    settings: AppSettings | None = None,
    *,
    verify: ssl.SSLContext | bool = True,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con los headers fijos del portal.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los workflows se comporten igual.
    - Los tests inyectan `transport` sin tocar TLS.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        verify=verify,
        transport=transport,
    )


class PortalSession:
    """Una sesión lógica de login: pool de conexiones + cookie jar.

    No es thread-safe ni debe compartirse entre workflows concurrentes.
    """

    def __init__(
        self,
        client: httpx.Client,
        *,
        base_url: str,
        deadline: Deadline | None = None,
    ) -> None:
        self._client = client
        self.base_url = base_url.rstrip("/")
        self.deadline = deadline

    def __enter__(self) -> PortalSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def resolve(self, href: str) -> str:
        """Convierte un href del portal en URL absoluta.

        - `https://...` se usa tal cual
        - `/jpnic/x.do` es relativo al host
        - `x.do` (menús) es relativo a `/jpnic/`
        """

        if href.startswith(("http://", "https://")):
            return href
        if href.startswith("/"):
            return self.base_url + href
        return self.base_url + PORTAL_PREFIX + href

    def _request(self, method: str, url: str, **kwargs: object) -> bytes:
        timeout = self._client.timeout
        if self.deadline is not None:
            self.deadline.check(f"{method} {url}")
            remaining = self.deadline.remaining()
            if timeout.read is None or remaining < timeout.read:
                timeout = httpx.Timeout(remaining)

        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method, url, timeout=timeout, **kwargs)  # type: ignore[arg-type]
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url}: {exc}") from exc

        if response.status_code >= 400:
            raise TransportError(f"{method} {url}: HTTP {response.status_code}")
        return response.content

    def get(self, url: str) -> bytes:
        return self._request("GET", url)

    def post(self, url: str, body: bytes, *, content_type: str = FORM_CONTENT_TYPE) -> bytes:
        return self._request("POST", url, content=body, headers={"Content-Type": content_type})

    def get_page(self, href: str) -> str:
        """GET + decodificación Windows-31J."""

        return from_legacy(self.get(self.resolve(href)))

    def post_page(self, href: str, body: str, *, content_type: str = FORM_CONTENT_TYPE) -> str:
        """Codifica `body`, lo envía y decodifica la respuesta."""

        return from_legacy(self.post(self.resolve(href), to_legacy(body), content_type=content_type))


def open_session(
    material: CredentialMaterial,
    settings: AppSettings | None = None,
    *,
    deadline: Deadline | None = None,
) -> PortalSession:
    """Decodifica la identidad cliente y abre una sesión mutual-TLS."""

    settings = settings or AppSettings()
    identity = decode_client_identity(material)
    context = build_ssl_context(identity)
    logger.info("sesión TLS preparada para %s", identity.subject)
    client = build_client(settings, verify=context)
    return PortalSession(client, base_url=settings.base_url, deadline=deadline)
