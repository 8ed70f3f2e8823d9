"""
Cliente HTTP assíncrono (httpx) para a API de pessoas.
fetch_json devolve a tupla (ok, data, status); request converte falhas em ApiError.
"""
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode

import httpx

from person_nexus import config
from person_nexus.logger import get_logger

logger = get_logger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def with_query(path: str, query: Optional[Mapping[str, Any]] = None) -> str:
    """
    Acrescenta parâmetros de consulta ao caminho, ignorando valores None.
    Exemplo: with_query('/pessoas', {'search': 'ana', 'page': None}) -> '/pessoas?search=ana'
    """
    if not query:
        return path
    params = {k: (str(v).lower() if isinstance(v, bool) else v) for k, v in query.items() if v is not None}
    if not params:
        return path
    return f"{path}?{urlencode(params)}"


def _error_message(data: Any, text: str, status: int, reason: str) -> str:
    # JSON com "message" usa o campo; qualquer outro corpo vira a mensagem como veio
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    if text:
        return text
    return f"Erro {status} {reason}".strip()


class HttpClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Inicializa o cliente HTTP.
        Parâmetros:
            base_url (str, opcional): URL base da API (padrão: config.get_base_url())
            token_provider (callable, opcional): devolve o token Bearer atual
            on_unauthorized (callable, opcional): chamado quando a API responde 401
            timeout (float, opcional): tempo limite fixo em segundos
            transport (httpx.AsyncBaseTransport, opcional): transporte alternativo (testes)
        """
        self.base_url = base_url or config.get_base_url()
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=transport)

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(self, method: str, path: str, json: Any = None) -> Tuple[Optional[httpx.Response], Any, bool]:
        # Retorna (resposta, dados, corpo_json); resposta None indica falha de transporte
        try:
            resp = await self._client.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Falha de comunicação: {method} {path} erro={e!r}")
            return None, {"error": str(e) or e.__class__.__name__}, False
        logger.info(f"{method} {path} status={resp.status_code}")
        if resp.status_code == 204 or not resp.content:
            return resp, None, False
        if resp.headers.get("content-type", "").startswith("application/json"):
            try:
                return resp, resp.json(), True
            except ValueError:
                pass
        return resp, {"raw": resp.text}, False

    async def fetch_json(self, method: str, path: str, json: Any = None) -> Tuple[bool, Any, int]:
        """
        Executa a requisição e interpreta o corpo.
        Parâmetros:
            method (str): método HTTP
            path (str): caminho relativo à URL base
            json (opcional): corpo a serializar
        Retorno:
            tuple: (ok, dados, status); falha de transporte retorna status 0
        """
        resp, data, _ = await self._send(method, path, json=json)
        if resp is None:
            return False, data, 0
        if resp.is_error:
            return False, data, resp.status_code
        return True, data, resp.status_code

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        """
        Executa a requisição e devolve o JSON da resposta.
        Lança ApiError para status de erro, falha de transporte ou resposta inválida.
        DELETE com 200/204 e qualquer 204 devolvem None.
        """
        resp, data, is_json = await self._send(method, path, json=json)
        status = resp.status_code if resp is not None else 0
        if resp is None or resp.is_error:
            if resp is None:
                message = data["error"]
            else:
                message = _error_message(data, resp.text, status, resp.reason_phrase)
            logger.warning(f"Requisição rejeitada: {method} {path} status={status} mensagem={message}")
            if status == 401 and self.on_unauthorized:
                self.on_unauthorized()
            raise ApiError(message, status)
        if status == 204 or (method.upper() == "DELETE" and status == 200):
            return None
        if not is_json:
            logger.error(f"Resposta inválida do servidor: {method} {path} status={status}")
            raise ApiError("Resposta inválida do servidor", status)
        return data
