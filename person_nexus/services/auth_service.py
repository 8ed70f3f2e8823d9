"""
Autenticação por token Bearer.
O token fica num mapeamento mutável (st.session_state no console Streamlit).
"""
from typing import Any, MutableMapping, Optional

from person_nexus import config
from person_nexus.logger import get_logger
from person_nexus.services.http import ApiError, HttpClient

logger = get_logger(__name__)

LOGIN_PATH = "/auth/login"


async def login(client: HttpClient, username: str, password: str) -> str:
    """
    Autentica na API e devolve o access_token.
    Parâmetros:
        client (HttpClient): cliente HTTP
        username (str): usuário
        password (str): senha
    Retorno:
        str: token de acesso
    """
    res = await client.request("POST", LOGIN_PATH, json={"username": username, "password": password})
    token = res.get("access_token") if isinstance(res, dict) else None
    if not token:
        logger.warning(f"Login sem token na resposta: username={username}")
        raise ApiError("Token não retornado pelo servidor", 200)
    logger.info(f"Login realizado: username={username}")
    return str(token)


class AuthSession:
    def __init__(self, storage: Optional[MutableMapping[str, Any]] = None, storage_key: str = config.TOKEN_STORAGE_KEY):
        self.storage = storage if storage is not None else {}
        self.storage_key = storage_key

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(self.storage_key) or None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    async def login(self, client: HttpClient, username: str, password: str) -> None:
        self.storage[self.storage_key] = await login(client, username, password)

    def logout(self) -> None:
        if self.storage_key in self.storage:
            self.storage.pop(self.storage_key)
            logger.info("Sessão encerrada")
