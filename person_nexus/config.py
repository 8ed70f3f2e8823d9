import os

from person_nexus.logger import get_logger


# ====== Configuração via variáveis de ambiente ======
DEFAULT_BASE_URL = "http://localhost:3000"

API_PREFIX = os.getenv("PERSON_NEXUS_API_PREFIX", "/api/v1")
HTTP_TIMEOUT_SECONDS = float(os.getenv("PERSON_NEXUS_HTTP_TIMEOUT", "15"))
PEOPLE_STALE_SECONDS = float(os.getenv("PERSON_NEXUS_STALE_SECONDS", "30"))
LIST_PAGE_LIMIT = int(os.getenv("PERSON_NEXUS_LIST_LIMIT", "100"))

TOKEN_STORAGE_KEY = "person-nexus-token"

logger = get_logger(__name__)


def get_base_url() -> str:
	"""
	URL base da API REST de pessoas.
	Usa PERSON_NEXUS_API_BASE_URL ou API_BASE_URL; sem nenhuma delas,
	registra um aviso e cai no endereço local.
	"""
	base_url = os.getenv("PERSON_NEXUS_API_BASE_URL") or os.getenv("API_BASE_URL") or ""
	if not base_url:
		logger.warning(f"PERSON_NEXUS_API_BASE_URL não definida. Usando {DEFAULT_BASE_URL} como base.")
		return DEFAULT_BASE_URL
	return base_url
