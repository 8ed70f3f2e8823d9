from pathlib import Path
from typing import Dict, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import os
import secrets

DEFAULT_CREDENTIALS_FILE = Path(__file__).parent / "credentials" / "users.txt"

bearer_scheme = HTTPBearer(auto_error=False)


def load_credentials(file_path: str) -> Dict[str, str]:
	"""
	Lê o arquivo de credenciais no formato usuario:senha.
	Linhas vazias e comentários (#) são ignorados; arquivo ausente resulta em nenhum usuário.
	"""
	credentials: Dict[str, str] = {}
	try:
		with open(file_path, "r", encoding="utf-8") as f:
			for line in f:
				line = line.strip()
				if not line or line.startswith("#"):
					continue
				if ":" not in line:
					continue
				username, password = line.split(":", 1)
				credentials[username] = password
	except FileNotFoundError:
		credentials = {}
	return credentials


class TokenAuth:
	def __init__(self, credentials_file: Optional[str] = None):
		self.credentials_file = credentials_file or os.getenv("PERSON_NEXUS_STUB_CREDENTIALS_FILE", str(DEFAULT_CREDENTIALS_FILE))
		self.credentials = load_credentials(self.credentials_file)
		self.tokens: Dict[str, str] = {}

	def issue_token(self, username: str, password: str) -> str:
		expected = self.credentials.get(username)
		if expected is None or not secrets.compare_digest(expected.encode("utf-8"), password.encode("utf-8")):
			raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciais inválidas")
		token = secrets.token_urlsafe(32)
		self.tokens[token] = username
		return token

	def username_for(self, token: str) -> Optional[str]:
		return self.tokens.get(token)


async def bearer_auth(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> str:
	auth: TokenAuth = request.app.state.auth
	username = auth.username_for(credentials.credentials) if credentials else None
	if username is None:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token ausente ou inválido", headers={"WWW-Authenticate": "Bearer"})
	return username
