from typing import Any, Dict, List, Optional
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import math
import uvicorn

from person_nexus.logger import get_logger
from person_nexus.services.normalizer import coalesce
from person_nexus.stub_api.auth import TokenAuth, bearer_auth
from person_nexus.stub_api.repository import PessoaRepository
from person_nexus.utils.cpf_utils import CPFUtils
from person_nexus.utils.validations import validate_birth_date, validate_email, validate_name

logger = get_logger(__name__)

API_PREFIX = "/api/v1/pessoas"
REQUIRED_FIELDS = ("nome", "cpf", "dataDeNascimento")


def _validate_fields(payload: Dict[str, Any], repository: PessoaRepository, current_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Valida os campos presentes no payload e devolve os dados prontos para gravação.
    Parâmetros:
        payload (dict): corpo recebido
        repository (PessoaRepository): repositório para checar CPF duplicado
        current_id (str, opcional): id do registro em edição
    Retorno:
        dict: campos normalizados (CPF formatado)
    """
    data = dict(payload)
    birth = coalesce(payload, ("dataDeNascimento", "dataNascimento"))
    data.pop("dataNascimento", None)
    if birth is not None:
        data["dataDeNascimento"] = birth
        if not validate_birth_date(birth):
            logger.warning(f"Data de nascimento inválida: {birth}")
            raise HTTPException(status_code=422, detail="Data de nascimento inválida")
    if "nome" in data and not validate_name(data["nome"] or ""):
        logger.warning(f"Nome inválido: {data['nome']}")
        raise HTTPException(status_code=422, detail="Nome inválido")
    if data.get("email") and not validate_email(data["email"]):
        logger.warning(f"Email inválido: {data['email']}")
        raise HTTPException(status_code=422, detail="Email inválido")
    if "cpf" in data:
        if not CPFUtils.is_valid_cpf(data["cpf"] or ""):
            logger.warning(f"CPF inválido detectado: cpf={data['cpf']}")
            raise HTTPException(status_code=422, detail="CPF inválido")
        data["cpf"] = CPFUtils.format_cpf(data["cpf"])
        existing = repository.find_by_cpf(data["cpf"])
        if existing and existing["id"] != current_id:
            logger.warning(f"CPF já cadastrado: cpf={data['cpf']}")
            raise HTTPException(status_code=409, detail="CPF já cadastrado")
    return data


def create_app(repository: Optional[PessoaRepository] = None, credentials_file: Optional[str] = None) -> FastAPI:
    """
    Cria a API de desenvolvimento de pessoas (armazenamento em memória).
    Parâmetros:
        repository (PessoaRepository, opcional): repositório a usar
        credentials_file (str, opcional): arquivo usuario:senha
    Retorno:
        FastAPI: aplicação configurada
    """
    app = FastAPI(title="Person Nexus Stub API", version="1.0.0")
    app.state.repository = repository or PessoaRepository()
    app.state.auth = TokenAuth(credentials_file)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"message": "Parâmetros inválidos", "errors": jsonable_errors(exc)})

    @app.post("/auth/login")
    async def login(payload: Dict[str, Any]) -> Dict[str, str]:
        username = payload.get("username")
        password = payload.get("password")
        if not username or not password:
            raise HTTPException(status_code=400, detail="Campos obrigatórios: username, password")
        token = app.state.auth.issue_token(str(username), str(password))
        logger.info(f"Login concedido: username={username}")
        return {"access_token": token}

    #########
    @app.get(API_PREFIX)
    async def list_pessoas(
        search: Optional[str] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=1000),
        _: str = Depends(bearer_auth),
    ) -> Dict[str, Any]:
        items, total = app.state.repository.search(search, page, limit)
        logger.info(f"Listando pessoas: search={search!r} page={page} limit={limit} total={total}")
        return {
            "items": items,
            "page": page,
            "limit": limit,
            "totalItems": total,
            "totalPages": math.ceil(total / limit) if total else 0,
        }

    #########
    @app.get(API_PREFIX + "/cpf/{cpf}")
    async def get_pessoa_by_cpf(cpf: str, _: str = Depends(bearer_auth)) -> Dict[str, Any]:
        doc = app.state.repository.find_by_cpf(cpf)
        if not doc:
            logger.warning(f"Pessoa não encontrada: cpf={cpf}")
            raise HTTPException(status_code=404, detail="Pessoa não encontrada")
        return doc

    @app.get(API_PREFIX + "/{pessoa_id}")
    async def get_pessoa(pessoa_id: str, _: str = Depends(bearer_auth)) -> Dict[str, Any]:
        doc = app.state.repository.find_by_id(pessoa_id)
        if not doc:
            logger.warning(f"Pessoa não encontrada: id={pessoa_id}")
            raise HTTPException(status_code=404, detail="Pessoa não encontrada")
        return doc

    #########
    @app.post(API_PREFIX, status_code=status.HTTP_201_CREATED)
    async def create_pessoa(payload: Dict[str, Any], _: str = Depends(bearer_auth)) -> Dict[str, Any]:
        logger.info(f"Recebendo payload para criação de pessoa: {payload}")
        missing = [f for f in REQUIRED_FIELDS if not payload.get(f) and not (f == "dataDeNascimento" and payload.get("dataNascimento"))]
        if missing:
            logger.warning(f"Payload incompleto: faltando={missing}")
            raise HTTPException(status_code=400, detail=f"Campos obrigatórios: {', '.join(REQUIRED_FIELDS)}")
        data = _validate_fields(payload, app.state.repository)
        created = app.state.repository.insert(data)
        logger.info(f"Pessoa criada: id={created['id']}")
        return created

    @app.patch(API_PREFIX + "/{pessoa_id}")
    async def update_pessoa(pessoa_id: str, payload: Dict[str, Any], _: str = Depends(bearer_auth)) -> Dict[str, Any]:
        logger.info(f"Atualização parcial: id={pessoa_id} campos={sorted(payload)}")
        if app.state.repository.find_by_id(pessoa_id) is None:
            raise HTTPException(status_code=404, detail="Pessoa não encontrada")
        for field in REQUIRED_FIELDS:
            if field in payload and not payload[field]:
                raise HTTPException(status_code=400, detail=f"Campo obrigatório não pode ser vazio: {field}")
        data = _validate_fields(payload, app.state.repository, current_id=pessoa_id)
        return app.state.repository.update(pessoa_id, data)

    @app.delete(API_PREFIX + "/{pessoa_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_pessoa(pessoa_id: str, _: str = Depends(bearer_auth)) -> Response:
        if not app.state.repository.delete(pessoa_id):
            logger.warning(f"Pessoa não encontrada para remoção: id={pessoa_id}")
            raise HTTPException(status_code=404, detail="Pessoa não encontrada")
        logger.info(f"Pessoa removida: id={pessoa_id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


def jsonable_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]


app = create_app()

if __name__ == "__main__":
    logger.info("Starting Uvicorn server on 0.0.0.0:3000")
    uvicorn.run(app, host="0.0.0.0", port=3000)
