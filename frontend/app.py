import asyncio
from datetime import date
from typing import Optional

import streamlit as st

from person_nexus.forms.filters import FilterOptions, count_registered_on, filter_people
from person_nexus.forms.person_form import changed_fields, form_from_person, validate_person_form
from person_nexus.models.person import SEXO_OPTIONS, Person, PersonFormData
from person_nexus.services.auth_service import AuthSession
from person_nexus.services.http import ApiError, HttpClient
from person_nexus.services.normalizer import person_to_dict
from person_nexus.services.person_service import PersonService
from person_nexus.services.query_cache import QueryCache
from person_nexus.utils.cpf_utils import format_cpf
from person_nexus.utils.formatters import format_date, format_sexo
from person_nexus.utils.validations import MIN_BIRTH_DATE

st.set_page_config(page_title="Person Nexus", page_icon="👥", layout="wide")

FILTER_KEYS = ("search", "filter_sexo", "filter_naturalidade", "filter_nacionalidade")


# -------------- Helpers --------------
def auth_session() -> AuthSession:
    return AuthSession(st.session_state)


def query_cache() -> QueryCache:
    if "query_cache" not in st.session_state:
        st.session_state["query_cache"] = QueryCache()
    return st.session_state["query_cache"]


def make_client(session: AuthSession) -> HttpClient:
    return HttpClient(token_provider=lambda: session.token, on_unauthorized=session.logout)


def flash(message: str) -> None:
    st.session_state["flash"] = message


def logout() -> None:
    auth_session().logout()
    query_cache().clear()
    for key in ("editing_id", "deleting_id", "username"):
        st.session_state.pop(key, None)


def clear_filters() -> None:
    for key in FILTER_KEYS:
        st.session_state[key] = "Todos" if key == "filter_sexo" else ""


def show_api_error(prefix: str, err: ApiError) -> None:
    # 401 já limpou o token; a próxima execução volta para o login
    if err.status_code == 401:
        st.warning("Sessão expirada. Faça login novamente.")
        st.rerun()
    elif err.status_code == 409:
        st.error(f"{prefix}: CPF já cadastrado ({err.message})")
    elif err.status_code in (400, 422):
        st.error(f"{prefix}: dados inválidos ({err.message})")
    else:
        st.error(f"{prefix} ({err.status_code}): {err.message}")


def _initial_birth_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10]) if value else None
    except ValueError:
        return None


def person_form(key: str, person: Optional[Person] = None) -> Optional[PersonFormData]:
    """
    Renderiza o formulário de pessoa.
    Parâmetros:
        key (str): chave única do formulário
        person (Person, opcional): registro em edição
    Retorno:
        PersonFormData se enviado e válido; None caso contrário
    """
    initial = form_from_person(person)
    with st.form(key, clear_on_submit=False):
        nome = st.text_input("Nome *", value=initial.nome, max_chars=100, placeholder="Ex: João Silva Santos")
        c1, c2 = st.columns(2)
        with c1:
            cpf = st.text_input("CPF *", value=initial.cpf, max_chars=14, placeholder="000.000.000-00")
            email = st.text_input("E-mail", value=initial.email or "", max_chars=100, placeholder="Ex: joao@email.com")
            naturalidade = st.text_input("Naturalidade", value=initial.naturalidade or "", max_chars=50, placeholder="Ex: São Paulo")
        with c2:
            sexo = st.selectbox(
                "Sexo *",
                options=SEXO_OPTIONS,
                index=SEXO_OPTIONS.index(initial.sexo) if initial.sexo in SEXO_OPTIONS else None,
                format_func=format_sexo,
                placeholder="Selecione o sexo",
            )
            nascimento = st.date_input(
                "Data de Nascimento *",
                value=_initial_birth_date(initial.data_nascimento),
                min_value=MIN_BIRTH_DATE,
                max_value=date.today(),
                format="DD/MM/YYYY",
            )
            nacionalidade = st.text_input("Nacionalidade", value=initial.nacionalidade or "", max_chars=50, placeholder="Ex: Brasileira")
        endereco = st.text_input("Endereço", value=initial.endereco or "", max_chars=255, placeholder="Ex: Rua das Flores, 123 - Centro - São Paulo/SP")
        submitted = st.form_submit_button("Atualizar" if person else "Cadastrar", type="primary")

    if not submitted:
        return None
    form = PersonFormData(
        nome=nome,
        cpf=format_cpf(cpf),
        data_nascimento=nascimento.isoformat() if isinstance(nascimento, date) else "",
        sexo=sexo,
        email=email,
        naturalidade=naturalidade,
        nacionalidade=nacionalidade,
        endereco=endereco,
    )
    errors = validate_person_form(form)
    for message in errors.values():
        st.error(message)
    return None if errors else form


def person_details(person: Person) -> None:
    st.markdown(f"**CPF:** {format_cpf(person.cpf)}")
    if person.email:
        st.markdown(f"**E-mail:** {person.email}")
    st.markdown(f"**Nascimento:** {format_date(person.data_nascimento)}")
    if person.naturalidade or person.nacionalidade:
        origem = " - ".join(v for v in (person.naturalidade, person.nacionalidade) if v)
        st.markdown(f"**Origem:** {origem}")
    if person.endereco:
        st.markdown(f"**Endereço:** {person.endereco}")
    if person.sexo:
        st.caption(format_sexo(person.sexo))
    if person.data_cadastro:
        st.caption(f"Cadastrado: {format_date(person.data_cadastro)}")


# -------------- UI Sections --------------
async def login_section(session: AuthSession) -> None:
    st.subheader("🔐 Login")
    with st.form("login_form", clear_on_submit=False):
        user = st.text_input("Usuário", key="login_user")
        pwd = st.text_input("Senha", type="password", key="login_pwd")
        submitted = st.form_submit_button("Entrar")
    if not submitted:
        return
    if not user or not pwd:
        st.warning("Preencha usuário e senha.")
        return
    async with make_client(session) as client:
        try:
            await session.login(client, user, pwd)
        except ApiError as err:
            st.error(err.message or "Falha ao autenticar")
            return
    st.session_state["username"] = user
    st.rerun()


async def people_tab(service: PersonService) -> None:
    st.subheader("Pessoas")
    col_search, col_clear = st.columns([4, 1])
    with col_search:
        search = st.text_input("Buscar por nome, CPF ou email...", key="search")
    with col_clear:
        st.write("")
        st.button("Limpar", on_click=clear_filters)
    with st.expander("Filtros", expanded=False):
        f1, f2, f3 = st.columns(3)
        with f1:
            sexo = st.selectbox("Sexo", options=("Todos",) + SEXO_OPTIONS, format_func=format_sexo, key="filter_sexo")
        with f2:
            naturalidade = st.text_input("Naturalidade", key="filter_naturalidade")
        with f3:
            nacionalidade = st.text_input("Nacionalidade", key="filter_nacionalidade")
    filters = FilterOptions(
        sexo=None if sexo == "Todos" else sexo,
        naturalidade=naturalidade or None,
        nacionalidade=nacionalidade or None,
    )

    try:
        page = await service.list_people_cached(search=search.strip() or None)
    except ApiError as err:
        show_api_error("Erro ao carregar pessoas", err)
        return
    people = page.items
    filtered = filter_people(people, search.strip(), filters)

    m1, m2, m3 = st.columns(3)
    m1.metric("Total de Pessoas", len(people))
    m2.metric("Resultados da Busca", len(filtered))
    m3.metric("Cadastros Hoje", count_registered_on(people, date.today()))

    if not filtered:
        if not people:
            st.info("Nenhuma pessoa cadastrada. Comece cadastrando a primeira pessoa na aba 'Nova Pessoa'.")
        else:
            st.info("Nenhum resultado encontrado. Tente ajustar os filtros ou termos de busca.")
        return

    for person in filtered:
        editing = st.session_state.get("editing_id") == person.id
        deleting = st.session_state.get("deleting_id") == person.id
        with st.expander(f"{person.nome} (CPF {format_cpf(person.cpf)})", expanded=editing or deleting):
            person_details(person)
            b1, b2, _ = st.columns([1, 1, 4])
            with b1:
                if st.button("Editar", key=f"edit_{person.id}"):
                    st.session_state["editing_id"] = person.id
                    st.rerun()
            with b2:
                if st.button("Excluir", key=f"del_{person.id}"):
                    st.session_state["deleting_id"] = person.id
                    st.rerun()

            if editing:
                await edit_section(service, person)
            if deleting:
                await delete_section(service, person)


async def edit_section(service: PersonService, person: Person) -> None:
    st.markdown("**Editar Pessoa**")
    form = person_form(f"form_edit_{person.id}", person)
    if st.button("Cancelar edição", key=f"cancel_edit_{person.id}"):
        st.session_state.pop("editing_id", None)
        st.rerun()
    if form is None:
        return
    changes = changed_fields(person, form)
    if not changes:
        st.info("Nenhuma alteração para salvar.")
        return
    try:
        await service.update_person(person.id, changes)
    except ApiError as err:
        show_api_error("Erro ao atualizar", err)
        return
    st.session_state.pop("editing_id", None)
    flash("Pessoa atualizada: registro atualizado com sucesso.")
    st.rerun()


async def delete_section(service: PersonService, person: Person) -> None:
    st.warning(f"Tem certeza que deseja excluir o registro de **{person.nome}**? Esta ação não pode ser desfeita.")
    c1, c2, _ = st.columns([1, 1, 4])
    with c1:
        confirmed = st.button("Confirmar exclusão", key=f"confirm_del_{person.id}", type="primary")
    with c2:
        if st.button("Cancelar", key=f"cancel_del_{person.id}"):
            st.session_state.pop("deleting_id", None)
            st.rerun()
    if not confirmed:
        return
    try:
        await service.delete_person(person.id)
    except ApiError as err:
        show_api_error("Erro ao remover", err)
        return
    st.session_state.pop("deleting_id", None)
    flash("Pessoa removida: o registro foi removido com sucesso.")
    st.rerun()


async def create_tab(service: PersonService) -> None:
    st.subheader("Cadastrar Nova Pessoa")
    st.caption("Preencha os dados para cadastrar uma nova pessoa.")
    form = person_form("form_create")
    if form is None:
        return
    try:
        created = await service.create_person(form)
    except ApiError as err:
        show_api_error("Erro ao cadastrar", err)
        return
    flash(f"Pessoa cadastrada: {created.nome} ({format_cpf(created.cpf)}).")
    st.rerun()


async def cpf_lookup_tab(service: PersonService) -> None:
    st.subheader("Consultar por CPF")
    cpf = st.text_input("CPF", max_chars=14, placeholder="000.000.000-00", key="lookup_cpf")
    if not st.button("Consultar"):
        return
    try:
        person = await service.get_person_by_cpf(format_cpf(cpf))
    except ApiError as err:
        if err.status_code == 404:
            st.warning(f"Não encontrada: {err.message}")
        else:
            show_api_error("Erro na consulta", err)
        return
    person_details(person)
    st.json(person_to_dict(person))


async def main_ui():
    session = auth_session()
    st.title("👥 Person Nexus")
    st.caption("Sistema de gerenciamento de pessoas")

    # Gating de autenticação
    if not session.is_authenticated:
        await login_section(session)
        st.stop()

    st.sidebar.markdown(f"**Usuário:** {st.session_state.get('username', '')}")
    st.sidebar.button("Sair", on_click=logout)

    message = st.session_state.pop("flash", None)
    if message:
        st.success(message)

    async with make_client(session) as client:
        service = PersonService(client, query_cache())
        tabs = st.tabs(["Pessoas", "Nova Pessoa", "Consultar CPF", "Sobre"])

        with tabs[0]:
            await people_tab(service)

        with tabs[1]:
            await create_tab(service)

        with tabs[2]:
            await cpf_lookup_tab(service)

        with tabs[3]:
            st.subheader("Sobre o Projeto")
            st.markdown(
                """
                **Person Nexus**: console de cadastro de pessoas sobre a API REST.
                - Listagem com busca por nome, CPF ou email e filtros
                - Cadastro, edição parcial e exclusão com confirmação
                - Validação de CPF pelos dígitos verificadores
                """
            )
            st.caption("Construído com Streamlit + httpx (async)")

asyncio.run(main_ui())
