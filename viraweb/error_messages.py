"""
Centralized error mapping.

Every user-facing error string of the API lives here. Services raise
HTTPException with details taken from these catalogs, and database failures
that escape a service are translated by the handlers registered in
`register_error_handlers`.
"""

import logging
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

SERVER_ERROR = "Ocorreu um erro no servidor. Tente novamente mais tarde."
CPF_ERROR = (
    "Erro: o CPF informado é inválido ou já cadastrado. Você pode deixar o CPF em branco."
)
CONSTRAINT_ERROR = (
    "Erro: valor duplicado no banco de dados ou violação de restrição. "
    "Verifique os dados e tente novamente."
)
PERMISSION_ERROR = (
    "Permissão negada para essa operação. Verifique suas credenciais ou permissões."
)
NOT_AUTHENTICATED = "Não autenticado"

# Failure message per action, keyed "<domain>.<action>"
ACTION_FAILURES = {
    "patients.fetch": "Erro ao buscar clientes",
    "patients.create": "Erro ao adicionar cliente",
    "patients.update": "Erro ao atualizar cliente",
    "patients.delete": "Erro ao remover cliente",
    "professionals.fetch": "Erro ao buscar profissionais",
    "professionals.create": "Erro ao adicionar profissional",
    "appointments.fetch": "Erro ao buscar agendamentos",
    "appointments.create": "Erro ao criar agendamento",
    "attendance.fetch": "Falha ao buscar presenças",
    "attendance.update": "Falha ao atualizar presença",
    "attendance.create": "Falha ao registrar presença",
    "financial.record": "Erro ao registrar pagamento",
    "financial.mark_paid": "Pagamento já está quitado",
    "goals.fetch": "Erro ao buscar metas",
    "goals.create": "Erro ao criar meta",
    "goals.update": "Erro ao atualizar meta",
    "goals.delete": "Erro ao deletar meta",
    "reports.create": "Erro ao criar relatório",
    "settings.update_email": "Erro ao atualizar email",
    "settings.update_password": "Erro ao atualizar senha",
    "billing.checkout": "Falha ao criar sessão de pagamento",
    "billing.unavailable": "Serviço de pagamentos temporariamente indisponível",
    "billing.invalid_plan": "Plano inválido",
    "billing.downgrade": "Cannot downgrade or select same plan",
    "billing.no_subscription": "Nenhuma assinatura ativa encontrada",
    "billing.session_unpaid": "Pagamento ainda não confirmado",
    "auth.email_required": "Email é obrigatório",
    "auth.user_not_found": "Usuário não encontrado",
    "auth.token_password_required": "Token e senha são obrigatórios",
    "auth.recovery_failed": "Erro ao enviar email de recuperação",
    "auth.reset_failed": "Erro ao redefinir senha",
    "auth.not_configured": "Configuração do Supabase não encontrada",
}

NOT_FOUND = {
    "patient": "Cliente não encontrado",
    "professional": "Profissional não encontrado",
    "appointment": "Agendamento não encontrado",
    "attendance": "Presença não encontrada",
    "payment": "Pagamento não encontrado",
    "financial_session": "Sessão não encontrada",
    "goal": "Meta não encontrada",
    "todo": "Tarefa não encontrada",
    "note": "Nota não encontrada",
    "notification": "Notificação não encontrada",
    "report": "Relatório não encontrado",
    "ticket": "Chamado não encontrado",
    "subscription": "Assinatura não encontrada",
}


def map_db_error_to_user_message(error: Optional[Union[BaseException, str]]) -> str:
    """Translate a database/provider error into a friendly Portuguese message"""
    if error is None:
        return SERVER_ERROR

    if isinstance(error, SQLAlchemyError) and getattr(error, "orig", None) is not None:
        message = str(error.orig)
    else:
        message = str(error)

    lowered = message.lower()
    if "cpf" in lowered:
        return CPF_ERROR
    if "duplicate" in lowered or "unique" in lowered or "constraint" in lowered:
        return CONSTRAINT_ERROR
    if "permission denied" in lowered or "forbidden" in lowered:
        return PERMISSION_ERROR
    return message.replace(" | ", " - ")


def action_failure(key: str) -> str:
    return ACTION_FAILURES.get(key, SERVER_ERROR)


def not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=404, detail=NOT_FOUND.get(entity, "Registro não encontrado"))


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers that turn failures into mapped messages"""

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(f"⚠️ Constraint violation on {request.url.path}: {exc.orig}")
        return JSONResponse(status_code=409, content={"detail": map_db_error_to_user_message(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"❌ Database error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": SERVER_ERROR})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Convert validation errors on the Authorization header into 401s;
        everything else stays a 422.
        """
        for error in exc.errors():
            if error.get("loc") and "authorization" in str(error.get("loc")).lower():
                logger.warning(f"Authentication failed for {request.url.path}: bad Authorization header")
                return JSONResponse(status_code=401, content={"detail": NOT_AUTHENTICATED})

        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content={"detail": jsonable_errors(exc)},
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the non-serializable `ctx` payloads"""
    cleaned = []
    for error in exc.errors():
        item = {k: v for k, v in error.items() if k != "ctx"}
        if "ctx" in error:
            item["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        cleaned.append(item)
    return cleaned
