from sqlalchemy.exc import IntegrityError

from viraweb.error_messages import (
    CONSTRAINT_ERROR,
    CPF_ERROR,
    PERMISSION_ERROR,
    SERVER_ERROR,
    action_failure,
    map_db_error_to_user_message,
    not_found,
)


def test_cpf_violation_gets_cpf_message():
    error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: patients.user_id, patients.cpf"))
    assert map_db_error_to_user_message(error) == CPF_ERROR


def test_generic_constraint_message():
    assert map_db_error_to_user_message("duplicate key value violates unique constraint") == CONSTRAINT_ERROR


def test_permission_message():
    assert map_db_error_to_user_message("permission denied for table patients") == PERMISSION_ERROR


def test_fallbacks():
    assert map_db_error_to_user_message(None) == SERVER_ERROR
    assert map_db_error_to_user_message("a | b") == "a - b"


def test_catalog_lookups():
    assert action_failure("attendance.fetch") == "Falha ao buscar presenças"
    exc = not_found("patient")
    assert exc.status_code == 404
    assert exc.detail == "Cliente não encontrado"
