"""Shared validation utilities"""

import re
from typing import Optional


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address (None for blank input)

    Raises:
        ValueError: If email format is invalid
    """
    if not email or not email.strip():
        return None

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Formato de email inválido")

    return email


def _cpf_check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def normalize_cpf(cpf: Optional[str]) -> Optional[str]:
    """
    Validate a Brazilian CPF and format it as XXX.XXX.XXX-XX.

    Blank values become None so the column stays NULL (the per-tenant
    unique constraint ignores NULLs).

    Raises:
        ValueError: If the CPF does not have 11 digits or its check digits are wrong
    """
    if cpf is None or not cpf.strip():
        return None

    digits = re.sub(r"\D", "", cpf)
    if len(digits) != 11 or digits == digits[0] * 11:
        raise ValueError("CPF inválido")

    if _cpf_check_digit(digits[:9]) != int(digits[9]) or _cpf_check_digit(digits[:10]) != int(digits[10]):
        raise ValueError("CPF inválido")

    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def validate_br_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a Brazilian phone number (DDD + 8 or 9 digits, optional +55).

    Returns the digits only, without the country code.
    """
    if not phone or not phone.strip():
        return None

    digits = re.sub(r"\D", "", phone)
    if digits.startswith("55") and len(digits) in (12, 13):
        digits = digits[2:]

    if len(digits) not in (10, 11):
        raise ValueError("Telefone deve ter DDD e 8 ou 9 dígitos")

    return digits
