"""
Validações de documentos e formatos brasileiros usados no checkout
"""
import re

from django.core.exceptions import ValidationError

NUMERO_PEDIDO_RE = re.compile(r'^OUDLA-\d{8}-\d{4}$')


def somente_digitos(valor):
    """Remove tudo que não for dígito"""
    return re.sub(r'\D', '', str(valor or ''))


def cpf_valido(cpf):
    """
    Verifica os dois dígitos verificadores de um CPF.

    Aceita o CPF com ou sem máscara (000.000.000-00).
    """
    digitos = somente_digitos(cpf)
    if len(digitos) != 11:
        return False
    # 000.000.000-00, 111.111.111-11 ... passam na conta mas não existem
    if digitos == digitos[0] * 11:
        return False

    numeros = [int(d) for d in digitos]

    soma = sum(numeros[i - 1] * (11 - i) for i in range(1, 10))
    resto = (soma * 10) % 11
    if resto == 10:
        resto = 0
    if resto != numeros[9]:
        return False

    soma = sum(numeros[i - 1] * (12 - i) for i in range(1, 11))
    resto = (soma * 10) % 11
    if resto == 10:
        resto = 0
    return resto == numeros[10]


def cep_valido(cep):
    return len(somente_digitos(cep)) == 8


def telefone_valido(telefone):
    return len(somente_digitos(telefone)) in (10, 11)


def numero_pedido_valido(numero):
    return bool(NUMERO_PEDIDO_RE.match(numero or ''))


def formatar_cep(cep):
    """00000000 -> 00000-000"""
    digitos = somente_digitos(cep)
    if len(digitos) != 8:
        return cep
    return f"{digitos[:5]}-{digitos[5:]}"


def formatar_cpf(cpf):
    digitos = somente_digitos(cpf)
    if len(digitos) != 11:
        return cpf
    return f"{digitos[:3]}.{digitos[3:6]}.{digitos[6:9]}-{digitos[9:]}"


# Wrappers para usar em campos de modelo e formulários

def validar_cpf(valor):
    if not cpf_valido(valor):
        raise ValidationError("CPF inválido")


def validar_cep(valor):
    if not cep_valido(valor):
        raise ValidationError("CEP deve ter 8 dígitos")


def validar_telefone(valor):
    if not telefone_valido(valor):
        raise ValidationError("Telefone deve ter 10 ou 11 dígitos")
