"""
Consulta de endereço pelo CEP (ViaCEP)
"""
import logging

import requests
from django.conf import settings

from loja.validadores import cep_valido, formatar_cep, somente_digitos

logger = logging.getLogger(__name__)


class EnderecoNaoEncontrado(Exception):
    pass


def buscar_endereco(cep):
    """
    Busca rua, bairro, cidade e UF de um CEP.

    Raises:
        ValueError: CEP com formato inválido
        EnderecoNaoEncontrado: CEP inexistente ou serviço fora do ar
    """
    if not cep_valido(cep):
        raise ValueError("CEP inválido")

    digitos = somente_digitos(cep)
    try:
        resposta = requests.get(f"{settings.VIACEP_URL}/{digitos}/json/", timeout=8)
        resposta.raise_for_status()
        dados = resposta.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Erro ao consultar ViaCEP para {digitos}: {str(e)}")
        raise EnderecoNaoEncontrado("Não foi possível consultar o CEP") from e

    if dados.get('erro'):
        raise EnderecoNaoEncontrado("CEP não encontrado")

    return {
        'cep': formatar_cep(digitos),
        'rua': dados.get('logradouro') or '',
        'bairro': dados.get('bairro') or '',
        'cidade': dados.get('localidade') or '',
        'estado': dados.get('uf') or '',
    }
