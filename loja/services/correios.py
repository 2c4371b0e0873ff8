"""
Cliente da API de preços e prazos dos Correios
"""
import logging

import requests
from django.conf import settings
from django.core.cache import cache

from loja.validadores import somente_digitos

logger = logging.getLogger(__name__)

NOMES_SERVICOS = {
    '03298': 'PAC',
    '03220': 'SEDEX',
    '03337': 'Mini Envios',
    '04510': 'PAC',
    '04014': 'SEDEX',
}

CHAVE_CACHE_TOKEN = 'correios:token'
VALIDADE_TOKEN = 23 * 60 * 60
TIMEOUT = 10


class CorreiosError(Exception):
    """Falha de autenticação ou comunicação com os Correios"""


class CorreiosService:
    """Autenticação por cartão de postagem e cotação por serviço"""

    @staticmethod
    def configurado():
        return bool(
            settings.CORREIOS_USUARIO
            and settings.CORREIOS_SENHA
            and settings.CORREIOS_CARTAO_POSTAGEM
        )

    @staticmethod
    def autenticar():
        """
        Obtém o token da API; fica em cache por 23 horas.

        Raises:
            CorreiosError: credenciais ausentes ou recusadas
        """
        if not CorreiosService.configurado():
            raise CorreiosError("Credenciais dos Correios não configuradas")

        token = cache.get(CHAVE_CACHE_TOKEN)
        if token:
            return token

        try:
            resposta = requests.post(
                f"{settings.CORREIOS_API_URL}/token/v1/autentica/cartaopostagem",
                json={'numero': settings.CORREIOS_CARTAO_POSTAGEM},
                auth=(settings.CORREIOS_USUARIO, settings.CORREIOS_SENHA),
                timeout=TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(f"Erro de conexão na autenticação dos Correios: {str(e)}")
            raise CorreiosError("Falha de conexão com os Correios") from e

        if not resposta.ok:
            logger.error(f"Correios recusou a autenticação: {resposta.status_code} {resposta.text}")
            raise CorreiosError(f"Autenticação recusada ({resposta.status_code})")

        token = resposta.json().get('token')
        if not token:
            raise CorreiosError("Resposta de autenticação sem token")

        cache.set(CHAVE_CACHE_TOKEN, token, VALIDADE_TOKEN)
        return token

    @staticmethod
    def cotar(cep_origem, cep_destino, pacote, servicos):
        """
        Cota cada serviço; serviços que falham ficam de fora.

        Args:
            cep_origem: CEP de onde sai a encomenda
            cep_destino: CEP do cliente
            pacote: dict com peso (g), altura, largura e comprimento (cm)
            servicos: códigos dos serviços (ex: ["03298", "03220"])

        Returns:
            list: opções {servico, codigo, preco, prazo}; vazia se não autenticar
        """
        try:
            token = CorreiosService.autenticar()
        except CorreiosError as e:
            logger.warning(f"Cotação dos Correios indisponível: {str(e)}")
            return []

        opcoes = []
        for codigo in servicos:
            corpo = {
                'coProduto': codigo,
                'cepOrigem': somente_digitos(cep_origem),
                'cepDestino': somente_digitos(cep_destino),
                'psObjeto': pacote['peso'],
                'tpObjeto': 2,
                'comprimento': pacote['comprimento'],
                'largura': pacote['largura'],
                'altura': pacote['altura'],
                'vlDeclarado': 0,
            }
            try:
                resposta = requests.post(
                    f"{settings.CORREIOS_API_URL}/preco/v1/nacional",
                    json=corpo,
                    headers={'Authorization': f"Bearer {token}"},
                    timeout=TIMEOUT,
                )
                if not resposta.ok:
                    logger.error(f"Erro de preço nos Correios ({codigo}): {resposta.text}")
                    continue
                dados = resposta.json()
                opcoes.append({
                    'servico': NOMES_SERVICOS.get(codigo, codigo),
                    'codigo': codigo,
                    'preco': float(str(dados.get('pcFinal') or dados.get('pcBase') or '0').replace(',', '.')),
                    'prazo': int(dados.get('prazoEntrega') or 0),
                })
            except (requests.RequestException, ValueError) as e:
                logger.error(f"Erro ao cotar serviço {codigo} nos Correios: {str(e)}")

        return opcoes
