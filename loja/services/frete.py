"""
Cálculo de frete: Correios quando configurado, senão valor fixo
"""
import logging

from loja import regras
from loja.configuracao import config_frete
from loja.models import Produto
from loja.services.correios import CorreiosService
from loja.validadores import cep_valido, somente_digitos

logger = logging.getLogger(__name__)


class CepInvalidoError(ValueError):
    pass


class ItensInvalidosError(ValueError):
    pass


def normalizar_itens(itens):
    """
    Confere a lista {produto_id, quantidade} enviada pelo cliente.

    Returns:
        list: itens com produto_id e quantidade inteiros

    Raises:
        ItensInvalidosError: lista, id ou quantidade fora do formato
    """
    if itens in (None, ''):
        return []
    if not isinstance(itens, list):
        raise ItensInvalidosError("Itens inválidos")

    normalizados = []
    for item in itens:
        if not isinstance(item, dict):
            raise ItensInvalidosError("Itens inválidos")
        try:
            produto_id = int(str(item.get('produto_id')))
            quantidade = int(str(item.get('quantidade') or 1))
        except ValueError:
            raise ItensInvalidosError("Itens inválidos")
        if produto_id <= 0 or quantidade <= 0:
            raise ItensInvalidosError("Itens inválidos")
        normalizados.append({'produto_id': produto_id, 'quantidade': quantidade})
    return normalizados


def _itens_com_medidas(itens):
    """Completa os itens normalizados com as medidas cadastradas no produto"""
    produtos = {p.id: p for p in Produto.objects.filter(id__in={item['produto_id'] for item in itens})}

    completos = []
    for item in itens:
        produto = produtos.get(item['produto_id'])
        completos.append({
            'quantidade': item['quantidade'],
            'peso': produto.frete_peso if produto else None,
            'altura': produto.frete_altura if produto else None,
            'largura': produto.frete_largura if produto else None,
            'comprimento': produto.frete_comprimento if produto else None,
        })
    return completos


def correios_disponivel(config):
    return config['modo'] == 'correios' and CorreiosService.configurado() and bool(config['cep_origem'])


def calcular_frete(cep, itens=None):
    """
    Calcula as opções de frete para um CEP.

    Args:
        cep: CEP de destino, com ou sem máscara
        itens: lista de dicts {produto_id, quantidade}

    Returns:
        dict: modo ("correios" ou "flat"), opcoes e, no modo fixo, prazo_min/prazo_max

    Raises:
        CepInvalidoError: CEP sem 8 dígitos
        ItensInvalidosError: itens fora do formato
    """
    if not cep_valido(cep):
        raise CepInvalidoError("CEP inválido")
    itens = normalizar_itens(itens)

    config = config_frete()
    resultado_base = {
        'sistema_frete_gratis': config['sistema'],
        'limite_frete_gratis': str(config['limite']),
    }

    if correios_disponivel(config):
        pacote = regras.dimensoes_pacote(_itens_com_medidas(itens), config)
        opcoes = CorreiosService.cotar(config['cep_origem'], somente_digitos(cep), pacote, config['servicos'])
        if opcoes:
            for opcao in opcoes:
                opcao['prazo'] += config['dias_extras']
            return dict(resultado_base, modo='correios', opcoes=opcoes)
        logger.warning(f"Correios sem opções para o CEP {cep}; usando frete fixo")

    return dict(
        resultado_base,
        modo='flat',
        opcoes=[{
            'servico': 'Padrão',
            'codigo': 'flat',
            'preco': float(config['valor_padrao']),
            'prazo': config['dias_max'],
        }],
        prazo_min=config['dias_min'],
        prazo_max=config['dias_max'],
    )
