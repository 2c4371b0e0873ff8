"""
Leitura das configurações editáveis (tabela ConfiguracaoSite) com valores padrão
"""
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.cache import cache

from .models import ConfiguracaoSite

logger = logging.getLogger(__name__)

CHAVE_CACHE_FRETE = 'config:frete'
CHAVE_CACHE_PRODUTOS = 'produtos:lista'
CHAVE_CACHE_BANNERS = 'banners:ativos'
CHAVE_CACHE_EMPRESA = 'empresa:info'

PADROES_FRETE = {
    'free_shipping_system': 'threshold',
    'free_shipping_threshold': '200',
    'default_shipping_value': '19.99',
    'shipping_min_days': '9',
    'shipping_max_days': '15',
    'shipping_mode': 'flat',
    'shipping_origin_cep': '',
    'shipping_default_weight': '300',
    'shipping_default_height': '4',
    'shipping_default_width': '30',
    'shipping_default_length': '40',
    'shipping_correios_services': '03298,03220',
    'shipping_correios_extra_days': '0',
}

CHAVES_GATEWAY = [
    'gateway_pix_enabled',
    'gateway_credit_card_enabled',
    'gateway_debit_card_enabled',
    'gateway_boleto_enabled',
    'gateway_max_installments',
    'gateway_free_installments',
    'gateway_auto_return',
    'gateway_expiration_hours',
    'gateway_statement_descriptor',
    'gateway_binary_mode',
    'gateway_excluded_methods',
    'gateway_excluded_types',
]

PADROES_GERAIS = {
    'email_logo_url': '',
}


def _para_decimal(valor, padrao):
    try:
        return Decimal(str(valor).replace(',', '.'))
    except (InvalidOperation, ValueError):
        return Decimal(padrao)


def _para_int(valor, padrao):
    try:
        return int(str(valor).strip())
    except (TypeError, ValueError):
        return int(padrao)


def obter_valor(chave, padrao=None):
    """Valor bruto (string) de uma configuração; usa o padrão conhecido se não existir"""
    if padrao is None:
        padrao = PADROES_FRETE.get(chave, PADROES_GERAIS.get(chave, ''))
    registro = ConfiguracaoSite.objects.filter(chave=chave).first()
    if registro is None or registro.valor == '':
        return padrao
    return registro.valor


def obter_valores(chaves):
    """Busca várias chaves em uma consulta; ausentes voltam como string vazia"""
    encontrados = dict(
        ConfiguracaoSite.objects.filter(chave__in=chaves).values_list('chave', 'valor')
    )
    return {chave: encontrados.get(chave) or '' for chave in chaves}


def definir_valor(chave, valor, tipo='text'):
    registro, _ = ConfiguracaoSite.objects.update_or_create(
        chave=chave,
        defaults={'valor': '' if valor is None else str(valor), 'tipo': tipo},
    )
    limpar_cache()
    logger.info(f"Configuração atualizada: {chave}")
    return registro


def limpar_cache(*chaves):
    """Sem argumentos limpa só a configuração de frete"""
    cache.delete_many(list(chaves) or [CHAVE_CACHE_FRETE])


def em_cache(chave, ttl, gerar):
    """Devolve o valor em cache ou chama `gerar` e guarda por `ttl` segundos"""
    valor = cache.get(chave)
    if valor is None:
        valor = gerar()
        cache.set(chave, valor, ttl)
    return valor


def config_frete():
    """
    Configuração de frete já convertida para os tipos de uso.

    Returns:
        dict: sistema, limite, valor_padrao, dias_min, dias_max, modo, cep_origem,
              peso/altura/largura/comprimento padrão, servicos, dias_extras
    """
    config = cache.get(CHAVE_CACHE_FRETE)
    if config is not None:
        return config

    brutos = obter_valores(list(PADROES_FRETE))
    valores = {chave: brutos[chave] or padrao for chave, padrao in PADROES_FRETE.items()}

    config = {
        'sistema': valores['free_shipping_system'],
        'limite': _para_decimal(valores['free_shipping_threshold'], PADROES_FRETE['free_shipping_threshold']),
        'valor_padrao': _para_decimal(valores['default_shipping_value'], PADROES_FRETE['default_shipping_value']),
        'dias_min': _para_int(valores['shipping_min_days'], PADROES_FRETE['shipping_min_days']),
        'dias_max': _para_int(valores['shipping_max_days'], PADROES_FRETE['shipping_max_days']),
        'modo': valores['shipping_mode'],
        'cep_origem': valores['shipping_origin_cep'],
        'peso_padrao': _para_int(valores['shipping_default_weight'], PADROES_FRETE['shipping_default_weight']),
        'altura_padrao': _para_int(valores['shipping_default_height'], PADROES_FRETE['shipping_default_height']),
        'largura_padrao': _para_int(valores['shipping_default_width'], PADROES_FRETE['shipping_default_width']),
        'comprimento_padrao': _para_int(valores['shipping_default_length'], PADROES_FRETE['shipping_default_length']),
        'servicos': [s.strip() for s in valores['shipping_correios_services'].split(',') if s.strip()],
        'dias_extras': _para_int(valores['shipping_correios_extra_days'], PADROES_FRETE['shipping_correios_extra_days']),
    }
    cache.set(CHAVE_CACHE_FRETE, config, settings.CACHE_TTL['FRETE_GRATIS'])
    return config


def config_frete_publica():
    """Parte da configuração de frete que a vitrine precisa"""
    config = config_frete()
    return {
        'sistema': config['sistema'],
        'limite': str(config['limite']),
        'valor_padrao': str(config['valor_padrao']),
        'dias_min': config['dias_min'],
        'dias_max': config['dias_max'],
        'modo': config['modo'],
    }


def config_gateway():
    """Configurações do gateway como strings cruas (vazio = não definido)"""
    return obter_valores(CHAVES_GATEWAY)
