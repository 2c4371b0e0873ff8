"""
Grava as configurações padrão da loja (frete, gateway e email) que ainda não existem
"""
from django.core.management.base import BaseCommand

from loja.configuracao import PADROES_FRETE, PADROES_GERAIS, limpar_cache
from loja.models import ConfiguracaoSite

PADROES_GATEWAY = {
    'gateway_pix_enabled': ('true', 'boolean'),
    'gateway_credit_card_enabled': ('true', 'boolean'),
    'gateway_debit_card_enabled': ('true', 'boolean'),
    'gateway_boleto_enabled': ('true', 'boolean'),
    'gateway_max_installments': ('12', 'number'),
    'gateway_free_installments': ('1', 'number'),
    'gateway_auto_return': ('approved', 'text'),
    'gateway_expiration_hours': ('24', 'number'),
    'gateway_statement_descriptor': ('OUDLA', 'text'),
    'gateway_binary_mode': ('false', 'boolean'),
    'gateway_excluded_methods': ('', 'text'),
    'gateway_excluded_types': ('', 'text'),
}

NUMERICAS = {
    'free_shipping_threshold', 'default_shipping_value', 'shipping_min_days', 'shipping_max_days',
    'shipping_default_weight', 'shipping_default_height', 'shipping_default_width',
    'shipping_default_length', 'shipping_correios_extra_days',
}


class Command(BaseCommand):
    help = 'Grava as configurações padrão de frete, gateway e email'

    def add_arguments(self, parser):
        parser.add_argument(
            '--redefinir',
            action='store_true',
            help='Volta as chaves existentes para o valor padrão',
        )

    def handle(self, *args, **options):
        padroes = {}
        for chave, valor in PADROES_FRETE.items():
            padroes[chave] = (valor, 'number' if chave in NUMERICAS else 'text')
        for chave, valor in PADROES_GERAIS.items():
            padroes[chave] = (valor, 'text')
        padroes.update(PADROES_GATEWAY)

        criadas = 0
        for chave, (valor, tipo) in padroes.items():
            if options['redefinir']:
                _, created = ConfiguracaoSite.objects.update_or_create(
                    chave=chave, defaults={'valor': valor, 'tipo': tipo})
            else:
                _, created = ConfiguracaoSite.objects.get_or_create(
                    chave=chave, defaults={'valor': valor, 'tipo': tipo})
            if created:
                criadas += 1

        limpar_cache()
        self.stdout.write(self.style.SUCCESS(
            f'{criadas} configurações criadas ({len(padroes)} chaves conferidas)'))
