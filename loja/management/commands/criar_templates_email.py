"""
Management command para criar os templates de email padrão
"""
from django.core.management.base import BaseCommand

from loja.models import TemplateEmail

CABECALHO = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #222;">'
    '<div style="text-align: center; padding: 24px 0;">'
    '<img src="{{logo_url}}" alt="OUDLA" style="max-height: 48px;" /></div>'
)
RODAPE = (
    '<p style="color: #888; font-size: 12px; text-align: center; margin-top: 32px;">'
    'OUDLA - este é um email automático, não responda.</p></div>'
)

TEMPLATES_PADRAO = [
    {
        'chave': 'order_confirmation',
        'nome': 'Confirmação de Pedido',
        'assunto': 'Pedido {{numero_pedido}} confirmado!',
        'conteudo_html': CABECALHO + """
<h1 style="font-size: 22px;">Obrigado pela sua compra, {{nome}}!</h1>
<p>Recebemos o pagamento do pedido <strong>{{numero_pedido}}</strong> em {{data_pedido}}.</p>
{{itens}}
<table style="width: 100%; margin-top: 16px;">
    <tr><td>Subtotal</td><td style="text-align: right;">{{subtotal}}</td></tr>
    <tr><td>Frete</td><td style="text-align: right;">{{frete}}</td></tr>
    <tr><td><strong>Total</strong></td><td style="text-align: right;"><strong>{{total}}</strong></td></tr>
</table>
<p>Pagamento: {{metodo_pagamento}}</p>
<h3>Endereço de entrega</h3>
<p style="white-space: pre-line;">{{endereco}}</p>
<p><a href="{{link_rastreio}}">Acompanhe seu pedido</a></p>
""" + RODAPE,
    },
    {
        'chave': 'tracking_code',
        'nome': 'Código de Rastreio',
        'assunto': 'Seu pedido {{numero_pedido}} foi enviado',
        'conteudo_html': CABECALHO + """
<h1 style="font-size: 22px;">Seu pedido está a caminho, {{nome}}!</h1>
<p>O pedido <strong>{{numero_pedido}}</strong> foi postado.</p>
<p style="font-size: 20px; letter-spacing: 2px;"><strong>{{codigo_rastreio}}</strong></p>
<p><a href="{{link_rastreio}}">Rastrear pedido</a></p>
""" + RODAPE,
    },
    {
        'chave': 'newsletter_welcome',
        'nome': 'Boas-vindas Newsletter',
        'assunto': 'Bem-vindo(a) à OUDLA',
        'conteudo_html': CABECALHO + """
<h1 style="font-size: 22px;">Que bom ter você aqui!</h1>
<p>O email <strong>{{email}}</strong> agora recebe nossos lançamentos e promoções em primeira mão.</p>
""" + RODAPE,
    },
]


class Command(BaseCommand):
    help = 'Cria os templates de email padrão da loja'

    def add_arguments(self, parser):
        parser.add_argument(
            '--sobrescrever',
            action='store_true',
            help='Substitui o conteúdo dos templates que já existem',
        )

    def handle(self, *args, **options):
        self.stdout.write('Criando templates de email padrão...')

        criados = 0
        atualizados = 0
        for dados in TEMPLATES_PADRAO:
            valores = {k: v for k, v in dados.items() if k != 'chave'}
            if options['sobrescrever']:
                template, created = TemplateEmail.objects.update_or_create(chave=dados['chave'], defaults=valores)
            else:
                template, created = TemplateEmail.objects.get_or_create(chave=dados['chave'], defaults=valores)

            if created:
                criados += 1
                self.stdout.write(f'  Criado: {template.nome}')
            elif options['sobrescrever']:
                atualizados += 1
                self.stdout.write(f'  Atualizado: {template.nome}')

        self.stdout.write(
            self.style.SUCCESS(f'Templates processados: {criados} criados, {atualizados} atualizados')
        )
