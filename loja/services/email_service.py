"""
Serviço de emails transacionais (confirmação, rastreio, newsletter)
"""
import logging
from urllib.parse import quote

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone
from django.utils.html import escape, strip_tags

from loja.configuracao import obter_valor
from loja.models import TemplateEmail

logger = logging.getLogger(__name__)

ITENS_EXEMPLO_HTML = (
    '<table style="width: 100%; border-collapse: collapse;"><thead><tr style="border-bottom: 2px solid #ddd;">'
    '<th style="padding: 8px 0; text-align: left;">Produto</th><th style="padding: 8px 0; text-align: center;">Qtd</th>'
    '<th style="padding: 8px 0; text-align: right;">Preço</th><th style="padding: 8px 0; text-align: right;">Subtotal</th>'
    '</tr></thead><tbody><tr style="border-bottom: 1px solid #eee;"><td style="padding: 12px 0;">'
    '<strong>Camiseta OUDLA Premium</strong><br/><span style="color: #666; font-size: 13px;">Tam: M | Cor: Preto</span></td>'
    '<td style="padding: 12px 0; text-align: center;">1</td><td style="padding: 12px 0; text-align: right;">R$ 99.90</td>'
    '<td style="padding: 12px 0; text-align: right; font-weight: bold;">R$ 99.90</td></tr></tbody></table>'
)

VARIAVEIS_EXEMPLO = {
    'nome': 'João da Silva',
    'email': 'joao@exemplo.com',
    'cpf': '123.456.789-00',
    'telefone': '(11) 99999-9999',
    'endereco': 'Rua Exemplo, 123\nCentro\nSão Paulo - SP\nCEP: 01001-000',
    'numero_pedido': 'OUDLA-20250212-0001',
    'subtotal': 'R$ 199.90',
    'frete': 'R$ 19.90',
    'total': 'R$ 219.80',
    'metodo_pagamento': 'Cartão de Crédito',
    'codigo_rastreio': 'BR123456789BR',
    'itens': ITENS_EXEMPLO_HTML,
}


class EmailService:
    """Envio dos emails a partir dos templates editáveis"""

    @staticmethod
    def enviar(destino, assunto, html):
        """
        Envia um email HTML com versão texto.

        Returns:
            bool: True se o backend aceitou a mensagem
        """
        try:
            email = EmailMultiAlternatives(
                subject=assunto,
                body=strip_tags(html),
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[destino],
            )
            email.attach_alternative(html, "text/html")
            email.send()
            logger.info(f"Email enviado: {assunto} para {destino}")
            return True
        except Exception as e:
            logger.error(f"Erro enviando email para {destino}: {str(e)}")
            return False

    @staticmethod
    def obter_template(chave):
        """Template ativo com a chave, ou None"""
        template = TemplateEmail.objects.filter(chave=chave).first()
        if template is None or not template.ativo:
            logger.warning(f"Template de email desativado ou inexistente: {chave}")
            return None
        return template

    @staticmethod
    def montar_endereco(pedido):
        linha = f"{pedido.rua}, {pedido.numero_endereco}"
        if pedido.complemento:
            linha += f" - {pedido.complemento}"
        return f"{linha}\n{pedido.bairro}\n{pedido.cidade} - {pedido.estado}\nCEP: {pedido.cep}"

    @staticmethod
    def montar_link_rastreio(pedido):
        codigo = pedido.codigo_rastreio or pedido.numero
        if not codigo:
            return f"{settings.APP_URL}/rastreio"
        return f"{settings.APP_URL}/rastreio?codigo={quote(codigo)}"

    @staticmethod
    def montar_itens_html(itens):
        linhas = []
        for item in itens:
            detalhes = f"Tam: {escape(item.tamanho)}"
            if item.nome_cor:
                detalhes += f" | Cor: {escape(item.nome_cor)}"
            if item.posicao_estampa:
                detalhes += f" | Estampa: {escape(item.posicao_estampa)}"
            linhas.append(
                '<tr style="border-bottom: 1px solid #eee;">'
                f'<td style="padding: 12px 0;"><strong>{escape(item.nome_produto)}</strong><br/>'
                f'<span style="color: #666; font-size: 13px;">{detalhes}</span></td>'
                f'<td style="padding: 12px 0; text-align: center;">{item.quantidade}</td>'
                f'<td style="padding: 12px 0; text-align: right;">R$ {item.preco_unitario}</td>'
                f'<td style="padding: 12px 0; text-align: right; font-weight: bold;">R$ {item.subtotal}</td>'
                '</tr>'
            )
        return (
            '<table style="width: 100%; border-collapse: collapse;"><thead>'
            '<tr style="border-bottom: 2px solid #ddd;">'
            '<th style="padding: 8px 0; text-align: left;">Produto</th>'
            '<th style="padding: 8px 0; text-align: center;">Qtd</th>'
            '<th style="padding: 8px 0; text-align: right;">Preço</th>'
            '<th style="padding: 8px 0; text-align: right;">Subtotal</th>'
            f'</tr></thead><tbody>{"".join(linhas)}</tbody></table>'
        )

    @staticmethod
    def variaveis_pedido(pedido, com_itens=False):
        """Variáveis disponíveis nos templates de pedido"""
        criado_em = timezone.localtime(pedido.criado_em) if pedido.criado_em else timezone.localtime()
        variaveis = {
            'logo_url': obter_valor('email_logo_url'),
            'nome': pedido.nome_cliente,
            'email': pedido.email_cliente,
            'cpf': pedido.cpf_cliente,
            'telefone': pedido.telefone_cliente,
            'endereco': EmailService.montar_endereco(pedido),
            'numero_pedido': pedido.numero,
            'subtotal': f"R$ {pedido.subtotal}",
            'frete': f"R$ {pedido.frete}",
            'total': f"R$ {pedido.total}",
            'metodo_pagamento': pedido.metodo_pagamento or "Não informado",
            'codigo_rastreio': pedido.codigo_rastreio,
            'data_pedido': criado_em.strftime('%d/%m/%Y'),
            'link_rastreio': EmailService.montar_link_rastreio(pedido),
        }
        if com_itens:
            itens = list(pedido.itens.all())
            if itens:
                variaveis['itens'] = EmailService.montar_itens_html(itens)
        return variaveis

    @staticmethod
    def enviar_confirmacao_pedido(pedido):
        """Email de pedido confirmado; registra o horário de envio"""
        template = EmailService.obter_template('order_confirmation')
        if template is None:
            return False

        assunto, html = template.renderizar(EmailService.variaveis_pedido(pedido, com_itens=True))
        enviado = EmailService.enviar(pedido.email_cliente, assunto, html)
        if enviado:
            pedido.confirmacao_enviada_em = timezone.now()
            pedido.save(update_fields=['confirmacao_enviada_em', 'atualizado_em'])
        return enviado

    @staticmethod
    def enviar_codigo_rastreio(pedido):
        template = EmailService.obter_template('tracking_code')
        if template is None:
            return False

        assunto, html = template.renderizar(EmailService.variaveis_pedido(pedido))
        enviado = EmailService.enviar(pedido.email_cliente, assunto, html)
        if enviado:
            pedido.rastreio_enviado_em = timezone.now()
            pedido.save(update_fields=['rastreio_enviado_em', 'atualizado_em'])
        return enviado

    @staticmethod
    def enviar_boas_vindas_newsletter(email):
        template = EmailService.obter_template('newsletter_welcome')
        if template is None:
            return False

        assunto, html = template.renderizar({
            'logo_url': obter_valor('email_logo_url'),
            'email': email,
        })
        return EmailService.enviar(email, assunto, html)

    @staticmethod
    def enviar_teste(template, destino):
        """
        Envia o template com dados fictícios para conferir o layout.

        Args:
            template: instância de TemplateEmail (mesmo desativada)
            destino: email que recebe o teste
        """
        variaveis = dict(
            VARIAVEIS_EXEMPLO,
            logo_url=obter_valor('email_logo_url'),
            data_pedido=timezone.localdate().strftime('%d/%m/%Y'),
            link_rastreio=f"{settings.APP_URL}/rastreio?codigo=BR123456789BR",
        )
        assunto, html = template.renderizar(variaveis)
        return EmailService.enviar(destino, f"[TESTE] {assunto}", html)
