"""
Comprovante do pedido em PDF (reportlab)
"""
import logging
from io import BytesIO

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

MARGEM = 50


class _Pagina:
    """Escreve linha a linha de cima para baixo, abrindo página nova quando acaba o espaço"""

    def __init__(self, c):
        self.c = c
        self.largura, self.altura = A4
        self.y = self.altura - MARGEM

    def _quebra(self, altura_linha):
        if self.y - altura_linha < MARGEM:
            self.c.showPage()
            self.y = self.altura - MARGEM

    def texto(self, texto, tamanho=10, negrito=False, alinhamento='esquerda', cor=colors.black):
        altura_linha = tamanho * 1.4
        self._quebra(altura_linha)
        self.y -= altura_linha
        self.c.setFont('Helvetica-Bold' if negrito else 'Helvetica', tamanho)
        self.c.setFillColor(cor)
        if alinhamento == 'centro':
            self.c.drawCentredString(self.largura / 2, self.y, texto)
        elif alinhamento == 'direita':
            self.c.drawRightString(self.largura - MARGEM, self.y, texto)
        else:
            self.c.drawString(MARGEM, self.y, texto)
        self.c.setFillColor(colors.black)

    def titulo(self, texto):
        self.espaco(12)
        self.texto(texto, tamanho=14, negrito=True)
        self.c.line(MARGEM, self.y - 3, MARGEM + self.c.stringWidth(texto, 'Helvetica-Bold', 14), self.y - 3)
        self.espaco(6)

    def espaco(self, pontos):
        self.y -= pontos


def _data(valor):
    return timezone.localtime(valor).strftime('%d/%m/%Y') if valor else 'N/A'


def gerar_comprovante(pedido):
    """
    Gera o PDF do comprovante.

    Args:
        pedido: Pedido com itens

    Returns:
        bytes: conteúdo do PDF
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Comprovante {pedido.numero}")
    pagina = _Pagina(c)

    pagina.texto('OUDLA', tamanho=20, negrito=True, alinhamento='centro')
    pagina.espaco(6)
    pagina.texto('Comprovante de Pedido', tamanho=16, alinhamento='centro')
    pagina.espaco(20)

    pagina.texto(f"Pedido: {pedido.numero}", tamanho=12, negrito=True)
    pagina.texto(f"Data: {_data(pedido.criado_em)}")
    if pedido.pago_em:
        pagina.texto(f"Pago em: {_data(pedido.pago_em)}")

    pagina.titulo('Dados do Cliente')
    pagina.texto(f"Nome: {pedido.nome_cliente}")
    pagina.texto(f"Email: {pedido.email_cliente}")
    pagina.texto(f"Telefone: {pedido.telefone_cliente}")

    pagina.titulo('Endereço de Entrega')
    pagina.texto(f"{pedido.rua}, {pedido.numero_endereco}")
    if pedido.complemento:
        pagina.texto(pedido.complemento)
    pagina.texto(pedido.bairro)
    pagina.texto(f"{pedido.cidade} - {pedido.estado}")
    pagina.texto(f"CEP: {pedido.cep}")

    pagina.titulo('Itens do Pedido')
    for indice, item in enumerate(pedido.itens.all(), start=1):
        pagina.texto(f"{indice}. {item.nome_produto}")
        pagina.texto(f"   Tamanho: {item.tamanho} | Quantidade: {item.quantidade}", tamanho=9)
        if item.nome_cor:
            pagina.texto(f"   Cor: {item.nome_cor}", tamanho=9)
        if item.posicao_estampa:
            pagina.texto(f"   Estampa: {item.posicao_estampa}", tamanho=9)
        pagina.texto(f"   Valor unitário: R$ {item.preco_unitario}", tamanho=9)
        pagina.texto(f"   Subtotal: R$ {item.subtotal}", tamanho=9, negrito=True)
        pagina.espaco(6)

    pagina.espaco(10)
    pagina.texto(f"Subtotal: R$ {pedido.subtotal}", alinhamento='direita')
    if pedido.desconto:
        pagina.texto(f"Desconto: - R$ {pedido.desconto}", alinhamento='direita')
    pagina.texto(f"Frete: R$ {pedido.frete}", alinhamento='direita')
    pagina.espaco(4)
    pagina.texto(f"TOTAL: R$ {pedido.total}", tamanho=12, negrito=True, alinhamento='direita')

    if pedido.metodo_pagamento:
        pagina.titulo('Forma de Pagamento')
        pagina.texto(f"Método: {pedido.metodo_pagamento}")
        if pedido.parcelas and pedido.parcelas > 1:
            pagina.texto(f"Parcelas: {pedido.parcelas}x")
        pagina.texto(f"Status: {pedido.status_pagamento or 'Pendente'}")

    if pedido.codigo_verificacao:
        pagina.titulo('Código de Verificação')
        pagina.texto(pedido.codigo_verificacao, tamanho=12, negrito=True, alinhamento='centro')
        pagina.texto('Use este código para validar a autenticidade do seu pedido.',
                     tamanho=8, alinhamento='centro', cor=colors.gray)

    pagina.espaco(24)
    pagina.texto('Este é um documento gerado automaticamente.', tamanho=8, alinhamento='centro', cor=colors.gray)
    pagina.texto(f"Gerado em: {timezone.localtime().strftime('%d/%m/%Y %H:%M:%S')}",
                 tamanho=8, alinhamento='centro', cor=colors.gray)

    c.showPage()
    c.save()
    logger.info(f"Comprovante gerado para o pedido {pedido.numero}")
    return buffer.getvalue()
