from decimal import Decimal

from django.conf import settings

from . import regras
from .models import COR_PADRAO, TAMANHO_PADRAO
from .validadores import formatar_cep

MOCHILA_SESSION_KEY = getattr(settings, 'MOCHILA_SESSION_KEY', 'mochila')


def _estado_vazio():
    return {
        'itens': [],
        'cupom': None,
        'frete_gratis': False,
        'cep': None,
        'frete': '0.00',
    }


def chave_item(produto_id, cor=None, tamanho=None, posicao_estampa=None):
    """Um item é o mesmo produto com a mesma cor, tamanho e posição da estampa"""
    hex_cor = (cor or {}).get('hex') or 'sem-cor'
    return f"{produto_id}:{hex_cor}:{tamanho or 'sem-tamanho'}:{posicao_estampa or 'padrao'}"


class Mochila:
    def __init__(self, request):
        self.session = request.session
        estado = self.session.get(MOCHILA_SESSION_KEY)
        if not isinstance(estado, dict):
            estado = _estado_vazio()
        for chave, valor in _estado_vazio().items():
            estado.setdefault(chave, valor)
        self.estado = estado

    def salvar(self):
        self.session[MOCHILA_SESSION_KEY] = self.estado
        self.session.modified = True

    # escrita

    def adicionar(self, produto, cor=None, tamanho=None, tecido=None, posicao_estampa=None, quantidade=1):
        """
        Adiciona um produto; se a mesma variação já está na mochila soma a quantidade.

        O preço unitário é o do produto mais o adicional do tecido escolhido.

        Returns:
            str: id do item na mochila
        """
        quantidade = int(quantidade)
        if quantidade <= 0:
            raise ValueError("Quantidade deve ser maior que zero")

        item_id = chave_item(produto.id, cor, tamanho, posicao_estampa)
        for item in self.estado['itens']:
            if item['id'] == item_id:
                item['quantidade'] += quantidade
                self.salvar()
                return item_id

        preco = Decimal(str(produto.preco))
        if tecido:
            preco += Decimal(str(tecido.get('price') or 0))

        principal = produto.imagem_principal
        self.estado['itens'].append({
            'id': item_id,
            'produto_id': produto.id,
            'nome': produto.nome,
            'imagem': principal.url if principal else '',
            'preco': str(preco),
            'cor': cor,
            'tamanho': tamanho,
            'tecido': tecido,
            'posicao_estampa': posicao_estampa,
            'quantidade': quantidade,
        })
        self.salvar()
        return item_id

    def atualizar_quantidade(self, item_id, quantidade):
        """Quantidade zero ou negativa remove o item"""
        quantidade = int(quantidade)
        if quantidade <= 0:
            self.remover(item_id)
            return
        for item in self.estado['itens']:
            if item['id'] == item_id:
                item['quantidade'] = quantidade
                break
        self.salvar()

    def remover(self, item_id):
        self.estado['itens'] = [item for item in self.estado['itens'] if item['id'] != item_id]
        self.salvar()

    def limpar(self):
        """Esvazia a mochila junto com cupom, frete grátis e valor do frete"""
        cep = self.estado.get('cep')
        self.estado = _estado_vazio()
        # o CEP continua lembrado para a próxima compra
        self.estado['cep'] = cep
        self.salvar()

    def aplicar_cupom(self, cupom):
        """Cupom e frete grátis promocional não se acumulam"""
        self.estado['cupom'] = {
            'codigo': cupom.codigo,
            'tipo_desconto': cupom.tipo_desconto,
            'valor_desconto': str(cupom.valor_desconto),
            'descricao': cupom.descricao,
        }
        self.estado['frete_gratis'] = False
        self.salvar()

    def remover_cupom(self):
        self.estado['cupom'] = None
        self.salvar()

    def ativar_frete_gratis(self, ativo=True):
        self.estado['frete_gratis'] = bool(ativo)
        if ativo:
            self.estado['cupom'] = None
        self.salvar()

    def definir_frete(self, cep, preco):
        self.estado['cep'] = formatar_cep(cep)
        self.estado['frete'] = str(regras.arredondar(preco))
        self.salvar()

    # leitura

    def itens(self):
        for item in self.estado['itens']:
            preco = Decimal(item['preco'])
            yield dict(item, preco=preco, subtotal=preco * item['quantidade'])

    @property
    def total_itens(self):
        return sum(item['quantidade'] for item in self.estado['itens'])

    @property
    def cupom(self):
        return self.estado.get('cupom')

    @property
    def cep(self):
        return self.estado.get('cep')

    @property
    def frete_gratis_ativo(self):
        return self.estado.get('frete_gratis', False)

    def subtotal(self):
        return sum((item['subtotal'] for item in self.itens()), Decimal('0'))

    def desconto(self):
        cupom = self.cupom
        if not cupom:
            return Decimal('0.00')
        return regras.calcular_desconto(self.subtotal(), cupom['tipo_desconto'], cupom['valor_desconto'])

    def frete(self, config):
        """Frete a cobrar: zero com frete grátis (promo ou regra) ou sem CEP informado"""
        if self.frete_gratis_ativo or regras.frete_gratis_aplicavel(config, self.subtotal()):
            return Decimal('0.00')
        if not self.cep:
            return Decimal('0.00')
        return Decimal(self.estado.get('frete') or '0')

    def total(self, config):
        return regras.calcular_total(self.subtotal(), self.desconto(), self.frete(config))

    def itens_frete(self):
        """Itens no formato de calcular_frete; as medidas vêm do cadastro do produto"""
        return [{'produto_id': item['produto_id'], 'quantidade': item['quantidade']} for item in self.estado['itens']]

    def itens_checkout(self):
        """Itens no formato esperado pelo endpoint de criação de pedido"""
        return [
            {
                'produto_id': item['produto_id'],
                'nome_produto': item['nome'],
                'imagem_produto': item['imagem'],
                'tamanho': item['tamanho'] or TAMANHO_PADRAO,
                'cor': item['cor'] or dict(COR_PADRAO),
                'tecido': item['tecido'],
                'posicao_estampa': item['posicao_estampa'] or '',
                'preco_unitario': str(item['preco']),
                'quantidade': item['quantidade'],
                'subtotal': str(item['subtotal']),
            }
            for item in self.itens()
        ]

    def resumo(self, config):
        subtotal = self.subtotal()
        return {
            'itens': [
                dict(item, preco=str(item['preco']), subtotal=str(item['subtotal']))
                for item in self.itens()
            ],
            'total_itens': self.total_itens,
            'cupom': self.cupom,
            'frete_gratis_ativo': self.frete_gratis_ativo,
            'cep': self.cep,
            'subtotal': str(regras.arredondar(subtotal)),
            'desconto': str(self.desconto()),
            'frete': str(self.frete(config)),
            'total': str(self.total(config)),
            'progresso_frete_gratis': _serializar_progresso(regras.progresso_frete_gratis(config, subtotal)),
        }


def _serializar_progresso(progresso):
    return dict(progresso, falta=str(progresso['falta']))
