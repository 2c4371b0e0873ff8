from django.db import models
from django.db.models import Q
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator, MinLengthValidator
from django.utils import timezone
from decimal import Decimal
import json
import random
import secrets

from . import regras
from .validadores import validar_cpf, validar_cep


STATUS_PEDIDO_CHOICES = [
    ('pending', 'Pendente'),
    ('paid', 'Pago'),
    ('processing', 'Em preparação'),
    ('shipped', 'Enviado'),
    ('delivered', 'Entregue'),
    ('cancelled', 'Cancelado'),
    ('failed', 'Falhou'),
    ('refunded', 'Reembolsado'),
]

TIPO_DESCONTO_CHOICES = [
    ('percentual', 'Percentual'),
    ('fixo', 'Valor Fixo'),
]

COR_PADRAO = {'name': 'Padrão', 'hex': '#000000'}
TAMANHO_PADRAO = 'Padrão'

# Sem I, O, 0 e 1 para não confundir na leitura
ALFABETO_VERIFICACAO = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def _cor_padrao():
    return dict(COR_PADRAO)


class ProdutoQuerySet(models.QuerySet):
    def publicados(self):
        return self.filter(status='publicado')


class Produto(models.Model):
    TIPO_CHOICES = [
        ('camiseta', 'Camiseta'),
        ('acessorio', 'Acessório'),
    ]

    STATUS_CHOICES = [
        ('rascunho', 'Rascunho'),
        ('publicado', 'Publicado'),
    ]

    sku = models.CharField(max_length=50, unique=True, blank=True, null=True, help_text="Código SKU do produto")
    slug = models.SlugField(max_length=120, unique=True, blank=True, null=True, help_text="URL personalizada")
    nome = models.CharField(max_length=150)
    descricao = models.TextField(blank=True, default='')
    preco = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    preco_original = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True,
                                         validators=[MinValueValidator(0)],
                                         help_text="Preço 'de' exibido riscado")
    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES, default='camiseta')
    categoria = models.CharField(max_length=60, blank=True, default='', help_text="Categoria (para acessórios)")

    # Variações
    cores = models.JSONField(default=list, blank=True, help_text='Lista de cores: [{"name": "Preto", "hex": "#000000"}]')
    tamanhos = models.JSONField(default=list, blank=True, help_text='Lista de tamanhos: ["P", "M", "G", "GG"]')
    tecidos = models.JSONField(default=list, blank=True, help_text='Lista de tecidos: [{"name": "Algodão", "price": 0}]')
    tamanhos_ativos = models.BooleanField(default=True)
    tecidos_ativos = models.BooleanField(default=False)
    personalizavel = models.BooleanField(default=False)
    estampa_frente = models.BooleanField(default=False, help_text="Permite estampa na frente")
    estampa_costas = models.BooleanField(default=False, help_text="Permite estampa nas costas")

    # Vitrine
    novo = models.BooleanField(default=False)
    ordem_exibicao = models.IntegerField(default=0, help_text="Maior aparece primeiro na home")
    parcelas_max = models.PositiveIntegerField(default=12)
    parcelas_sem_juros = models.BooleanField(default=True)

    # Avaliações e tabela de medidas
    avaliacoes_ativas = models.BooleanField(default=False, help_text="Clientes podem avaliar o produto")
    nota = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal('4.5'),
                               help_text="Média das avaliações da equipe")
    total_avaliacoes = models.PositiveIntegerField(default=0)
    tabela_medidas_ativa = models.BooleanField(default=False)
    tabela_medidas_imagem = models.CharField(max_length=500, blank=True, default='',
                                             help_text="Imagem opcional da tabela de medidas")

    # Frete: vazio usa os padrões da configuração
    frete_peso = models.PositiveIntegerField(blank=True, null=True, help_text="Peso em gramas")
    frete_altura = models.PositiveIntegerField(blank=True, null=True, help_text="Altura em cm")
    frete_largura = models.PositiveIntegerField(blank=True, null=True, help_text="Largura em cm")
    frete_comprimento = models.PositiveIntegerField(blank=True, null=True, help_text="Comprimento em cm")

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='rascunho')
    token_preview = models.CharField(max_length=64, blank=True, null=True,
                                     help_text="Token secreto para visualizar rascunhos")
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    objects = ProdutoQuerySet.as_manager()

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        ordering = ['-ordem_exibicao', 'nome']

    def __str__(self):
        return f"{self.nome} (SKU: {self.sku or 'N/A'})"

    @property
    def publicado(self):
        return self.status == 'publicado'

    @property
    def imagem_principal(self):
        """Primeira imagem de apresentação, ou a primeira de qualquer tipo"""
        imagem = self.imagens.filter(tipo='apresentacao').order_by('ordem').first()
        if imagem is None:
            imagem = self.imagens.order_by('ordem').first()
        return imagem

    @property
    def hex_cores(self):
        return [c.get('hex') if isinstance(c, dict) else c for c in (self.cores or [])]

    @classmethod
    def buscar_por_identificador(cls, identificador, queryset=None):
        """
        Busca um produto pelo slug, depois pelo SKU (sem diferenciar maiúsculas)
        e por fim pelo id numérico.
        """
        if queryset is None:
            queryset = cls.objects.publicados()
        identificador = (identificador or '').strip()
        if not identificador:
            return None

        produto = queryset.filter(slug__iexact=identificador).first()
        if produto is None:
            produto = queryset.filter(sku__iexact=identificador).first()
        if produto is None and identificador.isdigit():
            produto = queryset.filter(pk=int(identificador)).first()
        return produto

    def atualizar_nota(self):
        """Recalcula nota e total a partir das avaliações da equipe"""
        notas = list(self.avaliacoes_destaque.values_list('nota', flat=True))
        self.nota = regras.media_avaliacoes(notas)
        self.total_avaliacoes = len(notas)
        self.save(update_fields=['nota', 'total_avaliacoes', 'atualizado_em'])

    def tabela_medidas(self, somente_ativos=True):
        """
        Campos e medidas por tamanho no formato da tabela da página do produto.

        Returns:
            dict: {'campos': [...], 'medidas': [...], 'tabela': {tamanho: {campo_id: valor}}}
        """
        campos = self.campos_medida.all()
        medidas = self.medidas_tamanho.select_related('campo')
        if somente_ativos:
            campos = campos.filter(ativo=True)
            medidas = medidas.filter(campo__ativo=True)
        tabela = {}
        for medida in medidas:
            tabela.setdefault(medida.tamanho, {})[str(medida.campo_id)] = medida.valor
        return {
            'campos': [campo.to_dict() for campo in campos],
            'medidas': [medida.to_dict() for medida in medidas],
            'tabela': tabela,
        }

    def gerar_token_preview(self):
        self.token_preview = secrets.token_urlsafe(24)
        self.save(update_fields=['token_preview'])
        return self.token_preview

    def to_dict(self, com_imagens=False):
        dados = {
            'id': self.id,
            'sku': self.sku,
            'slug': self.slug,
            'nome': self.nome,
            'descricao': self.descricao,
            'preco': str(self.preco),
            'preco_original': str(self.preco_original) if self.preco_original is not None else None,
            'tipo': self.tipo,
            'categoria': self.categoria,
            'cores': self.cores or [],
            'tamanhos': (self.tamanhos or []) if self.tamanhos_ativos else [],
            'tecidos': (self.tecidos or []) if self.tecidos_ativos else [],
            'personalizavel': self.personalizavel,
            'estampa_frente': self.estampa_frente,
            'estampa_costas': self.estampa_costas,
            'novo': self.novo,
            'parcelas_max': self.parcelas_max,
            'parcelas_sem_juros': self.parcelas_sem_juros,
            'avaliacoes_ativas': self.avaliacoes_ativas,
            'nota': str(self.nota),
            'total_avaliacoes': self.total_avaliacoes,
            'tabela_medidas_ativa': self.tabela_medidas_ativa,
            'tabela_medidas_imagem': self.tabela_medidas_imagem,
            'status': self.status,
        }
        if com_imagens:
            dados['imagens'] = [img.to_dict() for img in self.imagens.all()]
        else:
            principal = self.imagem_principal
            dados['imagem'] = principal.url if principal else None
        return dados


class ProdutoImagem(models.Model):
    TIPO_CHOICES = [
        ('apresentacao', 'Apresentação'),
        ('carrossel', 'Carrossel'),
    ]

    produto = models.ForeignKey(Produto, on_delete=models.CASCADE, related_name='imagens')
    imagem = models.ImageField(upload_to='produtos/')
    texto_alt = models.CharField(max_length=200, blank=True, default='')
    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES, default='carrossel')
    cor = models.CharField(max_length=60, blank=True, default='', help_text="Nome da cor (imagens de carrossel)")
    ordem = models.PositiveIntegerField(default=0, help_text="Ordem de exibição da imagem")
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Imagem de Produto"
        verbose_name_plural = "Imagens de Produtos"
        ordering = ['ordem', 'criado_em']

    def __str__(self):
        return f"Imagem de {self.produto.nome} #{self.ordem}"

    @property
    def url(self):
        return self.imagem.url if self.imagem else ''

    def to_dict(self):
        return {
            'id': self.id,
            'url': self.url,
            'texto_alt': self.texto_alt,
            'tipo': self.tipo,
            'cor': self.cor,
            'ordem': self.ordem,
        }


class CupomProduto(models.Model):
    """Cupom exibido na página de um produto específico"""
    produto = models.ForeignKey(Produto, on_delete=models.CASCADE, related_name='cupons')
    codigo = models.CharField(max_length=50, validators=[MinLengthValidator(2)])
    tipo_desconto = models.CharField(max_length=20, choices=TIPO_DESCONTO_CHOICES, default='percentual')
    valor_desconto = models.DecimalField(max_digits=10, decimal_places=2,
                                         validators=[MinValueValidator(Decimal('0.01'))])
    valido_de = models.DateTimeField(blank=True, null=True)
    valido_ate = models.DateTimeField(blank=True, null=True)
    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Cupom de Produto"
        verbose_name_plural = "Cupons de Produto"
        ordering = ['-criado_em']

    def __str__(self):
        return f"{self.codigo} ({self.produto.nome})"

    def to_dict(self):
        return {
            'id': self.id,
            'produto_id': self.produto_id,
            'codigo': self.codigo,
            'tipo_desconto': self.tipo_desconto,
            'valor_desconto': str(self.valor_desconto),
            'valido_de': self.valido_de.isoformat() if self.valido_de else None,
            'valido_ate': self.valido_ate.isoformat() if self.valido_ate else None,
            'ativo': self.ativo,
        }


class CupomGlobal(models.Model):
    """Cupom digitado na mochila; vale para o pedido inteiro"""
    codigo = models.CharField(max_length=50, unique=True, help_text="Salvo sempre em maiúsculas")
    tipo_desconto = models.CharField(max_length=20, choices=TIPO_DESCONTO_CHOICES, default='percentual')
    valor_desconto = models.DecimalField(
        max_digits=10, decimal_places=2,
        validators=[
            MinValueValidator(Decimal('0.01'), message="o desconto deve ser maior que zero"),
            MaxValueValidator(Decimal('90'), message="o desconto máximo é 90%"),
        ],
    )
    descricao = models.CharField(max_length=200, blank=True, default='', help_text='Ex: "frete grátis"')
    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Cupom Global"
        verbose_name_plural = "Cupons Globais"
        ordering = ['-criado_em']

    def __str__(self):
        return f"{self.codigo} - {self.descricao}"

    def save(self, *args, **kwargs):
        self.codigo = (self.codigo or '').strip().upper()
        super().save(*args, **kwargs)

    @classmethod
    def validar_codigo(cls, codigo):
        """Devolve o cupom ativo com esse código ou None"""
        codigo = (codigo or '').strip().upper()
        if not codigo:
            return None
        return cls.objects.filter(codigo=codigo, ativo=True).first()

    @classmethod
    def ativo_atual(cls):
        return cls.objects.filter(ativo=True).first()

    def calcular_desconto(self, subtotal):
        """Calcula o desconto aplicável"""
        return regras.calcular_desconto(subtotal, self.tipo_desconto, self.valor_desconto)

    def to_dict(self):
        return {
            'id': self.id,
            'codigo': self.codigo,
            'tipo_desconto': self.tipo_desconto,
            'valor_desconto': str(self.valor_desconto),
            'descricao': self.descricao,
            'ativo': self.ativo,
        }


class PedidoQuerySet(models.QuerySet):
    def visiveis(self):
        return self.filter(arquivado_em__isnull=True, excluido_em__isnull=True)

    def arquivados(self):
        return self.filter(arquivado_em__isnull=False, excluido_em__isnull=True)

    def excluidos(self):
        return self.filter(excluido_em__isnull=False)

    def por_numero_ou_rastreio(self, identificador):
        return self.filter(Q(numero=identificador) | Q(codigo_rastreio=identificador)).first()


class Pedido(models.Model):
    STATUS_CHOICES = STATUS_PEDIDO_CHOICES

    numero = models.CharField(max_length=50, unique=True, help_text="OUDLA-AAAAMMDD-NNNN")

    # Cliente
    nome_cliente = models.CharField(max_length=150, validators=[MinLengthValidator(3)])
    email_cliente = models.EmailField()
    telefone_cliente = models.CharField(max_length=20, blank=True, default='')
    cpf_cliente = models.CharField(max_length=14, validators=[validar_cpf])

    # Endereço de entrega
    cep = models.CharField(max_length=9, validators=[validar_cep])
    rua = models.CharField(max_length=200)
    numero_endereco = models.CharField(max_length=20)
    complemento = models.CharField(max_length=100, blank=True, default='')
    bairro = models.CharField(max_length=100)
    cidade = models.CharField(max_length=100)
    estado = models.CharField(max_length=2)

    # Totais
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    desconto = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    frete = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    total = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])

    # Pagamento (Mercado Pago)
    preferencia_id = models.CharField(max_length=100, blank=True, default='', db_index=True)
    pagamento_id = models.CharField(max_length=100, blank=True, default='')
    status_pagamento = models.CharField(max_length=50, blank=True, default='',
                                        help_text="approved, pending, rejected...")
    metodo_pagamento = models.CharField(max_length=50, blank=True, default='', help_text="pix, visa, bolbradesco...")
    tipo_pagamento = models.CharField(max_length=50, blank=True, default='', help_text="credit_card, ticket...")
    parcelas = models.PositiveIntegerField(blank=True, null=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)

    # Envio
    codigo_rastreio = models.CharField(max_length=50, blank=True, default='')
    motivo_reembolso = models.TextField(blank=True, default='')
    metodo_envio = models.CharField(max_length=100, blank=True, default='')
    previsao_entrega = models.DateTimeField(blank=True, null=True)
    data_entrega = models.DateTimeField(blank=True, null=True)

    # Gestão
    notas_internas = models.TextField(blank=True, default='')
    arquivado_em = models.DateTimeField(blank=True, null=True)
    excluido_em = models.DateTimeField(blank=True, null=True)

    # Dados do cliente no momento da compra
    ip_cliente = models.CharField(max_length=64, blank=True, default='')
    user_agent = models.TextField(blank=True, default='')
    tipo_dispositivo = models.CharField(max_length=50, blank=True, default='')
    navegador = models.CharField(max_length=100, blank=True, default='')
    versao_navegador = models.CharField(max_length=50, blank=True, default='')
    sistema = models.CharField(max_length=100, blank=True, default='')
    versao_sistema = models.CharField(max_length=50, blank=True, default='')
    resolucao_tela = models.CharField(max_length=50, blank=True, default='')

    codigo_verificacao = models.CharField(max_length=20, blank=True, default='',
                                          help_text="Gerado na aprovação do pagamento")

    confirmacao_enviada_em = models.DateTimeField(blank=True, null=True)
    rastreio_enviado_em = models.DateTimeField(blank=True, null=True)

    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)
    pago_em = models.DateTimeField(blank=True, null=True)

    objects = PedidoQuerySet.as_manager()

    class Meta:
        verbose_name = "Pedido"
        verbose_name_plural = "Pedidos"
        ordering = ['-criado_em']

    def __str__(self):
        return f"Pedido {self.numero} - {self.nome_cliente} - R$ {self.total}"

    @staticmethod
    def gerar_numero(data=None):
        """Gera um número OUDLA-AAAAMMDD-NNNN que ainda não existe"""
        data = data or timezone.localdate()
        prefixo = f"OUDLA-{data.strftime('%Y%m%d')}-"
        for _ in range(20):
            numero = f"{prefixo}{random.randint(0, 9999):04d}"
            if not Pedido.objects.filter(numero=numero).exists():
                return numero
        raise ValueError("Não foi possível gerar um número de pedido único")

    @staticmethod
    def gerar_codigo_verificacao():
        return ''.join(secrets.choice(ALFABETO_VERIFICACAO) for _ in range(8))

    @property
    def arquivado(self):
        return self.arquivado_em is not None

    @property
    def excluido(self):
        return self.excluido_em is not None

    @property
    def tem_notas(self):
        return bool(self.notas_internas and self.notas_internas.strip())

    def marcar_como_pago(self, salvar=True):
        """Marca o pedido como pago e gera o código de verificação se ainda não tiver"""
        self.status = 'paid'
        self.pago_em = timezone.now()
        if not self.codigo_verificacao:
            self.codigo_verificacao = self.gerar_codigo_verificacao()
        if salvar:
            self.save()

    def aplicar_status_pagamento(self, status, pagamento_id=None, metodo=None, tipo=None, parcelas=None):
        """
        Registra o retorno do gateway e ajusta o status do pedido.

        Returns:
            str: status do pedido depois da atualização
        """
        self.status_pagamento = status or 'unknown'
        if pagamento_id:
            self.pagamento_id = str(pagamento_id)
        if metodo:
            self.metodo_pagamento = metodo
        if tipo:
            self.tipo_pagamento = tipo
        if parcelas is not None:
            self.parcelas = parcelas

        if status == 'approved':
            self.marcar_como_pago(salvar=False)
        elif status in ('rejected', 'cancelled'):
            self.status = 'failed'
        elif status in ('pending', 'in_process'):
            self.status = 'pending'

        self.save()
        return self.status

    def atualizar_status(self, status, codigo_rastreio=None, motivo_reembolso=None):
        """Mudança de status feita pela equipe"""
        if status not in dict(STATUS_PEDIDO_CHOICES):
            raise ValidationError(f"Status inválido: {status}")
        self.status = status
        if status == 'shipped' and codigo_rastreio:
            self.codigo_rastreio = codigo_rastreio.strip()
        if status == 'refunded' and motivo_reembolso:
            self.motivo_reembolso = motivo_reembolso
        if status == 'delivered':
            self.data_entrega = timezone.now()
        self.save()

    def arquivar(self):
        self.arquivado_em = timezone.now()
        self.save(update_fields=['arquivado_em', 'atualizado_em'])

    def desarquivar(self):
        self.arquivado_em = None
        self.save(update_fields=['arquivado_em', 'atualizado_em'])

    def excluir(self):
        """Exclusão lógica; o pedido vai para a aba de excluídos"""
        self.excluido_em = timezone.now()
        self.save(update_fields=['excluido_em', 'atualizado_em'])

    def restaurar(self):
        self.excluido_em = None
        self.save(update_fields=['excluido_em', 'atualizado_em'])

    def to_dict(self, com_itens=True):
        dados = {
            'id': self.id,
            'numero': self.numero,
            'nome_cliente': self.nome_cliente,
            'email_cliente': self.email_cliente,
            'telefone_cliente': self.telefone_cliente,
            'cpf_cliente': self.cpf_cliente,
            'cep': self.cep,
            'rua': self.rua,
            'numero_endereco': self.numero_endereco,
            'complemento': self.complemento,
            'bairro': self.bairro,
            'cidade': self.cidade,
            'estado': self.estado,
            'subtotal': str(self.subtotal),
            'desconto': str(self.desconto),
            'frete': str(self.frete),
            'total': str(self.total),
            'status': self.status,
            'status_pagamento': self.status_pagamento,
            'metodo_pagamento': self.metodo_pagamento,
            'tipo_pagamento': self.tipo_pagamento,
            'parcelas': self.parcelas,
            'codigo_rastreio': self.codigo_rastreio,
            'motivo_reembolso': self.motivo_reembolso,
            'metodo_envio': self.metodo_envio,
            'data_entrega': self.data_entrega.isoformat() if self.data_entrega else None,
            'notas_internas': self.notas_internas,
            'codigo_verificacao': self.codigo_verificacao,
            'arquivado_em': self.arquivado_em.isoformat() if self.arquivado_em else None,
            'excluido_em': self.excluido_em.isoformat() if self.excluido_em else None,
            'criado_em': self.criado_em.isoformat() if self.criado_em else None,
            'pago_em': self.pago_em.isoformat() if self.pago_em else None,
        }
        if com_itens:
            dados['itens'] = [item.to_dict() for item in self.itens.all()]
        return dados


class ItemPedido(models.Model):
    """Cópia do produto no momento da compra"""
    pedido = models.ForeignKey(Pedido, on_delete=models.CASCADE, related_name='itens')
    produto = models.ForeignKey(Produto, on_delete=models.PROTECT, related_name='itens_pedido')
    nome_produto = models.CharField(max_length=150)
    imagem_produto = models.CharField(max_length=500, blank=True, default='')
    tamanho = models.CharField(max_length=20, default=TAMANHO_PADRAO)
    cor = models.JSONField(default=_cor_padrao)
    tecido = models.JSONField(blank=True, null=True)
    posicao_estampa = models.CharField(max_length=20, blank=True, default='', help_text='"frente" ou "costas"')
    preco_unitario = models.DecimalField(max_digits=10, decimal_places=2)
    quantidade = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        verbose_name = "Item do Pedido"
        verbose_name_plural = "Itens do Pedido"

    def __str__(self):
        return f"{self.quantidade}x {self.nome_produto} ({self.pedido.numero})"

    @property
    def nome_cor(self):
        cor = self.cor
        if isinstance(cor, str):
            try:
                cor = json.loads(cor)
            except ValueError:
                return cor
        return (cor or {}).get('name', '')

    def to_dict(self):
        return {
            'produto_id': self.produto_id,
            'nome_produto': self.nome_produto,
            'imagem_produto': self.imagem_produto,
            'tamanho': self.tamanho,
            'cor': self.cor,
            'tecido': self.tecido,
            'posicao_estampa': self.posicao_estampa,
            'preco_unitario': str(self.preco_unitario),
            'quantidade': self.quantidade,
            'subtotal': str(self.subtotal),
        }


class Banner(models.Model):
    POSICAO_CHOICES = [
        ('left', 'Esquerda'),
        ('center', 'Centro'),
        ('right', 'Direita'),
    ]

    POSICAO_MOBILE_CHOICES = [
        ('bottom-left', 'Inferior esquerda'),
        ('bottom-center', 'Inferior centro'),
        ('bottom-right', 'Inferior direita'),
        ('center-left', 'Centro esquerda'),
        ('center-center', 'Centro'),
        ('center-right', 'Centro direita'),
    ]

    titulo = models.CharField(max_length=150)
    subtitulo = models.CharField(max_length=250)
    texto_cta = models.CharField(max_length=60, blank=True, default='')
    link_cta = models.CharField(max_length=300, blank=True, default='', help_text="Usado quando não há produto")
    produto = models.ForeignKey(Produto, on_delete=models.SET_NULL, blank=True, null=True, related_name='banners')
    imagem_url = models.CharField(max_length=500)
    imagem_mobile_url = models.CharField(max_length=500, blank=True, default='')
    posicao = models.CharField(max_length=10, choices=POSICAO_CHOICES, default='left')
    posicao_mobile = models.CharField(max_length=20, choices=POSICAO_MOBILE_CHOICES, default='bottom-center')
    mostrar_texto = models.BooleanField(default=True)
    ordem = models.IntegerField(default=0)
    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Banner"
        verbose_name_plural = "Banners"
        ordering = ['ordem', 'id']

    def __str__(self):
        return self.titulo

    @property
    def link(self):
        if self.produto_id:
            return f"/produto/{self.produto.slug or self.produto_id}"
        return self.link_cta

    def to_dict(self):
        return {
            'id': self.id,
            'titulo': self.titulo,
            'subtitulo': self.subtitulo,
            'texto_cta': self.texto_cta,
            'link': self.link,
            'produto_id': self.produto_id,
            'imagem_url': self.imagem_url,
            'imagem_mobile_url': self.imagem_mobile_url,
            'posicao': self.posicao,
            'posicao_mobile': self.posicao_mobile,
            'mostrar_texto': self.mostrar_texto,
            'ordem': self.ordem,
        }


class CardConteudo(models.Model):
    TIPO_CHOICES = [
        ('feature', 'Destaque'),
        ('lifestyle', 'Lifestyle'),
    ]

    ALTURA_CHOICES = [
        ('small', 'Pequeno'),
        ('medium', 'Médio'),
        ('large', 'Grande'),
    ]

    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES)
    titulo = models.CharField(max_length=150, blank=True, default='')
    subtitulo = models.CharField(max_length=250, blank=True, default='')
    texto_cta = models.CharField(max_length=60, blank=True, default='')
    link_cta = models.CharField(max_length=300, blank=True, default='')
    produto = models.ForeignKey(Produto, on_delete=models.SET_NULL, blank=True, null=True, related_name='cards')
    imagem_url = models.CharField(max_length=500)
    posicao = models.CharField(max_length=20, choices=Banner.POSICAO_CHOICES, default='center')
    altura = models.CharField(max_length=20, choices=ALTURA_CHOICES, default='medium')
    ativo = models.BooleanField(default=True)
    ordem = models.IntegerField(default=0)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Card de Conteúdo"
        verbose_name_plural = "Cards de Conteúdo"
        ordering = ['ordem', 'id']

    def __str__(self):
        return f"{self.get_tipo_display()} - {self.titulo or self.id}"

    def to_dict(self):
        return {
            'id': self.id,
            'tipo': self.tipo,
            'titulo': self.titulo,
            'subtitulo': self.subtitulo,
            'texto_cta': self.texto_cta,
            'link_cta': self.link_cta,
            'produto_id': self.produto_id,
            'imagem_url': self.imagem_url,
            'posicao': self.posicao,
            'altura': self.altura,
            'ordem': self.ordem,
        }


class FAQ(models.Model):
    CATEGORIA_CHOICES = [
        ('geral', 'Geral'),
        ('envio', 'Envio'),
        ('produto', 'Produto'),
        ('pagamento', 'Pagamento'),
        ('devolucao', 'Devolução'),
    ]

    pergunta = models.CharField(max_length=300)
    resposta = models.TextField()
    categoria = models.CharField(max_length=20, choices=CATEGORIA_CHOICES, default='geral')
    ordem = models.IntegerField(default=0)
    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Pergunta Frequente"
        verbose_name_plural = "Perguntas Frequentes"
        ordering = ['categoria', 'ordem', 'id']

    def __str__(self):
        return self.pergunta

    def to_dict(self):
        return {
            'id': self.id,
            'pergunta': self.pergunta,
            'resposta': self.resposta,
            'categoria': self.categoria,
            'ordem': self.ordem,
        }


class TemplateEmail(models.Model):
    """Templates editáveis dos emails transacionais"""
    CHAVE_CHOICES = [
        ('order_confirmation', 'Confirmação de Pedido'),
        ('tracking_code', 'Código de Rastreio'),
        ('newsletter_welcome', 'Boas-vindas Newsletter'),
    ]

    chave = models.CharField(max_length=50, unique=True, choices=CHAVE_CHOICES)
    nome = models.CharField(max_length=100)
    assunto = models.CharField(max_length=200)
    conteudo_html = models.TextField(help_text="HTML com variáveis no formato {{variavel}}")
    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Template de Email"
        verbose_name_plural = "Templates de Email"
        ordering = ['chave']

    def __str__(self):
        return f"{self.nome} ({self.chave})"

    @staticmethod
    def substituir_variaveis(texto, variaveis):
        """Troca cada {{chave}} pelo valor; chaves sem valor ficam como estão"""
        for chave, valor in (variaveis or {}).items():
            texto = texto.replace('{{' + chave + '}}', '' if valor is None else str(valor))
        return texto

    def renderizar(self, variaveis):
        """
        Returns:
            tuple: (assunto, html) com as variáveis aplicadas
        """
        return (
            self.substituir_variaveis(self.assunto, variaveis),
            self.substituir_variaveis(self.conteudo_html, variaveis),
        )

    def to_dict(self):
        return {
            'chave': self.chave,
            'nome': self.nome,
            'assunto': self.assunto,
            'conteudo_html': self.conteudo_html,
            'ativo': self.ativo,
            'atualizado_em': self.atualizado_em.isoformat() if self.atualizado_em else None,
        }


class ConfiguracaoSite(models.Model):
    """Configurações chave/valor editadas no painel"""
    TIPO_CHOICES = [
        ('text', 'Texto'),
        ('color', 'Cor'),
        ('boolean', 'Booleano'),
        ('number', 'Número'),
    ]

    chave = models.CharField(max_length=100, unique=True)
    valor = models.TextField(blank=True, default='')
    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES, default='text')
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Configuração do Site"
        verbose_name_plural = "Configurações do Site"
        ordering = ['chave']

    def __str__(self):
        return f"{self.chave} = {self.valor}"


class InscritoNewsletter(models.Model):
    email = models.EmailField(unique=True)
    status = models.CharField(max_length=20, default='active')
    ip = models.CharField(max_length=64, blank=True, default='')
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Inscrito na Newsletter"
        verbose_name_plural = "Inscritos na Newsletter"
        ordering = ['-criado_em']

    def __str__(self):
        return self.email


class InfoEmpresa(models.Model):
    """Dados da empresa exibidos no rodapé"""
    nome_empresa = models.CharField(max_length=150)
    cnpj = models.CharField(max_length=20)
    rua = models.CharField(max_length=200)
    numero = models.CharField(max_length=20)
    complemento = models.CharField(max_length=100, blank=True, default='')
    bairro = models.CharField(max_length=100)
    cidade = models.CharField(max_length=100)
    estado = models.CharField(max_length=2)
    cep = models.CharField(max_length=9)
    telefone = models.CharField(max_length=20, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    ano_copyright = models.PositiveIntegerField()
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Informações da Empresa"
        verbose_name_plural = "Informações da Empresa"

    def __str__(self):
        return f"{self.nome_empresa} - CNPJ {self.cnpj}"

    @classmethod
    def get_info(cls):
        """Devolve o registro da empresa, se já foi cadastrado"""
        return cls.objects.order_by('id').first()

    def to_dict(self):
        return {
            'nome_empresa': self.nome_empresa,
            'cnpj': self.cnpj,
            'rua': self.rua,
            'numero': self.numero,
            'complemento': self.complemento,
            'bairro': self.bairro,
            'cidade': self.cidade,
            'estado': self.estado,
            'cep': self.cep,
            'telefone': self.telefone,
            'email': self.email,
            'ano_copyright': self.ano_copyright,
        }


# Avaliações

STATUS_COMPRA_CONFIRMADA = ['paid', 'processing', 'shipped', 'delivered']


class Avaliacao(models.Model):
    """Avaliação enviada por um cliente na página do produto"""
    produto = models.ForeignKey(Produto, on_delete=models.CASCADE, related_name='avaliacoes')
    nome_autor = models.CharField(max_length=100)
    email_autor = models.EmailField()
    nota = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    titulo = models.CharField(max_length=200, blank=True, default='')
    conteudo = models.TextField()
    verificada = models.BooleanField(default=False, help_text="Autor comprou o produto")
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Avaliação"
        verbose_name_plural = "Avaliações"
        ordering = ['-criado_em']

    def __str__(self):
        return f"{self.nome_autor} - {self.produto.nome} ({self.nota})"

    def conferir_compra(self):
        """Marca como verificada quando o email tem pedido pago com este produto"""
        self.verificada = Pedido.objects.filter(
            email_cliente__iexact=self.email_autor,
            status__in=STATUS_COMPRA_CONFIRMADA,
            itens__produto_id=self.produto_id,
        ).exists()
        return self.verificada

    def to_dict(self):
        return {
            'id': self.id,
            'produto_id': self.produto_id,
            'nome_autor': self.nome_autor,
            'nota': self.nota,
            'titulo': self.titulo,
            'conteudo': self.conteudo,
            'verificada': self.verificada,
            'imagens': [imagem.to_dict() for imagem in self.imagens.all()],
            'curtidas': self.curtidas.count(),
            'criado_em': self.criado_em.isoformat() if self.criado_em else None,
        }


class AvaliacaoImagem(models.Model):
    avaliacao = models.ForeignKey(Avaliacao, on_delete=models.CASCADE, related_name='imagens')
    imagem_url = models.CharField(max_length=500)
    texto_alt = models.CharField(max_length=200, blank=True, default='')
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Imagem de Avaliação"
        verbose_name_plural = "Imagens de Avaliações"
        ordering = ['criado_em']

    def __str__(self):
        return f"Imagem da avaliação #{self.avaliacao_id}"

    def to_dict(self):
        return {'id': self.id, 'url': self.imagem_url, 'texto_alt': self.texto_alt}


class CurtidaAvaliacao(models.Model):
    """Uma curtida por visitante; o visitante é a chave da sessão"""
    avaliacao = models.ForeignKey(Avaliacao, on_delete=models.CASCADE, related_name='curtidas')
    visitante = models.CharField(max_length=64)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Curtida de Avaliação"
        verbose_name_plural = "Curtidas de Avaliações"
        constraints = [
            models.UniqueConstraint(fields=['avaliacao', 'visitante'], name='curtida_unica_por_visitante'),
        ]

    def __str__(self):
        return f"Curtida em #{self.avaliacao_id}"


class PerguntaAvaliacao(models.Model):
    """Pergunta sobre uma avaliação; respostas apontam para a pergunta em `pai`"""
    avaliacao = models.ForeignKey(Avaliacao, on_delete=models.CASCADE, related_name='perguntas')
    pai = models.ForeignKey('self', on_delete=models.CASCADE, blank=True, null=True, related_name='respostas')
    nome_autor = models.CharField(max_length=100)
    texto = models.TextField()
    eh_pergunta = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Pergunta sobre Avaliação"
        verbose_name_plural = "Perguntas sobre Avaliações"
        ordering = ['criado_em']

    def __str__(self):
        return self.texto[:50]

    def to_dict(self):
        dados = {
            'id': self.id,
            'nome_autor': self.nome_autor,
            'texto': self.texto,
            'eh_pergunta': self.eh_pergunta,
            'pai_id': self.pai_id,
            'criado_em': self.criado_em.isoformat() if self.criado_em else None,
        }
        if self.eh_pergunta:
            dados['respostas'] = [resposta.to_dict() for resposta in self.respostas.all()]
        return dados


class AvaliacaoDestaque(models.Model):
    """Avaliação cadastrada pela equipe; alimenta a nota do produto"""
    produto = models.ForeignKey(Produto, on_delete=models.CASCADE, related_name='avaliacoes_destaque')
    nome_usuario = models.CharField(max_length=100)
    imagem_usuario = models.CharField(max_length=500, blank=True, default='')
    nota = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comentario = models.TextField()
    cidade = models.CharField(max_length=100, blank=True, default='')
    imagem_avaliacao = models.CharField(max_length=500, blank=True, default='')
    ordem = models.IntegerField(default=0)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Avaliação em Destaque"
        verbose_name_plural = "Avaliações em Destaque"
        ordering = ['ordem', 'criado_em']

    def __str__(self):
        return f"{self.nome_usuario} - {self.produto.nome} ({self.nota})"

    def to_dict(self):
        return {
            'id': self.id,
            'produto_id': self.produto_id,
            'nome_usuario': self.nome_usuario,
            'imagem_usuario': self.imagem_usuario,
            'nota': self.nota,
            'comentario': self.comentario,
            'cidade': self.cidade,
            'imagem_avaliacao': self.imagem_avaliacao,
            'ordem': self.ordem,
            'criado_em': self.criado_em.isoformat() if self.criado_em else None,
        }


# Tabela de medidas

class CampoMedida(models.Model):
    """Coluna da tabela de medidas de um produto (ex.: Largura, Comprimento)"""
    produto = models.ForeignKey(Produto, on_delete=models.CASCADE, related_name='campos_medida')
    nome = models.CharField(max_length=100)
    ordem = models.IntegerField(default=0)
    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Campo de Medida"
        verbose_name_plural = "Campos de Medida"
        ordering = ['ordem', 'id']

    def __str__(self):
        return f"{self.nome} ({self.produto.nome})"

    def to_dict(self):
        return {
            'id': self.id,
            'produto_id': self.produto_id,
            'nome': self.nome,
            'ordem': self.ordem,
            'ativo': self.ativo,
        }


class MedidaTamanho(models.Model):
    """Valor de um campo de medida para um tamanho"""
    produto = models.ForeignKey(Produto, on_delete=models.CASCADE, related_name='medidas_tamanho')
    tamanho = models.CharField(max_length=10)
    campo = models.ForeignKey(CampoMedida, on_delete=models.CASCADE, related_name='medidas')
    valor = models.CharField(max_length=50)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Medida por Tamanho"
        verbose_name_plural = "Medidas por Tamanho"
        ordering = ['tamanho', 'campo__ordem']
        constraints = [
            models.UniqueConstraint(fields=['produto', 'tamanho', 'campo'], name='medida_unica_por_tamanho'),
        ]

    def __str__(self):
        return f"{self.tamanho} / {self.campo.nome}: {self.valor}"

    def clean(self):
        if self.campo_id and self.produto_id and self.campo.produto_id != self.produto_id:
            raise ValidationError({'campo': "Campo não pertence a este produto"})

    def to_dict(self):
        return {
            'id': self.id,
            'tamanho': self.tamanho,
            'campo_id': self.campo_id,
            'valor': self.valor,
        }


# Rodapé

class PaginaRodape(models.Model):
    """Páginas institucionais linkadas no rodapé (sobre, trocas, privacidade...)"""
    SLUG_CHOICES = [
        ('company', 'Empresa'),
        ('faq', 'Perguntas Frequentes'),
        ('about', 'Sobre'),
        ('policies', 'Políticas'),
        ('returns', 'Trocas e Devoluções'),
        ('shipping', 'Envio'),
        ('privacy', 'Privacidade'),
    ]

    slug = models.SlugField(max_length=50, unique=True, choices=SLUG_CHOICES)
    titulo = models.CharField(max_length=200)
    conteudo = models.TextField(help_text="HTML exibido na página")
    descricao = models.CharField(max_length=300, blank=True, default='')
    ativo = models.BooleanField(default=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Página do Rodapé"
        verbose_name_plural = "Páginas do Rodapé"
        ordering = ['slug']

    def __str__(self):
        return self.titulo

    def to_dict(self):
        return {
            'slug': self.slug,
            'titulo': self.titulo,
            'conteudo': self.conteudo,
            'descricao': self.descricao,
            'ativo': self.ativo,
            'atualizado_em': self.atualizado_em.isoformat() if self.atualizado_em else None,
        }
