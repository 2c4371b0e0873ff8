import logging

from django.contrib import admin
from django.contrib.auth.admin import GroupAdmin, UserAdmin
from django.contrib.auth.models import Group, User
from django.utils.html import format_html

from .configuracao import (CHAVE_CACHE_BANNERS, CHAVE_CACHE_EMPRESA, CHAVE_CACHE_FRETE,
                           CHAVE_CACHE_PRODUTOS, limpar_cache)
from .forms import CupomGlobalForm, CupomProdutoForm, InfoEmpresaForm, TemplateEmailForm
from .models import (Avaliacao, AvaliacaoDestaque, AvaliacaoImagem, Banner, CampoMedida, CardConteudo,
                     ConfiguracaoSite, CupomGlobal, CupomProduto, FAQ, InfoEmpresa, InscritoNewsletter, ItemPedido,
                     MedidaTamanho, PaginaRodape, Pedido, PerguntaAvaliacao, Produto, ProdutoImagem, TemplateEmail)
from .regras import formatar_reais
from .services.email_service import EmailService

logger = logging.getLogger(__name__)


class LojaAdminSite(admin.AdminSite):
    site_header = "Administração OUDLA"
    site_title = "OUDLA Admin"
    index_title = "Painel da Loja"

    def each_context(self, request):
        context = super().each_context(request)
        if request.user.is_staff:
            context['pedidos_pagos_pendentes'] = Pedido.objects.visiveis().filter(status='paid').count()
        return context


admin_site = LojaAdminSite(name='loja_admin')


class LimparCacheMixin:
    """Limpa as chaves de cache da vitrine sempre que a equipe grava ou apaga"""
    chaves_cache = ()

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        limpar_cache(*self.chaves_cache)

    def delete_model(self, request, obj):
        super().delete_model(request, obj)
        limpar_cache(*self.chaves_cache)

    def delete_queryset(self, request, queryset):
        super().delete_queryset(request, queryset)
        limpar_cache(*self.chaves_cache)


class ProdutoImagemInline(admin.TabularInline):
    model = ProdutoImagem
    extra = 0
    fields = ['imagem', 'tipo', 'cor', 'texto_alt', 'ordem']
    ordering = ['ordem']


class CupomProdutoInline(admin.TabularInline):
    model = CupomProduto
    form = CupomProdutoForm
    extra = 0


class AvaliacaoDestaqueInline(admin.TabularInline):
    model = AvaliacaoDestaque
    extra = 0
    fields = ['nome_usuario', 'nota', 'comentario', 'cidade', 'imagem_usuario', 'imagem_avaliacao', 'ordem']


class CampoMedidaInline(admin.TabularInline):
    model = CampoMedida
    extra = 0
    fields = ['nome', 'ordem', 'ativo']


@admin.register(Produto, site=admin_site)
class ProdutoAdmin(LimparCacheMixin, admin.ModelAdmin):
    chaves_cache = (CHAVE_CACHE_PRODUTOS,)
    list_display = ["nome", "sku", "preco_formatado", "tipo", "status", "novo", "ordem_exibicao"]
    list_filter = ["status", "tipo", "novo"]
    search_fields = ["nome", "sku", "slug", "descricao"]
    list_editable = ["status", "ordem_exibicao"]
    prepopulated_fields = {"slug": ("nome",)}
    readonly_fields = ["nota", "total_avaliacoes"]
    inlines = [ProdutoImagemInline, CupomProdutoInline, AvaliacaoDestaqueInline, CampoMedidaInline]
    actions = ['publicar', 'voltar_para_rascunho', 'gerar_links_preview']
    fieldsets = (
        (None, {'fields': ('nome', 'sku', 'slug', 'descricao', 'tipo', 'categoria', 'status')}),
        ('Preço', {'fields': ('preco', 'preco_original', 'parcelas_max', 'parcelas_sem_juros')}),
        ('Variações', {'fields': ('cores', 'tamanhos', 'tamanhos_ativos', 'tecidos', 'tecidos_ativos',
                                  'personalizavel', 'estampa_frente', 'estampa_costas')}),
        ('Vitrine', {'fields': ('novo', 'ordem_exibicao')}),
        ('Avaliações e medidas', {'fields': ('avaliacoes_ativas', 'nota', 'total_avaliacoes',
                                            'tabela_medidas_ativa', 'tabela_medidas_imagem')}),
        ('Frete', {'fields': ('frete_peso', 'frete_altura', 'frete_largura', 'frete_comprimento'),
                   'classes': ('collapse',)}),
    )

    def preco_formatado(self, obj):
        return formatar_reais(obj.preco)
    preco_formatado.short_description = "Preço"

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        # as avaliações em destaque podem ter mudado no inline
        form.instance.atualizar_nota()
        limpar_cache(CHAVE_CACHE_PRODUTOS)

    def publicar(self, request, queryset):
        updated = queryset.update(status='publicado')
        limpar_cache(CHAVE_CACHE_PRODUTOS)
        self.message_user(request, f'{updated} produto(s) publicado(s).')
    publicar.short_description = "Publicar produtos selecionados"

    def voltar_para_rascunho(self, request, queryset):
        updated = queryset.update(status='rascunho')
        limpar_cache(CHAVE_CACHE_PRODUTOS)
        self.message_user(request, f'{updated} produto(s) voltaram para rascunho.')
    voltar_para_rascunho.short_description = "Mover para rascunho"

    def gerar_links_preview(self, request, queryset):
        for produto in queryset:
            token = produto.gerar_token_preview()
            self.message_user(request, f'{produto.nome}: /api/products/{produto.id}?preview={token}')
    gerar_links_preview.short_description = "Gerar link de pré-visualização"


@admin.register(CupomGlobal, site=admin_site)
class CupomGlobalAdmin(admin.ModelAdmin):
    form = CupomGlobalForm
    list_display = ["codigo", "descricao", "tipo_desconto", "valor_desconto", "ativo", "criado_em"]
    list_filter = ["ativo", "tipo_desconto"]
    search_fields = ["codigo", "descricao"]
    list_editable = ["ativo"]
    actions = ['ativar_cupons', 'desativar_cupons']

    def ativar_cupons(self, request, queryset):
        updated = queryset.update(ativo=True)
        self.message_user(request, f'{updated} cupom(ns) ativado(s).')
    ativar_cupons.short_description = "Ativar cupons selecionados"

    def desativar_cupons(self, request, queryset):
        updated = queryset.update(ativo=False)
        self.message_user(request, f'{updated} cupom(ns) desativado(s).')
    desativar_cupons.short_description = "Desativar cupons selecionados"


@admin.register(CupomProduto, site=admin_site)
class CupomProdutoAdmin(admin.ModelAdmin):
    form = CupomProdutoForm
    list_display = ["codigo", "produto", "tipo_desconto", "valor_desconto", "valido_de", "valido_ate", "ativo"]
    list_filter = ["ativo", "tipo_desconto"]
    search_fields = ["codigo", "produto__nome"]
    list_editable = ["ativo"]


class ItemPedidoInline(admin.TabularInline):
    model = ItemPedido
    extra = 0
    readonly_fields = ["produto", "nome_produto", "tamanho", "cor", "tecido", "posicao_estampa",
                       "preco_unitario", "quantidade", "subtotal"]
    can_delete = False


@admin.register(Pedido, site=admin_site)
class PedidoAdmin(admin.ModelAdmin):
    list_display = ["numero", "nome_cliente", "status_colorido", "status_pagamento", "total", "criado_em",
                    "arquivado_em", "excluido_em"]
    list_filter = ["status", "status_pagamento", "criado_em"]
    search_fields = ["numero", "nome_cliente", "email_cliente", "cpf_cliente", "codigo_verificacao",
                     "codigo_rastreio"]
    readonly_fields = ["numero", "preferencia_id", "pagamento_id", "codigo_verificacao", "criado_em",
                       "atualizado_em", "pago_em", "confirmacao_enviada_em", "rastreio_enviado_em",
                       "ip_cliente", "user_agent"]
    inlines = [ItemPedidoInline]
    actions = ['arquivar_pedidos', 'excluir_pedidos', 'restaurar_pedidos', 'marcar_enviado',
               'reenviar_confirmacao', 'reenviar_rastreio']

    CORES_STATUS = {
        'pending': '#b58900',
        'paid': '#2e7d32',
        'processing': '#1565c0',
        'shipped': '#6a1b9a',
        'delivered': '#1b5e20',
        'cancelled': '#616161',
        'failed': '#c62828',
        'refunded': '#ef6c00',
    }

    def status_colorido(self, obj):
        return format_html('<b style="color: {};">{}</b>', self.CORES_STATUS.get(obj.status, '#000'),
                           obj.get_status_display())
    status_colorido.short_description = "Status"

    def arquivar_pedidos(self, request, queryset):
        for pedido in queryset:
            pedido.arquivar()
        self.message_user(request, f'{queryset.count()} pedido(s) arquivado(s).')
    arquivar_pedidos.short_description = "Arquivar pedidos selecionados"

    def excluir_pedidos(self, request, queryset):
        for pedido in queryset:
            pedido.excluir()
        self.message_user(request, f'{queryset.count()} pedido(s) movido(s) para excluídos.')
    excluir_pedidos.short_description = "Mover para excluídos"

    def restaurar_pedidos(self, request, queryset):
        for pedido in queryset:
            pedido.restaurar()
        self.message_user(request, f'{queryset.count()} pedido(s) restaurado(s).')
    restaurar_pedidos.short_description = "Restaurar pedidos excluídos"

    def marcar_enviado(self, request, queryset):
        enviados = 0
        for pedido in queryset:
            pedido.atualizar_status('shipped')
            if pedido.codigo_rastreio and EmailService.enviar_codigo_rastreio(pedido):
                enviados += 1
        self.message_user(request, f'{queryset.count()} pedido(s) enviado(s); {enviados} email(s) de rastreio.')
    marcar_enviado.short_description = "Marcar como enviado"

    def reenviar_confirmacao(self, request, queryset):
        enviados = sum(1 for pedido in queryset if EmailService.enviar_confirmacao_pedido(pedido))
        self.message_user(request, f'{enviados} email(s) de confirmação enviado(s).')
    reenviar_confirmacao.short_description = "Reenviar email de confirmação"

    def reenviar_rastreio(self, request, queryset):
        enviados = sum(1 for pedido in queryset.exclude(codigo_rastreio='')
                       if EmailService.enviar_codigo_rastreio(pedido))
        self.message_user(request, f'{enviados} email(s) de rastreio enviado(s).')
    reenviar_rastreio.short_description = "Reenviar código de rastreio"


@admin.register(Banner, site=admin_site)
class BannerAdmin(LimparCacheMixin, admin.ModelAdmin):
    chaves_cache = (CHAVE_CACHE_BANNERS,)
    list_display = ["titulo", "produto", "posicao", "ordem", "ativo"]
    list_filter = ["ativo", "posicao"]
    search_fields = ["titulo", "subtitulo"]
    list_editable = ["ordem", "ativo"]


@admin.register(CardConteudo, site=admin_site)
class CardConteudoAdmin(admin.ModelAdmin):
    list_display = ["__str__", "tipo", "altura", "ordem", "ativo"]
    list_filter = ["tipo", "ativo"]
    list_editable = ["ordem", "ativo"]


@admin.register(FAQ, site=admin_site)
class FAQAdmin(admin.ModelAdmin):
    list_display = ["pergunta", "categoria", "ordem", "ativo"]
    list_filter = ["categoria", "ativo"]
    search_fields = ["pergunta", "resposta"]
    list_editable = ["ordem", "ativo"]


@admin.register(TemplateEmail, site=admin_site)
class TemplateEmailAdmin(admin.ModelAdmin):
    form = TemplateEmailForm
    list_display = ["nome", "chave", "assunto", "ativo", "atualizado_em"]
    list_editable = ["ativo"]
    actions = ['enviar_teste_para_mim']

    def enviar_teste_para_mim(self, request, queryset):
        if not request.user.email:
            self.message_user(request, 'Cadastre um email no seu usuário para receber o teste.', level='warning')
            return
        enviados = sum(1 for template in queryset if EmailService.enviar_teste(template, request.user.email))
        self.message_user(request, f'{enviados} email(s) de teste enviado(s) para {request.user.email}.')
    enviar_teste_para_mim.short_description = "Enviar teste para o meu email"


@admin.register(ConfiguracaoSite, site=admin_site)
class ConfiguracaoSiteAdmin(LimparCacheMixin, admin.ModelAdmin):
    chaves_cache = (CHAVE_CACHE_FRETE,)
    list_display = ["chave", "valor", "tipo", "atualizado_em"]
    list_filter = ["tipo"]
    search_fields = ["chave", "valor"]
    list_editable = ["valor"]


@admin.register(InscritoNewsletter, site=admin_site)
class InscritoNewsletterAdmin(admin.ModelAdmin):
    list_display = ["email", "status", "criado_em"]
    list_filter = ["status", "criado_em"]
    search_fields = ["email"]


@admin.register(InfoEmpresa, site=admin_site)
class InfoEmpresaAdmin(LimparCacheMixin, admin.ModelAdmin):
    chaves_cache = (CHAVE_CACHE_EMPRESA,)
    form = InfoEmpresaForm
    list_display = ["nome_empresa", "cnpj", "cidade", "estado", "ano_copyright"]

    def has_add_permission(self, request):
        # Um único registro
        return not InfoEmpresa.objects.exists()


class AvaliacaoImagemInline(admin.TabularInline):
    model = AvaliacaoImagem
    extra = 0
    fields = ['imagem_url', 'texto_alt']


class PerguntaAvaliacaoInline(admin.TabularInline):
    model = PerguntaAvaliacao
    extra = 0
    fk_name = 'avaliacao'
    fields = ['nome_autor', 'texto', 'eh_pergunta', 'pai']


@admin.register(Avaliacao, site=admin_site)
class AvaliacaoAdmin(admin.ModelAdmin):
    list_display = ["produto", "nome_autor", "nota", "verificada", "criado_em"]
    list_filter = ["nota", "verificada", "criado_em"]
    search_fields = ["nome_autor", "email_autor", "titulo", "conteudo", "produto__nome"]
    inlines = [AvaliacaoImagemInline, PerguntaAvaliacaoInline]
    actions = ['conferir_compras']

    def conferir_compras(self, request, queryset):
        verificadas = 0
        for avaliacao in queryset:
            if avaliacao.conferir_compra():
                verificadas += 1
            avaliacao.save(update_fields=['verificada', 'atualizado_em'])
        self.message_user(request, f'{verificadas} avaliação(ões) de clientes que compraram o produto.')
    conferir_compras.short_description = "Conferir se o autor comprou o produto"


@admin.register(MedidaTamanho, site=admin_site)
class MedidaTamanhoAdmin(admin.ModelAdmin):
    list_display = ["produto", "tamanho", "campo", "valor"]
    list_filter = ["tamanho"]
    search_fields = ["produto__nome", "campo__nome"]


@admin.register(PaginaRodape, site=admin_site)
class PaginaRodapeAdmin(admin.ModelAdmin):
    list_display = ["slug", "titulo", "ativo", "atualizado_em"]
    list_editable = ["ativo"]
    search_fields = ["titulo", "conteudo"]


admin_site.register(User, UserAdmin)
admin_site.register(Group, GroupAdmin)
