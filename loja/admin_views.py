"""
Endpoints JSON do painel da equipe: pedidos, templates de email,
configurações, imagens de produto, avaliações, tabela de medidas e
páginas do rodapé.
"""
from functools import wraps
import logging

from django.db import transaction
from django.db.models import Q
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST, require_http_methods

from .configuracao import CHAVE_CACHE_PRODUTOS, definir_valor, limpar_cache
from .forms import (
    AvaliacaoDestaqueForm, CampoMedidaForm, EmailTesteForm, ImagemProdutoForm, MedidaTamanhoForm,
    PaginaRodapeForm, StatusPedidoForm, TemplateEmailForm,
)
from .models import (
    AvaliacaoDestaque, CampoMedida, ConfiguracaoSite, MedidaTamanho, PaginaRodape, Pedido, Produto,
    ProdutoImagem, TemplateEmail,
)
from .services.email_service import EmailService
from .services.imagens import (
    ImagemInvalidaError, excluir_imagem, reordenar_imagens, salvar_imagem_avulsa, salvar_imagem_produto,
)
from .views import _dados_requisicao, _erro, _erros_form, _json_invalido

logger = logging.getLogger(__name__)

ABAS_PEDIDOS = ['all', 'archived', 'deleted', 'shipped', 'delivered', 'refunded']

CAMPOS_ORDENACAO = {
    'numero': 'numero',
    'nome': 'nome_cliente',
    'criado_em': 'criado_em',
    'total': 'total',
    'status': 'status',
    'status_pagamento': 'status_pagamento',
}


def staff_required(view):
    """Só usuários da equipe; os demais recebem 403 em JSON"""
    @wraps(view)
    def _view(request, *args, **kwargs):
        if not (request.user.is_authenticated and request.user.is_staff):
            return JsonResponse({'success': False, 'error': 'Não autorizado'}, status=403)
        return view(request, *args, **kwargs)
    return _view


# ---------------------------------------------------------------------
# Pedidos
# ---------------------------------------------------------------------

def filtrar_pedidos(aba='all', status=None, busca=None, com_notas=False, ordenar=None, direcao='desc'):
    """
    Monta a listagem do painel.

    Args:
        aba: all (não arquivados nem excluídos), archived, deleted, shipped, delivered ou refunded
        status: status do pedido; "paid" filtra pelo pagamento aprovado
        busca: texto procurado em número, cliente, documento, contato, cidade, UF e SKU dos itens
        com_notas: só pedidos com notas internas
        ordenar: numero, nome, criado_em, total, status ou status_pagamento
        direcao: asc ou desc
    """
    if aba == 'archived':
        pedidos = Pedido.objects.arquivados()
    elif aba == 'deleted':
        pedidos = Pedido.objects.excluidos()
    elif aba in ('shipped', 'delivered', 'refunded'):
        pedidos = Pedido.objects.visiveis().filter(status=aba)
    else:
        pedidos = Pedido.objects.visiveis()

    busca = (busca or '').strip()
    if busca:
        pedidos = pedidos.filter(
            Q(numero__icontains=busca)
            | Q(nome_cliente__icontains=busca)
            | Q(email_cliente__icontains=busca)
            | Q(cpf_cliente__icontains=busca)
            | Q(telefone_cliente__icontains=busca)
            | Q(codigo_verificacao__icontains=busca)
            | Q(cidade__icontains=busca)
            | Q(estado__icontains=busca)
            | Q(itens__produto__sku__icontains=busca)
        ).distinct()

    if status and status != 'all':
        if status == 'paid':
            # pago = aprovado no gateway, mesmo que já enviado ou entregue
            pedidos = pedidos.filter(status_pagamento='approved')
        else:
            pedidos = pedidos.filter(status=status)

    if com_notas:
        pedidos = pedidos.exclude(notas_internas__regex=r'^\s*$')

    campo = CAMPOS_ORDENACAO.get(ordenar, 'criado_em')
    prefixo = '' if direcao == 'asc' else '-'
    return pedidos.order_by(f"{prefixo}{campo}", f"{prefixo}id")


@staff_required
@require_GET
def pedidos_lista(request):
    aba = request.GET.get('aba', 'all')
    if aba not in ABAS_PEDIDOS:
        aba = 'all'
    pedidos = filtrar_pedidos(
        aba=aba,
        status=request.GET.get('status'),
        busca=request.GET.get('busca'),
        com_notas=request.GET.get('com_notas') in ('1', 'true'),
        ordenar=request.GET.get('ordenar'),
        direcao=request.GET.get('direcao', 'desc'),
    )
    dados = [p.to_dict(com_itens=False) | {'tem_notas': p.tem_notas} for p in pedidos]
    return JsonResponse({'success': True, 'pedidos': dados, 'total': len(dados)})


@staff_required
@require_GET
def pedido_detalhe(request, pedido_id):
    pedido = get_object_or_404(Pedido, pk=pedido_id)
    dados = pedido.to_dict(com_itens=True)
    dados.update({
        'ip_cliente': pedido.ip_cliente,
        'user_agent': pedido.user_agent,
        'tipo_dispositivo': pedido.tipo_dispositivo,
        'navegador': pedido.navegador,
        'versao_navegador': pedido.versao_navegador,
        'sistema': pedido.sistema,
        'versao_sistema': pedido.versao_sistema,
        'resolucao_tela': pedido.resolucao_tela,
        'confirmacao_enviada_em': pedido.confirmacao_enviada_em,
        'rastreio_enviado_em': pedido.rastreio_enviado_em,
    })
    return JsonResponse({'success': True, 'pedido': dados})


@staff_required
@require_POST
def pedido_status(request, pedido_id):
    """
    Muda o status. Enviado com código de rastreio dispara o email de rastreio.
    """
    pedido = get_object_or_404(Pedido, pk=pedido_id)
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    form = StatusPedidoForm(dados)
    if not form.is_valid():
        if not dados.get('status'):
            return _erro("Status é obrigatório")
        return _erro("Dados inválidos", details=_erros_form(form))

    status = form.cleaned_data['status']
    codigo = form.cleaned_data.get('codigo_rastreio')
    pedido.atualizar_status(status, codigo_rastreio=codigo, motivo_reembolso=form.cleaned_data.get('motivo_reembolso'))
    logger.info(f"Pedido {pedido.numero} atualizado para {status}")

    email_enviado = None
    if status == 'shipped' and codigo:
        email_enviado = EmailService.enviar_codigo_rastreio(pedido)
        if not email_enviado:
            logger.error(f"Falha ao enviar email de rastreio do pedido {pedido.numero}")

    return JsonResponse({'success': True, 'pedido': pedido.to_dict(com_itens=False), 'email_enviado': email_enviado})


@staff_required
@require_POST
def pedido_notas(request, pedido_id):
    pedido = get_object_or_404(Pedido, pk=pedido_id)
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    pedido.notas_internas = dados.get('notas') or ''
    pedido.save(update_fields=['notas_internas', 'atualizado_em'])
    return JsonResponse({'success': True, 'pedido': pedido.to_dict(com_itens=False)})


ACOES_PEDIDO = {
    'archive': Pedido.arquivar,
    'unarchive': Pedido.desarquivar,
    'delete': Pedido.excluir,
    'restore': Pedido.restaurar,
}


@staff_required
@require_POST
def pedido_acao(request, pedido_id, acao):
    """archive, unarchive, delete (lógico) ou restore de um pedido"""
    if acao not in ACOES_PEDIDO:
        return _erro("Ação inválida", status=404)
    pedido = get_object_or_404(Pedido, pk=pedido_id)
    ACOES_PEDIDO[acao](pedido)
    logger.info(f"Pedido {pedido.numero}: {acao}")
    return JsonResponse({'success': True, 'pedido': pedido.to_dict(com_itens=False)})


@staff_required
@require_POST
def pedido_excluir_definitivo(request, pedido_id):
    pedido = get_object_or_404(Pedido, pk=pedido_id)
    if not pedido.excluido:
        return _erro("Pedido precisa estar removido antes de deletar permanentemente")
    numero = pedido.numero
    pedido.delete()
    logger.warning(f"Pedido {numero} apagado definitivamente")
    return JsonResponse({'success': True})


def _ids_pedidos(dados):
    ids = dados.get('ids') if dados else None
    if not isinstance(ids, list) or not ids:
        return None
    try:
        return [int(i) for i in ids]
    except (TypeError, ValueError):
        return None


@staff_required
@require_POST
def pedidos_lote_status(request):
    dados = _dados_requisicao(request)
    ids = _ids_pedidos(dados)
    form = StatusPedidoForm(dados or {})
    if ids is None or not form.is_valid():
        return _erro("Dados inválidos")

    status = form.cleaned_data['status']
    motivo = form.cleaned_data.get('motivo_reembolso')
    total = 0
    with transaction.atomic():
        for pedido in Pedido.objects.filter(pk__in=ids):
            pedido.atualizar_status(status, motivo_reembolso=motivo)
            total += 1
    logger.info(f"Status em lote: {total}/{len(ids)} pedidos para {status}")
    return JsonResponse({'success': True, 'count': total})


@staff_required
@require_POST
def pedidos_lote_acao(request, acao):
    """Mesmas ações de pedido_acao para vários pedidos"""
    if acao not in ACOES_PEDIDO:
        return _erro("Ação inválida", status=404)
    ids = _ids_pedidos(_dados_requisicao(request))
    if ids is None:
        return _erro("IDs de pedidos inválidos")

    total = 0
    for pedido in Pedido.objects.filter(pk__in=ids):
        ACOES_PEDIDO[acao](pedido)
        total += 1
    return JsonResponse({'success': True, 'count': total})


@staff_required
@require_POST
def pedidos_lote_excluir_definitivo(request):
    ids = _ids_pedidos(_dados_requisicao(request))
    if ids is None:
        return _erro("IDs de pedidos inválidos")

    pedidos = Pedido.objects.filter(pk__in=ids)
    if pedidos.filter(excluido_em__isnull=True).exists():
        return _erro("Todos os pedidos precisam estar removidos antes de deletar permanentemente")

    total = pedidos.count()
    pedidos.delete()
    logger.warning(f"{total} pedidos apagados definitivamente")
    return JsonResponse({'success': True, 'count': total})


# ---------------------------------------------------------------------
# Templates de email
# ---------------------------------------------------------------------

@staff_required
@require_GET
def templates_email(request):
    return JsonResponse({'success': True, 'templates': [t.to_dict() for t in TemplateEmail.objects.all()]})


@staff_required
@require_http_methods(['GET', 'POST'])
def template_email(request, chave):
    """GET devolve o template; POST cria ou atualiza"""
    if chave not in dict(TemplateEmail.CHAVE_CHOICES):
        return _erro("Template não encontrado", status=404)
    template = TemplateEmail.objects.filter(chave=chave).first()

    if request.method == 'GET':
        if template is None:
            return _erro("Template não encontrado", status=404)
        return JsonResponse({'success': True, 'template': template.to_dict()})

    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    form = TemplateEmailForm(dados, instance=template or TemplateEmail(chave=chave))
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))
    template = form.save()
    logger.info(f"Template de email {chave} atualizado")
    return JsonResponse({'success': True, 'template': template.to_dict()})


@staff_required
@require_POST
def template_email_teste(request, chave):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    form = EmailTesteForm(dados)
    if not form.is_valid():
        return _erro(form.errors['to'][0])

    template = TemplateEmail.objects.filter(chave=chave).first()
    if template is None:
        return _erro("Template não encontrado", status=404)

    if not EmailService.enviar_teste(template, form.cleaned_data['to']):
        return _erro("Falha ao enviar email de teste", status=500)
    return JsonResponse({'success': True, 'message': 'Email de teste enviado com sucesso'})


# ---------------------------------------------------------------------
# Configurações
# ---------------------------------------------------------------------

@staff_required
@require_http_methods(['GET', 'POST'])
def configuracoes(request):
    """
    GET lista todas; POST grava {"chave", "valor", "tipo"} ou {"configuracoes": {chave: valor}}.
    """
    if request.method == 'GET':
        dados = {c.chave: c.valor for c in ConfiguracaoSite.objects.all()}
        return JsonResponse({'success': True, 'configuracoes': dados})

    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    if isinstance(dados.get('configuracoes'), dict):
        valores = dados['configuracoes']
        tipo = 'text'
    elif dados.get('chave'):
        valores = {dados['chave']: dados.get('valor')}
        tipo = dados.get('tipo') or 'text'
    else:
        return _erro("Informe a chave da configuração")

    if tipo not in dict(ConfiguracaoSite.TIPO_CHOICES):
        return _erro("Tipo de configuração inválido")

    for chave, valor in valores.items():
        definir_valor(chave, valor, tipo)
    return JsonResponse({'success': True, 'configuracoes': {c: str(v) if v is not None else '' for c, v in valores.items()}})


# ---------------------------------------------------------------------
# Imagens de produto
# ---------------------------------------------------------------------

@staff_required
@require_POST
def produto_imagem_upload(request, produto_id):
    produto = get_object_or_404(Produto, pk=produto_id)
    form = ImagemProdutoForm(request.POST, request.FILES)
    if not form.is_valid():
        if 'imagem' in form.errors:
            return _erro(form.errors['imagem'][0])
        return _erro("Dados inválidos", details=_erros_form(form))

    try:
        imagem = salvar_imagem_produto(
            produto,
            form.cleaned_data['imagem'],
            texto_alt=form.cleaned_data.get('texto_alt'),
            cor=form.cleaned_data.get('cor'),
            tipo=form.cleaned_data.get('tipo'),
            recorte=form.recorte,
        )
    except ImagemInvalidaError as e:
        return _erro(str(e))

    limpar_cache(CHAVE_CACHE_PRODUTOS)
    return JsonResponse({'success': True, 'imagem': imagem.to_dict()}, status=201)


@staff_required
@require_POST
def produto_imagens_reordenar(request, produto_id):
    produto = get_object_or_404(Produto, pk=produto_id)
    dados = _dados_requisicao(request)
    ids = dados.get('ids') if dados else None
    if not isinstance(ids, list):
        return _erro("Envie a lista de ids na nova ordem")
    try:
        reordenar_imagens(produto, ids)
    except (TypeError, ValueError):
        return _erro("IDs de imagens inválidos")

    limpar_cache(CHAVE_CACHE_PRODUTOS)
    return JsonResponse({'success': True, 'imagens': [img.to_dict() for img in produto.imagens.all()]})


@staff_required
@require_POST
def produto_imagem_excluir(request, imagem_id):
    imagem = get_object_or_404(ProdutoImagem, pk=imagem_id)
    excluir_imagem(imagem)
    limpar_cache(CHAVE_CACHE_PRODUTOS)
    return JsonResponse({'success': True})


def _com_valores_atuais(instancia, form_class, dados):
    """Campos ausentes no corpo mantêm o valor salvo"""
    return dict(model_to_dict(instancia, fields=form_class._meta.fields), **dados)


# ---------------------------------------------------------------------
# Avaliações em destaque
# ---------------------------------------------------------------------

def _nota_alterada(produto):
    produto.atualizar_nota()
    limpar_cache(CHAVE_CACHE_PRODUTOS)


def _avaliacao_destaque(produto_id, avaliacao_id):
    return AvaliacaoDestaque.objects.filter(pk=avaliacao_id, produto_id=produto_id).select_related('produto').first()


@staff_required
@require_http_methods(['GET', 'POST'])
def avaliacoes_destaque(request, produto_id):
    """GET lista; POST cadastra e recalcula a nota do produto"""
    produto = get_object_or_404(Produto, pk=produto_id)
    if request.method == 'GET':
        avaliacoes = [a.to_dict() for a in produto.avaliacoes_destaque.all()]
        return JsonResponse({'success': True, 'avaliacoes': avaliacoes})

    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    form = AvaliacaoDestaqueForm(dados, instance=AvaliacaoDestaque(produto=produto))
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))
    avaliacao = form.save()
    _nota_alterada(produto)
    logger.info(f"Avaliação em destaque {avaliacao.id} criada no produto {produto.id}")
    return JsonResponse({'success': True, 'avaliacao': avaliacao.to_dict(), 'nota': str(produto.nota)}, status=201)


@staff_required
@require_POST
def avaliacao_destaque_atualizar(request, produto_id, avaliacao_id):
    avaliacao = _avaliacao_destaque(produto_id, avaliacao_id)
    if avaliacao is None:
        return _erro("Avaliação não encontrada", status=404)
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    form = AvaliacaoDestaqueForm(_com_valores_atuais(avaliacao, AvaliacaoDestaqueForm, dados), instance=avaliacao)
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))
    avaliacao = form.save()
    _nota_alterada(avaliacao.produto)
    return JsonResponse({'success': True, 'avaliacao': avaliacao.to_dict(), 'nota': str(avaliacao.produto.nota)})


@staff_required
@require_POST
def avaliacao_destaque_reordenar(request, produto_id, avaliacao_id):
    avaliacao = _avaliacao_destaque(produto_id, avaliacao_id)
    if avaliacao is None:
        return _erro("Avaliação não encontrada", status=404)
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    ordem = dados.get('ordem')
    if isinstance(ordem, bool) or not isinstance(ordem, (int, str)) or not str(ordem).lstrip('-').isdigit():
        return _erro("ordem inválida")
    avaliacao.ordem = int(ordem)
    avaliacao.save(update_fields=['ordem', 'atualizado_em'])
    return JsonResponse({'success': True, 'avaliacao': avaliacao.to_dict()})


@staff_required
@require_POST
def avaliacao_destaque_excluir(request, produto_id, avaliacao_id):
    avaliacao = _avaliacao_destaque(produto_id, avaliacao_id)
    if avaliacao is None:
        return _erro("Avaliação não encontrada", status=404)
    produto = avaliacao.produto
    avaliacao.delete()
    _nota_alterada(produto)
    logger.info(f"Avaliação em destaque {avaliacao_id} excluída do produto {produto.id}")
    return JsonResponse({'success': True, 'nota': str(produto.nota), 'total_avaliacoes': produto.total_avaliacoes})


PASTAS_IMAGEM_AVALIACAO = {
    'usuario': 'avaliacoes/usuarios',
    'avaliacao': 'avaliacoes/fotos',
}


@staff_required
@require_POST
def avaliacao_imagem_upload(request):
    """Foto do cliente ou da avaliação; devolve a URL para gravar no cadastro"""
    pasta = PASTAS_IMAGEM_AVALIACAO.get(request.POST.get('tipo') or 'avaliacao')
    if pasta is None:
        return _erro("Tipo de imagem inválido")
    try:
        url = salvar_imagem_avulsa(request.FILES.get('imagem'), pasta)
    except ImagemInvalidaError as e:
        return _erro(str(e))
    return JsonResponse({'success': True, 'url': url}, status=201)


# ---------------------------------------------------------------------
# Tabela de medidas
# ---------------------------------------------------------------------

@staff_required
@require_http_methods(['GET', 'POST'])
def campos_medida(request, produto_id):
    produto = get_object_or_404(Produto, pk=produto_id)
    if request.method == 'GET':
        return JsonResponse({'success': True, 'campos': [c.to_dict() for c in produto.campos_medida.all()]})

    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    dados.setdefault('ativo', True)
    form = CampoMedidaForm(dados, instance=CampoMedida(produto=produto))
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))
    campo = form.save()
    return JsonResponse({'success': True, 'campo': campo.to_dict()}, status=201)


@staff_required
@require_POST
def campo_medida_atualizar(request, campo_id):
    campo = CampoMedida.objects.filter(pk=campo_id).first()
    if campo is None:
        return _erro("Campo não encontrado", status=404)
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    form = CampoMedidaForm(_com_valores_atuais(campo, CampoMedidaForm, dados), instance=campo)
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))
    campo = form.save()
    return JsonResponse({'success': True, 'campo': campo.to_dict()})


@staff_required
@require_POST
def campo_medida_excluir(request, campo_id):
    """Apaga o campo junto com as medidas dele"""
    campo = CampoMedida.objects.filter(pk=campo_id).first()
    if campo is None:
        return _erro("Campo não encontrado", status=404)
    campo.delete()
    return JsonResponse({'success': True})


@staff_required
@require_http_methods(['GET', 'POST'])
def medidas_tamanho(request, produto_id):
    """GET lista; POST grava o valor de um tamanho/campo, criando ou atualizando"""
    produto = get_object_or_404(Produto, pk=produto_id)
    if request.method == 'GET':
        return JsonResponse(dict({'success': True}, **produto.tabela_medidas(somente_ativos=False)))

    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    form = MedidaTamanhoForm(dados)
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))

    campo = produto.campos_medida.filter(pk=form.cleaned_data['campo_id']).first()
    if campo is None:
        return _erro("Campo não encontrado", status=404)

    medida, criada = MedidaTamanho.objects.update_or_create(
        produto=produto,
        tamanho=form.cleaned_data['tamanho'],
        campo=campo,
        defaults={'valor': form.cleaned_data['valor']},
    )
    return JsonResponse({'success': True, 'medida': medida.to_dict()}, status=201 if criada else 200)


@staff_required
@require_POST
def medida_tamanho_excluir(request, medida_id):
    medida = MedidaTamanho.objects.filter(pk=medida_id).first()
    if medida is None:
        return _erro("Medida não encontrada", status=404)
    medida.delete()
    return JsonResponse({'success': True})


# ---------------------------------------------------------------------
# Páginas do rodapé
# ---------------------------------------------------------------------

@staff_required
@require_GET
def paginas_rodape(request):
    return JsonResponse({'success': True, 'paginas': [p.to_dict() for p in PaginaRodape.objects.all()]})


@staff_required
@require_http_methods(['GET', 'POST'])
def pagina_rodape(request, slug):
    """GET devolve a página (mesmo inativa); POST cria ou atualiza"""
    if slug not in dict(PaginaRodape.SLUG_CHOICES):
        return _erro("página não encontrada", status=404)
    pagina = PaginaRodape.objects.filter(slug=slug).first()

    if request.method == 'GET':
        if pagina is None:
            return _erro("página não encontrada", status=404)
        return JsonResponse({'success': True, 'pagina': pagina.to_dict()})

    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    if not dados.get('titulo') or not dados.get('conteudo'):
        return _erro("título e conteúdo são obrigatórios")
    if 'ativo' not in dados:
        dados['ativo'] = pagina.ativo if pagina else True

    form = PaginaRodapeForm(dados, instance=pagina or PaginaRodape(slug=slug))
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))
    pagina = form.save()
    logger.info(f"Página do rodapé {slug} atualizada")
    return JsonResponse({'success': True, 'pagina': pagina.to_dict()})
