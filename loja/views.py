from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.middleware.csrf import get_token
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt, ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST, require_http_methods
import json
import logging

from . import regras
from .configuracao import (
    CHAVE_CACHE_BANNERS, CHAVE_CACHE_EMPRESA, CHAVE_CACHE_PRODUTOS,
    config_frete, config_frete_publica, config_gateway, em_cache,
)
from .forms import AvaliacaoForm, CheckoutForm, NewsletterForm, PerguntaAvaliacaoForm
from .limites import ip_cliente, limitar
from .mochila import Mochila
from .models import (
    Avaliacao, Banner, CardConteudo, CupomGlobal, CupomProduto, CurtidaAvaliacao, FAQ, InfoEmpresa,
    InscritoNewsletter, ItemPedido, PaginaRodape, Pedido, PerguntaAvaliacao, Produto,
)
from .recomendador import RecomendadorProdutos
from .services.comprovante import gerar_comprovante
from .services.email_service import EmailService
from .services.enderecos import EnderecoNaoEncontrado, buscar_endereco
from .services.frete import CepInvalidoError, ItensInvalidosError, calcular_frete, correios_disponivel
from .services.imagens import ImagemInvalidaError, salvar_imagem_avulsa
from .services.pagamento import PagamentoError, PagamentoService
from .validadores import numero_pedido_valido

logger = logging.getLogger(__name__)

# Campos do pedido que não saem na consulta pública de rastreio
CAMPOS_PRIVADOS_RASTREIO = ['cpf_cliente', 'notas_internas', 'telefone_cliente', 'motivo_reembolso']


def _dados_requisicao(request):
    """Corpo JSON da requisição; formulários comuns caem no request.POST"""
    if request.content_type == 'application/json':
        try:
            dados = json.loads(request.body or b'{}')
        except ValueError:
            return None
        return dados if isinstance(dados, dict) else None
    return request.POST.dict()


def _json_invalido():
    return JsonResponse({'success': False, 'error': 'JSON inválido'}, status=400)


def _erro(mensagem, status=400, **extra):
    return JsonResponse(dict({'success': False, 'error': mensagem}, **extra), status=status)


def _erros_form(form):
    """Erros do formulário como {campo: [mensagens]}"""
    return {campo: [str(msg) for msg in erros] for campo, erros in form.errors.items()}


@require_GET
@ensure_csrf_cookie
def csrf(request):
    """
    Grava o cookie csrftoken. O front devolve o valor no cabeçalho
    X-CSRFToken em todo POST.
    """
    return JsonResponse({'success': True, 'csrf_token': get_token(request)})


# ---------------------------------------------------------------------
# Vitrine
# ---------------------------------------------------------------------

@require_GET
def produtos(request):
    """Produtos publicados com a imagem principal (em cache)"""
    lista = em_cache(
        CHAVE_CACHE_PRODUTOS,
        settings.CACHE_TTL['PRODUTOS'],
        lambda: [p.to_dict() for p in Produto.objects.publicados().prefetch_related('imagens')],
    )
    return JsonResponse({'success': True, 'produtos': lista})


@require_GET
def produto_detalhe(request, identificador):
    """
    Produto pelo slug, SKU ou id.

    Rascunhos só aparecem com ?preview=<token_preview> do próprio produto.
    """
    token = request.GET.get('preview', '').strip()
    produto = Produto.buscar_por_identificador(identificador)
    if produto is None and token:
        rascunho = Produto.buscar_por_identificador(identificador, queryset=Produto.objects.all())
        if rascunho is not None and rascunho.token_preview and rascunho.token_preview == token:
            produto = rascunho

    if produto is None:
        logger.info(f"Produto não encontrado para o identificador: {identificador}")
        return _erro("Produto não encontrado", status=404)

    return JsonResponse({'success': True, 'produto': produto.to_dict(com_imagens=True)})


@require_GET
def produtos_relacionados(request, produto_id):
    relacionados = RecomendadorProdutos().relacionados(produto_id)
    return JsonResponse({'success': True, 'produtos': [p.to_dict() for p in relacionados]})


@require_GET
def cupom_produto(request, produto_id):
    """Cupom ativo e dentro da validade exibido na página do produto"""
    agora = timezone.now()
    cupom = (
        CupomProduto.objects
        .filter(produto_id=produto_id, ativo=True)
        .filter(Q(valido_de__isnull=True) | Q(valido_de__lte=agora))
        .filter(Q(valido_ate__isnull=True) | Q(valido_ate__gte=agora))
        .first()
    )
    return JsonResponse({'success': True, 'cupom': cupom.to_dict() if cupom else None})


@require_GET
def banners(request):
    lista = em_cache(
        CHAVE_CACHE_BANNERS,
        settings.CACHE_TTL['BANNERS'],
        lambda: [b.to_dict() for b in Banner.objects.filter(ativo=True).select_related('produto')],
    )
    return JsonResponse({'success': True, 'banners': lista})


@require_GET
def cards_conteudo(request):
    cards = CardConteudo.objects.filter(ativo=True)
    return JsonResponse({'success': True, 'cards': [c.to_dict() for c in cards]})


@require_GET
def faqs(request):
    return JsonResponse({'success': True, 'faqs': [f.to_dict() for f in FAQ.objects.filter(ativo=True)]})


@require_GET
def info_empresa(request):
    def carregar():
        info = InfoEmpresa.get_info()
        # dict vazio em vez de None para o cache distinguir "sem cadastro" de "sem cache"
        return info.to_dict() if info else {}

    empresa = em_cache(CHAVE_CACHE_EMPRESA, settings.CACHE_TTL['INFO_EMPRESA'], carregar)
    return JsonResponse({'success': True, 'empresa': empresa or None})


@require_GET
def config_frete_gratis(request):
    config = config_frete()
    dados = config_frete_publica()
    dados['correios_pronto'] = correios_disponivel(dict(config, modo='correios'))
    dados['dias_extras'] = config['dias_extras']
    return JsonResponse({'success': True, 'config': dados})


@require_GET
def pagina_rodape(request, slug):
    pagina = PaginaRodape.objects.filter(slug=slug, ativo=True).first()
    if pagina is None:
        return _erro("página não encontrada", status=404)
    return JsonResponse({'success': True, 'pagina': pagina.to_dict()})


# ---------------------------------------------------------------------
# Avaliações e tabela de medidas
# ---------------------------------------------------------------------

SESSAO_AVALIACOES = 'avaliacoes_enviadas'


def _visitante(request):
    """Chave da sessão do visitante; cria a sessão se ainda não existe"""
    if not request.session.session_key:
        request.session.save()
    return request.session.session_key


def _avaliacao_publica(avaliacao_id):
    return (
        Avaliacao.objects
        .filter(pk=avaliacao_id, produto__status='publicado')
        .select_related('produto')
        .first()
    )


@require_http_methods(['GET', 'POST'])
def avaliacoes_produto(request, produto_id):
    """GET lista as avaliações dos clientes; POST envia uma nova"""
    produto = Produto.objects.publicados().filter(pk=produto_id).first()
    if produto is None:
        return _erro("Produto não encontrado", status=404)

    if request.method == 'POST':
        return _criar_avaliacao(request, produto)

    avaliacoes = produto.avaliacoes.prefetch_related('imagens', 'curtidas')
    return JsonResponse({
        'success': True,
        'avaliacoes_ativas': produto.avaliacoes_ativas,
        'avaliacoes': [a.to_dict() for a in avaliacoes],
    })


@limitar('avaliacoes', 10, mensagem="Muitas avaliações enviadas. Tente novamente mais tarde.")
def _criar_avaliacao(request, produto):
    if not produto.avaliacoes_ativas:
        return _erro("Avaliações desativadas para este produto", status=403)

    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    form = AvaliacaoForm(dados)
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))

    avaliacao = form.save(commit=False)
    avaliacao.produto = produto
    avaliacao.conferir_compra()
    avaliacao.save()

    # só quem enviou pode anexar fotos depois
    enviadas = request.session.get(SESSAO_AVALIACOES, [])
    request.session[SESSAO_AVALIACOES] = enviadas + [avaliacao.id]
    logger.info(f"Avaliação {avaliacao.id} criada para o produto {produto.id} (verificada={avaliacao.verificada})")
    return JsonResponse({'success': True, 'avaliacao': avaliacao.to_dict()}, status=201)


@require_POST
@limitar('avaliacoes', 10, mensagem="Muitas avaliações enviadas. Tente novamente mais tarde.")
def avaliacao_imagem(request, avaliacao_id):
    """Foto anexada pelo autor da avaliação (multipart, campo "imagem")"""
    avaliacao = _avaliacao_publica(avaliacao_id)
    if avaliacao is None:
        return _erro("Avaliação não encontrada", status=404)
    if avaliacao.id not in request.session.get(SESSAO_AVALIACOES, []):
        return _erro("Só o autor pode enviar fotos desta avaliação", status=403)

    try:
        url = salvar_imagem_avulsa(request.FILES.get('imagem'), 'avaliacoes')
    except ImagemInvalidaError as e:
        return _erro(str(e))

    imagem = avaliacao.imagens.create(imagem_url=url, texto_alt=(request.POST.get('texto_alt') or '')[:200])
    return JsonResponse({'success': True, 'imagem': imagem.to_dict()}, status=201)


@require_http_methods(['POST', 'DELETE'])
def avaliacao_curtir(request, avaliacao_id):
    """POST curte, DELETE desfaz; uma curtida por sessão"""
    avaliacao = _avaliacao_publica(avaliacao_id)
    if avaliacao is None:
        return _erro("Avaliação não encontrada", status=404)

    visitante = _visitante(request)
    if request.method == 'POST':
        CurtidaAvaliacao.objects.get_or_create(avaliacao=avaliacao, visitante=visitante)
        curtiu = True
    else:
        CurtidaAvaliacao.objects.filter(avaliacao=avaliacao, visitante=visitante).delete()
        curtiu = False
    return JsonResponse({'success': True, 'curtiu': curtiu, 'curtidas': avaliacao.curtidas.count()})


@require_http_methods(['GET', 'POST'])
def avaliacao_perguntas(request, avaliacao_id):
    """
    GET lista as perguntas com as respostas; POST pergunta, ou responde
    quando vem "pai_id".
    """
    avaliacao = _avaliacao_publica(avaliacao_id)
    if avaliacao is None:
        return _erro("Avaliação não encontrada", status=404)

    if request.method == 'GET':
        perguntas = avaliacao.perguntas.filter(pai__isnull=True).prefetch_related('respostas')
        return JsonResponse({'success': True, 'perguntas': [p.to_dict() for p in perguntas]})
    return _criar_pergunta(request, avaliacao)


@limitar('avaliacoes', 10, mensagem="Muitas avaliações enviadas. Tente novamente mais tarde.")
def _criar_pergunta(request, avaliacao):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    form = PerguntaAvaliacaoForm(dados)
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))

    pai = None
    pai_id = form.cleaned_data.get('pai_id')
    if pai_id is not None:
        pai = avaliacao.perguntas.filter(pk=pai_id, eh_pergunta=True).first()
        if pai is None:
            return _erro("Pergunta não encontrada", status=404)

    pergunta = PerguntaAvaliacao.objects.create(
        avaliacao=avaliacao,
        pai=pai,
        nome_autor=form.cleaned_data['nome_autor'],
        texto=form.cleaned_data['texto'],
        eh_pergunta=pai is None,
    )
    return JsonResponse({'success': True, 'pergunta': pergunta.to_dict()}, status=201)


@require_GET
def avaliacoes_destaque(request, produto_id):
    """Avaliações cadastradas pela equipe, na ordem definida no painel"""
    produto = Produto.objects.publicados().filter(pk=produto_id).first()
    if produto is None:
        return _erro("Produto não encontrado", status=404)
    return JsonResponse({
        'success': True,
        'nota': str(produto.nota),
        'total_avaliacoes': produto.total_avaliacoes,
        'avaliacoes': [a.to_dict() for a in produto.avaliacoes_destaque.all()],
    })


@require_GET
def medidas_produto(request, produto_id):
    produto = Produto.objects.publicados().filter(pk=produto_id).first()
    if produto is None:
        return _erro("Produto não encontrado", status=404)
    return JsonResponse(dict(
        {
            'success': True,
            'ativa': produto.tabela_medidas_ativa,
            'imagem': produto.tabela_medidas_imagem,
        },
        **produto.tabela_medidas(),
    ))


# ---------------------------------------------------------------------
# Frete e CEP
# ---------------------------------------------------------------------

@require_POST
def calcular_frete_view(request):
    """
    Corpo: {"cep": "01001-000", "itens": [{"produto_id": 1, "quantidade": 2}], "subtotal": "150.00"}

    Com subtotal, a resposta traz também o resumo com a regra de frete grátis aplicada.
    """
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    try:
        calculo = calcular_frete(dados.get('cep'), dados.get('itens'))
    except (CepInvalidoError, ItensInvalidosError) as e:
        return _erro(str(e))
    except Exception as e:
        logger.error(f"Erro ao calcular frete: {str(e)}")
        return _erro("Erro ao calcular frete", status=500)

    resposta = {'success': True, 'frete': calculo}
    if dados.get('subtotal') not in (None, ''):
        try:
            subtotal = regras.arredondar(dados['subtotal'])
        except ArithmeticError:
            return _erro("Subtotal inválido")
        resposta['resumo'] = regras.resumo_frete(calculo, config_frete(), subtotal)
    return JsonResponse(resposta)


@require_GET
def consultar_cep(request, cep):
    try:
        endereco = buscar_endereco(cep)
    except EnderecoNaoEncontrado as e:
        return _erro(str(e), status=404)
    except ValueError as e:
        return _erro(str(e))
    return JsonResponse({'success': True, 'endereco': endereco})


# ---------------------------------------------------------------------
# Cupons, newsletter e rastreio
# ---------------------------------------------------------------------

@require_GET
def cupom_global(request):
    cupom = CupomGlobal.ativo_atual()
    return JsonResponse({'success': True, 'cupom': cupom.to_dict() if cupom else None})


@require_POST
def validar_cupom(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    codigo = (dados.get('codigo') or '').strip()
    if not codigo:
        return _erro("Código do cupom é obrigatório")

    cupom = CupomGlobal.validar_codigo(codigo)
    if cupom is None:
        return JsonResponse({'success': False, 'valid': False, 'error': 'cupom inválido ou expirado'}, status=404)
    return JsonResponse({'success': True, 'valid': True, 'cupom': cupom.to_dict()})


@require_POST
@limitar('newsletter', 3, mensagem="Muitas tentativas de cadastro. Tente novamente mais tarde.")
def newsletter_inscrever(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    form = NewsletterForm(dados)
    if not form.is_valid():
        return _erro("dados inválidos.", details=_erros_form(form))

    email = form.cleaned_data['email']
    if InscritoNewsletter.objects.filter(email=email).exists():
        return _erro("este e-mail já está cadastrado.")
    try:
        inscrito = InscritoNewsletter.objects.create(email=email, ip=ip_cliente(request))
    except IntegrityError:
        return _erro("este e-mail já está cadastrado.")
    logger.info(f"Newsletter: novo inscrito {email}")

    if not EmailService.enviar_boas_vindas_newsletter(email):
        logger.warning(f"Email de boas-vindas não enviado para {email}")

    return JsonResponse({
        'success': True,
        'inscrito': {'email': inscrito.email, 'status': inscrito.status, 'criado_em': inscrito.criado_em},
    })


@require_GET
def rastreio(request, identificador):
    identificador = (identificador or '').strip()
    if not identificador:
        return _erro("Código de rastreio ou número do pedido é obrigatório")

    pedido = Pedido.objects.por_numero_ou_rastreio(identificador)
    if pedido is None or pedido.excluido:
        return _erro("Pedido não encontrado", status=404)

    dados = pedido.to_dict(com_itens=True)
    for campo in CAMPOS_PRIVADOS_RASTREIO:
        dados.pop(campo, None)
    return JsonResponse({'success': True, 'pedido': dados})


# ---------------------------------------------------------------------
# Mochila
# ---------------------------------------------------------------------

def _resposta_mochila(mochila, **extra):
    return JsonResponse(dict({'success': True, 'mochila': mochila.resumo(config_frete())}, **extra))


def _escolher_variacao(produto, dados):
    """
    Confere cor, tamanho, tecido e estampa escolhidos contra o cadastro do produto.

    O preço do tecido vem sempre do cadastro, nunca do cliente.

    Returns:
        tuple: (cor, tamanho, tecido, posicao_estampa)
    """
    cor = dados.get('cor')
    if produto.cores:
        hex_cor = cor.get('hex') if isinstance(cor, dict) else cor
        cor = next((c for c in produto.cores if isinstance(c, dict) and c.get('hex') == hex_cor), None)
        if cor is None:
            raise ValueError("Cor indisponível para este produto")
    else:
        cor = None

    tamanho = dados.get('tamanho') or None
    if produto.tamanhos_ativos and produto.tamanhos:
        if tamanho not in produto.tamanhos:
            raise ValueError("Tamanho indisponível para este produto")
    else:
        tamanho = None

    tecido = None
    nome_tecido = dados.get('tecido')
    if isinstance(nome_tecido, dict):
        nome_tecido = nome_tecido.get('name')
    if produto.tecidos_ativos and nome_tecido:
        tecido = next((t for t in produto.tecidos or [] if t.get('name') == nome_tecido), None)
        if tecido is None:
            raise ValueError("Tecido indisponível para este produto")

    posicao = dados.get('posicao_estampa') or None
    permitidas = [p for p, ok in (('frente', produto.estampa_frente), ('costas', produto.estampa_costas)) if ok]
    if posicao and posicao not in permitidas:
        raise ValueError("Posição de estampa indisponível para este produto")

    return cor, tamanho, tecido, posicao


@require_GET
@ensure_csrf_cookie
def mochila_detalhe(request):
    return _resposta_mochila(Mochila(request))


@require_POST
def mochila_adicionar(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    produto_id = str(dados.get('produto_id', ''))
    produto = None
    if produto_id.isdigit():
        produto = Produto.objects.publicados().filter(pk=int(produto_id)).first()
    if produto is None:
        return _erro("Produto não encontrado", status=404)

    try:
        cor, tamanho, tecido, posicao = _escolher_variacao(produto, dados)
        quantidade = int(dados.get('quantidade') or 1)
        mochila = Mochila(request)
        item_id = mochila.adicionar(produto, cor=cor, tamanho=tamanho, tecido=tecido,
                                    posicao_estampa=posicao, quantidade=quantidade)
    except (TypeError, ValueError) as e:
        return _erro(str(e))

    return _resposta_mochila(mochila, item_id=item_id)


@require_POST
def mochila_atualizar(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    try:
        quantidade = int(dados.get('quantidade'))
    except (TypeError, ValueError):
        return _erro("Quantidade inválida")

    mochila = Mochila(request)
    mochila.atualizar_quantidade(dados.get('item_id'), quantidade)
    return _resposta_mochila(mochila)


@require_POST
def mochila_remover(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()
    mochila = Mochila(request)
    mochila.remover(dados.get('item_id'))
    return _resposta_mochila(mochila)


@require_POST
def mochila_limpar(request):
    mochila = Mochila(request)
    mochila.limpar()
    return _resposta_mochila(mochila)


@require_POST
def mochila_cupom(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    codigo = (dados.get('codigo') or '').strip()
    if not codigo:
        return _erro("Código do cupom é obrigatório")
    cupom = CupomGlobal.validar_codigo(codigo)
    if cupom is None:
        return _erro("cupom inválido ou expirado", status=404)

    mochila = Mochila(request)
    mochila.aplicar_cupom(cupom)
    return _resposta_mochila(mochila)


@require_POST
def mochila_remover_cupom(request):
    mochila = Mochila(request)
    mochila.remover_cupom()
    return _resposta_mochila(mochila)


@require_POST
def mochila_frete(request):
    """Calcula o frete dos itens da mochila para o CEP e guarda o mais barato"""
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    mochila = Mochila(request)
    try:
        calculo = calcular_frete(dados.get('cep'), mochila.itens_frete())
    except CepInvalidoError as e:
        return _erro(str(e))

    config = config_frete()
    resumo = regras.resumo_frete(calculo, config, mochila.subtotal())
    mais_barata = regras.opcao_mais_barata(calculo['opcoes'])
    mochila.definir_frete(dados.get('cep'), mais_barata['preco'] if mais_barata else config['valor_padrao'])
    return _resposta_mochila(mochila, frete=resumo)


# ---------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------

@require_POST
@limitar('checkout', 10, mensagem="Muitas tentativas de checkout. Tente novamente mais tarde.")
def criar_pedido(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    form = CheckoutForm(dados)
    if not form.is_valid():
        return _erro("Dados inválidos", details=_erros_form(form))
    dados = form.cleaned_data

    desconto = dados.get('desconto') or 0
    try:
        regras.conferir_total(dados['itens'], desconto, dados['frete'], dados['total'])
    except regras.TotalDivergenteError as e:
        logger.error(f"Preço total não corresponde aos itens: esperado {e.esperado}, recebido {e.recebido}, "
                     f"{len(dados['itens'])} itens")
        return _erro("Preço total inválido.", expected=str(e.esperado), received=str(e.recebido))

    ids = {item['produto_id'] for item in dados['itens']}
    encontrados = set(Produto.objects.filter(id__in=ids).values_list('id', flat=True))
    faltando = ids - encontrados
    if faltando:
        return _erro(f"Produto não encontrado: {', '.join(str(i) for i in sorted(faltando))}")

    try:
        with transaction.atomic():
            pedido = Pedido.objects.create(
                numero=Pedido.gerar_numero(),
                nome_cliente=dados['nome'],
                email_cliente=dados['email'],
                telefone_cliente=dados['telefone'],
                cpf_cliente=dados['cpf'],
                cep=dados['cep'],
                rua=dados['rua'],
                numero_endereco=dados['numero'],
                complemento=dados.get('complemento') or '',
                bairro=dados['bairro'],
                cidade=dados['cidade'],
                estado=dados['estado'],
                subtotal=dados['subtotal'],
                desconto=desconto,
                frete=dados['frete'],
                total=dados['total'],
                status='pending',
                ip_cliente=ip_cliente(request),
                user_agent=dados.get('user_agent') or request.META.get('HTTP_USER_AGENT', ''),
                tipo_dispositivo=dados.get('tipo_dispositivo') or '',
                navegador=dados.get('navegador') or '',
                versao_navegador=dados.get('versao_navegador') or '',
                sistema=dados.get('sistema') or '',
                versao_sistema=dados.get('versao_sistema') or '',
                resolucao_tela=dados.get('resolucao_tela') or '',
            )
            ItemPedido.objects.bulk_create([
                ItemPedido(
                    pedido=pedido,
                    produto_id=item['produto_id'],
                    nome_produto=item['nome_produto'],
                    imagem_produto=item.get('imagem_produto') or '',
                    tamanho=item.get('tamanho') or 'Padrão',
                    cor=item.get('cor') or {'name': 'Padrão', 'hex': '#000000'},
                    tecido=item.get('tecido'),
                    posicao_estampa=item.get('posicao_estampa') or '',
                    preco_unitario=item['preco_unitario'],
                    quantidade=item['quantidade'],
                    subtotal=item['subtotal'],
                )
                for item in dados['itens']
            ])
    except Exception as e:
        logger.error(f"Erro ao criar pedido: {str(e)}")
        return _erro("Erro ao processar pedido", status=500)

    logger.info(f"Pedido criado: {pedido.numero} (id {pedido.id})")
    return JsonResponse({
        'success': True,
        'pedido_id': pedido.id,
        'numero_pedido': pedido.numero,
        'message': 'Pedido criado com sucesso. Aguardando pagamento.',
    })


def _pedido_por_numero(numero):
    """
    Returns:
        tuple: (pedido, resposta de erro)
    """
    if not numero_pedido_valido(numero):
        return None, _erro("Número de pedido inválido")
    pedido = Pedido.objects.filter(numero=numero).first()
    if pedido is None:
        return None, _erro("Pedido não encontrado", status=404)
    return pedido, None


@require_GET
def pedido_checkout(request, numero):
    pedido, erro = _pedido_por_numero(numero)
    if erro:
        return erro

    dados = pedido.to_dict(com_itens=True)
    for campo in ('cpf_cliente', 'notas_internas', 'codigo_verificacao', 'arquivado_em', 'excluido_em'):
        dados.pop(campo, None)
    return JsonResponse({'success': True, 'pedido': dados})


@require_GET
def status_pagamento(request, numero):
    pedido, erro = _pedido_por_numero(numero)
    if erro:
        return erro

    return JsonResponse({
        'success': True,
        'numero_pedido': pedido.numero,
        'status': pedido.status,
        'status_pagamento': pedido.status_pagamento,
        'metodo_pagamento': pedido.metodo_pagamento,
        'parcelas': pedido.parcelas,
        'total': str(pedido.total),
        'pago_em': pedido.pago_em,
        'codigo_verificacao': pedido.codigo_verificacao,
    })


@require_GET
def comprovante(request, numero):
    pedido, erro = _pedido_por_numero(numero)
    if erro:
        return erro

    try:
        conteudo = gerar_comprovante(pedido)
    except Exception as e:
        logger.error(f"Erro ao gerar comprovante do pedido {numero}: {str(e)}")
        return _erro("Erro ao gerar comprovante", status=500)

    response = HttpResponse(conteudo, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename=comprovante-{pedido.numero}.pdf'
    return response


@require_GET
def mp_config(request):
    info = PagamentoService.info_ambiente()
    return JsonResponse({'success': True, 'public_key': info['public_key'], 'is_production': info['is_production']})


@require_GET
def gateway_settings(request):
    return JsonResponse({'success': True, 'settings': config_gateway()})


@require_POST
@limitar('checkout', 10, mensagem="Muitas tentativas de checkout. Tente novamente mais tarde.")
def criar_preferencia(request):
    dados = _dados_requisicao(request)
    if dados is None:
        return _json_invalido()

    pedido_id = dados.get('pedido_id')
    if not pedido_id:
        return _erro("pedido_id é obrigatório")

    pedido = Pedido.objects.filter(pk=pedido_id).first() if str(pedido_id).isdigit() else None
    if pedido is None:
        return _erro("Pedido não encontrado", status=404)
    if not pedido.itens.exists():
        return _erro("Pedido sem itens")

    try:
        preferencia = PagamentoService.criar_preferencia(pedido)
    except PagamentoError as e:
        logger.error(f"Erro ao criar preferência do pedido {pedido.numero}: {str(e)}")
        return _erro("Erro ao criar preferência de pagamento", status=500, details=str(e))

    return JsonResponse(dict({'success': True}, **preferencia))


@csrf_exempt
@require_POST
def webhook(request):
    """
    Notificação do Mercado Pago. Responde 200 mesmo quando não consegue processar,
    para o gateway não reenviar indefinidamente; só assinatura inválida recebe 401.
    """
    corpo = _dados_requisicao(request) or {}
    dados_corpo = corpo.get('data') if isinstance(corpo.get('data'), dict) else {}
    data_id = request.GET.get('data.id') or dados_corpo.get('id')
    tipo = request.GET.get('type') or corpo.get('type')
    data_id = str(data_id) if data_id else None

    logger.info(f"Webhook recebido: tipo={tipo} id={data_id}")

    x_signature = request.headers.get('x-signature')
    x_request_id = request.headers.get('x-request-id')
    if x_signature and x_request_id and data_id:
        if not PagamentoService.validar_assinatura_webhook(x_signature, x_request_id, data_id):
            return HttpResponse("Unauthorized", status=401)

    try:
        PagamentoService.processar_webhook(tipo, data_id)
    except Exception as e:
        logger.error(f"Erro ao processar webhook {data_id}: {str(e)}")

    return HttpResponse("OK")
