"""
Limite de requisições por IP com django-ratelimit
"""
import logging
from functools import wraps

from django.http import JsonResponse
from django_ratelimit.core import is_ratelimited
from django_ratelimit.decorators import ratelimit

logger = logging.getLogger(__name__)

JANELA_PADRAO = 15 * 60


def ip_cliente(request):
    encaminhado = request.META.get('HTTP_X_FORWARDED_FOR')
    if encaminhado:
        return encaminhado.split(',')[0].strip()
    return request.META.get('HTTP_X_REAL_IP') or request.META.get('REMOTE_ADDR') or 'unknown'


def chave_ip(group, request):
    """Chave do contador no formato que o django-ratelimit espera"""
    return ip_cliente(request)


def _taxa(maximo, janela):
    return f"{maximo}/{janela}s"


def excedeu_limite(grupo, request, maximo, janela=JANELA_PADRAO):
    """Conta a requisição e diz se passou de `maximo` dentro da janela"""
    return is_ratelimited(request, group=f"loja.{grupo}", key=chave_ip, rate=_taxa(maximo, janela),
                          increment=True)


def limitar(grupo, maximo, janela=JANELA_PADRAO, mensagem="Muitas tentativas. Tente novamente mais tarde."):
    """
    Decorador de view: responde 429 quando o IP passa do limite do grupo.

    Args:
        grupo: nome do contador (views do mesmo grupo dividem o limite)
        maximo: requisições permitidas por janela
        janela: duração da janela em segundos
    """
    def decorador(view):
        @wraps(view)
        def _view(request, *args, **kwargs):
            if getattr(request, 'limited', False):
                logger.warning(f"Limite de requisições excedido ({grupo}) para IP: {ip_cliente(request)}")
                return JsonResponse({'success': False, 'error': mensagem}, status=429)
            return view(request, *args, **kwargs)
        return ratelimit(group=f"loja.{grupo}", key=chave_ip, rate=_taxa(maximo, janela), block=False)(_view)
    return decorador
