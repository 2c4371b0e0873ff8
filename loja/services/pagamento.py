"""
Integração com o Mercado Pago (Checkout Pro)

Escolhe as credenciais pelo ambiente, monta a preferência do pedido,
valida a assinatura dos webhooks e aplica o status do pagamento no pedido.
"""
import hashlib
import hmac
import logging
import os
from datetime import timedelta

import mercadopago
from django.conf import settings
from django.utils import timezone

from loja import regras
from loja.configuracao import config_gateway
from loja.models import Pedido
from loja.services.email_service import EmailService
from loja.validadores import somente_digitos

logger = logging.getLogger(__name__)

METODOS_CREDITO = ['visa', 'master', 'amex', 'elo', 'hipercard']
METODOS_DEBITO = ['debvisa', 'debmaster', 'debelo']


class PagamentoError(Exception):
    """Falha de configuração ou de comunicação com o gateway"""


class PagamentoService:
    """Serviço de pagamentos do checkout"""

    @staticmethod
    def em_producao():
        return settings.APP_ENV == 'production' or os.environ.get('NODE_ENV') == 'production'

    @staticmethod
    def access_token():
        """
        Token de produção em produção; fora dela, o de sandbox com fallback para o de produção.

        Raises:
            PagamentoError: nenhum token configurado
        """
        if PagamentoService.em_producao():
            if not settings.MERCADOPAGO_ACCESS_TOKEN:
                raise PagamentoError("MERCADOPAGO_ACCESS_TOKEN não configurado para produção")
            return settings.MERCADOPAGO_ACCESS_TOKEN

        if settings.MERCADOPAGO_ACCESS_TOKEN_SANDBOX:
            return settings.MERCADOPAGO_ACCESS_TOKEN_SANDBOX

        logger.warning("MERCADOPAGO_ACCESS_TOKEN_SANDBOX não configurado, usando produção")
        if not settings.MERCADOPAGO_ACCESS_TOKEN:
            raise PagamentoError("Nenhum token do Mercado Pago configurado")
        return settings.MERCADOPAGO_ACCESS_TOKEN

    @staticmethod
    def public_key():
        if PagamentoService.em_producao():
            return settings.MERCADOPAGO_PUBLIC_KEY
        return settings.MERCADOPAGO_PUBLIC_KEY_SANDBOX or settings.MERCADOPAGO_PUBLIC_KEY

    @staticmethod
    def info_ambiente():
        return {
            'is_production': PagamentoService.em_producao(),
            'public_key': PagamentoService.public_key(),
        }

    @staticmethod
    def sdk():
        return mercadopago.SDK(PagamentoService.access_token())

    @staticmethod
    def validar_assinatura_webhook(x_signature, x_request_id, data_id):
        """
        Confere o header x-signature ("ts=...,v1=...") de uma notificação.

        Sem segredo configurado a notificação é aceita.
        """
        segredo = settings.MERCADOPAGO_WEBHOOK_SECRET
        if not segredo:
            logger.warning("Segredo do webhook não configurado, pulando validação")
            return True

        ts = hash_recebido = None
        for parte in (x_signature or '').split(','):
            chave, _, valor = parte.partition('=')
            chave = chave.strip()
            if chave == 'ts':
                ts = valor.strip()
            elif chave == 'v1':
                hash_recebido = valor.strip()

        if not ts or not hash_recebido:
            logger.error("Assinatura do webhook inválida: ts ou v1 ausente")
            return False

        manifesto = f"id:{data_id};request-id:{x_request_id};ts:{ts};"
        calculado = hmac.new(segredo.encode(), manifesto.encode(), hashlib.sha256).hexdigest()
        valido = hmac.compare_digest(calculado, hash_recebido)
        if not valido:
            logger.error(f"Assinatura do webhook não confere para o recurso {data_id}")
        return valido

    @staticmethod
    def _lista_config(valor):
        return [parte.strip() for parte in (valor or '').split(',') if parte.strip()]

    @staticmethod
    def _inteiro(valor, padrao):
        try:
            return int(valor) or padrao
        except (TypeError, ValueError):
            return padrao

    @staticmethod
    def metodos_excluidos(config):
        metodos = []
        if config.get('gateway_pix_enabled') == 'false':
            metodos.append('pix')
        if config.get('gateway_credit_card_enabled') == 'false':
            metodos.extend(METODOS_CREDITO)
        if config.get('gateway_debit_card_enabled') == 'false':
            metodos.extend(METODOS_DEBITO)
        metodos.extend(PagamentoService._lista_config(config.get('gateway_excluded_methods')))
        return [{'id': metodo} for metodo in metodos]

    @staticmethod
    def tipos_excluidos(config):
        tipos = []
        if config.get('gateway_boleto_enabled') == 'false':
            tipos.append('ticket')
        tipos.extend(PagamentoService._lista_config(config.get('gateway_excluded_types')))
        return [{'id': tipo} for tipo in tipos]

    @staticmethod
    def itens_preferencia(pedido, itens):
        """Itens com o desconto do pedido espalhado nos preços, mais o frete como item"""
        valores = [{'preco_unitario': item.preco_unitario, 'quantidade': item.quantidade} for item in itens]
        precos = regras.distribuir_desconto(valores, pedido.desconto)

        resultado = []
        for item, preco in zip(itens, precos):
            tecido = item.tecido if isinstance(item.tecido, dict) else {}
            partes = [
                f"Tam: {item.tamanho}" if item.tamanho else None,
                f"Cor: {item.nome_cor}" if item.nome_cor else None,
                f"Tecido: {tecido['name']}" if tecido.get('name') else None,
                f"Estampa: {item.posicao_estampa}" if item.posicao_estampa else None,
            ]
            descricao = ' | '.join(parte for parte in partes if parte)
            dados = {
                'id': str(item.produto_id),
                'title': item.nome_produto,
                'description': descricao or item.nome_produto,
                'quantity': item.quantidade,
                'currency_id': 'BRL',
                'unit_price': float(preco),
            }
            if item.imagem_produto:
                dados['picture_url'] = item.imagem_produto
            resultado.append(dados)

        if pedido.frete > 0:
            resultado.append({
                'id': 'shipping',
                'title': 'Frete - Entrega',
                'description': f"Entrega para {pedido.cidade} - {pedido.estado} (CEP: {pedido.cep})",
                'quantity': 1,
                'currency_id': 'BRL',
                'unit_price': float(pedido.frete),
            })
        return resultado

    @staticmethod
    def montar_preferencia(pedido, config, base_url, agora=None):
        """
        Monta o corpo da preferência de pagamento.

        Args:
            pedido: Pedido com itens
            config: configurações do gateway (strings, vazio = padrão)
            base_url: URL pública usada nas back_urls e no webhook
        """
        agora = agora or timezone.now()
        horas_expiracao = PagamentoService._inteiro(config.get('gateway_expiration_hours'), 24)
        descritor = config.get('gateway_statement_descriptor') or 'OUDLA'
        auto_return = config.get('gateway_auto_return') or 'approved'

        nomes = pedido.nome_cliente.split(' ')
        telefone = somente_digitos(pedido.telefone_cliente)

        corpo = {
            'items': PagamentoService.itens_preferencia(pedido, list(pedido.itens.all())),
            'payer': {
                'name': nomes[0],
                'surname': ' '.join(nomes[1:]),
                'email': pedido.email_cliente,
                'phone': {
                    'area_code': telefone[:2],
                    'number': telefone[2:],
                },
                'address': {
                    'zip_code': somente_digitos(pedido.cep),
                    'street_name': pedido.rua,
                    'street_number': pedido.numero_endereco,
                },
            },
            'back_urls': {
                'success': f"{base_url}/pagamento/sucesso?order={pedido.numero}",
                'failure': f"{base_url}/pagamento/falha?order={pedido.numero}",
                'pending': f"{base_url}/pagamento/pendente?order={pedido.numero}",
            },
            'statement_descriptor': descritor[:16],
            'external_reference': pedido.numero,
            'notification_url': f"{base_url}/api/checkout/webhook",
            'expires': True,
            'expiration_date_from': agora.isoformat(timespec='milliseconds'),
            'expiration_date_to': (agora + timedelta(hours=horas_expiracao)).isoformat(timespec='milliseconds'),
            'binary_mode': config.get('gateway_binary_mode') == 'true',
        }

        # "none" desliga o retorno automático
        if auto_return != 'none':
            corpo['auto_return'] = auto_return

        metodos_pagamento = {}
        metodos = PagamentoService.metodos_excluidos(config)
        if metodos:
            metodos_pagamento['excluded_payment_methods'] = metodos
        tipos = PagamentoService.tipos_excluidos(config)
        if tipos:
            metodos_pagamento['excluded_payment_types'] = tipos
        metodos_pagamento['installments'] = PagamentoService._inteiro(config.get('gateway_max_installments'), 12)
        corpo['payment_methods'] = metodos_pagamento

        return corpo

    @staticmethod
    def criar_preferencia(pedido):
        """
        Cria a preferência no Mercado Pago e guarda o id no pedido.

        Returns:
            dict: preference_id, init_point, sandbox_init_point, is_production

        Raises:
            PagamentoError: sem credenciais ou resposta sem id
        """
        corpo = PagamentoService.montar_preferencia(pedido, config_gateway(), settings.APP_URL)
        resultado = PagamentoService.sdk().preference().create(corpo)

        resposta = resultado.get('response') or {}
        if resultado.get('status') not in (200, 201) or not resposta.get('id'):
            logger.error(f"Mercado Pago recusou a preferência do pedido {pedido.numero}: "
                         f"{resultado.get('status')} {resposta}")
            raise PagamentoError("Falha ao criar preferência no Mercado Pago")

        pedido.preferencia_id = resposta['id']
        pedido.save(update_fields=['preferencia_id', 'atualizado_em'])

        em_producao = PagamentoService.em_producao()
        logger.info(f"Preferência {resposta['id']} criada para o pedido {pedido.numero} "
                    f"(total R$ {pedido.total}, produção={em_producao})")
        return {
            'preference_id': resposta['id'],
            'init_point': resposta.get('init_point'),
            'sandbox_init_point': resposta.get('sandbox_init_point'),
            'is_production': em_producao,
        }

    @staticmethod
    def processar_webhook(tipo, data_id):
        """
        Busca o pagamento notificado e atualiza o pedido correspondente.

        Notificações que não são de pagamento, ou que não levam a um pedido, são ignoradas.

        Returns:
            Pedido | None: pedido atualizado
        """
        if tipo != 'payment' or not data_id:
            return None

        resultado = PagamentoService.sdk().payment().get(data_id)
        pagamento = resultado.get('response') or {}
        if resultado.get('status') != 200 or not pagamento:
            logger.error(f"Pagamento {data_id} não encontrado no Mercado Pago")
            return None

        referencia = pagamento.get('external_reference')
        if not referencia:
            logger.error(f"Pagamento {data_id} sem external_reference")
            return None

        pedido = Pedido.objects.filter(numero=referencia).first()
        if pedido is None:
            logger.error(f"Pedido {referencia} do pagamento {data_id} não encontrado")
            return None

        status = pagamento.get('status')
        ja_aprovado = pedido.status_pagamento == 'approved'
        status_pedido = pedido.aplicar_status_pagamento(
            status,
            pagamento_id=data_id,
            metodo=pagamento.get('payment_method_id'),
            tipo=pagamento.get('payment_type_id'),
            parcelas=pagamento.get('installments'),
        )

        if status == 'approved' and not ja_aprovado:
            if EmailService.enviar_confirmacao_pedido(pedido):
                logger.info(f"Email de confirmação enviado para {pedido.email_cliente}")
            else:
                logger.error(f"Falha ao enviar email de confirmação do pedido {pedido.numero}")

        logger.info(f"Pedido {referencia} atualizado: pagamento={status}, pedido={status_pedido}")
        return pedido
