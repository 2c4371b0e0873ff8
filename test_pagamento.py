#!/usr/bin/env python
"""
Testes da integração com o Mercado Pago: credenciais, preferência,
assinatura e processamento do webhook
"""
import os
import django
import hashlib
import hmac
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'oudla_project.settings')
django.setup()

from django.core import mail
from django.core.cache import cache
from django.test import Client, TestCase, override_settings

from loja.configuracao import definir_valor
from loja.models import ItemPedido, Pedido, Produto, TemplateEmail
from loja.services.pagamento import PagamentoError, PagamentoService

CREDENCIAIS_SANDBOX = {
    'APP_ENV': '',
    'MERCADOPAGO_ACCESS_TOKEN': 'APP_USR-prod',
    'MERCADOPAGO_ACCESS_TOKEN_SANDBOX': 'TEST-sandbox',
    'MERCADOPAGO_PUBLIC_KEY': 'APP_USR-pk',
    'MERCADOPAGO_PUBLIC_KEY_SANDBOX': 'TEST-pk',
    'MERCADOPAGO_WEBHOOK_SECRET': '',
    'APP_URL': 'https://oudla.test',
}


def criar_pedido(**extra):
    produto = Produto.objects.create(nome='Camiseta OUDLA', preco=Decimal('100.00'), status='publicado')
    dados = {
        'numero': 'OUDLA-20250212-0042',
        'nome_cliente': 'Maria Souza Lima',
        'email_cliente': 'maria@exemplo.com',
        'telefone_cliente': '(11) 98888-7777',
        'cpf_cliente': '529.982.247-25',
        'cep': '01001-000',
        'rua': 'Praça da Sé',
        'numero_endereco': '100',
        'bairro': 'Sé',
        'cidade': 'São Paulo',
        'estado': 'SP',
        'subtotal': Decimal('200.00'),
        'desconto': Decimal('20.00'),
        'frete': Decimal('19.99'),
        'total': Decimal('199.99'),
    }
    dados.update(extra)
    pedido = Pedido.objects.create(**dados)
    ItemPedido.objects.create(
        pedido=pedido, produto=produto, nome_produto=produto.nome, tamanho='M',
        cor={'name': 'Preto', 'hex': '#000000'}, tecido={'name': 'Premium', 'price': 0},
        preco_unitario=Decimal('100.00'), quantidade=2, subtotal=Decimal('200.00'),
    )
    return pedido


def assinatura(segredo, data_id, request_id, ts='1700000000'):
    manifesto = f"id:{data_id};request-id:{request_id};ts:{ts};"
    return f"ts={ts},v1={hmac.new(segredo.encode(), manifesto.encode(), hashlib.sha256).hexdigest()}"


class TestStatusPagamento(TestCase):
    def test_aprovacao_passa_por_marcar_como_pago(self):
        pedido = criar_pedido()
        with patch.object(Pedido, 'marcar_como_pago', autospec=True,
                          side_effect=lambda p, salvar=True: setattr(p, 'status', 'paid')) as mock_pago:
            self.assertEqual(pedido.aplicar_status_pagamento('approved', pagamento_id=99), 'paid')
        mock_pago.assert_called_once_with(pedido, salvar=False)
        pedido.refresh_from_db()
        self.assertEqual((pedido.status, pedido.pagamento_id), ('paid', '99'))

    def test_codigo_de_verificacao_gerado_uma_vez(self):
        pedido = criar_pedido()
        pedido.marcar_como_pago()
        codigo = Pedido.objects.get(pk=pedido.pk).codigo_verificacao
        self.assertEqual(len(codigo), 8)

        pedido.aplicar_status_pagamento('approved')
        pedido.refresh_from_db()
        self.assertEqual(pedido.codigo_verificacao, codigo)
        self.assertIsNotNone(pedido.pago_em)


@override_settings(**CREDENCIAIS_SANDBOX)
class TestCredenciais(TestCase):
    def test_sandbox_fora_de_producao(self):
        self.assertFalse(PagamentoService.em_producao())
        self.assertEqual(PagamentoService.access_token(), 'TEST-sandbox')
        self.assertEqual(PagamentoService.public_key(), 'TEST-pk')

    @override_settings(APP_ENV='production')
    def test_producao(self):
        self.assertTrue(PagamentoService.em_producao())
        self.assertEqual(PagamentoService.access_token(), 'APP_USR-prod')
        self.assertEqual(PagamentoService.public_key(), 'APP_USR-pk')

    @override_settings(MERCADOPAGO_ACCESS_TOKEN_SANDBOX='')
    def test_sandbox_sem_token_usa_producao(self):
        self.assertEqual(PagamentoService.access_token(), 'APP_USR-prod')

    @override_settings(MERCADOPAGO_ACCESS_TOKEN_SANDBOX='', MERCADOPAGO_ACCESS_TOKEN='')
    def test_sem_token(self):
        with self.assertRaises(PagamentoError):
            PagamentoService.access_token()

    def test_mp_config_view(self):
        dados = Client().get('/api/checkout/mp-config').json()
        self.assertEqual(dados, {'success': True, 'public_key': 'TEST-pk', 'is_production': False})


class TestAssinaturaWebhook(TestCase):
    @override_settings(MERCADOPAGO_WEBHOOK_SECRET='segredo')
    def test_assinatura_valida_e_invalida(self):
        cabecalho = assinatura('segredo', '123', 'req-1')
        self.assertTrue(PagamentoService.validar_assinatura_webhook(cabecalho, 'req-1', '123'))
        self.assertFalse(PagamentoService.validar_assinatura_webhook(cabecalho, 'req-2', '123'))
        self.assertFalse(PagamentoService.validar_assinatura_webhook('ts=1', 'req-1', '123'))

    @override_settings(MERCADOPAGO_WEBHOOK_SECRET='')
    def test_sem_segredo_aceita(self):
        self.assertTrue(PagamentoService.validar_assinatura_webhook('lixo', 'req-1', '123'))


@override_settings(**CREDENCIAIS_SANDBOX)
class TestPreferencia(TestCase):
    def setUp(self):
        cache.clear()
        self.pedido = criar_pedido()
        self.agora = datetime(2025, 2, 12, 15, 0, tzinfo=dt_timezone.utc)

    def test_corpo_da_preferencia(self):
        corpo = PagamentoService.montar_preferencia(self.pedido, {}, 'https://oudla.test', agora=self.agora)

        item, frete = corpo['items']
        self.assertEqual(item['unit_price'], 90.0)
        self.assertEqual(item['quantity'], 2)
        self.assertEqual(item['description'], 'Tam: M | Cor: Preto | Tecido: Premium')
        self.assertEqual(frete['id'], 'shipping')
        self.assertEqual(frete['unit_price'], 19.99)

        self.assertEqual(corpo['payer']['name'], 'Maria')
        self.assertEqual(corpo['payer']['surname'], 'Souza Lima')
        self.assertEqual(corpo['payer']['phone'], {'area_code': '11', 'number': '988887777'})
        self.assertEqual(corpo['payer']['address']['zip_code'], '01001000')

        self.assertEqual(corpo['external_reference'], 'OUDLA-20250212-0042')
        self.assertEqual(corpo['notification_url'], 'https://oudla.test/api/checkout/webhook')
        self.assertEqual(corpo['back_urls']['success'],
                         'https://oudla.test/pagamento/sucesso?order=OUDLA-20250212-0042')
        self.assertEqual(corpo['statement_descriptor'], 'OUDLA')
        self.assertEqual(corpo['auto_return'], 'approved')
        self.assertFalse(corpo['binary_mode'])
        self.assertEqual(corpo['expiration_date_to'], '2025-02-13T15:00:00.000+00:00')
        self.assertEqual(corpo['payment_methods'], {'installments': 12})

    def test_sem_frete_nao_tem_item_de_envio(self):
        self.pedido.frete = Decimal('0')
        corpo = PagamentoService.montar_preferencia(self.pedido, {}, 'https://oudla.test', agora=self.agora)
        self.assertEqual(len(corpo['items']), 1)

    def test_configuracoes_do_gateway(self):
        config = {
            'gateway_pix_enabled': 'false',
            'gateway_boleto_enabled': 'false',
            'gateway_excluded_methods': 'amex, elo',
            'gateway_max_installments': '6',
            'gateway_auto_return': 'none',
            'gateway_statement_descriptor': 'OUDLA STREETWEAR BRASIL',
            'gateway_binary_mode': 'true',
            'gateway_expiration_hours': '2',
        }
        corpo = PagamentoService.montar_preferencia(self.pedido, config, 'https://oudla.test', agora=self.agora)

        self.assertNotIn('auto_return', corpo)
        self.assertTrue(corpo['binary_mode'])
        self.assertEqual(corpo['statement_descriptor'], 'OUDLA STREETWEAR')
        self.assertEqual(corpo['expiration_date_to'], '2025-02-12T17:00:00.000+00:00')
        self.assertEqual(corpo['payment_methods'], {
            'excluded_payment_methods': [{'id': 'pix'}, {'id': 'amex'}, {'id': 'elo'}],
            'excluded_payment_types': [{'id': 'ticket'}],
            'installments': 6,
        })

    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_criar_preferencia_guarda_id(self, mock_sdk):
        mock_sdk.return_value.preference.return_value.create.return_value = {
            'status': 201,
            'response': {'id': 'pref-123', 'init_point': 'https://mp/init', 'sandbox_init_point': 'https://mp/sb'},
        }
        definir_valor('gateway_max_installments', '3')

        response = Client().post('/api/checkout/create-preference', {'pedido_id': self.pedido.id},
                                 content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'success': True,
            'preference_id': 'pref-123',
            'init_point': 'https://mp/init',
            'sandbox_init_point': 'https://mp/sb',
            'is_production': False,
        })
        mock_sdk.assert_called_once_with('TEST-sandbox')
        corpo = mock_sdk.return_value.preference.return_value.create.call_args[0][0]
        self.assertEqual(corpo['payment_methods']['installments'], 3)
        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.preferencia_id, 'pref-123')

    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_gateway_recusa(self, mock_sdk):
        mock_sdk.return_value.preference.return_value.create.return_value = {
            'status': 400, 'response': {'message': 'invalid'},
        }
        response = Client().post('/api/checkout/create-preference', {'pedido_id': self.pedido.id},
                                 content_type='application/json')
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])

    def test_validacoes_da_view(self):
        client = Client()
        self.assertEqual(client.post('/api/checkout/create-preference', {}, content_type='application/json')
                         .status_code, 400)
        self.assertEqual(client.post('/api/checkout/create-preference', {'pedido_id': 9999},
                                     content_type='application/json').status_code, 404)

        self.pedido.itens.all().delete()
        response = client.post('/api/checkout/create-preference', {'pedido_id': self.pedido.id},
                               content_type='application/json')
        self.assertEqual(response.json()['error'], 'Pedido sem itens')


@override_settings(**CREDENCIAIS_SANDBOX)
class TestWebhook(TestCase):
    def setUp(self):
        cache.clear()
        self.pedido = criar_pedido()
        TemplateEmail.objects.create(chave='order_confirmation', nome='Confirmação',
                                     assunto='Pedido {{numero_pedido}} confirmado',
                                     conteudo_html='<p>Olá {{nome}}</p>{{itens}}')

    def pagamento(self, mock_sdk, status, referencia='OUDLA-20250212-0042'):
        mock_sdk.return_value.payment.return_value.get.return_value = {
            'status': 200,
            'response': {
                'id': 987,
                'status': status,
                'external_reference': referencia,
                'payment_method_id': 'visa',
                'payment_type_id': 'credit_card',
                'installments': 3,
            },
        }

    def notificar(self, **headers):
        return Client().post('/api/checkout/webhook?type=payment&data.id=987', {'type': 'payment'},
                             content_type='application/json', **headers)

    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_aprovado_marca_pago_e_envia_email_uma_vez(self, mock_sdk):
        self.pagamento(mock_sdk, 'approved')

        response = self.notificar()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b'OK')

        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.status, 'paid')
        self.assertEqual(self.pedido.pagamento_id, '987')
        self.assertEqual(self.pedido.metodo_pagamento, 'visa')
        self.assertEqual(self.pedido.parcelas, 3)
        self.assertIsNotNone(self.pedido.pago_em)
        self.assertIsNotNone(self.pedido.confirmacao_enviada_em)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, 'Pedido OUDLA-20250212-0042 confirmado')

        self.notificar()
        self.assertEqual(len(mail.outbox), 1)

    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_rejeitado_marca_falhou(self, mock_sdk):
        self.pagamento(mock_sdk, 'rejected')
        self.notificar()
        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.status, 'failed')
        self.assertEqual(self.pedido.status_pagamento, 'rejected')
        self.assertEqual(len(mail.outbox), 0)

    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_pedido_desconhecido_responde_ok(self, mock_sdk):
        self.pagamento(mock_sdk, 'approved', referencia='OUDLA-20990101-0000')
        self.assertEqual(self.notificar().status_code, 200)
        self.assertIsNone(PagamentoService.processar_webhook('payment', '987'))

    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_outros_tipos_sao_ignorados(self, mock_sdk):
        self.assertIsNone(PagamentoService.processar_webhook('merchant_order', '987'))
        mock_sdk.assert_not_called()

    @override_settings(MERCADOPAGO_WEBHOOK_SECRET='segredo')
    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_assinatura_invalida_recebe_401(self, mock_sdk):
        response = self.notificar(HTTP_X_SIGNATURE='ts=1,v1=errado', HTTP_X_REQUEST_ID='req-1')
        self.assertEqual(response.status_code, 401)
        mock_sdk.assert_not_called()

    @override_settings(MERCADOPAGO_WEBHOOK_SECRET='segredo')
    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_assinatura_valida_processa(self, mock_sdk):
        self.pagamento(mock_sdk, 'approved')
        response = self.notificar(HTTP_X_SIGNATURE=assinatura('segredo', '987', 'req-1'),
                                  HTTP_X_REQUEST_ID='req-1')
        self.assertEqual(response.status_code, 200)
        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.status, 'paid')

    @patch('loja.services.pagamento.mercadopago.SDK')
    def test_erro_no_gateway_responde_ok(self, mock_sdk):
        mock_sdk.return_value.payment.return_value.get.side_effect = RuntimeError('fora do ar')
        self.assertEqual(self.notificar().status_code, 200)
