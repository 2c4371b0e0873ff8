#!/usr/bin/env python
"""
Testes do fluxo de checkout: criação do pedido, consultas públicas,
comprovante em PDF e limite de tentativas
"""
import os
import re
import django
from decimal import Decimal

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'oudla_project.settings')
django.setup()

from django.core.cache import cache
from django.test import Client, RequestFactory, TestCase

from loja.limites import excedeu_limite, ip_cliente
from loja.models import ItemPedido, Pedido, Produto
from loja.services.comprovante import gerar_comprovante


def dados_pedido(produto, **extra):
    dados = {
        'nome': 'Maria Souza',
        'email': 'maria@exemplo.com',
        'telefone': '(11) 98888-7777',
        'cpf': '529.982.247-25',
        'cep': '01001-000',
        'rua': 'Praça da Sé',
        'numero': '100',
        'complemento': 'Apto 12',
        'bairro': 'Sé',
        'cidade': 'São Paulo',
        'estado': 'sp',
        'itens': [{
            'produto_id': produto.id,
            'nome_produto': produto.nome,
            'tamanho': 'M',
            'cor': {'name': 'Preto', 'hex': '#000000'},
            'preco_unitario': '100.00',
            'quantidade': 2,
            'subtotal': '200.00',
        }],
        'subtotal': '200.00',
        'desconto': '20.00',
        'frete': '19.99',
        'total': '199.99',
        'navegador': 'Firefox',
        'resolucao_tela': '1920x1080',
    }
    dados.update(extra)
    return dados


class TestCriarPedido(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        self.produto = Produto.objects.create(nome='Camiseta OUDLA', preco=Decimal('100.00'), status='publicado')

    def post(self, dados):
        return self.client.post('/api/checkout/create-order', dados, content_type='application/json')

    def test_cria_pedido_com_itens(self):
        response = self.post(dados_pedido(self.produto))
        self.assertEqual(response.status_code, 200)
        resultado = response.json()
        self.assertTrue(resultado['success'])

        pedido = Pedido.objects.get(pk=resultado['pedido_id'])
        self.assertEqual(pedido.numero, resultado['numero_pedido'])
        self.assertRegex(pedido.numero, r'^OUDLA-\d{8}-\d{4}$')
        self.assertEqual(pedido.status, 'pending')
        self.assertEqual(pedido.estado, 'SP')
        self.assertEqual(pedido.total, Decimal('199.99'))
        self.assertEqual(pedido.ip_cliente, '127.0.0.1')
        self.assertEqual(pedido.navegador, 'Firefox')

        item = ItemPedido.objects.get(pedido=pedido)
        self.assertEqual(item.quantidade, 2)
        self.assertEqual(item.cor, {'name': 'Preto', 'hex': '#000000'})

    def test_total_divergente(self):
        response = self.post(dados_pedido(self.produto, total='150.00'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {
            'success': False,
            'error': 'Preço total inválido.',
            'expected': '199.99',
            'received': '150.00',
        })
        self.assertFalse(Pedido.objects.exists())

    def test_cpf_invalido(self):
        response = self.post(dados_pedido(self.produto, cpf='123.456.789-00'))
        self.assertEqual(response.status_code, 400)
        self.assertIn('cpf', response.json()['details'])

    def test_sem_itens(self):
        response = self.post(dados_pedido(self.produto, itens=[]))
        self.assertEqual(response.status_code, 400)
        self.assertIn('itens', response.json()['details'])

    def test_produto_inexistente(self):
        dados = dados_pedido(self.produto)
        dados['itens'][0]['produto_id'] = 999
        response = self.post(dados)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Produto não encontrado: 999')

    def test_limite_de_tentativas_compartilhado_com_preferencia(self):
        for _ in range(10):
            self.assertEqual(self.post({}).status_code, 400)
        response = self.post({})
        self.assertEqual(response.status_code, 429)
        self.assertFalse(response.json()['success'])

        response = self.client.post('/api/checkout/create-preference', {'pedido_id': 1},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 429)


class TestConsultasPedido(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        self.produto = Produto.objects.create(nome='Camiseta OUDLA', preco=Decimal('100.00'), status='publicado')
        resposta = self.client.post('/api/checkout/create-order', dados_pedido(self.produto),
                                    content_type='application/json')
        self.pedido = Pedido.objects.get(pk=resposta.json()['pedido_id'])

    def test_pedido_publico_sem_dados_sensiveis(self):
        response = self.client.get(f'/api/checkout/order/{self.pedido.numero}')
        self.assertEqual(response.status_code, 200)
        pedido = response.json()['pedido']
        self.assertNotIn('cpf_cliente', pedido)
        self.assertNotIn('notas_internas', pedido)
        self.assertEqual(len(pedido['itens']), 1)

    def test_numero_invalido_e_inexistente(self):
        self.assertEqual(self.client.get('/api/checkout/order/123').status_code, 400)
        self.assertEqual(self.client.get('/api/checkout/order/OUDLA-20200101-0000').status_code, 404)

    def test_status_pagamento(self):
        self.pedido.aplicar_status_pagamento('approved', pagamento_id='555', metodo='pix', tipo='bank_transfer')
        dados = self.client.get(f'/api/checkout/payment-status/{self.pedido.numero}').json()
        self.assertEqual(dados['status'], 'paid')
        self.assertEqual(dados['status_pagamento'], 'approved')
        self.assertEqual(dados['metodo_pagamento'], 'pix')
        self.assertEqual(len(dados['codigo_verificacao']), 8)

    def test_comprovante_pdf(self):
        response = self.client.get(f'/api/checkout/receipt/{self.pedido.numero}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn(f'comprovante-{self.pedido.numero}.pdf', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_comprovante_com_muitos_itens_quebra_pagina(self):
        for i in range(60):
            ItemPedido.objects.create(pedido=self.pedido, produto=self.produto, nome_produto=f'Item {i}',
                                      preco_unitario=Decimal('1.00'), quantidade=1, subtotal=Decimal('1.00'))
        conteudo = gerar_comprovante(self.pedido)
        self.assertTrue(conteudo.startswith(b'%PDF'))
        self.assertGreater(len(re.findall(rb'/Type /Page\b', conteudo)), 1)


class TestLimites(TestCase):
    def setUp(self):
        cache.clear()
        self.factory = RequestFactory()

    def test_ip_do_proxy_tem_prioridade(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='200.1.1.1, 10.0.0.1', REMOTE_ADDR='10.0.0.2')
        self.assertEqual(ip_cliente(request), '200.1.1.1')

    def test_janela_conta_por_ip(self):
        request = self.factory.get('/', REMOTE_ADDR='10.0.0.5')
        outro = self.factory.get('/', REMOTE_ADDR='10.0.0.6')
        resultados = [excedeu_limite('teste', request, 3) for _ in range(4)]
        self.assertEqual(resultados, [False, False, False, True])
        self.assertFalse(excedeu_limite('teste', outro, 3))
