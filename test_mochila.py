#!/usr/bin/env python
"""
Testes da mochila (carrinho na sessão) e dos endpoints /api/mochila
"""
import os
import django
from decimal import Decimal

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'oudla_project.settings')
django.setup()

from django.contrib.sessions.backends.db import SessionStore
from django.core.cache import cache
from django.test import Client, RequestFactory, TestCase

from loja.mochila import Mochila, chave_item
from loja.models import CupomGlobal, Produto

PRETO = {'name': 'Preto', 'hex': '#000000'}
BRANCO = {'name': 'Branco', 'hex': '#FFFFFF'}


def criar_camiseta(**extra):
    dados = {
        'nome': 'Camiseta OUDLA',
        'preco': Decimal('100.00'),
        'status': 'publicado',
        'cores': [PRETO, BRANCO],
        'tamanhos': ['P', 'M', 'G'],
        'tecidos': [{'name': 'Algodão', 'price': 0}, {'name': 'Premium', 'price': 20}],
        'tecidos_ativos': True,
        'estampa_frente': True,
    }
    dados.update(extra)
    return Produto.objects.create(**dados)


class TestMochila(TestCase):
    def setUp(self):
        cache.clear()
        self.request = RequestFactory().get('/')
        self.request.session = SessionStore()
        self.produto = criar_camiseta()
        self.config = {'sistema': 'threshold', 'limite': Decimal('200'), 'valor_padrao': Decimal('19.99')}

    def test_mesma_variacao_soma_quantidade(self):
        mochila = Mochila(self.request)
        primeiro = mochila.adicionar(self.produto, cor=PRETO, tamanho='M', quantidade=1)
        segundo = mochila.adicionar(self.produto, cor=PRETO, tamanho='M', quantidade=2)

        self.assertEqual(primeiro, segundo)
        self.assertEqual(len(mochila.estado['itens']), 1)
        self.assertEqual(mochila.total_itens, 3)

    def test_cor_diferente_vira_outro_item(self):
        mochila = Mochila(self.request)
        mochila.adicionar(self.produto, cor=PRETO, tamanho='M')
        mochila.adicionar(self.produto, cor=BRANCO, tamanho='M')
        self.assertEqual(len(mochila.estado['itens']), 2)

    def test_chave_item_usa_hex_tamanho_e_estampa(self):
        self.assertEqual(chave_item(7, PRETO, 'G', 'frente'), '7:#000000:G:frente')
        self.assertEqual(chave_item(7), '7:sem-cor:sem-tamanho:padrao')

    def test_tecido_soma_no_preco(self):
        mochila = Mochila(self.request)
        mochila.adicionar(self.produto, cor=PRETO, tamanho='M', tecido={'name': 'Premium', 'price': 20})
        self.assertEqual(mochila.subtotal(), Decimal('120.00'))

    def test_quantidade_zero_remove(self):
        mochila = Mochila(self.request)
        item_id = mochila.adicionar(self.produto, cor=PRETO, tamanho='M')
        mochila.atualizar_quantidade(item_id, 0)
        self.assertEqual(mochila.total_itens, 0)

    def test_quantidade_invalida_ao_adicionar(self):
        mochila = Mochila(self.request)
        with self.assertRaises(ValueError):
            mochila.adicionar(self.produto, quantidade=0)

    def test_cupom_e_frete_gratis_nao_acumulam(self):
        cupom = CupomGlobal.objects.create(codigo='oudla10', tipo_desconto='percentual', valor_desconto=10)
        mochila = Mochila(self.request)
        mochila.adicionar(self.produto, cor=PRETO, tamanho='M')

        mochila.ativar_frete_gratis()
        mochila.aplicar_cupom(cupom)
        self.assertFalse(mochila.frete_gratis_ativo)
        self.assertEqual(mochila.cupom['codigo'], 'OUDLA10')
        self.assertEqual(mochila.desconto(), Decimal('10.00'))

        mochila.ativar_frete_gratis()
        self.assertIsNone(mochila.cupom)
        self.assertEqual(mochila.desconto(), Decimal('0.00'))

    def test_frete_so_cobrado_com_cep_e_abaixo_do_limite(self):
        mochila = Mochila(self.request)
        mochila.adicionar(self.produto, cor=PRETO, tamanho='M')
        self.assertEqual(mochila.frete(self.config), Decimal('0.00'))

        mochila.definir_frete('01001-000', 19.99)
        self.assertEqual(mochila.frete(self.config), Decimal('19.99'))
        self.assertEqual(mochila.total(self.config), Decimal('119.99'))

        mochila.atualizar_quantidade(mochila.estado['itens'][0]['id'], 2)
        self.assertEqual(mochila.frete(self.config), Decimal('0.00'))

    def test_limpar_mantem_cep(self):
        cupom = CupomGlobal.objects.create(codigo='LIMPA', tipo_desconto='fixo', valor_desconto=5)
        mochila = Mochila(self.request)
        mochila.adicionar(self.produto, cor=PRETO, tamanho='M')
        mochila.aplicar_cupom(cupom)
        mochila.definir_frete('01001-000', 10)

        mochila.limpar()
        self.assertEqual(mochila.total_itens, 0)
        self.assertIsNone(mochila.cupom)
        self.assertEqual(mochila.estado['frete'], '0.00')
        self.assertEqual(mochila.cep, '01001-000')

    def test_estado_persiste_na_sessao(self):
        Mochila(self.request).adicionar(self.produto, cor=PRETO, tamanho='M')
        self.assertEqual(Mochila(self.request).total_itens, 1)

    def test_itens_checkout_com_padroes(self):
        acessorio = criar_camiseta(nome='Boné', tipo='acessorio', cores=[], tamanhos=[], tecidos=[])
        mochila = Mochila(self.request)
        mochila.adicionar(acessorio)
        item = mochila.itens_checkout()[0]
        self.assertEqual(item['tamanho'], 'Padrão')
        self.assertEqual(item['cor'], {'name': 'Padrão', 'hex': '#000000'})
        self.assertEqual(item['subtotal'], '100.00')


class TestMochilaViews(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        self.produto = criar_camiseta()

    def adicionar(self, **dados):
        corpo = {'produto_id': self.produto.id, 'cor': PRETO, 'tamanho': 'M'}
        corpo.update(dados)
        return self.client.post('/api/mochila/adicionar', corpo, content_type='application/json')

    def test_adicionar_e_consultar(self):
        response = self.adicionar(quantidade=2)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['item_id'])

        mochila = self.client.get('/api/mochila').json()['mochila']
        self.assertEqual(mochila['total_itens'], 2)
        self.assertEqual(mochila['subtotal'], '200.00')
        self.assertTrue(mochila['progresso_frete_gratis']['gratis'])

    def test_preco_do_tecido_vem_do_cadastro(self):
        self.adicionar(tecido={'name': 'Premium', 'price': 0})
        mochila = self.client.get('/api/mochila').json()['mochila']
        self.assertEqual(mochila['itens'][0]['preco'], '120.00')

    def test_variacao_inexistente(self):
        response = self.adicionar(cor={'name': 'Verde', 'hex': '#00FF00'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Cor indisponível para este produto')

        response = self.adicionar(tamanho='XGG')
        self.assertEqual(response.status_code, 400)

        response = self.adicionar(posicao_estampa='costas')
        self.assertEqual(response.status_code, 400)

    def test_produto_rascunho_nao_entra(self):
        rascunho = criar_camiseta(nome='Rascunho', status='rascunho')
        response = self.adicionar(produto_id=rascunho.id)
        self.assertEqual(response.status_code, 404)

    def test_atualizar_e_remover(self):
        item_id = self.adicionar().json()['item_id']

        response = self.client.post('/api/mochila/atualizar', {'item_id': item_id, 'quantidade': 3},
                                    content_type='application/json')
        self.assertEqual(response.json()['mochila']['total_itens'], 3)

        response = self.client.post('/api/mochila/remover', {'item_id': item_id}, content_type='application/json')
        self.assertEqual(response.json()['mochila']['total_itens'], 0)

    def test_cupom_invalido_e_valido(self):
        self.adicionar()
        response = self.client.post('/api/mochila/cupom', {'codigo': 'NAOEXISTE'}, content_type='application/json')
        self.assertEqual(response.status_code, 404)

        CupomGlobal.objects.create(codigo='OUDLA10', tipo_desconto='percentual', valor_desconto=10)
        response = self.client.post('/api/mochila/cupom', {'codigo': 'oudla10'}, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['mochila']['desconto'], '10.00')

        response = self.client.post('/api/mochila/cupom/remover')
        self.assertIsNone(response.json()['mochila']['cupom'])

    def test_frete_da_mochila_modo_fixo(self):
        self.adicionar()
        response = self.client.post('/api/mochila/frete', {'cep': '01001-000'}, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        dados = response.json()
        self.assertEqual(dados['frete']['modo'], 'flat')
        self.assertEqual(dados['mochila']['frete'], '19.99')
        self.assertEqual(dados['mochila']['total'], '119.99')

    def test_frete_guarda_cep_formatado(self):
        self.adicionar()
        response = self.client.post('/api/mochila/frete', {'cep': '01001000'}, content_type='application/json')
        self.assertEqual(response.json()['mochila']['cep'], '01001-000')

    def test_frete_usa_itens_da_mochila(self):
        self.adicionar(quantidade=2)
        request = RequestFactory().get('/')
        request.session = self.client.session
        self.assertEqual(Mochila(request).itens_frete(), [{'produto_id': self.produto.id, 'quantidade': 2}])

    def test_limpar(self):
        self.adicionar()
        response = self.client.post('/api/mochila/limpar')
        self.assertEqual(response.json()['mochila']['total_itens'], 0)

    def test_json_invalido(self):
        response = self.client.post('/api/mochila/adicionar', 'nao-json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'JSON inválido')


class TestMochilaCsrf(TestCase):
    """Navegador de verdade: o CSRF é conferido em todo POST"""

    def setUp(self):
        cache.clear()
        self.client = Client(enforce_csrf_checks=True)
        self.produto = criar_camiseta()
        self.corpo = {'produto_id': self.produto.id, 'cor': PRETO, 'tamanho': 'M'}

    def test_consultar_mochila_entrega_cookie(self):
        self.client.get('/api/mochila')
        self.assertIn('csrftoken', self.client.cookies)

    def test_post_com_token_do_cookie(self):
        self.client.get('/api/mochila')
        token = self.client.cookies['csrftoken'].value
        response = self.client.post('/api/mochila/adicionar', self.corpo, content_type='application/json',
                                    HTTP_X_CSRFTOKEN=token)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['mochila']['total_itens'], 1)

    def test_endpoint_de_token(self):
        token = self.client.get('/api/csrf').json()['csrf_token']
        response = self.client.post('/api/coupons/validate', {'codigo': 'NADA'}, content_type='application/json',
                                    HTTP_X_CSRFTOKEN=token)
        self.assertEqual(response.status_code, 404)

    def test_post_sem_token_recusado(self):
        response = self.client.post('/api/mochila/adicionar', self.corpo, content_type='application/json')
        self.assertEqual(response.status_code, 403)
