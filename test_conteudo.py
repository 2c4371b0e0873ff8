#!/usr/bin/env python
"""
Testes da tabela de medidas por tamanho e das páginas do rodapé
"""
import os
import django
from decimal import Decimal

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'oudla_project.settings')
django.setup()

from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import Client, TestCase

from loja.models import CampoMedida, MedidaTamanho, PaginaRodape, Produto


class TestTabelaMedidas(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        equipe = User.objects.create_user('equipe', 'equipe@oudla.test', 'senha-forte', is_staff=True)
        self.client.force_login(equipe)
        self.produto = Produto.objects.create(nome='Camiseta OUDLA', preco=Decimal('99.90'), status='publicado',
                                              tamanhos=['P', 'M'], tabela_medidas_ativa=True)

    def criar_campo(self, nome, **extra):
        response = self.client.post(f'/api/admin/products/{self.produto.id}/measurement-fields',
                                    dict({'nome': nome}, **extra), content_type='application/json')
        self.assertEqual(response.status_code, 201)
        return response.json()['campo']

    def gravar(self, tamanho, campo_id, valor):
        return self.client.post(f'/api/admin/products/{self.produto.id}/size-measurements',
                                {'tamanho': tamanho, 'campo_id': campo_id, 'valor': valor},
                                content_type='application/json')

    def test_campo_novo_comeca_ativo(self):
        campo = self.criar_campo('Largura')
        self.assertTrue(campo['ativo'])
        self.assertEqual(campo['ordem'], 0)

    def test_gravar_de_novo_atualiza_o_valor(self):
        campo = self.criar_campo('Largura')
        self.assertEqual(self.gravar('m', campo['id'], '52 cm').status_code, 201)
        response = self.gravar('M', campo['id'], '53 cm')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(MedidaTamanho.objects.count(), 1)
        self.assertEqual(MedidaTamanho.objects.get().valor, '53 cm')

    def test_campo_de_outro_produto(self):
        outro = Produto.objects.create(nome='Moletom', preco=Decimal('199.90'))
        campo = CampoMedida.objects.create(produto=outro, nome='Manga')
        response = self.gravar('M', campo.id, '60 cm')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Campo não encontrado')

    def test_tabela_publica_esconde_campos_inativos(self):
        largura = self.criar_campo('Largura', ordem=1)
        comprimento = self.criar_campo('Comprimento', ordem=2)
        self.gravar('P', largura['id'], '50 cm')
        self.gravar('P', comprimento['id'], '70 cm')
        self.client.post(f"/api/admin/measurement-fields/{comprimento['id']}", {'ativo': False},
                         content_type='application/json')

        dados = Client().get(f'/api/products/{self.produto.id}/measurements').json()
        self.assertTrue(dados['ativa'])
        self.assertEqual([c['nome'] for c in dados['campos']], ['Largura'])
        self.assertEqual(dados['tabela'], {'P': {str(largura['id']): '50 cm'}})

        painel = self.client.get(f'/api/admin/products/{self.produto.id}/size-measurements').json()
        self.assertEqual(len(painel['campos']), 2)
        self.assertEqual(len(painel['medidas']), 2)

    def test_atualizar_campo_mantem_o_que_nao_veio(self):
        campo = self.criar_campo('Largura', ordem=3)
        response = self.client.post(f"/api/admin/measurement-fields/{campo['id']}", {'nome': 'Largura do peito'},
                                    content_type='application/json')
        campo = response.json()['campo']
        self.assertEqual(campo['nome'], 'Largura do peito')
        self.assertEqual(campo['ordem'], 3)
        self.assertTrue(campo['ativo'])

    def test_excluir_campo_leva_as_medidas(self):
        campo = self.criar_campo('Largura')
        self.gravar('P', campo['id'], '50 cm')
        self.client.post(f"/api/admin/measurement-fields/{campo['id']}/delete")
        self.assertFalse(MedidaTamanho.objects.exists())

        response = self.client.post(f"/api/admin/measurement-fields/{campo['id']}/delete")
        self.assertEqual(response.status_code, 404)

    def test_excluir_medida(self):
        campo = self.criar_campo('Largura')
        medida_id = self.gravar('P', campo['id'], '50 cm').json()['medida']['id']
        self.client.post(f'/api/admin/size-measurements/{medida_id}/delete')
        self.assertFalse(MedidaTamanho.objects.exists())

    def test_produto_em_rascunho_nao_tem_tabela_publica(self):
        self.produto.status = 'rascunho'
        self.produto.save()
        self.assertEqual(Client().get(f'/api/products/{self.produto.id}/measurements').status_code, 404)

    def test_painel_somente_equipe(self):
        response = Client().get(f'/api/admin/products/{self.produto.id}/measurement-fields')
        self.assertEqual(response.status_code, 403)


class TestPaginasRodape(TestCase):
    def setUp(self):
        self.client = Client()
        equipe = User.objects.create_user('equipe', 'equipe@oudla.test', 'senha-forte', is_staff=True)
        self.client.force_login(equipe)

    def salvar(self, slug, **dados):
        return self.client.post(f'/api/admin/footer-pages/{slug}', dados, content_type='application/json')

    def test_pagina_inexistente(self):
        response = Client().get('/api/footer-page/about')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'página não encontrada')

    def test_titulo_e_conteudo_obrigatorios(self):
        response = self.salvar('about', titulo='Sobre a OUDLA')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'título e conteúdo são obrigatórios')

    def test_salvar_cria_e_depois_atualiza(self):
        self.salvar('returns', titulo='Trocas', conteudo='<p>30 dias</p>')
        response = self.salvar('returns', titulo='Trocas e devoluções', conteudo='<p>30 dias corridos</p>')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(PaginaRodape.objects.count(), 1)

        pagina = Client().get('/api/footer-page/returns').json()['pagina']
        self.assertEqual(pagina['titulo'], 'Trocas e devoluções')
        self.assertTrue(pagina['ativo'])

    def test_pagina_inativa_some_da_loja(self):
        self.salvar('privacy', titulo='Privacidade', conteudo='<p>LGPD</p>', ativo=False)
        self.assertEqual(Client().get('/api/footer-page/privacy').status_code, 404)
        self.assertEqual(self.client.get('/api/admin/footer-pages/privacy').status_code, 200)

    def test_slug_desconhecido(self):
        response = self.salvar('blog', titulo='Blog', conteudo='<p>...</p>')
        self.assertEqual(response.status_code, 404)
        self.assertFalse(PaginaRodape.objects.exists())
