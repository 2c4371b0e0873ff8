#!/usr/bin/env python
"""
Testes das avaliações: envio pelos clientes, fotos, curtidas, perguntas
e as avaliações em destaque cadastradas pela equipe
"""
import os
import django
import shutil
import tempfile
from decimal import Decimal
from io import BytesIO

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'oudla_project.settings')
django.setup()

from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, TestCase, override_settings
from PIL import Image

from loja.configuracao import CHAVE_CACHE_PRODUTOS
from loja.models import Avaliacao, AvaliacaoDestaque, ItemPedido, Pedido, PerguntaAvaliacao, Produto

MEDIA_TESTE = tempfile.mkdtemp(prefix='oudla-avaliacoes-')


def arquivo_png(nome='foto.png'):
    buffer = BytesIO()
    Image.new('RGB', (400, 300), color='blue').save(buffer, format='PNG')
    return SimpleUploadedFile(nome, buffer.getvalue(), content_type='image/png')


def tearDownModule():
    shutil.rmtree(MEDIA_TESTE, ignore_errors=True)


def criar_pedido(produto, status, email='ana@exemplo.com'):
    pedido = Pedido.objects.create(
        numero=f'OUDLA-20250301-{Pedido.objects.count() + 1:04d}',
        nome_cliente='Ana Paula',
        email_cliente=email,
        cpf_cliente='529.982.247-25',
        cep='01001-000',
        rua='Praça da Sé',
        numero_endereco='100',
        bairro='Sé',
        cidade='São Paulo',
        estado='SP',
        subtotal=Decimal('99.90'),
        total=Decimal('99.90'),
        status=status,
    )
    ItemPedido.objects.create(pedido=pedido, produto=produto, nome_produto=produto.nome, tamanho='M',
                              preco_unitario=Decimal('99.90'), quantidade=1, subtotal=Decimal('99.90'))
    return pedido


AVALIACAO = {
    'nome_autor': 'Ana Paula',
    'email_autor': 'ana@exemplo.com',
    'nota': 5,
    'titulo': 'Amei',
    'conteudo': 'Tecido ótimo e a estampa não desbota.',
}


class TestAvaliacoesClientes(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        self.produto = Produto.objects.create(nome='Camiseta OUDLA', preco=Decimal('99.90'), status='publicado',
                                              avaliacoes_ativas=True)
        self.url = f'/api/products/{self.produto.id}/reviews'

    def enviar(self, client=None, **extra):
        return (client or self.client).post(self.url, dict(AVALIACAO, **extra), content_type='application/json')

    def test_envia_e_lista(self):
        response = self.enviar()
        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.json()['avaliacao']['verificada'])

        dados = self.client.get(self.url).json()
        self.assertTrue(dados['avaliacoes_ativas'])
        self.assertEqual([a['titulo'] for a in dados['avaliacoes']], ['Amei'])
        self.assertNotIn('email_autor', dados['avaliacoes'][0])

    def test_compra_paga_marca_como_verificada(self):
        criar_pedido(self.produto, 'shipped')
        response = self.enviar(email_autor='ANA@exemplo.com')
        self.assertTrue(response.json()['avaliacao']['verificada'])

    def test_pedido_pendente_nao_verifica(self):
        criar_pedido(self.produto, 'pending')
        self.assertFalse(self.enviar().json()['avaliacao']['verificada'])

    def test_compra_de_outro_produto_nao_verifica(self):
        outro = Produto.objects.create(nome='Boné', preco=Decimal('59.90'), status='publicado')
        criar_pedido(outro, 'paid')
        self.assertFalse(self.enviar().json()['avaliacao']['verificada'])

    def test_avaliacoes_desativadas(self):
        self.produto.avaliacoes_ativas = False
        self.produto.save()
        response = self.enviar()
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Avaliacao.objects.exists())

    def test_nota_fora_da_escala(self):
        response = self.enviar(nota=6)
        self.assertEqual(response.status_code, 400)
        self.assertIn('nota', response.json()['details'])

    def test_produto_em_rascunho(self):
        self.produto.status = 'rascunho'
        self.produto.save()
        self.assertEqual(self.client.get(self.url).status_code, 404)
        self.assertEqual(self.enviar().status_code, 404)

    def test_limite_de_envios_por_ip(self):
        codigos = [self.enviar().status_code for _ in range(11)]
        self.assertEqual(codigos[:10], [201] * 10)
        self.assertEqual(codigos[10], 429)

    def test_curtida_unica_por_sessao(self):
        avaliacao = Avaliacao.objects.create(produto=self.produto, **AVALIACAO)
        url = f'/api/reviews/{avaliacao.id}/like'

        self.client.post(url)
        dados = self.client.post(url).json()
        self.assertEqual(dados['curtidas'], 1)
        self.assertTrue(dados['curtiu'])

        self.assertEqual(Client().post(url).json()['curtidas'], 2)

        dados = self.client.delete(url).json()
        self.assertEqual(dados['curtidas'], 1)
        self.assertFalse(dados['curtiu'])

    def test_curtir_avaliacao_inexistente(self):
        response = self.client.post('/api/reviews/999/like')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Avaliação não encontrada')

    def test_pergunta_e_resposta(self):
        avaliacao = Avaliacao.objects.create(produto=self.produto, **AVALIACAO)
        url = f'/api/reviews/{avaliacao.id}/qa'

        response = self.client.post(url, {'nome_autor': 'Bruno', 'texto': 'Veste grande?'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 201)
        pergunta = response.json()['pergunta']
        self.assertTrue(pergunta['eh_pergunta'])

        response = self.client.post(url, {'nome_autor': 'Ana Paula', 'texto': 'Um pouco', 'pai_id': pergunta['id']},
                                    content_type='application/json')
        self.assertFalse(response.json()['pergunta']['eh_pergunta'])

        perguntas = self.client.get(url).json()['perguntas']
        self.assertEqual(len(perguntas), 1)
        self.assertEqual([r['texto'] for r in perguntas[0]['respostas']], ['Um pouco'])

    def test_resposta_a_pergunta_de_outra_avaliacao(self):
        avaliacao = Avaliacao.objects.create(produto=self.produto, **AVALIACAO)
        outra = Avaliacao.objects.create(produto=self.produto, **AVALIACAO)
        pergunta = PerguntaAvaliacao.objects.create(avaliacao=outra, nome_autor='Bruno', texto='Encolhe?')

        response = self.client.post(f'/api/reviews/{avaliacao.id}/qa',
                                    {'nome_autor': 'Ana', 'texto': 'Não', 'pai_id': pergunta.id},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Pergunta não encontrada')

    @override_settings(MEDIA_ROOT=MEDIA_TESTE)
    def test_foto_so_pelo_autor(self):
        avaliacao_id = self.enviar().json()['avaliacao']['id']
        url = f'/api/reviews/{avaliacao_id}/images'

        response = Client().post(url, {'imagem': arquivo_png()})
        self.assertEqual(response.status_code, 403)

        response = self.client.post(url, {'imagem': arquivo_png(), 'texto_alt': 'Camiseta vestida'})
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['imagem']['url'].endswith('.webp'))
        self.assertEqual(Avaliacao.objects.get(pk=avaliacao_id).imagens.count(), 1)

    @override_settings(MEDIA_ROOT=MEDIA_TESTE)
    def test_foto_sem_arquivo(self):
        avaliacao_id = self.enviar().json()['avaliacao']['id']
        response = self.client.post(f'/api/reviews/{avaliacao_id}/images')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Nenhum arquivo enviado')


class TestAvaliacoesDestaque(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        equipe = User.objects.create_user('equipe', 'equipe@oudla.test', 'senha-forte', is_staff=True)
        self.client.force_login(equipe)
        self.produto = Produto.objects.create(nome='Camiseta OUDLA', preco=Decimal('99.90'), status='publicado')
        self.url = f'/api/admin/products/{self.produto.id}/reviews'

    def cadastrar(self, nota, **extra):
        dados = dict({'nome_usuario': 'Carla', 'nota': nota, 'comentario': 'Muito boa', 'cidade': 'Recife'}, **extra)
        return self.client.post(self.url, dados, content_type='application/json')

    def test_somente_equipe(self):
        response = Client().get(self.url)
        self.assertEqual(response.status_code, 403)

    def test_cadastro_recalcula_nota(self):
        self.assertEqual(self.cadastrar(5).status_code, 201)
        self.cadastrar(4)
        self.produto.refresh_from_db()
        self.assertEqual(self.produto.nota, Decimal('4.5'))
        self.assertEqual(self.produto.total_avaliacoes, 2)

        response = self.cadastrar(4)
        self.assertEqual(response.json()['nota'], '4.3')

    def test_cadastro_limpa_cache_da_vitrine(self):
        cache.set(CHAVE_CACHE_PRODUTOS, ['antigo'])
        self.cadastrar(5)
        self.assertIsNone(cache.get(CHAVE_CACHE_PRODUTOS))

    def test_nota_invalida(self):
        response = self.cadastrar(0)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(AvaliacaoDestaque.objects.exists())

    def test_exclusao_volta_para_nota_padrao(self):
        avaliacao_id = self.cadastrar(2).json()['avaliacao']['id']
        response = self.client.post(f'{self.url}/{avaliacao_id}/delete')
        self.assertEqual(response.json()['nota'], '4.5')
        self.assertEqual(response.json()['total_avaliacoes'], 0)

    def test_atualizacao_parcial(self):
        avaliacao_id = self.cadastrar(5).json()['avaliacao']['id']
        response = self.client.post(f'{self.url}/{avaliacao_id}', {'nota': 3}, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        avaliacao = response.json()['avaliacao']
        self.assertEqual(avaliacao['nota'], 3)
        self.assertEqual(avaliacao['comentario'], 'Muito boa')
        self.assertEqual(response.json()['nota'], '3.0')

    def test_reordenar(self):
        primeira = self.cadastrar(5, nome_usuario='Primeira').json()['avaliacao']['id']
        self.cadastrar(4, nome_usuario='Segunda', ordem=1)

        response = self.client.post(f'{self.url}/{primeira}/reorder', {'ordem': 'depois'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'ordem inválida')

        self.client.post(f'{self.url}/{primeira}/reorder', {'ordem': 2}, content_type='application/json')
        publicas = Client().get(f'/api/products/{self.produto.id}/admin-reviews').json()['avaliacoes']
        self.assertEqual([a['nome_usuario'] for a in publicas], ['Segunda', 'Primeira'])

    def test_avaliacao_de_outro_produto(self):
        outro = Produto.objects.create(nome='Boné', preco=Decimal('59.90'))
        avaliacao = AvaliacaoDestaque.objects.create(produto=outro, nome_usuario='Carla', nota=5, comentario='Ok')
        response = self.client.post(f'{self.url}/{avaliacao.id}', {'nota': 1}, content_type='application/json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Avaliação não encontrada')

    def test_vitrine_mostra_nota_e_total(self):
        self.cadastrar(5)
        cache.clear()
        produto = Client().get(f'/api/products/{self.produto.id}').json()['produto']
        self.assertEqual(produto['nota'], '5.0')
        self.assertEqual(produto['total_avaliacoes'], 1)

    @override_settings(MEDIA_ROOT=MEDIA_TESTE)
    def test_upload_de_foto_do_cliente(self):
        response = self.client.post('/api/admin/reviews/upload-image', {'imagem': arquivo_png(), 'tipo': 'usuario'})
        self.assertEqual(response.status_code, 201)
        url = response.json()['url']
        self.assertIn('avaliacoes/usuarios/', url)
        self.assertTrue(url.endswith('.webp'))

    def test_upload_com_tipo_desconhecido(self):
        response = self.client.post('/api/admin/reviews/upload-image', {'imagem': arquivo_png(), 'tipo': 'capa'})
        self.assertEqual(response.status_code, 400)
