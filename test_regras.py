#!/usr/bin/env python
"""
Testes das regras de preço, frete grátis, prazos e das validações de documentos
"""
import os
import django
from datetime import date
from decimal import Decimal

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'oudla_project.settings')
django.setup()

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from loja import regras
from loja.validadores import (cep_valido, cpf_valido, formatar_cep, formatar_cpf, numero_pedido_valido,
                              telefone_valido, validar_cpf)


CONFIG_THRESHOLD = {
    'sistema': 'threshold',
    'limite': Decimal('200'),
    'valor_padrao': Decimal('19.99'),
    'dias_min': 9,
    'dias_max': 15,
    'peso_padrao': 300,
    'altura_padrao': 4,
    'largura_padrao': 30,
    'comprimento_padrao': 40,
}


class TestValidadores(SimpleTestCase):
    def test_cpf_valido_com_e_sem_mascara(self):
        self.assertTrue(cpf_valido('529.982.247-25'))
        self.assertTrue(cpf_valido('52998224725'))

    def test_cpf_com_digito_errado(self):
        self.assertFalse(cpf_valido('529.982.247-24'))

    def test_cpf_com_digitos_repetidos(self):
        self.assertFalse(cpf_valido('111.111.111-11'))
        self.assertFalse(cpf_valido('000.000.000-00'))

    def test_cpf_tamanho_errado(self):
        self.assertFalse(cpf_valido('1234567890'))
        self.assertFalse(cpf_valido(''))

    def test_validar_cpf_levanta_validation_error(self):
        with self.assertRaises(ValidationError):
            validar_cpf('123.456.789-00')

    def test_cep_e_telefone(self):
        self.assertTrue(cep_valido('01001-000'))
        self.assertFalse(cep_valido('0100-000'))
        self.assertTrue(telefone_valido('(11) 99999-9999'))
        self.assertTrue(telefone_valido('1133334444'))
        self.assertFalse(telefone_valido('99999-9999'))

    def test_numero_pedido(self):
        self.assertTrue(numero_pedido_valido('OUDLA-20250212-0001'))
        self.assertFalse(numero_pedido_valido('OUDLA-2025-0001'))
        self.assertFalse(numero_pedido_valido(None))

    def test_formatacao(self):
        self.assertEqual(formatar_cep('01001000'), '01001-000')
        self.assertEqual(formatar_cpf('52998224725'), '529.982.247-25')


class TestFreteGratis(SimpleTestCase):
    def test_threshold_abaixo_e_acima_do_limite(self):
        self.assertFalse(regras.frete_gratis_aplicavel(CONFIG_THRESHOLD, Decimal('199.99')))
        self.assertTrue(regras.frete_gratis_aplicavel(CONFIG_THRESHOLD, Decimal('200.00')))

    def test_sistema_all_libera_sempre(self):
        config = dict(CONFIG_THRESHOLD, sistema='all')
        self.assertTrue(regras.frete_gratis_aplicavel(config, Decimal('0')))

    def test_sistema_desconhecido_nao_libera(self):
        config = dict(CONFIG_THRESHOLD, sistema='none')
        self.assertFalse(regras.frete_gratis_aplicavel(config, Decimal('1000')))

    def test_progresso_falta_valor(self):
        progresso = regras.progresso_frete_gratis(CONFIG_THRESHOLD, Decimal('150'))
        self.assertFalse(progresso['gratis'])
        self.assertEqual(progresso['falta'], Decimal('50.00'))
        self.assertEqual(progresso['progresso'], 75.0)
        self.assertEqual(progresso['mensagem'], 'falta R$ 50,00 para frete grátis')

    def test_progresso_atingido(self):
        progresso = regras.progresso_frete_gratis(CONFIG_THRESHOLD, Decimal('250'))
        self.assertTrue(progresso['gratis'])
        self.assertEqual(progresso['progresso'], 100.0)


class TestPrazos(SimpleTestCase):
    def test_dias_uteis_pulam_fim_de_semana(self):
        sexta = date(2025, 3, 7)
        self.assertEqual(regras.adicionar_dias_uteis(sexta, 1), date(2025, 3, 10))
        self.assertEqual(regras.adicionar_dias_uteis(sexta, 5), date(2025, 3, 14))

    def test_zero_dias_mantem_a_data(self):
        sabado = date(2025, 3, 8)
        self.assertEqual(regras.adicionar_dias_uteis(sabado, 0), sabado)

    def test_textos_de_prazo(self):
        sexta = date(2025, 3, 7)
        self.assertEqual(regras.texto_prazo_correios(1, hoje=sexta), 'até segunda, 10/03')
        self.assertEqual(
            regras.texto_prazo_fixo(1, 5, hoje=sexta),
            'entre segunda, 10/03 a sexta, 14/03',
        )

    def test_resumo_correios_escolhe_mais_barata(self):
        calculo = {'modo': 'correios', 'opcoes': [
            {'servico': 'SEDEX', 'codigo': '03220', 'preco': 35.5, 'prazo': 3},
            {'servico': 'PAC', 'codigo': '03298', 'preco': 22.1, 'prazo': 8},
        ]}
        resumo = regras.resumo_frete(calculo, CONFIG_THRESHOLD, Decimal('100'), hoje=date(2025, 3, 7))
        self.assertEqual(resumo['servico'], 'PAC')
        self.assertEqual(resumo['preco'], Decimal('22.10'))
        self.assertFalse(resumo['gratis'])

    def test_resumo_com_frete_gratis_zera_preco(self):
        calculo = {'modo': 'flat', 'opcoes': [{'servico': 'Padrão', 'codigo': 'flat', 'preco': 19.99, 'prazo': 15}],
                   'prazo_min': 9, 'prazo_max': 15}
        resumo = regras.resumo_frete(calculo, CONFIG_THRESHOLD, Decimal('300'), hoje=date(2025, 3, 7))
        self.assertEqual(resumo['modo'], 'flat')
        self.assertEqual(resumo['preco'], Decimal('0.00'))
        self.assertTrue(resumo['gratis'])


class TestPacote(SimpleTestCase):
    def test_soma_peso_e_altura_e_usa_maior_largura(self):
        itens = [
            {'quantidade': 2, 'peso': 250, 'altura': 3, 'largura': 25, 'comprimento': 35},
            {'quantidade': 1, 'peso': None, 'altura': None, 'largura': 32, 'comprimento': None},
        ]
        pacote = regras.dimensoes_pacote(itens, CONFIG_THRESHOLD)
        self.assertEqual(pacote, {'peso': 800, 'altura': 10, 'largura': 32, 'comprimento': 40})

    def test_sem_itens_usa_padroes(self):
        pacote = regras.dimensoes_pacote([], CONFIG_THRESHOLD)
        self.assertEqual(pacote, {'peso': 300, 'altura': 4, 'largura': 30, 'comprimento': 40})


class TestTotais(SimpleTestCase):
    def setUp(self):
        self.itens = [
            {'preco_unitario': '100.00', 'quantidade': 1},
            {'preco_unitario': '50.00', 'quantidade': 2},
        ]

    def test_desconto_percentual_e_fixo(self):
        self.assertEqual(regras.calcular_desconto(Decimal('200'), 'percentual', 10), Decimal('20.00'))
        self.assertEqual(regras.calcular_desconto(Decimal('30'), 'fixo', 50), Decimal('30.00'))

    def test_total_nunca_negativo(self):
        self.assertEqual(regras.calcular_total(Decimal('10'), Decimal('20'), Decimal('0')), Decimal('0.00'))

    def test_conferir_total_aceita_diferenca_de_um_centavo(self):
        total = regras.conferir_total(self.itens, '20', '19.99', '199.98')
        self.assertEqual(total, Decimal('199.99'))

    def test_conferir_total_recusa_divergencia(self):
        with self.assertRaises(regras.TotalDivergenteError) as ctx:
            regras.conferir_total(self.itens, '0', '0', '150.00')
        self.assertEqual(ctx.exception.esperado, Decimal('200.00'))
        self.assertEqual(ctx.exception.recebido, Decimal('150.00'))

    def test_distribuir_desconto_proporcional(self):
        self.assertEqual(regras.distribuir_desconto(self.itens, '20'), [Decimal('90.00'), Decimal('45.00')])

    def test_distribuir_sem_desconto_mantem_precos(self):
        self.assertEqual(regras.distribuir_desconto(self.itens, 0), [Decimal('100.00'), Decimal('50.00')])

    def test_formatar_reais(self):
        self.assertEqual(regras.formatar_reais(Decimal('1234.5')), 'R$ 1.234,50')
        self.assertEqual(regras.formatar_reais(0), 'R$ 0,00')

    def test_media_das_avaliacoes_com_uma_casa(self):
        self.assertEqual(regras.media_avaliacoes([5, 4, 4]), Decimal('4.3'))
        self.assertEqual(regras.media_avaliacoes([5, 4]), Decimal('4.5'))
        self.assertEqual(regras.media_avaliacoes([3, 4, 4, 4]), Decimal('3.8'))

    def test_sem_avaliacoes_nota_padrao(self):
        self.assertEqual(regras.media_avaliacoes([]), Decimal('4.5'))
