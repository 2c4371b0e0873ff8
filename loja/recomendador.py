"""
Produtos relacionados exibidos na página de produto
"""
import logging

import numpy as np

from .models import Produto

logger = logging.getLogger(__name__)

LIMITE_RELACIONADOS = 6

# (diferença de preço abaixo de, pontos)
FAIXAS_PRECO = [(20, 5), (50, 3), (100, 1)]
PONTOS_MESMO_TIPO = 10
PONTOS_POR_COR = 2


class RecomendadorProdutos:
    """
    Pontua os produtos publicados contra o produto atual:
    mesmo tipo, preço parecido e cores em comum.
    """

    def __init__(self, produtos=None):
        self.produtos = list(produtos) if produtos is not None else list(Produto.objects.publicados())

    def pontuar(self, atual, candidatos):
        """
        Returns:
            numpy.ndarray: pontuação de cada candidato, na mesma ordem
        """
        if not candidatos:
            return np.zeros(0)

        tipos = np.array([c.tipo for c in candidatos])
        precos = np.array([float(c.preco) for c in candidatos])

        pontos = np.where(tipos == atual.tipo, PONTOS_MESMO_TIPO, 0).astype(float)

        diferenca = np.abs(precos - float(atual.preco))
        pontos += np.select(
            [diferenca < limite for limite, _ in FAIXAS_PRECO],
            [valor for _, valor in FAIXAS_PRECO],
            default=0,
        )

        cores_atual = atual.hex_cores
        pontos += np.array([
            sum(1 for hex_cor in cores_atual if hex_cor in c.hex_cores) * PONTOS_POR_COR
            for c in candidatos
        ])
        return pontos

    def relacionados(self, produto_id, limite=LIMITE_RELACIONADOS):
        """
        Os `limite` produtos com maior pontuação; empates mantêm a ordem da vitrine.
        """
        atual = next((p for p in self.produtos if str(p.id) == str(produto_id)), None)
        candidatos = [p for p in self.produtos if str(p.id) != str(produto_id)]
        if atual is None:
            logger.warning(f"Produto {produto_id} não está entre os publicados; sem pontuação")
            return candidatos[:limite]

        pontos = self.pontuar(atual, candidatos)
        ordem = np.argsort(-pontos, kind='stable')
        return [candidatos[i] for i in ordem[:limite]]
