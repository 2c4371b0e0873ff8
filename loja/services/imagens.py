"""
Processamento das imagens de produto enviadas pelo painel
"""
import logging
import uuid
from io import BytesIO

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db.models import Max
from PIL import Image, UnidentifiedImageError

from loja.models import ProdutoImagem

logger = logging.getLogger(__name__)

TIPOS_PERMITIDOS = ['image/jpeg', 'image/png', 'image/gif', 'image/webp']
TAMANHO_MAXIMO = 10 * 1024 * 1024
LADO_MAXIMO = 1200
QUALIDADE_WEBP = 85
QUALIDADE_AVALIACAO = 80


class ImagemInvalidaError(ValueError):
    pass


def validar_arquivo(arquivo):
    """Confere tipo e tamanho antes de abrir o arquivo"""
    if arquivo is None:
        raise ImagemInvalidaError("Nenhum arquivo enviado")
    if getattr(arquivo, 'content_type', None) not in TIPOS_PERMITIDOS:
        raise ImagemInvalidaError("Tipo de arquivo inválido. Use JPEG, PNG, GIF ou WebP.")
    if arquivo.size > TAMANHO_MAXIMO:
        raise ImagemInvalidaError("Arquivo maior que 10MB")


def _recorte(valores, largura, altura):
    """
    Caixa (esquerda, topo, direita, base) a partir de x, y, width e height do cortador.

    Largura e altura que passam da borda são ajustadas; origem fora da imagem é recusada.
    """
    try:
        x = max(int(float(valores['x'])), 0)
        y = max(int(float(valores['y'])), 0)
        w = int(float(valores['width']))
        h = int(float(valores['height']))
    except (KeyError, TypeError, ValueError):
        raise ImagemInvalidaError("Recorte inválido")
    if w <= 0 or h <= 0 or x >= largura or y >= altura:
        raise ImagemInvalidaError("Recorte inválido")
    return (x, y, min(x + w, largura), min(y + h, altura))


def converter_para_webp(arquivo, recorte=None, qualidade=QUALIDADE_WEBP):
    """
    Recorta (opcional), reduz para caber em 1200x1200 sem ampliar e converte para WEBP.

    Args:
        arquivo: UploadedFile ou objeto com read()
        recorte: dict com x, y, width e height em pixels da imagem original

    Returns:
        bytes: imagem WEBP
    """
    try:
        imagem = Image.open(arquivo)
        imagem.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImagemInvalidaError("Não foi possível ler a imagem") from e

    if recorte:
        imagem = imagem.crop(_recorte(recorte, *imagem.size))

    if imagem.mode not in ('RGB', 'RGBA'):
        imagem = imagem.convert('RGBA' if 'transparency' in imagem.info else 'RGB')

    # thumbnail só reduz e mantém a proporção
    imagem.thumbnail((LADO_MAXIMO, LADO_MAXIMO), Image.LANCZOS)

    saida = BytesIO()
    imagem.save(saida, format='WEBP', quality=qualidade)
    return saida.getvalue()


def salvar_imagem_produto(produto, arquivo, texto_alt='', cor='', tipo='carrossel', recorte=None):
    """
    Processa o upload e cria a ProdutoImagem no fim da ordem atual.

    Raises:
        ImagemInvalidaError: arquivo ausente, de tipo não aceito, grande demais ou ilegível
    """
    validar_arquivo(arquivo)
    conteudo = converter_para_webp(arquivo, recorte)

    maior_ordem = produto.imagens.aggregate(maior=Max('ordem'))['maior']
    imagem = ProdutoImagem(
        produto=produto,
        texto_alt=texto_alt or produto.nome,
        cor=cor or '',
        tipo=tipo or 'carrossel',
        ordem=0 if maior_ordem is None else maior_ordem + 1,
    )
    imagem.imagem.save(f"{uuid.uuid4()}.webp", ContentFile(conteudo), save=False)
    imagem.save()
    logger.info(f"Imagem {imagem.id} adicionada ao produto {produto.id}")
    return imagem


def salvar_imagem_avulsa(arquivo, pasta, qualidade=QUALIDADE_AVALIACAO):
    """
    Converte o upload para WEBP e grava em `pasta` no storage padrão.

    Usado pelas fotos de avaliação, que não têm um ImageField próprio.

    Returns:
        str: URL pública do arquivo
    """
    validar_arquivo(arquivo)
    conteudo = converter_para_webp(arquivo, qualidade=qualidade)
    nome = default_storage.save(f"{pasta}/{uuid.uuid4()}.webp", ContentFile(conteudo))
    logger.info(f"Imagem avulsa salva em {nome}")
    return default_storage.url(nome)


def reordenar_imagens(produto, ids):
    """Grava a ordem na sequência recebida; ids de outros produtos são ignorados"""
    imagens = {img.id: img for img in produto.imagens.all()}
    ordem = 0
    for imagem_id in ids:
        imagem = imagens.get(int(imagem_id))
        if imagem is None:
            continue
        imagem.ordem = ordem
        imagem.save(update_fields=['ordem'])
        ordem += 1
    return ordem


def excluir_imagem(imagem):
    """Apaga o registro e o arquivo"""
    arquivo = imagem.imagem
    imagem_id = imagem.id
    imagem.delete()
    if arquivo:
        arquivo.delete(save=False)
    logger.info(f"Imagem {imagem_id} excluída")
