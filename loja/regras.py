"""
Regras de preço e frete usadas pela mochila, pelo checkout e pelo gateway.

Todas as funções são puras: recebem a configuração já carregada
(ver loja.configuracao.config_frete) e devolvem valores Decimal.
"""
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

DIAS_SEMANA = ["segunda", "terça", "quarta", "quinta", "sexta", "sábado", "domingo"]

TOLERANCIA_TOTAL = Decimal('0.01')

CENTAVO = Decimal('0.01')


class TotalDivergenteError(ValueError):
    """O total enviado pelo cliente não bate com os itens"""

    def __init__(self, esperado, recebido):
        self.esperado = esperado
        self.recebido = recebido
        super().__init__(f"Total esperado {esperado}, recebido {recebido}")


def arredondar(valor):
    return Decimal(str(valor)).quantize(CENTAVO, rounding=ROUND_HALF_UP)


# Frete grátis

def frete_gratis_aplicavel(config, subtotal):
    """
    "all" libera para todos; "threshold" (ou vazio) exige subtotal >= limite.
    """
    sistema = config.get('sistema') or 'threshold'
    if sistema == 'all':
        return True
    if sistema == 'threshold':
        return Decimal(str(subtotal)) >= Decimal(str(config['limite']))
    return False


def progresso_frete_gratis(config, subtotal):
    """
    Quanto falta para o frete grátis e o percentual da barra de progresso.

    Returns:
        dict: gratis, falta, progresso (0-100) e mensagem
    """
    subtotal = Decimal(str(subtotal))
    if config.get('sistema') == 'all':
        return {'gratis': True, 'falta': Decimal('0.00'), 'progresso': 100.0,
                'mensagem': 'frete grátis para todo o brasil'}

    limite = Decimal(str(config['limite']))
    if limite <= 0:
        progresso = 100.0
    else:
        progresso = min(float(subtotal / limite * 100), 100.0)

    falta = max(limite - subtotal, Decimal('0'))
    if falta == 0:
        return {'gratis': True, 'falta': Decimal('0.00'), 'progresso': progresso,
                'mensagem': 'você ganhou frete grátis!'}
    return {
        'gratis': False,
        'falta': arredondar(falta),
        'progresso': progresso,
        'mensagem': f"falta {formatar_reais(falta)} para frete grátis",
    }


# Prazos

def adicionar_dias_uteis(inicio, dias):
    """Avança dia a dia a partir de `inicio` contando só segunda a sexta"""
    resultado = inicio
    adicionados = 0
    while adicionados < dias:
        resultado += timedelta(days=1)
        if resultado.weekday() < 5:
            adicionados += 1
    return resultado


def formatar_data_curta(dia):
    """date -> "sexta, 07/03" """
    return f"{DIAS_SEMANA[dia.weekday()]}, {dia.day:02d}/{dia.month:02d}"


def texto_prazo_correios(prazo, hoje=None):
    hoje = hoje or date.today()
    return f"até {formatar_data_curta(adicionar_dias_uteis(hoje, prazo))}"


def texto_prazo_fixo(dias_min, dias_max, hoje=None):
    hoje = hoje or date.today()
    inicio = adicionar_dias_uteis(hoje, dias_min)
    fim = adicionar_dias_uteis(hoje, dias_max)
    return f"entre {formatar_data_curta(inicio)} a {formatar_data_curta(fim)}"


def opcao_mais_barata(opcoes):
    if not opcoes:
        return None
    return min(opcoes, key=lambda opcao: Decimal(str(opcao['preco'])))


def resumo_frete(calculo, config, subtotal, hoje=None):
    """
    Junta o resultado do cálculo de frete com a regra de frete grátis.

    Args:
        calculo: retorno de services.frete.calcular_frete
        config: configuração de frete
        subtotal: subtotal da mochila
    """
    gratis = frete_gratis_aplicavel(config, subtotal)
    opcoes = calculo.get('opcoes') or []

    if calculo.get('modo') == 'correios' and opcoes:
        escolhida = opcao_mais_barata(opcoes)
        return {
            'modo': 'correios',
            'preco': Decimal('0.00') if gratis else arredondar(escolhida['preco']),
            'prazo_texto': texto_prazo_correios(escolhida['prazo'], hoje),
            'servico': escolhida['servico'],
            'opcoes': opcoes,
            'gratis': gratis,
        }

    preco_fixo = opcoes[0]['preco'] if opcoes else config['valor_padrao']
    dias_min = calculo.get('prazo_min', config['dias_min'])
    dias_max = calculo.get('prazo_max', config['dias_max'])
    return {
        'modo': 'flat',
        'preco': Decimal('0.00') if gratis else arredondar(preco_fixo),
        'prazo_texto': texto_prazo_fixo(dias_min, dias_max, hoje),
        'servico': 'Padrão',
        'opcoes': opcoes,
        'gratis': gratis,
    }


# Pacote

def dimensoes_pacote(itens, config):
    """
    Dimensões do pacote para cotação.

    Peso e altura somam (valor x quantidade); largura e comprimento ficam com o maior.
    Cada item é um dict com 'quantidade' e opcionalmente 'peso', 'altura',
    'largura' e 'comprimento' do produto (None usa o padrão da configuração).
    """
    def valor(item, campo, padrao):
        medida = item.get(campo)
        return config[padrao] if medida is None else medida

    peso = altura = largura = comprimento = 0
    for item in itens:
        quantidade = int(item.get('quantidade') or 1)
        peso += valor(item, 'peso', 'peso_padrao') * quantidade
        altura += valor(item, 'altura', 'altura_padrao') * quantidade
        largura = max(largura, valor(item, 'largura', 'largura_padrao'))
        comprimento = max(comprimento, valor(item, 'comprimento', 'comprimento_padrao'))

    if not itens:
        peso = config['peso_padrao']
        altura = config['altura_padrao']
        largura = config['largura_padrao']
        comprimento = config['comprimento_padrao']

    return {'peso': peso, 'altura': altura, 'largura': largura, 'comprimento': comprimento}


# Totais

def subtotal_itens(itens):
    """Soma preço unitário x quantidade"""
    return sum(
        (Decimal(str(item['preco_unitario'])) * int(item['quantidade']) for item in itens),
        Decimal('0'),
    )


def calcular_desconto(subtotal, tipo, valor):
    """Desconto de um cupom: percentual sobre o subtotal ou valor fixo limitado ao subtotal"""
    subtotal = Decimal(str(subtotal))
    valor = Decimal(str(valor or 0))
    if tipo == 'fixo':
        return arredondar(min(valor, subtotal))
    return arredondar(subtotal * valor / 100)


def calcular_total(subtotal, desconto, frete):
    total = Decimal(str(subtotal)) - Decimal(str(desconto)) + Decimal(str(frete))
    return arredondar(max(total, Decimal('0')))


def conferir_total(itens, desconto, frete, total_cliente):
    """
    Recalcula o total a partir dos itens e compara com o enviado pelo cliente.

    Raises:
        TotalDivergenteError: se a diferença passar de 1 centavo
    """
    esperado = subtotal_itens(itens) - Decimal(str(desconto or 0)) + Decimal(str(frete or 0))
    recebido = Decimal(str(total_cliente))
    if abs(esperado - recebido) > TOLERANCIA_TOTAL:
        raise TotalDivergenteError(arredondar(esperado), arredondar(recebido))
    return arredondar(esperado)


def distribuir_desconto(itens, desconto):
    """
    Espalha o desconto do pedido proporcionalmente nos preços unitários.

    O gateway não aceita desconto no pedido, então cada item sai com
    round(unitário * (1 - razão), 2).

    Returns:
        list: preços unitários com desconto, na mesma ordem dos itens
    """
    subtotal = subtotal_itens(itens)
    desconto = Decimal(str(desconto or 0))
    precos = [Decimal(str(item['preco_unitario'])) for item in itens]
    if subtotal <= 0 or desconto <= 0:
        return precos
    razao = desconto / subtotal
    return [arredondar(preco * (1 - razao)) for preco in precos]


def formatar_reais(valor):
    """Decimal('1234.5') -> 'R$ 1.234,50'"""
    texto = f"{arredondar(valor):,.2f}"
    return "R$ " + texto.replace(',', '_').replace('.', ',').replace('_', '.')


# Avaliações

NOTA_PADRAO = Decimal('4.5')


def media_avaliacoes(notas):
    """Média com uma casa decimal; sem notas fica em 4.5"""
    notas = [Decimal(str(nota)) for nota in notas]
    if not notas:
        return NOTA_PADRAO
    media = sum(notas, Decimal('0')) / len(notas)
    return media.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
