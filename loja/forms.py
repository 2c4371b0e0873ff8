from django import forms

from .models import (
    Avaliacao, AvaliacaoDestaque, CampoMedida, CupomGlobal, CupomProduto, InfoEmpresa, PaginaRodape,
    ProdutoImagem, TemplateEmail, STATUS_PEDIDO_CHOICES,
)
from .validadores import validar_cpf, validar_cep, validar_telefone
from .services.imagens import TIPOS_PERMITIDOS, TAMANHO_MAXIMO


class ItemCheckoutForm(forms.Form):
    """Um item da mochila enviado no checkout"""
    produto_id = forms.IntegerField()
    nome_produto = forms.CharField(max_length=150)
    imagem_produto = forms.CharField(max_length=500, required=False)
    tamanho = forms.CharField(max_length=20, required=False)
    cor = forms.JSONField(required=False)
    tecido = forms.JSONField(required=False)
    posicao_estampa = forms.CharField(max_length=20, required=False)
    preco_unitario = forms.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantidade = forms.IntegerField(min_value=1)
    subtotal = forms.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    def clean_cor(self):
        cor = self.cleaned_data.get('cor')
        if cor in (None, ''):
            return None
        if not isinstance(cor, dict) or not cor.get('name') or not cor.get('hex'):
            raise forms.ValidationError('Cor deve ter "name" e "hex".')
        return {'name': str(cor['name']), 'hex': str(cor['hex'])}

    def clean_tecido(self):
        tecido = self.cleaned_data.get('tecido')
        if tecido in (None, ''):
            return None
        if not isinstance(tecido, dict) or not tecido.get('name'):
            raise forms.ValidationError('Tecido deve ter "name" e "price".')
        try:
            preco = float(tecido.get('price') or 0)
        except (TypeError, ValueError):
            raise forms.ValidationError('Preço do tecido inválido.')
        return {'name': str(tecido['name']), 'price': preco}


class CheckoutForm(forms.Form):
    """Dados do cliente, endereço, itens e totais do pedido"""
    nome = forms.CharField(min_length=3, max_length=150)
    email = forms.EmailField()
    telefone = forms.CharField(max_length=20, validators=[validar_telefone])
    cpf = forms.CharField(max_length=14, validators=[validar_cpf])

    cep = forms.CharField(max_length=9, validators=[validar_cep])
    rua = forms.CharField(min_length=3, max_length=200)
    numero = forms.CharField(min_length=1, max_length=20)
    complemento = forms.CharField(max_length=100, required=False)
    bairro = forms.CharField(min_length=2, max_length=100)
    cidade = forms.CharField(min_length=2, max_length=100)
    estado = forms.CharField(min_length=2, max_length=2)

    itens = forms.JSONField()
    subtotal = forms.DecimalField(max_digits=10, decimal_places=2)
    desconto = forms.DecimalField(max_digits=10, decimal_places=2, required=False)
    frete = forms.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    total = forms.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    # Dados do navegador
    user_agent = forms.CharField(required=False)
    tipo_dispositivo = forms.CharField(max_length=50, required=False)
    navegador = forms.CharField(max_length=100, required=False)
    versao_navegador = forms.CharField(max_length=50, required=False)
    sistema = forms.CharField(max_length=100, required=False)
    versao_sistema = forms.CharField(max_length=50, required=False)
    resolucao_tela = forms.CharField(max_length=50, required=False)

    def clean_estado(self):
        return self.cleaned_data['estado'].upper()

    def clean_itens(self):
        itens = self.cleaned_data.get('itens')
        if not isinstance(itens, list) or not itens:
            raise forms.ValidationError('O pedido precisa de pelo menos um item.')

        validos = []
        for indice, item in enumerate(itens, start=1):
            form = ItemCheckoutForm(item if isinstance(item, dict) else {})
            if not form.is_valid():
                erros = '; '.join(f"{campo}: {' '.join(msgs)}" for campo, msgs in form.errors.items())
                raise forms.ValidationError(f"Item {indice} inválido ({erros})")
            validos.append(form.cleaned_data)
        return validos


class CupomGlobalForm(forms.ModelForm):
    class Meta:
        model = CupomGlobal
        fields = ['codigo', 'tipo_desconto', 'valor_desconto', 'descricao', 'ativo']
        widgets = {
            'codigo': forms.TextInput(attrs={
                'placeholder': 'Ex: OUDLA10',
                'style': 'text-transform: uppercase;'
            }),
            'descricao': forms.TextInput(attrs={'placeholder': 'Ex: frete grátis'}),
        }

    def clean_codigo(self):
        codigo = (self.cleaned_data.get('codigo') or '').strip().upper()
        if not codigo:
            raise forms.ValidationError('Informe o código do cupom.')
        if CupomGlobal.objects.filter(codigo=codigo).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError('Já existe um cupom com este código.')
        return codigo

    def clean(self):
        cleaned_data = super().clean()
        tipo = cleaned_data.get('tipo_desconto')
        valor = cleaned_data.get('valor_desconto')
        if tipo == 'percentual' and valor is not None and valor > 90:
            self.add_error('valor_desconto', 'o desconto máximo é 90%')
        return cleaned_data


class CupomProdutoForm(forms.ModelForm):
    class Meta:
        model = CupomProduto
        fields = ['produto', 'codigo', 'tipo_desconto', 'valor_desconto', 'valido_de', 'valido_ate', 'ativo']

    def clean_codigo(self):
        return (self.cleaned_data.get('codigo') or '').strip().upper()

    def clean(self):
        cleaned_data = super().clean()
        inicio = cleaned_data.get('valido_de')
        fim = cleaned_data.get('valido_ate')
        if inicio and fim and fim < inicio:
            self.add_error('valido_ate', 'A data final deve ser depois da inicial.')
        if cleaned_data.get('tipo_desconto') == 'percentual' and (cleaned_data.get('valor_desconto') or 0) > 100:
            self.add_error('valor_desconto', 'O desconto percentual não pode passar de 100%.')
        return cleaned_data


class TemplateEmailForm(forms.ModelForm):
    class Meta:
        model = TemplateEmail
        fields = ['nome', 'assunto', 'conteudo_html', 'ativo']
        widgets = {
            'conteudo_html': forms.Textarea(attrs={'rows': 20, 'style': 'font-family: monospace;'}),
        }


class EmailTesteForm(forms.Form):
    to = forms.EmailField(error_messages={'required': 'Email de destino é obrigatório'})


class NewsletterForm(forms.Form):
    email = forms.EmailField(error_messages={
        'required': 'Email é obrigatório',
        'invalid': 'Email inválido',
    })

    def clean_email(self):
        return self.cleaned_data['email'].strip().lower()


class StatusPedidoForm(forms.Form):
    status = forms.ChoiceField(choices=STATUS_PEDIDO_CHOICES,
                               error_messages={'required': 'Status é obrigatório'})
    codigo_rastreio = forms.CharField(max_length=50, required=False)
    motivo_reembolso = forms.CharField(required=False)


class ImagemProdutoForm(forms.Form):
    """Upload de imagem com o recorte feito no painel"""
    imagem = forms.FileField(error_messages={'required': 'Nenhum arquivo enviado'})
    texto_alt = forms.CharField(max_length=200, required=False)
    cor = forms.CharField(max_length=60, required=False)
    tipo = forms.ChoiceField(choices=ProdutoImagem.TIPO_CHOICES, required=False)
    crop_x = forms.FloatField(required=False, min_value=0)
    crop_y = forms.FloatField(required=False, min_value=0)
    crop_width = forms.FloatField(required=False, min_value=1)
    crop_height = forms.FloatField(required=False, min_value=1)

    def clean_imagem(self):
        arquivo = self.cleaned_data['imagem']
        if arquivo.content_type not in TIPOS_PERMITIDOS:
            raise forms.ValidationError('Tipo de arquivo inválido. Use JPEG, PNG, GIF ou WebP.')
        if arquivo.size > TAMANHO_MAXIMO:
            raise forms.ValidationError('Arquivo maior que 10MB.')
        return arquivo

    @property
    def recorte(self):
        """x, y, width e height quando o recorte veio completo; senão None"""
        valores = [self.cleaned_data.get(f"crop_{campo}") for campo in ('x', 'y', 'width', 'height')]
        if any(valor is None for valor in valores):
            return None
        return dict(zip(('x', 'y', 'width', 'height'), valores))


class InfoEmpresaForm(forms.ModelForm):
    class Meta:
        model = InfoEmpresa
        fields = ['nome_empresa', 'cnpj', 'rua', 'numero', 'complemento', 'bairro',
                  'cidade', 'estado', 'cep', 'telefone', 'email', 'ano_copyright']


class AvaliacaoForm(forms.ModelForm):
    """Avaliação enviada pelo cliente"""
    class Meta:
        model = Avaliacao
        fields = ['nome_autor', 'email_autor', 'nota', 'titulo', 'conteudo']
        error_messages = {
            'nota': {'required': 'Nota é obrigatória'},
            'conteudo': {'required': 'Escreva sua avaliação'},
        }

    def clean_email_autor(self):
        return self.cleaned_data['email_autor'].strip().lower()


class PerguntaAvaliacaoForm(forms.Form):
    nome_autor = forms.CharField(max_length=100)
    texto = forms.CharField(error_messages={'required': 'Texto é obrigatório'})
    pai_id = forms.IntegerField(required=False)


class AvaliacaoDestaqueForm(forms.ModelForm):
    ordem = forms.IntegerField(required=False)

    class Meta:
        model = AvaliacaoDestaque
        fields = ['nome_usuario', 'imagem_usuario', 'nota', 'comentario', 'cidade', 'imagem_avaliacao', 'ordem']

    def clean_ordem(self):
        return self.cleaned_data.get('ordem') or 0


class CampoMedidaForm(forms.ModelForm):
    ordem = forms.IntegerField(required=False)

    class Meta:
        model = CampoMedida
        fields = ['nome', 'ordem', 'ativo']

    def clean_ordem(self):
        return self.cleaned_data.get('ordem') or 0


class MedidaTamanhoForm(forms.Form):
    tamanho = forms.CharField(max_length=10)
    campo_id = forms.IntegerField()
    valor = forms.CharField(max_length=50)

    def clean_tamanho(self):
        return self.cleaned_data['tamanho'].strip().upper()


class PaginaRodapeForm(forms.ModelForm):
    class Meta:
        model = PaginaRodape
        fields = ['titulo', 'conteudo', 'descricao', 'ativo']
        error_messages = {
            'titulo': {'required': 'título e conteúdo são obrigatórios'},
            'conteudo': {'required': 'título e conteúdo são obrigatórios'},
        }
