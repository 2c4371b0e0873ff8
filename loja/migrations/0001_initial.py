from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import loja.models
import loja.validadores


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Produto',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(blank=True, help_text='Código SKU do produto', max_length=50, null=True, unique=True)),
                ('slug', models.SlugField(blank=True, help_text='URL personalizada', max_length=120, null=True, unique=True)),
                ('nome', models.CharField(max_length=150)),
                ('descricao', models.TextField(blank=True, default='')),
                ('preco', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('preco_original', models.DecimalField(blank=True, decimal_places=2, help_text="Preço 'de' exibido riscado", max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('tipo', models.CharField(choices=[('camiseta', 'Camiseta'), ('acessorio', 'Acessório')], default='camiseta', max_length=20)),
                ('categoria', models.CharField(blank=True, default='', help_text='Categoria (para acessórios)', max_length=60)),
                ('cores', models.JSONField(blank=True, default=list, help_text='Lista de cores: [{"name": "Preto", "hex": "#000000"}]')),
                ('tamanhos', models.JSONField(blank=True, default=list, help_text='Lista de tamanhos: ["P", "M", "G", "GG"]')),
                ('tecidos', models.JSONField(blank=True, default=list, help_text='Lista de tecidos: [{"name": "Algodão", "price": 0}]')),
                ('tamanhos_ativos', models.BooleanField(default=True)),
                ('tecidos_ativos', models.BooleanField(default=False)),
                ('personalizavel', models.BooleanField(default=False)),
                ('estampa_frente', models.BooleanField(default=False, help_text='Permite estampa na frente')),
                ('estampa_costas', models.BooleanField(default=False, help_text='Permite estampa nas costas')),
                ('novo', models.BooleanField(default=False)),
                ('ordem_exibicao', models.IntegerField(default=0, help_text='Maior aparece primeiro na home')),
                ('parcelas_max', models.PositiveIntegerField(default=12)),
                ('parcelas_sem_juros', models.BooleanField(default=True)),
                ('frete_peso', models.PositiveIntegerField(blank=True, help_text='Peso em gramas', null=True)),
                ('frete_altura', models.PositiveIntegerField(blank=True, help_text='Altura em cm', null=True)),
                ('frete_largura', models.PositiveIntegerField(blank=True, help_text='Largura em cm', null=True)),
                ('frete_comprimento', models.PositiveIntegerField(blank=True, help_text='Comprimento em cm', null=True)),
                ('status', models.CharField(choices=[('rascunho', 'Rascunho'), ('publicado', 'Publicado')], default='rascunho', max_length=20)),
                ('token_preview', models.CharField(blank=True, help_text='Token secreto para visualizar rascunhos', max_length=64, null=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'ordering': ['-ordem_exibicao', 'nome'],
            },
        ),
        migrations.CreateModel(
            name='ProdutoImagem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('imagem', models.ImageField(upload_to='produtos/')),
                ('texto_alt', models.CharField(blank=True, default='', max_length=200)),
                ('tipo', models.CharField(choices=[('apresentacao', 'Apresentação'), ('carrossel', 'Carrossel')], default='carrossel', max_length=20)),
                ('cor', models.CharField(blank=True, default='', help_text='Nome da cor (imagens de carrossel)', max_length=60)),
                ('ordem', models.PositiveIntegerField(default=0, help_text='Ordem de exibição da imagem')),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('produto', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='imagens', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Imagem de Produto',
                'verbose_name_plural': 'Imagens de Produtos',
                'ordering': ['ordem', 'criado_em'],
            },
        ),
        migrations.CreateModel(
            name='CupomProduto',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('codigo', models.CharField(max_length=50, validators=[django.core.validators.MinLengthValidator(2)])),
                ('tipo_desconto', models.CharField(choices=[('percentual', 'Percentual'), ('fixo', 'Valor Fixo')], default='percentual', max_length=20)),
                ('valor_desconto', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('valido_de', models.DateTimeField(blank=True, null=True)),
                ('valido_ate', models.DateTimeField(blank=True, null=True)),
                ('ativo', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('produto', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cupons', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Cupom de Produto',
                'verbose_name_plural': 'Cupons de Produto',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.CreateModel(
            name='CupomGlobal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('codigo', models.CharField(help_text='Salvo sempre em maiúsculas', max_length=50, unique=True)),
                ('tipo_desconto', models.CharField(choices=[('percentual', 'Percentual'), ('fixo', 'Valor Fixo')], default='percentual', max_length=20)),
                ('valor_desconto', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'), message='o desconto deve ser maior que zero'), django.core.validators.MaxValueValidator(Decimal('90'), message='o desconto máximo é 90%')])),
                ('descricao', models.CharField(blank=True, default='', help_text='Ex: "frete grátis"', max_length=200)),
                ('ativo', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Cupom Global',
                'verbose_name_plural': 'Cupons Globais',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.CreateModel(
            name='Pedido',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('numero', models.CharField(help_text='OUDLA-AAAAMMDD-NNNN', max_length=50, unique=True)),
                ('nome_cliente', models.CharField(max_length=150, validators=[django.core.validators.MinLengthValidator(3)])),
                ('email_cliente', models.EmailField(max_length=254)),
                ('telefone_cliente', models.CharField(blank=True, default='', max_length=20)),
                ('cpf_cliente', models.CharField(max_length=14, validators=[loja.validadores.validar_cpf])),
                ('cep', models.CharField(max_length=9, validators=[loja.validadores.validar_cep])),
                ('rua', models.CharField(max_length=200)),
                ('numero_endereco', models.CharField(max_length=20)),
                ('complemento', models.CharField(blank=True, default='', max_length=100)),
                ('bairro', models.CharField(max_length=100)),
                ('cidade', models.CharField(max_length=100)),
                ('estado', models.CharField(max_length=2)),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('desconto', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('frete', models.DecimalField(decimal_places=2, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('total', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('preferencia_id', models.CharField(blank=True, db_index=True, default='', max_length=100)),
                ('pagamento_id', models.CharField(blank=True, default='', max_length=100)),
                ('status_pagamento', models.CharField(blank=True, default='', help_text='approved, pending, rejected...', max_length=50)),
                ('metodo_pagamento', models.CharField(blank=True, default='', help_text='pix, visa, bolbradesco...', max_length=50)),
                ('tipo_pagamento', models.CharField(blank=True, default='', help_text='credit_card, ticket...', max_length=50)),
                ('parcelas', models.PositiveIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pendente'), ('paid', 'Pago'), ('processing', 'Em preparação'), ('shipped', 'Enviado'), ('delivered', 'Entregue'), ('cancelled', 'Cancelado'), ('failed', 'Falhou'), ('refunded', 'Reembolsado')], db_index=True, default='pending', max_length=20)),
                ('codigo_rastreio', models.CharField(blank=True, default='', max_length=50)),
                ('motivo_reembolso', models.TextField(blank=True, default='')),
                ('metodo_envio', models.CharField(blank=True, default='', max_length=100)),
                ('previsao_entrega', models.DateTimeField(blank=True, null=True)),
                ('data_entrega', models.DateTimeField(blank=True, null=True)),
                ('notas_internas', models.TextField(blank=True, default='')),
                ('arquivado_em', models.DateTimeField(blank=True, null=True)),
                ('excluido_em', models.DateTimeField(blank=True, null=True)),
                ('ip_cliente', models.CharField(blank=True, default='', max_length=64)),
                ('user_agent', models.TextField(blank=True, default='')),
                ('tipo_dispositivo', models.CharField(blank=True, default='', max_length=50)),
                ('navegador', models.CharField(blank=True, default='', max_length=100)),
                ('versao_navegador', models.CharField(blank=True, default='', max_length=50)),
                ('sistema', models.CharField(blank=True, default='', max_length=100)),
                ('versao_sistema', models.CharField(blank=True, default='', max_length=50)),
                ('resolucao_tela', models.CharField(blank=True, default='', max_length=50)),
                ('codigo_verificacao', models.CharField(blank=True, default='', help_text='Gerado na aprovação do pagamento', max_length=20)),
                ('confirmacao_enviada_em', models.DateTimeField(blank=True, null=True)),
                ('rastreio_enviado_em', models.DateTimeField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('pago_em', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Pedido',
                'verbose_name_plural': 'Pedidos',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.CreateModel(
            name='ItemPedido',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_produto', models.CharField(max_length=150)),
                ('imagem_produto', models.CharField(blank=True, default='', max_length=500)),
                ('tamanho', models.CharField(default='Padrão', max_length=20)),
                ('cor', models.JSONField(default=loja.models._cor_padrao)),
                ('tecido', models.JSONField(blank=True, null=True)),
                ('posicao_estampa', models.CharField(blank=True, default='', help_text='"frente" ou "costas"', max_length=20)),
                ('preco_unitario', models.DecimalField(decimal_places=2, max_digits=10)),
                ('quantidade', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=10)),
                ('pedido', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='itens', to='loja.pedido')),
                ('produto', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='itens_pedido', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Item do Pedido',
                'verbose_name_plural': 'Itens do Pedido',
            },
        ),
        migrations.CreateModel(
            name='Banner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('titulo', models.CharField(max_length=150)),
                ('subtitulo', models.CharField(max_length=250)),
                ('texto_cta', models.CharField(blank=True, default='', max_length=60)),
                ('link_cta', models.CharField(blank=True, default='', help_text='Usado quando não há produto', max_length=300)),
                ('imagem_url', models.CharField(max_length=500)),
                ('imagem_mobile_url', models.CharField(blank=True, default='', max_length=500)),
                ('posicao', models.CharField(choices=[('left', 'Esquerda'), ('center', 'Centro'), ('right', 'Direita')], default='left', max_length=10)),
                ('posicao_mobile', models.CharField(choices=[('bottom-left', 'Inferior esquerda'), ('bottom-center', 'Inferior centro'), ('bottom-right', 'Inferior direita'), ('center-left', 'Centro esquerda'), ('center-center', 'Centro'), ('center-right', 'Centro direita')], default='bottom-center', max_length=20)),
                ('mostrar_texto', models.BooleanField(default=True)),
                ('ordem', models.IntegerField(default=0)),
                ('ativo', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('produto', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='banners', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Banner',
                'verbose_name_plural': 'Banners',
                'ordering': ['ordem', 'id'],
            },
        ),
        migrations.CreateModel(
            name='CardConteudo',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tipo', models.CharField(choices=[('feature', 'Destaque'), ('lifestyle', 'Lifestyle')], max_length=20)),
                ('titulo', models.CharField(blank=True, default='', max_length=150)),
                ('subtitulo', models.CharField(blank=True, default='', max_length=250)),
                ('texto_cta', models.CharField(blank=True, default='', max_length=60)),
                ('link_cta', models.CharField(blank=True, default='', max_length=300)),
                ('imagem_url', models.CharField(max_length=500)),
                ('posicao', models.CharField(choices=[('left', 'Esquerda'), ('center', 'Centro'), ('right', 'Direita')], default='center', max_length=20)),
                ('altura', models.CharField(choices=[('small', 'Pequeno'), ('medium', 'Médio'), ('large', 'Grande')], default='medium', max_length=20)),
                ('ativo', models.BooleanField(default=True)),
                ('ordem', models.IntegerField(default=0)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('produto', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cards', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Card de Conteúdo',
                'verbose_name_plural': 'Cards de Conteúdo',
                'ordering': ['ordem', 'id'],
            },
        ),
        migrations.CreateModel(
            name='FAQ',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('pergunta', models.CharField(max_length=300)),
                ('resposta', models.TextField()),
                ('categoria', models.CharField(choices=[('geral', 'Geral'), ('envio', 'Envio'), ('produto', 'Produto'), ('pagamento', 'Pagamento'), ('devolucao', 'Devolução')], default='geral', max_length=20)),
                ('ordem', models.IntegerField(default=0)),
                ('ativo', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Pergunta Frequente',
                'verbose_name_plural': 'Perguntas Frequentes',
                'ordering': ['categoria', 'ordem', 'id'],
            },
        ),
        migrations.CreateModel(
            name='TemplateEmail',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('chave', models.CharField(choices=[('order_confirmation', 'Confirmação de Pedido'), ('tracking_code', 'Código de Rastreio'), ('newsletter_welcome', 'Boas-vindas Newsletter')], max_length=50, unique=True)),
                ('nome', models.CharField(max_length=100)),
                ('assunto', models.CharField(max_length=200)),
                ('conteudo_html', models.TextField(help_text='HTML com variáveis no formato {{variavel}}')),
                ('ativo', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Template de Email',
                'verbose_name_plural': 'Templates de Email',
                'ordering': ['chave'],
            },
        ),
        migrations.CreateModel(
            name='ConfiguracaoSite',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('chave', models.CharField(max_length=100, unique=True)),
                ('valor', models.TextField(blank=True, default='')),
                ('tipo', models.CharField(choices=[('text', 'Texto'), ('color', 'Cor'), ('boolean', 'Booleano'), ('number', 'Número')], default='text', max_length=20)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Configuração do Site',
                'verbose_name_plural': 'Configurações do Site',
                'ordering': ['chave'],
            },
        ),
        migrations.CreateModel(
            name='InscritoNewsletter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('status', models.CharField(default='active', max_length=20)),
                ('ip', models.CharField(blank=True, default='', max_length=64)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Inscrito na Newsletter',
                'verbose_name_plural': 'Inscritos na Newsletter',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.CreateModel(
            name='InfoEmpresa',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_empresa', models.CharField(max_length=150)),
                ('cnpj', models.CharField(max_length=20)),
                ('rua', models.CharField(max_length=200)),
                ('numero', models.CharField(max_length=20)),
                ('complemento', models.CharField(blank=True, default='', max_length=100)),
                ('bairro', models.CharField(max_length=100)),
                ('cidade', models.CharField(max_length=100)),
                ('estado', models.CharField(max_length=2)),
                ('cep', models.CharField(max_length=9)),
                ('telefone', models.CharField(blank=True, default='', max_length=20)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('ano_copyright', models.PositiveIntegerField()),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Informações da Empresa',
                'verbose_name_plural': 'Informações da Empresa',
            },
        ),
    ]
