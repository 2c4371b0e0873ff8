from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('loja', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='produto',
            name='avaliacoes_ativas',
            field=models.BooleanField(default=False, help_text='Clientes podem avaliar o produto'),
        ),
        migrations.AddField(
            model_name='produto',
            name='nota',
            field=models.DecimalField(decimal_places=1, default=Decimal('4.5'), help_text='Média das avaliações da equipe', max_digits=2),
        ),
        migrations.AddField(
            model_name='produto',
            name='total_avaliacoes',
            field=models.PositiveIntegerField(default=0),
        ),
        migrations.AddField(
            model_name='produto',
            name='tabela_medidas_ativa',
            field=models.BooleanField(default=False),
        ),
        migrations.AddField(
            model_name='produto',
            name='tabela_medidas_imagem',
            field=models.CharField(blank=True, default='', help_text='Imagem opcional da tabela de medidas', max_length=500),
        ),
        migrations.CreateModel(
            name='Avaliacao',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_autor', models.CharField(max_length=100)),
                ('email_autor', models.EmailField(max_length=254)),
                ('nota', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('titulo', models.CharField(blank=True, default='', max_length=200)),
                ('conteudo', models.TextField()),
                ('verificada', models.BooleanField(default=False, help_text='Autor comprou o produto')),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('produto', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='avaliacoes', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Avaliação',
                'verbose_name_plural': 'Avaliações',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.CreateModel(
            name='AvaliacaoImagem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('imagem_url', models.CharField(max_length=500)),
                ('texto_alt', models.CharField(blank=True, default='', max_length=200)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('avaliacao', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='imagens', to='loja.avaliacao')),
            ],
            options={
                'verbose_name': 'Imagem de Avaliação',
                'verbose_name_plural': 'Imagens de Avaliações',
                'ordering': ['criado_em'],
            },
        ),
        migrations.CreateModel(
            name='CurtidaAvaliacao',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('visitante', models.CharField(max_length=64)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('avaliacao', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='curtidas', to='loja.avaliacao')),
            ],
            options={
                'verbose_name': 'Curtida de Avaliação',
                'verbose_name_plural': 'Curtidas de Avaliações',
            },
        ),
        migrations.AddConstraint(
            model_name='curtidaavaliacao',
            constraint=models.UniqueConstraint(fields=('avaliacao', 'visitante'), name='curtida_unica_por_visitante'),
        ),
        migrations.CreateModel(
            name='PerguntaAvaliacao',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_autor', models.CharField(max_length=100)),
                ('texto', models.TextField()),
                ('eh_pergunta', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('avaliacao', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='perguntas', to='loja.avaliacao')),
                ('pai', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='respostas', to='loja.perguntaavaliacao')),
            ],
            options={
                'verbose_name': 'Pergunta sobre Avaliação',
                'verbose_name_plural': 'Perguntas sobre Avaliações',
                'ordering': ['criado_em'],
            },
        ),
        migrations.CreateModel(
            name='AvaliacaoDestaque',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_usuario', models.CharField(max_length=100)),
                ('imagem_usuario', models.CharField(blank=True, default='', max_length=500)),
                ('nota', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('comentario', models.TextField()),
                ('cidade', models.CharField(blank=True, default='', max_length=100)),
                ('imagem_avaliacao', models.CharField(blank=True, default='', max_length=500)),
                ('ordem', models.IntegerField(default=0)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('produto', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='avaliacoes_destaque', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Avaliação em Destaque',
                'verbose_name_plural': 'Avaliações em Destaque',
                'ordering': ['ordem', 'criado_em'],
            },
        ),
        migrations.CreateModel(
            name='CampoMedida',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=100)),
                ('ordem', models.IntegerField(default=0)),
                ('ativo', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('produto', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='campos_medida', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Campo de Medida',
                'verbose_name_plural': 'Campos de Medida',
                'ordering': ['ordem', 'id'],
            },
        ),
        migrations.CreateModel(
            name='MedidaTamanho',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tamanho', models.CharField(max_length=10)),
                ('valor', models.CharField(max_length=50)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('campo', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='medidas', to='loja.campomedida')),
                ('produto', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='medidas_tamanho', to='loja.produto')),
            ],
            options={
                'verbose_name': 'Medida por Tamanho',
                'verbose_name_plural': 'Medidas por Tamanho',
                'ordering': ['tamanho', 'campo__ordem'],
            },
        ),
        migrations.AddConstraint(
            model_name='medidatamanho',
            constraint=models.UniqueConstraint(fields=('produto', 'tamanho', 'campo'), name='medida_unica_por_tamanho'),
        ),
        migrations.CreateModel(
            name='PaginaRodape',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('slug', models.SlugField(choices=[('company', 'Empresa'), ('faq', 'Perguntas Frequentes'), ('about', 'Sobre'), ('policies', 'Políticas'), ('returns', 'Trocas e Devoluções'), ('shipping', 'Envio'), ('privacy', 'Privacidade')], unique=True)),
                ('titulo', models.CharField(max_length=200)),
                ('conteudo', models.TextField(help_text='HTML exibido na página')),
                ('descricao', models.CharField(blank=True, default='', max_length=300)),
                ('ativo', models.BooleanField(default=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Página do Rodapé',
                'verbose_name_plural': 'Páginas do Rodapé',
                'ordering': ['slug'],
            },
        ),
    ]
