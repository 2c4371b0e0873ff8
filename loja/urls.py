from django.urls import path
from . import views
from . import admin_views

app_name = 'loja'

urlpatterns = [
    path('api/csrf', views.csrf, name='csrf'),
    # Vitrine
    path('api/products', views.produtos, name='produtos'),
    path('api/products/<int:produto_id>/related', views.produtos_relacionados, name='produtos_relacionados'),
    path('api/products/<int:produto_id>/coupon', views.cupom_produto, name='cupom_produto'),
    path('api/products/<int:produto_id>/reviews', views.avaliacoes_produto, name='avaliacoes_produto'),
    path('api/products/<int:produto_id>/admin-reviews', views.avaliacoes_destaque, name='avaliacoes_destaque'),
    path('api/products/<int:produto_id>/measurements', views.medidas_produto, name='medidas_produto'),
    path('api/products/<str:identificador>', views.produto_detalhe, name='produto_detalhe'),
    path('api/banners', views.banners, name='banners'),
    path('api/content-cards', views.cards_conteudo, name='cards_conteudo'),
    path('api/faqs', views.faqs, name='faqs'),
    path('api/company-info', views.info_empresa, name='info_empresa'),
    path('api/settings/free_shipping', views.config_frete_gratis, name='config_frete_gratis'),
    path('api/footer-page/<slug:slug>', views.pagina_rodape, name='pagina_rodape'),
    # Avaliações
    path('api/reviews/<int:avaliacao_id>/images', views.avaliacao_imagem, name='avaliacao_imagem'),
    path('api/reviews/<int:avaliacao_id>/like', views.avaliacao_curtir, name='avaliacao_curtir'),
    path('api/reviews/<int:avaliacao_id>/qa', views.avaliacao_perguntas, name='avaliacao_perguntas'),
    # Frete e endereço
    path('api/shipping/calculate', views.calcular_frete_view, name='calcular_frete'),
    path('api/cep/<str:cep>', views.consultar_cep, name='consultar_cep'),
    # Cupons, newsletter e rastreio
    path('api/global-coupon', views.cupom_global, name='cupom_global'),
    path('api/coupons/validate', views.validar_cupom, name='validar_cupom'),
    path('api/newsletter/subscribe', views.newsletter_inscrever, name='newsletter_inscrever'),
    path('api/tracking/<str:identificador>', views.rastreio, name='rastreio'),
    # Mochila
    path('api/mochila', views.mochila_detalhe, name='mochila'),
    path('api/mochila/adicionar', views.mochila_adicionar, name='mochila_adicionar'),
    path('api/mochila/atualizar', views.mochila_atualizar, name='mochila_atualizar'),
    path('api/mochila/remover', views.mochila_remover, name='mochila_remover'),
    path('api/mochila/limpar', views.mochila_limpar, name='mochila_limpar'),
    path('api/mochila/cupom', views.mochila_cupom, name='mochila_cupom'),
    path('api/mochila/cupom/remover', views.mochila_remover_cupom, name='mochila_remover_cupom'),
    path('api/mochila/frete', views.mochila_frete, name='mochila_frete'),
    # Checkout
    path('api/checkout/create-order', views.criar_pedido, name='criar_pedido'),
    path('api/checkout/order/<str:numero>', views.pedido_checkout, name='pedido_checkout'),
    path('api/checkout/payment-status/<str:numero>', views.status_pagamento, name='status_pagamento'),
    path('api/checkout/receipt/<str:numero>', views.comprovante, name='comprovante'),
    path('api/checkout/mp-config', views.mp_config, name='mp_config'),
    path('api/checkout/gateway-settings', views.gateway_settings, name='gateway_settings'),
    path('api/checkout/create-preference', views.criar_preferencia, name='criar_preferencia'),
    path('api/checkout/webhook', views.webhook, name='webhook'),
    # Painel da equipe
    path('api/admin/orders', admin_views.pedidos_lista, name='admin_pedidos'),
    path('api/admin/orders/bulk/status', admin_views.pedidos_lote_status, name='admin_pedidos_lote_status'),
    path('api/admin/orders/bulk/permanent-delete', admin_views.pedidos_lote_excluir_definitivo,
         name='admin_pedidos_lote_excluir_definitivo'),
    path('api/admin/orders/bulk/<str:acao>', admin_views.pedidos_lote_acao, name='admin_pedidos_lote_acao'),
    path('api/admin/orders/<int:pedido_id>', admin_views.pedido_detalhe, name='admin_pedido'),
    path('api/admin/orders/<int:pedido_id>/status', admin_views.pedido_status, name='admin_pedido_status'),
    path('api/admin/orders/<int:pedido_id>/notes', admin_views.pedido_notas, name='admin_pedido_notas'),
    path('api/admin/orders/<int:pedido_id>/permanent-delete', admin_views.pedido_excluir_definitivo,
         name='admin_pedido_excluir_definitivo'),
    path('api/admin/orders/<int:pedido_id>/<str:acao>', admin_views.pedido_acao, name='admin_pedido_acao'),
    path('api/admin/email-templates', admin_views.templates_email, name='admin_templates_email'),
    path('api/admin/email-templates/<str:chave>', admin_views.template_email, name='admin_template_email'),
    path('api/admin/email-templates/<str:chave>/test', admin_views.template_email_teste,
         name='admin_template_email_teste'),
    path('api/admin/settings', admin_views.configuracoes, name='admin_configuracoes'),
    path('api/admin/products/<int:produto_id>/images', admin_views.produto_imagem_upload,
         name='admin_imagem_upload'),
    path('api/admin/products/<int:produto_id>/images/reorder', admin_views.produto_imagens_reordenar,
         name='admin_imagens_reordenar'),
    path('api/admin/images/<int:imagem_id>/delete', admin_views.produto_imagem_excluir,
         name='admin_imagem_excluir'),
    path('api/admin/products/<int:produto_id>/reviews', admin_views.avaliacoes_destaque,
         name='admin_avaliacoes_destaque'),
    path('api/admin/products/<int:produto_id>/reviews/<int:avaliacao_id>', admin_views.avaliacao_destaque_atualizar,
         name='admin_avaliacao_destaque'),
    path('api/admin/products/<int:produto_id>/reviews/<int:avaliacao_id>/reorder',
         admin_views.avaliacao_destaque_reordenar, name='admin_avaliacao_destaque_reordenar'),
    path('api/admin/products/<int:produto_id>/reviews/<int:avaliacao_id>/delete',
         admin_views.avaliacao_destaque_excluir, name='admin_avaliacao_destaque_excluir'),
    path('api/admin/reviews/upload-image', admin_views.avaliacao_imagem_upload, name='admin_avaliacao_imagem'),
    path('api/admin/products/<int:produto_id>/measurement-fields', admin_views.campos_medida,
         name='admin_campos_medida'),
    path('api/admin/measurement-fields/<int:campo_id>', admin_views.campo_medida_atualizar,
         name='admin_campo_medida'),
    path('api/admin/measurement-fields/<int:campo_id>/delete', admin_views.campo_medida_excluir,
         name='admin_campo_medida_excluir'),
    path('api/admin/products/<int:produto_id>/size-measurements', admin_views.medidas_tamanho,
         name='admin_medidas_tamanho'),
    path('api/admin/size-measurements/<int:medida_id>/delete', admin_views.medida_tamanho_excluir,
         name='admin_medida_tamanho_excluir'),
    path('api/admin/footer-pages', admin_views.paginas_rodape, name='admin_paginas_rodape'),
    path('api/admin/footer-pages/<slug:slug>', admin_views.pagina_rodape, name='admin_pagina_rodape'),
]
