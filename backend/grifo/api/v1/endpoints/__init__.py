"""
Endpoints da API v1.

Módulos disponíveis:
- auth: Login e perfil
- clientes: Consulta de clientes
- configuracoes: Configurações da empresa
- dashboard: Indicadores da empresa
- empresas: Administração de empresas (superadmin)
- health: Health check
- imoveis: Cadastro de imóveis
- notificacoes: Caixa de notificações
- public: Área pública do cliente
- relatorios: Relatórios de vistorias e solicitações
- solicitacoes: Solicitações de vistoria
- usuarios: Usuários e papéis
- vistorias: Vistorias, ambientes, fotos e laudos
"""
