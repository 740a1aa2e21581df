"""
utils/constants.py

Purpose: Centralized static content

- All user-facing messages
- Accepted keyword sets for choices and commands

(Prevents hardcoding across the codebase)
"""

# ============================================================
# WELCOME & ONBOARDING
# ============================================================

WELCOME_MESSAGE = "👋 Bem-vindo ao cadastro! Qual é o seu nome?"

SESSION_EXPIRED_PREFIX = "⌛ Sua sessão anterior expirou, vamos recomeçar.\n\n"

ASK_NAME_AGAIN_MESSAGE = "Não entendi. Por favor, digite o seu nome:"

RESTART_COMMANDS = {"/start", "/reiniciar"}

# ============================================================
# EMAIL
# ============================================================

ASK_EMAIL_MESSAGE = "Por favor, informe o seu e-mail:"

INVALID_EMAIL_MESSAGE = "❌ E-mail inválido. Tente novamente."

CODE_SENT_MESSAGE = (
    "📧 Código de confirmação enviado para o seu e-mail. "
    "Por favor, digite o código recebido:"
)

INVALID_CODE_MESSAGE = "❌ Código incorreto. Por favor, tente novamente."

EMAIL_SUBJECT = "Código de Confirmação"

EMAIL_BODY_TEMPLATE = "Seu código de confirmação é: {code}"

# ============================================================
# DOCUMENT TYPE & TAX IDS
# ============================================================

DOCUMENT_TYPE_CPF = "CPF"
DOCUMENT_TYPE_CNPJ = "CNPJ"

ASK_DOCUMENT_TYPE_MESSAGE = (
    "✅ E-mail confirmado! Você deseja cadastrar como CPF ou CNPJ? "
    'Responda com "CPF" ou "CNPJ":'
)

INVALID_DOCUMENT_TYPE_MESSAGE = 'Opção inválida. Por favor, responda com "CPF" ou "CNPJ":'

ASK_TAX_ID_TEMPLATE = "Informe o seu {document_type} (apenas números):"

INVALID_CPF_MESSAGE = "❌ CPF inválido. Por favor, digite um CPF válido (apenas números):"

INVALID_CNPJ_MESSAGE = "❌ CNPJ inválido. Por favor, digite um CNPJ válido (apenas números):"

ASK_DOCUMENT_UPLOAD_TEMPLATE = (
    "✅ {document_type} válido! Agora, envie uma foto ou imagem do seu "
    "documento para validação:"
)

# ============================================================
# DOCUMENT UPLOAD & FINALIZATION
# ============================================================

DOCUMENT_RECEIVED_MESSAGE = (
    "📄 Documento recebido! Agora, você deseja adicionar um CNPJ ao seu cadastro? "
    'Responda com "sim" para adicionar ou "não" para finalizar:'
)

ASK_LATER_CNPJ_MESSAGE = "Agora, por favor, informe o seu CNPJ (apenas números):"

INVALID_YES_NO_MESSAGE = 'Opção inválida. Por favor, responda com "sim" ou "não":'

YES_ANSWERS = {"sim"}
NO_ANSWERS = {"não", "nao"}

ASK_PASSWORD_TEMPLATE = "🔐 Para finalizar, crie uma senha com pelo menos {min_length} caracteres:"

INVALID_PASSWORD_TEMPLATE = "❌ A senha precisa ter pelo menos {min_length} caracteres. Tente novamente:"

REGISTRATION_COMPLETED_MESSAGE = "🎉 Cadastro concluído! Obrigado por se cadastrar."

# ============================================================
# ERRORS
# ============================================================

GENERIC_ERROR_MESSAGE = "❌ Ocorreu um erro. Tente novamente."
