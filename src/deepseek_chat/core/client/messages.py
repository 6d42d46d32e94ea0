"""
User-facing message catalogs for DeepSeek Chat.

Every string the client hands back to the chat front end in place of an
assistant reply is looked up here, so the front end never shows raw
exception text unless no classification applies.
"""

from typing import Dict

DEFAULT_LOCALE = "en"

CATALOGS: Dict[str, Dict[str, str]] = {
    "en": {
        "cancelled": "Request cancelled by the user.",
        "rate_limited": "Rate limit reached. Please wait a moment before sending another message.",
        "server_unavailable": "The DeepSeek server is unavailable (HTTP {status}). Please try again later.",
        "http_error": "The request failed with HTTP status {status}.",
        "timeout": "The request timed out. Please check your connection and try again.",
        "interrupted": "The request was interrupted while waiting to retry.",
        "all_attempts_failed": "All attempts to reach DeepSeek failed.",
        "format_mismatch": "Unexpected response format: {body}",
        "incomplete_response": "The response from DeepSeek was incomplete.",
        "network": "Could not reach the DeepSeek server. Please check your internet connection.",
        "tls": "Secure connection failed. Please check your system date and time.",
        "authentication": "Invalid API key. Please check your DeepSeek API key in the settings.",
        "payment_required": "Insufficient balance on your DeepSeek account.",
        "missing_api_key": "No DeepSeek API key configured.",
        "configuration": "Invalid configuration: {detail}",
        "unknown": "Error: {detail}",
    },
    "pt_BR": {
        "cancelled": "Requisição cancelada pelo usuário.",
        "rate_limited": "Limite de requisições atingido. Aguarde um momento antes de enviar outra mensagem.",
        "server_unavailable": "O servidor da DeepSeek está indisponível (HTTP {status}). Tente novamente mais tarde.",
        "http_error": "A requisição falhou com o status HTTP {status}.",
        "timeout": "Tempo de resposta esgotado. Verifique sua conexão e tente novamente.",
        "interrupted": "A requisição foi interrompida enquanto aguardava uma nova tentativa.",
        "all_attempts_failed": "Todas as tentativas de contato com a DeepSeek falharam.",
        "format_mismatch": "Formato de resposta inesperado: {body}",
        "incomplete_response": "A resposta da DeepSeek veio incompleta.",
        "network": "Não foi possível conectar ao servidor da DeepSeek. Verifique sua conexão com a internet.",
        "tls": "Falha na conexão segura. Verifique a data e a hora do sistema.",
        "authentication": "Chave de API inválida. Verifique sua chave da DeepSeek nas preferências.",
        "payment_required": "Saldo insuficiente na sua conta DeepSeek.",
        "missing_api_key": "Nenhuma chave de API da DeepSeek configurada.",
        "configuration": "Configuração inválida: {detail}",
        "unknown": "Erro: {detail}",
    },
}

SUPPORTED_LOCALES = frozenset(CATALOGS)


def get_message(key: str, locale: str = DEFAULT_LOCALE, **values: object) -> str:
    """
    Look up a user-facing message and fill in its placeholders.

    Unknown locales fall back to English.
    """
    catalog = CATALOGS.get(locale, CATALOGS[DEFAULT_LOCALE])
    template = catalog.get(key) or CATALOGS[DEFAULT_LOCALE][key]
    return template.format(**values)
