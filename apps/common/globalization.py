"""
Globalization Utilities.

The closed set of display/reply languages and the few localized texts
the backend itself produces.
"""

from typing import Dict, List

DEFAULT_LANGUAGE = "vi"

LANGUAGES: Dict[str, str] = {
    "vi": "Tiếng Việt",
    "en": "English",
    "fr": "Français",
    "ja": "日本語",
    "zh": "中文",
}

_TEXTS: Dict[str, Dict[str, str]] = {
    "vi": {
        "error_msg": "Không thể phân tích. Vui lòng kiểm tra kết nối mạng hoặc thử lại.",
        "chat_error": "Không thể gửi tin nhắn. Vui lòng thử lại.",
        "welcome": "Xin chào! Tôi là trợ lý AI. Tôi có thể giúp gì cho cây {plant} của bạn?",
    },
    "en": {
        "error_msg": "Failed to analyze. Please check your internet connection or try again.",
        "chat_error": "Failed to send the message. Please try again.",
        "welcome": "Hello! I'm your AI assistant. How can I help with your {plant}?",
    },
    "fr": {
        "error_msg": "Échec de l'analyse. Veuillez vérifier votre connexion Internet.",
        "chat_error": "Échec de l'envoi du message. Veuillez réessayer.",
        "welcome": "Bonjour! Je suis votre assistant IA. Comment puis-je aider avec votre {plant}?",
    },
    "ja": {
        "error_msg": "分析に失敗しました。インターネット接続を確認してください。",
        "chat_error": "メッセージを送信できませんでした。もう一度お試しください。",
        "welcome": "こんにちは！AIアシスタントです。{plant}についてどうお手伝いできますか？",
    },
    "zh": {
        "error_msg": "无法分析。请检查您的互联网连接。",
        "chat_error": "消息发送失败，请重试。",
        "welcome": "你好！我是AI助手。我能为您的{plant}做什么？",
    },
}


def validate_language(code: str) -> str:
    """Return the code unchanged, or raise ValueError for anything outside the set."""
    if code not in LANGUAGES:
        raise ValueError(
            f"Unsupported language '{code}', expected one of: {', '.join(LANGUAGES)}"
        )
    return code


def language_label(code: str) -> str:
    return LANGUAGES[validate_language(code)]


def list_languages() -> List[Dict[str, str]]:
    return [{"code": code, "label": label} for code, label in LANGUAGES.items()]


def localized_text(code: str, key: str, **kwargs) -> str:
    texts = _TEXTS.get(code) or _TEXTS[DEFAULT_LANGUAGE]
    return texts[key].format(**kwargs) if kwargs else texts[key]
