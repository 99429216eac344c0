"""
Fallback replies used when the completion provider is down or fails.

Keyword matching is a plain substring test on the lower-cased message and
the table is scanned in declaration order: the first keyword found wins,
regardless of length or specificity ("this" matches "hi").
"""

from datetime import datetime
from typing import Optional, Tuple

from ..utils.formatting import format_time

KEYWORD_REPLIES: Tuple[Tuple[str, str], ...] = (
    ("hello", "Hello! I'm GupAI, your AI assistant. How can I help you today?"),
    ("hi", "Hi there! I'm GupAI, ready to assist you with any questions or tasks."),
    ("help", "I can help you with various tasks like answering questions, writing content, "
             "explaining concepts, coding help, and much more. What would you like to know?"),
    ("weather", "I don't have real-time weather data, but you can ask me about weather concepts "
                "or how to check weather in your area!"),
    ("joke", "Why don't scientists trust atoms? Because they make up everything! 😄"),
    ("name", "I'm GupAI, your intelligent AI assistant!"),
    ("who are you", "I'm GupAI, an AI assistant created to help you with various tasks and "
                    "answer your questions."),
    ("what can you do", "I can help with answering questions, writing content, explaining concepts, "
                        "programming help, creative writing, and much more!"),
    ("thank", "You're welcome! Is there anything else I can help you with?"),
    ("bye", "Goodbye! Feel free to come back if you have more questions!"),
    ("how are you", "I'm just a bunch of code, but I'm functioning perfectly! "
                    "How can I assist you today?"),
    ("php", "I can run behind a PHP backend too! Any server that speaks the same chat "
            "contract will do."),
    ("backend", "A backend server handles your requests when it is reachable. Right now "
                "I'm answering locally."),
)

QUESTION_REPLY = (
    "That's an interesting question! In a full implementation, I'd provide a detailed answer. "
    "For now, I can tell you that I'm an AI assistant designed to help with various tasks."
)
TIME_REPLY = (
    "The current time is {time}. In simulation mode, I can't access real-time data, "
    "but I'm here to help with other questions!"
)
MATH_REPLY = (
    "I can help with mathematical concepts and explanations! In simulation mode, I don't have "
    "calculation capabilities, but I can explain how to solve various math problems."
)
DEFAULT_REPLY = (
    'I understand you\'re asking about "{message}". Currently, I\'m running in simulation mode '
    "since the backend is not available. How can I help you with this topic?"
)


def match_keyword(message: str) -> Optional[str]:
    """Canned reply for the first table keyword contained in ``message``."""
    lowered = message.lower()
    for keyword, reply in KEYWORD_REPLIES:
        if keyword in lowered:
            return reply
    return None


def fallback_reply(message: str, now: Optional[datetime] = None) -> str:
    """
    Compute a reply locally.

    Order: keyword table, then ``time``, then ``?``, then ``calculate``/``math``,
    then the default reply echoing ``message``.
    """
    reply = match_keyword(message)
    if reply is not None:
        return reply

    lowered = message.lower()
    if "time" in lowered:
        return TIME_REPLY.format(time=format_time(now or datetime.now()))
    if "?" in lowered:
        return QUESTION_REPLY
    if "calculate" in lowered or "math" in lowered:
        return MATH_REPLY
    return DEFAULT_REPLY.format(message=message)
