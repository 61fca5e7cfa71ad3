from fastapi import Request

from chat_relay.anthropic_client import ChatCompleter
from chat_relay.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_completer(request: Request) -> ChatCompleter:
    return request.app.state.completer
