"""
Utils package
"""

from .session_manager import ISessionObserver, SessionManager
from .template_renderer import ITemplateRenderer, Jinja2TemplateRenderer
from .message_log import MessageLog, BotEmitter
from .response_manager import ResponseManager
from .form_parser import parse_form_submission

__all__ = [
    'ISessionObserver', 'SessionManager', 'ITemplateRenderer', 'Jinja2TemplateRenderer',
    'MessageLog', 'BotEmitter', 'ResponseManager', 'parse_form_submission'
]
