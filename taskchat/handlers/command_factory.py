"""
Command factory using Factory pattern
命令工厂，采用工厂模式
"""

from typing import Optional
from .command_handlers import (
    ICommandHandler, LoginCommandHandler, LogoutCommandHandler, HelpCommandHandler
)


class CommandFactory:
    """命令处理器工厂"""

    def __init__(self, app):
        self.app = app
        self._handlers = {}
        self._register_handlers()

    def _register_handlers(self):
        """注册所有命令处理器"""
        self._handlers.update({
            'login': LoginCommandHandler(self.app),
            'logout': LogoutCommandHandler(self.app),
            'help': HelpCommandHandler(self.app)
        })

    def get_handler(self, command: str) -> Optional[ICommandHandler]:
        """获取命令处理器"""
        return self._handlers.get(command.lower())
