"""
Command Handlers - 命令处理器
本模块采用命令模式（Command Pattern）和工厂模式（Factory Pattern）处理 `#` 开头的会话管理命令。
- ICommandHandler: 定义了所有命令处理器的统一接口（命令接口）。
- 每个具体命令处理器封装了执行特定命令（#login, #logout, #help）所需的全部逻辑。
- CommandFactory（在 command_factory.py 中）负责根据命令名称返回相应的处理器实例。
命令处理器返回纯文本回复，由宿主平台负责发送。
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.exceptions import CommandException


class ICommandHandler(ABC):
    """
    命令处理器接口（Command Interface）
    定义了所有具体命令处理器必须实现的 `handle` 方法。
    """

    def __init__(self, app):
        self.app = app

    @abstractmethod
    async def handle(self, user_id: str, args: List[str]) -> Optional[List[str]]:
        """
        处理命令的抽象方法。

        :param user_id: 发送命令的用户。
        :param args: 解析后的命令参数列表。
        :return: 回复给用户的文本列表，None 表示不回复。
        """
        pass


class LoginCommandHandler(ICommandHandler):
    """'#login' 命令的具体处理器：创建会话并引导任务快照"""

    async def handle(self, user_id: str, args: List[str]) -> Optional[List[str]]:
        token = args[0] if args else self.app.config.get("task_store_token", "")
        if not token:
            raise CommandException("Please provide a token. Usage: #login <token> [username]")
        username = " ".join(args[1:]) or None
        session = await self.app.session_manager.start_session(user_id, token, username)
        return await self.app.render_messages(session.log.messages)


class LogoutCommandHandler(ICommandHandler):
    """'#logout' 命令的具体处理器：销毁会话"""

    async def handle(self, user_id: str, args: List[str]) -> Optional[List[str]]:
        session = await self.app.session_manager.end_session(user_id)
        if session is None:
            response = self.app.responses.get_response("not_logged_in")
        else:
            response = self.app.responses.get_response("logged_out")
        return [response] if response else None


class HelpCommandHandler(ICommandHandler):
    """'#help' 命令的具体处理器"""

    HELP_TEXT = (
        "📝 TaskChat\n"
        "#login <token> [name] - start chatting with your task assistant\n"
        "#logout - end the chat session\n"
        "#help - show this help\n"
        "Then just tell me what you want, e.g. \"add a task\", \"delete a task\", "
        "\"edit a task\", \"show my tasks\" or \"what's the weather\"."
    )

    async def handle(self, user_id: str, args: List[str]) -> Optional[List[str]]:
        return [self.HELP_TEXT]
