"""
TaskChat Application - 应用装配
负责根据配置初始化并装配所有核心组件（API 客户端、流程目录、响应管理器、渲染器、
对话控制器、会话管理器、命令工厂），并把一条原始聊天消息分发到命令处理器或对话控制器。
宿主（如 AstrBot 插件）只需要持有一个 TaskChatApp 实例。
"""

import asyncio
import random
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from astrbot.api import logger

from .core.flows import FlowCatalog
from .core.models import FormContent, ListContent, Message, Origin, TextContent
from .core.exceptions import CommandException
from .handlers.command_factory import CommandFactory
from .handlers.dialogue_controller import DialogueController
from .services.intent_classifier import IIntentClassifier, IntentClassifierClient
from .services.task_store import ITaskRepository, TaskStoreClient
from .services.weather import WeatherClient
from .strategies.base import DialogueContext
from .utils.message_log import BotEmitter
from .utils.response_manager import ResponseManager
from .utils.session_manager import SessionManager
from .utils.template_renderer import Jinja2TemplateRenderer


class TaskChatApp:
    """
    TaskChat 应用
    采用依赖注入的方式将各个模块组合在一起；测试时可以注入假的仓储、分类器、时钟和随机数。
    """

    def __init__(self, config: Dict[str, Any],
                 repository: Optional[ITaskRepository] = None,
                 classifier: Optional[IIntentClassifier] = None,
                 weather_client: Optional[WeatherClient] = None,
                 sleep: Callable = asyncio.sleep,
                 rng: Optional[random.Random] = None,
                 today: Callable[[], date] = date.today):
        self.config = config
        self._init_components(repository, classifier, weather_client, sleep, rng, today)

    def _init_components(self, repository, classifier, weather_client, sleep, rng, today):
        """初始化并装配所有核心组件。"""
        timeout = self.config.get("request_timeout", 10)

        # API 客户端（仓储模式）
        self.repository = repository or TaskStoreClient(
            base_url=self.config.get("task_store_base_url", "http://localhost:5001"),
            timeout=timeout
        )
        self.classifier = classifier or IntentClassifierClient(
            base_url=self.config.get("classifier_base_url", "http://localhost:5500"),
            model=self.config.get("classifier_model", "model.tflearn"),
            timeout=timeout
        )
        self.weather_client = weather_client or self._build_weather_client(timeout)

        self.responses = ResponseManager(dict(self.config), rng)
        self.renderer = Jinja2TemplateRenderer(dict(self.config))
        self.emitter = BotEmitter(delay=self.config.get("thinking_delay_ms", 800) / 1000, sleep=sleep)

        self.context = DialogueContext(
            repository=self.repository,
            responses=self.responses,
            renderer=self.renderer,
            emitter=self.emitter,
            catalog=FlowCatalog(self.config.get("add_task_flow", "form")),
            confirmation_delay=self.config.get("confirmation_delay_ms", 1000) / 1000,
            today=today
        )

        # 对话控制器同时是会话管理器的观察者（负责会话引导）
        self.controller = DialogueController(self.context, self.classifier, self.weather_client)
        self.session_manager = SessionManager()
        self.session_manager.add_observer(self.controller)

        # 命令工厂（工厂模式）
        self.command_factory = CommandFactory(self)

    def _build_weather_client(self, timeout: float) -> Optional[WeatherClient]:
        weather_config = self.config.get("weather", {})
        if "latitude" not in weather_config or "longitude" not in weather_config:
            return None
        return WeatherClient(
            latitude=float(weather_config["latitude"]),
            longitude=float(weather_config["longitude"]),
            units=weather_config.get("units", "metric"),
            timeout=timeout
        )

    async def handle_message(self, user_id: str, text: str) -> List[str]:
        """
        处理一条原始聊天消息。

        :param user_id: 发送者标识。
        :param text: 消息文本。
        :return: 按顺序排列的回复文本。
        """
        if not text or not text.strip():
            return []

        if text.strip().startswith('#'):
            return await self._handle_command(user_id, text.strip())

        replies: List[str] = []
        session = self.session_manager.get_session(user_id)
        if session is None:
            token = self.config.get("task_store_token", "")
            if not token:
                response = self.responses.get_response("not_logged_in")
                return [response] if response else []
            session = await self.session_manager.start_session(user_id, token)
            replies.extend(await self.render_messages(session.log.messages))

        messages = await self.controller.handle_turn(session, text)
        replies.extend(await self.render_messages(messages))
        return replies

    async def _handle_command(self, user_id: str, text: str) -> List[str]:
        command_parts = text[1:].split()
        if not command_parts:
            return []
        command, args = command_parts[0].lower(), command_parts[1:]

        handler = self.command_factory.get_handler(command)
        if handler is None:
            response = self.responses.command_unknown(command)
            return [response] if response else []
        try:
            return await handler.handle(user_id, args) or []
        except CommandException as e:
            logger.error(f"Command #{command} failed: {e}")
            return [str(e)]

    async def render_messages(self, messages: Iterable[Message]) -> List[str]:
        """把机器人消息渲染为纯文本（列表逐行拼接，表单渲染为字段行）。"""
        rendered = []
        for message in messages:
            if message.origin is not Origin.BOT:
                continue
            content = message.content
            if isinstance(content, TextContent):
                rendered.append(content.text)
            elif isinstance(content, ListContent):
                rendered.append("\n".join(content.items))
            elif isinstance(content, FormContent):
                rendered.append(await self.renderer.form(content))
        return rendered

    async def close(self):
        """关闭所有 HTTP 客户端"""
        for client in (self.repository, self.classifier, self.weather_client):
            close = getattr(client, "close", None)
            if close is not None:
                await close()
