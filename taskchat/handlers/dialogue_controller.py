"""
Dialogue Controller - 对话控制器
本模块是对话引擎的核心，实现了每个会话的状态机：Idle → Capturing → Confirming → Idle。
- 每一轮用户输入先按会话模式分派：确认模式、采集模式，或转发给意图分类服务的空闲模式。
- 退出与后退关键字总是优先于意图相关的处理（先退出，后后退）。
- 具体的阶段处理委托给各意图的流程策略（策略模式），查询类意图交给查询处理器工厂。
- 所有错误都在产生它的那一轮内处理，不会让会话崩溃；最坏情况是用户通过退出命令恢复。

同一会话的各轮输入通过会话锁串行处理，因此一轮中的机器人消息不会与并发到达的用户消息交错。
"""

from typing import Dict, List, Optional

from astrbot.api import logger

from ..core.flows import is_back, is_confirm, is_quit, is_unconfirm
from ..core.models import ChatSession, ClassifierResult, Intent, ListContent, Message, Origin, SessionMode
from ..core.exceptions import (
    ClassifierException, ConfirmationAmbiguousError, DesyncError,
    TaskChatException, TaskStoreException, ValidationError
)
from ..services.intent_classifier import IIntentClassifier
from ..services.weather import WeatherClient
from ..strategies.base import DialogueContext, IFlowStrategy
from ..strategies.add_task_strategy import AddTaskStrategy
from ..strategies.edit_task_strategy import EditTaskStrategy
from ..strategies.delete_task_strategy import DeleteTaskStrategy
from ..utils.form_parser import parse_form_submission
from ..utils.session_manager import ISessionObserver
from .query_handlers import QueryHandlerFactory


class DialogueController(ISessionObserver):
    """
    对话控制器
    持有流程策略与查询处理器，会话对象由调用方以引用方式传入。
    同时作为 SessionManager 的观察者，在会话创建时完成问候与任务快照引导。
    """

    def __init__(self, ctx: DialogueContext, classifier: IIntentClassifier,
                 weather_client: Optional[WeatherClient] = None):
        """
        初始化对话控制器

        :param ctx: 共享依赖容器（任务仓储、响应、渲染、发射器、流程目录）
        :param classifier: 意图分类服务
        :param weather_client: 天气服务客户端，可选
        """
        self.ctx = ctx
        self.classifier = classifier
        self.strategies: Dict[Intent, IFlowStrategy] = {
            Intent.ADD_TASK: AddTaskStrategy(ctx),
            Intent.EDIT_TASK: EditTaskStrategy(ctx),
            Intent.DELETE_TASK: DeleteTaskStrategy(ctx),
        }
        self.query_handlers = QueryHandlerFactory(ctx, weather_client)

    # ------------------------------------------------------------------
    # 会话引导（观察者回调）
    # ------------------------------------------------------------------

    async def on_session_started(self, session: ChatSession):
        """问候用户并拉取已有任务，作为按序号选择时使用的缓存。"""
        await self.ctx.emitter.say(session.log, self.ctx.responses.greeting(session.username))
        try:
            session.tasks = await self.ctx.repository.list_tasks(session.token)
        except TaskStoreException as e:
            logger.error(f"Session bootstrap failed for user {session.user_id}: {e}")

    # ------------------------------------------------------------------
    # 对外入口
    # ------------------------------------------------------------------

    async def handle_turn(self, session: ChatSession, text: str) -> List[Message]:
        """
        处理一轮用户文本输入。
        只有在当前阶段需要表单时，"field: value" 形式的文本才按表单提交处理。

        :param session: 当前用户的会话。
        :param text: 用户输入。
        :return: 本轮产生的机器人消息（按顺序）。
        """
        async with session.turn_lock:
            start = session.log.next_sequence
            if not text or not text.strip():
                return []
            session.log.add_user_message(text)
            form = parse_form_submission(text) if self.expects_form(session) else None
            try:
                if form is not None:
                    await self._dispatch_form(session, form)
                else:
                    await self._dispatch(session, text)
            except TaskChatException as e:
                logger.error(f"Unhandled dialogue error for user {session.user_id}: {e}")
            return self._bot_messages_since(session, start)

    async def submit_form(self, session: ChatSession, data: Dict[str, str]) -> List[Message]:
        """
        处理一次嵌入式表单提交（整张表单作为一轮输入）。

        :param session: 当前用户的会话。
        :param data: 字段名到字段值的映射。
        :return: 本轮产生的机器人消息（按顺序）。
        """
        async with session.turn_lock:
            start = session.log.next_sequence
            session.log.append(Origin.USER, ListContent(tuple(f"{k}: {v}" for k, v in data.items())))
            try:
                await self._dispatch_form(session, data)
            except TaskChatException as e:
                logger.error(f"Unhandled form error for user {session.user_id}: {e}")
            return self._bot_messages_since(session, start)

    def expects_form(self, session: ChatSession) -> bool:
        """当前会话阶段是否接受表单提交。"""
        strategy = self.strategies.get(session.intent)
        return session.in_flow and strategy is not None and strategy.expects_form(session)

    @staticmethod
    def _bot_messages_since(session: ChatSession, start: int) -> List[Message]:
        return [m for m in session.log.since(start) if m.origin is Origin.BOT]

    # ------------------------------------------------------------------
    # 模式分派
    # ------------------------------------------------------------------

    async def _dispatch(self, session: ChatSession, text: str):
        if session.mode is SessionMode.CONFIRMING:
            await self._handle_confirming(session, text)
        elif session.mode is SessionMode.CAPTURING:
            await self._handle_capturing(session, text)
        else:
            await self._handle_idle(session, text)

    async def _dispatch_form(self, session: ChatSession, data: Dict[str, str]):
        strategy = self.strategies.get(session.intent)
        if not session.in_flow or strategy is None:
            await self._handle_desync(session, "form submission")
            return

        if session.mode is SessionMode.CAPTURING:
            await strategy.handle_form(session, data)
            return

        # 确认模式下重新提交表单等同于带新数据的确认
        if not strategy.accepts_forms:
            await self._say_response(session, "confirmation_unclear")
            return
        strategy.apply_form(session, data)
        await self._confirm(session, strategy)

    async def _handle_idle(self, session: ChatSession, text: str):
        if is_confirm(text) or is_unconfirm(text):
            await self._handle_desync(session, text)
            return

        try:
            result = await self.classifier.classify(session.token, text)
        except ClassifierException as e:
            logger.error(f"Intent classification failed for user {session.user_id}: {e}")
            await self._say_response(session, "classifier_error")
            return

        if result.response:
            await self.ctx.emitter.say(session.log, result.response)
        elif result.intent is Intent.NONE:
            # 分类器没有任何回复时用闲聊语句兜底
            await self.ctx.emitter.say(session.log, self.ctx.responses.filler("greeting_idle"))
        await self.handle_intent(session, result)

    async def handle_intent(self, session: ChatSession, result: ClassifierResult):
        """分类结果重新进入控制器：查询直接回复，其余意图进入采集模式。"""
        intent = result.intent
        if intent.is_query:
            handler = self.query_handlers.get_handler(intent)
            if handler:
                await handler.handle(session, result)
            return

        strategy = self.strategies.get(intent)
        if strategy is None:
            return

        session.enter_flow(intent)
        logger.info(f"User {session.user_id} entered {intent.value} flow")
        await strategy.start(session)

    async def _handle_capturing(self, session: ChatSession, text: str):
        strategy = self.strategies[session.intent]

        if is_quit(text):
            session.reset()
            await self._say_response(session, "quitting", "back_to_normal")
            return

        if is_back(text):
            if not session.step_back():
                await self._say_response(session, "already_beginning")
                return
            await self._say_response(session, "understood")
            await strategy.handle_back(session)
            return

        await strategy.handle_input(session, text)

    async def _handle_confirming(self, session: ChatSession, text: str):
        if is_unconfirm(text) or is_quit(text):
            session.reset()
            await self._say_response(session, "leaving_confirmation", "back_to_normal")
            return

        try:
            self._require_confirmation(text)
        except ConfirmationAmbiguousError:
            await self._say_response(session, "confirmation_unclear")
            return

        await self._confirm(session, self.strategies.get(session.intent))

    @staticmethod
    def _require_confirmation(text: str):
        if not is_confirm(text):
            raise ConfirmationAmbiguousError(f"Unclear confirmation: {text!r}")

    async def _confirm(self, session: ChatSession, strategy: Optional[IFlowStrategy]):
        """确认入口：校验失败时汇总错误并保持确认模式。"""
        try:
            if strategy is None or session.intent is Intent.NONE:
                raise DesyncError("Confirmation received without an active intent")
            await strategy.confirm(session)
        except DesyncError:
            await self._handle_desync(session, "confirmation")
        except ValidationError as e:
            logger.debug(f"Validation failed for user {session.user_id}: {e.errors}")
            await self.ctx.emitter.say(
                session.log,
                self.ctx.responses.get_response("invalid_fields"),
                ListContent(tuple(e.errors))
            )

    async def _handle_desync(self, session: ChatSession, what: str):
        """没有进行中的意图时收到确认类输入：回复一句随机闲聊，而不是报错。"""
        logger.info(f"Desynchronized {what} from user {session.user_id} ignored")
        await self.ctx.emitter.say(session.log, self.ctx.responses.filler("what_next"))

    async def _say_response(self, session: ChatSession, *response_types: str):
        await self.ctx.emitter.say(
            session.log, *[self.ctx.responses.get_response(name) for name in response_types]
        )
