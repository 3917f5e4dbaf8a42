"""
Base Flow Strategy - 采集流程策略基类
本模块定义了所有意图流程策略的抽象基类 IFlowStrategy，以及策略共享的依赖容器 DialogueContext。
每个需要采集字段的意图（AddTask / EditTask / DeleteTask）各有一个具体策略，
对话控制器只负责模式判断（退出、后退、确认），具体的阶段处理交给策略。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List

from astrbot.api import logger

from ..core.flows import FlowCatalog
from ..core.models import ChatSession, Intent, ListContent, SessionMode, TASK_FIELDS
from ..core.exceptions import SelectionRangeError, TaskStoreException, ValidationError
from ..services.task_store import ITaskRepository
from ..utils.message_log import BotEmitter
from ..utils.response_manager import ResponseManager
from ..utils.template_renderer import Jinja2TemplateRenderer


@dataclass
class DialogueContext:
    """策略与控制器共享的依赖"""
    repository: ITaskRepository
    responses: ResponseManager
    renderer: Jinja2TemplateRenderer
    emitter: BotEmitter
    catalog: FlowCatalog = field(default_factory=FlowCatalog)
    confirmation_delay: float = 1.0
    today: Callable[[], date] = date.today


class IFlowStrategy(ABC):
    """
    流程策略接口
    定义了一个意图从开始采集到提交的全部阶段行为。
    """

    intent: Intent = Intent.NONE
    success_response: str = ""
    # 确认模式下是否接受重新提交的表单（视为带新数据的确认）
    accepts_forms: bool = False

    def __init__(self, ctx: DialogueContext):
        """
        初始化策略。

        :param ctx: 共享依赖容器。
        """
        self.ctx = ctx

    # ------------------------------------------------------------------
    # 共享工具方法
    # ------------------------------------------------------------------

    @property
    def flow(self):
        return self.ctx.catalog.get(self.intent)

    def current_stage(self, session: ChatSession) -> str:
        return self.flow[session.stage_index]

    async def say(self, session: ChatSession, *contents):
        """按顺序发出机器人消息，None 会被跳过。"""
        return await self.ctx.emitter.say(session.log, *contents)

    async def say_response(self, session: ChatSession, response_type: str, **kwargs):
        return await self.say(session, self.ctx.responses.get_response(response_type, **kwargs))

    async def refresh_tasks(self, session: ChatSession) -> bool:
        """
        从任务存储重新拉取任务快照。
        失败时记录日志并保留旧缓存。
        """
        try:
            session.tasks = await self.ctx.repository.list_tasks(session.token)
            return True
        except TaskStoreException as e:
            logger.error(f"Failed to fetch tasks for user {session.user_id}: {e}")
            return False

    def parse_selection(self, session: ChatSession, text: str) -> int:
        """
        把用户输入解析为 1 起始的任务序号。
        先检查“是否为数字”，再检查“是否在范围内”。

        :raises SelectionRangeError: 输入不是整数或超出缓存列表范围。
        """
        try:
            index = int(text.strip())
        except ValueError:
            raise SelectionRangeError(self.ctx.responses.get_response("not_a_number"))
        if not 1 <= index <= len(session.tasks):
            raise SelectionRangeError(self.ctx.responses.out_of_range(self.intent.value))
        return index

    async def show_selection_list(self, session: ChatSession):
        await self.say(
            session,
            self.ctx.responses.select_prompt(self.intent.value, len(session.tasks)),
            ListContent(tuple(await self.ctx.renderer.task_lines(session.tasks)))
        )

    async def start_list_flow(self, session: ChatSession) -> bool:
        """
        列表型流程的开场：说明、拉取任务、展示带序号的列表。
        没有任务时回到空闲状态并返回 False。
        """
        responses = self.ctx.responses
        await self.say(session, responses.quit_instruction(), responses.back_instruction(),
                       responses.get_response("obtaining_tasks"))
        await self.refresh_tasks(session)
        if not session.tasks:
            session.reset()
            await self.say_response(session, "no_tasks")
            return False
        await self.say_response(session, "ready")
        await self.show_selection_list(session)
        return True

    @staticmethod
    def clean_form(data: Dict[str, str]) -> Dict[str, str]:
        return {name: (data.get(name) or "").strip() for name in TASK_FIELDS if name in data}

    async def generate_confirmation(self, session: ChatSession):
        """
        生成确认摘要并切换到确认模式。
        摘要之前有一次固定的“思考”停顿。
        """
        await self.say_response(session, "hold_on")
        await self.ctx.emitter.pause(self.ctx.confirmation_delay)
        await self.say(session, *await self.summary(session))
        await self.say(session, ListContent(tuple(self.ctx.responses.confirm_instructions())))
        session.mode = SessionMode.CONFIRMING

    async def confirm(self, session: ChatSession):
        """
        确认入口：校验、提交、回到空闲状态。

        :raises ValidationError: 批量校验失败，会话保持在确认模式。
        """
        session.pending_errors = []
        errors = self.validate(session)
        if errors:
            session.pending_errors = errors
            raise ValidationError(errors)

        try:
            await self.commit(session)
        except TaskStoreException as e:
            logger.error(f"{self.intent.value} commit failed for user {session.user_id}: {e}")
            session.reset()
            await self.say_response(session, "task_store_error", error=str(e))
            return

        session.reset()
        await self.say_response(session, self.success_response)
        await self.refresh_tasks(session)

    # ------------------------------------------------------------------
    # 具体策略实现的阶段行为
    # ------------------------------------------------------------------

    @abstractmethod
    async def start(self, session: ChatSession):
        """进入流程后发出开场说明。"""
        pass

    @abstractmethod
    async def handle_input(self, session: ChatSession, text: str):
        """处理采集模式下的一轮文本输入（退出/后退已由控制器处理）。"""
        pass

    async def handle_form(self, session: ChatSession, data: Dict[str, str]):
        """处理采集模式下的表单提交，默认不接受表单。"""
        await self.say_response(session, "edit_stage_hint")

    def expects_form(self, session: ChatSession) -> bool:
        """当前阶段是否把 "field: value" 文本视为表单提交。"""
        return session.mode is SessionMode.CONFIRMING and self.accepts_forms

    def apply_form(self, session: ChatSession, data: Dict[str, str]):
        """把表单提交的字段合并到已采集的数据中。"""
        session.captured.update(self.clean_form(data))

    async def handle_back(self, session: ChatSession):
        """后退成功后重新提示上一阶段。"""
        pass

    def validate(self, session: ChatSession) -> List[str]:
        """提交前的批量校验，返回错误列表。"""
        return []

    @abstractmethod
    async def summary(self, session: ChatSession) -> list:
        """确认摘要（消息内容列表）。"""
        pass

    @abstractmethod
    async def commit(self, session: ChatSession):
        """调用任务存储提交变更。"""
        pass
