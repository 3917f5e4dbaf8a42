"""
AddTask Flow Strategy - 新建任务流程策略
支持两种采集形态：
- form: 用户一次性提交整张嵌入式表单，所有校验推迟到确认时批量进行；
- fields: 逐字段提问，每个字段输入后立即校验，通过后才进入下一阶段。
"""
from typing import Dict, List

from astrbot.api import logger

from .base import IFlowStrategy
from ..core.models import ChatSession, FormContent, Intent, ListContent, TaskDraft, TASK_FIELDS
from ..core.validators import validate_field, validate_task_fields


class AddTaskStrategy(IFlowStrategy):
    """新建任务的具体策略实现"""

    intent = Intent.ADD_TASK
    success_response = "task_added"
    accepts_forms = True

    @property
    def uses_form(self) -> bool:
        return self.ctx.catalog.add_task_flow == "form"

    def expects_form(self, session: ChatSession) -> bool:
        # 逐字段形态下，采集阶段的文本一律是字段值
        return self.uses_form or super().expects_form(session)

    async def start(self, session: ChatSession):
        responses = self.ctx.responses
        await self.say(session, responses.quit_instruction(), responses.back_instruction(),
                       responses.get_response("ready"))
        if self.uses_form:
            await self.say(session, responses.get_response("add_form_prompt"),
                           FormContent(purpose="add", fields=TASK_FIELDS))
        else:
            await self.say_response(session, "add_title_prompt")

    async def handle_input(self, session: ChatSession, text: str):
        if self.uses_form:
            # 表单形态下普通文本不推进流程
            await self.say_response(session, "add_form_prompt")
            return

        stage = self.current_stage(session)
        value = text.strip()
        errors = validate_field(stage, value, session.captured, self.ctx.today())
        if errors:
            logger.debug(f"Rejected {stage} input for user {session.user_id}: {errors}")
            await self.say(session, self.ctx.responses.try_again(errors[0]))
            return

        session.captured[stage] = value
        if self.ctx.catalog.is_last_stage(self.intent, session.stage_index):
            await self.generate_confirmation(session)
            return

        session.advance(len(self.flow))
        await self.say(session, self.ctx.responses.next_field_prompt(self.current_stage(session)))

    async def handle_form(self, session: ChatSession, data: Dict[str, str]):
        session.captured = self.clean_form(data)
        await self.generate_confirmation(session)

    async def handle_back(self, session: ChatSession):
        await self.say_response(session, "reinput_field", stage=self.current_stage(session))

    def validate(self, session: ChatSession) -> List[str]:
        return validate_task_fields(session.captured, self.ctx.today())

    async def summary(self, session: ChatSession) -> list:
        fields = {name: session.captured.get(name, "") for name in TASK_FIELDS}
        return [ListContent(tuple(await self.ctx.renderer.summary("Your new task to be added will be:", fields)))]

    async def commit(self, session: ChatSession):
        task = await self.ctx.repository.create_task(session.token, TaskDraft.from_fields(session.captured))
        logger.info(f"Task {task.id} created for user {session.user_id}")
