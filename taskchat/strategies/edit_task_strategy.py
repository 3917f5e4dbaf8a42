"""
EditTask Flow Strategy - 编辑任务流程策略
流程：select（按序号选择任务）→ edit（提交以该任务预填充的嵌入式表单）。
"""
from typing import Dict, List

from astrbot.api import logger

from .base import IFlowStrategy
from ..core.models import ChatSession, FormContent, Intent, ListContent, Task, TASK_FIELDS
from ..core.exceptions import SelectionRangeError, TaskStoreException
from ..core.validators import validate_task_fields


class EditTaskStrategy(IFlowStrategy):
    """编辑任务的具体策略实现"""

    intent = Intent.EDIT_TASK
    success_response = "task_edited"
    accepts_forms = True

    def expects_form(self, session: ChatSession) -> bool:
        return self.current_stage(session) == "edit" or super().expects_form(session)

    async def start(self, session: ChatSession):
        await self.start_list_flow(session)

    async def handle_input(self, session: ChatSession, text: str):
        if self.current_stage(session) == "edit":
            await self.say_response(session, "edit_stage_hint")
            return

        try:
            index = self.parse_selection(session, text)
        except SelectionRangeError as e:
            await self.say(session, str(e))
            return

        session.selected_task_index = index
        task = session.tasks[index - 1]
        session.captured = task.field_values()
        session.advance(len(self.flow))
        form = FormContent(purpose="edit", fields=TASK_FIELDS, values=tuple(task.field_values().items()))
        await self.say(session, form, self.ctx.responses.get_response("select_field_prompt"))

    async def handle_form(self, session: ChatSession, data: Dict[str, str]):
        if self.current_stage(session) != "edit":
            # 还没有选择任务
            await self.show_selection_list(session)
            return
        self.apply_form(session, data)
        await self.generate_confirmation(session)

    async def handle_back(self, session: ChatSession):
        session.selected_task_index = None
        session.captured = {}
        await self.say_response(session, "list_again")
        await self.show_selection_list(session)

    def validate(self, session: ChatSession) -> List[str]:
        return validate_task_fields(session.captured, self.ctx.today())

    async def summary(self, session: ChatSession) -> list:
        fields = {name: session.captured.get(name, "") for name in TASK_FIELDS}
        return [ListContent(tuple(await self.ctx.renderer.summary("Your task will be updated to:", fields)))]

    async def commit(self, session: ChatSession):
        original = session.selected_task()
        if original is None:
            raise TaskStoreException(f"Selected task {session.selected_task_index} is no longer cached")
        captured = session.captured
        edited = Task(
            id=original.id,
            title=captured.get("title", original.title),
            description=captured.get("description", original.description),
            category=captured.get("category", original.category),
            deadline=captured.get("deadline", original.deadline),
            priority=captured.get("priority", original.priority),
            reminder=captured.get("reminder") or None,
            completed=original.completed,
            points=original.points,
        )
        await self.ctx.repository.update_task(session.token, edited)
        logger.info(f"Task {edited.id} updated for user {session.user_id}")
