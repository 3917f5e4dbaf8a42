"""
DeleteTask Flow Strategy - 删除任务流程策略
流程只有一个 select 阶段，选中后直接生成确认。
"""

from astrbot.api import logger

from .base import IFlowStrategy
from ..core.models import ChatSession, Intent
from ..core.exceptions import SelectionRangeError, TaskStoreException


class DeleteTaskStrategy(IFlowStrategy):
    """删除任务的具体策略实现"""

    intent = Intent.DELETE_TASK
    success_response = "task_deleted"

    async def start(self, session: ChatSession):
        await self.start_list_flow(session)

    async def handle_input(self, session: ChatSession, text: str):
        try:
            index = self.parse_selection(session, text)
        except SelectionRangeError as e:
            await self.say(session, str(e))
            return

        session.selected_task_index = index
        await self.generate_confirmation(session)

    async def handle_form(self, session, data):
        await self.show_selection_list(session)

    async def summary(self, session: ChatSession) -> list:
        index = session.selected_task_index
        return [await self.ctx.renderer.delete_confirmation(index, session.tasks[index - 1])]

    async def commit(self, session: ChatSession):
        task = session.selected_task()
        if task is None:
            raise TaskStoreException(f"Selected task {session.selected_task_index} is no longer cached")
        await self.ctx.repository.delete_task(session.token, task.id)
        logger.info(f"Task {task.id} deleted for user {session.user_id}")
