"""
Query Intent Handlers - 查询类意图处理器
Weather 和 AllTasks 不进入采集流程，由这里的处理器直接回复。
- IQueryHandler: 查询处理器接口。
- QueryHandlerFactory: 根据意图返回相应的处理器（工厂模式）。
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from astrbot.api import logger

from ..core.models import ChatSession, ClassifierResult, Intent, ListContent
from ..core.exceptions import TaskStoreException, WeatherException
from ..services.weather import WeatherClient
from ..strategies.base import DialogueContext


class IQueryHandler(ABC):
    """查询处理器接口"""

    def __init__(self, ctx: DialogueContext):
        self.ctx = ctx

    @abstractmethod
    async def handle(self, session: ChatSession, result: ClassifierResult):
        """
        直接回复一个查询意图。

        :param session: 当前会话。
        :param result: 意图分类结果（包含可选的 API_Key）。
        """
        pass


class WeatherQueryHandler(IQueryHandler):
    """'Weather' 意图的处理器"""

    def __init__(self, ctx: DialogueContext, weather_client: Optional[WeatherClient] = None):
        super().__init__(ctx)
        self.weather_client = weather_client

    async def handle(self, session: ChatSession, result: ClassifierResult):
        if self.weather_client is None:
            logger.warning("Weather intent received but no weather client is configured")
            await self.ctx.emitter.say(session.log, self.ctx.responses.get_response("weather_error"))
            return
        try:
            text = await self.weather_client.current_weather(result.api_key or "")
        except WeatherException as e:
            logger.error(f"Weather lookup failed: {e}")
            await self.ctx.emitter.say(session.log, self.ctx.responses.get_response("weather_error"))
            return
        await self.ctx.emitter.say(session.log, text)


class AllTasksQueryHandler(IQueryHandler):
    """'AllTasks' 意图的处理器：刷新缓存后列出所有任务"""

    async def handle(self, session: ChatSession, result: ClassifierResult):
        await self.ctx.emitter.say(session.log, self.ctx.responses.get_response("obtaining_tasks"))
        try:
            session.tasks = await self.ctx.repository.list_tasks(session.token)
        except TaskStoreException as e:
            # 拉取失败时仍然展示旧缓存
            logger.error(f"Failed to fetch tasks for user {session.user_id}: {e}")
        lines = await self.ctx.renderer.all_tasks(session.tasks)
        await self.ctx.emitter.say(session.log, ListContent(tuple(lines)))


class QueryHandlerFactory:
    """查询处理器工厂"""

    def __init__(self, ctx: DialogueContext, weather_client: Optional[WeatherClient] = None):
        self._handlers: Dict[Intent, IQueryHandler] = {
            Intent.WEATHER: WeatherQueryHandler(ctx, weather_client),
            Intent.ALL_TASKS: AllTasksQueryHandler(ctx),
        }

    def get_handler(self, intent: Intent) -> Optional[IQueryHandler]:
        """获取查询处理器"""
        return self._handlers.get(intent)
