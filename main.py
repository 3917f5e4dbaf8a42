"""
TaskChat Main Plugin - 插件主入口
本文件作为插件的入口点，核心职责是：
1. 注册插件信息。
2. 根据插件配置装配 TaskChatApp（任务存储客户端、意图分类客户端、对话控制器等）。
3. 监听私聊与群聊消息，把每条消息交给 TaskChatApp，并按顺序回复机器人消息。
4. 管理插件的生命周期，如结束所有会话并关闭 HTTP 客户端。
"""

from astrbot.api.event import filter, AstrMessageEvent
from astrbot.api.star import Context, Star, register
from astrbot.api import logger, AstrBotConfig

from .taskchat.app import TaskChatApp


@register("TaskChat", "TaskChat", "通过聊天管理任务的对话助手：新建、编辑、删除和查询任务", "1.0.0", "https://github.com/TaskChat/TaskChatBot")
class TaskChatPlugin(Star):
    """
    TaskChat 主插件类
    作为宿主平台与对话引擎之间的适配层，所有对话逻辑都在 TaskChatApp 中。
    """

    def __init__(self, context: Context, config: AstrBotConfig):
        super().__init__(context)
        self.config = config
        self.app = TaskChatApp(dict(self.config))
        logger.info("[TaskChat] 插件初始化完成")

    @filter.event_message_type(filter.EventMessageType.PRIVATE_MESSAGE)
    async def on_private_message(self, event: AstrMessageEvent):
        """处理私聊消息"""
        async for result in self._handle_message(event):
            yield result

    @filter.event_message_type(filter.EventMessageType.GROUP_MESSAGE)
    async def on_group_message(self, event: AstrMessageEvent):
        """
        处理群聊消息
        群聊中只响应命令和已登录用户的消息，避免打扰其他成员。
        """
        user_id = event.get_sender_id()
        message_text = event.message_str.strip()
        if not message_text.startswith('#') and self.app.session_manager.get_session(user_id) is None:
            return
        async for result in self._handle_message(event):
            yield result

    async def _handle_message(self, event: AstrMessageEvent):
        """
        统一的消息处理方法
        每条机器人消息作为一条独立的回复按顺序发出。
        """
        user_id = event.get_sender_id()
        message_text = event.message_str.strip()

        try:
            replies = await self.app.handle_message(user_id, message_text)
        except Exception as e:
            logger.error(f"TaskChat message handling error: {e}")
            return

        for reply in replies:
            yield event.plain_result(reply)

    async def terminate(self):
        """
        插件终止时的清理工作
        结束所有活跃会话并关闭 API 客户端
        """
        try:
            for user_id in list(self.app.session_manager.sessions.keys()):
                await self.app.session_manager.end_session(user_id)

            await self.app.close()

            logger.info("TaskChat plugin terminated successfully")

        except Exception as e:
            logger.error(f"Error during plugin termination: {e}")
