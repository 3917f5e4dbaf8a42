"""
TaskChat - conversational task-management dialogue engine
通过自由文本聊天来新建、编辑、删除和查询任务。
"""

from .app import TaskChatApp

__version__ = "1.0.0"

__all__ = ['TaskChatApp']
