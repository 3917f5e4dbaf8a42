"""
Session Management Utilities - 会话管理工具
本模块采用观察者模式（Observer Pattern）来管理对话会话的生命周期。
- SessionManager: 作为被观察者（Subject），负责创建（登录）和销毁（登出）每个用户的会话，并通知观察者。
- ISessionObserver: 定义了观察者（Observer）必须实现的接口。
会话对象之间不共享任何状态，每个用户只有一个活跃会话。
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from astrbot.api import logger

from ..core.models import ChatSession


class ISessionObserver(ABC):
    """
    会话观察者接口
    任何希望在会话开始或结束时收到通知的类都应实现此接口。
    """

    @abstractmethod
    async def on_session_started(self, session: ChatSession):
        """
        会话创建后由 SessionManager 调用的回调方法。

        :param session: 新创建的会话对象。
        """
        pass

    async def on_session_ended(self, session: ChatSession):
        """会话销毁后调用，默认不做任何事。"""
        pass


class SessionManager:
    """
    对话会话管理器（被观察者）
    负责创建、查询和销毁所有用户的对话会话。
    """

    def __init__(self):
        self.sessions: Dict[str, ChatSession] = {}
        self.observers: List[ISessionObserver] = []

    def add_observer(self, observer: ISessionObserver):
        """添加一个观察者。"""
        if observer not in self.observers:
            self.observers.append(observer)

    def remove_observer(self, observer: ISessionObserver):
        """移除一个观察者。"""
        if observer in self.observers:
            self.observers.remove(observer)

    async def _notify_started(self, session: ChatSession):
        for observer in self.observers:
            try:
                await observer.on_session_started(session)
            except Exception as e:
                logger.error(f"会话观察者在处理会话开始事件时出错: {e}")

    async def _notify_ended(self, session: ChatSession):
        for observer in self.observers:
            try:
                await observer.on_session_ended(session)
            except Exception as e:
                logger.error(f"会话观察者在处理会话结束事件时出错: {e}")

    async def start_session(self, user_id: str, token: str, username: Optional[str] = None) -> ChatSession:
        """
        为指定用户创建一个新的会话（登录）。
        如果用户已有会话，将先结束旧会话。

        :param user_id: 用户的唯一标识符。
        :param token: 访问任务存储服务的 Bearer 凭证。
        :param username: 用于问候的用户名。
        :return: 新创建的会话对象。
        """
        if user_id in self.sessions:
            await self.end_session(user_id)

        session = ChatSession(user_id=user_id, token=token, username=username)
        self.sessions[user_id] = session
        logger.info(f"Chat session started for user {user_id}")
        await self._notify_started(session)
        return session

    def get_session(self, user_id: str) -> Optional[ChatSession]:
        return self.sessions.get(user_id)

    async def end_session(self, user_id: str) -> Optional[ChatSession]:
        """
        销毁一个用户的会话（登出）。

        :param user_id: 用户的唯一标识符。
        :return: 被销毁的会话对象，如果会话不存在则返回 None。
        """
        session = self.sessions.pop(user_id, None)
        if session:
            logger.info(f"Chat session ended for user {user_id}")
            await self._notify_ended(session)
        return session
