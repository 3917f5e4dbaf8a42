"""
Message Log & Bot Emitter - 消息日志与机器人消息发射队列
- MessageLog: 只追加的有序聊天记录，每条消息追加后不可变，sequence 单调递增。
- BotEmitter: 显式的异步队列。同一轮中排队的多条机器人消息严格按程序顺序逐条发出，
  每条之前都有一次模拟“思考”的人为延迟；延迟函数可注入，测试中使用假时钟。
"""

import asyncio
from typing import Awaitable, Callable, List, Sequence, Union

from ..core.models import Message, MessageContent, Origin, TextContent, ListContent, FormContent

Sleeper = Callable[[float], Awaitable[None]]


def to_content(content: Union[str, Sequence[str], MessageContent]) -> MessageContent:
    """把字符串/字符串列表规范化为带标签的消息内容。"""
    if isinstance(content, (TextContent, ListContent, FormContent)):
        return content
    if isinstance(content, str):
        return TextContent(content)
    return ListContent(tuple(str(item) for item in content))


class MessageLog:
    """只追加的聊天消息日志"""

    def __init__(self):
        self._messages: List[Message] = []
        self._pending: asyncio.Queue = asyncio.Queue()

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(tuple(self._messages))

    @property
    def messages(self) -> tuple:
        return tuple(self._messages)

    @property
    def next_sequence(self) -> int:
        return len(self._messages)

    def append(self, origin: Origin, content: Union[str, Sequence[str], MessageContent]) -> Message:
        message = Message(origin=origin, content=to_content(content), sequence=len(self._messages))
        self._messages.append(message)
        return message

    def add_user_message(self, text: str) -> Message:
        return self.append(Origin.USER, text)

    def enqueue(self, content: MessageContent):
        """把一条机器人消息放入待发送队列。"""
        self._pending.put_nowait(content)

    def has_pending(self) -> bool:
        return not self._pending.empty()

    def next_pending(self) -> MessageContent:
        return self._pending.get_nowait()

    def since(self, sequence: int) -> List[Message]:
        """返回从指定序号开始（含）的所有消息。"""
        return list(self._messages[sequence:])

    def bot_texts(self) -> List[str]:
        """所有机器人文本消息的内容，主要用于测试与调试。"""
        return [m.content.text for m in self._messages
                if m.origin is Origin.BOT and isinstance(m.content, TextContent)]


class BotEmitter:
    """
    机器人消息发射器
    消息先进入日志自带的待发送队列，再由 flush 逐条取出、等待延迟后追加到日志。
    调用方 await 整个链条，因此不会出现“发出即忘”的乱序广播。
    """

    def __init__(self, delay: float = 0.8, sleep: Sleeper = asyncio.sleep):
        """
        :param delay: 每条机器人消息之前的思考延迟（秒）。
        :param sleep: 挂起函数，测试时替换为假时钟。
        """
        self.delay = delay
        self._sleep = sleep

    def queue(self, log: MessageLog, *contents):
        for content in contents:
            log.enqueue(to_content(content))

    async def flush(self, log: MessageLog) -> List[Message]:
        emitted = []
        while log.has_pending():
            content = log.next_pending()
            await self._sleep(self.delay)
            emitted.append(log.append(Origin.BOT, content))
        return emitted

    async def say(self, log: MessageLog, *contents) -> List[Message]:
        """排队并立即按顺序发出一条或多条消息。空内容（None）会被跳过。"""
        self.queue(log, *[c for c in contents if c is not None])
        return await self.flush(log)

    async def pause(self, seconds: float):
        """额外的思考停顿（例如生成确认摘要之前）。"""
        await self._sleep(seconds)
