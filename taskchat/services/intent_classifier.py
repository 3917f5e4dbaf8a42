"""
Intent Classifier Service - 意图分类服务客户端
把用户的原始聊天内容连同固定的模型标识发送给意图分类服务，
返回带标签的结果（回复文本、意图类型和可选的 API_Key 参数）。
"""

from abc import ABC, abstractmethod
from typing import Optional

import aiohttp

from astrbot.api import logger

from ..core.models import ClassifierResult, Intent
from ..core.exceptions import ClassifierException


class IIntentClassifier(ABC):
    """意图分类器接口"""

    @abstractmethod
    async def classify(self, token: str, text: str) -> ClassifierResult:
        """
        对一句用户输入进行意图分类。

        :param token: 用户的 Bearer 凭证。
        :param text: 用户原始输入（原样转发）。
        :return: 分类结果。
        """
        pass


class IntentClassifierClient(IIntentClassifier):
    """基于 HTTP `/startchat` 接口的意图分类客户端"""

    def __init__(self, base_url: str, model: str = "model.tflearn", timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={'Content-Type': 'application/json'},
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self.session

    async def classify(self, token: str, text: str) -> ClassifierResult:
        session = await self._get_session()
        url = f"{self.base_url}/startchat"
        headers = {'Authorization': f'Bearer {token}'}
        payload = {"input": text, "model": self.model}

        try:
            async with session.post(url, json=payload, headers=headers) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise ClassifierException(f"Classifier request failed: {response.status} - {body}")
                reply = await response.json()
        except aiohttp.ClientError as e:
            raise ClassifierException(f"Network error: {str(e)}")
        except ValueError as e:
            raise ClassifierException(f"Malformed classifier reply: {str(e)}")

        if not isinstance(reply, dict):
            raise ClassifierException(f"Unexpected classifier reply: {reply!r}")

        intent = Intent.from_label(reply.get("type"))
        logger.debug(f"Classified {text!r} as {intent.value}")
        return ClassifierResult(
            response=reply.get("response") or "",
            intent=intent,
            api_key=reply.get("API_Key")
        )

    async def close(self):
        """关闭连接"""
        if self.session and not self.session.closed:
            await self.session.close()
