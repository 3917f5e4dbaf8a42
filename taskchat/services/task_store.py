"""
Task Store Service Layer - 任务存储服务层
本模块采用仓储模式（Repository Pattern）封装了对任务存储 CRUD 服务的所有网络请求。
- ITaskRepository: 定义了与任务数据交互的统一接口。
- TaskStoreClient: 实现了该接口，负责具体的 HTTP 请求和响应处理。
每个操作都显式接收用户的 Bearer 凭证，因为同一个客户端会被所有会话共享。
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp

from ..core.models import Task, TaskDraft
from ..core.exceptions import TaskStoreException


class ITaskRepository(ABC):
    """
    任务仓储接口
    定义了所有与任务存储服务交互的标准操作。
    """

    @abstractmethod
    async def list_tasks(self, token: str) -> List[Task]:
        """
        获取当前用户的全部任务。

        :param token: 用户的 Bearer 凭证。
        :return: 任务列表，顺序即按序号选择时使用的顺序。
        """
        pass

    @abstractmethod
    async def create_task(self, token: str, draft: TaskDraft) -> Task:
        """
        创建一个新任务。

        :param token: 用户的 Bearer 凭证。
        :param draft: 任务草稿，id 和 points 由服务端分配。
        :return: 服务端创建的任务。
        """
        pass

    @abstractmethod
    async def update_task(self, token: str, task: Task) -> Task:
        """更新一个已存在的任务（必须带 id）。"""
        pass

    @abstractmethod
    async def delete_task(self, token: str, task_id: int) -> None:
        """删除任务"""
        pass


class TaskStoreClient(ITaskRepository):
    """
    任务存储 API 客户端实现
    负责与任务存储后端进行实际的 HTTP 通信，不做任何重试。
    """

    def __init__(self, base_url: str, timeout: float = 10):
        """
        初始化 API 客户端。

        :param base_url: 任务存储服务的基础 URL。
        :param timeout: 单次请求的总超时（秒）。
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        获取 aiohttp.ClientSession 实例。
        延迟初始化，只在需要时创建一个共享的会话。
        """
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={'Content-Type': 'application/json'},
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self.session

    async def _request(self, method: str, endpoint: str, token: str, **kwargs) -> Any:
        """
        统一的请求方法，封装了请求的发送、错误处理和响应解析。

        :param method: HTTP 请求方法 (e.g., "GET", "POST").
        :param endpoint: API 的端点路径 (e.g., "/Tasks").
        :param token: 用户的 Bearer 凭证。
        :param kwargs: 传递给 aiohttp.ClientSession.request 的其他参数。
        :return: 解析后的 JSON 响应；响应体为空时返回 None。
        :raises TaskStoreException: 当网络错误或 API 返回错误状态码时抛出。
        """
        session = await self._get_session()
        url = f"{self.base_url}{endpoint}"
        headers = {'Authorization': f'Bearer {token}'}

        try:
            async with session.request(method, url, headers=headers, **kwargs) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise TaskStoreException(f"API request failed: {response.status} - {text}", response.status)
                if response.content_type != 'application/json':
                    return None
                return await response.json()
        except aiohttp.ClientError as e:
            raise TaskStoreException(f"Network error: {str(e)}")
        except ValueError as e:
            raise TaskStoreException(f"Malformed API response: {str(e)}")

    async def list_tasks(self, token: str) -> List[Task]:
        """获取任务列表"""
        result = await self._request("GET", "/Tasks", token)

        # 兼容直接返回数组的情况
        if isinstance(result, list):
            items = result
        else:
            items = (result or {}).get("tasks", [])
        return [Task.from_dict(item) for item in items]

    async def create_task(self, token: str, draft: TaskDraft) -> Task:
        """创建任务"""
        result = await self._request("POST", "/AddTask", token, json=draft.to_dict())
        if not isinstance(result, dict):
            raise TaskStoreException(f"Unexpected create response: {result!r}")
        return Task.from_dict(result)

    async def update_task(self, token: str, task: Task) -> Task:
        """更新任务"""
        data: Dict[str, Any] = task.to_dict()
        result = await self._request("PUT", "/EditTask", token, json=data)
        if isinstance(result, dict) and ("id" in result or "taskId" in result):
            return Task.from_dict(result)
        return task

    async def delete_task(self, token: str, task_id: int) -> None:
        """删除任务"""
        await self._request("DELETE", "/DeleteTask", token, json={"taskId": task_id})

    async def close(self):
        """关闭连接"""
        if self.session and not self.session.closed:
            await self.session.close()
