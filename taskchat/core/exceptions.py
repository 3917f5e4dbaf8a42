"""
Core exceptions
核心异常定义
"""

from typing import List, Optional


class TaskChatException(Exception):
    """TaskChat 基础异常"""
    pass


class TaskStoreException(TaskChatException):
    """任务存储服务 API 异常（网络错误或非 2xx 响应）"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ClassifierException(TaskChatException):
    """意图分类服务异常"""
    pass


class WeatherException(TaskChatException):
    """天气服务异常"""
    pass


class CommandException(TaskChatException):
    """命令处理异常"""
    pass


class ValidationError(TaskChatException):
    """字段校验失败，携带聚合后的全部错误信息"""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class SelectionRangeError(TaskChatException):
    """序号输入不是数字或超出范围"""
    pass


class ConfirmationAmbiguousError(TaskChatException):
    """确认输入既不属于确认词也不属于取消词"""
    pass


class DesyncError(TaskChatException):
    """没有进行中的意图时收到了确认/取消"""
    pass
