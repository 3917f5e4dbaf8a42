"""
Core Domain Models and Enums - 核心领域模型与枚举
本模块定义了对话引擎中使用的核心数据结构。
使用 dataclasses 来创建简洁、类型安全的数据类；聊天消息内容使用带标签的变体类型（文本/列表/表单）。
"""

import asyncio
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Any, Dict, Union


class SessionMode(Enum):
    """会话模式枚举"""
    IDLE = "Idle"
    CAPTURING = "Capturing"
    CONFIRMING = "Confirming"


class Intent(Enum):
    """
    意图枚举
    取值与意图分类服务返回的 `type` 标签保持一致。
    """
    ADD_TASK = "AddTask"
    EDIT_TASK = "EditTask"
    DELETE_TASK = "DeleteTask"
    WEATHER = "Weather"
    ALL_TASKS = "AllTasks"
    NONE = "None"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Intent":
        """把分类器标签转换为意图，未知标签一律视为 NONE。"""
        for intent in cls:
            if intent.value == label:
                return intent
        return cls.NONE

    @property
    def is_query(self) -> bool:
        """纯查询意图不进入采集流程，直接回复。"""
        return self in (Intent.WEATHER, Intent.ALL_TASKS)


class Priority(Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Origin(Enum):
    """消息来源"""
    USER = "User"
    BOT = "Bot"


# ---------------------------------------------------------------------------
# 消息内容（带标签的变体类型）
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextContent:
    text: str
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class ListContent:
    items: tuple
    kind: str = field(default="list", init=False)


@dataclass(frozen=True)
class FormContent:
    """
    嵌入式表单描述
    用户通过提交整张表单（而非逐字段输入）一次性提供任务数据。

    :param purpose: 表单用途，"add" 或 "edit"。
    :param fields: 字段名称的有序元组。
    :param values: 预填充的字段值（编辑时来自被选中的任务）。
    """
    purpose: str
    fields: tuple
    values: tuple = ()
    kind: str = field(default="form", init=False)

    def value_map(self) -> Dict[str, str]:
        return dict(self.values)


MessageContent = Union[TextContent, ListContent, FormContent]


@dataclass(frozen=True)
class Message:
    """
    聊天消息数据模型
    追加到消息日志后不可变；sequence 是唯一可靠的顺序依据。
    """
    origin: Origin
    content: MessageContent
    sequence: int


# ---------------------------------------------------------------------------
# 任务
# ---------------------------------------------------------------------------

TASK_FIELDS = ("title", "description", "category", "deadline", "priority", "reminder")


@dataclass
class Task:
    """
    任务数据模型
    由任务存储服务持有，会话中只保存只读的缓存快照，用于按序号选择。
    """
    id: int
    title: str
    description: str
    category: str
    deadline: str
    priority: str
    reminder: Optional[str] = None
    completed: bool = False
    points: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """从 API 响应构造任务，日期字段截取到 YYYY-MM-DD。"""
        task_id = data.get("id", data.get("taskId"))
        return cls(
            id=int(task_id) if task_id is not None else 0,
            title=data.get("title") or "",
            description=data.get("description") or "",
            category=data.get("category") or "",
            deadline=(data.get("deadline") or "")[:10],
            priority=data.get("priority") or "",
            reminder=(data.get("reminder") or "")[:10] or None,
            completed=bool(data.get("completed", False)),
            points=int(data.get("points") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "deadline": self.deadline,
            "priority": self.priority,
            "reminder": self.reminder,
            "completed": self.completed,
            "points": self.points,
        }

    def field_values(self) -> Dict[str, str]:
        """用于预填充编辑表单的字段值。"""
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "deadline": self.deadline,
            "priority": self.priority,
            "reminder": self.reminder or "",
        }


@dataclass
class TaskDraft:
    """新任务草稿（没有 id，id 与 points 由服务端分配）"""
    title: str
    description: str
    category: str
    deadline: str
    priority: str
    reminder: Optional[str] = None
    completed: bool = False
    points: int = 0

    @classmethod
    def from_fields(cls, data: Dict[str, str]) -> "TaskDraft":
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            category=data.get("category", ""),
            deadline=data.get("deadline", ""),
            priority=data.get("priority", ""),
            reminder=data.get("reminder") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "deadline": self.deadline,
            "priority": self.priority,
            "reminder": self.reminder,
            "completed": self.completed,
            "points": self.points,
        }


@dataclass
class ClassifierResult:
    """意图分类服务的返回结果"""
    response: str
    intent: Intent
    api_key: Optional[str] = None


# ---------------------------------------------------------------------------
# 会话
# ---------------------------------------------------------------------------

@dataclass
class ChatSession:
    """
    对话会话数据模型
    每个已登录用户有且仅有一个会话对象，由 SessionManager 在登录时创建、登出时销毁，
    并以引用方式传入对话控制器。
    """
    user_id: str
    token: str
    username: Optional[str] = None
    mode: SessionMode = SessionMode.IDLE
    intent: Intent = Intent.NONE
    stage_index: int = 0
    selected_task_index: Optional[int] = None
    pending_errors: List[str] = field(default_factory=list)
    captured: Dict[str, str] = field(default_factory=dict)
    tasks: List[Task] = field(default_factory=list)
    log: Any = None
    created_at: datetime = field(default_factory=datetime.now)
    turn_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def __post_init__(self):
        if self.log is None:
            # 消息日志依赖本模块，只能在此处延迟导入
            from ..utils.message_log import MessageLog
            self.log = MessageLog()

    @property
    def in_flow(self) -> bool:
        return self.mode in (SessionMode.CAPTURING, SessionMode.CONFIRMING)

    def enter_flow(self, intent: Intent):
        """进入采集模式；纯查询意图与 NONE 不能进入。"""
        if intent is Intent.NONE or intent.is_query:
            raise ValueError(f"Intent {intent.value} has no capture flow")
        self.mode = SessionMode.CAPTURING
        self.intent = intent
        self.stage_index = 0
        self.selected_task_index = None
        self.pending_errors = []
        self.captured = {}

    def advance(self, flow_length: int) -> bool:
        """前进一个阶段；已在最后阶段时返回 False。"""
        if self.stage_index >= flow_length - 1:
            return False
        self.stage_index += 1
        return True

    def step_back(self) -> bool:
        """后退一个阶段；在第 0 阶段时拒绝（不回绕）。"""
        if self.stage_index <= 0:
            return False
        self.stage_index -= 1
        return True

    def reset(self):
        """回到空闲状态并丢弃所有已采集的数据。"""
        self.mode = SessionMode.IDLE
        self.intent = Intent.NONE
        self.stage_index = 0
        self.selected_task_index = None
        self.pending_errors = []
        self.captured = {}

    def selected_task(self) -> Optional[Task]:
        if self.selected_task_index is None:
            return None
        if not 1 <= self.selected_task_index <= len(self.tasks):
            return None
        return self.tasks[self.selected_task_index - 1]
