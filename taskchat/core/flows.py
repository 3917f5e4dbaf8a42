"""
Flow Catalog - 流程目录
静态定义每个意图的字段采集阶段顺序，以及流程中使用的各类关键字集合。
"""

from typing import Dict, Tuple

from .models import Intent, Priority

# AddTask 的两种形态：表单一次性提交（默认）与逐字段采集
ADD_TASK_FORM_FLOW: Tuple[str, ...] = ("form",)
ADD_TASK_FIELD_FLOW: Tuple[str, ...] = ("title", "description", "category", "deadline", "priority", "reminder")
EDIT_TASK_FLOW: Tuple[str, ...] = ("select", "edit")
DELETE_TASK_FLOW: Tuple[str, ...] = ("select",)

QUIT_INPUTS: Tuple[str, ...] = ("quit", "q", "bye", "stop", "leave")
BACK_INPUTS: Tuple[str, ...] = ("back", "go back", "previous")
CONFIRM_INPUTS: Tuple[str, ...] = ("confirm", "yes", "sure", "okay", "no problem")
UNCONFIRM_INPUTS: Tuple[str, ...] = ("no",)

PRIORITIES: Tuple[str, ...] = tuple(p.value for p in Priority)


def _normalize(text: str) -> str:
    return " ".join(text.strip().lower().split())


def is_quit(text: str) -> bool:
    return _normalize(text) in QUIT_INPUTS


def is_back(text: str) -> bool:
    return _normalize(text) in BACK_INPUTS


def is_confirm(text: str) -> bool:
    return _normalize(text) in CONFIRM_INPUTS


def is_unconfirm(text: str) -> bool:
    return _normalize(text) in UNCONFIRM_INPUTS


def join_choices(words: Tuple[str, ...]) -> str:
    """
    把关键字列表拼成可读的字符串。

    >>> join_choices(("quit", "q", "bye"))
    'quit, q, or bye'
    """
    if len(words) == 1:
        return words[0]
    return ", ".join(words[:-1]) + f", or {words[-1]}"


class FlowCatalog:
    """
    流程目录
    根据配置选择 AddTask 的流程形态，其余意图的流程是固定的。
    """

    def __init__(self, add_task_flow: str = "form"):
        if add_task_flow not in ("form", "fields"):
            raise ValueError(f"Unknown add_task_flow: {add_task_flow}")
        self.add_task_flow = add_task_flow
        self._flows: Dict[Intent, Tuple[str, ...]] = {
            Intent.ADD_TASK: ADD_TASK_FORM_FLOW if add_task_flow == "form" else ADD_TASK_FIELD_FLOW,
            Intent.EDIT_TASK: EDIT_TASK_FLOW,
            Intent.DELETE_TASK: DELETE_TASK_FLOW,
        }

    def get(self, intent: Intent) -> Tuple[str, ...]:
        """获取意图对应的阶段列表，没有采集流程的意图返回空元组。"""
        return self._flows.get(intent, ())

    def stage(self, intent: Intent, index: int) -> str:
        return self.get(intent)[index]

    def is_last_stage(self, intent: Intent, index: int) -> bool:
        return index == len(self.get(intent)) - 1
