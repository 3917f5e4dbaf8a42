"""
Template rendering utilities
模板渲染工具：把任务列表、确认摘要和嵌入式表单渲染为聊天用的纯文本。
多行模板按行拆分后作为列表消息发出。
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from jinja2 import Environment, DictLoader

from ..core.models import FormContent, Task


def ddmm(date_text: Optional[str]) -> str:
    """
    把 YYYY-MM-DD（或 ISO 时间戳）转换为 DD/MM。

    >>> ddmm("2024-08-10T00:00:00.000Z")
    '10/08'
    """
    if not date_text or len(date_text) < 10:
        return date_text or ""
    return f"{date_text[8:10]}/{date_text[5:7]}"


TASK_LINE_TEMPLATE = "{{ index }}. {{ task.title }}, {{ task.category }}, {{ task.deadline | ddmm }}"

SUMMARY_TEMPLATE = """{{ heading }}
Title: {{ fields.title }}
Description: {{ fields.description }}
Category: {{ fields.category }}
Deadline: {{ fields.deadline }}
Priority: {{ fields.priority }}
Reminder: {{ fields.reminder or '-' }}
Would that be okay?"""

DELETE_CONFIRMATION_TEMPLATE = "Task {{ line }} will be deleted."

FORM_TEMPLATE = """{{ "Edit task" if form.purpose == "edit" else "New task" }}
{% for name in form.fields -%}
{{ name }}: {{ values.get(name, "") }}
{% endfor -%}
(Reply with one "field: value" per line to submit)"""

ALL_TASKS_TEMPLATE = """{% if tasks -%}
You have {{ tasks | length }} task{{ "s" if tasks | length != 1 else "" }}:
{% for task in tasks -%}
{{ loop.index }}. {{ "[x]" if task.completed else "[ ]" }} {{ task.title }} ({{ task.priority }}), due {{ task.deadline | ddmm }}
{% endfor -%}
{% else -%}
You don't have any tasks yet!
{%- endif %}"""


class ITemplateRenderer(ABC):
    """模板渲染器接口"""

    @abstractmethod
    async def render(self, template_name: str, data: Dict[str, Any]) -> str:
        """渲染模板"""
        pass


class Jinja2TemplateRenderer(ITemplateRenderer):
    """Jinja2 模板渲染器实现"""

    def __init__(self, config: Dict[str, Any] = None):
        self.config = config or {}
        self.templates = {
            'task_line': TASK_LINE_TEMPLATE,
            'summary': SUMMARY_TEMPLATE,
            'delete_confirmation': DELETE_CONFIRMATION_TEMPLATE,
            'form': FORM_TEMPLATE,
            'all_tasks': ALL_TASKS_TEMPLATE,
        }
        self._load_custom_templates()
        self.env = Environment(loader=DictLoader(self.templates), keep_trailing_newline=False)
        self.env.filters['ddmm'] = ddmm

    def _load_custom_templates(self):
        """加载自定义模板"""
        custom_config = self.config.get("ui_preferences", {}).get("custom_templates", {})
        if custom_config.get("enable_custom", False):
            for name in list(self.templates):
                if custom_config.get(f"{name}_template"):
                    self.templates[name] = custom_config[f"{name}_template"]

    async def render(self, template_name: str, data: Dict[str, Any]) -> str:
        template = self.env.get_template(template_name)
        return template.render(**data)

    async def render_lines(self, template_name: str, data: Dict[str, Any]) -> List[str]:
        """渲染多行模板并拆分为非空行列表。"""
        text = await self.render(template_name, data)
        return [line for line in text.splitlines() if line.strip()]

    async def task_lines(self, tasks: List[Task]) -> List[str]:
        """带序号的任务列表，例如 "1. Pay rent, Bills, 01/11"。"""
        return [await self.render('task_line', {'index': i, 'task': task}) for i, task in enumerate(tasks, 1)]

    async def summary(self, heading: str, fields: Dict[str, str]) -> List[str]:
        return await self.render_lines('summary', {'heading': heading, 'fields': fields})

    async def delete_confirmation(self, index: int, task: Task) -> str:
        line = await self.render('task_line', {'index': index, 'task': task})
        return await self.render('delete_confirmation', {'line': line})

    async def form(self, form: FormContent) -> str:
        return await self.render('form', {'form': form, 'values': form.value_map()})

    async def all_tasks(self, tasks: List[Task]) -> List[str]:
        return await self.render_lines('all_tasks', {'tasks': tasks})
