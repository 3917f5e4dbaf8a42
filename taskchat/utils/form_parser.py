"""
Form submission parser
在纯文本聊天平台上，嵌入式表单以 "field: value" 多行回复的形式提交。
"""

import re
from typing import Dict, Optional

from ..core.models import TASK_FIELDS

_LINE_PATTERN = re.compile(r'^\s*([A-Za-z]+)\s*[:：]\s*(.*?)\s*$')


def parse_form_submission(text: str) -> Optional[Dict[str, str]]:
    """
    把多行 "field: value" 文本解析为表单数据。

    只识别任务字段名（不区分大小写）；没有任何可识别字段的文本返回 None，
    交由普通对话流程处理。未出现的字段不会出现在结果中。

    >>> parse_form_submission("title: Pay rent\\npriority: High")
    {'title': 'Pay rent', 'priority': 'High'}
    """
    if not text or (':' not in text and '：' not in text):
        return None

    data: Dict[str, str] = {}
    for line in text.splitlines():
        match = _LINE_PATTERN.match(line)
        if not match:
            continue
        name = match.group(1).lower()
        if name in TASK_FIELDS:
            data[name] = match.group(2)
    return data or None
