"""
Field Validators - 字段校验器
纯函数形式的校验谓词。每个谓词在失败时向错误累加器追加一条可读的原因并返回 False，
从不抛出异常；批量校验会运行全部谓词并汇总所有失败（非快速失败），
让用户一次看到完整的错误列表。
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from .flows import PRIORITIES

DATE_FORMAT = "%Y-%m-%d"
REQUIRED_FIELDS = ("title", "description", "category", "deadline")

FIELD_LABELS = {
    "title": "Title",
    "description": "Description",
    "category": "Category",
    "deadline": "Deadline",
    "priority": "Priority",
    "reminder": "Reminder",
}


def parse_date(value: Optional[str]) -> Optional[date]:
    """按 YYYY-MM-DD 解析日期，无法解析时返回 None。"""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def check_required(name: str, value: Optional[str], errors: List[str]) -> bool:
    if value is None or not str(value).strip():
        errors.append(f"{FIELD_LABELS.get(name, name)} must not be empty!")
        return False
    return True


def check_date_format(name: str, value: str, errors: List[str]) -> bool:
    if parse_date(value) is None:
        errors.append(f"{FIELD_LABELS.get(name, name)} is in the wrong format, please use YYYY-MM-DD.")
        return False
    return True


def check_not_before_today(name: str, value: str, errors: List[str], today: Optional[date] = None) -> bool:
    """日期不得严格早于今天（当天是允许的）。"""
    parsed = parse_date(value)
    if parsed is None:
        return False
    if parsed < (today or date.today()):
        errors.append(f"{FIELD_LABELS.get(name, name)} should not come before today you silly!")
        return False
    return True


def check_priority(value: Optional[str], errors: List[str]) -> bool:
    # 区分大小写
    if value not in PRIORITIES:
        errors.append("For consistency please use the exact words for priority! (High, Medium or Low)")
        return False
    return True


def check_reminder_before_deadline(reminder: str, deadline: str, errors: List[str]) -> bool:
    reminder_date = parse_date(reminder)
    deadline_date = parse_date(deadline)
    if reminder_date is None or deadline_date is None:
        return False
    if reminder_date > deadline_date:
        errors.append("I have to remind you before the deadline remember?")
        return False
    return True


def check_date_field(name: str, value: str, errors: List[str], today: Optional[date] = None) -> bool:
    """日期字段：先检查格式，格式正确时再检查是否早于今天。"""
    if not check_date_format(name, value, errors):
        return False
    return check_not_before_today(name, value, errors, today)


def validate_task_fields(data: Dict[str, Optional[str]], today: Optional[date] = None) -> List[str]:
    """
    批量校验一次提交的任务字段。

    :param data: 字段名到字段值的映射（title/description/category/deadline/priority/reminder）。
    :param today: 当前本地日期，测试中可以注入固定值。
    :return: 所有失败原因的有序列表，为空表示校验通过。
    """
    errors: List[str] = []

    for name in REQUIRED_FIELDS:
        check_required(name, data.get(name), errors)

    check_priority(data.get("priority"), errors)

    deadline = (data.get("deadline") or "").strip()
    deadline_ok = bool(deadline) and check_date_field("deadline", deadline, errors, today)

    reminder = (data.get("reminder") or "").strip()
    if reminder:
        reminder_ok = check_date_field("reminder", reminder, errors, today)
        if reminder_ok and deadline_ok:
            check_reminder_before_deadline(reminder, deadline, errors)

    return errors


def validate_field(name: str, value: str, captured: Dict[str, str], today: Optional[date] = None) -> List[str]:
    """
    逐字段采集模式下校验单个字段。
    reminder 会与已采集的 deadline 比较。
    """
    errors: List[str] = []
    if name in REQUIRED_FIELDS and not check_required(name, value, errors):
        return errors

    if name == "deadline":
        check_date_field(name, value, errors, today)
    elif name == "priority":
        check_priority(value, errors)
    elif name == "reminder":
        if check_date_field(name, value, errors, today):
            deadline = captured.get("deadline", "")
            if deadline:
                check_reminder_before_deadline(value, deadline, errors)
    return errors
