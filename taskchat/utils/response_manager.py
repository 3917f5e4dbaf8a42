"""
Response Manager for TaskChat
响应管理器，集中管理机器人的所有固定回复，支持自定义响应内容和占位符替换，
并提供按权重随机选择的闲聊语句池。
"""

import random
from typing import Dict, Any, Optional, Sequence, Tuple

from ..core.flows import QUIT_INPUTS, BACK_INPUTS, CONFIRM_INPUTS, UNCONFIRM_INPUTS, join_choices


DEFAULT_RESPONSES: Dict[str, str] = {
    "greeting": "Hey{username}! How can I help you today?",
    "quit_instruction": "Please say either of {quit_inputs} to quit input mode!",
    "back_instruction": "You can also say {back_inputs} to go back to the previous field if you ever change your mind!",
    "ready": "All set!",
    "obtaining_tasks": "Obtaining all of your tasks...",
    "no_tasks": "You don't have any tasks yet!",
    "add_form_prompt": "Please fill in the form below to add your new task~",
    "add_title_prompt": "Please start by entering the title of your new task~",
    "select_prompt": "Please enter the index number of the task to {action} it (which means {range})!",
    "select_field_prompt": "Please select a field to edit!",
    "edit_stage_hint": "Use any of the quit or back commands to leave the session or go back a step!",
    "quitting": "Quitting input mode.",
    "back_to_normal": "Back to normal! What would you like to do next?",
    "understood": "Understood!",
    "already_beginning": "We are already at the beginning!",
    "reinput_field": "Please re-input the value for the {stage}.",
    "list_again": "Let me get the list again...",
    "next_field": "Sweet! Please enter the {stage}.",
    "next_deadline": "Great! Please enter the deadline in the format of YYYY-MM-DD.",
    "next_priority": "Nice! Please set a priority level of High, Medium or Low!",
    "next_reminder": "Great! Please enter the reminder date in the format of YYYY-MM-DD.",
    "try_again": "{error} Please try again.",
    "not_a_number": "Input must be a number!",
    "out_of_range": "Your index is out of range, please tell me a valid one to {action}.",
    "hold_on": "Hold on a moment...",
    "confirm_instruction": "Please enter {confirm_inputs} to proceed.",
    "unconfirm_instruction": "Or enter {unconfirm_inputs} to leave.",
    "leaving_confirmation": "Leaving confirmation mode...",
    "confirmation_unclear": "Your confirmation is not clear enough, please try again.",
    "invalid_fields": "Some fields are empty/ invalid! Please fill them out properly!",
    "task_added": "Task has been successfully added!",
    "task_edited": "Task has been successfully edited!",
    "task_deleted": "Task has been successfully deleted!",
    # 为空表示任务存储失败时保持静默
    "task_store_error": "",
    "classifier_error": "Sorry, I can't reach my brain right now. Please try again later.",
    "weather_error": "I couldn't get the weather right now, sorry!",
    "not_logged_in": "Please log in first with #login <token>.",
    "logged_out": "Bye! Your chat session has ended.",
    "command_unknown": "Unknown command: #{command}. Try #help.",
}

ACTION_WORDS = {
    "DeleteTask": "delete",
    "EditTask": "edit",
}

# 闲聊语句池：(语句, 权重)
FILLER_POOLS: Dict[str, Tuple[Tuple[str, int], ...]] = {
    "what_next": (
        ("What would you like to do next?", 4),
        ("Is there anything else I can help you with?", 3),
        ("Anything else on your mind?", 2),
        ("What shall we do now?", 1),
    ),
    "greeting_idle": (
        ("Let's get something done today!", 3),
        ("Remember to take a break every now and then~", 2),
        ("You're doing great, keep it up!", 2),
    ),
}


def weighted_choice(pool: Sequence[Tuple[str, int]], rng: random.Random) -> str:
    """按权重从语句池中随机选择一条。"""
    lines = [line for line, _ in pool]
    weights = [weight for _, weight in pool]
    return rng.choices(lines, weights=weights, k=1)[0]


class ResponseManager:
    """响应管理器 - 处理默认与自定义响应内容"""

    def __init__(self, config: Dict[str, Any], rng: Optional[random.Random] = None):
        self.config = config
        self._response_config = self.config.get("ui_preferences", {}).get("custom_responses", {})
        self.rng = rng or random.Random()

    def get_response(self, response_type: str, **kwargs) -> Optional[str]:
        """
        获取响应内容

        Args:
            response_type: 响应类型
            **kwargs: 用于占位符替换的参数

        Returns:
            格式化后的响应内容，如果模板为空则返回 None（不响应）
        """
        if response_type in self._response_config:
            template = self._response_config.get(response_type)
        else:
            template = DEFAULT_RESPONSES.get(response_type)

        if not template or not template.strip():
            return None

        try:
            return template.format(**kwargs)
        except (KeyError, ValueError):
            # 如果占位符替换失败，返回原始模板
            return template

    def filler(self, pool_name: str = "what_next") -> str:
        """从指定语句池中按权重随机选择一条闲聊语句。"""
        return weighted_choice(FILLER_POOLS[pool_name], self.rng)

    def greeting(self, username: Optional[str] = None) -> Optional[str]:
        return self.get_response("greeting", username=f" {username}" if username else "")

    def quit_instruction(self) -> Optional[str]:
        return self.get_response("quit_instruction", quit_inputs=join_choices(QUIT_INPUTS))

    def back_instruction(self) -> Optional[str]:
        return self.get_response("back_instruction", back_inputs=join_choices(BACK_INPUTS))

    def select_prompt(self, intent_label: str, task_count: int) -> Optional[str]:
        index_range = "1" if task_count == 1 else f"1 - {task_count}"
        return self.get_response("select_prompt", action=ACTION_WORDS.get(intent_label, "edit"), range=index_range)

    def out_of_range(self, intent_label: str) -> Optional[str]:
        return self.get_response("out_of_range", action=ACTION_WORDS.get(intent_label, "edit"))

    def confirm_instructions(self) -> list:
        """确认/取消说明（两行，作为一个列表消息发出）"""
        lines = [
            self.get_response("confirm_instruction", confirm_inputs=join_choices(CONFIRM_INPUTS)),
            self.get_response("unconfirm_instruction", unconfirm_inputs=join_choices(UNCONFIRM_INPUTS)),
        ]
        return [line for line in lines if line]

    def next_field_prompt(self, stage: str) -> Optional[str]:
        if stage in ("deadline", "priority", "reminder"):
            return self.get_response(f"next_{stage}")
        return self.get_response("next_field", stage=stage)

    def try_again(self, error: str) -> Optional[str]:
        return self.get_response("try_again", error=error)

    def command_unknown(self, command: str) -> Optional[str]:
        """未知命令响应"""
        return self.get_response("command_unknown", command=command)
