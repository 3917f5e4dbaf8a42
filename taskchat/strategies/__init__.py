"""
Strategies package
"""

from .base import IFlowStrategy, DialogueContext
from .add_task_strategy import AddTaskStrategy
from .edit_task_strategy import EditTaskStrategy
from .delete_task_strategy import DeleteTaskStrategy

__all__ = ['IFlowStrategy', 'DialogueContext', 'AddTaskStrategy', 'EditTaskStrategy', 'DeleteTaskStrategy']
