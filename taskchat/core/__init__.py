"""
Core package
"""

from .models import (
    SessionMode, Intent, Priority, Origin, TextContent, ListContent, FormContent,
    Message, Task, TaskDraft, ClassifierResult, ChatSession, TASK_FIELDS
)
from .exceptions import (
    TaskChatException, TaskStoreException, ClassifierException, WeatherException,
    CommandException, ValidationError, SelectionRangeError,
    ConfirmationAmbiguousError, DesyncError
)
from .flows import FlowCatalog

__all__ = [
    'SessionMode', 'Intent', 'Priority', 'Origin', 'TextContent', 'ListContent', 'FormContent',
    'Message', 'Task', 'TaskDraft', 'ClassifierResult', 'ChatSession', 'TASK_FIELDS',
    'TaskChatException', 'TaskStoreException', 'ClassifierException', 'WeatherException',
    'CommandException', 'ValidationError', 'SelectionRangeError',
    'ConfirmationAmbiguousError', 'DesyncError', 'FlowCatalog'
]
