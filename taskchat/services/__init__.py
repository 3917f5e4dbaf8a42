"""
Services package
"""

from .task_store import ITaskRepository, TaskStoreClient
from .intent_classifier import IIntentClassifier, IntentClassifierClient
from .weather import WeatherClient

__all__ = [
    'ITaskRepository', 'TaskStoreClient', 'IIntentClassifier', 'IntentClassifierClient', 'WeatherClient'
]
