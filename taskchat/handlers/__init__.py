"""
Handlers package
"""

from .dialogue_controller import DialogueController
from .query_handlers import IQueryHandler, QueryHandlerFactory
from .command_handlers import ICommandHandler
from .command_factory import CommandFactory

__all__ = ['DialogueController', 'IQueryHandler', 'QueryHandlerFactory', 'ICommandHandler', 'CommandFactory']
