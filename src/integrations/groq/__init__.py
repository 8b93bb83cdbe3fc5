from .client_wrapper import EnhancedGroqClient
from .model_manager import ModelManager

__all__ = [
    'EnhancedGroqClient',
    'ModelManager',
]
