from .groq.client_wrapper import EnhancedGroqClient
from .groq.model_manager import ModelManager

__all__ = [
    'EnhancedGroqClient',
    'ModelManager',
]
