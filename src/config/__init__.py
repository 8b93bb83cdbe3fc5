from .parser_config import PARSER_CONFIG

__all__ = ['PARSER_CONFIG']
