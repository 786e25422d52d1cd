from .deepseek import DeepSeekTransport

__all__ = ["DeepSeekTransport"]
