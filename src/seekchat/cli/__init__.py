from .repl import CommandInterpreter, Prompt

__all__ = ["CommandInterpreter", "Prompt"]
