"""PromptCademy: daily prompt-engineering lessons with rubric coaching."""

__version__ = '0.1.0'
