# reportflow/prompts/__init__.py
"""Prompt and guidance texts shown alongside validation results"""

from . import field_prompts

__all__ = [
    'field_prompts'
]
