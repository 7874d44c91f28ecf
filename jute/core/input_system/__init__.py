"""
Input system module for turning key presses into controller events.

Key bindings are loaded from YAML and looked up per input context.
"""

from .context_manager import InputContextManager, InputContext
from .key_config_loader import KeyConfigLoader

__all__ = [
    'InputContextManager',
    'InputContext',
    'KeyConfigLoader'
]
