"""
Key bindings from YAML.

The file maps, per input context, a key name or a single character to a
controller event name. A named scheme may override individual bindings on
top of the base contexts. When the file is missing or unreadable the
built-in bindings below are used instead.
"""
import yaml
from typing import TYPE_CHECKING, Optional, Any
from pathlib import Path

from .context_manager import InputContext
from ..errors import KeyConfigError
from ..events import ControllerEventType
from ..input import Key, KeyBinding

if TYPE_CHECKING:
    from ...app.log_manager import LogManager


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "assets" / "key_mappings.yaml"

DEFAULT_SCHEME = "default"

NAMED_KEYS = {
    'ENTER': Key.ENTER,
    'RETURN': Key.ENTER,
    'TAB': Key.TAB,
    'BACKSPACE': Key.BACKSPACE,
    'ESCAPE': Key.ESCAPE,
    'ESC': Key.ESCAPE,
    'DELETE': Key.DELETE,
    'UP': Key.UP,
    'DOWN': Key.DOWN,
    'LEFT': Key.LEFT,
    'RIGHT': Key.RIGHT,
    'HOME': Key.HOME,
    'END': Key.END,
}

# Same bindings as the bundled key_mappings.yaml
FALLBACK_BINDINGS: dict[InputContext, dict[KeyBinding, ControllerEventType]] = {
    InputContext.EDITING: {
        Key.ENTER: ControllerEventType.CONFIRM,
        Key.TAB: ControllerEventType.NEXT_FIELD,
        Key.BACKSPACE: ControllerEventType.BACKSPACE,
        Key.ESCAPE: ControllerEventType.DISCARD_ENTRY,
        Key.LEFT: ControllerEventType.CURSOR_LEFT,
        Key.RIGHT: ControllerEventType.CURSOR_RIGHT,
        Key.HOME: ControllerEventType.CURSOR_HOME,
        Key.END: ControllerEventType.CURSOR_END,
    },
    InputContext.IDLE: {
        "e": ControllerEventType.NEW_ENTRY,
        Key.ENTER: ControllerEventType.EDIT_ENTRY,
        "d": ControllerEventType.DELETE_ENTRY,
        Key.DELETE: ControllerEventType.DELETE_ENTRY,
        Key.UP: ControllerEventType.SELECT_PREVIOUS,
        Key.DOWN: ControllerEventType.SELECT_NEXT,
        "s": ControllerEventType.SUBMIT,
        "q": ControllerEventType.REQUEST_EXIT,
    },
    InputContext.EXIT_PROMPT: {
        "y": ControllerEventType.SUBMIT,
        "n": ControllerEventType.CANCEL,
        "q": ControllerEventType.CANCEL,
        Key.ESCAPE: ControllerEventType.DISMISS_PROMPT,
    },
}


class KeyConfigLoader:
    """Binding tables per input context, loaded from a YAML file."""

    def __init__(self, config_path: Optional[str] = None,
                 log_manager: Optional["LogManager"] = None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.log_manager = log_manager
        self._config: dict[str, Any] = {}
        self._key_mappings: dict[InputContext, dict[KeyBinding, ControllerEventType]] = {}
        self._active_scheme = DEFAULT_SCHEME

    def _warn(self, text: str) -> None:
        if self.log_manager:
            self.log_manager.warning(text)

    def load_config(self) -> bool:
        """
        Read and parse the YAML file.

        Returns:
            bool: False if the fallback bindings had to be used
        """
        if not self.config_path.exists():
            self._warn(f"Key config file not found: {self.config_path}")
            self._load_fallback_config()
            return False

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise KeyConfigError("top level must be a mapping")
            self._config = loaded
            settings = self._config.get('config') or {}
            self._active_scheme = settings.get('active_scheme', DEFAULT_SCHEME)
            self._parse_key_mappings()
        except (OSError, yaml.YAMLError, KeyConfigError) as e:
            self._warn(f"Error loading key config {self.config_path}: {e}")
            self._load_fallback_config()
            return False

        if self.log_manager:
            self.log_manager.config(
                f"Loaded key config {self.config_path.name} (scheme: {self._active_scheme})"
            )
        return True

    def _scheme_overrides(self, context_name: str) -> dict[str, Any]:
        if self._active_scheme == DEFAULT_SCHEME:
            return {}
        scheme = (self._config.get('schemes') or {}).get(self._active_scheme) or {}
        return (scheme.get('overrides') or {}).get(context_name) or {}

    def _parse_key_mappings(self) -> None:
        """Rebuild the binding tables for the active scheme."""
        contexts = self._config.get('contexts') or {}
        if not isinstance(contexts, dict):
            raise KeyConfigError("'contexts' must be a mapping")

        tables: dict[InputContext, dict[KeyBinding, ControllerEventType]] = {}
        for context_name, context_data in contexts.items():
            try:
                context = InputContext(str(context_name).lower())
            except ValueError:
                self._warn(f"Unknown context '{context_name}' in config")
                continue

            entries = {**((context_data or {}).get('mappings') or {}),
                       **self._scheme_overrides(context_name)}

            table: dict[KeyBinding, ControllerEventType] = {}
            for key_str, event_name in entries.items():
                key = self._parse_key_string(str(key_str), context)
                event_type = self._parse_event_name(str(event_name))
                if key is not None and event_type is not None:
                    table[key] = event_type
            tables[context] = table

        self._key_mappings = tables

    def _parse_key_string(self, key_str: str, context: InputContext) -> Optional[KeyBinding]:
        """
        Turn ``ENTER``, ``esc``, ``"q"`` and the like into a binding.

        Single characters are lowercased; they are refused in the editing
        context, where every printable key is text.
        """
        if len(key_str) == 1:
            if context == InputContext.EDITING:
                self._warn(f"Character '{key_str}' cannot be bound while editing")
                return None
            return key_str.lower()

        named = NAMED_KEYS.get(key_str.upper().strip())
        if named is None:
            self._warn(f"Unknown key '{key_str}' in config")
        return named

    def _parse_event_name(self, event_name: str) -> Optional[ControllerEventType]:
        try:
            event_type = ControllerEventType[event_name.upper().strip()]
        except KeyError:
            self._warn(f"Unknown event '{event_name}' in config")
            return None
        if event_type == ControllerEventType.CHAR:
            self._warn("Event 'char' cannot be bound to a key")
            return None
        return event_type

    def get_key_mappings(self, context: InputContext) -> dict[KeyBinding, ControllerEventType]:
        return self._key_mappings.get(context, {})

    def get_event_for_key(self, key: Optional[KeyBinding],
                          context: InputContext) -> Optional[ControllerEventType]:
        if key is None:
            return None
        return self.get_key_mappings(context).get(key)

    def get_keys_for_event(self, event_type: ControllerEventType,
                           context: InputContext) -> list[KeyBinding]:
        """Reverse lookup, used to build the key hints in the footer."""
        return [key for key, bound in self.get_key_mappings(context).items()
                if bound == event_type]

    def get_available_schemes(self) -> list[str]:
        named = [name for name in (self._config.get('schemes') or {}) if name != DEFAULT_SCHEME]
        return [DEFAULT_SCHEME, *named]

    def get_active_scheme(self) -> str:
        return self._active_scheme

    def set_active_scheme(self, scheme_name: str) -> bool:
        """Switch scheme and rebuild the tables. Unknown names are refused."""
        if scheme_name not in self.get_available_schemes():
            return False
        self._active_scheme = scheme_name
        self._parse_key_mappings()
        return True

    def get_context_info(self, context: InputContext) -> dict[str, Any]:
        """Display name, description and binding count of a context."""
        section = (self._config.get('contexts') or {}).get(context.value) or {}
        return {
            'name': section.get('name', context.value.replace('_', ' ').title()),
            'description': section.get('description', ''),
            'key_count': len(self.get_key_mappings(context)),
        }

    def _load_fallback_config(self) -> None:
        self._config = {}
        self._active_scheme = DEFAULT_SCHEME
        self._key_mappings = {context: dict(table) for context, table in FALLBACK_BINDINGS.items()}
        self._warn("Loaded fallback key configuration")

    def validate_config(self) -> dict[str, Any]:
        """
        Check the loaded file for problems that make the editor unusable.

        Returns:
            Dict with ``valid``, ``errors``, ``warnings`` and some counts
        """
        contexts = self._config.get('contexts') or {}
        known = {context.value for context in InputContext}

        errors = [f"Missing required context: {name}"
                  for name in (context.value for context in InputContext)
                  if name not in contexts]
        warnings = [f"Unknown context in config: {name}"
                    for name in contexts if str(name).lower() not in known]

        if ControllerEventType.CONFIRM not in self.get_key_mappings(InputContext.EDITING).values():
            errors.append("No key confirms an entry while editing")

        binding_count = sum(len(table) for table in self._key_mappings.values())
        if binding_count == 0:
            errors.append("No valid key mappings found")

        return {
            'valid': not errors,
            'errors': errors,
            'warnings': warnings,
            'contexts': len(self._key_mappings),
            'total_mappings': binding_count,
            'active_scheme': self._active_scheme,
        }
