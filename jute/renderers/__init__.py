"""Renderers: the terminal surface and a scripted one for demos and tests."""

from .scripted_renderer import ScriptedRenderer, keys_for_text

__all__ = ["ScriptedRenderer", "keys_for_text"]
