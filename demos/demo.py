#!/usr/bin/env python3

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jute.app.application import AppConfig, Application
from jute.core.input import InputEvent
from jute.core.renderer import RendererConfig
from jute.renderers.scripted_renderer import ScriptedRenderer, keys_for_text


def main():
    print("jute - Demo Mode", file=sys.stderr)
    print("Replays a scripted session and prints each frame to stderr", file=sys.stderr)
    print("", file=sys.stderr)

    script = (
        keys_for_text("name\tjute\n")
        + [InputEvent.char_press("e")]
        + keys_for_text("count\n3\n")
        + [InputEvent.char_press("e")]
        + keys_for_text("\n")  # empty key, rejected
        + keys_for_text("name\tratatui\n")  # replaces the first value
        + [InputEvent.char_press("q"), InputEvent.char_press("y")]
    )

    config = RendererConfig(width=60, height=20, title="jute demo")
    renderer = ScriptedRenderer(script, config, echo=True)

    app = Application(renderer, AppConfig(typed=True, indent=2))
    app.run()

    print("\nDemo complete! The JSON above went to stdout; try:", file=sys.stderr)
    print("  python demos/demo.py 2>/dev/null | python -m json.tool", file=sys.stderr)


if __name__ == "__main__":
    main()
