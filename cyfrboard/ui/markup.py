# cyfrboard/ui/markup.py
# Rev 0.2.0 - user text inside rich-text labels
from __future__ import annotations

import html


def heading(text: str, tag: str = "h2") -> str:
    """Wrap user text in a tag; markup in the text is shown literally."""
    return f"<{tag}>{html.escape(text or '')}</{tag}>"
