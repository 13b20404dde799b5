"""Make a fetched page safe to show inside the host application's frame.

Two insertions, each made at most once per document:

* a ``<base>`` tag so relative URLs resolve against the real site rather
  than the proxy;
* a click interceptor that turns link navigation into a ``postMessage`` to
  the parent window, which re-requests the new page through the proxy.

Markup is located with tolerant regular expressions, not parsed. When an
anchor point is missing the insertion falls back to the start or end of
the document, which browsers still render.
"""

from __future__ import annotations

import html as html_lib
import re

_HEAD_OPEN_RE = re.compile(r"<head(\s[^>]*)?>", re.IGNORECASE)
_BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)

NAV_MARKER = "data-markup-nav"

# The framed document's origin is arbitrary, so the parent is addressed
# with "*"; the parent checks the message type before acting on it.
NAVIGATION_SCRIPT = f"""
<script {NAV_MARKER}="1">
  document.addEventListener('click', function (e) {{
    var target = e.target;
    if (target && target.nodeType !== 1) {{ target = target.parentElement; }}
    var link = target && target.closest ? target.closest('a[href]') : null;
    if (!link || !link.href) {{ return; }}
    e.preventDefault();
    e.stopPropagation();
    window.parent.postMessage({{ type: 'navigate', url: link.href }}, '*');
  }}, true);
</script>
"""


def base_tag(target_url: str) -> str:
    return f'<base href="{html_lib.escape(target_url, quote=True)}" target="_self">'


def inject_base_tag(document: str, target_url: str) -> str:
    """Insert the base tag right after the opening ``<head>`` tag."""
    tag = base_tag(target_url)
    if tag in document:
        return document
    match = _HEAD_OPEN_RE.search(document)
    if match is None:
        return tag + document
    return document[:match.end()] + tag + document[match.end():]


def inject_navigation_script(document: str) -> str:
    """Insert the click interceptor right before the closing ``</body>`` tag."""
    if NAV_MARKER in document:
        return document
    closings = list(_BODY_CLOSE_RE.finditer(document))
    if not closings:
        return document + NAVIGATION_SCRIPT
    # The last one: earlier matches can sit inside inline scripts or comments.
    pos = closings[-1].start()
    return document[:pos] + NAVIGATION_SCRIPT + document[pos:]


def rewrite(document: str, target_url: str) -> str:
    return inject_navigation_script(inject_base_tag(document, target_url))
