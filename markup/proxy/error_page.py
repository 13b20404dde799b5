"""Branded fallback page shown in the frame when a target cannot be loaded."""

from __future__ import annotations

from html import escape

DEFAULT_MESSAGE = "The site may be blocking external access or may be unreachable."

TIPS = (
    "Check that the URL is spelled correctly",
    "Some sites block access through proxies (for example Cloudflare)",
    "Try a different site, for example https://example.com",
)

_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: 'Inter', system-ui, sans-serif; background: #FAFAFA; display: flex;
           align-items: center; justify-content: center; min-height: 100vh; color: #1A1A2E; }
    .error-card { text-align: center; max-width: 480px; padding: 48px 32px; }
    .error-icon { width: 64px; height: 64px; background: #FEF2F2; border-radius: 16px;
                  display: flex; align-items: center; justify-content: center;
                  margin: 0 auto 24px; color: #EF4444; }
    h1 { font-size: 20px; font-weight: 700; margin-bottom: 8px; }
    .error-status { display: inline-block; background: #FEF2F2; color: #DC2626;
                    padding: 4px 12px; border-radius: 20px; font-size: 13px;
                    font-weight: 600; margin-bottom: 16px; }
    p { color: #6B7280; font-size: 14px; line-height: 1.6; }
    .error-url { display: block; margin-top: 16px; padding: 12px; background: #F5F5F5;
                 border-radius: 8px; font-size: 13px; color: #9CA3AF; word-break: break-all; }
    .tips { text-align: left; margin-top: 24px; padding: 16px; background: #F0EDFF;
            border-radius: 12px; }
    .tips h3 { font-size: 13px; color: #6C5CE7; margin-bottom: 8px; }
    .tips ul { list-style: none; font-size: 13px; color: #6B7280; }
    .tips li { padding: 4px 0 4px 16px; position: relative; }
    .tips li::before { content: '\\2192'; position: absolute; left: 0; color: #6C5CE7; }
"""

_ICON = (
    '<svg width="28" height="28" viewBox="0 0 24 24" fill="none" stroke="currentColor" '
    'stroke-width="2" stroke-linecap="round" stroke-linejoin="round">'
    '<circle cx="12" cy="12" r="10"/><line x1="12" y1="8" x2="12" y2="12"/>'
    '<line x1="12" y1="16" x2="12.01" y2="16"/></svg>'
)


def render_error(url: str, status_code: int = 0, message: str | None = None) -> str:
    """Render the error page.

    ``status_code`` of 0 means no HTTP response was received, and the status
    badge is left out.
    """
    badge = f'<span class="error-status">Error {int(status_code)}</span>' if status_code else ""
    tips = "".join(f"<li>{escape(tip)}</li>" for tip in TIPS)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Page could not be loaded</title>
  <style>{_STYLE}</style>
</head>
<body>
  <div class="error-card">
    <div class="error-icon">{_ICON}</div>
    {badge}
    <h1>Unable to load the page</h1>
    <p>{escape(message or DEFAULT_MESSAGE)}</p>
    <code class="error-url">{escape(url)}</code>
    <div class="tips">
      <h3>Suggestions</h3>
      <ul>{tips}</ul>
    </div>
  </div>
</body>
</html>
"""
