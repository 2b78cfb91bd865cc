"""
HTML rendering for the SwiftLink history page.
"""

from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from models import ShortenedLink
from shortener import build_short_url

# ============================================================
# HTML Helpers
# ============================================================

_CSS = """
* { box-sizing: border-box; margin: 0; padding: 0; }
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
       background: #0f172a; color: #e2e8f0; line-height: 1.5; }
a { color: #38bdf8; text-decoration: none; }
a:hover { text-decoration: underline; }
nav { padding: 16px 24px; display: flex; gap: 16px; align-items: center; border-bottom: 1px solid #1e293b; }
nav .brand { color: #fff; font-size: 20px; font-weight: 700; margin-right: auto; }
nav .brand span { color: #38bdf8; font-weight: 300; }
nav .version { color: #64748b; font-size: 12px; font-family: monospace; }
.container { max-width: 960px; margin: 32px auto; padding: 0 16px; }
.hero { text-align: center; margin-bottom: 32px; }
.hero h1 { font-size: 36px; color: #fff; margin-bottom: 8px; }
.hero p { color: #94a3b8; }
.card { background: #1e293b; border: 1px solid #334155; border-radius: 12px; padding: 20px; margin-bottom: 16px; }
.card h2 { margin-bottom: 8px; font-size: 18px; color: #fff; }
.msg-ok { background: #064e3b; color: #6ee7b7; padding: 10px 16px; border-radius: 6px; margin-bottom: 16px; }
.msg-err { background: #450a0a; color: #fca5a5; padding: 10px 16px; border-radius: 6px; margin-bottom: 16px; }
.shorten-form { display: flex; gap: 8px; }
.shorten-form input { flex: 1; padding: 12px 14px; border-radius: 8px; border: 1px solid #334155;
                      background: #0f172a; color: #fff; font-size: 15px; }
button, .btn { cursor: pointer; padding: 6px 14px; border-radius: 6px; border: 1px solid #475569;
               background: #334155; color: #fff; font-size: 13px; font-weight: 500; }
button:hover, .btn:hover { background: #475569; }
button:disabled { opacity: 0.5; cursor: not-allowed; }
.btn-primary { background: #2563eb; border-color: #2563eb; padding: 12px 24px; font-size: 15px; }
.btn-primary:hover { background: #1d4ed8; }
.btn-danger { background: transparent; color: #f87171; border-color: transparent; font-size: 12px; }
.inline-form { display: inline-block; margin: 0 2px; }
.link-card { display: flex; justify-content: space-between; gap: 24px; }
.link-info { flex: 1; min-width: 0; }
.link-meta { display: flex; gap: 12px; align-items: center; margin-bottom: 6px; }
.category { background: #1e3a8a; color: #93c5fd; font-size: 11px; font-weight: 700; padding: 2px 8px;
            border-radius: 4px; text-transform: uppercase; letter-spacing: 0.05em; }
.date { color: #64748b; font-size: 12px; }
.short-url { font-size: 18px; font-weight: 700; color: #fff; }
.original { color: #94a3b8; font-size: 13px; font-family: monospace; white-space: nowrap;
            overflow: hidden; text-overflow: ellipsis; margin-bottom: 10px; }
.tag { display: inline-block; background: #0f172a; color: #cbd5e1; padding: 2px 8px; border-radius: 10px;
       font-size: 12px; margin: 2px; border: 1px solid #334155; }
.summary { display: inline-block; background: #064e3b; color: #6ee7b7; padding: 2px 8px; border-radius: 10px;
           font-size: 12px; margin: 2px; font-style: italic; }
.link-actions { display: flex; flex-direction: column; align-items: flex-end; gap: 8px; width: 180px; flex-shrink: 0; }
.clicks { background: #0f172a; padding: 6px 12px; border-radius: 8px; width: 100%; text-align: center; }
.clicks strong { color: #fff; }
.empty { text-align: center; padding: 64px 16px; border: 2px dashed #334155; border-radius: 16px; color: #64748b; }
.history-head { display: flex; justify-content: space-between; align-items: center; margin: 24px 0 12px; }
.count { font-size: 13px; color: #94a3b8; background: #1e293b; padding: 2px 12px; border-radius: 12px; }
footer { margin-top: 64px; padding: 24px; border-top: 1px solid #1e293b; text-align: center; color: #64748b; font-size: 13px; }
"""

_SCRIPT = """
function copyShortUrl(btn, url) {
    navigator.clipboard.writeText(url).then(function () {
        var label = btn.textContent;
        btn.textContent = 'Copied';
        setTimeout(function () { btn.textContent = label; }, 2000);
    });
}
function lockForm(form) {
    var btn = form.querySelector('button[type=submit]');
    btn.disabled = true;
    btn.textContent = 'AI Thinking...';
    form.querySelector('input[name=url]').readOnly = true;
}
"""


def _nav() -> str:
    return """<nav>
        <span class="brand">SwiftLink <span>AI</span></span>
        <span class="version">v1.0.0</span>
    </nav>"""


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title} - SwiftLink</title>
<style>{_CSS}</style>
<script>{_SCRIPT}</script>
</head>
<body>
{_nav()}
<div class="container">
{body}
<footer>Built with FastAPI &amp; Google Gemini.</footer>
</div>
</body>
</html>"""


def _messages(message: Optional[str], error: Optional[str] = None) -> str:
    parts = []
    if message:
        parts.append(f'<div class="msg-ok">{_esc(message)}</div>')
    if error:
        parts.append(f'<div class="msg-err">{_esc(error)}</div>')
    return "".join(parts)


def _esc(s: str) -> str:
    """Basic HTML escaping."""
    return (s or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def _created_date(created_at_ms: int) -> str:
    return datetime.fromtimestamp(created_at_ms / 1000).strftime("%b %d, %Y")


# ============================================================
# History Page
# ============================================================

def render_link_card(link: ShortenedLink, origin: str) -> str:
    short_url = build_short_url(origin, link.short_code)
    display_url = f"{urlparse(origin).netloc or origin}/?u={link.short_code}"

    tags_html = "".join(f'<span class="tag">#{_esc(t)}</span>' for t in (link.tags or []))
    if link.ai_summary:
        tags_html += f'<span class="summary">AI: "{_esc(link.ai_summary)}"</span>'

    return f"""<div class="card link-card">
        <div class="link-info">
            <div class="link-meta">
                <span class="category">{_esc(link.category or "General")}</span>
                <span class="date">{_created_date(link.created_at)}</span>
            </div>
            <div class="short-url">{_esc(display_url)}</div>
            <div class="original" title="{_esc(link.original_url)}">{_esc(link.original_url)}</div>
            <div>{tags_html}</div>
        </div>
        <div class="link-actions">
            <div class="clicks"><strong>{link.clicks}</strong> clicks</div>
            <div>
                <button type="button" title="Copy Working Link"
                        onclick="copyShortUrl(this, '{_esc(short_url)}')">Copy</button>
                <form method="POST" action="/links/{_esc(link.id)}/visit" target="_blank" class="inline-form">
                    <button type="submit" title="Go to original">Visit</button>
                </form>
            </div>
            <form method="POST" action="/links/{_esc(link.id)}/delete" class="inline-form"
                  onsubmit="return confirm('Delete this link?')">
                <button class="btn-danger" type="submit">Delete Link</button>
            </form>
        </div>
    </div>"""


def render_home(links: list[ShortenedLink], origin: str, url_value: str = "",
                message: Optional[str] = None, error: Optional[str] = None) -> str:
    body = """<div class="hero">
        <h1>Make your links Intelligent</h1>
        <p>Not just a shortener. SwiftLink uses Gemini AI to categorize and summarize your URLs instantly.</p>
    </div>"""

    body += f"""<div class="card">
        <h2>Shorten &amp; Analyze</h2>
        <p style="color:#94a3b8;margin-bottom:12px">Paste a URL (e.g. google.com) to shorten it and get an AI-powered breakdown.</p>
        {_messages(message, error)}
        <form method="POST" action="/shorten" class="shorten-form" onsubmit="lockForm(this)">
            <input name="url" type="text" placeholder="google.com/article..." value="{_esc(url_value)}" autofocus>
            <button type="submit" class="btn-primary">Shorten</button>
        </form>
    </div>"""

    body += f"""<div class="history-head">
        <h2>Your History</h2>
        <span class="count">{len(links)} Links</span>
    </div>"""

    if not links:
        body += """<div class="empty">
            <h3 style="color:#fff">No links yet</h3>
            <p>Paste a URL above to get started</p>
        </div>"""
    else:
        body += "".join(render_link_card(link, origin) for link in links)

    return _page("Home", body)
