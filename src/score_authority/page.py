"""Static HTML rendering of the public leaderboard."""

from html import escape

from .models import ScoreEntry

PAGE_STYLES = """
  :root { --bg:#0c0c0c; --surface:#151515; --line:#2b2b2b; --text:#f2f2f2; --muted:#aaaaaa; }
  * { box-sizing:border-box; }
  body { margin:0; min-height:100vh; background:var(--bg); color:var(--text); font-family:Inter, 'Helvetica Neue', Arial, sans-serif; }
  main { max-width:760px; margin:0 auto; padding:24px 16px 42px; }
  h1 { margin:0 0 8px; font-size:1.8rem; }
  a { color:var(--text); text-decoration:none; border:1px solid var(--line); padding:8px 10px; display:inline-block; margin-bottom:14px; }
  table { width:100%; border-collapse:collapse; background:var(--surface); border:1px solid var(--line); }
  th, td { padding:10px 12px; border:1px solid var(--line); text-align:left; }
  th { color:#fff; background:#1d1d1d; }
  td:first-child { width:64px; color:var(--muted); }
  .empty { padding:18px 12px; color:var(--muted); }
"""

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Cache-Control": "public, max-age=0, must-revalidate",
}


def _render_rows(entries: list[ScoreEntry]) -> str:
    if not entries:
        return '<tr><td colspan="3" class="empty">No scores yet.</td></tr>'
    return "".join(
        f"<tr><td>{rank}</td><td>{escape(entry.player)}</td><td>{entry.score}</td></tr>"
        for rank, entry in enumerate(entries, 1)
    )


def render_leaderboard_html(entries: list[ScoreEntry]) -> str:
    """Render ranked entries as a standalone HTML document."""
    return (
        "<!doctype html>"
        '<html lang="en"><head>'
        '<meta charset="UTF-8" />'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0" />'
        "<title>Snake Leaderboard</title>"
        f"<style>{PAGE_STYLES}</style>"
        "</head><body><main>"
        "<h1>Leaderboard</h1>"
        '<a href="/">Back To Game</a>'
        '<table aria-label="Leaderboard">'
        "<thead><tr><th>Rank</th><th>Player</th><th>Score</th></tr></thead>"
        f"<tbody>{_render_rows(entries)}</tbody>"
        "</table></main></body></html>"
    )
