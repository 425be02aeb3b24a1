"""Minimal HTML pages for browser-facing links."""

from __future__ import annotations

from html import escape

from fastapi.responses import HTMLResponse

_PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<meta name="robots" content="noindex">
<title>{title}</title>
</head>
<body>
<main>
<h1>{heading}</h1>
<p>{body}</p>
<p><a href="{home}">Return to the website</a></p>
</main>
</body>
</html>
"""


def render_page(
    heading: str,
    body: str,
    *,
    status_code: int = 200,
    home_url: str = "/",
) -> HTMLResponse:
    """Render a one-paragraph page; every value is HTML-escaped."""
    html = _PAGE_TEMPLATE.format(
        title=escape(heading),
        heading=escape(heading),
        body=escape(body),
        home=escape(home_url, quote=True),
    )
    return HTMLResponse(html, status_code=status_code, headers={"Cache-Control": "no-store"})
