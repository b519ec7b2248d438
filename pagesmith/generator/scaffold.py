"""
Project scaffolding for `pagesmith new`.

Writes a minimal website that `pagesmith generate` can render straight away:

    config.toml
    templates/base.html
    pages/index.html
    pages/about.html
    static/styles.css
"""

from pathlib import Path

from pagesmith.errors import ProjectExistsError

_CONFIG = """\
[site]
title = "{title}"
output_dir = "Output"
pages_dir = "pages"
templates_dir = "templates"
static_dir = "static"

[preview]
port = 8000
interval = 1.0
"""

_BASE_TEMPLATE = """\
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{% block title %}{{ site_title }}{% endblock %}</title>
  <link rel="stylesheet" href="{{ base_url }}/static/styles.css">
</head>
<body>
  <nav>
    <a href="{{ base_url }}/index.html">{{ site_title }}</a>
    {% for link in nav_links %}
    <a href="{{ base_url }}/{{ link.href }}"{% if link.id == active_nav %} class="active"{% endif %}>{{ link.label }}</a>
    {% endfor %}
  </nav>
  <main>{% block content %}{% endblock %}</main>
  <footer>Generated {{ generated_date }}</footer>
</body>
</html>
"""

_INDEX_PAGE = """\
{% extends "base.html" %}
{% block content %}
<h1>Welcome to {{ site_title }}</h1>
<p>Edit the files in <code>pages/</code> and run <code>pagesmith generate</code>.</p>
{% endblock %}
"""

_ABOUT_PAGE = """\
{% extends "base.html" %}
{% block title %}About - {{ site_title }}{% endblock %}
{% block content %}
<h1>About</h1>
{% endblock %}
"""

_STYLES = """\
body { font-family: sans-serif; max-width: 48rem; margin: 0 auto; }
nav a { margin-right: 1rem; }
nav a.active { font-weight: bold; }
"""


def create_project(folder: Path) -> list[Path]:
    """Write the starter files into `folder` and return the paths created."""
    config_path = folder / "config.toml"
    if config_path.exists():
        raise ProjectExistsError(folder)

    files = {
        config_path: _CONFIG.format(title=folder.resolve().name or "My Website"),
        folder / "templates" / "base.html": _BASE_TEMPLATE,
        folder / "pages" / "index.html": _INDEX_PAGE,
        folder / "pages" / "about.html": _ABOUT_PAGE,
        folder / "static" / "styles.css": _STYLES,
    }
    for path, content in files.items():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return list(files)
