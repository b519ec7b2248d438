import shutil
from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

import pagesmith.config as cfg_module
from pagesmith.errors import GenerationError


def _page_slug(relative_path: Path) -> str:
    # Nested pages get slugs like "blog-post".
    return "-".join(relative_path.with_suffix("").parts)


def _nav_links(pages: list[Path], pages_dir: Path) -> list[dict]:
    """Navigation entries for every page except index pages."""
    links = []
    for page in pages:
        rel_path = page.relative_to(pages_dir)
        if rel_path.name == "index.html":
            continue
        slug = _page_slug(rel_path)
        links.append({
            "id": slug,
            "label": slug.replace("-", " ").title(),
            "href": rel_path.as_posix(),
        })
    return links


class SiteGenerator:
    """Renders the Jinja2 pages of a project into its output directory.

    Safe to call repeatedly: every run overwrites the rendered pages and
    replaces the copied static assets.
    """

    def __init__(self, root: Path, cfg: dict):
        site_cfg = cfg_module.get_site(cfg)
        self.root = root
        self.output_dir = root / cfg_module.get_output_dir(cfg)
        self.pages_dir = root / site_cfg.get("pages_dir", "pages")
        self.templates_dir = root / site_cfg.get("templates_dir", "templates")
        self.static_dir = root / site_cfg.get("static_dir", "static")
        self.site_title = site_cfg.get("title", "My Website")
        self.base_url = site_cfg.get("base_url", "").rstrip("/")

    def generate(self) -> None:
        try:
            self._build()
        except TemplateError as exc:
            raise GenerationError(f"Template error: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise GenerationError(f"Pages and templates must be UTF-8: {exc}") from exc
        except OSError as exc:
            raise GenerationError(str(exc)) from exc

    def _build(self) -> None:
        if not self.pages_dir.is_dir():
            raise GenerationError(f"Missing pages directory: {self.pages_dir}")
        pages = sorted(self.pages_dir.rglob("*.html"))
        if not pages:
            raise GenerationError(f"No pages found in {self.pages_dir}")

        self.output_dir.mkdir(parents=True, exist_ok=True)

        static_dst = self.output_dir / "static"
        if self.static_dir.exists():
            if static_dst.exists():
                shutil.rmtree(static_dst)
            shutil.copytree(self.static_dir, static_dst)

        env = Environment(
            loader=FileSystemLoader([str(self.templates_dir), str(self.pages_dir)]),
            autoescape=select_autoescape(["html", "xml"]),
        )
        env.globals["base_url"] = self.base_url
        env.globals["site_title"] = self.site_title
        env.globals["generated_date"] = date.today().isoformat()
        env.globals["nav_links"] = _nav_links(pages, self.pages_dir)

        for page in pages:
            rel_path = page.relative_to(self.pages_dir)
            dest = self.output_dir / rel_path
            dest.parent.mkdir(parents=True, exist_ok=True)
            _render(env, rel_path.as_posix(), dest, {"active_nav": _page_slug(rel_path)})


def _render(env: Environment, template_name: str, dest: Path, context: dict) -> None:
    template = env.get_template(template_name)
    dest.write_text(template.render(**context), encoding="utf-8")
