"""Pure HTML renderers, one per document kind.

Every function here takes records and settings and returns a complete
string.  Nothing reads the clock or touches the filesystem, so the same
inputs always produce byte-identical output.

Free-text fields are escaped on the way in.  ``Post.body`` and
``Project.description`` are markup fragments produced by a
``MarkupConverter`` and are interpolated as-is.

Links are relative to the page that contains them, so the generated
tree works when served and when opened straight from disk.
"""

from __future__ import annotations

import html
from datetime import datetime
from urllib.parse import urlsplit

from folio.content.models import Post, Project, RecordKind, SiteSettings
from folio.markup import paragraphs
from folio.site.compose import Adjacency, IndexPage

BLOG_DIR = "blog"
PORTFOLIO_DIR = "portfolio"
IMAGES_DIR = "images"
STYLESHEET_PATH = "css/style.css"
HOME_PATH = "index.html"
ABOUT_PATH = "about.html"

SECTION_DIRS: dict[RecordKind, str] = {
    RecordKind.POST: BLOG_DIR,
    RecordKind.PROJECT: PORTFOLIO_DIR,
}

_IMAGE_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
]
_SAFE_URL_SCHEMES = {"http", "https", "mailto"}


def _escape(text: str) -> str:
    return html.escape(text or "", quote=True)


def _format_date(value: datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def image_extension(data: bytes) -> str:
    """Guess a file extension from image magic bytes, defaulting to ``jpg``."""
    for signature, ext in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return ext
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    head = data[:256].lstrip().lower()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return "svg"
    return "jpg"


def image_path(record: Post | Project) -> str | None:
    """Tree-relative path of a record's image, e.g. ``images/post-<id>.png``."""
    if not record.image:
        return None
    return f"{IMAGES_DIR}/{record.kind}-{record.id}.{image_extension(record.image)}"


def artifact_path(record: Post | Project) -> str:
    """Tree-relative path of a published record's page."""
    if not record.slug:
        raise ValueError(f"{record.kind} {record.id} has no slug")
    return f"{SECTION_DIRS[record.kind]}/{record.slug}.html"


def index_path(kind: RecordKind, page_file: str = "index.html") -> str:
    return f"{SECTION_DIRS[kind]}/{page_file}"


# ---------------------------------------------------------------------------
# Shared layout
# ---------------------------------------------------------------------------


def _layout(title: str, main: str, settings: SiteSettings, *, depth: int, active: str = "") -> str:
    root = "../" * depth
    nav_items = [
        ("home", "Home", f"{root}{HOME_PATH}"),
        ("about", "About", f"{root}{ABOUT_PATH}"),
        ("blog", _escape(settings.blog_title) or "Blog", f"{root}{BLOG_DIR}/index.html"),
        (
            "portfolio",
            _escape(settings.portfolio_title) or "Portfolio",
            f"{root}{PORTFOLIO_DIR}/index.html",
        ),
    ]
    active_attr = ' class="active"'
    nav = "\n".join(
        f'      <a href="{href}"{active_attr if key == active else ""}>{label}</a>'
        for key, label, href in nav_items
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{_escape(title)} - {_escape(settings.site_name)}</title>
  <link rel="stylesheet" href="{root}{STYLESHEET_PATH}">
</head>
<body>
  <header class="site-header">
    <h1><a href="{root}{HOME_PATH}">{_escape(settings.site_name)}</a></h1>
    <p class="tagline">{_escape(settings.tagline)}</p>
    <nav>
{nav}
    </nav>
  </header>
  <main class="container">
{main}
  </main>
  <footer class="site-footer">
    <p>&copy; {_escape(settings.author)}. {_escape(settings.site_name)}</p>
  </footer>
</body>
</html>
"""


def _image_tag(record: Post | Project, *, depth: int, css_class: str) -> str:
    path = image_path(record)
    if path is None:
        return ""
    return (
        f'<div class="{css_class}"><img src="{"../" * depth}{path}" '
        f'alt="{_escape(record.title)}"></div>'
    )


def _adjacency_nav(nav: Adjacency, *, earlier_label: str, later_label: str) -> str:
    links: list[str] = []
    if nav.earlier is not None:
        links.append(
            f'<a class="earlier" rel="prev" href="{_escape(nav.earlier.slug or "")}.html">'
            f"&larr; {earlier_label}: {_escape(nav.earlier.title)}</a>"
        )
    if nav.later is not None:
        links.append(
            f'<a class="later" rel="next" href="{_escape(nav.later.slug or "")}.html">'
            f"{later_label}: {_escape(nav.later.title)} &rarr;</a>"
        )
    if not links:
        return ""
    return '<nav class="adjacent">\n      ' + "\n      ".join(links) + "\n    </nav>"


def _pagination(page: IndexPage) -> str:
    if page.prev_path is None and page.next_path is None:
        return ""
    links: list[str] = []
    if page.prev_path is not None:
        links.append(f'<a class="newer" href="{page.prev_path}">&larr; Previous page</a>')
    links.append(f'<span class="page-number">Page {page.number}</span>')
    if page.next_path is not None:
        links.append(f'<a class="older" href="{page.next_path}">Next page &rarr;</a>')
    return '<nav class="pagination">' + " ".join(links) + "</nav>"


def _safe_url(url: str) -> str | None:
    url = url.strip()
    if not url:
        return None
    if urlsplit(url).scheme.lower() not in _SAFE_URL_SCHEMES:
        return None
    return url


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


def render_post_entry(post: Post) -> str:
    """Card for one post on the blog index."""
    link = f"{_escape(post.slug or '')}.html"
    return f"""    <article class="post-card">
      {_image_tag(post, depth=1, css_class="post-image")}
      <div class="post-content">
        <h3><a href="{link}">{_escape(post.title)}</a></h3>
        <p class="meta">By {_escape(post.author)} on {_format_date(post.published_at)}</p>
        <p class="post-subtitle">{_escape(post.subtitle)}</p>
        <a class="read-more" href="{link}">Read More &rarr;</a>
      </div>
    </article>"""


def render_post_page(post: Post, nav: Adjacency, settings: SiteSettings) -> str:
    main = f"""    <article class="blog-post">
      {_image_tag(post, depth=1, css_class="featured-image")}
      <h2>{_escape(post.title)}</h2>
      <p class="subtitle">{_escape(post.subtitle)}</p>
      <p class="meta">By {_escape(post.author)} on {_format_date(post.published_at)}</p>
      <div class="content">
{post.body}
      </div>
    </article>
    {_adjacency_nav(nav, earlier_label="Older", later_label="Newer")}
    <a class="back-link" href="index.html">&larr; Back to {_escape(settings.blog_title)}</a>"""
    return _layout(post.title, main, settings, depth=1, active="blog")


def render_post_index(page: IndexPage[Post], settings: SiteSettings) -> str:
    if page.entries:
        listing = (
            '    <div class="posts-grid">\n'
            + "\n".join(render_post_entry(p) for p in page.entries)
            + "\n    </div>"
        )
    else:
        listing = '    <p class="empty">No posts yet.</p>'
    main = f"""    <section class="section-intro">
      <h2>{_escape(settings.blog_title)}</h2>
      <p>{_escape(settings.blog_tagline)}</p>
    </section>
{listing}
    {_pagination(page)}"""
    return _layout(settings.blog_title, main, settings, depth=1, active="blog")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def _tech_tags(project: Project) -> str:
    if not project.technologies:
        return ""
    items = "".join(f"<li>{_escape(t)}</li>" for t in project.technologies)
    return f'<ul class="tags">{items}</ul>'


def render_project_entry(project: Project) -> str:
    """Card for one project on the portfolio index."""
    link = f"{_escape(project.slug or '')}.html"
    return f"""    <article class="project-card">
      {_image_tag(project, depth=1, css_class="project-image")}
      <div class="project-content">
        <h3><a href="{link}">{_escape(project.title)}</a></h3>
        <p class="project-subtitle">{_escape(project.subtitle)}</p>
        {_tech_tags(project)}
        <a class="read-more" href="{link}">View Project &rarr;</a>
      </div>
    </article>"""


def render_project_page(project: Project, nav: Adjacency, settings: SiteSettings) -> str:
    url = _safe_url(project.url)
    external = (
        f'<p class="project-link"><a href="{_escape(url)}" rel="noopener">Visit project</a></p>'
        if url
        else ""
    )
    main = f"""    <article class="project">
      {_image_tag(project, depth=1, css_class="featured-image")}
      <h2>{_escape(project.title)}</h2>
      <p class="subtitle">{_escape(project.subtitle)}</p>
      {_tech_tags(project)}
      <div class="content">
{project.description}
      </div>
      {external}
    </article>
    {_adjacency_nav(nav, earlier_label="Next", later_label="Previous")}
    <a class="back-link" href="index.html">&larr; Back to {_escape(settings.portfolio_title)}</a>"""
    return _layout(project.title, main, settings, depth=1, active="portfolio")


def render_project_index(page: IndexPage[Project], settings: SiteSettings) -> str:
    if page.entries:
        listing = (
            '    <div class="projects-grid">\n'
            + "\n".join(render_project_entry(p) for p in page.entries)
            + "\n    </div>"
        )
    else:
        listing = '    <p class="empty">No projects yet.</p>'
    main = f"""    <section class="section-intro">
      <h2>{_escape(settings.portfolio_title)}</h2>
      <p>{_escape(settings.portfolio_tagline)}</p>
    </section>
{listing}
    {_pagination(page)}"""
    return _layout(settings.portfolio_title, main, settings, depth=1, active="portfolio")


# ---------------------------------------------------------------------------
# Site pages
# ---------------------------------------------------------------------------


def render_home(settings: SiteSettings) -> str:
    main = f"""    <section class="hero">
      <h2>{_escape(settings.home_hero_title)}</h2>
      <p>{_escape(settings.home_hero_subtitle)}</p>
      <a class="cta-button" href="{BLOG_DIR}/index.html">{_escape(settings.home_cta_text)}</a>
    </section>"""
    return _layout("Home", main, settings, depth=0, active="home")


def render_about(settings: SiteSettings) -> str:
    main = f"""    <article class="about">
      <h2>{_escape(settings.about_title)}</h2>
      <div class="content">
{paragraphs(settings.about_content)}
      </div>
    </article>"""
    return _layout(settings.about_title, main, settings, depth=0, active="about")


def render_not_found(path: str) -> str:
    """Minimal standalone 404 page naming the requested path."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>404 Not Found</title>
</head>
<body>
  <h1>404 - Page Not Found</h1>
  <p>The requested file was not found: {_escape(path)}</p>
  <p><a href="/">Return to home</a></p>
</body>
</html>
"""


def render_stylesheet(settings: SiteSettings) -> str:
    """Shared stylesheet with the active theme substituted into ``:root``."""
    theme = settings.theme
    muted = "#666666" if theme.is_light else "#A0A0A0"
    surface = "#F5F5F5" if theme.is_light else "#262626"
    border = "#E0E0E0" if theme.is_light else "#333333"
    return f""":root {{
  --bg: {theme.background_color};
  --text: {theme.text_color};
  --accent: {settings.effective_accent};
  --muted: {muted};
  --surface: {surface};
  --border: {border};
  --font: {theme.font_family};
  --weight: {theme.font_weight};
  --max-width: {theme.max_width};
}}

* {{ margin: 0; padding: 0; box-sizing: border-box; }}

body {{
  font-family: var(--font);
  font-weight: var(--weight);
  line-height: 1.6;
  color: var(--text);
  background: var(--bg);
}}

a {{ color: var(--accent); }}

.site-header {{
  background: var(--accent);
  color: #FFFFFF;
  padding: 2rem;
  text-align: center;
}}
.site-header h1 {{ font-size: 2.5rem; margin-bottom: 0.5rem; }}
.site-header h1 a, .site-header nav a {{ color: #FFFFFF; text-decoration: none; }}
.site-header nav {{ display: flex; gap: 2rem; justify-content: center; margin-top: 1rem; }}
.site-header nav a.active, .site-header nav a:hover {{ text-decoration: underline; }}

.container {{ max-width: var(--max-width); margin: 3rem auto; padding: 0 2rem; }}

.hero {{ text-align: center; padding: 60px 20px; }}
.hero h2 {{ font-size: 3rem; margin-bottom: 1.25rem; }}
.hero p {{ font-size: 1.25rem; color: var(--muted); margin-bottom: 2rem; }}
.cta-button {{
  display: inline-block;
  padding: 12px 30px;
  background: var(--accent);
  color: #FFFFFF;
  text-decoration: none;
  border-radius: 8px;
}}

.section-intro {{ margin-bottom: 2rem; }}
.section-intro h2 {{ font-size: 2rem; color: var(--accent); }}

.posts-grid, .projects-grid {{
  display: grid;
  grid-template-columns: repeat(auto-fill, minmax(300px, 1fr));
  gap: 2rem;
}}
.post-card, .project-card {{
  border: 1px solid var(--border);
  border-radius: 8px;
  overflow: hidden;
}}
.post-image img, .project-image img, .featured-image img {{
  width: 100%;
  height: auto;
  display: block;
}}
.post-content, .project-content {{ padding: 1.5rem; }}
.post-content h3 a, .project-content h3 a {{ color: var(--text); text-decoration: none; }}
.post-subtitle, .project-subtitle, .meta, .subtitle {{ color: var(--muted); }}
.read-more, .back-link {{ text-decoration: none; font-weight: 600; }}

.featured-image {{ margin-bottom: 2rem; border-radius: 8px; overflow: hidden; }}
.blog-post h2, .project h2, .about h2 {{ font-size: 2.5rem; color: var(--accent); }}
.subtitle {{ font-size: 1.25rem; font-style: italic; margin-bottom: 1rem; }}
.content {{ font-size: 1.125rem; line-height: 1.8; margin-top: 2rem; }}
.content p {{ margin-bottom: 1.5rem; }}

.tags {{ list-style: none; display: flex; flex-wrap: wrap; gap: 0.5rem; margin: 1rem 0; }}
.tags li {{ background: var(--surface); border-radius: 4px; padding: 0.125rem 0.5rem; }}

.adjacent, .pagination {{
  display: flex;
  justify-content: space-between;
  gap: 1rem;
  margin-top: 3rem;
}}
.back-link {{ display: inline-block; margin-top: 2rem; }}
.empty {{ color: var(--muted); font-style: italic; }}

.site-footer {{
  text-align: center;
  padding: 2rem;
  background: var(--surface);
  margin-top: 4rem;
  color: var(--muted);
}}
"""
