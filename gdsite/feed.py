"""Feed item fields for article pages.

Only the field mapping lives here; writing RSS or JSON Feed documents is the
feed writer's job.
"""

from __future__ import annotations

from pathlib import Path

from .content import extract_title, page_dates, parse_front_matter, slugify
from .render import render_markdown, summarize
from .utils import iso_date, join_url


def feed_item(path: Path, args: object) -> dict:
    raw_text = path.read_text(encoding="utf-8")
    meta, body = parse_front_matter(raw_text)
    title, body = extract_title(meta, body)
    content = render_markdown(body, args)
    published, updated = page_dates(meta, path)
    item = {
        "title": title,
        "description": meta.get("description") or summarize(content),
        "published": iso_date(published),
        "updated": iso_date(updated),
        "content": content,
        "image": "",
    }
    site_url = (getattr(args, "site_url", "") or "").strip()
    if site_url:
        slug = slugify(meta.get("slug") or path.stem)
        item["url"] = join_url(site_url, f"{slug}.html")
    return item


def feed_items(paths: list[Path], args: object) -> dict:
    items = [feed_item(path, args) for path in paths]
    items.sort(key=lambda item: item["published"], reverse=True)
    return {"title": getattr(args, "site_name", ""), "items": items}
