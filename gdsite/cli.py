from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .config import load_config, site_settings
from .content import extract_title, parse_front_matter
from .feed import feed_items
from .linenumbers import line_numbers_css
from .render import render_markdown, write_text
from .utils import parse_bool


def require_page(path: Path) -> Path:
    if not path.exists():
        print(f"Page not found: {path}", file=sys.stderr)
        sys.exit(1)
    return path


def cmd_render(args: argparse.Namespace) -> None:
    meta, body = parse_front_matter(require_page(Path(args.page)).read_text(encoding="utf-8"))
    _, body = extract_title(meta, body)
    html_content = render_markdown(body, args)
    if args.output:
        write_text(Path(args.output), html_content)
        print(f"Page rendered to: {args.output}")
    else:
        print(html_content)


def cmd_css(args: argparse.Namespace) -> None:
    try:
        formatter = HtmlFormatter(style=args.pygments_style)
    except ClassNotFound:
        print(f"Unknown Pygments style: {args.pygments_style}", file=sys.stderr)
        sys.exit(1)
    print(formatter.get_style_defs("pre > code"))
    print(line_numbers_css())


def cmd_feed(args: argparse.Namespace) -> None:
    paths = [require_page(Path(page)) for page in args.pages]
    print(json.dumps(feed_items(paths, args), indent=2, ensure_ascii=False))


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    settings = site_settings(config)

    parser = argparse.ArgumentParser(description="GDScript docs site helpers.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--class-reference-url",
        default=str(settings["class_reference_url"]),
        help="Base URL of the engine class reference.",
    )
    parser.add_argument(
        "--line-numbers",
        action=argparse.BooleanOptionalAction,
        default=parse_bool(settings["line_numbers"]),
        help="Annotate code blocks with line numbers.",
    )
    parser.add_argument("--site-name", default=str(settings["site_name"]), help="Site title.")
    parser.add_argument("--site-url", default=str(settings["site_url"]), help="Public site URL used for feed links.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render one Markdown page to HTML.")
    render.add_argument("page", help="Markdown page to render.")
    render.add_argument("--output", default="", help="Write the HTML here instead of stdout.")
    render.set_defaults(func=cmd_render)

    css = subparsers.add_parser("css", help="Print the code highlighting stylesheet.")
    css.add_argument(
        "--pygments-style",
        default=str(settings["pygments_style"]),
        help="Pygments style to generate CSS for.",
    )
    css.set_defaults(func=cmd_css)

    feed = subparsers.add_parser("feed", help="Print feed items for the given pages as JSON.")
    feed.add_argument("pages", nargs="+", help="Markdown pages to include.")
    feed.set_defaults(func=cmd_feed)
    return parser


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))
    args = build_parser(config, pre_args.config).parse_args(argv)
    args.func(args)
