import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Sequence
from urllib.parse import urlsplit

from jinja2 import Environment, FileSystemLoader, select_autoescape

from sentrydigest.models.items import NormalizedItem, utc_now
from sentrydigest.services.logger import logger

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
NEW_ITEM_AGE = timedelta(hours=24)

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

def hostname(link: str) -> str:
    try:
        host = urlsplit(link).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host

def unique_sources(items: Sequence[NormalizedItem]) -> List[str]:
    return list(dict.fromkeys(item.source_name for item in items))

def render_html(items: Sequence[NormalizedItem], generated_at: datetime | None = None) -> str:
    generated_at = generated_at or utc_now()
    cards = [
        {
            "item": item,
            "host": hostname(item.link),
            "date_iso": item.published_at.isoformat(),
            "date_text": item.published_at.strftime("%B %d, %Y - %I:%M %p"),
            "is_new": generated_at - item.published_at < NEW_ITEM_AGE,
        }
        for item in items
    ]
    template = _env.get_template("index.html.j2")
    return template.render(
        cards=cards,
        sources=unique_sources(items),
        total=len(items),
        generated_iso=generated_at.isoformat(),
        generated_text=generated_at.strftime("%Y-%m-%d %H:%M UTC"),
    )

def render_json(items: Sequence[NormalizedItem]) -> str:
    return json.dumps([item.to_record() for item in items], indent=2, ensure_ascii=False)

def write_outputs(items: Sequence[NormalizedItem], output_dir: Path) -> List[Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    html_path = output_dir / "index.html"
    html_path.write_text(render_html(items), encoding="utf-8")
    logger.info(f"Generated {html_path}")

    json_path = output_dir / "news-data.json"
    json_path.write_text(render_json(items), encoding="utf-8")
    logger.info(f"Generated {json_path}")

    return [html_path, json_path]
