from typing import Any, Dict, List

DEFAULT_MAX_ITEMS = 30

# Sources written to a fresh config file on first run
DEFAULT_SOURCES: List[Dict[str, Any]] = [
    {"name": "Krebs on Security", "url": "https://krebsonsecurity.com/feed/", "kind": "rss", "enabled": True},
    {"name": "The Hacker News", "url": "https://feeds.feedburner.com/TheHackersNews", "kind": "rss", "enabled": True},
    {"name": "Threatpost", "url": "https://threatpost.com/feed/", "kind": "rss", "enabled": True},
    {"name": "Bleeping Computer", "url": "https://www.bleepingcomputer.com/feed/", "kind": "rss", "enabled": True},
    {"name": "Dark Reading", "url": "https://www.darkreading.com/rss.xml", "kind": "rss", "enabled": True},
    {"name": "ZDNet Security", "url": "https://www.zdnet.com/topic/security/rss.xml", "kind": "rss", "enabled": True},
]
