"""Curated default feed list used to bootstrap and reset the source table."""

DEFAULT_SOURCES = [
    {
        "name": "OpenAI Official Blog",
        "url": "https://openai.com/blog/rss.xml",
        "source_type": "rss",
        "fetch_interval": "02:00:00",
    },
    {
        "name": "Google AI Research",
        "url": "https://ai.googleblog.com/feeds/posts/default",
        "source_type": "rss",
        "fetch_interval": "03:00:00",
    },
    {
        "name": "Anthropic Blog",
        "url": "https://www.anthropic.com/blog/rss.xml",
        "source_type": "rss",
        "fetch_interval": "04:00:00",
    },
    {
        "name": "MIT Technology Review AI",
        "url": "https://www.technologyreview.com/topic/artificial-intelligence/feed/",
        "source_type": "rss",
        "fetch_interval": "03:00:00",
    },
    {
        "name": "DeepMind Blog",
        "url": "https://deepmind.google/blog/rss.xml",
        "source_type": "rss",
        "fetch_interval": "06:00:00",
    },
    {
        "name": "AI News",
        "url": "https://www.artificialintelligence-news.com/feed/",
        "source_type": "rss",
        "fetch_interval": "04:00:00",
    },
    {
        "name": "VentureBeat AI",
        "url": "https://venturebeat.com/ai/feed/",
        "source_type": "rss",
        "fetch_interval": "04:00:00",
    },
]
