"""Topical tag extraction from article title and description."""
import re
from typing import Dict, List, Set

TAG_MAP: Dict[str, List[str]] = {
    # Core AI
    "machine learning": ["machine-learning", "ml"],
    "deep learning": ["deep-learning"],
    "neural network": ["neural-networks"],
    "computer vision": ["computer-vision"],
    "natural language processing": ["nlp"],
    "generative ai": ["generative-ai"],
    "large language model": ["llm"],

    # People
    "lex fridman": ["lex-fridman", "influential"],
    "andrew ng": ["andrew-ng", "influential"],
    "sam altman": ["sam-altman", "openai", "influential"],
    "yann lecun": ["yann-lecun", "meta", "influential"],
    "andrej karpathy": ["andrej-karpathy", "influential"],
    "fei-fei li": ["fei-fei-li", "stanford", "influential"],
    "demis hassabis": ["demis-hassabis", "deepmind", "influential"],
    "allie k. miller": ["allie-miller", "influential"],
    "geoffrey hinton": ["geoffrey-hinton", "influential"],
    "marc andreessen": ["marc-andreessen", "vc", "influential"],

    # Companies
    "openai": ["openai", "company"],
    "google": ["google", "company"],
    "microsoft": ["microsoft", "company"],
    "anthropic": ["anthropic", "company"],
    "meta": ["meta", "company"],
    "deepmind": ["deepmind", "company"],

    # Models
    "chatgpt": ["chatgpt", "openai"],
    "claude": ["claude", "anthropic"],
    "gemini": ["gemini", "google"],
    "gpt": ["gpt", "openai"],

    # Conferences and events
    "neurips": ["neurips", "conference", "research"],
    "icml": ["icml", "conference", "research"],
    "iclr": ["iclr", "conference", "research"],
    "aaai": ["aaai", "conference", "research"],
    "ijcai": ["ijcai", "conference", "research"],
    "aied": ["aied", "conference", "education"],
    "edm": ["edm", "conference", "education"],
    "conference": ["conference", "event"],
    "summit": ["summit", "event"],
    "symposium": ["symposium", "event"],

    # Channels
    "github": ["github", "open-source"],
    "arxiv": ["research", "academic"],
    "reddit": ["community", "discussion"],
    "paper": ["research", "academic"],

    # Education
    "education": ["education", "teaching"],
    "learning": ["learning"],
    "student": ["education", "student"],
    "teacher": ["education", "teacher"],
    "classroom": ["education", "classroom"],
    "curriculum": ["education", "curriculum"],
    "pedagogy": ["education", "pedagogy"],

    # International
    "unesco": ["unesco", "international", "organization"],
    "oecd": ["oecd", "international", "organization"],
    "european commission": ["eu", "international", "policy"],

    # Languages
    "spanish": ["spanish", "international"],
    "francais": ["french", "international"],
    "deutsch": ["german", "international"],

    # News types
    "breakthrough": ["breakthrough", "innovation"],
    "release": ["release", "product"],
    "announcement": ["announcement", "news"],
    "research": ["research", "academic"],
    "funding": ["funding", "investment"],
    "partnership": ["partnership", "collaboration"],
}

INFLUENTIAL_EXPERTS = ["lex fridman", "andrew ng", "sam altman", "yann lecun", "geoffrey hinton"]

INTERNATIONAL_EVENT_TERMS = ["conference", "summit", "global", "international", "worldwide", "unesco", "oecd"]

# Accented Latin letters: a cheap hint that the text is not English.
_ACCENTED = re.compile(r"[àáâãäåæçèéêëìíîïñòóôõöøùúûüýÿ]")


def extract_tags(title: str, description: str = "") -> Set[str]:
    """Derive the tag set for an article."""
    content = f"{title} {description}".lower()
    tags: Set[str] = {"ai"}

    for keyword, related in TAG_MAP.items():
        if keyword in content:
            tags.update(related)

    if any(name in content for name in INFLUENTIAL_EXPERTS):
        tags.add("influential-expert")

    if any(term in content for term in INTERNATIONAL_EVENT_TERMS):
        tags.add("international-event")

    if _ACCENTED.search(content):
        tags.add("international")

    return tags
