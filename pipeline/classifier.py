"""AI-relevance filter for parsed feed items."""
import re
from typing import Iterable, Pattern

INFLUENTIAL_ACCOUNTS = [
    "lex fridman", "lexfridman", "@lexfridman",
    "andrew ng", "andrewng", "@andrewng",
    "sam altman", "sama", "@sama",
    "yann lecun", "ylecun", "@ylecun",
    "andrej karpathy", "karpathy", "@karpathy",
    "fei-fei li", "drfeifei", "@drfeifei",
    "demis hassabis", "demishassabis", "@demishassabis",
    "allie k. miller", "alliekmiller", "@alliekmiller",
    "geoffrey hinton", "geoffreyhinton", "@geoffreyhinton",
    "marc andreessen", "pmarca", "@pmarca",
    "manusai", "@manusai_hq",
    "minimax", "@minimax__ai",
    "btibor91", "@btibor91",
    "kent c. dodds", "kentcdodds", "@kentcdodds",
]

ORGANIZATIONAL_ACCOUNTS = [
    "openai", "@openai",
    "deepmind", "@deepmind",
    "google ai", "googleai", "@googleai",
    "meta ai", "metaai", "@metaai",
]

AI_KEYWORDS = [
    # General
    "artificial intelligence", "machine learning", "deep learning", "neural network",
    "ai", "ml", "nlp", "computer vision", "robotics", "automation",
    # Companies and models
    "chatgpt", "openai", "anthropic", "claude", "gemini", "bard", "copilot",
    "midjourney", "dalle", "gpt", "bert", "llama", "palm", "llm",
    "hugging face", "stability ai", "cohere", "inflection",
    # Techniques
    "generative ai", "large language model", "transformer", "diffusion",
    "tensorflow", "pytorch", "stable diffusion", "prompt engineering",
    "fine-tuning", "reinforcement learning", "supervised learning",
    # Research
    "arxiv", "paper", "research", "breakthrough", "algorithm",
    "dataset", "model", "training", "inference", "github",
    # Education
    "ai in education", "educational technology", "personalized learning",
    "adaptive learning", "intelligent tutoring", "automated grading",
    # Conferences and events
    "neurips", "icml", "iclr", "aaai", "ijcai", "aied", "edm",
    "ai conference", "machine learning conference", "education conference",
    "ai summit", "tech conference", "innovation summit",
    "ieee", "acm", "educational data mining", "learning analytics",
    # International organizations
    "unesco", "oecd", "european commission", "ai4education",
    "partnership on ai", "ai now institute", "future of humanity institute",
    # Other languages
    "intelligence artificielle", "apprentissage automatique",
    "künstliche intelligenz", "maschinelles lernen",
    "inteligência artificial", "inteligencia artificial", "aprendizado de máquina",
    # Hashtags
    "#ai", "#machinelearning", "#artificialintelligence", "#deeplearning",
    "#aieducation", "#edtech", "#futureoflearning",
]


def compile_terms(terms: Iterable[str]) -> Pattern[str]:
    """Build one substring-matching alternation; longest terms first."""
    unique = sorted({term.lower() for term in terms if term}, key=len, reverse=True)
    if not unique:
        # Matches nothing.
        return re.compile(r"(?!)")
    return re.compile("|".join(re.escape(term) for term in unique))


class RelevanceClassifier:
    """
    Keyword and account allow-list filter.

    An item is relevant when any keyword, influential account or organization
    appears as a substring of its lower-cased title and description. Matching
    is permissive and favours recall.
    """

    def __init__(
        self,
        keywords: Iterable[str] = AI_KEYWORDS,
        influential_accounts: Iterable[str] = INFLUENTIAL_ACCOUNTS,
        organizational_accounts: Iterable[str] = ORGANIZATIONAL_ACCOUNTS
    ):
        self._keywords = compile_terms(keywords)
        self._influential = compile_terms(influential_accounts)
        self._organizations = compile_terms(organizational_accounts)

    def is_relevant(self, title: str, description: str = "") -> bool:
        """Decide whether an item is AI-education relevant."""
        content = f"{title} {description}".lower()
        return bool(
            self._keywords.search(content)
            or self._influential.search(content)
            or self._organizations.search(content)
        )
