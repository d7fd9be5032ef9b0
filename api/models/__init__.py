# Models module
from .article import NewsArticleModel, ArticleStatusEnum
from .source import NewsSourceModel, SourceTypeEnum
from .log import PipelineLogModel, LogStatusEnum

__all__ = [
    "NewsArticleModel",
    "ArticleStatusEnum",
    "NewsSourceModel",
    "SourceTypeEnum",
    "PipelineLogModel",
    "LogStatusEnum"
]
