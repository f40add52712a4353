"""领域层（Domain）。"""

from .article import ArticleDraft, ArticleStatus, ExpansionMethod, MethodCategory, Section

__all__ = [
    "ArticleDraft",
    "ArticleStatus",
    "ExpansionMethod",
    "MethodCategory",
    "Section",
]
