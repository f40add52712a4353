"""领域实体模块。"""

from .generated_article import GeneratedArticle
from .published_article import PublishedArticle
from .category import Category
from .app_setting import AppSetting

__all__ = [
    "GeneratedArticle",
    "PublishedArticle",
    "Category",
    "AppSetting",
]
