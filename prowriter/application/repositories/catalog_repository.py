"""站点目录仓储层：已发布文章与分类。"""

from __future__ import annotations

from sqlalchemy.orm import Session

from prowriter.domain.entities.category import Category
from prowriter.domain.entities.published_article import PublishedArticle


class PublishedArticleRepository:
    """已发布文章仓储类。"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, article: PublishedArticle) -> PublishedArticle:
        self.db.add(article)
        self.db.commit()
        self.db.refresh(article)
        return article

    def get_by_id(self, article_id: str) -> PublishedArticle | None:
        return self.db.query(PublishedArticle).filter(PublishedArticle.id == article_id).first()

    def list(self) -> list[PublishedArticle]:
        """列出全部已发布文章（最新在前）。"""
        return self.db.query(PublishedArticle).order_by(PublishedArticle.created_at.desc()).all()

    def delete(self, article_id: str) -> bool:
        article = self.get_by_id(article_id)
        if article is None:
            return False

        self.db.delete(article)
        self.db.commit()
        return True

    def delete_all(self) -> int:
        deleted = self.db.query(PublishedArticle).delete()
        self.db.commit()
        return int(deleted or 0)


class CategoryRepository:
    """分类仓储类。"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, category: Category) -> Category:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def get_by_id(self, category_id: str) -> Category | None:
        return self.db.query(Category).filter(Category.id == category_id).first()

    def get_by_name(self, name: str) -> Category | None:
        return self.db.query(Category).filter(Category.name == name).first()

    def list(self) -> list[Category]:
        """列出全部分类（按名称排序）。"""
        return self.db.query(Category).order_by(Category.name.asc()).all()

    def delete(self, category_id: str) -> bool:
        category = self.get_by_id(category_id)
        if category is None:
            return False

        self.db.delete(category)
        self.db.commit()
        return True

    def delete_all(self) -> int:
        deleted = self.db.query(Category).delete()
        self.db.commit()
        return int(deleted or 0)
