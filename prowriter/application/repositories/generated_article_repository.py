"""生成文章仓储层。"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from prowriter.domain.entities.generated_article import GeneratedArticle


class GeneratedArticleRepository:
    """生成文章仓储类。"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, article: GeneratedArticle) -> GeneratedArticle:
        """创建文章。"""
        self.db.add(article)
        self.db.commit()
        self.db.refresh(article)
        return article

    def get_by_id(self, article_id: str) -> GeneratedArticle | None:
        """根据ID获取文章。"""
        return (
            self.db.query(GeneratedArticle)
            .filter(GeneratedArticle.id == article_id)
            .first()
        )

    def get_by_topic_key(self, topic_key: str) -> GeneratedArticle | None:
        """根据规范化主题获取文章。"""
        return (
            self.db.query(GeneratedArticle)
            .filter(GeneratedArticle.topic_key == topic_key)
            .first()
        )

    def list(self, limit: int = 100) -> list[GeneratedArticle]:
        """列出文章（最近更新的在前）。"""
        return (
            self.db.query(GeneratedArticle)
            .order_by(GeneratedArticle.updated_at.desc())
            .limit(limit)
            .all()
        )

    def update(self, article: GeneratedArticle) -> GeneratedArticle:
        """更新文章。"""
        article.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(article)
        return article

    def delete(self, article_id: str) -> bool:
        """删除文章。"""
        article = self.get_by_id(article_id)
        if article is None:
            return False

        self.db.delete(article)
        self.db.commit()
        return True
