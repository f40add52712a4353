"""发布信息流程：生成、逐项编辑与整体复制。"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from prowriter.application.schemas.publish_metadata import (
    AIConfig,
    LinkingSuggestion,
    PublishMetadata,
)
from prowriter.application.services.ai_config_service import AIConfigService
from prowriter.application.services.catalog_service import CatalogService
from prowriter.application.services.metadata.gateway import MetadataGateway
from prowriter.application.services.wizard.errors import WizardValidationError
from prowriter.shared.errors import AppError
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)

LIST_FIELDS = ("suggested_categories", "titles", "keywords", "teasers", "sources")
LINK_KEYS = ("title", "url")


class PublishMetadataFlow:
    """单篇文章的发布信息状态。

    生成失败时保留上一次结果，错误信息写入 `last_error` 并继续抛出。
    列表编辑不再校验配置中的数量。
    """

    def __init__(
        self,
        *,
        gateway: MetadataGateway,
        catalog_service: CatalogService | None = None,
        ai_config_service: AIConfigService | None = None,
    ):
        self._gateway = gateway
        self._catalog = catalog_service
        self._ai_config = ai_config_service
        self.result = PublishMetadata()
        self.has_generated = False
        self.is_generating = False
        self.last_error: str | None = None

    async def generate(self, *, article_text: str, topic: str) -> PublishMetadata:
        if self.is_generating:
            raise WizardValidationError(
                code="metadata_in_progress",
                message="发布信息正在生成中",
                status_code=409,
            )
        self.is_generating = True
        self.last_error = None
        try:
            known_articles = await self._catalog.list_articles() if self._catalog else []
            categories = await self._catalog.list_categories() if self._catalog else []
            config = await self._ai_config.get() if self._ai_config else AIConfig()
            result = await self._gateway.generate(
                article_text=article_text,
                topic=topic,
                known_articles=known_articles,
                categories=[c.name for c in categories],
                config=config,
            )
        except Exception as exc:
            self.last_error = exc.message if isinstance(exc, AppError) else str(exc)
            raise
        finally:
            self.is_generating = False

        self.result = result
        self.has_generated = True
        return result

    def load(self, data: dict[str, Any]) -> bool:
        """恢复已保存的发布信息；数据无效时保持空结果。"""
        try:
            self.result = PublishMetadata.model_validate(data)
        except ValidationError as exc:
            log.warning("metadata.restore_failed", extra=log_extra(error=str(exc)))
            return False
        self.has_generated = True
        return True

    def clear(self) -> None:
        self.result = PublishMetadata()
        self.has_generated = False
        self.is_generating = False
        self.last_error = None

    def update_list_item(self, field: str, index: int, value: str) -> PublishMetadata:
        if field not in LIST_FIELDS:
            raise WizardValidationError(
                code="invalid_field",
                message=f"不可编辑的字段: {field}",
                details={"allowed": list(LIST_FIELDS)},
            )
        items = list(getattr(self.result, field))
        self._check_index(field, index, len(items))
        items[index] = value
        self.result = self.result.model_copy(update={field: items})
        return self.result

    def update_linking_item(self, index: int, key: str, value: str) -> PublishMetadata:
        if key not in LINK_KEYS:
            raise WizardValidationError(
                code="invalid_field",
                message=f"不可编辑的字段: {key}",
                details={"allowed": list(LINK_KEYS)},
            )
        links = list(self.result.linking_suggestions)
        self._check_index("linking_suggestions", index, len(links))
        links[index] = LinkingSuggestion(**{**links[index].model_dump(), key: value})
        self.result = self.result.model_copy(update={"linking_suggestions": links})
        return self.result

    def copy_text(self) -> str:
        """全部字段拼成的纯文本块；尚未生成时为空。"""
        if not self.has_generated:
            return ""
        r = self.result
        blocks = [
            f"Suggested categories:\n{', '.join(r.suggested_categories)}",
            f"Slug:\n{r.slug}",
            f"Suggested titles:\n{_numbered(r.titles)}",
            f"Keywords:\n{', '.join(r.keywords)}",
            f"Teasers:\n{_numbered(r.teasers)}",
            "Internal links:\n"
            + "\n".join(
                f"{i}. {s.title}: {s.url}"
                for i, s in enumerate((s for s in r.linking_suggestions if s.title), start=1)
            ),
            f"Sources (APA):\n{_numbered(r.sources)}",
        ]
        return "\n\n".join(blocks).strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_generated": self.has_generated,
            "is_generating": self.is_generating,
            "last_error": self.last_error,
            "result": self.result.model_dump(),
        }

    @staticmethod
    def _check_index(field: str, index: int, size: int) -> None:
        if index < 0 or index >= size:
            raise WizardValidationError(
                code="index_out_of_range",
                message=f"{field} 下标越界: {index}",
                details={"field": field, "index": index, "size": size},
            )


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate((x for x in items if x), start=1))
