"""文章向导状态机。

一个 `ArticleWizard` 对应一个编辑会话：持有主题、章节序列与当前步骤，
通过 GenerationGateway 生成大纲/章节，通过 ArticleStore 按主题去重持久化。

所有章节修改都是按 id 的整体替换（"仍存在才应用"）。
每次重置递增 `_epoch`，重置前发出的生成请求返回后直接丢弃，
即使同一主题的草稿已被重新载入、章节 id 相同。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, TypeVar

from prowriter.application.services.article_store import ArticleStore
from prowriter.application.services.expansion_methods import (
    ExpansionMethodLibrary,
    strategy_instruction,
)
from prowriter.application.services.generation.gateway import GenerationGateway
from prowriter.application.services.generation.outline_utils import normalize_outline
from prowriter.application.services.metadata.flow import PublishMetadataFlow
from prowriter.application.services.wizard.autosave import AutoSaveDebouncer
from prowriter.application.services.wizard.errors import (
    SectionNotFoundError,
    WizardValidationError,
)
from prowriter.application.services.wizard.steps import BACKWARD, FORWARD, WizardStep
from prowriter.domain.article import (
    ArticleDraft,
    ArticleStatus,
    ExpansionMethod,
    Section,
    derive_status,
    new_section_id,
    render_article,
    render_full_text,
    renumber,
)
from prowriter.shared.errors import AppError, ConfigurationError, GenerationFailedError
from prowriter.shared.logging import get_logger, log_extra

log = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StartResult:
    step: WizardStep
    from_cache: bool


@dataclass
class GenerateAllResult:
    generated: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated": list(self.generated),
            "failed": dict(self.failed),
            "skipped": list(self.skipped),
        }


class ArticleWizard:
    """文章向导（单会话）。"""

    def __init__(
        self,
        *,
        generation_gateway: GenerationGateway,
        article_store: ArticleStore,
        method_library: ExpansionMethodLibrary | None = None,
        metadata_flow: PublishMetadataFlow | None = None,
        section_count: int = 10,
        autosave_delay_seconds: float = 2.0,
    ):
        self._generation = generation_gateway
        self._store = article_store
        self.method_library = method_library or ExpansionMethodLibrary()
        self.metadata = metadata_flow
        self.section_count = section_count

        self.step = WizardStep.SETUP
        self.topic = ""
        self.article_id: str | None = None
        self.is_generating_outline = False
        self._sections: tuple[Section, ...] = ()
        self._epoch = 0
        self._autosave = AutoSaveDebouncer(
            self._persist, autosave_delay_seconds, name="article_wizard"
        )

    # ============== 只读视图 ==============

    @property
    def sections(self) -> tuple[Section, ...]:
        return self._sections

    @property
    def status(self) -> ArticleStatus:
        return derive_status(self._sections)

    @property
    def full_text(self) -> str:
        return render_full_text(self._sections)

    @property
    def autosave_pending(self) -> bool:
        return self._autosave.pending

    def progress(self) -> dict[str, int]:
        completed = sum(1 for s in self._sections if s.has_content)
        return {"completed": completed, "total": len(self._sections)}

    def render_article(self) -> str:
        return render_article(self.topic, self._sections)

    def get_section(self, section_id: str) -> Section | None:
        return next((s for s in self._sections if s.id == section_id), None)

    def snapshot(self) -> dict[str, Any]:
        return {
            "step": self.step.value,
            "topic": self.topic,
            "article_id": self.article_id,
            "status": self.status.value,
            "is_generating_outline": self.is_generating_outline,
            "progress": self.progress(),
            "sections": [s.to_dict() for s in self._sections],
            "autosave_pending": self.autosave_pending,
        }

    # ============== 启动 ==============

    async def start(self, topic: str) -> StartResult:
        """提交主题：命中已有草稿则直接恢复，否则生成大纲。

        不在初始步骤时先写入挂起的自动保存并重置会话。
        """
        topic = (topic or "").strip()
        if not topic:
            raise WizardValidationError(code="empty_topic", message="主题不能为空")
        if self.is_generating_outline:
            raise WizardValidationError(
                code="outline_in_progress",
                message="大纲正在生成中，请勿重复提交",
                status_code=409,
            )
        self.is_generating_outline = True
        try:
            if self.step != WizardStep.SETUP:
                await self.reset()
            existing = await self._find_existing(topic)
            if existing is not None and existing.sections:
                return self._restore(existing)

            titles = await self._call_gateway(self._generation.generate_outline(topic))
            titles = normalize_outline(titles, self.section_count)
            self.topic = topic
            self.article_id = None
            self._sections = tuple(
                Section(id=new_section_id(), title=title, order=index)
                for index, title in enumerate(titles)
            )
            self.step = WizardStep.OUTLINE
            log.info(
                "wizard.outline_generated",
                extra=log_extra(topic=topic, sections=len(self._sections)),
            )
            # 新大纲立即落库，不等待防抖
            await self._autosave.save_now()
            return StartResult(step=self.step, from_cache=False)
        finally:
            self.is_generating_outline = False

    async def _find_existing(self, topic: str) -> ArticleDraft | None:
        try:
            return await self._store.find_by_topic(topic)
        except Exception as exc:
            log.exception(
                "wizard.draft_lookup_failed",
                extra=log_extra(topic=topic, error=str(exc), type=exc.__class__.__name__),
            )
            return None

    def _restore(self, draft: ArticleDraft) -> StartResult:
        self.topic = draft.topic
        self.article_id = draft.id
        self._sections = renumber(replace(s, is_generating=False) for s in draft.sections)
        completed = sum(1 for s in self._sections if s.has_content)
        if completed == len(self._sections):
            self.step = WizardStep.PREVIEW
        elif completed:
            self.step = WizardStep.WRITING
        else:
            self.step = WizardStep.OUTLINE
        if self.metadata is not None and draft.publish_metadata:
            self.metadata.load(draft.publish_metadata)
        log.info(
            "wizard.draft_restored",
            extra=log_extra(
                topic=self.topic,
                article_id=self.article_id,
                step=self.step.value,
                completed=completed,
            ),
        )
        return StartResult(step=self.step, from_cache=True)

    # ============== 章节编辑 ==============

    def update_section_title(self, section_id: str, title: str) -> Section | None:
        return self._edit_section(section_id, title=title)

    def update_section_instruction(self, section_id: str, instruction: str) -> Section | None:
        return self._edit_section(section_id, instruction=instruction)

    def delete_section(self, section_id: str) -> bool:
        if self.get_section(section_id) is None:
            return False
        if len(self._sections) <= 1:
            raise WizardValidationError(
                code="last_section",
                message="文章至少需要保留一个章节",
                details={"section_id": section_id},
            )
        self._sections = renumber(s for s in self._sections if s.id != section_id)
        self._autosave.schedule()
        return True

    def apply_method(self, section_id: str, method_id: str) -> Section | None:
        method = self.method_library.get(method_id)
        if method is None:
            raise WizardValidationError(
                code="method_not_found",
                message=f"扩写方法不存在: {method_id}",
                status_code=404,
                details={"method_id": method_id},
            )
        return self._edit_section(section_id, instruction=strategy_instruction(method))

    def add_custom_method(
        self,
        *,
        name: str,
        category: str,
        instruction: str,
        description: str = "",
    ) -> ExpansionMethod:
        return self.method_library.add_custom(
            name=name,
            category=category,
            instruction=instruction,
            description=description,
        )

    def _edit_section(self, section_id: str, **changes: Any) -> Section | None:
        updated = self._replace_section(section_id, **changes)
        if updated is not None:
            self._autosave.schedule()
        return updated

    def _replace_section(self, section_id: str, **changes: Any) -> Section | None:
        """按 id 替换章节；章节已不存在时什么都不做。"""
        updated: Section | None = None
        items = []
        for s in self._sections:
            if s.id == section_id:
                updated = replace(s, **changes)
                items.append(updated)
            else:
                items.append(s)
        if updated is not None:
            self._sections = tuple(items)
        return updated

    # ============== 章节生成 ==============

    async def generate_one_section(self, section_id: str) -> Section | None:
        """生成（或重新生成）单个章节。

        返回写入内容后的章节；生成期间章节被删除时返回 None。
        """
        self._require_started()
        section = self.get_section(section_id)
        if section is None:
            raise SectionNotFoundError(section_id)
        if section.is_generating:
            raise WizardValidationError(
                code="section_busy",
                message="该章节正在生成中",
                status_code=409,
                details={"section_id": section_id},
            )
        if not section.title.strip():
            raise WizardValidationError(
                code="empty_title",
                message="章节标题为空，无法生成",
                details={"section_id": section_id},
            )

        epoch = self._epoch
        self._replace_section(section_id, is_generating=True)
        updated: Section | None = None
        try:
            content = await self._call_gateway(
                self._generation.generate_section(self.topic, section.title, section.instruction)
            )
            if self._epoch == epoch:
                updated = self._replace_section(section_id, content=content, is_generating=False)
        finally:
            if updated is None and self._epoch == epoch:
                self._replace_section(section_id, is_generating=False)

        if updated is None:
            log.info(
                "wizard.section_result_dropped",
                extra=log_extra(section_id=section_id),
            )
            return None
        log.info(
            "wizard.section_generated",
            extra=log_extra(section_id=section_id, chars=len(updated.content)),
        )
        self._autosave.schedule()
        return updated

    async def generate_all_remaining(self) -> GenerateAllResult:
        """按顺序逐个生成尚无内容的章节（同一时刻最多一个请求）。"""
        self._require_started()
        result = GenerateAllResult()
        epoch = self._epoch
        pending = [s.id for s in self._sections if not s.has_content and not s.is_generating]
        for section_id in pending:
            current = self.get_section(section_id)
            if (
                self._epoch != epoch
                or current is None
                or current.has_content
                or current.is_generating
            ):
                result.skipped.append(section_id)
                continue
            try:
                updated = await self.generate_one_section(section_id)
            except ConfigurationError:
                raise
            except AppError as exc:
                log.warning(
                    "wizard.section_generation_failed",
                    extra=log_extra(section_id=section_id, code=exc.code),
                )
                result.failed[section_id] = exc.code
                continue
            if updated is None:
                result.skipped.append(section_id)
            else:
                result.generated.append(section_id)
        log.info(
            "wizard.generate_all_done",
            extra=log_extra(
                generated=len(result.generated),
                failed=len(result.failed),
                skipped=len(result.skipped),
            ),
        )
        return result

    async def _call_gateway(self, call: Awaitable[T]) -> T:
        try:
            return await call
        except AppError:
            raise
        except Exception as exc:
            log.exception(
                "wizard.gateway_failed",
                extra=log_extra(error=str(exc), type=exc.__class__.__name__),
            )
            raise GenerationFailedError() from exc

    # ============== 发布信息 ==============

    async def generate_metadata(self) -> dict[str, Any]:
        self._require_started()
        if self.metadata is None:
            raise WizardValidationError(
                code="metadata_unavailable",
                message="当前会话未启用发布信息生成",
                status_code=409,
            )
        if not any(s.has_content for s in self._sections):
            raise WizardValidationError(
                code="empty_article",
                message="文章还没有任何已生成的章节",
            )
        await self.metadata.generate(article_text=self.render_article(), topic=self.topic)
        self._autosave.schedule()
        return self.metadata.to_dict()

    def update_metadata_item(self, field_name: str, index: int, value: str) -> dict[str, Any]:
        flow = self._require_metadata()
        flow.update_list_item(field_name, index, value)
        self._autosave.schedule()
        return flow.to_dict()

    def update_metadata_link(self, index: int, key: str, value: str) -> dict[str, Any]:
        flow = self._require_metadata()
        flow.update_linking_item(index, key, value)
        self._autosave.schedule()
        return flow.to_dict()

    def _require_metadata(self) -> PublishMetadataFlow:
        if self.metadata is None or not self.metadata.has_generated:
            raise WizardValidationError(
                code="metadata_not_generated",
                message="请先生成发布信息",
                status_code=409,
            )
        return self.metadata

    # ============== 步骤导航 ==============

    def advance(self) -> WizardStep:
        target = FORWARD.get(self.step)
        if target is None:
            raise self._invalid_transition(None)
        if target == WizardStep.PREVIEW and not any(s.has_content for s in self._sections):
            raise WizardValidationError(
                code="no_content",
                message="至少生成一个章节后才能进入预览",
                details={"step": self.step.value},
            )
        self.step = target
        return self.step

    def back(self) -> WizardStep:
        target = BACKWARD.get(self.step)
        if target is None:
            raise self._invalid_transition(None)
        self.step = target
        return self.step

    async def go_to(self, step: WizardStep | str) -> WizardStep:
        try:
            target = WizardStep(step)
        except ValueError:
            raise self._invalid_transition(str(step)) from None
        if target == WizardStep.SETUP:
            await self.reset()
        elif target == self.step:
            pass
        elif target == FORWARD.get(self.step):
            self.advance()
        elif target == BACKWARD.get(self.step):
            self.back()
        else:
            raise self._invalid_transition(target.value)
        return self.step

    async def reset(self) -> None:
        """回到初始步骤；挂起的自动保存先写入当前主题。"""
        await self._autosave.flush()
        self._epoch += 1
        self.step = WizardStep.SETUP
        self.topic = ""
        self.article_id = None
        self._sections = ()
        if self.metadata is not None:
            self.metadata.clear()

    async def close(self) -> None:
        await self._autosave.close()

    def _invalid_transition(self, target: str | None) -> WizardValidationError:
        return WizardValidationError(
            code="invalid_transition",
            message="不允许的步骤切换",
            status_code=409,
            details={"from": self.step.value, "to": target},
        )

    def _require_started(self) -> None:
        if self.step == WizardStep.SETUP or not self._sections:
            raise WizardValidationError(
                code="wizard_not_started",
                message="请先提交主题并生成大纲",
                status_code=409,
            )

    # ============== 持久化 ==============

    async def _persist(self) -> None:
        """按主题 upsert 当前（触发时刻的）状态。"""
        topic = self.topic
        sections = self._sections
        if not topic or not sections:
            return
        publish_metadata = None
        if self.metadata is not None and self.metadata.has_generated:
            publish_metadata = self.metadata.to_dict()["result"]
        draft = ArticleDraft.from_sections(
            topic,
            sections,
            id=self.article_id,
            publish_metadata=publish_metadata,
        )
        saved = await self._store.upsert(draft)
        if self.topic == topic:
            self.article_id = saved.id
        log.info(
            "wizard.autosaved",
            extra=log_extra(article_id=saved.id, status=saved.status.value),
        )
