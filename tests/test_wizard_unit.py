from __future__ import annotations

import asyncio

import pytest

from prowriter.application.services.expansion_methods import ExpansionMethodLibrary
from prowriter.application.services.metadata.flow import PublishMetadataFlow
from prowriter.application.services.wizard.errors import WizardValidationError
from prowriter.application.services.wizard.service import ArticleWizard
from prowriter.application.services.wizard.steps import WizardStep
from prowriter.domain.article import ArticleDraft, ArticleStatus, Section
from prowriter.shared.errors import ConfigurationError, GenerationFailedError


def _wizard(gateway, store, *, delay: float = 10.0, metadata_gateway=None) -> ArticleWizard:
    return ArticleWizard(
        generation_gateway=gateway,
        article_store=store,
        method_library=ExpansionMethodLibrary(),
        metadata_flow=PublishMetadataFlow(gateway=metadata_gateway) if metadata_gateway else None,
        section_count=10,
        autosave_delay_seconds=delay,
    )


# ============== start ==============


@pytest.mark.anyio
async def test_start_generates_normalized_outline_and_persists(fake_generation, memory_store):
    fake_generation.titles = [f"T{i}" for i in range(1, 8)]
    wizard = _wizard(fake_generation, memory_store)

    result = await wizard.start("  Renewable Energy ")

    assert result.from_cache is False
    assert result.step == WizardStep.OUTLINE
    assert wizard.topic == "Renewable Energy"
    assert [s.title for s in wizard.sections][-3:] == ["Section 8", "Section 9", "Section 10"]
    assert len({s.id for s in wizard.sections}) == 10
    assert [s.order for s in wizard.sections] == list(range(10))
    assert all(s.content == "" and s.instruction == "" for s in wizard.sections)
    assert not wizard.is_generating_outline

    # 新大纲立即落库，状态为 draft
    assert len(memory_store.upserts) == 1
    assert memory_store.upserts[0].status == ArticleStatus.DRAFT
    assert wizard.article_id == memory_store.upserts[0].id


@pytest.mark.anyio
async def test_start_truncates_long_outline(fake_generation, memory_store):
    fake_generation.titles = [f"T{i}" for i in range(1, 14)]
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    assert [s.title for s in wizard.sections] == [f"T{i}" for i in range(1, 11)]


@pytest.mark.anyio
async def test_start_twice_same_topic_calls_outline_once(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("Climate Change")
    first_ids = [s.id for s in wizard.sections]

    result = await wizard.start("climate change ")

    assert fake_generation.outline_calls == ["Climate Change"]
    assert result.from_cache is True
    assert result.step == WizardStep.OUTLINE
    assert [s.id for s in wizard.sections] == first_ids


@pytest.mark.anyio
async def test_start_from_later_step_saves_pending_edits_first(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store, delay=10)
    await wizard.start("Topic")
    first = wizard.sections[0]
    await wizard.generate_one_section(first.id)
    wizard.update_section_title(first.id, "Edited")
    wizard.advance()
    assert wizard.autosave_pending

    result = await wizard.start("topic")

    assert fake_generation.outline_calls == ["Topic"]
    assert result.from_cache is True
    assert result.step == WizardStep.WRITING
    assert wizard.sections[0].title == "Edited"
    assert wizard.sections[0].content == "Content for Title 1"


@pytest.mark.anyio
async def test_start_routes_restored_draft_by_progress(fake_generation, memory_store):
    sections = [
        Section(id="a", title="A", content="done"),
        Section(id="b", title="B", is_generating=True),
    ]
    await memory_store.upsert(ArticleDraft.from_sections("Topic", sections))
    wizard = _wizard(fake_generation, memory_store)

    result = await wizard.start("topic")

    assert result.from_cache is True
    assert result.step == WizardStep.WRITING
    assert not any(s.is_generating for s in wizard.sections)
    assert fake_generation.outline_calls == []


@pytest.mark.anyio
async def test_start_restored_complete_draft_goes_to_preview(fake_generation, memory_store):
    await memory_store.upsert(
        ArticleDraft.from_sections("Done", [Section(id="a", title="A", content="x")])
    )
    wizard = _wizard(fake_generation, memory_store)
    result = await wizard.start("Done")
    assert result.step == WizardStep.PREVIEW


@pytest.mark.anyio
async def test_start_rejects_empty_topic(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    with pytest.raises(WizardValidationError) as excinfo:
        await wizard.start("   ")
    assert excinfo.value.code == "empty_topic"
    assert fake_generation.outline_calls == []


@pytest.mark.anyio
async def test_start_failure_keeps_setup_and_clears_flag(fake_generation, memory_store):
    fake_generation.outline_error = RuntimeError("network down")
    wizard = _wizard(fake_generation, memory_store)

    with pytest.raises(GenerationFailedError):
        await wizard.start("topic")

    assert wizard.step == WizardStep.SETUP
    assert not wizard.is_generating_outline
    assert memory_store.upserts == []


@pytest.mark.anyio
async def test_start_configuration_error_is_distinct(fake_generation, memory_store):
    fake_generation.outline_error = ConfigurationError(message="missing key")
    wizard = _wizard(fake_generation, memory_store)

    with pytest.raises(ConfigurationError):
        await wizard.start("topic")

    assert wizard.step == WizardStep.SETUP
    assert memory_store.upserts == []


@pytest.mark.anyio
async def test_start_lookup_failure_is_treated_as_not_found(fake_generation, memory_store):
    memory_store.fail_lookup = True
    wizard = _wizard(fake_generation, memory_store)
    result = await wizard.start("topic")
    assert result.from_cache is False
    assert fake_generation.outline_calls == ["topic"]


@pytest.mark.anyio
async def test_duplicate_start_while_outline_running_is_rejected(fake_generation, memory_store):
    gate = asyncio.Event()

    async def slow_outline(topic: str) -> list[str]:
        fake_generation.outline_calls.append(topic)
        await gate.wait()
        return ["A"]

    fake_generation.generate_outline = slow_outline
    wizard = _wizard(fake_generation, memory_store)

    task = asyncio.create_task(wizard.start("topic"))
    await asyncio.sleep(0)
    assert wizard.is_generating_outline

    with pytest.raises(WizardValidationError) as excinfo:
        await wizard.start("topic")
    assert excinfo.value.code == "outline_in_progress"

    gate.set()
    await task
    assert fake_generation.outline_calls == ["topic"]


# ============== 章节编辑 ==============


@pytest.mark.anyio
async def test_status_tracks_content_after_each_mutation(fake_generation, memory_store):
    fake_generation.titles = ["A", "B"]
    wizard = ArticleWizard(
        generation_gateway=fake_generation,
        article_store=memory_store,
        section_count=2,
        autosave_delay_seconds=10,
    )
    await wizard.start("topic")
    a, b = wizard.sections

    assert wizard.status == ArticleStatus.DRAFT
    await wizard.generate_one_section(a.id)
    assert wizard.status == ArticleStatus.DRAFT
    await wizard.generate_one_section(b.id)
    assert wizard.status == ArticleStatus.READY
    wizard.delete_section(a.id)
    assert wizard.status == ArticleStatus.READY


@pytest.mark.anyio
async def test_delete_last_section_is_refused(fake_generation, memory_store):
    fake_generation.titles = ["Only"]
    wizard = ArticleWizard(
        generation_gateway=fake_generation,
        article_store=memory_store,
        section_count=1,
        autosave_delay_seconds=10,
    )
    await wizard.start("topic")
    only = wizard.sections[0]

    with pytest.raises(WizardValidationError) as excinfo:
        wizard.delete_section(only.id)
    assert excinfo.value.code == "last_section"
    assert wizard.sections == (only,)


@pytest.mark.anyio
async def test_unknown_section_edits_are_noops(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    before = wizard.sections

    assert wizard.update_section_title("missing", "x") is None
    assert wizard.update_section_instruction("missing", "x") is None
    assert wizard.delete_section("missing") is False
    assert wizard.sections == before
    assert not wizard.autosave_pending


@pytest.mark.anyio
async def test_edits_schedule_autosave_with_latest_state(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store, delay=0.03)
    await wizard.start("topic")
    first = wizard.sections[0]
    saves_before = len(memory_store.upserts)

    for i in range(5):
        wizard.update_section_title(first.id, f"Edit {i}")
        await asyncio.sleep(0.002)
    assert wizard.autosave_pending

    await asyncio.sleep(0.1)
    assert len(memory_store.upserts) == saves_before + 1
    assert memory_store.upserts[-1].sections[0].title == "Edit 4"


@pytest.mark.anyio
async def test_apply_method_sets_strategy_instruction(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    section = wizard.sections[0]

    updated = wizard.apply_method(section.id, "swot-analysis")
    assert updated is not None
    assert updated.instruction.startswith("[Strategy: SWOT Analysis]\n")

    with pytest.raises(WizardValidationError) as excinfo:
        wizard.apply_method(section.id, "nope")
    assert excinfo.value.code == "method_not_found"


# ============== 章节生成 ==============


@pytest.mark.anyio
async def test_generation_result_for_deleted_section_is_dropped(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    target = wizard.sections[3]
    fake_generation.gate = asyncio.Event()

    task = asyncio.create_task(wizard.generate_one_section(target.id))
    await asyncio.sleep(0)
    assert wizard.get_section(target.id).is_generating

    wizard.delete_section(target.id)
    fake_generation.gate.set()
    assert await task is None

    assert wizard.get_section(target.id) is None
    assert len(wizard.sections) == 9


@pytest.mark.anyio
async def test_edits_during_generation_are_preserved(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    target = wizard.sections[0]
    fake_generation.gate = asyncio.Event()

    task = asyncio.create_task(wizard.generate_one_section(target.id))
    await asyncio.sleep(0)
    wizard.update_section_instruction(target.id, "new guidance")
    fake_generation.gate.set()
    updated = await task

    assert updated.instruction == "new guidance"
    assert updated.content == f"Content for {target.title}"
    assert updated.is_generating is False


@pytest.mark.anyio
async def test_result_from_before_reset_is_dropped_after_same_topic_restart(
    fake_generation, memory_store
):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("Topic")
    target = wizard.sections[0]
    fake_generation.gate = asyncio.Event()

    task = asyncio.create_task(wizard.generate_one_section(target.id))
    await asyncio.sleep(0)
    await wizard.reset()
    await wizard.start("Topic")
    assert wizard.get_section(target.id) is not None

    fake_generation.gate.set()
    assert await task is None

    restored = wizard.get_section(target.id)
    assert restored.content == ""
    assert restored.is_generating is False
    assert wizard.step == WizardStep.OUTLINE


@pytest.mark.anyio
async def test_generation_finishing_after_close_schedules_no_autosave(
    fake_generation, memory_store
):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    target = wizard.sections[0]
    fake_generation.gate = asyncio.Event()

    task = asyncio.create_task(wizard.generate_one_section(target.id))
    await asyncio.sleep(0)
    await wizard.close()

    fake_generation.gate.set()
    updated = await task

    assert updated.content == f"Content for {target.title}"
    assert not wizard.autosave_pending


@pytest.mark.anyio
async def test_generation_failure_clears_flag_and_keeps_content(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    target = wizard.sections[0]
    await wizard.generate_one_section(target.id)

    fake_generation.section_errors[target.title] = RuntimeError("boom")
    with pytest.raises(GenerationFailedError):
        await wizard.generate_one_section(target.id)

    section = wizard.get_section(target.id)
    assert section.is_generating is False
    assert section.content == f"Content for {target.title}"


@pytest.mark.anyio
async def test_generate_rejects_busy_and_blank_title(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")
    first, second = wizard.sections[0], wizard.sections[1]
    fake_generation.gate = asyncio.Event()

    task = asyncio.create_task(wizard.generate_one_section(first.id))
    await asyncio.sleep(0)
    with pytest.raises(WizardValidationError) as excinfo:
        await wizard.generate_one_section(first.id)
    assert excinfo.value.code == "section_busy"
    fake_generation.gate.set()
    await task

    wizard.update_section_title(second.id, "   ")
    with pytest.raises(WizardValidationError) as excinfo:
        await wizard.generate_one_section(second.id)
    assert excinfo.value.code == "empty_title"


@pytest.mark.anyio
async def test_generate_all_remaining_is_sequential_and_skips_filled(fake_generation, memory_store):
    fake_generation.titles = ["A", "B", "C"]
    fake_generation.delay = 0.01
    wizard = ArticleWizard(
        generation_gateway=fake_generation,
        article_store=memory_store,
        section_count=3,
        autosave_delay_seconds=10,
    )
    await wizard.start("topic")
    a, b, c = wizard.sections
    await wizard.generate_one_section(b.id)
    fake_generation.section_calls.clear()

    result = await wizard.generate_all_remaining()

    assert fake_generation.section_calls == ["A", "C"]
    assert fake_generation.max_active == 1
    assert result.generated == [a.id, c.id]
    assert result.failed == {}
    assert wizard.status == ArticleStatus.READY


@pytest.mark.anyio
async def test_generate_all_remaining_continues_after_failure(fake_generation, memory_store):
    fake_generation.titles = ["A", "B", "C"]
    fake_generation.section_errors["B"] = GenerationFailedError()
    wizard = ArticleWizard(
        generation_gateway=fake_generation,
        article_store=memory_store,
        section_count=3,
        autosave_delay_seconds=10,
    )
    await wizard.start("topic")
    a, b, c = wizard.sections

    result = await wizard.generate_all_remaining()

    assert result.generated == [a.id, c.id]
    assert result.failed == {b.id: "generation_failed"}
    assert wizard.get_section(b.id).content == ""


@pytest.mark.anyio
async def test_generate_all_remaining_aborts_on_configuration_error(fake_generation, memory_store):
    fake_generation.titles = ["A", "B", "C"]
    fake_generation.section_errors["A"] = ConfigurationError(message="missing key")
    wizard = ArticleWizard(
        generation_gateway=fake_generation,
        article_store=memory_store,
        section_count=3,
        autosave_delay_seconds=10,
    )
    await wizard.start("topic")

    with pytest.raises(ConfigurationError):
        await wizard.generate_all_remaining()
    assert fake_generation.section_calls == ["A"]
    assert not any(s.is_generating for s in wizard.sections)


@pytest.mark.anyio
async def test_generate_before_start_is_rejected(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    with pytest.raises(WizardValidationError) as excinfo:
        await wizard.generate_all_remaining()
    assert excinfo.value.code == "wizard_not_started"


# ============== 步骤导航 ==============


@pytest.mark.anyio
async def test_navigation_edges(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store)
    await wizard.start("topic")

    assert wizard.advance() == WizardStep.KNOWLEDGE_BASE
    assert wizard.advance() == WizardStep.WRITING
    with pytest.raises(WizardValidationError) as excinfo:
        wizard.advance()
    assert excinfo.value.code == "no_content"

    await wizard.generate_one_section(wizard.sections[0].id)
    assert wizard.advance() == WizardStep.PREVIEW
    assert wizard.advance() == WizardStep.PUBLISH_READY
    with pytest.raises(WizardValidationError):
        wizard.advance()

    assert wizard.back() == WizardStep.PREVIEW
    assert await wizard.go_to("writing") == WizardStep.WRITING
    with pytest.raises(WizardValidationError) as excinfo:
        await wizard.go_to("outline")
    assert excinfo.value.code == "invalid_transition"

    assert await wizard.go_to("setup") == WizardStep.SETUP
    assert wizard.sections == ()
    assert wizard.topic == ""


@pytest.mark.anyio
async def test_reset_flushes_pending_autosave(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store, delay=10)
    await wizard.start("topic")
    first = wizard.sections[0]
    wizard.update_section_title(first.id, "Renamed")
    assert wizard.autosave_pending

    await wizard.reset()

    assert not wizard.autosave_pending
    assert memory_store.upserts[-1].sections[0].title == "Renamed"


@pytest.mark.anyio
async def test_autosave_failure_does_not_roll_back_state(fake_generation, memory_store):
    wizard = _wizard(fake_generation, memory_store, delay=0.01)
    await wizard.start("topic")
    memory_store.fail_upsert = True
    first = wizard.sections[0]

    wizard.update_section_title(first.id, "Kept")
    await asyncio.sleep(0.05)

    assert wizard.get_section(first.id).title == "Kept"


# ============== 发布信息 ==============


@pytest.mark.anyio
async def test_generate_metadata_uses_preview_markdown(fake_generation, memory_store, fake_metadata):
    wizard = _wizard(fake_generation, memory_store, metadata_gateway=fake_metadata)
    await wizard.start("topic")

    with pytest.raises(WizardValidationError) as excinfo:
        await wizard.generate_metadata()
    assert excinfo.value.code == "empty_article"

    await wizard.generate_one_section(wizard.sections[0].id)
    state = await wizard.generate_metadata()

    assert state["has_generated"] is True
    assert fake_metadata.calls[0]["article_text"].startswith("# topic\n\n")

    await wizard.reset()
    assert wizard.metadata.has_generated is False
