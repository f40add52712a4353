"""向导步骤与允许的迁移。"""

from __future__ import annotations

from enum import Enum


class WizardStep(str, Enum):
    SETUP = "setup"
    OUTLINE = "outline"
    KNOWLEDGE_BASE = "knowledge_base"
    WRITING = "writing"
    PREVIEW = "preview"
    PUBLISH_READY = "publish_ready"


# setup -> outline 只能通过 start() 完成
FORWARD: dict[WizardStep, WizardStep] = {
    WizardStep.OUTLINE: WizardStep.KNOWLEDGE_BASE,
    WizardStep.KNOWLEDGE_BASE: WizardStep.WRITING,
    WizardStep.WRITING: WizardStep.PREVIEW,
    WizardStep.PREVIEW: WizardStep.PUBLISH_READY,
}

BACKWARD: dict[WizardStep, WizardStep] = {
    WizardStep.KNOWLEDGE_BASE: WizardStep.OUTLINE,
    WizardStep.WRITING: WizardStep.KNOWLEDGE_BASE,
    WizardStep.PREVIEW: WizardStep.WRITING,
    WizardStep.PUBLISH_READY: WizardStep.PREVIEW,
}
