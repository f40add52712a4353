"""扩写方法库：内置方法 + 进程内用户自定义方法。"""

from __future__ import annotations

from uuid import uuid4

from prowriter.application.services.wizard.errors import WizardValidationError
from prowriter.domain.article import ExpansionMethod, MethodCategory
from prowriter.shared.constants.expansion_methods import BUILTIN_EXPANSION_METHODS


def strategy_instruction(method: ExpansionMethod) -> str:
    """应用到章节时写入的扩写指令文本。"""
    return f"[Strategy: {method.name}]\n{method.instruction}"


class ExpansionMethodLibrary:
    """扩写方法库。

    自定义方法只保存在进程内存中，按创建时间倒序排在内置方法之后。
    """

    def __init__(self, builtin: tuple[ExpansionMethod, ...] = BUILTIN_EXPANSION_METHODS):
        self._builtin = tuple(builtin)
        self._custom: list[ExpansionMethod] = []

    def list_methods(self, category: str | None = None) -> list[ExpansionMethod]:
        methods = [*self._builtin, *self._custom]
        if category:
            methods = [m for m in methods if m.category.value == category]
        return methods

    def get(self, method_id: str) -> ExpansionMethod | None:
        return next((m for m in self.list_methods() if m.id == method_id), None)

    def add_custom(
        self,
        *,
        name: str,
        category: str,
        instruction: str,
        description: str = "",
    ) -> ExpansionMethod:
        """新增自定义方法（名称与指令必填，分类必须是五类之一）。"""
        name = (name or "").strip()
        instruction = (instruction or "").strip()
        if not name or not instruction:
            raise WizardValidationError(
                code="method_incomplete",
                message="扩写方法必须提供名称与指令",
            )
        try:
            method_category = MethodCategory(category)
        except ValueError:
            raise WizardValidationError(
                code="invalid_category",
                message=f"无效的方法分类: {category}",
                details={"allowed": [c.value for c in MethodCategory]},
            ) from None

        method = ExpansionMethod(
            id=f"custom-{uuid4().hex[:8]}",
            name=name,
            category=method_category,
            description=(description or "").strip(),
            instruction=instruction,
        )
        self._custom.insert(0, method)
        return method
