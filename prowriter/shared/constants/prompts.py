"""提示词相关常量。

本文件仅作为提示词注册表，聚合各业务模块的提示词定义。
"""

from prowriter.application.services.generation.prompts import (
    PROMPTS as GENERATION_PROMPTS,
)
from prowriter.application.services.generation.prompts import (
    SCOPE_GENERATE_OUTLINE,
    SCOPE_GENERATE_SECTION,
)
from prowriter.application.services.metadata.prompts import (
    PROMPTS as METADATA_PROMPTS,
)
from prowriter.application.services.metadata.prompts import (
    SCOPE_PUBLISH_METADATA,
)

# 导出 Scope 常量供其他模块使用
__all__ = [
    "SCOPE_GENERATE_OUTLINE",
    "SCOPE_GENERATE_SECTION",
    "SCOPE_PUBLISH_METADATA",
    "DEFAULT_PROMPTS",
]

# 聚合所有提示词
DEFAULT_PROMPTS = {
    **GENERATION_PROMPTS,
    **METADATA_PROMPTS,
}
