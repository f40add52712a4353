"""API routes package.

本模块保持无副作用（不在 import 时导入各路由），
路由挂载在 `prowriter/interfaces/api/app.py` 中显式导入与 include。
"""

__all__: list[str] = []
