"""扩写方法 API 路由。"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from prowriter.application.schemas.wizard import MethodCreate, MethodResponse
from prowriter.application.services.expansion_methods import ExpansionMethodLibrary
from prowriter.interfaces.api.deps import get_method_library

router = APIRouter(prefix="/methods", tags=["methods"])


@router.get("", response_model=list[MethodResponse], summary="列出扩写方法")
def list_methods(
    category: Annotated[str | None, Query(description="按分类过滤")] = None,
    library: ExpansionMethodLibrary = Depends(get_method_library),
):
    return [MethodResponse(**m.to_dict()) for m in library.list_methods(category)]


@router.post("", response_model=MethodResponse, status_code=201, summary="新增自定义方法")
def create_method(
    payload: MethodCreate,
    library: ExpansionMethodLibrary = Depends(get_method_library),
):
    method = library.add_custom(
        name=payload.name,
        category=payload.category,
        instruction=payload.instruction,
        description=payload.description,
    )
    return MethodResponse(**method.to_dict())
