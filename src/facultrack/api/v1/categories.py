"""Category schema listing for submission forms."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter

from ...schemas import CategoryFieldRead, CategorySchemaRead
from ...services.category_registry import CATEGORY_SCHEMAS

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategorySchemaRead], summary="Fields per achievement category")
def list_categories() -> List[CategorySchemaRead]:
    return [
        CategorySchemaRead(
            category=schema.category,
            label=schema.label,
            fields=[
                CategoryFieldRead(
                    name=spec.name,
                    required=spec.required,
                    kind=spec.kind.value,
                    choices=list(spec.choices),
                )
                for spec in schema.fields
            ],
        )
        for schema in CATEGORY_SCHEMAS.values()
    ]
