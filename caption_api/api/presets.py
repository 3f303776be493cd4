"""
Purpose:
- Expose the read-only prompt style and caption template catalogs to the UI.
"""

from typing import Optional

from fastapi import APIRouter, Query

from ..captions.presets import (
    CAPTION_TEMPLATES,
    PROMPT_STYLES,
    available_model_types,
    default_prompt_style,
    get_prompt_style,
    get_template,
    templates_by_category,
    templates_by_model,
)

router = APIRouter(prefix="/api/v1/presets", tags=["presets"])


@router.get("/styles")
def list_styles():
    return {
        "ok": True,
        "default": default_prompt_style().id,
        "styles": [s.to_dict() for s in PROMPT_STYLES],
    }


@router.get("/styles/{style_id}")
def style_detail(style_id: str):
    return {"ok": True, "style": get_prompt_style(style_id).to_dict()}


@router.get("/templates")
def list_templates(
    model_type: Optional[str] = Query(default=None, description="general | z-image | flux | sdxl"),
    category: Optional[str] = Query(default=None, description="general | person | style"),
):
    """
    Filters combine: model_type keeps general templates too, category narrows further.
    """
    templates = templates_by_model(model_type) if model_type else list(CAPTION_TEMPLATES)
    if category:
        allowed = {t.id for t in templates_by_category(category)}
        templates = [t for t in templates if t.id in allowed]
    return {
        "ok": True,
        "model_types": available_model_types(),
        "templates": [t.to_dict() for t in templates],
    }


@router.get("/templates/{template_id}")
def template_detail(template_id: str):
    return {"ok": True, "template": get_template(template_id).to_dict()}
