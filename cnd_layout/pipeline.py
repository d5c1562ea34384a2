"""End-to-end entry points: spec text + data instance -> response envelope.

These functions never raise for bad input. Every failure becomes an error
envelope with one of the codes below; lenient-mode problems travel as
``warnings`` next to a usable layout.

Error codes:
    SPEC_SYNTAX_ERROR: spec text is not well-formed
    SPEC_VALIDATION_ERROR: a known entry kind has invalid parameters
    INSTANCE_ERROR: the data instance dictionary does not match the schema
    LAYOUT_ERROR: strict mode aborted layout generation
"""

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from cnd_layout.layout.generator import LayoutGenerator
from cnd_layout.models.instance import DataInstance
from cnd_layout.rendering.base import LayoutRenderer
from cnd_layout.spec.errors import SpecSyntaxError, SpecValidationError
from cnd_layout.spec.parser import parse_layout_spec
from cnd_layout.utils.response import (
    create_issue,
    error_response,
    success_response,
    validation_response,
)

logger = logging.getLogger(__name__)


def _spec_error(e: Union[SpecSyntaxError, SpecValidationError]) -> Dict[str, Any]:
    if isinstance(e, SpecSyntaxError):
        details = {k: v for k, v in (("line", e.line), ("column", e.column)) if v is not None}
        return error_response(str(e), "SPEC_SYNTAX_ERROR", details or None)
    details = {"kind": e.kind, "problems": e.problems}
    if e.section:
        details["section"] = e.section
    return error_response(str(e), "SPEC_VALIDATION_ERROR", details)


def build_layout(
    spec_text: Optional[str],
    instance: Union[DataInstance, Dict[str, Any]],
    projections: Optional[Dict[str, str]] = None,
    strict: Optional[bool] = None,
    renderer: Optional[LayoutRenderer] = None,
) -> Dict[str, Any]:
    """Parse a spec, compile it against an instance and optionally render it.

    Args:
        spec_text: YAML layout spec
        instance: DataInstance or its dictionary form
        projections: Chosen atom per projected type
        strict: Abort on the first entry-level failure
        renderer: Receives the layout on success

    Returns:
        Success envelope with ``layout`` and ``projection_choices``, or an
        error envelope
    """
    try:
        parsed = parse_layout_spec(spec_text)
    except (SpecSyntaxError, SpecValidationError) as e:
        logger.info(f"Rejected layout spec: {e}")
        return _spec_error(e)

    if not isinstance(instance, DataInstance):
        try:
            instance = DataInstance.from_dict(instance)
        except ValidationError as e:
            return error_response(
                f"Invalid data instance: {e.error_count()} error(s)",
                "INSTANCE_ERROR",
                {"errors": [err["msg"] for err in e.errors()]},
            )

    result = LayoutGenerator(parsed.spec, strict=strict).generate(instance, projections)
    warnings = parsed.warnings + result.warnings
    if not result.ok:
        return error_response(result.error, "LAYOUT_ERROR", {"warnings": warnings})

    if renderer is not None:
        renderer.clear()
        renderer.render_layout(result.layout)

    return success_response(
        {
            "layout": result.layout.to_dict(),
            "projection_choices": [c.model_dump() for c in result.projection_choices],
        },
        warnings,
    )


def check_spec(spec_text: Optional[str]) -> Dict[str, Any]:
    """Validate spec text, reporting unknown kinds and parameters as warnings.

    Returns:
        Validation envelope with ``status`` and ``issues``
    """
    try:
        parsed = parse_layout_spec(spec_text)
    except SpecSyntaxError as e:
        return validation_response([create_issue("error", str(e), code="SPEC_SYNTAX_ERROR")])
    except SpecValidationError as e:
        return validation_response([
            create_issue("error", str(e), location=e.section, code="SPEC_VALIDATION_ERROR")
        ])
    return validation_response([create_issue("warning", w) for w in parsed.warnings])
