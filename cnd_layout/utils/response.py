"""Response envelopes returned by the pipeline entry points.

Success: {"ok": true, "data": ..., "warnings": [...]}  (warnings only if any)
Error:   {"ok": false, "error": {"message": ..., "code": ..., "details": ...}}
"""

from typing import Any, Dict, List, Optional


def is_success(result: Dict[str, Any]) -> bool:
    return bool(result.get("ok"))


def success_response(data: Any, warnings: Optional[List[str]] = None) -> Dict[str, Any]:
    """Wrap a successful result.

    Args:
        data: Payload
        warnings: Non-fatal problems collected while producing it

    Returns:
        Success envelope
    """
    response: Dict[str, Any] = {"ok": True, "data": data}
    if warnings:
        response["warnings"] = list(warnings)
    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Wrap a failure.

    Args:
        message: Human-readable description
        code: Machine-readable code such as ``SPEC_SYNTAX_ERROR``
        details: Structured context (line, column, entry id, ...)

    Returns:
        Error envelope
    """
    error: Dict[str, Any] = {"message": message}
    if code:
        error["code"] = code
    if details:
        error["details"] = details
    return {"ok": False, "error": error}


def create_issue(
    severity: str,
    message: str,
    location: Optional[str] = None,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    """One structured validation finding (severity: error, warning or info)."""
    issue = {"severity": severity, "message": message}
    if location:
        issue["location"] = location
    if code:
        issue["code"] = code
    return issue


def validation_response(issues: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Envelope for a validation pass; ``ok`` is False if any issue is an error."""
    severities = {issue["severity"] for issue in issues}
    if "error" in severities:
        status = "error"
    elif "warning" in severities:
        status = "warning"
    else:
        status = "ok"
    return {"ok": status != "error", "data": {"status": status, "issues": issues}}
