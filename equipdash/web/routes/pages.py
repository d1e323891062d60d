from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from equipdash.core.catalog import CallContext
from equipdash.core.enforcer import IssueKind, UniquenessEnforcer
from equipdash.core.mac import is_valid_format, normalize_mac, parse_bulk
from equipdash.core import messages
from equipdash.web.deps import get_enforcer, templates

router = APIRouter()

CONTEXT_CHOICES = [c.value for c in CallContext]


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"contexts": CONTEXT_CHOICES},
    )


@router.post("/macs/check", response_class=HTMLResponse)
def check_mac(
    request: Request,
    mac: str = Form(""),
    context: CallContext = Form(CallContext.OTHER),
    exclude_id: Optional[str] = Form(None),
    enforcer: UniquenessEnforcer = Depends(get_enforcer),
):
    mac = normalize_mac(mac)
    if is_valid_format(mac):
        check = enforcer.check_exists_with_context(mac, context, exclude_id or None)
        taken, lines = bool(check), [messages.describe_check(check)]
    else:
        taken, lines = False, [messages.format_message(mac)]

    return templates.TemplateResponse(
        request,
        "check_result.html",
        {
            "mac": mac,
            "context": context.value,
            "taken": taken,
            "lines": lines,
            "contexts": CONTEXT_CHOICES,
        },
    )


@router.post("/macs/bulk", response_class=HTMLResponse)
def check_bulk(
    request: Request,
    text: str = Form(""),
    context: CallContext = Form(CallContext.OTHER),
    exclude_id: Optional[str] = Form(None),
    enforcer: UniquenessEnforcer = Depends(get_enforcer),
):
    bulk = parse_bulk(text)
    validation = enforcer.validate_list(bulk.valid, context, exclude_id or None)

    return templates.TemplateResponse(
        request,
        "bulk_result.html",
        {
            "context": context.value,
            "bulk": bulk,
            "bulk_lines": messages.describe_bulk(bulk),
            "validation": validation,
            "lines": messages.describe_validation(validation),
            "conflicting": [i.mac for i in validation.issues if i.kind is IssueKind.CONFLICT],
        },
    )
