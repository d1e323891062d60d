from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from equipdash.core.mac import normalize_mac
from equipdash.core.resolution import ConflictResolver, Role
from equipdash.core import messages
from equipdash.web.deps import get_resolver, get_role, templates

router = APIRouter()


def _render(request: Request, resolver: ConflictResolver, mac: str, role: Role, notice: str | None = None):
    view = resolver.open(mac, role)
    return templates.TemplateResponse(
        request,
        "conflicts.html",
        {
            "view": view,
            "is_admin": role is Role.ADMIN,
            "notice": notice,
        },
    )


@router.get("/conflicts/{mac}", response_class=HTMLResponse)
def conflicts_page(
    request: Request,
    mac: str,
    resolver: ConflictResolver = Depends(get_resolver),
    role: Role = Depends(get_role),
):
    return _render(request, resolver, normalize_mac(mac), role)


@router.post("/conflicts/remove", response_class=HTMLResponse)
def remove_mac(
    request: Request,
    mac: str = Form(...),
    collection: str = Form(...),
    record_id: str = Form(...),
    resolver: ConflictResolver = Depends(get_resolver),
    role: Role = Depends(get_role),
):
    conflict = resolver.locate(collection, record_id, mac)
    resolution = resolver.remove_mac(conflict)
    return _render(request, resolver, conflict.mac, role, messages.describe_resolution(resolution))


@router.post("/conflicts/edit")
def edit_record(
    mac: str = Form(...),
    collection: str = Form(...),
    record_id: str = Form(...),
    resolver: ConflictResolver = Depends(get_resolver),
    role: Role = Depends(get_role),
):
    conflict = resolver.locate(collection, record_id, mac)
    target = resolver.edit_target(conflict, role)
    return RedirectResponse(target.url, status_code=303)


@router.post("/conflicts/delete", response_class=HTMLResponse)
def delete_record(
    request: Request,
    mac: str = Form(...),
    collection: str = Form(...),
    record_id: str = Form(...),
    confirm: bool = Form(False),
    resolver: ConflictResolver = Depends(get_resolver),
    role: Role = Depends(get_role),
):
    conflict = resolver.locate(collection, record_id, mac)
    resolution = resolver.delete_record(conflict, role, confirmed=confirm)
    return _render(request, resolver, conflict.mac, role, messages.describe_resolution(resolution))
