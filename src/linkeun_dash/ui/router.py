from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from linkeun_dash.actions import auth as auth_actions
from linkeun_dash.actions import links as link_actions
from linkeun_dash.actions import settings as settings_actions
from linkeun_dash.auth import delete_session_cookie, set_session_cookie
from linkeun_dash.breadcrumbs import build_breadcrumbs
from linkeun_dash.config import DashConfig
from linkeun_dash.context import ANONYMOUS, RequestContext
from linkeun_dash.queries.breach_check import query_breach_count
from linkeun_dash.queries.cache import QueryCache
from linkeun_dash.queries.links import LinkSearchParams, invalidate_links, query_links
from linkeun_dash.results import ActionResult, Fail, Ok, Redirect
from linkeun_dash.site import SITE_CONFIG

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["ui"])


def current_context(request: Request) -> RequestContext:
    ctx = getattr(request.state, "context", None)
    return ctx if isinstance(ctx, RequestContext) else ANONYMOUS


def _get_config(request: Request) -> DashConfig:
    config = getattr(request.app.state, "dash_config", None)
    if config is None:
        raise HTTPException(status_code=500, detail="Config not initialized")
    return config


def _get_cache(request: Request) -> QueryCache:
    cache = getattr(request.app.state, "query_cache", None)
    if cache is None:
        raise HTTPException(status_code=500, detail="Query cache not initialized")
    return cache


async def _form_data(request: Request) -> dict[str, Any]:
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def _render(
    request: Request,
    name: str,
    ctx: RequestContext,
    *,
    title: str | None = None,
    route: str | None = None,
    status_code: int = 200,
    **extra: Any,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        name,
        {
            "title": SITE_CONFIG.page_title(title),
            "site": SITE_CONFIG,
            "user": ctx.user,
            "breadcrumbs": build_breadcrumbs(request.url.path, route),
            **extra,
        },
        status_code=status_code,
    )


def _redirect(result: Redirect, config: DashConfig) -> RedirectResponse:
    resp = RedirectResponse(url=result.location, status_code=result.status_code)
    if result.set_session is not None:
        set_session_cookie(resp, result.set_session, config)
    elif result.clear_session:
        delete_session_cookie(resp, config)
    return resp


def _respond(
    request: Request,
    result: ActionResult,
    ctx: RequestContext,
    config: DashConfig,
    name: str,
    *,
    title: str,
    route: str | None = None,
    form_key: str = "form",
    **extra: Any,
) -> Response:
    match result:
        case Redirect():
            return _redirect(result, config)
        case Fail(status_code=status_code, body=body):
            return _render(
                request,
                name,
                ctx,
                title=title,
                route=route,
                status_code=status_code,
                **{form_key: body},
                **extra,
            )
        case Ok(data=data, context=new_ctx):
            return _render(
                request,
                name,
                new_ctx or ctx,
                title=title,
                route=route,
                **{form_key: data},
                **extra,
            )
    raise TypeError(f"Unexpected action result: {result!r}")


# --- home / logout -------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> HTMLResponse:
    return _render(request, "home.html", ctx)


@router.post("/logout", response_model=None)
async def logout(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await auth_actions.logout(ctx, config)
    invalidate_links(_get_cache(request), ctx.token)
    return _respond(request, result, ctx, config, "home.html", title="Home")


# --- auth ----------------------------------------------------------------


@router.get("/auth/login", response_model=None)
async def login_page(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    guard = auth_actions.redirect_if_authenticated(ctx)
    if guard is not None:
        return _redirect(guard, _get_config(request))
    return _render(request, "login.html", ctx, title="Login")


@router.post("/auth/login", response_model=None)
async def login_submit(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await auth_actions.login(await _form_data(request), ctx, config)
    return _respond(request, result, ctx, config, "login.html", title="Login")


@router.get("/auth/register", response_model=None)
async def register_page(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    guard = auth_actions.redirect_if_authenticated(ctx)
    if guard is not None:
        return _redirect(guard, _get_config(request))
    return _render(request, "register.html", ctx, title="Register")


@router.post("/auth/register", response_model=None)
async def register_submit(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await auth_actions.register(await _form_data(request), ctx, config)
    return _respond(request, result, ctx, config, "register.html", title="Register")


@router.get("/auth/verify/{token}", response_model=None)
async def verify_page(
    request: Request,
    token: str,
    ctx: RequestContext = Depends(current_context),  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await auth_actions.verify_token(token, ctx, config)
    return _respond(
        request,
        result,
        ctx,
        config,
        "verify.html",
        title="Verify Account",
        route="/auth/verify/[token]",
        form_key="verification",
    )


# --- links ---------------------------------------------------------------


def _search_params(request: Request) -> LinkSearchParams:
    q = request.query_params

    def _int(name: str) -> int | None:
        raw = (q.get(name) or "").strip()
        if not raw.isdigit():
            return None
        return int(raw) or None

    sort = (q.get("sort") or "").strip().lower()
    return LinkSearchParams(
        search=(q.get("search") or "").strip() or None,
        page=_int("page"),
        per_page=_int("per_page"),
        sort_by=(q.get("sortBy") or "").strip() or None,
        sort=sort if sort in {"asc", "desc"} else None,  # type: ignore[arg-type]
    )


@router.get("/links", response_class=HTMLResponse)
async def links_page(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> HTMLResponse:
    config = _get_config(request)
    params = _search_params(request)
    not_logged_in = not ctx.is_authenticated or not ctx.token

    listing = None
    error = None
    if not not_logged_in:
        try:
            listing = await query_links(_get_cache(request), config, ctx.token, params)
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to load links")
            error = "Failed to load links"

    return _render(
        request,
        "links.html",
        ctx,
        title="Links",
        not_logged_in=not_logged_in,
        params=params,
        listing=listing,
        error=error,
    )


@router.get("/links/data")
async def links_data(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> JSONResponse:
    if not ctx.is_authenticated or not ctx.token:
        raise HTTPException(status_code=401, detail="Not logged in")

    listing = await query_links(
        _get_cache(request), _get_config(request), ctx.token, _search_params(request)
    )
    return JSONResponse(content=listing.model_dump(mode="json") if listing else None)


@router.get("/links/create", response_class=HTMLResponse)
async def link_create_page(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> HTMLResponse:
    return _render(
        request, "link_create.html", ctx, title="Create Link", not_logged_in=not ctx.is_authenticated
    )


@router.post("/links/create", response_model=None)
async def link_create_submit(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await link_actions.create_link(await _form_data(request), ctx, config)
    if isinstance(result, Ok):
        invalidate_links(_get_cache(request), ctx.token)
    return _respond(
        request,
        result,
        ctx,
        config,
        "link_create.html",
        title="Create Link",
        not_logged_in=not ctx.is_authenticated,
    )


@router.get("/links/{link_id}/update", response_model=None)
async def link_update_page(
    request: Request,
    link_id: str,
    ctx: RequestContext = Depends(current_context),  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await link_actions.load_link_for_update(link_id, ctx, config)
    return _respond(
        request,
        result,
        ctx,
        config,
        "link_update.html",
        title="Update Link",
        route="/links/[id]/update",
        form_key="page",
        link_id=link_id,
    )


@router.post("/links/{link_id}/update", response_model=None)
async def link_update_submit(
    request: Request,
    link_id: str,
    ctx: RequestContext = Depends(current_context),  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await link_actions.update_link(link_id, await _form_data(request), ctx, config)
    if isinstance(result, Ok):
        invalidate_links(_get_cache(request), ctx.token)
    return _respond(
        request,
        result,
        ctx,
        config,
        "link_update.html",
        title="Update Link",
        route="/links/[id]/update",
        link_id=link_id,
        page={"not_logged_in": not ctx.is_authenticated},
    )


# --- settings ------------------------------------------------------------


@router.get("/settings", response_model=None)
async def settings_page(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    guard = settings_actions.require_login(ctx)
    if guard is not None:
        return _redirect(guard, _get_config(request))
    return _render(request, "settings.html", ctx, title="Settings")


@router.post("/settings/profile", response_model=None)
async def settings_profile_submit(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await settings_actions.update_profile(await _form_data(request), ctx, config)
    return _respond(
        request, result, ctx, config, "settings.html", title="Settings", form_key="profile"
    )


@router.post("/settings/password", response_model=None)
async def settings_password_submit(
    request: Request, ctx: RequestContext = Depends(current_context)  # noqa: B008
) -> Response:
    config = _get_config(request)
    result = await settings_actions.update_password(await _form_data(request), ctx, config)
    return _respond(
        request, result, ctx, config, "settings.html", title="Settings", form_key="password"
    )


# --- tools ---------------------------------------------------------------


@router.post("/tools/breach-check")
async def breach_check(request: Request, password: str = Form(default="")) -> JSONResponse:
    try:
        count = await query_breach_count(_get_cache(request), _get_config(request), password)
    except (httpx.HTTPError, ValueError):
        logger.exception("Breach check failed")
        raise HTTPException(status_code=502, detail="Breach check unavailable") from None
    return JSONResponse(content={"count": count, "breached": count > 0})
