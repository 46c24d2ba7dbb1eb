"""
Main API module for clicklink.

Responsibilities:
    - Expose REST endpoints for registering users, creating links, redeeming,
      editing click limits, removing links and sweeping expired ones
    - Map lifecycle outcomes to HTTP statuses

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Per-app Storage, UserRegistry and LinkManager kept on `app.state`.
    - The manager owns every policy decision; routes only translate.

Run:
    uvicorn main:create_app --factory
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from auth.dependencies import get_current_user
from auth.schemas import UserOut
from auth.service import UserRegistry
from clicklink.config import Settings, load_settings
from clicklink.manager.link_manager import Clock, LinkManager, utc_now
from clicklink.manager.opener import Opener, no_op_opener
from clicklink.models import Link, OwnerActionStatus, RedeemStatus
from clicklink.storage.base import BaseStorage
from clicklink.storage.storage_factory import get_storage


class CreateLinkRequest(BaseModel):
    """Request payload for creating a new short link."""
    url: str
    clicks_limit: int
    lifetime_hours: int


class EditLimitRequest(BaseModel):
    """Request payload for changing a link's click limit."""
    new_limit: int


def _link_out(link: Link) -> Dict[str, Any]:
    return {
        "short_code": link.short_code,
        "short_url": link.short_url,
        "original_url": link.original_url,
        "owner_id": link.owner_id,
        "created_at": link.created_at.isoformat(),
        "expires_at": link.expires_at.isoformat(),
        "click_limit": link.click_limit,
        "clicks": link.click_count,
        "active": link.active,
    }


def _raise_for_refusal(outcome: OwnerActionStatus) -> None:
    if outcome is OwnerActionStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="The link was not found")
    if outcome is OwnerActionStatus.NOT_OWNER:
        raise HTTPException(status_code=403, detail="You are not the owner of this link")


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[BaseStorage] = None,
    opener: Opener = no_op_opener,
    clock: Clock = utc_now,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings: Loaded settings; read from the config file when omitted
            (raises ConfigLoadError if it is missing).
        storage: Link storage; chosen by `get_storage` when omitted.
        opener: Side effect run on each successful redemption. The HTTP
            redirect already serves the URL, so the default does nothing.
        clock: Time source for the manager.

    Returns:
        FastAPI: An application with its own storage, users and manager.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="clicklink",
        description="URL shortener with per-link click limits and lifetimes",
        docs_url="/docs",
    )
    log = logging.getLogger("clicklink")
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    storage = storage or get_storage(settings.storage_backend)
    app.state.users = UserRegistry()
    app.state.manager = LinkManager.from_settings(settings, storage, opener=opener, clock=clock)
    manager: LinkManager = app.state.manager
    users: UserRegistry = app.state.users

    log.info(
        "clicklink ready: max lifetime %dh, min clicks %d, backend %s",
        settings.max_lifetime_hours, settings.min_clicks_limit, settings.storage_backend,
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Users
    # ----------------------------------------------------------------
    @app.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserOut)
    def register() -> UserOut:
        user_id = users.create_user_id()
        return UserOut(user_id=user_id, message="A new user has been registered")

    @app.get("/users/{user_id}", response_model=UserOut)
    def login(user_id: str) -> UserOut:
        if not users.is_user_exist(user_id):
            raise HTTPException(status_code=404, detail="A user with this id is not registered")
        return UserOut(user_id=user_id, message="You have logged in")

    # ----------------------------------------------------------------
    # Links
    # ----------------------------------------------------------------
    @app.post("/links", status_code=status.HTTP_201_CREATED)
    def create_link(req: CreateLinkRequest, user_id: str = Depends(get_current_user)) -> Dict[str, Any]:
        link = manager.create(user_id, req.url, req.clicks_limit, req.lifetime_hours)
        return _link_out(link)

    @app.get("/links/{code}")
    def redeem_link(code: str, request: Request) -> Response:
        """
        Redeem a link: browsers get a 302 to the original URL, API clients JSON.

        404 for unknown codes, 410 when the link turned out to be unusable
        (it is removed as part of that answer).
        """
        result = manager.redeem(code)
        if result.status is RedeemStatus.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Link not found")
        if result.status is RedeemStatus.UNAVAILABLE:
            raise HTTPException(
                status_code=410,
                detail="The expiration date has passed, or the click limit has been reached",
            )

        link = result.link
        accept = request.headers.get("accept", "").lower()
        if "text/html" in accept:
            return RedirectResponse(url=link.original_url, status_code=302)

        return JSONResponse({
            "status": result.status.value,
            "original_url": link.original_url,
            "clicks": link.click_count,
            "click_limit": link.click_limit,
            "removed": result.status is RedeemStatus.OPENED_AND_EXPIRED,
        })

    @app.patch("/links/{code}")
    def edit_clicks_limit(
        code: str, req: EditLimitRequest, user_id: str = Depends(get_current_user)
    ) -> Dict[str, Any]:
        _raise_for_refusal(manager.change_limit(user_id, code, req.new_limit))
        link = manager.get_link(code)
        if link is None:
            # removed between the edit and this read
            raise HTTPException(status_code=404, detail="The link was not found")
        return _link_out(link)

    @app.delete("/links/{code}", status_code=status.HTTP_204_NO_CONTENT)
    def remove_link(code: str, user_id: str = Depends(get_current_user)) -> Response:
        _raise_for_refusal(manager.delete(user_id, code))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/maintenance/clear")
    def clear_expired() -> Dict[str, int]:
        return {"removed": manager.remove_expired_links()}

    return app
