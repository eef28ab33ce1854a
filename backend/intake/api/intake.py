from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from intake.core.app_context import AppContext, get_app_context
from intake.core.logging import bind_session
from intake.flow_core.errors import InvalidTransitionError, UnknownNodeError
from intake.flow_core.state import SessionState, ViewState
from intake.flow_core.validation import normalize_answer, validate_answer, wants_agent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intake", tags=["intake"])


class AnswerRequest(BaseModel):
    answer: str


class EditRequest(BaseModel):
    node_id: str


class CurrentQuestion(BaseModel):
    node_id: str
    section: str
    question: str
    answer_type: str
    helper_text: str | None = None
    placeholder: str | None = None
    options: list[str] = []
    previous_answer: str = ""


class ReviewItem(BaseModel):
    node_id: str
    section: str
    question: str
    answer: str


class SessionView(BaseModel):
    session_id: str
    view: ViewState
    current: CurrentQuestion | None = None
    progress: dict[str, int]
    history: list[str]
    review: list[ReviewItem]
    state: dict[str, Any]


def get_ctx(request: Request) -> AppContext:
    return get_app_context(request.app)


def _load_state(ctx: AppContext, session_id: str) -> SessionState:
    data = ctx.store.load(session_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Session not found")
    bind_session(session_id)
    return SessionState.from_dict(data)


def _save(ctx: AppContext, session_id: str, state: SessionState) -> SessionView:
    ctx.store.save(session_id, state.to_dict())
    return _session_view(ctx, session_id, state)


def _session_view(ctx: AppContext, session_id: str, state: SessionState) -> SessionView:
    engine = ctx.engine
    if not engine.is_resumable(state):
        raise HTTPException(
            status_code=409,
            detail=f"Session points at unknown question {state.current_node_id!r}; restart required",
        )

    current = None
    if state.view is ViewState.WIZARD:
        node = engine.current_node(state)
        current = CurrentQuestion(
            node_id=node.id,
            section=node.section,
            question=node.question,
            answer_type=node.answer_type,
            helper_text=node.helper_text,
            placeholder=node.placeholder,
            options=list(node.options),
            previous_answer=engine.previous_answer(state),
        )

    progress = engine.progress(state)
    review = [
        ReviewItem(node_id=r.node_id, section=r.section, question=r.question, answer=r.answer)
        for r in engine.review_items(state)
    ]
    return SessionView(
        session_id=session_id,
        view=state.view,
        current=current,
        progress={"position": progress.position, "total": progress.total},
        history=list(state.history),
        review=review,
        state=state.to_dict(),
    )


def _conflict(exc: Exception) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


@router.get("/flow")
async def get_flow(ctx: AppContext = Depends(get_ctx)) -> dict[str, Any]:
    graph = ctx.engine.graph
    return {"id": graph.id, "name": graph.name, "flow_order": list(graph.order())}


@router.post("/sessions", status_code=201)
async def create_session(ctx: AppContext = Depends(get_ctx)) -> SessionView:
    state = ctx.engine.initial_state()
    session_id = ctx.store.create(state.to_dict())
    bind_session(session_id)
    logger.info("Started intake session %s", session_id)
    return _session_view(ctx, session_id, state)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, ctx: AppContext = Depends(get_ctx)) -> SessionView:
    return _session_view(ctx, session_id, _load_state(ctx, session_id))


@router.post("/sessions/{session_id}/answer")
async def submit_answer(
    session_id: str, body: AnswerRequest, ctx: AppContext = Depends(get_ctx)
) -> SessionView:
    engine = ctx.engine
    state = _load_state(ctx, session_id)
    try:
        if wants_agent(body.answer, ctx.settings.agent_keywords):
            return _save(ctx, session_id, engine.force_agent_exit(state))

        node = engine.current_node(state)
        ok, error = validate_answer(node, body.answer)
        if not ok:
            state = engine.record_unclear_answer(state)
            ctx.store.save(session_id, state.to_dict())
            if state.view is ViewState.AGENT_EXIT:
                return _session_view(ctx, session_id, state)
            raise HTTPException(status_code=422, detail=error)

        state = engine.submit_answer(state, normalize_answer(node, body.answer))
    except (InvalidTransitionError, UnknownNodeError) as exc:
        raise _conflict(exc) from exc
    return _save(ctx, session_id, state)


@router.post("/sessions/{session_id}/back")
async def go_back(session_id: str, ctx: AppContext = Depends(get_ctx)) -> SessionView:
    state = _load_state(ctx, session_id)
    try:
        state = ctx.engine.go_back(state)
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _save(ctx, session_id, state)


@router.post("/sessions/{session_id}/edit")
async def edit_answer(
    session_id: str, body: EditRequest, ctx: AppContext = Depends(get_ctx)
) -> SessionView:
    state = _load_state(ctx, session_id)
    try:
        state = ctx.engine.edit_answer(state, body.node_id)
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _save(ctx, session_id, state)


@router.post("/sessions/{session_id}/restart")
async def restart(session_id: str, ctx: AppContext = Depends(get_ctx)) -> SessionView:
    if ctx.store.load(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    bind_session(session_id)
    return _save(ctx, session_id, ctx.engine.restart())


@router.post("/sessions/{session_id}/review/submit")
async def submit_review(session_id: str, ctx: AppContext = Depends(get_ctx)) -> SessionView:
    state = _load_state(ctx, session_id)
    try:
        state = ctx.engine.submit_review(state)
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _save(ctx, session_id, state)


@router.post("/sessions/{session_id}/agent-exit")
async def agent_exit(session_id: str, ctx: AppContext = Depends(get_ctx)) -> SessionView:
    state = _load_state(ctx, session_id)
    try:
        state = ctx.engine.force_agent_exit(state)
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _save(ctx, session_id, state)


@router.post("/sessions/{session_id}/agent-exit/finish")
async def finish_agent_exit(session_id: str, ctx: AppContext = Depends(get_ctx)) -> SessionView:
    state = _load_state(ctx, session_id)
    try:
        state = ctx.engine.finish_agent_exit(state)
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return _save(ctx, session_id, state)
