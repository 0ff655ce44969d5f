"""API routes for the flow decision engine."""

from __future__ import annotations

import json
from typing import AsyncGenerator

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from .. import config
from ..logic import (
    DEFAULT_SCENARIOS,
    DanglingReferenceError,
    EmptyFlowError,
    evaluate,
    next_step,
    run_scenarios,
    validate_flow,
    walk,
    decode_legacy_logic,
    encode_legacy_logic,
)
from ..models import (
    DecisionResponse,
    DocumentResponse,
    DocumentRulesRequest,
    DocumentSaveResponse,
    EvaluateRequest,
    EvaluateResponse,
    FlowIn,
    FlowListResponse,
    FlowSaveResponse,
    FlowTestRequest,
    LegacyDecodeRequest,
    LegacyEncodeRequest,
    LegacyEncodeResponse,
    NextStepRequest,
    QuizDocumentIn,
    RulesResponse,
    ScenarioRunRequest,
    ScenarioRunResponse,
    SimulateRequest,
    SimulateResponse,
    ValidateRequest,
    ValidateResponse,
)
from ..services.documents import get_document, save_document, save_rules
from ..services.flow_sessions import (
    all_flows,
    clear_flows,
    get_flow,
    get_rules,
    get_templates,
    iter_flow_tests,
    list_flows,
    run_flow_tests,
    save_flow,
    set_rules,
    set_templates,
)
from ..services.logic_config import LogicConfigError, export_logic_config, import_logic_config

router = APIRouter(prefix="/api", tags=["api"])


@router.post("/evaluate", response_model=EvaluateResponse)
async def api_evaluate(body: EvaluateRequest):
    """Evaluate one condition against an answer bag."""
    return EvaluateResponse(result=evaluate(body.condition.to_engine(), body.inputs))


@router.post("/simulate", response_model=SimulateResponse)
async def api_simulate(body: SimulateRequest):
    """Walk a flow for the given answers. Returns path, final decision and why the walk stopped."""
    try:
        result = walk(body.flow.to_engine(), body.inputs, max_steps=body.max_steps or config.MAX_PATH_STEPS)
    except EmptyFlowError as e:
        raise HTTPException(400, str(e))
    return SimulateResponse(**result.to_dict())


@router.post("/next-step", response_model=DecisionResponse)
async def api_next_step(body: NextStepRequest):
    """Decide the step after current_step. A branch to an unknown step is a 422."""
    try:
        decision = next_step(body.flow.to_engine(), body.current_step, body.inputs)
    except DanglingReferenceError as e:
        raise HTTPException(422, str(e))
    return DecisionResponse(**decision.to_dict())


@router.post("/scenarios/run", response_model=ScenarioRunResponse)
async def api_run_scenarios(body: ScenarioRunRequest):
    """Run scenarios (the built-in ones when none are given) against a flow."""
    scenarios = [s.to_engine() for s in body.scenarios] if body.scenarios is not None else DEFAULT_SCENARIOS
    try:
        results = run_scenarios(body.flow.to_engine(), scenarios, max_steps=config.MAX_PATH_STEPS)
    except EmptyFlowError as e:
        raise HTTPException(400, str(e))
    return ScenarioRunResponse(
        results=[r.to_dict() for r in results],
        passed=sum(1 for r in results if r.passed),
        total=len(results),
    )


@router.post("/flows/validate", response_model=ValidateResponse)
async def api_validate_flow(body: ValidateRequest):
    issues = validate_flow(body.flow.to_engine())
    return ValidateResponse(
        valid=not any(i.severity == "error" for i in issues),
        issues=[i.to_dict() for i in issues],
    )


@router.post("/legacy/decode", response_model=RulesResponse)
async def api_legacy_decode(body: LegacyDecodeRequest):
    """Rules from a document's per-question showIf/skipIf."""
    rules = decode_legacy_logic(body.document.to_engine())
    return RulesResponse(rules=[r.to_dict() for r in rules])


@router.post("/legacy/encode", response_model=LegacyEncodeResponse)
async def api_legacy_encode(body: LegacyEncodeRequest):
    """Per-question showIf/skipIf from rules. Custom rules are not represented."""
    encoded = encode_legacy_logic([r.to_engine() for r in body.rules])
    return LegacyEncodeResponse(logic={qid: logic.to_dict() for qid, logic in encoded.items()})


@router.post("/flows", response_model=FlowSaveResponse)
async def api_save_flow(body: FlowIn):
    return FlowSaveResponse(flow_id=save_flow(body.to_engine()))


@router.get("/flows", response_model=FlowListResponse)
async def api_flows_list(page: int = 1, size: int = 20):
    data = list_flows(page=page, size=size)
    return FlowListResponse(**data)


@router.post("/flows/{flow_id}/test", response_model=ScenarioRunResponse)
async def api_flow_test(flow_id: str, body: FlowTestRequest | None = None):
    """Run scenarios against a saved flow and keep the results on it for this session."""
    if not get_flow(flow_id):
        raise HTTPException(404, "Flow not found")
    scenarios = None
    if body is not None and body.scenarios is not None:
        scenarios = [s.to_engine() for s in body.scenarios]
    try:
        results = run_flow_tests(flow_id, scenarios, max_steps=config.MAX_PATH_STEPS)
    except EmptyFlowError as e:
        raise HTTPException(400, str(e))
    return ScenarioRunResponse(
        results=[r.to_dict() for r in results],
        passed=sum(1 for r in results if r.passed),
        total=len(results),
    )


@router.get("/flows/{flow_id}/test/stream")
async def api_flow_test_stream(flow_id: str):
    """SSE stream of a test run with the built-in scenarios. Events: scenario (one per result), summary."""
    flow = get_flow(flow_id)
    if not flow:
        raise HTTPException(404, "Flow not found")
    if not flow.step_ids:
        raise HTTPException(400, f"Flow '{flow_id}' has no steps")

    async def event_generator() -> AsyncGenerator[dict, None]:
        passed = 0
        total = 0
        for result in iter_flow_tests(flow_id, max_steps=config.MAX_PATH_STEPS):
            total += 1
            passed += int(result.passed)
            yield {"event": "scenario", "data": json.dumps(result.to_dict(), ensure_ascii=False)}
        yield {"event": "summary", "data": json.dumps({"flow_id": flow_id, "passed": passed, "total": total})}

    return EventSourceResponse(event_generator())


@router.post("/documents", response_model=DocumentSaveResponse)
async def api_save_document(body: QuizDocumentIn):
    return DocumentSaveResponse(**save_document(body.to_engine()))


@router.get("/documents/{document_id}/rules", response_model=RulesResponse)
async def api_document_rules(document_id: str):
    doc = get_document(document_id)
    if not doc:
        raise HTTPException(404, "Document not found")
    return RulesResponse(rules=[r.to_dict() for r in decode_legacy_logic(doc)])


@router.put("/documents/{document_id}/rules", response_model=DocumentResponse)
async def api_document_save_rules(document_id: str, body: DocumentRulesRequest):
    """Persist show/skip rules into the document's question logic."""
    try:
        doc = save_rules(document_id, [r.to_engine() for r in body.rules])
    except KeyError:
        raise HTTPException(404, "Document not found")
    return DocumentResponse(document_id=doc.id, document=doc.to_dict())


@router.get("/templates")
async def api_templates():
    return {"templates": [t.to_dict() for t in get_templates()]}


@router.get("/config/export")
async def api_config_export():
    return export_logic_config(rules=get_rules(), flows=all_flows(), templates=get_templates())


@router.post("/config/import")
async def api_config_import(body: dict):
    """Replace the session's rules, flows and custom templates with an exported config."""
    try:
        imported = import_logic_config(body)
    except LogicConfigError as e:
        raise HTTPException(422, {"message": str(e), "errors": e.errors})
    set_rules(imported.rules)
    set_templates(imported.templates)
    clear_flows()
    for flow in imported.flows:
        save_flow(flow)
    return {
        "rules": len(imported.rules),
        "flows": len(imported.flows),
        "templates": len(imported.templates),
    }
