"""
Lighthouse — Engagement Pipeline
Runs the full findings flow for one client (diagnostic, per-process
findings, executive summary) and keeps snapshots for replay.
"""
import copy
import json
import uuid
from datetime import datetime, timezone

from engines.diagnostic import classify_company
from engines.intake import (InvalidInputError, parse_assumptions, parse_financial_profile, parse_peer_sets,
                            parse_process_answers, validate_company_context)
from engines.savings import build_executive_summary, calculate_process_findings, resolve_assumptions
from engines.scoring import compute_automation_score, compute_peer_medians, profile_from_context


def _now():
    return datetime.now(timezone.utc).isoformat()


def run_engagement(catalog, company_context, process_answers, assumptions=None,
                   pain_points=None, annotations=None, name=None, config=None,
                   financial_profile=None, peers=None):
    """Validate inputs and compute a complete engagement snapshot."""
    ctx = validate_company_context(company_context)
    if not isinstance(process_answers or {}, dict):
        raise InvalidInputError('processes must be an object keyed by process id')
    overrides = parse_assumptions(assumptions)
    profile = parse_financial_profile(financial_profile) or profile_from_context(ctx)
    peer_sets = parse_peer_sets(peers)
    resolved = resolve_assumptions(ctx['companySize'], overrides, config)

    parsed = {}
    for process_id, raw in (process_answers or {}).items():
        if catalog.get_workflow(process_id) is None:
            raise InvalidInputError(f"Unknown process '{process_id}'")
        parsed[process_id] = parse_process_answers(raw, process_id)

    diagnostic = classify_company(ctx, pain_points)
    findings = {}
    for process_id, answers in parsed.items():
        findings[process_id] = calculate_process_findings(
            catalog, process_id, answers, ctx['companySize'],
            assumptions=resolved, erp=ctx['erp'], context=ctx)
    summary = build_executive_summary(list(findings.values()))

    medians = compute_peer_medians(peer_sets['sic'], peer_sets['competitors'], peer_sets['selected'],
                                   peer_sets['derived']) if peer_sets else None
    score = None
    if profile or medians:
        score = compute_automation_score(profile, medians, ctx['erp'], ctx['companySize'])

    ts = _now()
    return {
        'id': None,
        'name': name or ctx['companyName'],
        'companyContext': ctx,
        'perProcessAnswers': parsed,
        'painPoints': pain_points,
        'computedDiagnostic': diagnostic,
        'computedFindingsByProcess': findings,
        'executiveSummary': summary,
        'financialProfile': profile,
        'automationScore': score,
        'assumptions': resolved,
        'annotations': list(annotations or []),
        'createdAt': ts,
        'updatedAt': ts,
    }


class EngagementStore:
    """In-memory snapshot store. Snapshots are held as JSON text so every read is a fresh copy."""

    def __init__(self):
        self._items = {}

    def save(self, snapshot):
        snap = copy.deepcopy(snapshot)
        if not snap.get('id'):
            snap['id'] = uuid.uuid4().hex[:12]
        if snap['id'] in self._items:
            snap['createdAt'] = json.loads(self._items[snap['id']]).get('createdAt', snap.get('createdAt'))
            snap['updatedAt'] = _now()
        self._items[snap['id']] = to_json(snap)
        return snap['id']

    def get(self, engagement_id):
        raw = self._items.get(engagement_id)
        return from_json(raw) if raw is not None else None

    def list(self):
        out = []
        for raw in self._items.values():
            snap = from_json(raw)
            out.append({'id': snap['id'], 'name': snap['name'],
                        'companyName': snap['companyContext']['companyName'],
                        'processes': list(snap['computedFindingsByProcess'].keys()),
                        'createdAt': snap['createdAt'], 'updatedAt': snap['updatedAt']})
        return out

    def delete(self, engagement_id):
        return self._items.pop(engagement_id, None) is not None

    def __len__(self):
        return len(self._items)


def to_json(snapshot):
    return json.dumps(snapshot, sort_keys=True)


def from_json(text):
    return json.loads(text)
