"""
Lighthouse — Flask API Server
Finance process findings: workflows, vendor fit, savings estimates,
company diagnostic and engagement snapshots with Excel export.
"""
import io
import os
import copy
import traceback
from flask import Flask, jsonify, request, send_file
from engines.data_loader import load_catalog, load_parameters
from engines.capabilities import capability_report, capability_vendors, get_capability_for_step
from engines.diagnostic import classify_company
from engines.engagement import EngagementStore, run_engagement
from engines.intake import (InvalidInputError, merge_enrichment, parse_assumptions, parse_financial_profile,
                            parse_peer_sets, parse_process_answers, validate_company_context)
from engines.savings import calculate_process_findings, resolve_assumptions
from engines.scoring import compute_automation_score, compute_peer_medians
from engines.tools import COMPANY_SIZES, effective_fit_score, fit_grade, round_half_up

app = Flask(__name__)

STATE = {
    'catalog': None, 'parameters': {}, 'store': EngagementStore(),
    'loaded': False,
}


def _load():
    STATE['catalog'] = load_catalog()
    STATE['parameters'] = load_parameters()
    STATE['loaded'] = True


@app.before_request
def _ensure_loaded():
    if not STATE['loaded'] and not STATE.get('_load_error'):
        try:
            _load()
            print(f"[OK] Lighthouse catalog loaded: {STATE['catalog']!r}")
        except Exception as e:
            err_msg = f"{type(e).__name__}: {e}"
            STATE['_load_error'] = err_msg
            print(f"\n{'='*60}")
            print(f"[!] CATALOG LOAD FAILED")
            print(f"[!] Error: {err_msg}")
            print(f"[!] Check data/config/*.xlsx, then restart python app.py")
            print(f"{'='*60}\n")
            traceback.print_exc()


def _not_loaded():
    return jsonify({'error': 'Catalog not loaded',
                    'reason': STATE.get('_load_error', 'Unknown — check terminal')}), 503


# ══════════════════════════════════════════════════════════════
#  PRESENTATION (money rounded to whole units here only)
# ══════════════════════════════════════════════════════════════

def _money(rng):
    if rng is None:
        return None
    return {k: round_half_up(v) for k, v in rng.items()}


def _present_findings(f):
    if f is None:
        return None
    out = copy.deepcopy(f)
    out['totalSavings'] = _money(out['totalSavings'])
    out['estimatedToolCost'] = _money(out['estimatedToolCost'])
    out['costPerPerson'] = round_half_up(out['costPerPerson'])
    for est in out['stepEstimates']:
        est['savings'] = _money(est['savings'])
        est['percentImpact'] = round(est['percentImpact'], 1)
    return out


def _present_summary(s):
    out = copy.deepcopy(s)
    out['totalSavings'] = _money(out['totalSavings'])
    out['totalToolCost'] = _money(out['totalToolCost'])
    for opp in out['topOpportunities']:
        opp['savings'] = _money(opp['savings'])
    return out


def _present_score(score):
    if score is None:
        return None
    out = copy.deepcopy(score)
    out['costSavingsRange'] = _money(out['costSavingsRange'])
    out['automationCeiling'] = round(out['automationCeiling'], 4)
    return out


def _present_snapshot(snap):
    out = copy.deepcopy(snap)
    out['computedFindingsByProcess'] = {k: _present_findings(v)
                                        for k, v in out['computedFindingsByProcess'].items()}
    out['executiveSummary'] = _present_summary(out['executiveSummary'])
    out['automationScore'] = _present_score(out.get('automationScore'))
    return out


# ══════════════════════════════════════════════════════════════
#  WORKFLOWS
# ══════════════════════════════════════════════════════════════

@app.route('/api/workflows')
def api_workflows():
    if not STATE['loaded']: return _not_loaded()
    return jsonify({'workflows': STATE['catalog'].get_all_workflows()})


@app.route('/api/workflows/<workflow_id>')
def api_workflow(workflow_id):
    if not STATE['loaded']: return _not_loaded()
    wf = STATE['catalog'].get_workflow(workflow_id)
    if wf is None:
        return jsonify({'error': f"Workflow '{workflow_id}' not found"}), 404
    return jsonify({**wf, 'available': len(wf['steps']) > 0})


@app.route('/api/workflows/<workflow_id>/steps/<step_id>')
def api_workflow_step(workflow_id, step_id):
    if not STATE['loaded']: return _not_loaded()
    step = STATE['catalog'].get_workflow_step(workflow_id, step_id)
    if step is None:
        return jsonify({'error': f"Step '{step_id}' not found in '{workflow_id}'"}), 404
    return jsonify(step)


@app.route('/api/workflows/<workflow_id>/steps/<step_id>/tools')
def api_step_tools(workflow_id, step_id):
    if not STATE['loaded']: return _not_loaded()
    catalog = STATE['catalog']
    if catalog.get_workflow_step(workflow_id, step_id) is None:
        return jsonify({'error': f"Step '{step_id}' not found in '{workflow_id}'"}), 404
    context = {'subSector': request.args.get('subSector'), 'companySize': request.args.get('companySize')}
    if not any(context.values()):
        context = None
    erp = request.args.get('erp') or None
    ranked = catalog.get_tools_for_step_sorted(step_id, workflow_id, context=context, erp=erp)
    out = []
    for t in ranked:
        score = effective_fit_score(t, step_id)
        compat = catalog.get_tool_erp_compatibility(t, erp) if erp else None
        out.append({**t, 'stepFitScore': score, 'fitGrade': fit_grade(score),
                    'erpLevel': compat['level'] if compat else None})
    cap = get_capability_for_step(step_id, workflow_id)
    return jsonify({'workflowId': workflow_id, 'stepId': step_id,
                    'capability': {'id': cap['id'], 'name': cap['name']} if cap else None, 'tools': out})


# ══════════════════════════════════════════════════════════════
#  TOOLS & CAPABILITIES
# ══════════════════════════════════════════════════════════════

@app.route('/api/tools')
def api_tools():
    if not STATE['loaded']: return _not_loaded()
    sizes = [s for s in request.args.get('companySize', '').split(',') if s]
    industries = [s for s in request.args.get('industry', '').split(',') if s]
    ai = [s for s in request.args.get('aiMaturity', '').split(',') if s]
    tools = STATE['catalog'].filter_tools(
        category=request.args.get('category') or None,
        company_sizes=sizes or None, industries=industries or None,
        ai_maturity=ai or None, search=request.args.get('search'))
    return jsonify({'tools': tools, 'count': len(tools)})


@app.route('/api/tools/compare')
def api_tools_compare():
    if not STATE['loaded']: return _not_loaded()
    ids = [i.strip() for i in request.args.get('ids', '').split(',') if i.strip()]
    if not ids:
        return jsonify({'error': "Query parameter 'ids' is required"}), 400
    return jsonify({'tools': STATE['catalog'].get_tools_by_ids(ids)})


@app.route('/api/tools/<tool_id>')
def api_tool(tool_id):
    if not STATE['loaded']: return _not_loaded()
    tool = STATE['catalog'].get_tool_by_id(tool_id)
    if tool is None:
        return jsonify({'error': f"Tool '{tool_id}' not found"}), 404
    return jsonify(tool)


@app.route('/api/capabilities/<process_id>')
def api_capabilities(process_id):
    if not STATE['loaded']: return _not_loaded()
    report = capability_report(STATE['catalog'], process_id, erp=request.args.get('erp') or None)
    if report is None:
        return jsonify({'error': f"Process '{process_id}' not found"}), 404
    return jsonify({'processId': process_id, 'capabilities': report})


@app.route('/api/capabilities/<process_id>/<capability_id>')
def api_capability(process_id, capability_id):
    if not STATE['loaded']: return _not_loaded()
    cap = capability_vendors(STATE['catalog'], capability_id, erp=request.args.get('erp') or None)
    if cap is None or cap['category'] != process_id:
        return jsonify({'error': f"Capability '{capability_id}' not found in '{process_id}'"}), 404
    return jsonify(cap)


# ══════════════════════════════════════════════════════════════
#  DIAGNOSTIC & FINDINGS
# ══════════════════════════════════════════════════════════════

def _json_body():
    """Request JSON as a dict; empty body gives {}, anything but an object gives None."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


def _bad_body():
    return jsonify({'error': 'Request body must be a JSON object'}), 400


@app.route('/api/diagnostic', methods=['POST'])
def api_diagnostic():
    if not STATE['loaded']: return _not_loaded()
    body = _json_body()
    if body is None: return _bad_body()
    context = body.get('companyContext', body)
    try:
        return jsonify(classify_company(context, body.get('painPoints')))
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@app.route('/api/findings', methods=['POST'])
def api_findings():
    if not STATE['loaded']: return _not_loaded()
    body = _json_body()
    if body is None: return _bad_body()
    catalog = STATE['catalog']
    process_id = body.get('processId')
    if not process_id or catalog.get_workflow(process_id) is None:
        return jsonify({'error': f"Process '{process_id}' not found"}), 404
    try:
        if body.get('companyContext'):
            ctx = validate_company_context(body['companyContext'])
        else:
            size = body.get('companySize')
            if size not in COMPANY_SIZES:
                raise InvalidInputError(f"'companySize' must be one of {', '.join(COMPANY_SIZES)}")
            ctx = {'companySize': size, 'subSector': body.get('subSector'), 'erp': body.get('erp')}
        answers = parse_process_answers(body.get('answers') or {}, process_id)
        assumptions = resolve_assumptions(ctx['companySize'], parse_assumptions(body.get('assumptions')),
                                          STATE['parameters'])
        findings = calculate_process_findings(catalog, process_id, answers, ctx['companySize'],
                                              assumptions=assumptions, erp=ctx.get('erp'), context=ctx)
        return jsonify(_present_findings(findings))
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@app.route('/api/automation-score', methods=['POST'])
def api_automation_score():
    if not STATE['loaded']: return _not_loaded()
    body = _json_body()
    if body is None: return _bad_body()
    try:
        profile = parse_financial_profile(body.get('financialProfile'))
        peers = parse_peer_sets(body.get('peers'))
        medians = compute_peer_medians(peers['sic'], peers['competitors'], peers['selected'],
                                       peers['derived']) if peers else None
        size = body.get('companySize')
        if size is not None and size not in COMPANY_SIZES:
            raise InvalidInputError(f"'companySize' must be one of {', '.join(COMPANY_SIZES)}")
        score = compute_automation_score(profile, medians, body.get('erp') or None, size)
        return jsonify(_present_score(score))
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


# ══════════════════════════════════════════════════════════════
#  ENGAGEMENTS
# ══════════════════════════════════════════════════════════════

@app.route('/api/engagements', methods=['GET', 'POST'])
def api_engagements():
    if not STATE['loaded']: return _not_loaded()
    store = STATE['store']
    if request.method == 'GET':
        return jsonify({'engagements': store.list()})
    body = _json_body()
    if body is None: return _bad_body()
    try:
        context = body.get('companyContext') or {}
        if body.get('enrichment'):
            context = merge_enrichment(context, body['enrichment'])
        snap = run_engagement(STATE['catalog'], context, body.get('processes') or {},
                              assumptions=body.get('assumptions'), pain_points=body.get('painPoints'),
                              annotations=body.get('annotations'), name=body.get('name'),
                              config=STATE['parameters'], financial_profile=body.get('financialProfile'),
                              peers=body.get('peers'))
        snap['id'] = store.save(snap)
        return jsonify(_present_snapshot(snap)), 201
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@app.route('/api/engagements/<engagement_id>', methods=['GET', 'DELETE'])
def api_engagement(engagement_id):
    if not STATE['loaded']: return _not_loaded()
    store = STATE['store']
    if request.method == 'DELETE':
        if not store.delete(engagement_id):
            return jsonify({'error': f"Engagement '{engagement_id}' not found"}), 404
        return jsonify({'status': 'deleted', 'id': engagement_id})
    snap = store.get(engagement_id)
    if snap is None:
        return jsonify({'error': f"Engagement '{engagement_id}' not found"}), 404
    return jsonify(_present_snapshot(snap))


@app.route('/api/engagements/<engagement_id>/export')
def api_engagement_export(engagement_id):
    """Export one engagement snapshot to Excel."""
    if not STATE['loaded']: return _not_loaded()
    snap = STATE['store'].get(engagement_id)
    if snap is None:
        return jsonify({'error': f"Engagement '{engagement_id}' not found"}), 404
    try:
        wb = build_export_workbook(_present_snapshot(snap))
        buf = io.BytesIO()
        wb.save(buf)
        buf.seek(0)
        safe = ''.join(c for c in snap['name'] if c.isalnum() or c in ' -_').strip() or 'Engagement'
        return send_file(buf, as_attachment=True, download_name=f'Lighthouse_{safe}.xlsx',
                         mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


def build_export_workbook(snap):
    """Workbook with Summary, Findings, Diagnostic and Assumptions sheets for a presented snapshot."""
    import openpyxl
    from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

    wb = openpyxl.Workbook()
    hf = Font(bold=True, color='FFFFFF', size=11)
    hfill = PatternFill(start_color='1F3A5F', end_color='1F3A5F', fill_type='solid')
    tb = Border(left=Side(style='thin'), right=Side(style='thin'),
                top=Side(style='thin'), bottom=Side(style='thin'))

    def ws_write(ws, headers, rows):
        for c, h in enumerate(headers, 1):
            cell = ws.cell(row=1, column=c, value=h)
            cell.font = hf; cell.fill = hfill; cell.alignment = Alignment(horizontal='center'); cell.border = tb
        for r, row in enumerate(rows, 2):
            for c, val in enumerate(row, 1):
                cell = ws.cell(row=r, column=c, value=val); cell.border = tb
        for col in ws.columns:
            ml = max(len(str(cell.value or '')) for cell in col)
            ws.column_dimensions[col[0].column_letter].width = min(ml + 2, 50)

    ctx = snap['companyContext']; summary = snap['executiveSummary']
    diag = snap['computedDiagnostic']; findings = snap['computedFindingsByProcess']

    # 1. Summary
    ws = wb.active; ws.title = 'Summary'
    tc = summary['totalToolCost']
    score = snap.get('automationScore')
    score_rows = [
        ['Complexity Score', score['complexityScore']],
        ['Automation Ceiling', score['automationCeiling']],
        ['Effort Addressable', score['constraints']['effortAddressableRange']],
        ['Cost Savings (min)', score['costSavingsRange']['min']],
        ['Cost Savings (max)', score['costSavingsRange']['max']],
    ] if score else []
    ws_write(ws, ['Metric', 'Value'], [
        ['Engagement', snap['name']],
        ['Company', ctx['companyName']],
        ['Industry', ctx['industry']],
        ['Company Size', ctx['companySize']],
        ['ERP', ctx.get('erp') or ''],
        ['Archetype', diag['companyArchetype']],
        ['Savings (low)', summary['totalSavings']['low']],
        ['Savings (mid)', summary['totalSavings']['mid']],
        ['Savings (high)', summary['totalSavings']['high']],
        ['Tool Cost (low)', tc['low'] if tc else ''],
        ['Tool Cost (high)', tc['high'] if tc else ''],
        ['Processes Assessed', f"{summary['assessedProcessCount']} of {summary['totalProcessCount']}"],
    ] + score_rows)

    # 2. Findings
    ws2 = wb.create_sheet('Findings')
    ws_write(ws2, ['Process', 'Step #', 'Step', 'Maturity', 'Capacity Weight', 'Automation Potential',
                   'Savings Low', 'Savings Mid', 'Savings High', '% Impact', 'Top Tool', 'Fit Score'], [
        [f['processName'], e['stepNumber'], e['stepTitle'], e['maturity'],
         round(e['capacityWeight'], 3), round(e['automationPotential'], 3),
         e['savings']['low'], e['savings']['mid'], e['savings']['high'], e['percentImpact'],
         e['topTool']['name'] if e['topTool'] else '', e['topTool']['fitScore'] if e['topTool'] else '']
        for f in findings.values() for e in f['stepEstimates']
    ])

    # 3. Top opportunities
    ws3 = wb.create_sheet('Top Opportunities')
    ws_write(ws3, ['Rank', 'Process', 'Step', 'Maturity', 'Savings Mid', 'Top Tool'], [
        [o['rank'], o['processName'], o['stepTitle'], o['maturity'], o['savings']['mid'],
         o['topTool']['name'] if o['topTool'] else '']
        for o in summary['topOpportunities']
    ])

    # 4. Diagnostic
    ws4 = wb.create_sheet('Diagnostic')
    ws_write(ws4, ['Type', 'Rank', 'Title', 'Detail', 'Evidence / Leverage'],
             [['Challenge', '', c['title'], c['description'], c['evidenceHint']] for c in diag['challenges']] +
             [['Priority', p['rank'], p['processName'], p['rationale'], p['expectedLeverage']]
              for p in diag['priorityAreas']])

    # 5. Assumptions
    ws5 = wb.create_sheet('Assumptions')
    a = snap['assumptions']
    ws_write(ws5, ['Assumption', 'Value'],
             [['Cost per Person', a['costPerPerson']], ['Range Factor', a['rangeFactor']]] +
             [[f'Automation Potential - {k}', v] for k, v in a['automationPotential'].items()] +
             [[f'Impact Scaling - {k}', v] for k, v in a['impactScaling'].items()])
    return wb


if __name__ == '__main__':
    app.run(debug=False, host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
