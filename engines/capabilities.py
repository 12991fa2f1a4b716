"""
Lighthouse — Technology Capabilities
Groups workflow steps into the technology capabilities that address them
and ranks vendors per capability by their mean step fit.
"""
from engines.tools import aggregate_tool_scores, effective_fit_score, fit_grade

TOP_TOOLS_PER_STEP = 5
TOP_VENDORS_PER_CAPABILITY = 6


def _cap(cid, name, category, step_ids, description):
    return {'id': cid, 'name': name, 'category': category,
            'stepIds': list(step_ids), 'description': description}


CAPABILITIES = [
    # AP
    _cap('intelligent-document-processing', 'Intelligent Document Processing', 'ap',
         ['invoice-capture', 'data-validation'],
         'Capture, extraction and validation of invoice data from any format.'),
    _cap('intelligent-matching', 'Intelligent Matching & Exception Resolution', 'ap',
         ['po-matching', 'exception-handling'],
         '2-way and 3-way matching with exception routing learned from past resolutions.'),
    _cap('workflow-automation', 'Workflow Automation', 'ap', ['approval-routing'],
         'Approval routing by amount, vendor, GL code and historical patterns.'),
    _cap('intelligent-gl-coding', 'Intelligent GL Coding', 'ap', ['coding-gl-allocation'],
         'GL coding and cost-centre allocation learned from historical postings.'),
    _cap('fraud-detection', 'AI-Powered Fraud Detection', 'ap', ['fraud-duplicate-detection'],
         'Anomaly detection for duplicate invoices, suspicious vendors and unusual payments.'),
    _cap('payment-orchestration', 'Payment Orchestration', 'ap', ['payment-scheduling', 'payment-execution'],
         'Payment execution across ACH, wire and virtual card with discount capture.'),
    _cap('continuous-reconciliation', 'Continuous Reconciliation', 'ap', ['reconciliation-reporting'],
         'Automated payment-to-invoice reconciliation with exception alerts.'),
    # AR
    _cap('credit-risk-management', 'Credit Risk Management', 'ar', ['credit-assessment'],
         'Credit scoring, onboarding and risk monitoring from payment history and bureau data.'),
    _cap('billing-automation', 'Billing Automation', 'ar', ['order-to-invoice', 'invoice-delivery'],
         'Billing from order capture through invoice generation and delivery.'),
    _cap('intelligent-cash-application', 'Intelligent Cash Application', 'ar',
         ['payment-tracking', 'cash-application'],
         'Matching of incoming payments to open invoices including partial payments.'),
    _cap('dispute-resolution', 'Dispute & Deduction Management', 'ar', ['deduction-management'],
         'Deduction identification, root-cause analysis and resolution workflows.'),
    _cap('collections-intelligence', 'Collections Intelligence', 'ar', ['collections', 'dunning'],
         'Prioritised collection queues with automated dunning sequences.'),
    _cap('ar-risk-analytics', 'AR Risk & Analytics', 'ar', ['bad-debt-reserve', 'ar-reporting'],
         'Predictive bad debt modelling and live AR dashboards.'),
    # FP&A
    _cap('strategic-planning', 'Strategic Planning & Budgeting', 'fpa', ['annual-planning', 'budgeting'],
         'Driver-based planning with collaborative budgeting and version control.'),
    _cap('intelligent-forecasting', 'Intelligent Forecasting', 'fpa', ['forecasting', 'scenario-planning'],
         'Rolling forecasts with scenario and what-if modelling.'),
    _cap('variance-analytics', 'Variance & Performance Analytics', 'fpa',
         ['variance-analysis', 'financial-modeling'],
         'Variance commentary generation and driver-based modelling.'),
    _cap('management-reporting', 'Management & Board Reporting', 'fpa',
         ['management-reporting', 'board-reporting'],
         'Report generation with dashboards and board-ready outputs.'),
    _cap('revenue-workforce-planning', 'Revenue & Workforce Planning', 'fpa',
         ['revenue-planning', 'workforce-planning-fpa'],
         'Cohort-based revenue models and headcount planning.'),
]


def get_capabilities_for_process(process_id):
    return [c for c in CAPABILITIES if c['category'] == process_id]


def get_capability_by_id(capability_id):
    return next((c for c in CAPABILITIES if c['id'] == capability_id), None)


def get_capability_for_step(step_id, process_id):
    return next((c for c in get_capabilities_for_process(process_id) if step_id in c['stepIds']), None)


def rank_capability_vendors(catalog, capability, steps, erp=None):
    """
    Top vendors for one capability.
    Collects the top tools of each member step, averages each tool's step scores,
    and returns the best TOP_VENDORS_PER_CAPABILITY by that mean.
    """
    cap_steps = [s for s in steps if s['id'] in capability['stepIds']]
    collected = {}
    for step in cap_steps:
        ranked = catalog.get_tools_for_step_sorted(step['id'], capability['category'], erp=erp)
        for tool in ranked[:TOP_TOOLS_PER_STEP]:
            entry = collected.setdefault(tool['id'], {'tool': tool, 'scores': [], 'stepTitle': step['title']})
            if any(s['stepId'] == step['id'] for s in entry['scores']):
                continue
            score = effective_fit_score(tool, step['id'])
            entry['scores'].append({'stepId': step['id'], 'score': score, 'grade': fit_grade(score)})

    recs = []
    for tool_id, entry in collected.items():
        tool = entry['tool']
        fit = aggregate_tool_scores([s['score'] for s in entry['scores']])
        compat = catalog.get_tool_erp_compatibility(tool, erp) if erp else None
        recs.append({
            'toolId': tool_id, 'toolName': tool['name'], 'vendor': tool['vendor'],
            'fitScore': fit, 'grade': fit_grade(fit),
            'stepTitle': entry['stepTitle'], 'stepScores': entry['scores'],
            'erpLevel': compat['level'] if compat else None,
        })
    recs.sort(key=lambda r: -r['fitScore'])
    return recs[:TOP_VENDORS_PER_CAPABILITY]


def capability_report(catalog, process_id, erp=None):
    """Every capability of a process with its ranked vendors."""
    workflow = catalog.get_workflow(process_id)
    if workflow is None:
        return None
    return [
        {**cap, 'vendors': rank_capability_vendors(catalog, cap, workflow['steps'], erp)}
        for cap in get_capabilities_for_process(process_id)
    ]


def capability_vendors(catalog, capability_id, erp=None):
    """One capability with its ranked vendors; None when the capability or its workflow is unknown."""
    cap = get_capability_by_id(capability_id)
    if cap is None:
        return None
    workflow = catalog.get_workflow(cap['category'])
    if workflow is None:
        return None
    return {**cap, 'vendors': rank_capability_vendors(catalog, cap, workflow['steps'], erp)}
