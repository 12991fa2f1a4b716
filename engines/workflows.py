"""
Lighthouse — Workflow Catalog
Static finance process definitions. Each workflow is an ordered list of steps;
each step carries an AI opportunity rating used by capacity weighting.
Processes without a defined step sequence stay in the catalog with steps=[]
so callers can tell "not yet available" apart from "unknown".
"""

IMPACT_LEVELS = ('high', 'medium', 'low')

# ── Step library: (id, abbreviation, title, impact, opportunity, description, pain points) ──
AP_STEPS = [
    ('invoice-capture', 'CAP', 'Invoice Capture & Intake', 'high',
     'AI extraction reads PDFs, emails and paper scans without templates.',
     'Receive supplier invoices across email, portal, EDI and paper and digitise them.',
     ['Manual keying from PDFs', 'Multiple intake channels', 'Lost or duplicate paper invoices']),
    ('data-validation', 'VAL', 'Data Validation', 'medium',
     'Field-level validation against vendor master and tax rules flags errors before posting.',
     'Check header and line data for completeness, tax accuracy and vendor master consistency.',
     ['Missing PO numbers', 'Vendor master mismatches', 'Tax code errors']),
    ('po-matching', 'MAT', 'PO & Receipt Matching', 'high',
     'ML-driven 2-way and 3-way matching with tolerance learning.',
     'Match invoices to purchase orders and goods receipts within tolerance.',
     ['Partial receipts', 'Price variances', 'Unit-of-measure differences']),
    ('exception-handling', 'EXC', 'Exception Handling', 'medium',
     'Exception routing learns from historical resolutions and suggests fixes.',
     'Resolve match failures, missing approvals and disputed invoices.',
     ['Email back-and-forth with buyers', 'No root-cause tracking', 'Aging exceptions']),
    ('approval-routing', 'APR', 'Approval Routing', 'medium',
     'Dynamic routing by amount, vendor and GL pattern with mobile approvals.',
     'Route invoices to the right approvers according to delegation of authority.',
     ['Approver bottlenecks', 'Static routing rules', 'No visibility into pending approvals']),
    ('coding-gl-allocation', 'GL', 'GL Coding & Allocation', 'high',
     'Predictive GL coding from invoice history across entities and cost centres.',
     'Assign general ledger accounts, cost centres and allocations to invoice lines.',
     ['Inconsistent coding', 'Manual split allocations', 'Reclass entries at close']),
    ('fraud-duplicate-detection', 'FRD', 'Fraud & Duplicate Detection', 'medium',
     'Anomaly detection on payee changes, duplicate amounts and suspicious vendors.',
     'Screen invoices and vendors for duplicates, fraud patterns and sanctions hits.',
     ['Duplicate payments', 'Bank detail change fraud', 'Manual sampling only']),
    ('payment-scheduling', 'SCH', 'Payment Scheduling', 'low',
     'Cash-aware scheduling that captures early-payment discounts.',
     'Plan payment runs against terms, discounts and cash position.',
     ['Missed early-pay discounts', 'Late payment fees', 'No cash forecast link']),
    ('payment-execution', 'PAY', 'Payment Execution', 'low',
     'Orchestrated ACH, wire and virtual card payments with automated remittance.',
     'Release payments through the chosen rails and send remittance advice.',
     ['Paper cheques', 'Manual bank uploads', 'Remittance queries from suppliers']),
    ('reconciliation-reporting', 'REC', 'Reconciliation & Reporting', 'medium',
     'Continuous reconciliation of payments to invoices and ledger with live dashboards.',
     'Reconcile the AP subledger, accruals and bank, and report on DPO and cycle time.',
     ['Month-end accrual scramble', 'Spreadsheet reconciliations', 'Limited AP metrics']),
]

AR_STEPS = [
    ('credit-assessment', 'CRD', 'Credit Assessment & Onboarding', 'medium',
     'Automated credit scoring from bureau data, financials and payment history.',
     'Assess new customer credit, set limits and onboard customers to billing.',
     ['Manual credit reviews', 'Stale credit limits', 'Slow customer onboarding']),
    ('order-to-invoice', 'O2I', 'Order to Invoice', 'high',
     'Invoices generated straight from orders, contracts and usage data.',
     'Convert orders, contracts and usage into accurate customer invoices.',
     ['Billing errors', 'Usage data gathered by hand', 'Contract terms missed']),
    ('invoice-delivery', 'DLV', 'Invoice Delivery', 'low',
     'Multi-channel delivery with portal upload and read tracking.',
     'Deliver invoices by email, customer portal or EDI and confirm receipt.',
     ['Portal uploads by hand', 'Invoices sent to wrong contact', 'No delivery confirmation']),
    ('payment-tracking', 'TRK', 'Payment Tracking', 'medium',
     'Payment prediction flags late payers before the due date.',
     'Track expected and received customer payments across bank accounts.',
     ['No view of expected receipts', 'Bank portals checked daily', 'Surprise late payments']),
    ('cash-application', 'APP', 'Cash Application', 'high',
     'AI matching of remittances to open invoices including partial and short payments.',
     'Match incoming receipts to open invoices and post them to the ledger.',
     ['Missing remittance data', 'Unapplied cash', 'Lockbox file clean-up']),
    ('deduction-management', 'DED', 'Deduction & Dispute Management', 'medium',
     'Automatic deduction coding and root-cause workflows with customer portals.',
     'Identify, research and resolve short payments, deductions and disputes.',
     ['Deductions written off', 'Research across systems', 'Slow dispute turnaround']),
    ('collections', 'COL', 'Collections', 'high',
     'Prioritised worklists ranked by risk and expected recovery.',
     'Work overdue accounts by phone and email according to risk and value.',
     ['Collectors work alphabetically', 'No promise-to-pay tracking', 'High DSO']),
    ('dunning', 'DUN', 'Dunning', 'medium',
     'Personalised dunning sequences with optimised timing and channel.',
     'Send reminder sequences for overdue invoices and escalate per policy.',
     ['One-size-fits-all reminders', 'Manual reminder emails', 'Customer friction']),
    ('bad-debt-reserve', 'BDR', 'Bad Debt Reserve', 'low',
     'Predictive loss models replace static aging percentages.',
     'Estimate credit losses and book the bad debt reserve.',
     ['Aging-bucket reserves', 'Unsupported write-offs', 'Audit challenges']),
    ('ar-reporting', 'RPT', 'AR Reporting', 'medium',
     'Live DSO, aging and cash forecast dashboards.',
     'Report on aging, DSO, collections effectiveness and cash forecasts.',
     ['Spreadsheet aging reports', 'Lagging DSO metrics', 'No cash forecast']),
]

FPA_STEPS = [
    ('annual-planning', 'PLN', 'Annual Planning', 'medium',
     'Driver-based top-down targets generated from historicals and market signals.',
     'Set annual targets and planning assumptions with leadership.',
     ['Long planning cycles', 'Disconnected assumptions', 'Version chaos']),
    ('budgeting', 'BUD', 'Budgeting', 'medium',
     'Collaborative budget templates pre-filled from actuals and drivers.',
     'Collect and consolidate departmental budgets.',
     ['Email spreadsheet collection', 'Manual consolidation', 'Late submissions']),
    ('forecasting', 'FC', 'Rolling Forecasting', 'high',
     'ML forecasts refresh automatically from ledger, CRM and billing data.',
     'Re-forecast revenue and expense on a monthly or quarterly cadence.',
     ['Static annual budget', 'Manual data pulls', 'Low forecast accuracy']),
    ('scenario-planning', 'SCN', 'Scenario Planning', 'medium',
     'What-if modelling over shared drivers in minutes.',
     'Model upside, downside and strategic scenarios.',
     ['Scenarios rebuilt by hand', 'Broken links between models', 'Slow turnaround']),
    ('variance-analysis', 'VAR', 'Variance Analysis', 'high',
     'Automated variance detection with generated commentary.',
     'Explain budget and forecast variances to business owners.',
     ['Commentary chased by email', 'Variance thresholds ignored', 'Late insights']),
    ('financial-modeling', 'MOD', 'Financial Modeling', 'medium',
     'Model assistants build and audit driver logic.',
     'Build and maintain three-statement and operational models.',
     ['Key-person spreadsheets', 'Formula errors', 'No audit trail']),
    ('management-reporting', 'MGT', 'Management Reporting', 'high',
     'Self-updating dashboards with narrative summaries.',
     'Produce monthly management packs and KPI dashboards.',
     ['Copy-paste reporting', 'Inconsistent KPIs', 'Days spent formatting']),
    ('board-reporting', 'BRD', 'Board Reporting', 'low',
     'Board deck drafts generated from the reporting model.',
     'Prepare board and investor materials.',
     ['Late nights before board meetings', 'Numbers out of sync with packs']),
    ('revenue-planning', 'REV', 'Revenue Planning', 'medium',
     'Cohort and pipeline-driven revenue models.',
     'Plan bookings, revenue and retention by segment.',
     ['Pipeline data exported by hand', 'Retention not modelled', 'Sales vs finance numbers']),
    ('workforce-planning-fpa', 'WFP', 'Workforce Planning', 'low',
     'Headcount plans synced with HRIS and hiring pipeline.',
     'Plan headcount and compensation costs with HR.',
     ['HRIS data re-keyed', 'Open roles untracked', 'Comp assumptions out of date']),
]


def _build_steps(step_defs):
    steps = []
    for i, (sid, abbr, title, impact, opp, desc, pains) in enumerate(step_defs):
        steps.append({
            'id': sid, 'title': title, 'description': desc,
            'stepNumber': i + 1, 'abbreviation': abbr,
            'aiOpportunity': {'impact': impact, 'description': opp},
            'painPoints': list(pains),
        })
    return steps


def _workflow(wid, name, steps=None):
    return {'id': wid, 'name': name, 'functionId': 'finance', 'processId': wid,
            'steps': _build_steps(steps or [])}


def default_workflows():
    """Built-in finance workflows, keyed by id, in catalog order."""
    return {
        'ap': _workflow('ap', 'Accounts Payable', AP_STEPS),
        'ar': _workflow('ar', 'Accounts Receivable', AR_STEPS),
        'fpa': _workflow('fpa', 'FP&A', FPA_STEPS),
        'accounting': _workflow('accounting', 'Accounting'),
        'payroll': _workflow('payroll', 'Payroll'),
        'treasury': _workflow('treasury', 'Treasury'),
        'tax': _workflow('tax', 'Tax'),
    }


def validate_workflow(workflow):
    """Raise ValueError if step ids repeat, numbering is not dense, or impact is unknown."""
    seen = set()
    for pos, step in enumerate(workflow['steps'], start=1):
        if step['id'] in seen:
            raise ValueError(f"Workflow '{workflow['id']}': duplicate step id '{step['id']}'")
        seen.add(step['id'])
        if step['stepNumber'] != pos:
            raise ValueError(f"Workflow '{workflow['id']}': step '{step['id']}' numbered "
                             f"{step['stepNumber']}, expected {pos}")
        impact = step.get('aiOpportunity', {}).get('impact')
        if impact not in IMPACT_LEVELS:
            raise ValueError(f"Workflow '{workflow['id']}': step '{step['id']}' has impact {impact!r}")
    return workflow


def find_step(workflow, step_id):
    return next((s for s in workflow['steps'] if s['id'] == step_id), None)
