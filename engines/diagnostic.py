"""
Lighthouse — Company Diagnostic
Archetype classification from industry and company size.
Profiles are fixed tables; resolution walks an ordered fallback chain:
  1. industry × size table (industry matched case-insensitively)
  2. size-only table
  3. default profile
Classification never fails. Free-text pain points are accepted for the
narrative layer but do not influence the result.
"""
import copy

from engines.erp import get_erp_signal

DEFAULT_PROFILE = 'tech-saas-mm'

DISCLAIMER = ('Ranges reflect patterns from similar companies. Actual results depend on current process '
              'maturity, data quality and implementation approach. These are hypothesis-level estimates '
              'meant to guide exploration, not commitments.')

PROCESS_NAMES = {'ap': 'Accounts Payable', 'ar': 'Accounts Receivable', 'fpa': 'FP&A'}


def _challenge(title, category, description, evidence):
    return {'title': title, 'description': description, 'category': category, 'evidenceHint': evidence}


def _priority(process_id, leverage, rationale):
    return {'functionId': 'finance', 'processId': process_id, 'processName': PROCESS_NAMES[process_id],
            'rationale': rationale, 'expectedLeverage': leverage}


def _split(high, hitl, led):
    return {
        'highLeverage': {'min': high[0], 'max': high[1],
                         'description': 'Extraction, matching, anomaly detection and routine entries.'},
        'humanInTheLoop': {'min': hitl[0], 'max': hitl[1],
                           'description': 'Approvals, exceptions and judgement calls prepared by AI.'},
        'humanLed': {'min': led[0], 'max': led[1],
                     'description': 'Strategic relationships, board narrative and policy decisions.'},
    }


def _opportunity(effort, cost, capacity):
    return {'effortAddressable': {'min': effort[0], 'max': effort[1]},
            'costSavingsRange': {'min': cost[0], 'max': cost[1]},
            'capacityUnlocked': {'min': capacity[0], 'max': capacity[1]},
            'disclaimer': DISCLAIMER}


# ── Archetype profiles ──
PROFILES = {
    'tech-saas-mm': {
        'companyArchetype': 'Mid-Market SaaS — Finance & GTM Heavy',
        'archetypeDescription': (
            'Typically 200-1,500 employees with revenue growth outpacing back-office investment. '
            'Finance teams are lean relative to transaction volume and must reconcile the data '
            'that go-to-market motions generate downstream.'),
        'challenges': [
            _challenge('Manual invoice processing at scale', 'operational',
                       'Invoice volumes climb 30-50% a year while AP headcount stays flat; coding and '
                       'approval routing become close bottlenecks.',
                       'Ask for monthly invoice counts and AP headcount over the last two years.'),
            _challenge('Revenue recognition complexity', 'cost',
                       'Usage-based pricing and mid-contract changes put pressure on spreadsheet rev rec.',
                       'Look for rev rec schedules maintained outside the ERP.'),
            _challenge('Cash application backlog', 'operational',
                       'Inconsistent remittance data makes matching receipts a 15-25 hour weekly task.',
                       'Check unapplied cash balance at month end.'),
            _challenge('Forecast accuracy drift', 'data-quality',
                       'Static models lag pipeline changes and board forecasts take days of data gathering.',
                       'Compare last four quarterly forecasts with actuals.'),
            _challenge('Vendor sprawl and spend visibility', 'cost',
                       '200+ vendors with limited tracking lead to duplicate contracts and missed renewals.',
                       'Count active vendors and vendors with more than one contract.'),
        ],
        'aiApplicability': _split((30, 45), (35, 45), (15, 30)),
        'automationOpportunity': _opportunity((40, 60), (15, 30), (25, 45)),
        'priorityAreas': [
            _priority('ap', 'high', 'High invoice volume relative to team size; extraction and matching '
                                    'automation can address 40-60% of AP effort.'),
            _priority('ar', 'high', 'Cash application and aging tracking consume disproportionate effort; '
                                    'payment matching and dunning can cut DSO by 10-20%.'),
            _priority('fpa', 'medium', 'Manual aggregation from CRM and billing slows forecasting; '
                                       'automated variance analysis can halve cycle time.'),
        ],
    },
    'enterprise-mfg': {
        'companyArchetype': 'Enterprise Manufacturing — Ops & Finance Integration',
        'archetypeDescription': (
            'Large multi-entity organisations with shared service centres, high transaction volumes '
            'and finance processes tightly coupled to operations and supply chain.'),
        'challenges': [
            _challenge('Three-way match at high volume', 'scale',
                       'Tens of thousands of invoices a month with partial receipts drive exception queues.',
                       'Ask for the first-pass match rate and exception aging.'),
            _challenge('Intercompany reconciliation burden', 'operational',
                       'Dozens of legal entities make intercompany eliminations a close-critical task.',
                       'Count intercompany mismatches carried past close.'),
            _challenge('Cost accounting accuracy', 'data-quality',
                       'Standard cost variances and allocations are maintained by hand.',
                       'Review the size of manual cost allocation journals.'),
            _challenge('Supplier risk and compliance', 'cost',
                       'Large supplier bases carry bank detail fraud and sanctions exposure.',
                       'Ask how supplier bank changes are verified.'),
            _challenge('Audit-ready documentation gap', 'operational',
                       'Evidence for controls is gathered at year end rather than captured in flow.',
                       'Check prior-year audit findings for documentation issues.'),
            _challenge('Capital expenditure tracking', 'data-quality',
                       'Capex projects are tracked outside the ERP and reconciled late.',
                       'Look for capex trackers maintained in spreadsheets.'),
        ],
        'aiApplicability': _split((25, 40), (35, 45), (20, 35)),
        'automationOpportunity': _opportunity((35, 55), (20, 35), (30, 50)),
        'priorityAreas': [
            _priority('ap', 'high', 'Highest transaction volume in finance; three-way match automation can '
                                    'address 50-70% of invoice processing effort.'),
            _priority('ar', 'medium', 'Deductions and disputes from large customers tie up cash; '
                                      'deduction coding and cash application deliver quick wins.'),
            _priority('fpa', 'medium', 'Multi-entity consolidation slows planning; driver-based models '
                                       'shorten the forecast cycle.'),
        ],
    },
    'healthcare-mm': {
        'companyArchetype': 'Mid-Market Healthcare — Compliance & Revenue Cycle',
        'archetypeDescription': (
            'Provider and healthcare services organisations managing complex payer contracts, '
            'regulatory reporting and thin operating margins.'),
        'challenges': [
            _challenge('Revenue cycle leakage', 'cost',
                       'Claim denials and underpayments leak 3-8% of revenue.',
                       'Ask for denial rates and write-offs by payer.'),
            _challenge('Payer contract complexity', 'data-quality',
                       '20+ payer contracts with different terms make expected reimbursement hard to model.',
                       'Check whether contract terms are loaded into any system.'),
            _challenge('Regulatory compliance burden', 'operational',
                       'Compliance reporting is assembled by hand from several systems.',
                       'List recurring regulatory reports and their preparation time.'),
            _challenge('Vendor credentialing and management', 'operational',
                       'Medical suppliers require credentialing and contract checks before payment.',
                       'Ask how supplier credentials are tracked.'),
            _challenge('Budget variance in clinical operations', 'scale',
                       'Volume swings in clinical activity make departmental budgets unreliable.',
                       'Review variance commentary for clinical departments.'),
        ],
        'aiApplicability': _split((20, 35), (40, 50), (20, 35)),
        'automationOpportunity': _opportunity((30, 50), (12, 25), (20, 40)),
        'priorityAreas': [
            _priority('ar', 'high', 'Revenue cycle is the largest value pool; denial prevention and cash '
                                    'application automation recover leakage directly.'),
            _priority('ap', 'medium', 'Supplier credentialing and high-volume medical supply invoices '
                                      'benefit from automated capture and validation.'),
            _priority('fpa', 'medium', 'Volume-driven forecasting improves budget accuracy in clinical '
                                       'operations.'),
        ],
    },
    'proserv-smb': {
        'companyArchetype': 'Professional Services SMB — People & Project Economics',
        'archetypeDescription': (
            'Small firms where utilisation and project margins drive results. Finance is a team of '
            'two to five people covering billing, payables and reporting.'),
        'challenges': [
            _challenge('Time-to-invoice lag', 'operational',
                       'Time and expense data arrives late so invoices go out 5-15 days after period end.',
                       'Measure days from period end to invoice sent.'),
            _challenge('Project profitability blind spots', 'data-quality',
                       'Project margins are only known after close.',
                       'Ask when project managers last saw margin by project.'),
            _challenge('Expense report burden', 'operational',
                       'Consultants submit receipts by hand and finance re-keys them.',
                       'Count expense reports processed monthly.'),
            _challenge('Cash flow forecasting difficulty', 'cost',
                       'Lumpy project billing makes short-term cash hard to predict.',
                       'Check whether a 13-week cash forecast exists.'),
            _challenge('Multi-entity and multi-currency complexity', 'scale',
                       'International clients add currencies and entities the ledger handles poorly.',
                       'List entities and billing currencies.'),
        ],
        'aiApplicability': _split((25, 40), (35, 45), (20, 35)),
        'automationOpportunity': _opportunity((35, 55), (15, 28), (25, 45)),
        'priorityAreas': [
            _priority('ap', 'high', 'A small team handles every payable by hand; capture and approval '
                                    'automation frees capacity immediately.'),
            _priority('ar', 'high', 'Faster invoicing and automated reminders shorten the cash cycle.'),
            _priority('fpa', 'medium', 'Project-level forecasting links utilisation to cash.'),
        ],
    },
}

# ── Fallback chain tables ──
INDUSTRY_SIZE_MAP = {
    'technology': {'startup': 'tech-saas-mm', 'smb': 'tech-saas-mm', 'mid-market': 'tech-saas-mm',
                   'enterprise': 'enterprise-mfg'},
    'e-commerce': {'startup': 'tech-saas-mm', 'smb': 'tech-saas-mm', 'mid-market': 'tech-saas-mm',
                   'enterprise': 'enterprise-mfg'},
    'manufacturing': {'startup': 'proserv-smb', 'smb': 'proserv-smb', 'mid-market': 'enterprise-mfg',
                      'enterprise': 'enterprise-mfg'},
    'healthcare': {'startup': 'healthcare-mm', 'smb': 'healthcare-mm', 'mid-market': 'healthcare-mm',
                   'enterprise': 'healthcare-mm'},
    'professional services': {'startup': 'proserv-smb', 'smb': 'proserv-smb', 'mid-market': 'proserv-smb',
                              'enterprise': 'enterprise-mfg'},
    'financial services': {'startup': 'tech-saas-mm', 'smb': 'proserv-smb', 'mid-market': 'enterprise-mfg',
                           'enterprise': 'enterprise-mfg'},
    'retail': {'startup': 'proserv-smb', 'smb': 'proserv-smb', 'mid-market': 'enterprise-mfg',
               'enterprise': 'enterprise-mfg'},
}

SIZE_ONLY_MAP = {'enterprise': 'enterprise-mfg', 'startup': 'proserv-smb', 'smb': 'proserv-smb'}


def _by_industry_and_size(industry, size):
    return INDUSTRY_SIZE_MAP.get(_norm(industry), {}).get(size)


def _by_size(industry, size):
    return SIZE_ONLY_MAP.get(size)


RESOLUTION_CHAIN = [_by_industry_and_size, _by_size]


def resolve_profile_key(industry, company_size):
    size = _norm(company_size)
    for step in RESOLUTION_CHAIN:
        key = step(industry, size)
        if key:
            return key
    return DEFAULT_PROFILE


def classify_company(context, pain_point_text=None):
    """CompanyDiagnostic for a company context. Same inputs give the same output."""
    if not isinstance(context, dict):
        context = {}
    key = resolve_profile_key(context.get('industry'), context.get('companySize'))
    profile = copy.deepcopy(PROFILES[key])
    for rank, area in enumerate(profile['priorityAreas'], start=1):
        area['rank'] = rank
    profile['profileKey'] = key
    sig = get_erp_signal(context.get('erp'))
    profile['erpSignal'] = copy.deepcopy(sig) if sig else None
    return profile


def _norm(value):
    if value is None:
        return ''
    return str(value).strip().lower()
