"""
Lighthouse — ERP Intelligence
Maturity signals, automation ceilings and change-management complexity for
the major ERP platforms. Used to resolve ERP aliases for tool compatibility,
to order tools by integration depth, and to annotate the company diagnostic.
"""

# Integration depth, best first
ERP_LEVEL_RANK = {'native': 0, 'connector': 1, 'middleware': 2, 'api': 3}

ERP_SIGNALS = [
    {
        'erpName': 'QuickBooks',
        'aliases': ['quickbooks', 'qbo', 'quickbooks online', 'qb', 'intuit quickbooks'],
        'maturitySignal': 'early-stage',
        'maturityDescription': 'Early-stage finance operations: small team, manual workflows, basic reporting.',
        'automationCeiling': 0.85,
        'changeManagement': 'low',
        'changeManagementNotes': 'Small teams adapt quickly and are used to adding marketplace apps.',
        'nativeCapabilities': ['Basic invoicing and bill pay', 'Simple bank reconciliation', 'Standard financial reports'],
        'gaps': ['No multi-step approval workflows', 'Limited 3-way matching', 'No variance analysis or scenario planning'],
        'typicalProfile': 'Startups and SMBs under $50M revenue, 1-5 person finance team',
    },
    {
        'erpName': 'Xero',
        'aliases': ['xero', 'xero accounting'],
        'maturitySignal': 'early-stage',
        'maturityDescription': 'Cloud-first SMB, early-stage finance operations with a strong API ecosystem.',
        'automationCeiling': 0.85,
        'changeManagement': 'low',
        'changeManagementNotes': 'Cloud-native users are generally receptive to new tools.',
        'nativeCapabilities': ['Invoicing with online payments', 'Bank feeds and reconciliation', 'Multi-currency support'],
        'gaps': ['No advanced AP automation', 'Limited approval workflows', 'Basic FP&A capabilities'],
        'typicalProfile': 'Cloud-first SMBs, often international, under $30M revenue',
    },
    {
        'erpName': 'Sage',
        'aliases': ['sage', 'sage intacct', 'sage 100', 'sage 300', 'sage x3', 'sage 50'],
        'maturitySignal': 'growing',
        'maturityDescription': 'Outgrown basic accounting; multi-entity and multi-currency needs are common.',
        'automationCeiling': 0.80,
        'changeManagement': 'medium',
        'changeManagementNotes': 'Intacct has a strong API; older Sage versions are harder to integrate.',
        'nativeCapabilities': ['Multi-entity consolidation', 'Dimensional reporting', 'Project accounting'],
        'gaps': ['Limited AI/ML capabilities', 'AP automation requires OCR add-ons', 'No built-in planning tools'],
        'typicalProfile': 'Mid-market $20M-$500M, 5-20 person finance team',
    },
    {
        'erpName': 'Oracle NetSuite',
        'aliases': ['netsuite', 'oracle netsuite', 'oracle ns', 'ns'],
        'maturitySignal': 'established',
        'maturityDescription': 'Established operations with multi-subsidiary complexity; platform often under-utilised.',
        'automationCeiling': 0.75,
        'changeManagement': 'medium',
        'changeManagementNotes': 'SuiteScript customisations can complicate new integrations.',
        'nativeCapabilities': ['AP/AR with approval workflows', 'Multi-subsidiary consolidation', 'ASC 606 revenue recognition'],
        'gaps': ['OCR and document processing', 'Advanced cash forecasting', 'AI-powered matching and anomaly detection'],
        'typicalProfile': 'Growth-stage and mid-market $30M-$1B, 10-50 person finance team',
    },
    {
        'erpName': 'Microsoft Dynamics',
        'aliases': ['dynamics', 'dynamics 365', 'microsoft dynamics', 'd365', 'dynamics gp',
                    'dynamics nav', 'dynamics bc', 'business central'],
        'maturitySignal': 'established',
        'maturityDescription': 'Enterprise-grade infrastructure with deep Microsoft ecosystem integration.',
        'automationCeiling': 0.75,
        'changeManagement': 'medium',
        'changeManagementNotes': 'Teams are comfortable with Power Automate but may resist non-Microsoft tools.',
        'nativeCapabilities': ['AP/AR with workflow automation', 'Multi-company, multi-currency', 'Power BI reporting'],
        'gaps': ['Document AI needs add-ons', 'Advanced FP&A beyond budgeting', 'Real-time cash forecasting'],
        'typicalProfile': 'Mid-market to enterprise $50M-$5B',
    },
    {
        'erpName': 'SAP',
        'aliases': ['sap', 'sap s/4hana', 'sap hana', 'sap ecc', 'sap r/3', 'sap business one', 'sap b1'],
        'maturitySignal': 'mature',
        'maturityDescription': 'Mature, heavily standardised organisation; the ERP often constrains what is possible.',
        'automationCeiling': 0.70,
        'changeManagement': 'high',
        'changeManagementNotes': 'Heavily customised landscapes; IT involvement mandatory, 6-12 month integrations.',
        'nativeCapabilities': ['Complex approval chains', 'Global consolidation', 'Treasury and cash management'],
        'gaps': ['User experience drives workarounds', 'Vendor onboarding and risk', 'Real-time scenario planning'],
        'typicalProfile': 'Enterprise $500M+, global operations, regulated industries',
    },
    {
        'erpName': 'Workday',
        'aliases': ['workday', 'workday financials', 'workday financial management'],
        'maturitySignal': 'mature',
        'maturityDescription': 'Cloud-first enterprise; finance module less mature than HR.',
        'automationCeiling': 0.75,
        'changeManagement': 'high',
        'changeManagementNotes': 'Unified data model means changes ripple across HR and Finance.',
        'nativeCapabilities': ['Unified HR + Finance data model', 'Real-time reporting', 'Expense management'],
        'gaps': ['AP automation has no intelligent OCR', 'AR collections and cash application', 'AI anomaly detection'],
        'typicalProfile': 'Enterprise $500M+, tech or professional services',
    },
]


def get_erp_signal(erp_name):
    """Case-insensitive, alias-aware lookup. None for unknown or empty names."""
    if not erp_name:
        return None
    key = str(erp_name).strip().lower()
    for s in ERP_SIGNALS:
        if s['erpName'].lower() == key or key in s['aliases']:
            return s
    return None


def canonical_erp_name(erp_name):
    """Map an alias to its canonical ERP name; unknown names pass through stripped."""
    if not erp_name:
        return None
    sig = get_erp_signal(erp_name)
    return sig['erpName'] if sig else str(erp_name).strip()
