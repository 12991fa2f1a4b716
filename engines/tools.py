"""
Lighthouse — Tool/Vendor Library & Fit Scorer
Vendor tools per finance category with per-step fit scores (0-100),
ERP compatibility and company-context tags.

Ranking for a workflow step is a composed key chain:
  1. effective step fit score (descending)
  2. sub-sector match, then company-size match (when a company context is given)
  3. ERP integration depth (when an ERP is given)
  4. catalog insertion order (stable sort)
"""
import math
import re

from engines.erp import ERP_LEVEL_RANK, canonical_erp_name

CATEGORIES = ('ap', 'ar', 'fpa', 'close')
COMPANY_SIZES = ('startup', 'smb', 'mid-market', 'enterprise')
AI_MATURITY = ('ai-native', 'ai-enabled', 'traditional')

FIT_GRADES = [(80, 'best-fit'), (50, 'good-fit'), (0, 'limited')]


def _tool(tid, name, vendor, category, ai, sizes, industries, fit, overall=None,
          sub_sectors=None, pricing=None, erp=None, integrations=None, features=None,
          tagline='', description='', website=None, founded=None, headquarters=None):
    return {
        'id': tid, 'name': name, 'vendor': vendor, 'category': category,
        'tagline': tagline, 'description': description,
        'keyFeatures': list(features or []),
        'companySizes': list(sizes), 'industries': list(industries),
        'subSectors': list(sub_sectors) if sub_sectors is not None else None,
        'pricing': {'model': 'custom', 'startingPrice': None, 'notes': None, **(pricing or {})},
        'integrations': list(integrations or []),
        'aiMaturity': ai,
        'erpCompatibility': {k: {'level': v, 'notes': None} for k, v in (erp or {}).items()},
        'fitScores': dict(fit), 'overallFitScore': overall,
        'website': website, 'founded': founded, 'headquarters': headquarters,
    }


# ── Tool library (catalog order is the final tie-break) ──
TOOL_LIBRARY = [
    # Accounts Payable
    _tool('bill', 'BILL AP', 'BILL', 'ap', 'ai-enabled', ['startup', 'smb', 'mid-market'],
          ['Technology', 'Professional Services', 'E-commerce'],
          {'invoice-capture': 78, 'data-validation': 70, 'approval-routing': 88, 'payment-execution': 90,
           'payment-scheduling': 82, 'po-matching': 45, 'coding-gl-allocation': 65, 'reconciliation-reporting': 72},
          overall=74, sub_sectors=['saas'],
          pricing={'model': 'per-user', 'startingPrice': '$45/user/month'},
          erp={'QuickBooks': 'native', 'Xero': 'native', 'Oracle NetSuite': 'connector', 'Sage': 'connector',
               'Microsoft Dynamics': 'api'},
          integrations=['QuickBooks', 'Xero', 'NetSuite', 'Sage Intacct'],
          features=['Bill capture', 'Approval workflows', 'ACH and virtual card payments'],
          tagline='AP and payments for growing businesses',
          description='Cloud AP automation with approval routing and built-in payment rails.',
          website='https://www.bill.com', founded='2006', headquarters='San Jose, CA'),
    _tool('tipalti', 'Tipalti', 'Tipalti', 'ap', 'ai-enabled', ['smb', 'mid-market', 'enterprise'],
          ['Technology', 'E-commerce', 'Media'],
          {'invoice-capture': 85, 'data-validation': 84, 'po-matching': 75, 'approval-routing': 82,
           'fraud-duplicate-detection': 80, 'payment-execution': 95, 'payment-scheduling': 88,
           'reconciliation-reporting': 83},
          overall=84, sub_sectors=['saas', 'semiconductor', 'fintech'],
          pricing={'model': 'subscription', 'startingPrice': '$99/month', 'notes': 'Platform fee plus payment fees'},
          erp={'Oracle NetSuite': 'native', 'Sage': 'connector', 'QuickBooks': 'connector', 'Xero': 'connector',
               'Microsoft Dynamics': 'connector', 'SAP': 'middleware'},
          integrations=['NetSuite', 'Sage Intacct', 'QuickBooks', 'Xero', 'Dynamics 365'],
          features=['Global mass payments', 'Supplier onboarding portal', 'Tax compliance'],
          tagline='Global payables automation',
          description='End-to-end payables with supplier self-onboarding and payments in 200+ countries.',
          website='https://tipalti.com', founded='2010', headquarters='San Mateo, CA'),
    _tool('stampli', 'Stampli', 'Stampli', 'ap', 'ai-native', ['smb', 'mid-market', 'enterprise'],
          ['Manufacturing', 'Healthcare', 'Professional Services', 'Technology'],
          {'invoice-capture': 90, 'data-validation': 86, 'coding-gl-allocation': 92, 'approval-routing': 90,
           'exception-handling': 88, 'po-matching': 80, 'fraud-duplicate-detection': 70},
          overall=86, sub_sectors=['hardware'],
          pricing={'model': 'custom', 'notes': 'Priced by invoice volume'},
          erp={'Oracle NetSuite': 'native', 'SAP': 'connector', 'Microsoft Dynamics': 'connector',
               'Sage': 'connector', 'QuickBooks': 'connector', 'Workday': 'api'},
          integrations=['NetSuite', 'SAP', 'Dynamics 365', 'Sage Intacct', 'QuickBooks'],
          features=['Billy the Bot GL coding', 'Invoice-centric collaboration', 'ERP-agnostic'],
          tagline='AI-first invoice management',
          description='Invoice management with an AI assistant that learns coding and approval patterns.',
          website='https://www.stampli.com', founded='2015', headquarters='Mountain View, CA'),
    _tool('coupa', 'Coupa AP Automation', 'Coupa', 'ap', 'ai-enabled', ['mid-market', 'enterprise'],
          ['Manufacturing', 'Healthcare', 'Retail', 'Financial Services'],
          {'po-matching': 92, 'exception-handling': 85, 'invoice-capture': 82, 'approval-routing': 84,
           'fraud-duplicate-detection': 78, 'payment-execution': 80, 'reconciliation-reporting': 80},
          overall=83, sub_sectors=['semiconductor', 'hardware'],
          pricing={'model': 'enterprise', 'notes': 'Suite licensing'},
          erp={'SAP': 'native', 'Oracle NetSuite': 'connector', 'Workday': 'connector',
               'Microsoft Dynamics': 'connector'},
          integrations=['SAP', 'Oracle', 'Workday', 'Dynamics 365'],
          features=['Procure-to-pay suite', 'Supplier network', 'Three-way matching'],
          tagline='Business spend management',
          description='Procure-to-pay platform with a large supplier network and spend analytics.',
          website='https://www.coupa.com', founded='2006', headquarters='San Mateo, CA'),
    _tool('ramp', 'Ramp Bill Pay', 'Ramp', 'ap', 'ai-native', ['startup', 'smb', 'mid-market'],
          ['Technology', 'E-commerce', 'Professional Services'],
          {'invoice-capture': 84, 'coding-gl-allocation': 86, 'approval-routing': 85, 'payment-execution': 88,
           'payment-scheduling': 80, 'data-validation': 78},
          overall=82, sub_sectors=['saas', 'fintech'],
          pricing={'model': 'per-user', 'startingPrice': '$15/user/month', 'notes': 'Free core plan available'},
          erp={'QuickBooks': 'native', 'Oracle NetSuite': 'native', 'Xero': 'native', 'Sage': 'connector'},
          integrations=['QuickBooks', 'NetSuite', 'Xero', 'Sage Intacct'],
          features=['OCR bill capture', 'Auto-coding', 'Cards and bill pay in one platform'],
          tagline='Spend management and bill pay',
          description='Corporate cards and bill pay with automated coding and approvals.',
          website='https://ramp.com', founded='2019', headquarters='New York, NY'),
    _tool('basware', 'Basware AP Automation', 'Basware', 'ap', 'ai-enabled', ['mid-market', 'enterprise'],
          ['Manufacturing', 'Retail', 'Healthcare'],
          {'invoice-capture': 88, 'data-validation': 85, 'po-matching': 87, 'exception-handling': 80,
           'coding-gl-allocation': 75, 'fraud-duplicate-detection': 72},
          overall=81,
          pricing={'model': 'custom', 'notes': 'Priced by invoice volume'},
          erp={'SAP': 'connector', 'Oracle NetSuite': 'connector', 'Microsoft Dynamics': 'connector', 'Workday': 'api'},
          integrations=['SAP', 'Oracle', 'Dynamics 365'],
          features=['E-invoicing network', 'SmartCoding', 'Global compliance'],
          tagline='Global e-invoicing and AP',
          description='High-volume AP automation with a global e-invoicing network.',
          website='https://www.basware.com', founded='1985', headquarters='Espoo, Finland'),
    _tool('vic-ai', 'Vic.ai', 'Vic.ai', 'ap', 'ai-native', ['mid-market', 'enterprise'],
          ['Professional Services', 'Healthcare', 'Technology'],
          {'invoice-capture': 93, 'coding-gl-allocation': 94, 'data-validation': 88, 'approval-routing': 78,
           'exception-handling': 75},
          overall=85,
          pricing={'model': 'custom'},
          erp={'Oracle NetSuite': 'connector', 'Sage': 'connector', 'Microsoft Dynamics': 'connector',
               'SAP': 'api', 'Workday': 'api'},
          integrations=['NetSuite', 'Sage Intacct', 'Dynamics 365'],
          features=['Autonomous invoice processing', 'Predictive GL coding', 'Confidence scoring'],
          tagline='Autonomous accounting',
          description='Autonomous invoice processing trained on accounting-firm transaction data.',
          website='https://www.vic.ai', founded='2017', headquarters='New York, NY'),
    _tool('appzen', 'AppZen Autonomous AP', 'AppZen', 'ap', 'ai-native', ['enterprise'],
          ['Financial Services', 'Technology', 'Healthcare'],
          {'fraud-duplicate-detection': 92, 'data-validation': 80, 'exception-handling': 70},
          overall=64,
          pricing={'model': 'custom'},
          erp={'SAP': 'connector', 'Workday': 'connector', 'Oracle NetSuite': 'api'},
          features=['Pre-payment audit', 'Duplicate and fraud detection'],
          tagline='AI audit for finance',
          description='Audits every invoice and expense before payment for duplicates and policy breaches.'),
    _tool('avidxchange', 'AvidXchange', 'AvidXchange', 'ap', 'ai-enabled', ['smb', 'mid-market'],
          ['Real Estate', 'Construction', 'Healthcare'],
          {'payment-execution': 86, 'payment-scheduling': 78, 'approval-routing': 74},
          pricing={'model': 'per-invoice', 'notes': 'Transaction-based pricing'},
          erp={'Sage': 'native', 'Microsoft Dynamics': 'connector', 'QuickBooks': 'connector'},
          features=['Payment network', 'Mid-market AP automation'],
          tagline='AP automation for the middle market',
          description='AP and payment automation focused on mid-market real estate and construction.'),
    # Accounts Receivable
    _tool('highradius', 'HighRadius', 'HighRadius', 'ar', 'ai-native', ['mid-market', 'enterprise'],
          ['Manufacturing', 'Retail', 'Healthcare', 'Technology'],
          {'credit-assessment': 88, 'cash-application': 95, 'collections': 92, 'deduction-management': 93,
           'dunning': 85, 'payment-tracking': 85, 'bad-debt-reserve': 80, 'ar-reporting': 84},
          overall=88, sub_sectors=['semiconductor', 'hardware'],
          pricing={'model': 'enterprise'},
          erp={'SAP': 'native', 'Oracle NetSuite': 'connector', 'Microsoft Dynamics': 'connector', 'Workday': 'connector'},
          features=['Autonomous cash application', 'AI collections worklists', 'Deduction management'],
          tagline='Autonomous order-to-cash',
          description='Order-to-cash suite with AI cash application, collections and deductions.',
          website='https://www.highradius.com', founded='2006', headquarters='Houston, TX'),
    _tool('billtrust', 'Billtrust', 'Billtrust', 'ar', 'ai-enabled', ['mid-market', 'enterprise'],
          ['Manufacturing', 'Retail'],
          {'invoice-delivery': 92, 'order-to-invoice': 80, 'cash-application': 86, 'payment-tracking': 84,
           'ar-reporting': 78},
          overall=82, sub_sectors=['semiconductor'],
          pricing={'model': 'custom'},
          erp={'SAP': 'connector', 'Oracle NetSuite': 'connector', 'Microsoft Dynamics': 'connector'},
          features=['Invoice delivery network', 'Cash application', 'B2B payments'],
          tagline='B2B order-to-cash',
          description='Invoice delivery, payments and cash application for B2B distributors.'),
    _tool('tesorio', 'Tesorio', 'Tesorio', 'ar', 'ai-native', ['smb', 'mid-market'],
          ['Technology', 'Professional Services'],
          {'collections': 88, 'dunning': 86, 'payment-tracking': 84, 'ar-reporting': 86, 'cash-application': 72},
          overall=80, sub_sectors=['saas'],
          pricing={'model': 'subscription', 'startingPrice': '$2,000/month'},
          erp={'Oracle NetSuite': 'native', 'Sage': 'connector', 'QuickBooks': 'connector', 'Microsoft Dynamics': 'api'},
          features=['Collections workflows', 'Cash forecasting', 'Customer portal'],
          tagline='Connected cash performance',
          description='Collections and cash forecasting for mid-market finance teams.'),
    _tool('chargebee', 'Chargebee', 'Chargebee', 'ar', 'ai-enabled', ['startup', 'smb', 'mid-market'],
          ['Technology', 'E-commerce', 'Media'],
          {'order-to-invoice': 92, 'invoice-delivery': 85, 'dunning': 84, 'payment-tracking': 70},
          overall=78, sub_sectors=['saas'],
          pricing={'model': 'subscription', 'startingPrice': '$599/month'},
          erp={'QuickBooks': 'native', 'Xero': 'native', 'Oracle NetSuite': 'connector', 'Sage': 'connector'},
          features=['Subscription billing', 'Smart dunning', 'Revenue recognition'],
          tagline='Subscription billing and revenue',
          description='Recurring billing, dunning and revenue management for subscription businesses.'),
    _tool('esker', 'Esker Order-to-Cash', 'Esker', 'ar', 'ai-enabled', ['mid-market', 'enterprise'],
          ['Manufacturing', 'Healthcare'],
          {'order-to-invoice': 78, 'invoice-delivery': 80, 'cash-application': 82, 'collections': 76,
           'deduction-management': 78, 'credit-assessment': 74},
          overall=78, sub_sectors=['hardware'],
          pricing={'model': 'custom'},
          erp={'SAP': 'native', 'Microsoft Dynamics': 'connector', 'Oracle NetSuite': 'connector'},
          features=['Order processing', 'Credit management', 'Cash allocation'],
          tagline='AI-driven order-to-cash',
          description='Order-to-cash automation from order entry through collections.'),
    _tool('upflow', 'Upflow', 'Upflow', 'ar', 'ai-enabled', ['startup', 'smb'],
          ['Technology', 'Professional Services'],
          {'collections': 80, 'dunning': 88, 'payment-tracking': 78},
          overall=72, sub_sectors=['saas'],
          pricing={'model': 'subscription', 'startingPrice': '$1,000/month'},
          erp={'QuickBooks': 'native', 'Xero': 'native', 'Oracle NetSuite': 'connector'},
          features=['Automated reminders', 'Payment portal'],
          tagline='Collections for B2B',
          description='Automated dunning and collections for SMB finance teams.'),
    # FP&A
    _tool('anaplan', 'Anaplan', 'Anaplan', 'fpa', 'ai-enabled', ['enterprise'],
          ['Manufacturing', 'Retail', 'Financial Services', 'Technology'],
          {'annual-planning': 90, 'budgeting': 85, 'forecasting': 88, 'scenario-planning': 92,
           'financial-modeling': 90, 'revenue-planning': 86, 'workforce-planning-fpa': 88,
           'variance-analysis': 78, 'management-reporting': 75, 'board-reporting': 70},
          overall=85, sub_sectors=['semiconductor', 'hardware'],
          pricing={'model': 'enterprise'},
          erp={'SAP': 'connector', 'Workday': 'connector', 'Oracle NetSuite': 'connector', 'Microsoft Dynamics': 'connector'},
          features=['Connected planning', 'Hyperblock modelling', 'Scenario analysis'],
          tagline='Connected planning platform',
          description='Enterprise connected planning across finance, sales and supply chain.'),
    _tool('pigment', 'Pigment', 'Pigment', 'fpa', 'ai-native', ['mid-market', 'enterprise'],
          ['Technology', 'Retail', 'E-commerce'],
          {'scenario-planning': 92, 'forecasting': 90, 'revenue-planning': 90, 'workforce-planning-fpa': 86,
           'budgeting': 84, 'financial-modeling': 86},
          overall=86, sub_sectors=['saas'],
          pricing={'model': 'custom'},
          erp={'Oracle NetSuite': 'connector', 'SAP': 'connector', 'Workday': 'connector', 'Microsoft Dynamics': 'api'},
          features=['Real-time scenario modelling', 'AI forecasting', 'Collaborative planning'],
          tagline='Business planning for the AI era',
          description='Multi-dimensional planning with real-time scenarios.'),
    _tool('mosaic', 'Mosaic', 'Mosaic', 'fpa', 'ai-enabled', ['startup', 'smb', 'mid-market'],
          ['Technology', 'Professional Services'],
          {'management-reporting': 88, 'variance-analysis': 85, 'forecasting': 84, 'board-reporting': 86,
           'budgeting': 80},
          overall=82, sub_sectors=['saas'],
          pricing={'model': 'subscription', 'startingPrice': '$25,000/year'},
          erp={'Oracle NetSuite': 'native', 'QuickBooks': 'native', 'Sage': 'connector', 'Xero': 'connector'},
          features=['Out-of-the-box SaaS metrics', 'Board reporting', 'Headcount planning'],
          tagline='Strategic finance platform',
          description='Strategic finance platform with prebuilt SaaS metrics and reporting.'),
    _tool('planful', 'Planful', 'Planful', 'fpa', 'ai-enabled', ['mid-market', 'enterprise'],
          ['Healthcare', 'Manufacturing', 'Professional Services'],
          {'budgeting': 88, 'annual-planning': 85, 'variance-analysis': 86, 'management-reporting': 84,
           'board-reporting': 80, 'forecasting': 80},
          overall=83,
          pricing={'model': 'custom'},
          erp={'Oracle NetSuite': 'connector', 'Microsoft Dynamics': 'connector', 'Sage': 'connector', 'SAP': 'middleware'},
          features=['Structured planning', 'Consolidation', 'Dynamic reporting'],
          tagline='Continuous planning',
          description='Planning, consolidation and reporting for mid-market and enterprise finance.'),
    _tool('drivetrain', 'Drivetrain', 'Drivetrain', 'fpa', 'ai-native', ['startup', 'smb'],
          ['Technology'],
          {'forecasting': 82, 'scenario-planning': 84, 'revenue-planning': 85, 'board-reporting': 78},
          overall=79, sub_sectors=['saas'],
          pricing={'model': 'subscription', 'startingPrice': '$1,500/month'},
          erp={'QuickBooks': 'native', 'Oracle NetSuite': 'connector', 'Xero': 'connector'},
          features=['Driver-based models', 'Revenue cohorts'],
          tagline='Strategic planning for startups',
          description='Driver-based planning for venture-backed companies.'),
    _tool('vena', 'Vena', 'Vena Solutions', 'fpa', 'traditional', ['mid-market'],
          ['Manufacturing', 'Financial Services'],
          {'budgeting': 86, 'annual-planning': 82, 'financial-modeling': 80, 'management-reporting': 80},
          overall=78, sub_sectors=['hardware'],
          pricing={'model': 'custom'},
          erp={'Microsoft Dynamics': 'native', 'Oracle NetSuite': 'connector', 'Sage': 'connector'},
          features=['Excel-native planning', 'Workflow and audit trail'],
          tagline='Excel-native FP&A',
          description='Planning platform built around the Excel interface.'),
    # Close
    _tool('blackline', 'BlackLine', 'BlackLine', 'close', 'ai-enabled', ['mid-market', 'enterprise'],
          ['Manufacturing', 'Financial Services', 'Healthcare', 'Retail'], {},
          overall=84,
          pricing={'model': 'custom'},
          erp={'SAP': 'native', 'Oracle NetSuite': 'connector', 'Workday': 'connector', 'Microsoft Dynamics': 'connector'},
          features=['Account reconciliation', 'Close task management', 'Intercompany hub'],
          tagline='Financial close automation',
          description='Close management and account reconciliation for large finance teams.'),
]


# ══════════════════════════════════════════════════════════════
#  LOOKUPS
# ══════════════════════════════════════════════════════════════

def tools_by_category(tools, category):
    return [t for t in tools if t['category'] == category]


def tool_by_id(tools, tool_id):
    return next((t for t in tools if t['id'] == tool_id), None)


def tools_by_ids(tools, ids):
    """Found tools in the order of ids; unknown ids are dropped."""
    index = {t['id']: t for t in tools}
    return [index[i] for i in ids if i in index]


def filter_tools(tools, category=None, company_sizes=None, industries=None,
                 ai_maturity=None, search=None):
    out = list(tools)
    if category:
        out = [t for t in out if t['category'] == category]
    if company_sizes:
        out = [t for t in out if any(s in t['companySizes'] for s in company_sizes)]
    if industries:
        out = [t for t in out if any(i in t['industries'] for i in industries)]
    if ai_maturity:
        out = [t for t in out if t['aiMaturity'] in ai_maturity]
    if search and search.strip():
        q = search.strip().lower()
        out = [t for t in out if q in t['name'].lower() or q in t['vendor'].lower()
               or q in (t.get('tagline') or '').lower() or q in (t.get('description') or '').lower()]
    return out


# ══════════════════════════════════════════════════════════════
#  FIT SCORING
# ══════════════════════════════════════════════════════════════

def effective_fit_score(tool, step_id):
    """Per-step score, else the overall score, else 0."""
    score = (tool.get('fitScores') or {}).get(step_id)
    if score is not None:
        return score
    if tool.get('overallFitScore') is not None:
        return tool['overallFitScore']
    return 0


def fit_grade(score):
    for threshold, grade in FIT_GRADES:
        if score >= threshold:
            return grade
    return 'limited'


def round_half_up(value):
    return int(math.floor(value + 0.5))


def aggregate_tool_scores(scores):
    """Mean of per-step effective scores, rounded to the nearest integer."""
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def get_tool_erp_compatibility(tool, erp_name):
    """{'level', 'notes'} for the tool on this ERP, or None."""
    if not erp_name:
        return None
    compat = tool.get('erpCompatibility') or {}
    name = canonical_erp_name(erp_name)
    entry = compat.get(name)
    if entry is None:
        key = name.lower()
        entry = next((v for k, v in compat.items() if k.lower() == key), None)
    if entry is None:
        return None
    return {'level': entry['level'], 'notes': entry.get('notes')}


# ── Ranking key chain ──

def score_key(step_id):
    return lambda t: -effective_fit_score(t, step_id)


def sub_sector_key(context):
    wanted = _norm(context.get('subSector')) if context else None
    if not wanted:
        return None
    return lambda t: 0 if wanted in [_norm(s) for s in (t.get('subSectors') or [])] else 1


def company_size_key(context):
    size = context.get('companySize') if context else None
    if not size:
        return None
    return lambda t: 0 if size in t.get('companySizes', []) else 1


def erp_key(erp_name):
    if not erp_name:
        return None
    worst = len(ERP_LEVEL_RANK)

    def _rank(t):
        compat = get_tool_erp_compatibility(t, erp_name)
        return ERP_LEVEL_RANK.get(compat['level'], worst) if compat else worst
    return _rank


def ranking_keys(step_id, context=None, erp_name=None):
    keys = [score_key(step_id), sub_sector_key(context), company_size_key(context), erp_key(erp_name)]
    return [k for k in keys if k is not None]


def rank_tools_for_step(tools, step_id, category, context=None, erp_name=None):
    """Category tools sorted by the key chain; sort stability keeps catalog order last."""
    keys = ranking_keys(step_id, context, erp_name)
    candidates = tools_by_category(tools, category)
    return sorted(candidates, key=lambda t: tuple(k(t) for k in keys))


def _norm(value):
    if value is None:
        return None
    v = str(value).strip().lower()
    return v or None


# ══════════════════════════════════════════════════════════════
#  COST
# ══════════════════════════════════════════════════════════════

PRICE_RE = re.compile(r'\$\s*([\d,]+(?:\.\d+)?)')
COST_HIGH_MULTIPLIER = 1.5  # high bound covers add-on modules and overage


def estimate_tool_cost(tool, team_size):
    """Annual {low, high} from the tool's starting price, or None for custom pricing."""
    price = (tool.get('pricing') or {}).get('startingPrice')
    if not price:
        return None
    m = PRICE_RE.search(price)
    if not m:
        return None
    amount = float(m.group(1).replace(',', ''))
    period = price[m.end():].lower()
    if '/user' in period:
        annual = amount * max(team_size, 1) * (1 if '/year' in period else 12)
    elif '/year' in period or '/yr' in period:
        annual = amount
    elif '/month' in period or '/mo' in period:
        annual = amount * 12
    else:
        annual = amount
    return {'low': annual, 'high': annual * COST_HIGH_MULTIPLIER}
