"""
Lighthouse — Automation Scoring
Deterministic complexity score, automation ceiling and addressable-effort
ranges from a company's financial profile, its ERP and weighted peer medians.

Financial profile (amounts in millions, latest year first):
  {'yearlyData': [{'year', 'revenue', 'expenses': [{'category', 'amount', 'asPercentOfRevenue'}]}],
   'employeeCount', 'revenuePerEmployee', 'derivedMetrics': {'dso', 'dpo'}}
Every field may be missing; scoring falls back to moderate defaults.
"""
import re

from engines.erp import get_erp_signal
from engines.tools import round_half_up

# Peer tiers: SIC peers, 10-K competitors, consultant-selected peers
PEER_TIER_WEIGHTS = {'sic': 1.0, 'competitor': 1.5, 'selected': 2.0}

PEER_METRICS = {
    'gaPercent': 'gaAsPercent', 'rdPercent': 'rdAsPercent', 'smPercent': 'smAsPercent',
    'operatingMargin': 'operatingMargin', 'grossMargin': 'grossMargin', 'medianRevenue': 'revenue',
}
PEER_DERIVED_METRICS = ('dso', 'dpo', 'revenuePerEmployee')

# (threshold, points), first match wins
REVENUE_POINTS = [(50_000, 25), (10_000, 20), (1_000, 15), (100, 10), (0, 5)]      # revenue in $M
EMPLOYEE_POINTS = [(50_000, 20), (10_000, 16), (1_000, 12), (100, 8), (0, 4)]
GA_POINTS = [(20, 15), (15, 12), (10, 9), (5, 6), (0, 3)]                           # G&A % of revenue
GA_UNKNOWN_POINTS = 7
POINTS_PER_YEAR, MAX_YEAR_POINTS = 3, 10
ERP_MATURITY_POINTS = {'mature': 15, 'established': 11, 'growing': 7, 'early-stage': 3}
ERP_UNKNOWN_POINTS, ERP_ABSENT_POINTS = 7, 5
SIZE_POINTS = {'enterprise': 15, 'mid-market': 10, 'smb': 6, 'startup': 3}
SIZE_UNKNOWN_POINTS = 7
FALLBACK_COMPLEXITY = 30

CEILING_UNKNOWN_ERP, CEILING_NO_ERP = 0.45, 0.50
CEILING_COMPLEXITY_FACTORS = [(80, 0.90), (60, 0.95)]
CEILING_BOUNDS = (0.25, 0.85)

EFFORT_BASE = {'early-stage': (40, 55), 'growing': (35, 50), 'established': (25, 40), 'mature': (20, 35)}
EFFORT_DEFAULT = (30, 45)
EFFORT_MIN_BOUNDS, EFFORT_MAX_BOUNDS = (10, 70), (15, 75)


def _points(value, table):
    return next(pts for threshold, pts in table if value >= threshold)


def _latest(profile):
    years = (profile or {}).get('yearlyData') or []
    return years[0] if years else None


def _ga_expense(year):
    return next((e for e in (year or {}).get('expenses') or [] if e.get('category') == 'G&A'), None)


def _bound(value, lo, hi):
    return min(hi, max(lo, value))


# ══════════════════════════════════════════════════════════════
#  PEER MEDIANS
# ══════════════════════════════════════════════════════════════

def weighted_median(items):
    """items: [(value, weight)]. Walks cumulative weight to the midpoint; None when empty."""
    if not items:
        return None
    ordered = sorted(items, key=lambda x: x[0])
    midpoint = sum(w for _, w in ordered) / 2
    cumulative = 0
    for value, weight in ordered:
        cumulative += weight
        if cumulative >= midpoint:
            return value
    return ordered[-1][0]


def compute_peer_medians(sic_peers=None, competitors=None, selected_peers=None, peer_derived=None):
    """
    Weighted medians over three peer tiers. A ticker in several tiers keeps
    its highest weight. peer_derived: {ticker: {'dso', 'dpo', 'revenuePerEmployee'}}.
    """
    tiers = [('sic', sic_peers or []), ('competitor', competitors or []), ('selected', selected_peers or [])]
    seen = {}
    for tier, peers in tiers:
        weight = PEER_TIER_WEIGHTS[tier]
        for peer in peers:
            key = str(peer.get('ticker') or '').upper()
            if not key:
                continue
            if key not in seen or seen[key][1] < weight:
                seen[key] = (peer, weight)

    derived = {str(k).upper(): v for k, v in (peer_derived or {}).items()}
    medians = {}
    for out_key, peer_key in PEER_METRICS.items():
        medians[out_key] = weighted_median([(p[peer_key], w) for p, w in seen.values()
                                            if p.get(peer_key) is not None])
    for metric in PEER_DERIVED_METRICS:
        medians[metric] = weighted_median([(derived[k][metric], w) for k, (_, w) in seen.items()
                                           if derived.get(k, {}).get(metric) is not None])

    medians['peerCount'] = len(seen)
    labels = [f'{label}({len(peers)})' for label, (_, peers) in zip(('SIC', '10-K', 'User'), tiers) if peers]
    medians['source'] = ' + '.join(labels) if seen else 'none'
    return medians


def empty_peer_medians():
    return compute_peer_medians()


# ══════════════════════════════════════════════════════════════
#  SCORES
# ══════════════════════════════════════════════════════════════

def compute_complexity_score(profile, erp=None, company_size=None):
    """0-100; higher means more organisational complexity. 30 when there is no yearly data."""
    latest = _latest(profile)
    if latest is None:
        return FALLBACK_COMPLEXITY
    score = _points(latest.get('revenue') or 0, REVENUE_POINTS)
    score += _points(profile.get('employeeCount') or 0, EMPLOYEE_POINTS)

    ga = _ga_expense(latest)
    ga_pct = ga.get('asPercentOfRevenue') if ga else None
    score += _points(ga_pct, GA_POINTS) if ga_pct is not None else GA_UNKNOWN_POINTS

    score += min(len(profile.get('yearlyData') or []) * POINTS_PER_YEAR, MAX_YEAR_POINTS)

    if erp:
        signal = get_erp_signal(erp)
        score += ERP_MATURITY_POINTS.get(signal['maturitySignal'], ERP_UNKNOWN_POINTS) if signal \
            else ERP_UNKNOWN_POINTS
    else:
        score += ERP_ABSENT_POINTS

    score += SIZE_POINTS.get(company_size, SIZE_UNKNOWN_POINTS)
    return _bound(score, 0, 100)


def compute_automation_ceiling(complexity_score, erp=None):
    """ERP ceiling reduced for complex organisations, bounded to [0.25, 0.85]."""
    if erp:
        signal = get_erp_signal(erp)
        ceiling = signal['automationCeiling'] if signal else CEILING_UNKNOWN_ERP
    else:
        ceiling = CEILING_NO_ERP
    for threshold, factor in CEILING_COMPLEXITY_FACTORS:
        if complexity_score >= threshold:
            ceiling *= factor
            break
    return _bound(ceiling, *CEILING_BOUNDS)


def compute_effort_addressable(ga_gap, erp=None, complexity_score=None):
    """Percent of finance effort addressable, {min, max}."""
    signal = get_erp_signal(erp) if erp else None
    lo, hi = EFFORT_BASE.get(signal['maturitySignal'], EFFORT_DEFAULT) if signal else EFFORT_DEFAULT

    if ga_gap is not None:
        if ga_gap > 5:
            lo, hi = lo + 8, hi + 10
        elif ga_gap > 2:
            lo, hi = lo + 4, hi + 6
        elif ga_gap > 0:
            lo, hi = lo + 2, hi + 3
        elif ga_gap < -3:
            lo, hi = lo - 5, hi - 5

    if complexity_score is not None and complexity_score >= 75:
        lo, hi = lo - 3, hi + 2

    return {'min': _bound(lo, *EFFORT_MIN_BOUNDS), 'max': _bound(hi, *EFFORT_MAX_BOUNDS)}


def compute_cost_savings_range(profile, ga_gap, effort):
    """Dollar savings anchored to excess G&A, total G&A, or revenue, in that order of preference."""
    latest = _latest(profile)
    if not latest or not latest.get('revenue'):
        return {'min': 0, 'max': 0}
    revenue = latest['revenue'] * 1_000_000
    ga = _ga_expense(latest)
    ga_amount = ga['amount'] * 1_000_000 if ga and ga.get('amount') else None

    if ga_amount and ga_gap is not None and ga_gap > 0:
        excess = ga_gap / 100 * revenue
        return {'min': excess * effort['min'] / 100 * 0.5, 'max': excess * effort['max'] / 100 * 0.7}
    if ga_amount:
        return {'min': ga_amount * 0.05, 'max': ga_amount * 0.15}
    return {'min': revenue * 0.005, 'max': revenue * 0.02}


def format_dollars(amount):
    a = abs(amount)
    if a >= 1_000_000_000:
        return f'${amount / 1_000_000_000:.1f}B'
    if a >= 1_000_000:
        return f'${amount / 1_000_000:.0f}M'
    if a >= 1_000:
        return f'${amount / 1_000:.0f}K'
    return f'${amount:.0f}'


def _gap(value, median):
    return value - median if value is not None and median is not None else None


def compute_automation_score(financial_profile, peer_medians=None, erp=None, company_size=None):
    """Complexity, ceiling, addressable effort and savings range for one company."""
    profile = financial_profile or {}
    peers = peer_medians or empty_peer_medians()
    latest = _latest(profile)
    derived = profile.get('derivedMetrics') or {}

    complexity = compute_complexity_score(profile, erp, company_size)
    ceiling = compute_automation_ceiling(complexity, erp)
    ga = _ga_expense(latest)
    ga_gap = _gap(ga.get('asPercentOfRevenue') if ga else None, peers.get('gaPercent'))
    effort = compute_effort_addressable(ga_gap, erp, complexity)
    savings = compute_cost_savings_range(profile, ga_gap, effort)

    return {
        'complexityScore': complexity,
        'automationCeiling': ceiling,
        'effortAddressable': effort,
        'costSavingsRange': savings,
        'gaGapVsPeers': ga_gap,
        'dsoGap': _gap(derived.get('dso'), peers.get('dso')),
        'dpoGap': _gap(derived.get('dpo'), peers.get('dpo')),
        'revenuePerEmployee': profile.get('revenuePerEmployee'),
        'peerMedianRevenuePerEmployee': peers.get('revenuePerEmployee'),
        'constraints': {
            'highLeverageMax': round_half_up(ceiling * 100),
            'effortAddressableRange': f"{effort['min']}-{effort['max']}%",
            'costSavingsRange': f"{format_dollars(savings['min'])}-{format_dollars(savings['max'])}",
        },
        'peerContext': {
            'peerCount': peers.get('peerCount', 0), 'medianRevenue': peers.get('medianRevenue'),
            'medianGA': peers.get('gaPercent'), 'medianDSO': peers.get('dso'),
            'medianDPO': peers.get('dpo'), 'source': peers.get('source', 'none'),
        },
    }


# ══════════════════════════════════════════════════════════════
#  PROFILE FROM COMPANY CONTEXT
# ══════════════════════════════════════════════════════════════

AMOUNT_RE = re.compile(r'([\d,]*\d(?:\.\d+)?)\s*(?:([kmb])(?:n|illion)?(?![a-z]))?', re.I)
AMOUNT_UNITS_IN_MILLIONS = {'k': 0.001, 'm': 1.0, 'b': 1000.0}


def _amount(text):
    """(number, unit suffix or None) from text like '$40M', '1.2B' or '1,200 employees'."""
    m = AMOUNT_RE.search(str(text))
    if not m:
        return None, None
    return float(m.group(1).replace(',', '')), (m.group(2) or '').lower() or None


def revenue_in_millions(value):
    """'$40M' -> 40, '$1.2B' -> 1200; bare numbers are dollars. None when unreadable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value / 1_000_000
    n, unit = _amount(value)
    if n is None:
        return None
    return n * AMOUNT_UNITS_IN_MILLIONS[unit] if unit else n / 1_000_000


def headcount_number(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    n, unit = _amount(value)
    if n is None:
        return None
    return int(n * 1000) if unit == 'k' else int(n)


def profile_from_context(context):
    """Minimal financial profile from enriched revenue and headcount; None when neither is known."""
    revenue = revenue_in_millions((context or {}).get('revenue'))
    employees = headcount_number((context or {}).get('headcount'))
    if revenue is None and employees is None:
        return None
    return {
        'yearlyData': [{'year': None, 'revenue': revenue, 'expenses': []}] if revenue is not None else [],
        'employeeCount': employees,
        'revenuePerEmployee': revenue * 1_000_000 / employees if revenue and employees else None,
        'derivedMetrics': {},
    }
