"""
Lighthouse — Savings Estimator
Converts step maturity ratings, team size and cost assumptions into annual
savings ranges per workflow step, per process and across the engagement.

  mid  = team size × capacity weight × automation potential × cost per person
  low  = mid × (1 - range factor)
  high = mid × (1 + range factor)

Values are never rounded here; rounding belongs to presentation.
"""
import copy

from engines.capacity import calculate_capacity_weights
from engines.tools import effective_fit_score, estimate_tool_cost

MATURITY_LEVELS = ('manual', 'semi-automated', 'automated')
MATURITY_KEY = {'manual': 'manual', 'semi-automated': 'semiAutomated', 'automated': 'automated'}

BASE_POTENTIAL = {'manual': 0.60, 'semiAutomated': 0.35, 'automated': 0.10}
IMPACT_SCALING = {'high': 1.0, 'medium': 0.85, 'low': 0.70}
DEFAULT_RANGE_FACTOR = 0.25
DEFAULT_TEAM_SIZE = 5

COST_PER_PERSON = {'startup': 65_000, 'smb': 75_000, 'mid-market': 90_000, 'enterprise': 110_000}

TOP_OPPORTUNITIES = 5


def _defaults(cost):
    return {
        'costPerPerson': cost,
        'automationPotential': dict(BASE_POTENTIAL),
        'impactScaling': dict(IMPACT_SCALING),
        'rangeFactor': DEFAULT_RANGE_FACTOR,
        'stepOverrides': {},
    }


DEFAULT_ASSUMPTIONS = {size: _defaults(cost) for size, cost in COST_PER_PERSON.items()}


def resolve_assumptions(company_size, custom=None, config=None):
    """
    Per-size defaults (smb when the size is unknown), then config workbook
    values, then consultant overrides.
    """
    size = company_size if company_size in DEFAULT_ASSUMPTIONS else 'smb'
    base = copy.deepcopy(DEFAULT_ASSUMPTIONS[size])
    if config:
        layer = dict(config)
        per_size = layer.pop('costPerPerson', None) or {}
        if per_size.get(size) is not None:
            layer['costPerPerson'] = per_size[size]
        _merge(base, layer)
    if custom:
        _merge(base, custom)
    return base


def _merge(base, layer):
    for key, value in layer.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key].update(copy.deepcopy(value))
        else:
            base[key] = value


# ══════════════════════════════════════════════════════════════
#  STEP LEVEL
# ══════════════════════════════════════════════════════════════

def automation_potential(maturity, impact, assumptions=None):
    """Share of a step's capacity that automation can release, in [0, 1]."""
    if maturity not in MATURITY_KEY:
        raise ValueError(f"Unknown maturity '{maturity}'")
    a = assumptions or DEFAULT_ASSUMPTIONS['smb']
    base = a['automationPotential'][MATURITY_KEY[maturity]]
    scale = a.get('impactScaling', IMPACT_SCALING).get(impact, 1.0)
    return min(max(base * scale, 0.0), 1.0)


def savings_range(mid, range_factor=DEFAULT_RANGE_FACTOR):
    mid = max(mid, 0.0)
    return {'low': max(mid * (1 - range_factor), 0.0), 'mid': mid, 'high': mid * (1 + range_factor)}


def estimate_step_savings(step, maturity, team_size, cost_per_person, capacity_weight,
                          top_tool_fit_score=None, assumptions=None, potential=None):
    """
    Annual {low, mid, high} savings for one step.
    top_tool_fit_score is display context only and does not scale the result.
    """
    if team_size == 0 or cost_per_person == 0:
        return {'low': 0, 'mid': 0, 'high': 0}
    a = assumptions or DEFAULT_ASSUMPTIONS['smb']
    if potential is None:
        potential = automation_potential(maturity, step['aiOpportunity']['impact'], a)
    mid = team_size * capacity_weight * potential * cost_per_person
    return savings_range(mid, a.get('rangeFactor', DEFAULT_RANGE_FACTOR))


# ══════════════════════════════════════════════════════════════
#  PROCESS LEVEL
# ══════════════════════════════════════════════════════════════

def _top_tool(catalog, step, category, context, erp):
    ranked = catalog.get_tools_for_step_sorted(step['id'], category, context=context, erp=erp)
    if not ranked:
        return None
    t = ranked[0]
    return {
        'id': t['id'], 'name': t['name'], 'vendor': t['vendor'], 'fitScore': effective_fit_score(t, step['id']),
        'erpCompatibility': catalog.get_tool_erp_compatibility(t, erp) if erp else None,
    }


def _sum_ranges(ranges):
    total = {'low': 0, 'mid': 0, 'high': 0}
    for r in ranges:
        for k in total:
            total[k] += r[k]
    return total


def calculate_process_findings(catalog, process_id, answers, company_size,
                               assumptions=None, erp=None, context=None):
    """
    ProcessFindings for one assessed process.
    answers: {'teamSize': int, 'maturityRatings': {stepId: maturity}}; already validated.
    Returns None when the process is not in the catalog.
    """
    workflow = catalog.get_workflow(process_id)
    if workflow is None:
        return None
    a = assumptions if assumptions is not None else resolve_assumptions(company_size)
    steps = workflow['steps']
    team_size = answers.get('teamSize', DEFAULT_TEAM_SIZE)
    cost = a['costPerPerson']
    team_cost = team_size * cost
    ratings = answers.get('maturityRatings') or {}
    weights = calculate_capacity_weights(steps)
    overrides = a.get('stepOverrides') or {}

    estimates = []
    tool_ids = []
    for step in steps:
        maturity = ratings.get(step['id'])
        if not maturity:
            continue
        ov = overrides.get(step['id']) or {}
        weight = ov.get('capacityWeight')
        if weight is None:
            weight = weights.get(step['id'], 0)
        potential = ov.get('automationPotential')
        if potential is None:
            potential = automation_potential(maturity, step['aiOpportunity']['impact'], a)

        top = _top_tool(catalog, step, workflow['id'], context, erp)
        if top and top['id'] not in tool_ids:
            tool_ids.append(top['id'])
        savings = estimate_step_savings(step, maturity, team_size, cost, weight,
                                        top_tool_fit_score=top['fitScore'] if top else None,
                                        assumptions=a, potential=potential)
        estimates.append({
            'stepId': step['id'], 'stepTitle': step['title'], 'stepNumber': step['stepNumber'],
            'maturity': maturity, 'capacityWeight': weight, 'automationPotential': potential,
            'savings': savings,
            'percentImpact': savings['mid'] / team_cost * 100 if team_cost > 0 else 0,
            'topTool': top,
        })

    estimates.sort(key=lambda e: -e['savings']['mid'])

    tool_cost = None
    for tool in catalog.get_tools_by_ids(tool_ids):
        c = estimate_tool_cost(tool, team_size)
        if c is None:
            continue
        tool_cost = tool_cost or {'low': 0, 'high': 0}
        tool_cost['low'] += c['low']
        tool_cost['high'] += c['high']

    assessed = len(estimates)
    return {
        'processId': workflow['id'], 'processName': workflow['name'], 'category': workflow['id'],
        'teamSize': team_size, 'costPerPerson': cost,
        'totalSavings': _sum_ranges(e['savings'] for e in estimates),
        'estimatedToolCost': tool_cost,
        'stepEstimates': estimates,
        'assessedStepCount': assessed, 'totalStepCount': len(steps),
        'isComplete': len(steps) > 0 and assessed >= len(steps),
    }


# ══════════════════════════════════════════════════════════════
#  ENGAGEMENT LEVEL
# ══════════════════════════════════════════════════════════════

def build_executive_summary(findings_list):
    """Totals and top ranked step opportunities across all processes."""
    opportunities = []
    for f in findings_list:
        for est in f['stepEstimates']:
            opportunities.append({
                'rank': 0, 'stepId': est['stepId'], 'stepTitle': est['stepTitle'],
                'processId': f['processId'], 'processName': f['processName'],
                'savings': est['savings'], 'maturity': est['maturity'], 'topTool': est['topTool'],
            })
    opportunities.sort(key=lambda o: -o['savings']['mid'])
    top = opportunities[:TOP_OPPORTUNITIES]
    for i, opp in enumerate(top):
        opp['rank'] = i + 1

    priced = [f['estimatedToolCost'] for f in findings_list if f['estimatedToolCost'] is not None]
    tool_cost = None
    if priced:
        tool_cost = {'low': sum(c['low'] for c in priced), 'high': sum(c['high'] for c in priced)}

    return {
        'totalSavings': _sum_ranges(f['totalSavings'] for f in findings_list),
        'totalToolCost': tool_cost,
        'topOpportunities': top,
        'assessedProcessCount': sum(1 for f in findings_list if f['assessedStepCount'] > 0),
        'totalProcessCount': len(findings_list),
        'hasAnyComplete': any(f['isComplete'] for f in findings_list),
    }
