"""
Lighthouse — Intake Validation
Normalises consultant-entered company profiles and process answers before
they reach the estimators. Anything malformed raises InvalidInputError.
"""
import math
import re

from engines.savings import DEFAULT_TEAM_SIZE, MATURITY_LEVELS
from engines.tools import COMPANY_SIZES

TEAM_SIZE_KEYS = {'ap': 'apTeamSize', 'ar': 'arTeamSize', 'fpa': 'fpaTeamSize'}

OPTIONAL_CONTEXT_FIELDS = ('subSector', 'erp', 'description', 'revenue', 'headcount',
                           'headquarters', 'founded', 'website')
ENRICHMENT_FIELDS = ('description', 'revenue', 'headcount', 'headquarters', 'founded', 'subSector', 'website')

MONEY_STRIP = re.compile(r'[\s$,£€]')


class InvalidInputError(ValueError):
    """Rejected intake data; the HTTP layer answers 400."""


def _clean(value):
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def validate_company_context(raw):
    """CompanyContext with every optional field present (None when absent)."""
    if not isinstance(raw, dict):
        raise InvalidInputError('Company context must be an object')
    ctx = {}
    for field in ('companyName', 'industry'):
        value = _clean(raw.get(field))
        if not value or not isinstance(value, str):
            raise InvalidInputError(f"'{field}' is required")
        ctx[field] = value
    size = _clean(raw.get('companySize'))
    if size not in COMPANY_SIZES:
        raise InvalidInputError(f"'companySize' must be one of {', '.join(COMPANY_SIZES)}")
    ctx['companySize'] = size
    for field in OPTIONAL_CONTEXT_FIELDS:
        ctx[field] = _clean(raw.get(field))
    return ctx


def _number(value, label, signed=False):
    if isinstance(value, bool):
        raise InvalidInputError(f'{label} must be a number')
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        s = MONEY_STRIP.sub('', value)
        try:
            n = float(s)
        except ValueError:
            raise InvalidInputError(f'{label} must be a number, got {value!r}')
    else:
        raise InvalidInputError(f'{label} must be a number')
    if math.isnan(n) or math.isinf(n):
        raise InvalidInputError(f'{label} must be a finite number')
    if n < 0 and not signed:
        raise InvalidInputError(f'{label} cannot be negative')
    return n


def _answers(answers):
    if answers is None:
        return {}
    if not isinstance(answers, dict):
        raise InvalidInputError(f'Process answers must be an object, got {answers!r}')
    return answers


def parse_team_size(answers, process_id):
    """Team size for one process; missing gives the default, zero is allowed."""
    answers = _answers(answers)
    key = TEAM_SIZE_KEYS.get(process_id, 'teamSize')
    raw = answers.get(key)
    if raw is None or raw == '':
        raw = answers.get('teamSize')
    if raw is None or raw == '':
        return DEFAULT_TEAM_SIZE
    n = _number(raw, 'Team size')
    if n != int(n):
        raise InvalidInputError(f'Team size must be a whole number, got {raw!r}')
    return int(n)


def parse_money(value):
    """Accepts numbers and strings like '$90,000'."""
    if value is None or value == '':
        raise InvalidInputError('Amount is required')
    return _number(value, 'Amount')


def parse_maturity_ratings(answers):
    ratings = _answers(answers).get('maturityRatings') or {}
    if not isinstance(ratings, dict):
        raise InvalidInputError('maturityRatings must be an object')
    out = {}
    for step_id, level in ratings.items():
        if level is None or level == '':
            continue
        if level not in MATURITY_LEVELS:
            raise InvalidInputError(f"Step '{step_id}': maturity must be one of {', '.join(MATURITY_LEVELS)}")
        out[step_id] = level
    return out


def parse_process_answers(answers, process_id):
    """{'teamSize', 'maturityRatings'} ready for calculate_process_findings."""
    return {'teamSize': parse_team_size(answers, process_id),
            'maturityRatings': parse_maturity_ratings(answers)}


def parse_assumptions(raw):
    """Consultant overrides with numeric fields checked. None passes through."""
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise InvalidInputError('assumptions must be an object')
    out = {}
    if raw.get('costPerPerson') not in (None, ''):
        out['costPerPerson'] = parse_money(raw['costPerPerson'])
    if raw.get('rangeFactor') not in (None, ''):
        rf = _number(raw['rangeFactor'], 'rangeFactor')
        if rf > 1:
            raise InvalidInputError('rangeFactor must be between 0 and 1')
        out['rangeFactor'] = rf
    for group in ('automationPotential', 'impactScaling'):
        if raw.get(group):
            values = _object(raw[group], group)
            out[group] = {k: _fraction(v, f'{group}.{k}') for k, v in values.items()}
    if raw.get('stepOverrides'):
        out['stepOverrides'] = {}
        for sid, ov in _object(raw['stepOverrides'], 'stepOverrides').items():
            ov = _object(ov or {}, f'stepOverrides.{sid}')
            out['stepOverrides'][sid] = {k: _fraction(v, f'{sid}.{k}') for k, v in ov.items()
                                          if k in ('capacityWeight', 'automationPotential') and v is not None}
    return out


def _object(value, label):
    if not isinstance(value, dict):
        raise InvalidInputError(f'{label} must be an object')
    return value


def _fraction(value, label):
    n = _number(value, label)
    if n > 1:
        raise InvalidInputError(f'{label} must be between 0 and 1')
    return n


def _optional(value, label, signed=False):
    return None if value is None or value == '' else _number(value, label, signed)


def _list(value, label):
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidInputError(f'{label} must be a list')
    return value


def parse_financial_profile(raw):
    """Financial profile for automation scoring (amounts in millions, latest year first). None passes through."""
    if raw is None:
        return None
    raw = _object(raw, 'financialProfile')
    years = []
    for i, year in enumerate(_list(raw.get('yearlyData'), 'yearlyData')):
        year = _object(year, f'yearlyData[{i}]')
        expenses = []
        for j, exp in enumerate(_list(year.get('expenses'), f'yearlyData[{i}].expenses')):
            exp = _object(exp, f'yearlyData[{i}].expenses[{j}]')
            expenses.append({
                'category': _clean(exp.get('category')),
                'amount': _optional(exp.get('amount'), 'expense amount'),
                'asPercentOfRevenue': _optional(exp.get('asPercentOfRevenue'), 'asPercentOfRevenue'),
            })
        years.append({'year': year.get('year'), 'revenue': _optional(year.get('revenue'), 'revenue'),
                      'expenses': expenses})
    derived = _object(raw.get('derivedMetrics') or {}, 'derivedMetrics')
    employees = _optional(raw.get('employeeCount'), 'employeeCount')
    return {
        'yearlyData': years,
        'employeeCount': int(employees) if employees is not None else None,
        'revenuePerEmployee': _optional(raw.get('revenuePerEmployee'), 'revenuePerEmployee'),
        'derivedMetrics': {k: _optional(derived.get(k), k) for k in ('dso', 'dpo')},
    }


PEER_FIELDS = ('revenue', 'gaAsPercent', 'rdAsPercent', 'smAsPercent', 'operatingMargin', 'grossMargin')
PEER_TIERS = ('sic', 'competitors', 'selected')


def parse_peer_sets(raw):
    """{'sic', 'competitors', 'selected': [peer]} plus optional 'derived' metrics keyed by ticker."""
    if raw is None:
        return None
    raw = _object(raw, 'peers')
    out = {}
    for tier in PEER_TIERS:
        peers = []
        for i, peer in enumerate(_list(raw.get(tier), f'peers.{tier}')):
            peer = _object(peer, f'peers.{tier}[{i}]')
            ticker = _clean(peer.get('ticker'))
            if not isinstance(ticker, str):
                raise InvalidInputError(f'peers.{tier}[{i}]: ticker is required')
            peers.append({'ticker': ticker, **{f: _optional(peer.get(f), f, signed=True) for f in PEER_FIELDS}})
        out[tier] = peers
    out['derived'] = {}
    for ticker, metrics in _object(raw.get('derived') or {}, 'peers.derived').items():
        metrics = _object(metrics, f'peers.derived.{ticker}')
        out['derived'][ticker] = {k: _optional(metrics.get(k), k)
                                  for k in ('dso', 'dpo', 'revenuePerEmployee')}
    return out


def merge_enrichment(context, enrichment):
    """Fill empty optional profile fields from an enrichment result; entered values win."""
    merged = dict(_object(context, 'companyContext'))
    if not enrichment:
        return merged
    _object(enrichment, 'enrichment')
    for field in ENRICHMENT_FIELDS:
        if merged.get(field) is None:
            merged[field] = _clean(enrichment.get(field))
    return merged
