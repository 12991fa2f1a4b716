"""
Lighthouse — Config & Catalog Loader
Reads consultant config workbooks from data/config/ with openpyxl:
  parameters.xlsx  Parameter/Value rows overriding savings assumptions
  tools.xlsx       Tools, Fit Scores and ERP Compatibility sheets extending the tool library
Missing files fall back to built-in defaults.
"""
import os
import logging

import openpyxl

from engines.catalog import build_catalog
from engines.erp import ERP_LEVEL_RANK, canonical_erp_name
from engines.tools import AI_MATURITY, CATEGORIES, COMPANY_SIZES

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data')


def data_dir(override=None):
    return override or os.environ.get('LIGHTHOUSE_DATA_DIR') or DATA_DIR


def read_xlsx_sheet(filepath, sheet_name=None):
    """Rows of a sheet as dicts keyed by the header row. Missing sheet gives []."""
    wb = openpyxl.load_workbook(filepath, read_only=True, data_only=True)
    try:
        if sheet_name and sheet_name not in wb.sheetnames:
            return []
        ws = wb[sheet_name] if sheet_name else wb.active
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()
    if len(rows) < 2:
        return []
    headers = [str(h).strip() if h else f'col_{i}' for i, h in enumerate(rows[0])]
    return [dict(zip(headers, row)) for row in rows[1:] if any(v not in (None, '') for v in row)]


# ══════════════════════════════════════════════════════════════
#  PARAMETERS
# ══════════════════════════════════════════════════════════════

PARAM_MAP = {
    'Cost per Person - Startup': ('costPerPerson', 'startup'),
    'Cost per Person - SMB': ('costPerPerson', 'smb'),
    'Cost per Person - Mid-Market': ('costPerPerson', 'mid-market'),
    'Cost per Person - Enterprise': ('costPerPerson', 'enterprise'),
    'Range Factor': ('rangeFactor', None),
    'Automation Potential - Manual': ('automationPotential', 'manual'),
    'Automation Potential - Semi-Automated': ('automationPotential', 'semiAutomated'),
    'Automation Potential - Automated': ('automationPotential', 'automated'),
    'Impact Scaling - High': ('impactScaling', 'high'),
    'Impact Scaling - Medium': ('impactScaling', 'medium'),
    'Impact Scaling - Low': ('impactScaling', 'low'),
}

FRACTION_GROUPS = ('rangeFactor', 'automationPotential', 'impactScaling')


def load_parameters(base_dir=None):
    """
    Assumption overrides from config/parameters.xlsx.
    Returns {'costPerPerson': {size: v}, 'rangeFactor': v, 'automationPotential': {...},
    'impactScaling': {...}} with only the keys the file sets.
    """
    path = os.path.join(data_dir(base_dir), 'config', 'parameters.xlsx')
    if not os.path.exists(path):
        return {}
    params = {}
    for row in read_xlsx_sheet(path):
        key = str(row.get('Parameter') or '').strip()
        val = row.get('Value')
        if key not in PARAM_MAP or val in (None, ''):
            continue
        try:
            val = float(str(val).replace(',', '').replace('$', '')) if isinstance(val, str) else float(val)
        except ValueError:
            logging.warning(f"parameters.xlsx: '{key}' has non-numeric value {val!r}; skipped")
            continue
        if val < 0:
            logging.warning(f"parameters.xlsx: '{key}' is negative; skipped")
            continue
        group, sub = PARAM_MAP[key]
        if group in FRACTION_GROUPS and val > 1:
            logging.warning(f"parameters.xlsx: '{key}' must be between 0 and 1, got {val}; skipped")
            continue
        if sub is None:
            params[group] = val
        else:
            params.setdefault(group, {})[sub] = val
    if params:
        logging.info(f"Loaded {len(params)} assumption group(s) from {path}")
    return params


# ══════════════════════════════════════════════════════════════
#  TOOL CATALOG
# ══════════════════════════════════════════════════════════════

def _split(value):
    if value in (None, ''):
        return []
    return [v.strip() for v in str(value).replace(';', ',').split(',') if v.strip()]


def _opt(value):
    if value in (None, ''):
        return None
    return str(value).strip()


def _score(value):
    try:
        s = float(value)
    except (TypeError, ValueError):
        return None
    if s < 0 or s > 100:
        return None
    return int(s) if s == int(s) else s


def _tool_from_row(r):
    tid = _opt(r.get('ID'))
    name = _opt(r.get('Name'))
    category = (_opt(r.get('Category')) or '').lower()
    if not tid or not name or category not in CATEGORIES:
        return None
    ai = (_opt(r.get('AI Maturity')) or 'traditional').lower()
    sizes = [s.lower() for s in _split(r.get('Company Sizes')) if s.lower() in COMPANY_SIZES]
    sub_sectors = _split(r.get('Sub-Sectors'))
    overall = r.get('Overall Fit Score')
    return {
        'id': tid, 'name': name, 'vendor': _opt(r.get('Vendor')) or name, 'category': category,
        'tagline': _opt(r.get('Tagline')) or '', 'description': _opt(r.get('Description')) or '',
        'keyFeatures': _split(r.get('Key Features')),
        'companySizes': sizes, 'industries': _split(r.get('Industries')),
        'subSectors': sub_sectors or None,
        'pricing': {'model': _opt(r.get('Pricing Model')) or 'custom',
                    'startingPrice': _opt(r.get('Starting Price')),
                    'notes': _opt(r.get('Pricing Notes'))},
        'integrations': _split(r.get('Integrations')),
        'aiMaturity': ai if ai in AI_MATURITY else 'traditional',
        'erpCompatibility': {},
        'fitScores': {},
        'overallFitScore': _score(overall) if overall not in (None, '') else None,
        'website': _opt(r.get('Website')), 'founded': _opt(r.get('Founded')),
        'headquarters': _opt(r.get('Headquarters')),
    }


def load_tool_catalog(base_dir=None):
    """Extra tools defined in config/tools.xlsx. Invalid rows are skipped with a warning."""
    path = os.path.join(data_dir(base_dir), 'config', 'tools.xlsx')
    if not os.path.exists(path):
        return []
    tools = {}
    for i, r in enumerate(read_xlsx_sheet(path, 'Tools'), start=2):
        tool = _tool_from_row(r)
        if tool is None:
            logging.warning(f'tools.xlsx Tools row {i}: missing ID/Name or unknown category; skipped')
            continue
        tools[tool['id']] = tool

    for i, r in enumerate(read_xlsx_sheet(path, 'Fit Scores'), start=2):
        tid, sid, score = _opt(r.get('Tool ID')), _opt(r.get('Step ID')), _score(r.get('Score'))
        if tid not in tools or not sid or score is None:
            logging.warning(f'tools.xlsx Fit Scores row {i}: unknown tool or invalid score; skipped')
            continue
        tools[tid]['fitScores'][sid] = score

    for i, r in enumerate(read_xlsx_sheet(path, 'ERP Compatibility'), start=2):
        tid, erp = _opt(r.get('Tool ID')), _opt(r.get('ERP'))
        level = (_opt(r.get('Level')) or '').lower()
        if tid not in tools or not erp or level not in ERP_LEVEL_RANK:
            logging.warning(f'tools.xlsx ERP Compatibility row {i}: unknown tool or level; skipped')
            continue
        tools[tid]['erpCompatibility'][canonical_erp_name(erp)] = {'level': level, 'notes': _opt(r.get('Notes'))}

    logging.info(f'Loaded {len(tools)} tool(s) from {path}')
    return list(tools.values())


def load_catalog(base_dir=None):
    """Built-in catalog extended with tools from config/tools.xlsx."""
    return build_catalog(extra_tools=load_tool_catalog(base_dir))
