"""Shared fixtures for the Lighthouse engine and API tests."""

import openpyxl
import pytest

from engines.catalog import Catalog, build_catalog
from engines.workflows import default_workflows


def make_tool(tid, category='ap', fit=None, overall=None, sizes=('smb',), sub_sectors=None, erp=None,
              starting_price=None):
    return {
        'id': tid, 'name': tid.title(), 'vendor': f'{tid.title()} Inc', 'category': category,
        'tagline': '', 'description': '', 'keyFeatures': [],
        'companySizes': list(sizes), 'industries': ['Technology'],
        'subSectors': list(sub_sectors) if sub_sectors is not None else None,
        'pricing': {'model': 'custom', 'startingPrice': starting_price, 'notes': None},
        'integrations': [], 'aiMaturity': 'ai-enabled',
        'erpCompatibility': {k: {'level': v, 'notes': None} for k, v in (erp or {}).items()},
        'fitScores': dict(fit or {}), 'overallFitScore': overall,
        'website': None, 'founded': None, 'headquarters': None,
    }


def write_workbook(path, sheets):
    """sheets: {name: [header_row, *rows]}; the first sheet becomes the active one."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row in rows:
            ws.append(row)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def synthetic_catalog():
    """Factory: catalog over the built-in workflows and the given tools."""
    def _build(*tools):
        return Catalog(default_workflows(), list(tools))
    return _build


@pytest.fixture
def three_steps():
    return [
        {'id': 's1', 'title': 'One', 'stepNumber': 1, 'aiOpportunity': {'impact': 'high', 'description': ''}},
        {'id': 's2', 'title': 'Two', 'stepNumber': 2, 'aiOpportunity': {'impact': 'medium', 'description': ''}},
        {'id': 's3', 'title': 'Three', 'stepNumber': 3, 'aiOpportunity': {'impact': 'low', 'description': ''}},
    ]
