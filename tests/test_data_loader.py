"""
Tests for reading consultant config workbooks.
"""

import logging

import pytest

from engines.data_loader import (
    data_dir,
    load_catalog,
    load_parameters,
    load_tool_catalog,
    read_xlsx_sheet,
)
from tests.conftest import write_workbook

TOOL_HEADERS = ['ID', 'Name', 'Vendor', 'Category', 'Tagline', 'Description', 'Key Features',
                'Company Sizes', 'Industries', 'Sub-Sectors', 'Pricing Model', 'Starting Price',
                'Pricing Notes', 'Integrations', 'AI Maturity', 'Overall Fit Score', 'Website',
                'Founded', 'Headquarters']


@pytest.fixture
def tools_dir(tmp_path):
    write_workbook(tmp_path / 'config' / 'tools.xlsx', {
        'Tools': [
            TOOL_HEADERS,
            ['ledgerly', 'Ledgerly', 'Ledgerly Inc', 'AP', 'Invoices, sorted', '', 'OCR; Matching',
             'SMB, mid-market, galactic', 'Technology', 'SaaS', 'per-user', '$30/user/month', None,
             'QuickBooks, Xero', 'AI-Native', 72, 'https://ledgerly.example', '2021', 'Denver, CO'],
            [None, 'No Id', '', 'ap'] + [None] * 15,
            ['bad-cat', 'Bad Category', '', 'treasury'] + [None] * 15,
            [None] * 19,
        ],
        'Fit Scores': [
            ['Tool ID', 'Step ID', 'Score'],
            ['ledgerly', 'invoice-capture', 99],
            ['ledgerly', 'data-validation', 140],
            ['ghost', 'invoice-capture', 50],
        ],
        'ERP Compatibility': [
            ['Tool ID', 'ERP', 'Level', 'Notes'],
            ['ledgerly', 'netsuite', 'Native', 'SuiteApp'],
            ['ledgerly', 'SAP', 'telepathic', None],
        ],
    })
    return tmp_path


class TestReadSheet:

    def test_rows_keyed_by_header(self, tmp_path):
        path = tmp_path / 'x.xlsx'
        write_workbook(path, {'Data': [['A', 'B'], [1, 2], [None, None], [3, 4]]})
        assert read_xlsx_sheet(str(path)) == [{'A': 1, 'B': 2}, {'A': 3, 'B': 4}]

    def test_missing_sheet(self, tmp_path):
        path = tmp_path / 'x.xlsx'
        write_workbook(path, {'Data': [['A'], [1]]})
        assert read_xlsx_sheet(str(path), 'Other') == []

    def test_header_only(self, tmp_path):
        path = tmp_path / 'x.xlsx'
        write_workbook(path, {'Data': [['A', 'B']]})
        assert read_xlsx_sheet(str(path)) == []


class TestDataDir:

    def test_override_wins(self, monkeypatch):
        monkeypatch.setenv('LIGHTHOUSE_DATA_DIR', '/from/env')
        assert data_dir('/explicit') == '/explicit'

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv('LIGHTHOUSE_DATA_DIR', '/from/env')
        assert data_dir() == '/from/env'


class TestLoadParameters:

    def test_missing_file(self, tmp_path):
        assert load_parameters(str(tmp_path)) == {}

    def test_known_parameters(self, tmp_path):
        write_workbook(tmp_path / 'config' / 'parameters.xlsx', {'Parameters': [
            ['Parameter', 'Value'],
            ['Cost per Person - Mid-Market', '$95,000'],
            ['Range Factor', 0.2],
            ['Automation Potential - Manual', 0.65],
            ['Impact Scaling - Low', 0.5],
            ['Something Else', 3],
        ]})
        params = load_parameters(str(tmp_path))
        assert params == {'costPerPerson': {'mid-market': 95000.0}, 'rangeFactor': 0.2,
                          'automationPotential': {'manual': 0.65}, 'impactScaling': {'low': 0.5}}

    def test_invalid_values_skipped(self, tmp_path, caplog):
        write_workbook(tmp_path / 'config' / 'parameters.xlsx', {'Parameters': [
            ['Parameter', 'Value'],
            ['Range Factor', 'wide'],
            ['Cost per Person - SMB', -10],
        ]})
        with caplog.at_level(logging.WARNING):
            assert load_parameters(str(tmp_path)) == {}
        assert 'Range Factor' in caplog.text

    def test_fractions_above_one_skipped(self, tmp_path, caplog):
        write_workbook(tmp_path / 'config' / 'parameters.xlsx', {'Parameters': [
            ['Parameter', 'Value'],
            ['Range Factor', 1.5],
            ['Automation Potential - Manual', 2],
            ['Impact Scaling - High', 1],
        ]})
        with caplog.at_level(logging.WARNING):
            params = load_parameters(str(tmp_path))
        assert params == {'impactScaling': {'high': 1.0}}
        assert 'Range Factor' in caplog.text
        assert 'Automation Potential - Manual' in caplog.text

    def test_reads_from_env_dir(self, tmp_path, monkeypatch):
        write_workbook(tmp_path / 'config' / 'parameters.xlsx', {'Parameters': [
            ['Parameter', 'Value'], ['Range Factor', 0.3]]})
        monkeypatch.setenv('LIGHTHOUSE_DATA_DIR', str(tmp_path))
        assert load_parameters() == {'rangeFactor': 0.3}


class TestLoadToolCatalog:

    def test_missing_file(self, tmp_path):
        assert load_tool_catalog(str(tmp_path)) == []

    def test_valid_row_parsed(self, tools_dir):
        [tool] = load_tool_catalog(str(tools_dir))
        assert tool['id'] == 'ledgerly'
        assert tool['category'] == 'ap'
        assert tool['companySizes'] == ['smb', 'mid-market']
        assert tool['keyFeatures'] == ['OCR', 'Matching']
        assert tool['subSectors'] == ['SaaS']
        assert tool['aiMaturity'] == 'ai-native'
        assert tool['overallFitScore'] == 72
        assert tool['pricing']['startingPrice'] == '$30/user/month'
        assert tool['founded'] == '2021'

    def test_scores_and_erp_rows(self, tools_dir):
        [tool] = load_tool_catalog(str(tools_dir))
        assert tool['fitScores'] == {'invoice-capture': 99}
        assert tool['erpCompatibility'] == {'Oracle NetSuite': {'level': 'native', 'notes': 'SuiteApp'}}

    def test_invalid_rows_logged(self, tools_dir, caplog):
        with caplog.at_level(logging.WARNING):
            load_tool_catalog(str(tools_dir))
        assert 'Tools row' in caplog.text
        assert 'Fit Scores row' in caplog.text
        assert 'ERP Compatibility row' in caplog.text


class TestLoadCatalog:

    def test_builtin_only(self, tmp_path):
        catalog = load_catalog(str(tmp_path))
        assert catalog.get_tool_by_id('tipalti') is not None

    def test_extra_tool_ranked(self, tools_dir):
        catalog = load_catalog(str(tools_dir))
        ranked = catalog.get_tools_for_step_sorted('invoice-capture', 'ap')
        assert ranked[0]['id'] == 'ledgerly'

    def test_extra_tool_replaces_same_id(self, tmp_path, caplog):
        write_workbook(tmp_path / 'config' / 'tools.xlsx', {'Tools': [
            TOOL_HEADERS,
            ['ramp', 'Ramp (custom)', 'Ramp', 'ap'] + [None] * 15,
        ]})
        with caplog.at_level(logging.WARNING):
            catalog = load_catalog(str(tmp_path))
        assert catalog.get_tool_by_id('ramp')['name'] == 'Ramp (custom)'
        assert len([t for t in catalog.get_tools_by_category('ap') if t['id'] == 'ramp']) == 1
