"""
Tests for the automation scoring engine and peer medians.
"""

import pytest

from engines.scoring import (
    compute_automation_ceiling,
    compute_automation_score,
    compute_complexity_score,
    compute_cost_savings_range,
    compute_effort_addressable,
    compute_peer_medians,
    format_dollars,
    headcount_number,
    profile_from_context,
    revenue_in_millions,
    weighted_median,
)


def make_profile(revenue=500, ga_amount=60, ga_pct=12, employees=2000, years=1, dso=None, dpo=None):
    expenses = [{'category': 'G&A', 'amount': ga_amount, 'asPercentOfRevenue': ga_pct}] if ga_amount else []
    return {
        'yearlyData': [{'year': 2024 - i, 'revenue': revenue, 'expenses': expenses} for i in range(years)],
        'employeeCount': employees,
        'revenuePerEmployee': revenue * 1_000_000 / employees if employees else None,
        'derivedMetrics': {'dso': dso, 'dpo': dpo},
    }


@pytest.fixture
def sic_peers():
    return [{'ticker': 'aaa', 'gaAsPercent': 6, 'revenue': 400},
            {'ticker': 'BBB', 'gaAsPercent': 8, 'revenue': 600},
            {'ticker': 'CCC', 'gaAsPercent': 10, 'revenue': None}]


class TestWeightedMedian:

    def test_empty(self):
        assert weighted_median([]) is None

    def test_equal_weights(self):
        assert weighted_median([(10, 1), (6, 1), (8, 1)]) == 8

    def test_heavy_item_pulls_median(self):
        assert weighted_median([(1, 1), (2, 1), (9, 5)]) == 9


class TestPeerMedians:

    def test_no_peers(self):
        medians = compute_peer_medians()
        assert medians['peerCount'] == 0
        assert medians['source'] == 'none'
        assert medians['gaPercent'] is None
        assert medians['dso'] is None

    def test_sic_only(self, sic_peers):
        medians = compute_peer_medians(sic_peers)
        assert medians['gaPercent'] == 8
        assert medians['medianRevenue'] == 400
        assert medians['peerCount'] == 3
        assert medians['source'] == 'SIC(3)'

    def test_duplicate_ticker_keeps_highest_weight(self, sic_peers):
        selected = [{'ticker': 'AAA', 'gaAsPercent': 20}]
        medians = compute_peer_medians(sic_peers, selected_peers=selected)
        assert medians['peerCount'] == 3
        assert medians['gaPercent'] == 10
        assert medians['source'] == 'SIC(3) + User(1)'

    def test_derived_metrics_by_ticker(self, sic_peers):
        derived = {'aaa': {'dso': 40}, 'BBB': {'dso': 50, 'dpo': 30}}
        medians = compute_peer_medians(sic_peers, peer_derived=derived)
        assert medians['dso'] == 40
        assert medians['dpo'] == 30
        assert medians['revenuePerEmployee'] is None


class TestComplexity:

    def test_no_yearly_data(self):
        assert compute_complexity_score(None) == 30
        assert compute_complexity_score({'yearlyData': []}, 'SAP', 'enterprise') == 30

    def test_mid_sized_company(self):
        assert compute_complexity_score(make_profile(), 'NetSuite', 'mid-market') == 55

    def test_large_company_capped(self):
        profile = make_profile(revenue=60_000, ga_amount=13_200, ga_pct=22, employees=60_000, years=4)
        assert compute_complexity_score(profile, 'SAP', 'enterprise') == 100

    def test_unknown_inputs_use_middle_points(self):
        # revenue 5 + employees 8 + G&A unknown 7 + one year 3 + unknown ERP 7 + unknown size 7
        profile = make_profile(revenue=50, ga_amount=None, employees=300)
        assert compute_complexity_score(profile, 'Acme ERP', None) == 37

    def test_no_erp_scores_lower_than_unknown(self):
        profile = make_profile()
        assert compute_complexity_score(profile, None) == compute_complexity_score(profile, 'Acme ERP') - 2


class TestCeiling:

    def test_erp_ceiling(self):
        assert compute_automation_ceiling(50, 'quickbooks') == 0.85

    def test_unknown_and_missing_erp(self):
        assert compute_automation_ceiling(30, 'Acme ERP') == 0.45
        assert compute_automation_ceiling(30, None) == 0.50

    def test_complexity_reduces_ceiling(self):
        assert compute_automation_ceiling(65, 'NetSuite') == pytest.approx(0.7125)
        assert compute_automation_ceiling(100, 'SAP') == pytest.approx(0.63)

    def test_bounds(self):
        for erp in (None, 'Acme', 'SAP', 'Xero'):
            for complexity in (0, 60, 80, 100):
                assert 0.25 <= compute_automation_ceiling(complexity, erp) <= 0.85


class TestEffortAddressable:

    def test_default(self):
        assert compute_effort_addressable(None) == {'min': 30, 'max': 45}

    def test_gap_adjusts_erp_base(self):
        assert compute_effort_addressable(4, 'NetSuite', 55) == {'min': 29, 'max': 46}
        assert compute_effort_addressable(-5, 'SAP') == {'min': 15, 'max': 30}

    def test_complex_organisation_widens(self):
        assert compute_effort_addressable(10, 'QuickBooks', 80) == {'min': 45, 'max': 67}


class TestCostSavingsRange:

    def test_no_revenue(self):
        assert compute_cost_savings_range({}, None, {'min': 30, 'max': 45}) == {'min': 0, 'max': 0}

    def test_anchored_to_excess_ga(self):
        rng = compute_cost_savings_range(make_profile(), 4, {'min': 29, 'max': 46})
        assert rng['min'] == pytest.approx(2_900_000)
        assert rng['max'] == pytest.approx(6_440_000)

    def test_anchored_to_total_ga(self):
        rng = compute_cost_savings_range(make_profile(), None, {'min': 30, 'max': 45})
        assert rng['min'] == pytest.approx(3_000_000)
        assert rng['max'] == pytest.approx(9_000_000)

    def test_anchored_to_revenue(self):
        rng = compute_cost_savings_range(make_profile(ga_amount=None), None, {'min': 30, 'max': 45})
        assert rng['min'] == pytest.approx(2_500_000)
        assert rng['max'] == pytest.approx(10_000_000)


class TestAutomationScore:

    def test_full_profile(self, sic_peers):
        medians = compute_peer_medians(sic_peers, peer_derived={'aaa': {'dso': 40}})
        profile = make_profile(dso=52)
        score = compute_automation_score(profile, medians, 'NetSuite', 'mid-market')
        assert score['complexityScore'] == 55
        assert score['automationCeiling'] == 0.75
        assert score['gaGapVsPeers'] == 4
        assert score['effortAddressable'] == {'min': 29, 'max': 46}
        assert score['dsoGap'] == 12
        assert score['dpoGap'] is None
        assert score['constraints'] == {'highLeverageMax': 75, 'effortAddressableRange': '29-46%',
                                        'costSavingsRange': '$3M-$6M'}
        assert score['peerContext']['peerCount'] == 3

    def test_absent_data_falls_back(self):
        score = compute_automation_score(None)
        assert score['complexityScore'] == 30
        assert score['automationCeiling'] == 0.50
        assert score['effortAddressable'] == {'min': 30, 'max': 45}
        assert score['costSavingsRange'] == {'min': 0, 'max': 0}
        assert score['gaGapVsPeers'] is None
        assert score['peerContext']['source'] == 'none'

    def test_unknown_erp_ceiling(self):
        assert compute_automation_score({}, erp='Homegrown')['automationCeiling'] == 0.45


class TestProfileFromContext:

    def test_revenue_strings(self):
        assert revenue_in_millions('$80M') == 80
        assert revenue_in_millions('$1.2B') == pytest.approx(1200)
        assert revenue_in_millions('500K') == pytest.approx(0.5)
        assert revenue_in_millions('40 million') == 40
        assert revenue_in_millions(2_500_000) == 2.5
        assert revenue_in_millions('n/a') is None

    def test_headcount(self):
        assert headcount_number('1,200') == 1200
        assert headcount_number('1.5k') == 1500
        assert headcount_number('about 300 bodies') == 300
        assert headcount_number(None) is None

    def test_profile(self):
        profile = profile_from_context({'revenue': '$80M', 'headcount': 400})
        assert profile['yearlyData'][0]['revenue'] == 80
        assert profile['employeeCount'] == 400
        assert profile['revenuePerEmployee'] == 200_000

    def test_nothing_known(self):
        assert profile_from_context({'revenue': None, 'headcount': None}) is None

    def test_headcount_only(self):
        profile = profile_from_context({'headcount': '250'})
        assert profile['yearlyData'] == []
        assert profile['revenuePerEmployee'] is None


class TestFormatDollars:

    def test_units(self):
        assert format_dollars(2_500_000_000) == '$2.5B'
        assert format_dollars(6_440_000) == '$6M'
        assert format_dollars(12_400) == '$12K'
        assert format_dollars(0) == '$0'
