"""
Tests for intake validation of company profiles and process answers.
"""

import pytest

from engines.intake import (
    InvalidInputError,
    merge_enrichment,
    parse_assumptions,
    parse_financial_profile,
    parse_maturity_ratings,
    parse_money,
    parse_peer_sets,
    parse_process_answers,
    parse_team_size,
    validate_company_context,
)


class TestValidateCompanyContext:

    def test_minimal_context(self):
        ctx = validate_company_context({'companyName': ' Acme ', 'industry': 'Technology', 'companySize': 'smb'})
        assert ctx['companyName'] == 'Acme'
        assert ctx['subSector'] is None
        assert ctx['erp'] is None
        assert ctx['revenue'] is None

    def test_blank_optional_becomes_none(self):
        ctx = validate_company_context({'companyName': 'Acme', 'industry': 'Retail',
                                        'companySize': 'enterprise', 'erp': '   '})
        assert ctx['erp'] is None

    @pytest.mark.parametrize('missing', ['companyName', 'industry'])
    def test_required_fields(self, missing):
        raw = {'companyName': 'Acme', 'industry': 'Retail', 'companySize': 'smb'}
        raw[missing] = ''
        with pytest.raises(InvalidInputError, match=missing):
            validate_company_context(raw)

    def test_bad_size(self):
        with pytest.raises(InvalidInputError, match='companySize'):
            validate_company_context({'companyName': 'Acme', 'industry': 'Retail', 'companySize': 'huge'})

    def test_not_an_object(self):
        with pytest.raises(InvalidInputError):
            validate_company_context(['Acme'])

    def test_is_a_value_error(self):
        assert issubclass(InvalidInputError, ValueError)


class TestParseTeamSize:

    def test_process_specific_key(self):
        assert parse_team_size({'apTeamSize': '8', 'teamSize': 3}, 'ap') == 8

    def test_generic_fallback(self):
        assert parse_team_size({'teamSize': 3}, 'ar') == 3
        assert parse_team_size({'teamSize': 4}, 'payroll') == 4

    def test_missing_defaults_to_five(self):
        assert parse_team_size({}, 'fpa') == 5
        assert parse_team_size(None, 'fpa') == 5
        assert parse_team_size({'fpaTeamSize': ''}, 'fpa') == 5

    def test_zero_is_valid(self):
        assert parse_team_size({'apTeamSize': 0}, 'ap') == 0
        assert parse_team_size({'apTeamSize': '0'}, 'ap') == 0

    @pytest.mark.parametrize('bad', ['-1', -2, 'abc', 2.5, True, [3]])
    def test_invalid(self, bad):
        with pytest.raises(InvalidInputError):
            parse_team_size({'apTeamSize': bad}, 'ap')


class TestParseMoney:

    def test_formatted_string(self):
        assert parse_money('$90,000') == 90000.0

    def test_number(self):
        assert parse_money(75000) == 75000.0

    def test_zero(self):
        assert parse_money('0') == 0.0

    @pytest.mark.parametrize('bad', ['-5', 'lots', None, '', float('nan')])
    def test_invalid(self, bad):
        with pytest.raises(InvalidInputError):
            parse_money(bad)


class TestMaturityAndAnswers:

    def test_valid_ratings(self):
        ratings = parse_maturity_ratings({'maturityRatings': {'a': 'manual', 'b': 'automated', 'c': ''}})
        assert ratings == {'a': 'manual', 'b': 'automated'}

    def test_unknown_level(self):
        with pytest.raises(InvalidInputError, match='maturity'):
            parse_maturity_ratings({'maturityRatings': {'a': 'mostly'}})

    def test_process_answers(self):
        parsed = parse_process_answers({'arTeamSize': '6', 'maturityRatings': {'dunning': 'manual'}}, 'ar')
        assert parsed == {'teamSize': 6, 'maturityRatings': {'dunning': 'manual'}}

    @pytest.mark.parametrize('bad', ['manual', ['manual'], 3])
    def test_answers_not_an_object(self, bad):
        with pytest.raises(InvalidInputError, match='Process answers must be an object'):
            parse_process_answers(bad, 'ap')

    def test_ratings_not_an_object(self):
        with pytest.raises(InvalidInputError, match='maturityRatings'):
            parse_maturity_ratings({'maturityRatings': ['manual']})


class TestParseAssumptions:

    def test_none_passes_through(self):
        assert parse_assumptions(None) is None

    def test_money_and_fractions(self):
        out = parse_assumptions({'costPerPerson': '$95,000', 'rangeFactor': 0.2,
                                 'automationPotential': {'manual': '0.7'},
                                 'stepOverrides': {'collections': {'capacityWeight': 0.4, 'ignored': 9}}})
        assert out == {'costPerPerson': 95000.0, 'rangeFactor': 0.2,
                       'automationPotential': {'manual': 0.7},
                       'stepOverrides': {'collections': {'capacityWeight': 0.4}}}

    def test_range_factor_above_one(self):
        with pytest.raises(InvalidInputError):
            parse_assumptions({'rangeFactor': 1.5})

    def test_negative_cost(self):
        with pytest.raises(InvalidInputError):
            parse_assumptions({'costPerPerson': -1})

    @pytest.mark.parametrize('raw', [
        {'automationPotential': [0.5]},
        {'impactScaling': 'high'},
        {'stepOverrides': ['invoice-capture']},
        {'stepOverrides': {'invoice-capture': 3}},
    ])
    def test_malformed_groups(self, raw):
        with pytest.raises(InvalidInputError, match='must be an object'):
            parse_assumptions(raw)

    def test_step_overrides(self):
        out = parse_assumptions({'stepOverrides': {'invoice-capture': {'capacityWeight': '0.4', 'other': 9},
                                                   'payment-execution': None}})
        assert out['stepOverrides'] == {'invoice-capture': {'capacityWeight': 0.4}, 'payment-execution': {}}


class TestMergeEnrichment:

    def _ctx(self):
        return validate_company_context({'companyName': 'Acme', 'industry': 'Technology',
                                         'companySize': 'smb', 'website': 'acme.io'})

    def test_fills_missing_fields(self):
        merged = merge_enrichment(self._ctx(), {'revenue': '$40M', 'headquarters': 'Austin, TX'})
        assert merged['revenue'] == '$40M'
        assert merged['headquarters'] == 'Austin, TX'

    def test_entered_values_win(self):
        merged = merge_enrichment(self._ctx(), {'website': 'acme.com'})
        assert merged['website'] == 'acme.io'

    def test_absent_enrichment(self):
        ctx = self._ctx()
        assert merge_enrichment(ctx, None) == ctx

    def test_partial_nulls_stay_none(self):
        merged = merge_enrichment(self._ctx(), {'founded': None})
        assert merged['founded'] is None

    def test_malformed_enrichment(self):
        with pytest.raises(InvalidInputError, match='enrichment'):
            merge_enrichment(self._ctx(), ['revenue', '$40M'])

    def test_malformed_context(self):
        with pytest.raises(InvalidInputError, match='companyContext'):
            merge_enrichment('Acme', {'revenue': '$40M'})


class TestParseFinancialProfile:

    def test_none_passes_through(self):
        assert parse_financial_profile(None) is None

    def test_normalised(self):
        profile = parse_financial_profile({
            'yearlyData': [{'year': 2024, 'revenue': '500', 'expenses': [
                {'category': 'G&A', 'amount': 60, 'asPercentOfRevenue': 12}]}],
            'employeeCount': '2,000', 'derivedMetrics': {'dso': 45},
        })
        assert profile['yearlyData'][0]['revenue'] == 500
        assert profile['yearlyData'][0]['expenses'][0]['asPercentOfRevenue'] == 12
        assert profile['employeeCount'] == 2000
        assert profile['revenuePerEmployee'] is None
        assert profile['derivedMetrics'] == {'dso': 45, 'dpo': None}

    @pytest.mark.parametrize('raw', [
        'rich',
        {'yearlyData': {'2024': {}}},
        {'yearlyData': [500]},
        {'yearlyData': [{'revenue': 'lots'}]},
        {'yearlyData': [{'revenue': 10, 'expenses': 'G&A'}]},
        {'derivedMetrics': [45]},
    ])
    def test_malformed(self, raw):
        with pytest.raises(InvalidInputError):
            parse_financial_profile(raw)


class TestParsePeerSets:

    def test_tiers_and_derived(self):
        peers = parse_peer_sets({'sic': [{'ticker': 'AAA', 'gaAsPercent': 8, 'operatingMargin': -4}],
                                 'derived': {'AAA': {'dso': 40}}})
        assert peers['sic'][0]['operatingMargin'] == -4
        assert peers['sic'][0]['grossMargin'] is None
        assert peers['competitors'] == []
        assert peers['derived'] == {'AAA': {'dso': 40, 'dpo': None, 'revenuePerEmployee': None}}

    @pytest.mark.parametrize('raw', [
        ['AAA'],
        {'sic': 'AAA'},
        {'selected': [{'gaAsPercent': 8}]},
        {'derived': {'AAA': 40}},
    ])
    def test_malformed(self, raw):
        with pytest.raises(InvalidInputError):
            parse_peer_sets(raw)
