"""
Pytest test module for the structured extraction adapter.

Covers:
- Advisor label parsing in priority order, with empty values falling through
- "Revenue Config:" directive parsing, partial keys and bad conversion rates
- First-directive-wins across households
- Hint lists aligned with the household input order
"""

import pytest

from practice_pulse.services.extraction import (
    extract_household_hints,
    extract_revenue_directive,
    parse_advisor_from_description,
    parse_revenue_directive,
)
from practice_pulse.tests.conftest import build_household


# =============================================================================
# Test Class: TestParseAdvisor
# =============================================================================

class TestParseAdvisor:
    """Tests for parse_advisor_from_description."""

    @pytest.mark.parametrize("description,expected", [
        ("Assigned Advisor: Amy Sato", "Amy Sato"),
        ("Advisor Name: James Wilder", "James Wilder"),
        ("Advisor: Diane Rivera", "Diane Rivera"),
        ("Rep: Jon Cambras", "Jon Cambras"),
        ("Representative: Michelle Osei", "Michelle Osei"),
        ("Assigned To: Marcus Rivera", "Marcus Rivera"),
    ])
    def test_each_label(self, description, expected):
        assert parse_advisor_from_description(description) == expected

    def test_value_is_rest_of_line_trimmed(self):
        description = "Family of four\nAdvisor:   Dana Lee   \nPrefers email"
        assert parse_advisor_from_description(description) == "Dana Lee"

    def test_label_match_is_case_insensitive(self):
        assert parse_advisor_from_description("assigned advisor: amy sato") == "amy sato"

    def test_assigned_advisor_beats_plain_advisor(self):
        """The more specific label wins even when it appears later."""
        description = "Advisor: Former Rep\nAssigned Advisor: Current Rep"
        assert parse_advisor_from_description(description) == "Current Rep"

    def test_empty_label_falls_through(self):
        description = "Assigned Advisor:\nRep: Carl Jensen"
        assert parse_advisor_from_description(description) == "Carl Jensen"

    @pytest.mark.parametrize("description", [None, "", "Met at the 2025 seminar"])
    def test_no_label_returns_none(self, description):
        assert parse_advisor_from_description(description) is None


# =============================================================================
# Test Class: TestRevenueDirective
# =============================================================================

class TestRevenueDirective:
    """Tests for parse_revenue_directive and extract_revenue_directive."""

    def test_full_directive(self):
        overrides = parse_revenue_directive(
            "Revenue Config: avgAum=3000000 bps=90 conversion=0.70 pipelineAum=2000000"
        )
        assert overrides is not None
        assert overrides.avgAumPerHousehold == 3_000_000
        assert overrides.feeScheduleBps == 90
        assert overrides.pipelineConversionRate == pytest.approx(0.70)
        assert overrides.pipelineAvgAum == 2_000_000

    def test_partial_directive_leaves_other_keys_unset(self):
        overrides = parse_revenue_directive("Notes\nRevenue Config: bps=100")
        assert overrides is not None
        assert overrides.feeScheduleBps == 100
        assert overrides.avgAumPerHousehold is None
        assert overrides.pipelineConversionRate is None
        assert overrides.pipelineAvgAum is None

    def test_out_of_range_conversion_is_dropped(self):
        overrides = parse_revenue_directive("Revenue Config: conversion=1.5 bps=75")
        assert overrides is not None
        assert overrides.pipelineConversionRate is None
        assert overrides.feeScheduleBps == 75

    @pytest.mark.parametrize("description", [None, "", "Assigned Advisor: Amy Sato"])
    def test_no_directive_returns_none(self, description):
        assert parse_revenue_directive(description) is None

    def test_first_household_with_directive_wins(self):
        households = [
            build_household(id="H1", description="Assigned Advisor: Amy Sato"),
            build_household(id="H2", description="Revenue Config: bps=90"),
            build_household(id="H3", description="Revenue Config: bps=120"),
        ]
        overrides = extract_revenue_directive(households)
        assert overrides is not None
        assert overrides.feeScheduleBps == 90

    def test_no_households_no_directive(self):
        assert extract_revenue_directive([]) is None


# =============================================================================
# Test Class: TestHouseholdHints
# =============================================================================

class TestHouseholdHints:
    """Tests for extract_household_hints."""

    def test_hints_align_with_input_order(self):
        households = [
            build_household(id="H1", description="Advisor: Amy Sato"),
            build_household(id="H2"),
            build_household(id="H3", description="Rep: Jon Cambras"),
        ]
        assert extract_household_hints(households) == ["Amy Sato", None, "Jon Cambras"]

    def test_duplicate_ids_keep_separate_hints(self):
        households = [
            build_household(id="DUP", description="Advisor: First"),
            build_household(id="DUP", description="Advisor: Second"),
        ]
        assert extract_household_hints(households) == ["First", "Second"]
