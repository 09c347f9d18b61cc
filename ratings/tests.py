"""
Tests for the ratings engine - VA Math, compensation, TDIU, SMC and scoring.

Covers:
- Combined rating calculation (38 CFR § 4.25) and the bilateral factor (§ 4.26)
- Best/worst case rating range
- Compensation with dependents
- TDIU pathways (38 CFR 4.16)
- SMC triggers (K, S, T and the L review flag)
- Composite claim score
- Condition catalog and ingestion normalization
- Full claim evaluation pipeline
"""

from dataclasses import FrozenInstanceError
from datetime import date
from itertools import permutations

from django.test import TestCase, override_settings

from ratings.catalog import (
    CONDITION_CATALOG,
    SelectedCondition,
    TriggerTag,
    derive_trigger_tags,
    get_condition,
    is_bilateral_eligible,
    search_conditions,
)
from ratings.compensation import Dependents, calculate_compensation, format_currency
from ratings.engine import (
    ClaimEvaluation,
    estimate_backpay,
    evaluate_claim,
    serialize_evaluation,
)
from ratings.ingestion import (
    build_selected_condition,
    conditions_to_rating_inputs,
    normalize_rating_value,
    rating_for_severity,
)
from ratings.rate_tables import LATEST_RATE_YEAR, RATE_TABLE_2026, get_rate_table
from ratings.scoring import calculate_claim_score
from ratings.va_math import (
    LimbSide,
    RatingInput,
    RatingRange,
    calculate_bilateral_factor,
    calculate_combined_rating,
    calculate_rating_range,
    combine_ratings,
    combine_two_ratings,
    round_half_up,
    round_to_nearest_10,
    validate_rating,
)
from ratings.va_special_compensation import (
    SMCType,
    TDIUEligibility,
    TDIUPathway,
    check_smc_eligibility,
    check_smc_s,
    check_tdiu_eligibility,
    get_all_smc_types,
    get_smc_info,
)


def rating(value, name="", **kwargs):
    """Shorthand for a RatingInput."""
    return RatingInput(id=kwargs.pop('id', name or str(value)), name=name, value=value, **kwargs)


def knee(value, side):
    return rating(value, f"{side.value} knee", id=f"knee-{side.value}",
                  is_bilateral=True, side=side, limb_type="knee")


def selected(condition_id, value, **kwargs):
    return build_selected_condition(condition_id=condition_id, selected_rating=value, **kwargs)


# =============================================================================
# VA MATH - BUILDING BLOCKS
# =============================================================================

class TestValidateRating(TestCase):
    """Tests for validate_rating - 0-100 in 10% increments."""

    def test_all_valid_va_ratings(self):
        """All valid VA ratings pass validation."""
        for value in range(0, 101, 10):
            with self.subTest(value=value):
                self.assertTrue(validate_rating(value))

    def test_invalid_ratings(self):
        """Negative, off-tier and over-100 ratings fail."""
        for value in [-10, -1, 5, 35, 99, 110]:
            with self.subTest(value=value):
                self.assertFalse(validate_rating(value))


class TestRounding(TestCase):
    """Tests for the half-up rounding helpers."""

    def test_round_half_up_on_exact_halves(self):
        """0.5 rounds up, unlike Python's round()."""
        self.assertEqual(round_half_up(4.5), 5.0)
        self.assertEqual(round_half_up(6.5), 7.0)
        self.assertEqual(round_half_up(2.4), 2.0)

    def test_round_half_up_places(self):
        """Rounding to decimal places."""
        self.assertEqual(round_half_up(12.34565, 4), 12.3457)
        self.assertEqual(round_half_up(72.99999999999999, 4), 73.0)

    def test_round_to_nearest_10(self):
        """38 CFR § 4.25: 5 and above rounds up."""
        cases = [
            (0.0, 0), (4.9, 0), (5.0, 10), (64.0, 60), (64.9, 60),
            (65.0, 70), (75.0, 80), (94.9, 90), (95.0, 100), (105.0, 100),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(round_to_nearest_10(value), expected)


class TestCombineRatings(TestCase):
    """Tests for the plain efficiency-deduction helpers."""

    def test_classic_50_30_example(self):
        """Classic VA example: 50% + 30% = 65%."""
        self.assertAlmostEqual(combine_two_ratings(50, 30), 65.0)
        self.assertEqual(combine_ratings([50, 30]), 65.0)

    def test_10_10_combination(self):
        """10% + 10% = 19%."""
        self.assertAlmostEqual(combine_two_ratings(10, 10), 19.0)
        self.assertEqual(combine_ratings([10, 10]), 19.0)

    def test_three_ratings(self):
        """50% + 20% + 10% = 64%."""
        self.assertEqual(combine_ratings([10, 50, 20]), 64.0)

    def test_empty(self):
        """No ratings combine to zero."""
        self.assertEqual(combine_ratings([]), 0.0)


class TestCalculateBilateralFactor(TestCase):
    """Tests for calculate_bilateral_factor - 38 CFR § 4.26."""

    def test_empty(self):
        self.assertEqual(calculate_bilateral_factor([]), (0, 0))

    def test_bilateral_knees_example(self):
        """30% + 20% = 44%, factor 4.4 rounds to 4."""
        self.assertEqual(calculate_bilateral_factor([30, 20]), (44, 4))

    def test_factor_rounds_half_up(self):
        """50% + 30% = 65%, factor 6.5 rounds up to 7."""
        self.assertEqual(calculate_bilateral_factor([50, 30]), (65, 7))


# =============================================================================
# VA MATH - COMBINED RATING
# =============================================================================

class TestCalculateCombinedRating(TestCase):
    """Tests for calculate_combined_rating."""

    def test_empty_ratings(self):
        """Empty input returns an all-zero result without raising."""
        result = calculate_combined_rating([])

        self.assertEqual(result.exact_value, 0.0)
        self.assertEqual(result.combined, 0)
        self.assertEqual(result.bilateral_factor, 0)
        self.assertEqual(result.bilateral_combined, 0)
        self.assertEqual(result.breakdown.bilateral, [])
        self.assertEqual(result.breakdown.non_bilateral, [])
        self.assertEqual(result.steps, [])

    def test_scenario_50_30(self):
        """50% + 30% non-bilateral: exact 65, combined 70."""
        result = calculate_combined_rating([rating(50), rating(30)])

        self.assertEqual(result.exact_value, 65.0)
        self.assertEqual(result.combined, 70)
        self.assertEqual(result.bilateral_factor, 0)

    def test_common_ptsd_back_tinnitus(self):
        """PTSD 50%, Back 20%, Tinnitus 10%: 64% rounds to 60%."""
        result = calculate_combined_rating([
            rating(50, "PTSD"),
            rating(20, "Lumbar Spine"),
            rating(10, "Tinnitus"),
        ])
        self.assertEqual(result.exact_value, 64.0)
        self.assertEqual(result.combined, 60)

    def test_single_input_identity(self):
        """A single rating combines to itself."""
        for value in list(range(0, 101, 10)) + [35, 64, 65]:
            with self.subTest(value=value):
                result = calculate_combined_rating([rating(value)])
                self.assertEqual(result.exact_value, float(value))
                self.assertEqual(result.combined, round_to_nearest_10(value))

    def test_order_independence(self):
        """Permuting the inputs never changes the result."""
        values = [50, 30, 20, 10]
        expected = calculate_combined_rating([rating(v) for v in values]).exact_value
        for ordering in permutations(values):
            with self.subTest(ordering=ordering):
                result = calculate_combined_rating([rating(v) for v in ordering])
                self.assertEqual(result.exact_value, expected)

    def test_order_independence_with_bilateral(self):
        """Bilateral and ordinary ratings in any order give the same result."""
        inputs = [knee(20, LimbSide.LEFT), rating(40, "Lumbar"), knee(10, LimbSide.RIGHT), rating(10, "Tinnitus")]
        expected = calculate_combined_rating(inputs)
        for ordering in permutations(inputs):
            with self.subTest(ordering=[r.id for r in ordering]):
                result = calculate_combined_rating(list(ordering))
                self.assertEqual(result.exact_value, expected.exact_value)
                self.assertEqual(result.bilateral_combined, expected.bilateral_combined)

    def test_monotonicity(self):
        """Adding a positive rating never lowers the result."""
        base = [rating(40), rating(20)]
        before = calculate_combined_rating(base)
        for value in range(10, 101, 10):
            with self.subTest(value=value):
                after = calculate_combined_rating(base + [rating(value)])
                self.assertGreaterEqual(after.exact_value, before.exact_value)
                self.assertGreaterEqual(after.combined, before.combined)

    def test_range_invariant(self):
        """Combined is a multiple of 10 in [0, 100]; exact is in [max, 100)."""
        cases = [[10], [90, 90, 90], [50, 40, 30, 20, 10], [70, 70], [90, 80, 70, 60, 50, 40]]
        for values in cases:
            with self.subTest(values=values):
                result = calculate_combined_rating([rating(v) for v in values])
                self.assertEqual(result.combined % 10, 0)
                self.assertTrue(0 <= result.combined <= 100)
                self.assertGreaterEqual(result.exact_value, max(values))
                self.assertLess(result.exact_value, 100)

    def test_100_rating_is_total(self):
        """Any 100% rating makes the combined value exactly 100."""
        result = calculate_combined_rating([rating(100), rating(30)])
        self.assertEqual(result.exact_value, 100.0)
        self.assertEqual(result.combined, 100)

    def test_steps_trace_calculation(self):
        """Steps start with the final combination and end with rounding."""
        result = calculate_combined_rating([rating(50, "PTSD"), rating(30, "Back")])
        descriptions = [step.description for step in result.steps]

        self.assertEqual(descriptions[0], "Final combination (38 CFR § 4.25)")
        self.assertIn("Rating #1: 50% (PTSD)", descriptions)
        self.assertEqual(descriptions[-1], "Rounded to nearest 10%: 70%")

    def test_inputs_not_mutated(self):
        """Input list and records are left untouched."""
        inputs = [rating(10), knee(20, LimbSide.LEFT), knee(30, LimbSide.RIGHT)]
        snapshot = [(r.id, r.value, r.is_bilateral) for r in inputs]

        calculate_combined_rating(inputs)

        self.assertEqual([(r.id, r.value, r.is_bilateral) for r in inputs], snapshot)


class TestBilateralFactor(TestCase):
    """Tests for bilateral grouping inside calculate_combined_rating."""

    def test_scenario_bilateral_knees(self):
        """Knees 30% and 20%: subtotal 44, factor 4, block 48, combined 50."""
        result = calculate_combined_rating([knee(30, LimbSide.LEFT), knee(20, LimbSide.RIGHT)])

        self.assertEqual(result.bilateral_factor, 4)
        self.assertEqual(result.bilateral_combined, 48)
        self.assertEqual(result.exact_value, 48.0)
        self.assertEqual(result.combined, 50)
        self.assertEqual(len(result.breakdown.bilateral), 2)
        self.assertIn("Bilateral subtotal: 44.00% → 44%", [s.description for s in result.steps])

    def test_bilateral_knees_with_back(self):
        """Knees 20/20 with back 40%: block 40, final 64% rounds to 60%."""
        result = calculate_combined_rating([
            rating(40, "Lumbar Spine"),
            knee(20, LimbSide.LEFT),
            knee(20, LimbSide.RIGHT),
        ])
        self.assertEqual(result.bilateral_factor, 4)
        self.assertEqual(result.bilateral_combined, 40)
        self.assertEqual(result.exact_value, 64.0)
        self.assertEqual(result.combined, 60)

    def test_factor_rounds_half_up(self):
        """A 65% subtotal gets a 7% factor."""
        result = calculate_combined_rating([knee(50, LimbSide.LEFT), knee(30, LimbSide.RIGHT)])
        self.assertEqual(result.bilateral_factor, 7)
        self.assertEqual(result.bilateral_combined, 72)

    def test_single_bilateral_side_qualifies(self):
        """One entry marked as affecting both sides gets the factor."""
        result = calculate_combined_rating([
            rating(20, "Both knees", is_bilateral=True, side=LimbSide.BILATERAL, limb_type="knee"),
        ])
        self.assertEqual(result.bilateral_factor, 2)
        self.assertEqual(result.bilateral_combined, 22)
        self.assertEqual(result.combined, 20)

    def test_unpaired_limb_is_ordinary(self):
        """A lone left knee gets no factor."""
        result = calculate_combined_rating([knee(20, LimbSide.LEFT), rating(10)])

        self.assertEqual(result.bilateral_factor, 0)
        self.assertEqual(result.breakdown.bilateral, [])
        self.assertEqual(len(result.breakdown.non_bilateral), 2)

    def test_two_entries_same_limb_type_qualify(self):
        """Two flagged entries of one limb type qualify without sides."""
        result = calculate_combined_rating([
            rating(10, "Knee A", is_bilateral=True, limb_type="knee"),
            rating(10, "Knee B", is_bilateral=True, limb_type="knee"),
        ])
        # 19% + 1.9 -> 2
        self.assertEqual(result.bilateral_factor, 2)
        self.assertEqual(result.bilateral_combined, 21)

    def test_flag_without_limb_type_is_ordinary(self):
        """Bilateral flag alone does not group a rating."""
        result = calculate_combined_rating([
            rating(20, is_bilateral=True),
            rating(20, is_bilateral=True),
        ])
        self.assertEqual(result.bilateral_factor, 0)

    def test_qualifying_groups_share_one_block(self):
        """Knees and ankles are combined together before the factor."""
        result = calculate_combined_rating([
            knee(20, LimbSide.LEFT),
            knee(20, LimbSide.RIGHT),
            rating(10, "L ankle", is_bilateral=True, side=LimbSide.LEFT, limb_type="ankle"),
            rating(10, "R ankle", is_bilateral=True, side=LimbSide.RIGHT, limb_type="ankle"),
        ])
        # 0.8 * 0.8 * 0.9 * 0.9 = 0.5184 -> 48.16 -> 48, factor 4.8 -> 5
        self.assertEqual(len(result.breakdown.bilateral), 4)
        self.assertEqual(result.bilateral_factor, 5)
        self.assertEqual(result.bilateral_combined, 53)
        descriptions = [s.description for s in result.steps]
        self.assertIn("Bilateral pair identified: knee", descriptions)
        self.assertIn("Bilateral pair identified: ankle", descriptions)

    def test_include_bilateral_false(self):
        """Bilateral handling can be switched off."""
        result = calculate_combined_rating(
            [knee(30, LimbSide.LEFT), knee(20, LimbSide.RIGHT)],
            include_bilateral=False,
        )
        self.assertEqual(result.bilateral_factor, 0)
        self.assertEqual(result.exact_value, 44.0)
        self.assertEqual(result.combined, 40)

    def test_bonus_bound(self):
        """Factor is the rounded tenth of the subtotal and never above 10."""
        tiers = range(10, 101, 10)
        for left in tiers:
            for right in tiers:
                with self.subTest(left=left, right=right):
                    result = calculate_combined_rating([knee(left, LimbSide.LEFT), knee(right, LimbSide.RIGHT)])
                    subtotal, factor = calculate_bilateral_factor([left, right])
                    self.assertEqual(result.bilateral_factor, factor)
                    self.assertEqual(factor, int(round_half_up(subtotal * 0.1)))
                    self.assertLessEqual(result.exact_value, 100)
                    self.assertLessEqual(result.bilateral_factor, 10)
                    self.assertLessEqual(result.combined, 100)


class TestCalculateRatingRange(TestCase):
    """Tests for calculate_rating_range."""

    def test_empty(self):
        self.assertEqual(calculate_rating_range([]), RatingRange())

    def test_min_uses_lowest_nonzero_tier(self):
        """PTSD (10-100) and tinnitus (10): 19% to 100%."""
        result = calculate_rating_range([
            ("PTSD", [0, 10, 30, 50, 70, 100]),
            ("Tinnitus", [10]),
        ])
        self.assertEqual(result.min, 20)
        self.assertEqual(result.min_exact, 19.0)
        self.assertEqual(result.max, 100)
        self.assertEqual(result.max_exact, 100.0)

    def test_zero_only_condition(self):
        """A condition with only a 0% tier contributes nothing."""
        result = calculate_rating_range([("Erectile Dysfunction", [0])])
        self.assertEqual(result, RatingRange(min=0, max=0, min_exact=0.0, max_exact=0.0))

    def test_min_never_exceeds_max(self):
        for condition in CONDITION_CATALOG:
            with self.subTest(condition=condition.id):
                result = calculate_rating_range([(condition.name, condition.ratings)])
                self.assertLessEqual(result.min, result.max)


# =============================================================================
# COMPENSATION
# =============================================================================

class TestCalculateCompensation(TestCase):
    """Tests for calculate_compensation against the 2026 tables."""

    def test_base_rates(self):
        """Veteran alone receives the base rate for each tier."""
        for value, amount in RATE_TABLE_2026.base.items():
            with self.subTest(value=value):
                result = calculate_compensation(value, None, RATE_TABLE_2026)
                self.assertEqual(result.monthly, amount)

    def test_unknown_tier_is_zero(self):
        result = calculate_compensation(55, Dependents(spouse=True), RATE_TABLE_2026)
        self.assertEqual(result.monthly, 0.0)

    def test_dependents_ignored_below_30(self):
        """Dependent add-ons only start at 30%."""
        result = calculate_compensation(20, Dependents(spouse=True, children=2, dependent_parents=1), RATE_TABLE_2026)
        self.assertEqual(result.monthly, 346.85)
        self.assertEqual(result.breakdown.spouse, 0.0)

    def test_spouse_at_30(self):
        result = calculate_compensation(30, Dependents(spouse=True), RATE_TABLE_2026)
        self.assertEqual(result.monthly, 600.18)

    def test_full_family(self):
        """70% with spouse, three children and one parent."""
        result = calculate_compensation(
            70,
            Dependents(spouse=True, children=3, dependent_parents=1),
            RATE_TABLE_2026,
        )
        self.assertEqual(result.breakdown.base, 1758.56)
        self.assertEqual(result.breakdown.spouse, 157.68)
        self.assertEqual(result.breakdown.children, 122.0)
        self.assertEqual(result.breakdown.parents, 50.0)
        self.assertEqual(result.monthly, 2088.24)
        self.assertEqual(result.annual, 25058.88)

    def test_cola_is_metadata_only(self):
        """COLA fields come from the table and are not applied."""
        result = calculate_compensation(10, None, RATE_TABLE_2026)
        self.assertEqual(result.cola_rate, 0.028)
        self.assertEqual(result.cola_year, 2026)
        self.assertEqual(result.effective_date, date(2026, 1, 1))
        self.assertEqual(result.monthly, 175.51)

    def test_format_currency(self):
        self.assertEqual(format_currency(3831.3), "$3,831.30")
        self.assertEqual(format_currency(0), "$0.00")


class TestRateTables(TestCase):
    """Tests for rate table lookup and immutability."""

    def test_lookup_by_year(self):
        self.assertIs(get_rate_table(2026), RATE_TABLE_2026)

    @override_settings(VA_RATE_YEAR=2026)
    def test_configured_year(self):
        self.assertEqual(get_rate_table().year, 2026)

    def test_unknown_year_falls_back_to_latest(self):
        with self.assertLogs('ratings.rate_tables', level='WARNING'):
            table = get_rate_table(1999)
        self.assertEqual(table.year, LATEST_RATE_YEAR)

    def test_tables_are_read_only(self):
        with self.assertRaises(FrozenInstanceError):
            RATE_TABLE_2026.year = 2027
        with self.assertRaises(TypeError):
            RATE_TABLE_2026.base[10] = 0


# =============================================================================
# TDIU
# =============================================================================

class TestTDIUEligibility(TestCase):
    """Tests for check_tdiu_eligibility - 38 CFR 4.16."""

    def test_empty_ratings(self):
        """No ratings: ineligible with an explanation."""
        result = check_tdiu_eligibility([])

        self.assertEqual(result.eligible, TDIUEligibility.INELIGIBLE)
        self.assertIsNone(result.pathway)
        self.assertIn("No ratings provided", result.explanation)

    def test_single_condition_60(self):
        """One condition at 60% meets the single condition pathway."""
        result = check_tdiu_eligibility([rating(60, "Condition A")])

        self.assertEqual(result.eligible, TDIUEligibility.ELIGIBLE)
        self.assertEqual(result.pathway, TDIUPathway.SINGLE_CONDITION)
        self.assertEqual(result.pathway.value, "Single Condition")
        self.assertIn("Condition A (60%)", result.explanation)
        self.assertEqual(result.forms, ["21-8940", "21-4192"])
        self.assertTrue(result.requirements)

    def test_single_condition_59_edge(self):
        """59% misses the single condition pathway."""
        result = check_tdiu_eligibility([rating(59, "Condition A")])

        self.assertNotEqual(result.pathway, TDIUPathway.SINGLE_CONDITION)
        self.assertNotEqual(result.eligible, TDIUEligibility.ELIGIBLE)

    def test_combined_conditions(self):
        """40% plus others reaching 70% combined."""
        result = check_tdiu_eligibility([
            rating(40, "Lumbar"),
            rating(30, "Migraines"),
            rating(30, "GERD"),
        ])
        self.assertEqual(result.eligible, TDIUEligibility.ELIGIBLE)
        self.assertEqual(result.pathway, TDIUPathway.COMBINED_CONDITIONS)
        self.assertEqual(result.combined_rating, 70)
        self.assertEqual(result.highest_condition, "Lumbar")

    def test_combined_without_40_single(self):
        """70% combined without a 40% rating is extraschedular."""
        result = check_tdiu_eligibility([rating(30), rating(30), rating(30), rating(30)])

        self.assertEqual(result.combined_rating, 80)
        self.assertEqual(result.eligible, TDIUEligibility.EXTRASCHEDULAR)

    def test_extraschedular(self):
        """40% combined only: extraschedular referral."""
        result = check_tdiu_eligibility([rating(30), rating(20)])

        self.assertEqual(result.eligible, TDIUEligibility.EXTRASCHEDULAR)
        self.assertEqual(result.pathway, TDIUPathway.EXTRASCHEDULAR)
        self.assertEqual(result.forms, ["21-8940", "21-4138"])

    def test_ineligible(self):
        """Below 40% combined."""
        result = check_tdiu_eligibility([rating(30, "Knee")])

        self.assertEqual(result.eligible, TDIUEligibility.INELIGIBLE)
        self.assertIsNone(result.pathway)
        self.assertIn("Knee at 30%", result.explanation)
        self.assertEqual(result.forms, [])

    def test_uses_bilateral_inclusive_combined(self):
        """The bilateral factor can lift a claim into the combined pathway."""
        inputs = [
            rating(40, "PTSD"),
            knee(40, LimbSide.LEFT),
            knee(30, LimbSide.RIGHT),
        ]
        # Knees 58 + 6 = 64; with PTSD 40: 78.4 -> 80
        result = check_tdiu_eligibility(inputs)
        self.assertEqual(result.combined_rating, 80)
        self.assertEqual(result.pathway, TDIUPathway.COMBINED_CONDITIONS)


# =============================================================================
# SMC
# =============================================================================

class TestSMCEligibility(TestCase):
    """Tests for check_smc_eligibility."""

    def evaluate(self, conditions):
        ratings = conditions_to_rating_inputs(conditions)
        return check_smc_eligibility(conditions, ratings, RATE_TABLE_2026)

    def test_no_triggers(self):
        self.assertEqual(self.evaluate([selected('ptsd', 50)]), [])

    def test_smc_k_creative_organ(self):
        """Erectile dysfunction fires SMC-K at any rating."""
        results = self.evaluate([selected('ed', 0), selected('ptsd', 30)])

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].type, SMCType.K)
        self.assertEqual(results[0].amount, 139.09)
        self.assertEqual(results[0].conditions, ["Erectile Dysfunction"])
        self.assertEqual(results[0].cfr_reference, "38 U.S.C. § 1114(k)")

    def test_smc_k_free_text_condition(self):
        """Free-text names are tagged once at ingestion."""
        condition = build_selected_condition(name="Loss of use of creative organ", selected_rating=20)
        results = self.evaluate([condition])
        self.assertEqual([r.type for r in results], [SMCType.K])

    def test_smc_s_housebound(self):
        """100% plus independent 60%."""
        results = self.evaluate([selected('cad', 100), selected('asthma', 60)])

        self.assertEqual([r.type for r in results], [SMCType.S])
        self.assertEqual(results[0].amount, 4474.34)
        self.assertEqual(results[0].reason, "100% schedular rating plus independent 60% disability")
        self.assertEqual(results[0].conditions, ["Coronary Artery Disease", "Asthma"])

    def test_smc_s_remaining_combine_to_60(self):
        """Remaining 50% and 20% combine to 60%."""
        ratings = [rating(100, "A"), rating(50, "B"), rating(20, "C")]
        result = check_smc_s(ratings, calculate_combined_rating(ratings), RATE_TABLE_2026)
        self.assertIsNotNone(result)

    def test_smc_s_edges(self):
        """Combinations that do not qualify for SMC-S."""
        cases = [
            [rating(100), rating(50)],  # remaining only 50
            [rating(90), rating(70)],  # combined 100 without a single 100
            [rating(100)],  # nothing independent
        ]
        for ratings in cases:
            with self.subTest(values=[r.value for r in ratings]):
                result = check_smc_s(ratings, calculate_combined_rating(ratings), RATE_TABLE_2026)
                self.assertIsNone(result)

    def test_smc_t_tbi(self):
        """TBI at 70% fires SMC-T; 40% does not."""
        results = self.evaluate([selected('tbi', 70)])
        self.assertEqual([r.type for r in results], [SMCType.T])
        self.assertEqual(results[0].conditions, ["Traumatic Brain Injury (TBI)"])

        self.assertEqual(self.evaluate([selected('tbi', 40)]), [])

    def test_smc_l_review_flag(self):
        """Two limb losses are flagged for review."""
        results = self.evaluate([selected('amputation_hand', 60), selected('loss_of_use_foot', 40)])
        smc_l = [r for r in results if r.type == SMCType.L]

        self.assertEqual(len(smc_l), 1)
        self.assertTrue(smc_l[0].requires_review)
        self.assertIn("review", smc_l[0].reason)

    def test_single_limb_loss_not_flagged(self):
        results = self.evaluate([selected('amputation_foot', 40)])
        self.assertEqual(results, [])

    def test_fixed_order(self):
        """Independent triggers are reported K, S, T, L."""
        results = self.evaluate([
            selected('amputation_hand', 70),
            selected('tbi', 100),
            selected('ed', 0),
            selected('loss_of_use_foot', 40),
        ])
        self.assertEqual([r.type for r in results], [SMCType.K, SMCType.S, SMCType.T, SMCType.L])

    def test_smc_info(self):
        info = get_smc_info(SMCType.S, RATE_TABLE_2026)
        self.assertEqual(info["type"], "SMC-S")
        self.assertEqual(info["amount"], 4474.34)
        self.assertEqual(len(get_all_smc_types(RATE_TABLE_2026)), len(SMCType))


# =============================================================================
# SCORE
# =============================================================================

class TestClaimScore(TestCase):
    """Tests for calculate_claim_score."""

    def test_zero(self):
        self.assertEqual(calculate_claim_score(0, TDIUEligibility.INELIGIBLE, [], 0, 0), 0)

    def test_evidence_rounds_half_up(self):
        """Evidence 30 is worth 4.5 points, rounded to 5."""
        self.assertEqual(calculate_claim_score(0, TDIUEligibility.INELIGIBLE, [], 30, 0), 5)

    def test_tdiu_bonus(self):
        cases = [
            (TDIUEligibility.ELIGIBLE, 20),
            (TDIUEligibility.EXTRASCHEDULAR, 10),
            (TDIUEligibility.INELIGIBLE, 0),
        ]
        for eligibility, expected in cases:
            with self.subTest(eligibility=eligibility):
                self.assertEqual(calculate_claim_score(0, eligibility, [], 0, 0), expected)

    def test_caps(self):
        """SMC and condition count contributions are capped."""
        ratings = [rating(100), rating(60)]
        smc = check_smc_eligibility([], ratings, RATE_TABLE_2026) * 4
        self.assertEqual(calculate_claim_score(0, TDIUEligibility.INELIGIBLE, smc, 0, 0), 15)
        self.assertEqual(calculate_claim_score(0, TDIUEligibility.INELIGIBLE, [], 0, 12), 10)

    def test_maximum(self):
        smc = check_smc_eligibility([], [rating(100), rating(60)], RATE_TABLE_2026) * 3
        score = calculate_claim_score(100, TDIUEligibility.ELIGIBLE, smc, 100, 10)
        self.assertEqual(score, 100)

    def test_clamped_at_zero(self):
        self.assertEqual(calculate_claim_score(0, TDIUEligibility.INELIGIBLE, [], -100, 0), 0)


# =============================================================================
# CATALOG
# =============================================================================

class TestConditionCatalog(TestCase):
    """Tests for the condition catalog."""

    def test_ids_are_unique(self):
        ids = [condition.id for condition in CONDITION_CATALOG]
        self.assertEqual(len(ids), len(set(ids)))

    def test_catalog_tiers_are_valid(self):
        for condition in CONDITION_CATALOG:
            with self.subTest(condition=condition.id):
                self.assertTrue(condition.ratings)
                self.assertTrue(all(validate_rating(v) for v in condition.ratings))

    def test_trigger_tags_attached_at_definition(self):
        self.assertEqual(get_condition('ed').tags, frozenset({TriggerTag.CREATIVE_ORGAN_LOSS}))
        self.assertEqual(get_condition('tbi').tags, frozenset({TriggerTag.TRAUMATIC_BRAIN_INJURY}))
        self.assertEqual(get_condition('amputation_hand').tags, frozenset({TriggerTag.LIMB_LOSS}))
        self.assertEqual(get_condition('ptsd').tags, frozenset())

    def test_derive_trigger_tags(self):
        self.assertEqual(derive_trigger_tags("Mild TBI residuals"), frozenset({TriggerTag.TRAUMATIC_BRAIN_INJURY}))
        self.assertEqual(derive_trigger_tags(""), frozenset())

    def test_get_condition_unknown(self):
        self.assertIsNone(get_condition('nope'))

    def test_search_is_case_insensitive(self):
        self.assertEqual([c.id for c in search_conditions("KNEE")], ['knee'])

    def test_search_by_keyword(self):
        self.assertEqual({c.id for c in search_conditions("amputation")}, {'amputation_hand', 'amputation_foot'})

    def test_empty_search_returns_all(self):
        self.assertEqual(len(search_conditions("")), len(CONDITION_CATALOG))

    def test_bilateral_eligibility(self):
        self.assertTrue(is_bilateral_eligible(get_condition('knee')))
        self.assertFalse(is_bilateral_eligible(get_condition('ptsd')))
        self.assertTrue(is_bilateral_eligible(SelectedCondition(id="x", name="Hip", limb_type="hip")))
        self.assertFalse(is_bilateral_eligible(
            SelectedCondition(id="x", name="Hip", limb_type="hip", bilateral_eligible=False)
        ))


# =============================================================================
# INGESTION
# =============================================================================

class TestIngestion(TestCase):
    """Tests for input normalization before the engine."""

    def test_normalize_clamps(self):
        with self.assertLogs('ratings.ingestion', level='WARNING'):
            self.assertEqual(normalize_rating_value(105), 100)
        with self.assertLogs('ratings.ingestion', level='WARNING'):
            self.assertEqual(normalize_rating_value(-5), 0)

    def test_normalize_off_tier(self):
        """Off-tier values snap to the nearest 10% or allowed tier."""
        with self.assertLogs('ratings.ingestion', level='WARNING'):
            self.assertEqual(normalize_rating_value(35), 40)
        with self.assertLogs('ratings.ingestion', level='WARNING'):
            self.assertEqual(normalize_rating_value(35, [0, 10, 30, 50]), 30)
        with self.assertLogs('ratings.ingestion', level='WARNING'):
            self.assertEqual(normalize_rating_value(40, [30, 50]), 50)

    def test_normalize_valid_value_unchanged(self):
        self.assertEqual(normalize_rating_value(70), 70)
        self.assertEqual(normalize_rating_value(30, [0, 10, 30]), 30)

    def test_rating_for_severity(self):
        cases = [
            ([0, 10, 30, 50, 70, 100], 2, 30),
            ([0, 10, 30, 50, 70, 100], 4, 100),
            ([10], 0, 10),
            ([0, 40], 3, 40),
            ([], 4, 100),
        ]
        for possible, severity, expected in cases:
            with self.subTest(possible=possible, severity=severity):
                self.assertEqual(rating_for_severity(possible, severity), expected)

    def test_build_catalog_condition(self):
        condition = build_selected_condition(condition_id='knee', selected_rating=20, side=LimbSide.LEFT)

        self.assertEqual(condition.name, "Knee Condition")
        self.assertEqual(condition.limb_type, "knee")
        self.assertEqual(condition.selected_rating, 20)
        self.assertEqual(condition.ratings, (0, 10, 20, 30, 40, 50, 60))

    def test_build_snaps_to_catalog_tier(self):
        with self.assertLogs('ratings.ingestion', level='WARNING'):
            condition = build_selected_condition(condition_id='sleepapnea', selected_rating=40)
        self.assertEqual(condition.selected_rating, 50)

    def test_build_from_severity(self):
        condition = build_selected_condition(condition_id='ptsd', severity=3)
        self.assertEqual(condition.selected_rating, 50)

    def test_build_free_text(self):
        condition = build_selected_condition(name="Erectile dysfunction", selected_rating=0)

        self.assertEqual(condition.id, "erectile-dysfunction")
        self.assertIn(TriggerTag.CREATIVE_ORGAN_LOSS, condition.tags)

    def test_conditions_to_rating_inputs(self):
        conditions = [
            selected('knee', 10, side=LimbSide.LEFT),
            selected('ptsd', 50),
            build_selected_condition(condition_id='tinnitus'),  # nothing selected
            selected('ed', 0),
        ]
        inputs = conditions_to_rating_inputs(conditions)

        self.assertEqual([r.id for r in inputs], ['knee', 'ptsd'])
        self.assertTrue(inputs[0].is_bilateral)
        self.assertEqual(inputs[0].side, LimbSide.LEFT)
        self.assertFalse(inputs[1].is_bilateral)

    def test_explicit_bilateral_flag_wins(self):
        inputs = conditions_to_rating_inputs([selected('knee', 10, is_bilateral=False)])
        self.assertFalse(inputs[0].is_bilateral)


# =============================================================================
# PIPELINE
# =============================================================================

class TestEvaluateClaim(TestCase):
    """Tests for the full claim evaluation pipeline."""

    def setUp(self):
        self.conditions = [
            selected('ptsd', 70),
            selected('knee', 10, side=LimbSide.LEFT),
            selected('knee', 10, side=LimbSide.RIGHT),
        ]

    def test_full_evaluation(self):
        """PTSD 70% with bilateral knees 10/10 and a spouse."""
        evaluation = evaluate_claim(self.conditions, Dependents(spouse=True), RATE_TABLE_2026, evidence_score=50)

        self.assertIsInstance(evaluation, ClaimEvaluation)
        # Knees 19 + 2 = 21; with PTSD: 76.3 -> 80
        self.assertEqual(evaluation.combined.bilateral_combined, 21)
        self.assertEqual(evaluation.combined.combined, 80)
        self.assertEqual(evaluation.compensation.monthly, 2226.03)
        self.assertEqual(evaluation.tdiu.pathway, TDIUPathway.SINGLE_CONDITION)
        self.assertEqual(evaluation.smc, [])
        # 32 + 20 + 0 + 7.5 + 6 = 65.5
        self.assertEqual(evaluation.score, 66)
        # TDIU pays the 100% rate with spouse
        self.assertEqual(evaluation.max_monthly_benefit, 4044.02)
        self.assertEqual(evaluation.rating_range.min, 30)
        self.assertEqual(evaluation.rating_range.max, 100)

    def test_empty_claim(self):
        evaluation = evaluate_claim([], None, RATE_TABLE_2026)

        self.assertEqual(evaluation.combined.combined, 0)
        self.assertEqual(evaluation.compensation.monthly, 0.0)
        self.assertEqual(evaluation.tdiu.eligible, TDIUEligibility.INELIGIBLE)
        self.assertEqual(evaluation.score, 0)
        self.assertEqual(evaluation.max_monthly_benefit, 0.0)

    def test_smc_added_to_max_monthly(self):
        """SMC-K is added on top of compensation."""
        evaluation = evaluate_claim([selected('ed', 0), selected('ptsd', 30)], None, RATE_TABLE_2026)

        self.assertEqual(evaluation.compensation.monthly, 537.02)
        self.assertEqual(evaluation.max_monthly_benefit, 676.11)

    def test_backpay(self):
        evaluation = evaluate_claim(
            self.conditions,
            Dependents(spouse=True),
            RATE_TABLE_2026,
            effective_date=date(2026, 1, 1),
            as_of=date(2026, 1, 31),
        )
        self.assertEqual(evaluation.potential_backpay, 4044.02)

    def test_serialize_evaluation(self):
        evaluation = evaluate_claim(self.conditions, Dependents(spouse=True), RATE_TABLE_2026)
        data = serialize_evaluation(evaluation)

        self.assertEqual(data['tdiu']['eligible'], 'eligible')
        self.assertEqual(data['tdiu']['pathway'], 'Single Condition')
        self.assertEqual(data['compensation']['effective_date'], '2026-01-01')
        self.assertEqual(data['combined']['breakdown']['bilateral'][0]['side'], 'left')
        self.assertEqual(data['combined']['combined'], 80)


class TestEstimateBackpay(TestCase):
    """Tests for estimate_backpay."""

    def test_whole_months(self):
        # 60 days -> 2 months
        self.assertEqual(estimate_backpay(1000.0, date(2026, 1, 1), date(2026, 3, 2)), 2000.0)

    def test_partial_month_floors(self):
        self.assertEqual(estimate_backpay(1000.0, date(2026, 1, 1), date(2026, 1, 30)), 0.0)

    def test_future_effective_date(self):
        self.assertEqual(estimate_backpay(1000.0, date(2026, 6, 1), date(2026, 1, 1)), 0.0)
