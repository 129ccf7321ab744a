"""
Pool Balance Chlorine Test Suite

Tests for the chlorine calculators:
- Breakpoint chlorination (shock) levels and dose
- Weekly maintenance dose with seasonal UV loss
- Manual chlorine addition table
- Fractional dose formatting
"""

import pytest
import sys
import os

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def product(product_id):
    from poolbalance.services.standards import CHLORINE_PRODUCTS
    return CHLORINE_PRODUCTS[product_id]


class TestShockLevel:

    @pytest.mark.parametrize("combined,expected", [
        (0.0, "none"),
        (0.5, "none"),
        (0.6, "within_72_hours"),
        (0.7, "within_72_hours"),
        (1.6, "immediate"),
        (2.0, "immediate"),
    ])
    def test_levels(self, combined, expected):
        from poolbalance.services.chlorine import shock_level
        assert shock_level(combined) == expected


class TestBreakpointChlorination:

    def test_no_shock_below_threshold(self):
        from poolbalance.services.chlorine import breakpoint_chlorination
        result = breakpoint_chlorination(1.0, 1.5, 10000, product("liquid_12_5"))

        assert result.combined_chlorine == pytest.approx(0.5)
        assert result.breakpoint_target == pytest.approx(5.0)
        assert result.ppm_needed == pytest.approx(4.0)
        assert result.level == "none"
        assert not result.shock_needed
        assert result.recommendation.startswith("NO")

    def test_dose_to_breakpoint(self):
        from poolbalance.services.chlorine import breakpoint_chlorination
        result = breakpoint_chlorination(1.0, 1.5, 10000, product("liquid_12_5"))

        # 4 ppm x 10,000 gal x 0.0834 / 10,000 / 0.125
        assert result.dose_lbs == pytest.approx(2.6688)
        assert result.dose_text == "Dose approximately 1/4 gallon (exact is 34 fl. oz)"

    def test_within_72_hours(self):
        from poolbalance.services.chlorine import breakpoint_chlorination
        result = breakpoint_chlorination(1.0, 1.7, 10000, product("liquid_12_5"))

        assert result.level == "within_72_hours"
        assert result.shock_needed
        assert "within 72 hours" in result.recommendation

    def test_immediate(self):
        from poolbalance.services.chlorine import breakpoint_chlorination
        result = breakpoint_chlorination(1.0, 3.0, 10000, product("cal_hypo_73"))

        assert result.level == "immediate"
        assert result.recommendation.startswith("YES - Immediate")
        assert result.ppm_needed == pytest.approx(19.0)

    def test_no_combined_chlorine_needs_no_dose(self):
        from poolbalance.services.chlorine import breakpoint_chlorination
        result = breakpoint_chlorination(2.0, 2.0, 10000, product("liquid_12_5"))

        assert result.combined_chlorine == 0
        assert result.dose_lbs == 0
        assert result.dose_text == ""

    @pytest.mark.parametrize("free,total,combined,expected", [
        (5.0, 5.6, 0.6, "within_72_hours"),
        (0.8, 1.4, 0.6, "within_72_hours"),
        (1.1, 1.7, 0.6, "within_72_hours"),
        (0.1, 1.7, 1.6, "immediate"),
        (1.0, 1.5, 0.5, "none"),
    ])
    def test_level_agrees_with_reported_combined(self, free, total, combined, expected):
        from poolbalance.services.chlorine import breakpoint_chlorination, shock_level
        result = breakpoint_chlorination(free, total, 20000, product("liquid_12_5"))

        assert result.combined_chlorine == combined
        assert result.level == expected
        assert shock_level(result.combined_chlorine) == result.level

    def test_total_below_free_is_clamped(self):
        from poolbalance.services.chlorine import breakpoint_chlorination
        result = breakpoint_chlorination(3.0, 2.0, 10000, product("liquid_12_5"))
        assert result.combined_chlorine == 0


class TestWeeklyChlorineDose:

    def test_summer_liquid_dose(self):
        from poolbalance.services.chlorine import weekly_chlorine_dose
        dose = weekly_chlorine_dose(2.0, 50, 10000, product("liquid_12_5"), month=7)

        assert dose.min_fc == pytest.approx(2.5)
        assert dose.loss_factor == 3.0
        assert dose.uv_loss == pytest.approx(18.0)
        assert dose.to_be_dosed == pytest.approx(18.5)
        assert dose.unit == "gal"
        assert dose.amount == pytest.approx(1.5417, abs=0.001)
        assert dose.text == "1.54 gal (197 fl oz) of liquid chlorine (12.5%)"

    def test_winter_cal_hypo_dose(self):
        from poolbalance.services.chlorine import weekly_chlorine_dose
        dose = weekly_chlorine_dose(0.0, 0, 10000, product("cal_hypo_73"), month=12)

        assert dose.loss_factor == 1.5
        assert dose.amount == pytest.approx(18.0)
        assert dose.unit == "oz"
        assert dose.text == "1 lb 2.00 oz of granular calcium hypochlorite (73%)"

    def test_enough_chlorine_means_no_dose(self):
        from poolbalance.services.chlorine import weekly_chlorine_dose
        dose = weekly_chlorine_dose(30.0, 50, 10000, product("liquid_12_5"), month=7)

        assert dose.to_be_dosed == 0
        assert dose.text is None

    def test_uv_loss_by_season(self):
        from poolbalance.services.chlorine import uv_loss_factor
        assert uv_loss_factor(1) == 1.5
        assert uv_loss_factor(3) == 2.0
        assert uv_loss_factor(5) == 2.5
        assert uv_loss_factor(8) == 3.0
        assert uv_loss_factor(10) == 2.5

    def test_invalid_month(self):
        from poolbalance.services.chlorine import uv_loss_factor
        with pytest.raises(ValueError):
            uv_loss_factor(13)


class TestChlorineDoseTable:

    def test_rows_from_cya_floor_to_code_max(self):
        from poolbalance.services.standards import ParameterRange
        from poolbalance.services.chlorine import chlorine_dose_table
        fc_range = ParameterRange(1.0, 5.0, cya_ratio=0.05)
        table = chlorine_dose_table(3.0, 40, 10000, fc_range, product("liquid_12_5"))

        # CYA 40 x 5% = 2.0 ppm raises the 1.0 ppm code minimum
        assert table.min_fc == pytest.approx(2.0)
        assert table.max_fc == 5.0
        assert [r.target_fc for r in table.rows] == [2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0]

    def test_targets_at_or_below_current_need_nothing(self):
        from poolbalance.services.standards import ParameterRange
        from poolbalance.services.chlorine import chlorine_dose_table
        fc_range = ParameterRange(1.0, 5.0, cya_ratio=0.05)
        table = chlorine_dose_table(3.0, 40, 10000, fc_range, product("liquid_12_5"))

        for row in table.rows[:3]:
            assert row.dose_lbs == 0
            assert row.dose_text is None
        assert table.rows[-1].dose_lbs == pytest.approx(1.3344)

    def test_cya_floor_above_max_gives_empty_table(self):
        from poolbalance.services.standards import ParameterRange
        from poolbalance.services.chlorine import chlorine_dose_table
        fc_range = ParameterRange(1.0, 5.0, cya_ratio=0.05)
        table = chlorine_dose_table(0.0, 200, 10000, fc_range, product("liquid_12_5"))
        assert table.rows == []


class TestDoseFormatting:

    @pytest.mark.parametrize("value,unit,expected", [
        (1.5, "gallons", "1 1/2 gallons"),
        (0.25, "lb", "1/4 lb"),
        (2.0, "gallons", "2 gallons"),
        (0.01, "lb", "0 lb"),
        (0.03125, "lb", "1/16 lb"),
    ])
    def test_mixed_fraction(self, value, unit, expected):
        from poolbalance.services.chlorine import to_mixed_fraction
        assert to_mixed_fraction(value, unit) == expected

    def test_liquid_pool(self):
        from poolbalance.services.chlorine import format_chlorine_dose
        assert format_chlorine_dose(20, "pool", "liquid") == "Dose 2 gallons"
        assert format_chlorine_dose(10, "pool", "liquid") == "Dose 1 gallon"

    def test_liquid_spa_in_fl_oz(self):
        from poolbalance.services.chlorine import format_chlorine_dose
        assert format_chlorine_dose(1, "spa", "liquid") == "Dose 12.8 fl oz"

    def test_cal_hypo(self):
        from poolbalance.services.chlorine import format_chlorine_dose
        assert format_chlorine_dose(0.5, "pool", "cal-hypo") == "Dose approximately 1/2 lb (exact is 8 oz)"
        assert format_chlorine_dose(1.25, "spa", "cal-hypo") == "Dose 1 lb 4.00 oz"
