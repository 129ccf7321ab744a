"""
Pool Balance LSI Test Suite

Tests for the Langelier Saturation Index:
- Ceiling-bucket factor lookups
- Cyanurate alkalinity correction
- Six-band status classification
- Scale view colour bands
"""

import pytest
import sys
import os

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class TestFactorLookup:
    """Tests for the step-table lookup."""

    def test_exact_threshold_uses_that_bucket(self):
        from poolbalance.services.lsi import lookup_factor, ALKALINITY_FACTORS
        assert lookup_factor(75, ALKALINITY_FACTORS) == 1.9

    def test_just_above_threshold_uses_next_bucket(self):
        from poolbalance.services.lsi import lookup_factor, ALKALINITY_FACTORS
        assert lookup_factor(76, ALKALINITY_FACTORS) == 2.0

    def test_below_first_threshold(self):
        from poolbalance.services.lsi import lookup_factor, CALCIUM_FACTORS
        assert lookup_factor(0, CALCIUM_FACTORS) == 0.3

    def test_above_all_thresholds_uses_last_factor(self):
        from poolbalance.services.lsi import lookup_factor, ALKALINITY_FACTORS, CALCIUM_FACTORS
        assert lookup_factor(5000, ALKALINITY_FACTORS) == 3.0
        assert lookup_factor(5000, CALCIUM_FACTORS) == 2.6

    def test_temperature_edges(self):
        from poolbalance.services.lsi import lookup_factor, TEMPERATURE_FACTORS
        assert lookup_factor(32, TEMPERATURE_FACTORS) == 0.1
        assert lookup_factor(77, TEMPERATURE_FACTORS) == 0.7
        assert lookup_factor(140, TEMPERATURE_FACTORS) == 1.0

    def test_tds_factor(self):
        from poolbalance.services.lsi import tds_factor
        assert tds_factor(800) == 12.1
        assert tds_factor(801) == 12.2
        assert tds_factor(1000) == 12.2
        assert tds_factor(6000) == 12.5


class TestCorrectedAlkalinity:

    def test_subtracts_a_third_of_cya(self):
        from poolbalance.services.lsi import corrected_alkalinity
        assert corrected_alkalinity(90, 30) == pytest.approx(80)

    def test_never_negative(self):
        from poolbalance.services.lsi import corrected_alkalinity
        assert corrected_alkalinity(10, 60) == 0.0


class TestLSICalculation:
    """Tests for the full LSI computation."""

    def test_worked_example_is_balanced(self):
        from poolbalance.services.lsi import calculate_lsi_factors, classify_lsi
        # Corrected TA 63.3 -> 1.9, CH 300 -> 2.1, 77F -> 0.7, TDS 1000 -> 12.2
        factors = calculate_lsi_factors(ph=7.6, temp_f=77, calcium=300, alkalinity=80, cya=50, tds=1000)

        assert factors.alkalinity_factor == 1.9
        assert factors.calcium_factor == 2.1
        assert factors.temperature_factor == 0.7
        assert factors.tds_factor == 12.2
        assert factors.lsi == pytest.approx(0.1)
        assert classify_lsi(factors.lsi) == "Balanced"

    def test_cya_changes_alkalinity_bucket(self):
        from poolbalance.services.lsi import calculate_lsi_factors
        without = calculate_lsi_factors(7.5, 80, 300, 80, cya=0)
        with_cya = calculate_lsi_factors(7.5, 80, 300, 80, cya=50)

        assert without.alkalinity_factor == 2.0
        assert with_cya.alkalinity_factor == 1.9
        assert with_cya.lsi < without.lsi

    def test_compute_lsi_from_reading(self):
        from poolbalance.services.reading import WaterReading
        from poolbalance.services.lsi import compute_lsi
        reading = WaterReading(
            ph=7.6, free_chlorine=3, alkalinity=80, calcium_hardness=300,
            cyanuric_acid=50, temperature_f=77, pool_volume_gallons=20000,
        )
        result = compute_lsi(reading)

        assert result.lsi == pytest.approx(0.1)
        assert result.status == "Balanced"
        assert result.factors.corrected_alkalinity == pytest.approx(63.333, abs=0.01)

    def test_cya_override(self):
        from poolbalance.services.reading import WaterReading
        from poolbalance.services.lsi import compute_lsi
        reading = WaterReading(
            ph=7.6, free_chlorine=3, alkalinity=80, calcium_hardness=300,
            cyanuric_acid=0, temperature_f=77, pool_volume_gallons=20000,
        )
        assert compute_lsi(reading, cya_override=50).lsi == pytest.approx(0.1)
        assert compute_lsi(reading).lsi == pytest.approx(0.2)


class TestLSIClassification:
    """Six-band boundaries."""

    @pytest.mark.parametrize("lsi,expected", [
        (-0.51, "Very Corrosive"),
        (-0.5, "Corrosive"),
        (-0.21, "Corrosive"),
        (-0.2, "Slightly Corrosive"),
        (-0.06, "Slightly Corrosive"),
        (-0.05, "Balanced"),
        (0.0, "Balanced"),
        (0.3, "Balanced"),
        (0.31, "Slightly Scale Forming"),
        (0.5, "Slightly Scale Forming"),
        (0.51, "Scale Forming"),
    ])
    def test_bands(self, lsi, expected):
        from poolbalance.services.lsi import classify_lsi
        assert classify_lsi(lsi) == expected


class TestLSIScaleBand:
    """Display bands are independent of the status classification."""

    def test_bands(self):
        from poolbalance.services.lsi import lsi_scale_band
        assert lsi_scale_band(-0.31).label == "Corrosive"
        assert lsi_scale_band(-0.3).label == "Caution"
        assert lsi_scale_band(-0.01).label == "Caution"
        assert lsi_scale_band(0.0).label == "Balanced"
        assert lsi_scale_band(0.3).label == "Balanced"
        assert lsi_scale_band(0.31).label == "Scaling"

    def test_colors(self):
        from poolbalance.services.lsi import lsi_scale_band
        assert lsi_scale_band(-0.5).color == "#d32f2f"
        assert lsi_scale_band(0.1).color == "#388e3c"

    def test_position_is_clamped(self):
        from poolbalance.services.lsi import lsi_scale_band
        assert lsi_scale_band(0.0).position_percent == pytest.approx(50.0)
        assert lsi_scale_band(-2.0).position_percent == 0.0
        assert lsi_scale_band(2.0).position_percent == 100.0

    def test_differs_from_status(self):
        from poolbalance.services.lsi import lsi_scale_band, classify_lsi
        # -0.04 is Balanced by status but on the caution side of the scale
        assert classify_lsi(-0.04) == "Balanced"
        assert lsi_scale_band(-0.04).label == "Caution"


class TestLSIBandEdgesFromReadings:
    """Readings whose factor sums land exactly on a band edge."""

    @pytest.mark.parametrize("ph,calcium,expected_lsi,expected", [
        (7.0, 300, -0.5, "Corrosive"),
        (7.3, 300, -0.2, "Slightly Corrosive"),
        (7.45, 300, -0.05, "Balanced"),
        (7.8, 300, 0.3, "Balanced"),
        (7.7, 400, 0.3, "Balanced"),
        (7.9, 400, 0.5, "Slightly Scale Forming"),
    ])
    def test_edge_readings(self, ph, calcium, expected_lsi, expected):
        from poolbalance.services.lsi import calculate_lsi_factors, classify_lsi
        # TA 80 / CYA 50 -> 1.9, 77F -> 0.7, TDS 1000 -> 12.2
        factors = calculate_lsi_factors(ph=ph, temp_f=77, calcium=calcium, alkalinity=80, cya=50, tds=1000)

        assert factors.lsi == expected_lsi
        assert classify_lsi(factors.lsi) == expected

    def test_sweep_matches_rounded_classification(self):
        from poolbalance.services.lsi import calculate_lsi_factors, classify_lsi
        for calcium in (300, 400):
            for tenths in range(64, 85):
                ph = tenths / 10
                lsi = calculate_lsi_factors(ph, 77, calcium, 80, cya=50, tds=1000).lsi
                assert lsi == round(lsi, 2)
                assert classify_lsi(lsi) == classify_lsi(round(lsi, 6))

    def test_scaling_note_not_added_at_exactly_half(self):
        from poolbalance.services.reading import WaterReading
        from poolbalance.services.standards import get_golden_numbers
        from poolbalance.services.water_balance import plan_dosing, SCALING_NOTE
        reading = WaterReading(
            ph=7.9, free_chlorine=3, alkalinity=80, calcium_hardness=400,
            cyanuric_acid=50, temperature_f=77, pool_volume_gallons=10000,
        )
        plan = plan_dosing(reading, get_golden_numbers("pool"))

        assert plan.lsi == 0.5
        assert SCALING_NOTE not in plan.notes
