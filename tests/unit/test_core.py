"""
Tests for the assessment pipeline, record conversion and comparison table.
"""

import unittest

import pytest

from core import (
    assessment_from_record,
    assessment_to_record,
    build_assessment,
    build_series_from_history,
    calculate_energy,
    create_comparison_table,
)
from shared_models import FatMethod, Gender, TmbMethod
from trends import AssessmentSeries


class TestBuildAssessment:
    """Test RawInput -> Assessment"""

    def test_bioimpedance_snapshot(self, sample_raw_input):
        assessment = build_assessment(
            sample_raw_input, "student-1", "a-1", "2024-01-10T09:00:00Z"
        )

        assert assessment.id == "a-1"
        assert assessment.fat_method is FatMethod.BIOIMPEDANCE
        assert assessment.body_fat_percent == 22.5
        assert assessment.bmi == pytest.approx(84.2 / 1.78**2)
        assert assessment.estimated_fields == (
            "metabolic_age",
            "muscle_mass_percent",
            "visceral_fat",
        )
        assert assessment.metabolic_age == 30.0
        assert assessment.muscle_mass_percent == 77.5
        assert assessment.visceral_fat == 7.0

    def test_advisory_defaults_can_be_disabled(self, sample_raw_input):
        assessment = build_assessment(
            sample_raw_input, "student-1", apply_advisory_defaults=False
        )

        assert assessment.estimated_fields == ()
        assert assessment.muscle_mass_percent is None
        assert assessment.visceral_fat is None

    def test_skinfold_snapshot_ignores_manual_value(self, skinfold_raw_input):
        assessment = build_assessment(skinfold_raw_input, "student-1")

        assert assessment.fat_method is FatMethod.SKINFOLDS
        assert assessment.body_fat_percent == pytest.approx(12.57, abs=0.01)
        assert assessment.estimated_fields == ()

    def test_identical_snapshots_give_identical_records(self, skinfold_raw_input):
        first = build_assessment(skinfold_raw_input, "student-1", "a-1", "2024-01-10")
        second = build_assessment(
            dict(skinfold_raw_input), "student-1", "a-1", "2024-01-10"
        )

        assert first == second
        assert assessment_to_record(first) == assessment_to_record(second)

    def test_generated_id_and_timestamp(self, sample_raw_input):
        first = build_assessment(sample_raw_input, "student-1")
        second = build_assessment(sample_raw_input, "student-1")

        assert first.id != second.id
        assert first.timestamp.endswith("+00:00")

    def test_unknown_inputs_never_become_zero(self):
        assessment = build_assessment({"weight": "abc", "height": ""}, "student-1")

        assert assessment.weight is None
        assert assessment.bmi is None
        assert assessment.body_fat_percent is None

    def test_energy(self):
        assessment = build_assessment(
            {"weight": "80", "height": "180", "age": "30"}, "student-1"
        )

        energy = calculate_energy(assessment)

        assert energy["bmr"] == 1780.0
        assert energy["maintenance_calories"] == 2447.5

    def test_zero_height_and_age_use_bmr_fallbacks(self):
        assessment = build_assessment(
            {"weight": "80", "height": "0", "age": "0"}, "student-1"
        )

        assert assessment.bmi is None
        assert calculate_energy(assessment)["bmr"] == 1717.5

    def test_ten_haaf_label(self):
        assessment = build_assessment(
            {"weight": "80", "height": "180", "age": "30", "gender": "male",
             "tmbMethod": "Teen Haaf"},
            "student-1",
        )

        assert assessment.tmb_method is TmbMethod.TEN_HAAF
        assert calculate_energy(assessment)["bmr"] == pytest.approx(1989.2264)


class TestRecords(unittest.TestCase):
    def test_record_fields(self):
        assessment = build_assessment(
            {"weight": "80", "gender": "female", "tmbMethod": "Harris-Benedict"},
            "student-1",
            "a-1",
            "2024-01-10T09:00:00Z",
        )
        record = assessment_to_record(assessment)

        self.assertEqual(record["fat_method"], "Bioimpedance")
        self.assertEqual(record["tmb_method"], "Harris-Benedict")
        self.assertEqual(record["gender"], "female")
        self.assertIsNone(record["height"])
        self.assertIsNone(record["girths"]["waist"])
        self.assertIsInstance(record["estimated_fields"], list)

    def test_record_is_restored(self):
        assessment = build_assessment(
            {"weight": "80", "gender": "male", "armRight": "36"},
            "student-1",
            "a-1",
            "2024-01-10T09:00:00Z",
        )
        restored = assessment_from_record(assessment_to_record(assessment))

        self.assertEqual(restored, assessment)
        self.assertIs(restored.gender, Gender.MALE)
        self.assertIs(restored.tmb_method, TmbMethod.MIFFLIN_ST_JEOR)

    def test_null_tmb_method_uses_default(self):
        record = assessment_to_record(
            build_assessment({"weight": "80"}, "student-1", "a-1", "2024-01-10T09:00:00Z")
        )
        record["tmb_method"] = None

        restored = assessment_from_record(record)

        self.assertIs(restored.tmb_method, TmbMethod.MIFFLIN_ST_JEOR)

    def test_missing_required_key(self):
        with self.assertRaises(KeyError):
            assessment_from_record({"id": "a-1", "subject_id": "s"})


class TestComparisonTable(unittest.TestCase):
    def test_empty_series(self):
        self.assertEqual(
            create_comparison_table(AssessmentSeries()),
            "No assessment data available for comparison",
        )

    def test_rows_and_changes(self):
        history = {
            "subject_id": "student-1",
            "assessments": [
                {"timestamp": "2024-02-01T09:00:00Z", "inputs": {"weight": "78"}},
                {"timestamp": "2024-01-01T09:00:00Z", "inputs": {"weight": "80"}},
            ],
        }
        table = create_comparison_table(build_series_from_history(history))
        lines = table.splitlines()

        self.assertIn("Date", lines[0])
        self.assertTrue(lines[2].startswith("| 2024-01-01"))
        self.assertTrue(lines[3].startswith("| 2024-02-01"))
        self.assertIn("Last change", table)
        self.assertIn("Total change", table)
        self.assertIn("-2.0", table)
        self.assertIn("N/A", table)

    def test_single_assessment_has_no_change_rows(self):
        history = {
            "subject_id": "student-1",
            "assessments": [
                {"timestamp": "2024-01-01T09:00:00Z", "inputs": {"weight": "80"}}
            ],
        }
        table = create_comparison_table(build_series_from_history(history))
        self.assertNotIn("Last change", table)

    def test_generated_ids(self):
        history = {
            "subject_id": "student-1",
            "assessments": [
                {"timestamp": "2024-01-01T09:00:00Z", "inputs": {}},
                {"id": "custom", "timestamp": "2024-02-01T09:00:00Z", "inputs": {}},
            ],
        }
        series = build_series_from_history(history)
        self.assertEqual([a.id for a in series.oldest_first()], ["student-1-001", "custom"])


if __name__ == "__main__":
    unittest.main()
