from __future__ import annotations

import unittest

from overdose_trends.domain.overdose_series import ColumnMapping, ColumnRole
from overdose_trends.mappers.column_inferencer import (
    REQUIRED_COLUMNS,
    fixed_schema_mapping,
    guess_column,
    guess_columns,
    merge_guess,
)


class TestGuessColumns(unittest.TestCase):
    def test_detects_roles_from_descriptive_headers(self) -> None:
        mapping = guess_columns(["Week Ending", "Substance Name", "Death Count"])

        self.assertEqual(mapping.date, "Week Ending")
        self.assertEqual(mapping.drug, "Substance Name")
        self.assertEqual(mapping.value, "Death Count")
        self.assertEqual(mapping.jurisdiction, "")

    def test_earlier_pattern_beats_earlier_field(self) -> None:
        headers = ["Reporting Period", "Month Ending Date", "Category", "Drug", "Value", "Deaths"]

        mapping = guess_columns(headers)

        self.assertEqual(mapping.date, "Month Ending Date")
        self.assertEqual(mapping.drug, "Drug")
        self.assertEqual(mapping.value, "Deaths")

    def test_matches_whole_words_only(self) -> None:
        self.assertEqual(guess_column(ColumnRole.DRUG, ["drugstore_id", "Notes"]), "")
        self.assertEqual(guess_column(ColumnRole.DATE, ["updated", "weekday"]), "")

    def test_matching_is_case_insensitive(self) -> None:
        self.assertEqual(guess_column(ColumnRole.VALUE, ["NUMBER OF DEATHS"]), "NUMBER OF DEATHS")

    def test_underscored_cdc_headers_are_recognised(self) -> None:
        headers = list(REQUIRED_COLUMNS.values())

        mapping = guess_columns(headers)

        self.assertEqual(mapping, fixed_schema_mapping())

    def test_returns_empty_mapping_when_nothing_matches(self) -> None:
        self.assertEqual(guess_columns(["a", "b", "c"]), ColumnMapping())
        self.assertEqual(guess_columns([]), ColumnMapping())


class TestMergeGuess(unittest.TestCase):
    def test_user_choices_are_never_overwritten(self) -> None:
        fields = ["Week Ending", "Substance Name", "Death Count", "Other Count"]
        current = ColumnMapping(value="Other Count")

        merged = merge_guess(current, fields)

        self.assertEqual(merged.value, "Other Count")
        self.assertEqual(merged.drug, "Substance Name")
        self.assertEqual(merged.date, "Week Ending")

    def test_roles_pointing_at_vanished_columns_are_guessed_again(self) -> None:
        current = ColumnMapping(drug="Old Drug", date="Old Date", value="Old Value")

        merged = merge_guess(current, ["Drug", "Date", "Deaths"])

        self.assertEqual(merged, ColumnMapping(drug="Drug", date="Date", value="Deaths"))

    def test_none_current_behaves_like_empty_mapping(self) -> None:
        self.assertEqual(merge_guess(None, ["drug", "date", "count"]), guess_columns(["drug", "date", "count"]))


class TestFixedSchema(unittest.TestCase):
    def test_fixed_mapping_uses_cdc_headers(self) -> None:
        mapping = fixed_schema_mapping()

        self.assertEqual(mapping.jurisdiction, "jurisdiction_occurrence")
        self.assertEqual(mapping.drug, "drug_involved")
        self.assertEqual(mapping.date, "month_ending_date")
        self.assertEqual(mapping.value, "drug_overdose_deaths")


if __name__ == "__main__":
    unittest.main()
