# tests/services/test_field_guidance.py
"""
Unit tests for field guidance: category matching, examples, grouping and confidence.
"""
import pytest

from reportflow.services.field_guidance import FieldCategoryMatcher, FieldGuidanceService


@pytest.fixture
def guidance():
    return FieldGuidanceService()


class TestFieldCategoryMatcher:
    """Test field name -> category resolution"""

    @pytest.mark.parametrize("field,category", [
        ("victimName", "victim"),
        ("suspectDescription", "offender"),
        ("weaponType", "weapon"),
        ("locationDescription", "location"),
        ("incidentDate", "time"),
        ("custodyStatus", "arrest"),
        ("drugQuantity", "substance"),
        ("somethingElse", "victim"),
    ])
    def test_match(self, field, category):
        assert FieldCategoryMatcher().match(field) == category

    def test_override_beats_first_keyword(self):
        """'stolen' maps to property, but amount-like names are substance"""
        assert FieldCategoryMatcher().match("stolenAmount") == "substance"

    def test_custom_tables(self):
        matcher = FieldCategoryMatcher(keywords={"foo": "bar"}, overrides=[], default="baz")
        assert matcher.match("myFooField") == "bar"
        assert matcher.match("other") == "baz"


class TestFieldExamples:
    """Test examples and quick-fill options"""

    def test_example_for_known_category(self, guidance):
        assert guidance.get_field_examples("suspectDescription", "Robbery") == \
            "Armed suspect demanding property from victim"

    def test_example_fallback(self, guidance):
        """Unknown offense category falls back to a generic prompt"""
        assert guidance.get_field_examples("suspectDescription", "Jaywalking") == \
            "Provide specific details about suspectdescription"
        assert guidance.get_field_examples("suspectDescription", None) == \
            "Provide specific details about suspectdescription"

    def test_quick_fill_options(self, guidance):
        options = guidance.get_quick_fill_options("weaponUsed")
        assert "Firearm displayed but not discharged" in options
        assert len(options) == 4

    def test_quick_fill_uses_narrower_overrides(self, guidance):
        """A "context" field gets circumstance examples but location quick-fill options"""
        assert guidance.resolve_field_category("locationContext") == "circumstances"
        assert guidance.get_quick_fill_options("locationContext") == \
            guidance.get_quick_fill_options("locationDescription")
        assert "Public street or roadway" in guidance.get_quick_fill_options("locationContext")

    def test_quick_fill_returns_copy(self, guidance):
        guidance.get_quick_fill_options("weaponUsed").clear()
        assert len(guidance.get_quick_fill_options("weaponUsed")) == 4

    def test_contextual_fields(self, guidance):
        assert "quantity" in guidance.get_contextual_fields("Drugs")
        assert guidance.get_contextual_fields("Unknown") == []
        assert guidance.get_contextual_fields(None) == []

    def test_combine_uses_universal_examples(self, guidance):
        """Universal fields get their canned examples regardless of category"""
        examples = guidance.combine_field_examples(["incidentTime", "weaponType"], "Robbery")
        assert examples["incidentTime"].startswith("14:30")
        assert examples["weaponType"] == "Knife displayed during demand for property"


class TestGrouping:
    """Test missing-field grouping"""

    def test_categorize_missing_fields(self, guidance):
        grouped = guidance.categorize_missing_fields(
            ["victimName", "incidentDate", "propertyValue", "weaponType", "reportNumber", "xyz"]
        )
        assert grouped == {
            "personal": ["victimName"],
            "incident": ["incidentDate"],
            "property": ["propertyValue"],
            "evidence": ["weaponType"],
            "administrative": ["reportNumber"],
            "other": ["xyz"],
        }

    def test_enhance_categorized_fields(self, guidance):
        """Critical, then important, then ungrouped fields set the completion order"""
        categorized = {"personal": ["victimName"], "other": ["xyz", "abc"]}

        enhanced = guidance.enhance_categorized_fields(
            categorized,
            required_fields=["weaponDisplay", "victimName", "threats"],
            critical_fields=["victimName"],
            offense_category="Robbery",
        )

        assert enhanced["personal"] == ["victimName"]
        assert enhanced["other"] == ["xyz", "abc"]
        assert enhanced["offense_specific"] == {
            "critical": ["victimName"],
            "important": ["weaponDisplay", "threats"],
            "contextual": ["weaponDisplay", "threats", "escapeRoute", "witnesses", "propertyRecovered"],
        }
        assert enhanced["completion_priority"] == ["victimName", "weaponDisplay", "threats", "xyz", "abc"]

    def test_enhance_without_required_fields(self, guidance):
        """Critical fields stand in for required fields; unknown category has no context"""
        enhanced = guidance.enhance_categorized_fields({}, critical_fields=["incidentDate"])

        assert enhanced["offense_specific"] == {
            "critical": ["incidentDate"],
            "important": [],
            "contextual": [],
        }
        assert enhanced["completion_priority"] == ["incidentDate"]

    def test_enhance_does_not_mutate_input(self, guidance):
        categorized = {"other": ["xyz"]}
        guidance.enhance_categorized_fields(categorized, ["a"], ["a"])
        assert categorized == {"other": ["xyz"]}

    def test_missing_universal_fields(self, guidance):
        assert guidance.missing_universal_fields(["incidentDate"]) == [
            "incidentTime", "locationDescription"
        ]
        assert guidance.missing_universal_fields(
            ["incidentDate", "incidentTime", "locationDescription"]
        ) == []


class TestConfidence:
    """Test validation confidence scoring"""

    def test_complete(self, guidance):
        result = guidance.calculate_validation_confidence(["a", "b"], [])
        assert result.score == 1.0
        assert result.level == "COMPLETE"
        assert result.color == "green"

    def test_high(self, guidance):
        result = guidance.calculate_validation_confidence(["a", "b", "c"], ["d"])
        assert result.score == pytest.approx(0.875)
        assert result.level == "HIGH"

    def test_high_score_with_missing_is_not_complete(self, guidance):
        """A score above the complete threshold still needs nothing missing"""
        present = [f"f{i}" for i in range(9)]
        result = guidance.calculate_validation_confidence(present, ["f9"], ["f0"])
        assert result.score == pytest.approx(0.95)
        assert result.level == "HIGH"

    def test_medium(self, guidance):
        result = guidance.calculate_validation_confidence(["a", "b"], ["c", "d"], ["a", "c"])
        assert result.score == pytest.approx(0.5)
        assert result.level == "MEDIUM"
        assert result.color == "orange"

    def test_low(self, guidance):
        result = guidance.calculate_validation_confidence(["a"], ["b"], ["b"])
        assert result.score == pytest.approx(0.25)
        assert result.level == "LOW"
        assert result.message == "Critical information missing"

    def test_no_fields(self, guidance):
        result = guidance.calculate_validation_confidence([], [])
        assert result.to_dict() == {
            "score": 0.0,
            "level": "LOW",
            "message": "No fields to validate",
            "color": "red",
        }
