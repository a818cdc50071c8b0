# reportflow/services/field_guidance.py
"""
Field guidance for missing-information responses.

When a narrative lacks report fields, the response tells the officer which
fields are missing, grouped by kind, with an example and quick-fill phrases
per field, and how complete the report looks overall.
"""

from typing import Any, Dict, Iterable, List, Optional
from dataclasses import dataclass, asdict
import logging

from reportflow.prompts import field_prompts

logger = logging.getLogger(__name__)


@dataclass
class ValidationConfidence:
    """How complete a report is, given present and missing fields"""
    score: float
    level: str
    message: str
    color: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class FieldCategoryMatcher:
    """
    Maps report field names (e.g. "suspectDescription") to a field category.

    Matching is by substring on the lower-cased name: the first keyword in
    FIELD_KEYWORDS that occurs wins, then the override table gets the final say.
    """

    def __init__(
        self,
        keywords: Optional[Dict[str, str]] = None,
        overrides: Optional[list] = None,
        default: str = field_prompts.DEFAULT_FIELD_CATEGORY
    ):
        self.keywords = keywords if keywords is not None else field_prompts.FIELD_KEYWORDS
        self.overrides = overrides if overrides is not None else field_prompts.FIELD_CATEGORY_OVERRIDES
        self.default = default

    def match(self, field: str) -> str:
        field_lower = field.lower().strip()

        category = self.default
        for keyword, mapped in self.keywords.items():
            if keyword in field_lower:
                category = mapped
                break

        for triggers, mapped in self.overrides:
            if any(trigger in field_lower for trigger in triggers):
                category = mapped
                break

        return category


class FieldGuidanceService:
    """Builds examples, quick-fill options and confidence for missing fields"""

    # Confidence thresholds
    COMPLETE_THRESHOLD = 0.9
    HIGH_THRESHOLD = 0.7
    MEDIUM_THRESHOLD = 0.4

    def __init__(
        self,
        matcher: Optional[FieldCategoryMatcher] = None,
        quick_fill_matcher: Optional[FieldCategoryMatcher] = None
    ):
        self.matcher = matcher or FieldCategoryMatcher()
        self.quick_fill_matcher = quick_fill_matcher or FieldCategoryMatcher(
            overrides=field_prompts.QUICK_FILL_CATEGORY_OVERRIDES
        )
        self.logger = logger

    def resolve_field_category(self, field: str) -> str:
        return self.matcher.match(field)

    def get_field_examples(self, field: str, offense_category: Optional[str]) -> str:
        """Example text for field in the given offense category, or a generic prompt"""
        category = self.resolve_field_category(field)
        example = field_prompts.FIELD_EXAMPLES.get(category, {}).get(offense_category or "")
        if example:
            return example
        return field_prompts.FIELD_EXAMPLE_FALLBACK.format(field=field.lower())

    def get_quick_fill_options(self, field: str) -> List[str]:
        category = self.quick_fill_matcher.match(field)
        options = field_prompts.QUICK_FILL_OPTIONS.get(category)
        return list(options) if options else list(field_prompts.QUICK_FILL_FALLBACK)

    def get_contextual_fields(self, offense_category: Optional[str]) -> List[str]:
        return list(field_prompts.CONTEXTUAL_FIELDS.get(offense_category or "", []))

    def combine_field_examples(
        self,
        missing_fields: Iterable[str],
        offense_category: Optional[str] = None
    ) -> Dict[str, str]:
        """
        One example per missing field.

        Universal fields (date, time, location) always use their canned examples.
        """
        examples = {}
        for field in missing_fields:
            definition = field_prompts.UNIVERSAL_FIELD_DEFINITIONS.get(field)
            if definition:
                examples[field] = definition['examples']
            else:
                examples[field] = self.get_field_examples(field, offense_category)
        return examples

    def categorize_missing_fields(self, missing_fields: Iterable[str]) -> Dict[str, List[str]]:
        """Group fields into personal/incident/property/evidence/administrative/other"""
        categorized: Dict[str, List[str]] = {}

        for field in missing_fields:
            field_lower = field.lower()
            group = "other"
            for name, keywords in field_prompts.MISSING_FIELD_GROUPS.items():
                if any(keyword in field_lower for keyword in keywords):
                    group = name
                    break
            categorized.setdefault(group, []).append(field)

        return categorized

    def enhance_categorized_fields(
        self,
        categorized: Dict[str, List[str]],
        required_fields: Optional[List[str]] = None,
        critical_fields: Optional[List[str]] = None,
        offense_category: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Add offense-specific groups and a completion order to categorized fields.

        Required fields that are also critical are "critical", the remaining
        required fields are "important". Without required_fields the critical
        fields stand in for them. completion_priority lists critical, then
        important, then the "other" group.
        """
        critical_set = set(critical_fields or [])
        required = list(required_fields) if required_fields is not None else list(critical_fields or [])
        critical = [f for f in required if f in critical_set]
        important = [f for f in required if f not in critical_set]

        enhanced: Dict[str, Any] = {group: list(fields) for group, fields in categorized.items()}
        enhanced['offense_specific'] = {
            'critical': critical,
            'important': important,
            'contextual': self.get_contextual_fields(offense_category),
        }
        enhanced['completion_priority'] = critical + important + list(categorized.get('other', []))
        return enhanced

    def missing_universal_fields(self, present_fields: Iterable[str]) -> List[str]:
        present = set(present_fields)
        return [f for f in field_prompts.UNIVERSAL_REQUIRED_FIELDS if f not in present]

    def calculate_validation_confidence(
        self,
        present_fields: List[str],
        missing_fields: List[str],
        critical_fields: Optional[List[str]] = None
    ) -> ValidationConfidence:
        """
        Score = mean of the overall completion ratio and the critical-field ratio.

        Without critical fields the critical ratio counts as 1.
        """
        total = len(present_fields) + len(missing_fields)
        if total == 0:
            message, color = field_prompts.CONFIDENCE_MESSAGES['LOW']
            return ValidationConfidence(
                score=0.0, level='LOW', message=field_prompts.NO_FIELDS_MESSAGE, color=color
            )

        completion_ratio = len(present_fields) / total

        critical_fields = critical_fields or []
        if critical_fields:
            present = set(present_fields)
            critical_present = sum(1 for f in critical_fields if f in present)
            critical_score = critical_present / len(critical_fields)
        else:
            critical_score = 1.0

        score = (completion_ratio + critical_score) / 2

        if score >= self.COMPLETE_THRESHOLD and not missing_fields:
            level = 'COMPLETE'
        elif score >= self.HIGH_THRESHOLD:
            level = 'HIGH'
        elif score >= self.MEDIUM_THRESHOLD:
            level = 'MEDIUM'
        else:
            level = 'LOW'

        message, color = field_prompts.CONFIDENCE_MESSAGES[level]
        return ValidationConfidence(score=score, level=level, message=message, color=color)
