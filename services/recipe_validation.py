"""
Mealwise Recipe Validation
Sanity checks for imported recipes before they are saved
"""

import logging
from typing import Dict, List, Any
from dataclasses import dataclass, field, asdict

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    field: str
    expected: Any
    actual: Any
    severity: str  # error, warning or info
    message: str


@dataclass
class ValidationResult:
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "issues": [asdict(issue) for issue in self.issues],
            "suggestions": self.suggestions,
        }


def validate_recipe(data: Dict[str, Any]) -> ValidationResult:
    """
    Validate an imported recipe

    Missing title, ingredients or instructions are errors; the recipe is
    valid when there are no error-severity issues.
    """
    issues: List[ValidationIssue] = []
    suggestions: List[str] = []

    title = (data.get("title") or "").strip()
    if len(title) < 3:
        issues.append(ValidationIssue(
            field="title",
            expected="Non-empty title",
            actual=title,
            severity="error",
            message="Recipe title is too short or missing",
        ))
        suggestions.append("Recipe should have a descriptive title")

    ingredients = data.get("ingredients") or []
    if not ingredients:
        issues.append(ValidationIssue(
            field="ingredients",
            expected="At least 1 ingredient",
            actual="0 ingredients",
            severity="error",
            message="No ingredients found",
        ))
        suggestions.append("Recipe should have ingredients")

    instructions = data.get("instructions") or []
    if not instructions:
        issues.append(ValidationIssue(
            field="instructions",
            expected="At least 1 instruction",
            actual="0 instructions",
            severity="error",
            message="No instructions found",
        ))
        suggestions.append("Recipe should have cooking instructions")

    if "fallback" in (data.get("tags") or []):
        issues.append(ValidationIssue(
            field="source_url",
            expected="Scraped recipe",
            actual="Fallback recipe",
            severity="warning",
            message="Recipe page could not be scraped; placeholder data was used",
        ))
        suggestions.append("Review every field before saving")

    if not data.get("servings"):
        issues.append(ValidationIssue(
            field="servings",
            expected="Number of servings",
            actual=data.get("servings"),
            severity="info",
            message="Servings not found",
        ))

    is_valid = not any(issue.severity == "error" for issue in issues)
    if not is_valid:
        logger.info(f"Recipe '{title}' failed validation with {len(issues)} issues")

    return ValidationResult(is_valid=is_valid, issues=issues, suggestions=suggestions)
