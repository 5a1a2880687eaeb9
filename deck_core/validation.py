from __future__ import annotations

from dataclasses import dataclass
from typing import List, Set

from .errors import ConfigValidationError
from .models import DeckConfig, Page, Position


@dataclass
class ValidationIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def collect_issues(config: DeckConfig) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if not str(config.version or "").strip():
        issues.append(ValidationIssue("version", "config version cannot be empty"))
    if not config.profiles:
        issues.append(ValidationIssue("profiles", "at least one profile must be defined"))

    seen_names: Set[str] = set()
    for p_index, profile in enumerate(config.profiles):
        p_path = f"profiles[{p_index}]"
        if not profile.name.strip():
            issues.append(ValidationIssue(f"{p_path}.name", "profile name cannot be empty"))
        elif profile.name in seen_names:
            issues.append(ValidationIssue(f"{p_path}.name", f"duplicate profile name '{profile.name}'"))
        seen_names.add(profile.name)
        if not profile.pages:
            issues.append(ValidationIssue(f"{p_path}.pages", "profile must have at least one page"))
        for g_index, page in enumerate(profile.pages):
            issues.extend(page_issues(page, f"{p_path}.pages[{g_index}]"))
    return issues


def page_issues(page: Page, path: str = "page") -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if not page.name.strip():
        issues.append(ValidationIssue(f"{path}.name", "page name cannot be empty"))
    if page.rows < 1 or page.cols < 1:
        issues.append(ValidationIssue(path, "page dimensions must be greater than 0"))
        return issues
    occupied: Set[Position] = set()
    for b_index, button in enumerate(page.buttons):
        b_path = f"{path}.buttons[{b_index}]"
        if not page.contains(button.position):
            issues.append(
                ValidationIssue(
                    b_path,
                    f"button position {button.position} exceeds page dimensions ({page.rows}, {page.cols})",
                )
            )
        if button.position in occupied:
            issues.append(ValidationIssue(b_path, f"position {button.position} is already occupied"))
        occupied.add(button.position)
        if not button.label.strip():
            issues.append(ValidationIssue(f"{b_path}.label", "button label cannot be empty"))
        if not str(button.action_type or "").strip():
            issues.append(ValidationIssue(f"{b_path}.action_type", "button action type cannot be empty"))
    return issues


def validate_config(config: DeckConfig) -> DeckConfig:
    issues = collect_issues(config)
    if issues:
        raise ConfigValidationError("; ".join(str(issue) for issue in issues))
    return config
