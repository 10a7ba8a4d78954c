"""
Static department rule table.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .models import CategoryRule, FileCategory

# Order matters: equal scores resolve to the earlier rule.
CATEGORIZATION_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        category=FileCategory.ESTIMATING,
        keywords=(
            "estimate", "bid", "quote", "proposal", "cost", "pricing", "takeoff", "quantity",
            "measure", "scope", "materials", "labor", "overhead", "markup", "tender",
        ),
        extensions=(".xlsx", ".xls", ".csv", ".ods", ".xlsm"),
        path_patterns=("estimat", "bid", "quote", "proposal", "pricing", "tender"),
        priority=10,
    ),
    CategoryRule(
        category=FileCategory.OPERATIONS,
        keywords=(
            "operation", "project", "schedule", "timeline", "workflow", "process", "procedure",
            "execution", "implementation", "deployment", "construction", "field", "site", "progress",
        ),
        extensions=(".pdf", ".docx", ".doc", ".ppt", ".pptx"),
        path_patterns=("operation", "project", "schedule", "workflow", "execution", "field", "site"),
        priority=9,
    ),
    CategoryRule(
        category=FileCategory.ACCOUNTING,
        keywords=(
            "invoice", "receipt", "expense", "payment", "billing", "account", "ledger", "journal",
            "accounts", "payable", "receivable", "reconciliation", "bookkeeping", "transaction",
        ),
        extensions=(".pdf", ".xlsx", ".xls", ".csv"),
        path_patterns=("accounting", "invoice", "billing", "expense", "payable", "receivable"),
        priority=10,
    ),
    CategoryRule(
        category=FileCategory.FINANCE,
        keywords=(
            "budget", "financial", "profit", "loss", "revenue", "cash", "flow", "statement",
            "forecast", "analysis", "report", "investment", "capital", "funding",
        ),
        extensions=(".xlsx", ".xls", ".pdf", ".csv"),
        path_patterns=("finance", "budget", "financial", "forecast", "investment"),
        priority=9,
    ),
    CategoryRule(
        category=FileCategory.COMPANY_LAYOUT,
        keywords=(
            "layout", "blueprint", "design", "plan", "drawing", "schematic", "diagram",
            "architecture", "structure", "building", "floor", "elevation", "section", "detail",
        ),
        extensions=(".dwg", ".dxf", ".pdf", ".jpg", ".png", ".tiff", ".bmp"),
        path_patterns=("layout", "blueprint", "design", "drawing", "plan", "architecture"),
        priority=9,
    ),
    CategoryRule(
        category=FileCategory.OFFICE,
        keywords=(
            "memo", "policy", "procedure", "handbook", "manual", "template", "form", "admin",
            "hr", "human", "resources", "employee", "staff", "meeting", "minutes",
        ),
        extensions=(".docx", ".doc", ".pdf", ".txt", ".rtf"),
        path_patterns=("office", "admin", "policy", "template", "hr", "human", "employee"),
        priority=7,
    ),
)


def rule_for(
    category: FileCategory, rules: Iterable[CategoryRule] = CATEGORIZATION_RULES
) -> Optional[CategoryRule]:
    """Return the rule defined for a category, if any."""
    for rule in rules:
        if rule.category == category:
            return rule
    return None


def get_category_keywords(
    category: FileCategory, rules: Iterable[CategoryRule] = CATEGORIZATION_RULES
) -> list[str]:
    """Return the keyword list of a category's rule."""
    rule = rule_for(category, rules)
    return list(rule.keywords) if rule else []
