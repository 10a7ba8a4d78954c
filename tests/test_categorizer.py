import pytest

from categorization import (
    CATEGORIZATION_RULES,
    CategorizationResult,
    Categorizer,
    CategoryRule,
    FileCategory,
    get_category_keywords,
    keywords_from_reason,
)


def test_budget_forecast_is_finance() -> None:
    result = Categorizer().categorize_file("Q3_Budget_Forecast.xlsx", "/Finance/2024/", "application/vnd.ms-excel")

    assert result.category is FileCategory.FINANCE
    assert result.confidence == pytest.approx((2 / 14 * 40 + 1 / 5 * 20 + 10) / 100 * 0.9)
    assert result.reason == "filename contains: budget, forecast; path pattern: finance; file type: .xlsx"


def test_unmatched_file_is_uncategorized() -> None:
    result = Categorizer().categorize_file("random.xyz", "/misc/", "")

    assert result == CategorizationResult(FileCategory.UNCATEGORIZED, 0.0, "No matching rules found")


def test_matching_is_case_insensitive() -> None:
    result = Categorizer().categorize_file("INVOICE_2024.PDF", "/Accounting/Invoices/", "application/pdf")

    assert result.category is FileCategory.ACCOUNTING
    assert result.reason == (
        "filename contains: invoice; path contains: invoice, account; "
        "path pattern: accounting, invoice; file type: .PDF"
    )


def test_equal_scores_keep_table_order() -> None:
    # .csv alone scores 0.1 for both ESTIMATING and ACCOUNTING; ESTIMATING is listed first.
    result = Categorizer().categorize_file("data.csv", "/x/", "text/csv")

    assert result.category is FileCategory.ESTIMATING
    assert result.confidence == pytest.approx(0.1)
    assert result.reason == "file type: .csv"


def test_tie_break_follows_injected_rule_order() -> None:
    first = CategoryRule(FileCategory.ACCOUNTING, ("alpha",), (), ("alpha",), priority=8)
    second = CategoryRule(FileCategory.FINANCE, ("alpha",), (), ("alpha",), priority=8)

    forward = Categorizer([first, second]).categorize_file("alpha.txt", "/alpha/", "")
    backward = Categorizer([second, first]).categorize_file("alpha.txt", "/alpha/", "")

    assert forward.category is FileCategory.ACCOUNTING
    assert backward.category is FileCategory.FINANCE
    assert forward.confidence == backward.confidence > 0


def test_confidence_is_bounded_and_deterministic() -> None:
    categorizer = Categorizer()
    everything = " ".join(keyword for rule in CATEGORIZATION_RULES for keyword in rule.keywords)
    samples = [
        ("", "", ""),
        ("README", "/", ""),
        (everything + ".xlsx", "/" + everything.replace(" ", "/") + "/", ""),
        ("site_schedule.pptx", "/Operations/Projects/", ""),
        ("floor plan.dwg", "/Design/Drawings/", ""),
    ]
    for name, path, mime in samples:
        first = categorizer.categorize_file(name, path, mime)
        second = categorizer.categorize_file(name, path, mime)
        assert 0.0 <= first.confidence <= 1.0
        assert first == second


def test_layout_drawings_go_to_company_layout() -> None:
    result = Categorizer().categorize_file("floor plan.dwg", "/Design/Drawings/", "")

    assert result.category is FileCategory.COMPANY_LAYOUT
    assert "file type: .dwg" in result.reason


def test_rule_table_has_one_rule_per_department() -> None:
    categories = [rule.category for rule in CATEGORIZATION_RULES]

    assert len(categories) == len(set(categories))
    assert set(categories) == set(FileCategory) - {FileCategory.UNCATEGORIZED}


def test_get_category_keywords() -> None:
    assert get_category_keywords(FileCategory.ESTIMATING)[:3] == ["estimate", "bid", "quote"]
    assert get_category_keywords(FileCategory.UNCATEGORIZED) == []
    assert Categorizer().get_category_keywords(FileCategory.OFFICE)[0] == "memo"


def test_keywords_from_reason() -> None:
    reason = "filename contains: budget, forecast; path contains: cash, xy; path pattern: finance; file type: .xlsx"

    assert keywords_from_reason(reason) == ["budget", "forecast", "cash"]
    assert keywords_from_reason("No matching rules found") == []
