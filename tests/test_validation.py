"""Tests for the submission completeness checks."""

from storefront_lab.metrics import DesignChoice
from storefront_lab.validation import (
    are_all_design_choices_complete,
    get_completion_status,
    get_incomplete_fields,
    is_design_choice_complete,
)

COMPLETE = DesignChoice("Checkout Button", "Change Color", "Green", "Green means go")


class TestSingleChoice:
    def test_complete_choice(self):
        assert is_design_choice_complete(COMPLETE)
        assert get_incomplete_fields(COMPLETE) == []

    def test_whitespace_counts_as_blank(self):
        choice = DesignChoice("Checkout Button", "  ", "Green", "\t")
        assert not is_design_choice_complete(choice)
        assert get_incomplete_fields(choice) == ["action", "reasoning"]

    def test_all_fields_missing_in_order(self):
        assert get_incomplete_fields(DesignChoice()) == ["element", "action", "value", "reasoning"]

    def test_reasoning_required(self):
        choice = DesignChoice("Checkout Button", "Change Color", "Green", "")
        assert get_incomplete_fields(choice) == ["reasoning"]


class TestChoiceList:
    def test_empty_list_is_not_complete(self):
        assert are_all_design_choices_complete([]) is False

    def test_all_complete(self):
        assert are_all_design_choices_complete([COMPLETE, COMPLETE])

    def test_one_incomplete(self):
        assert not are_all_design_choices_complete([COMPLETE, DesignChoice("Navigation")])

    def test_completion_status(self):
        status = get_completion_status([COMPLETE, DesignChoice("Navigation"), COMPLETE])
        assert status == {"total": 3, "complete": 2, "incomplete": 1, "is_valid": False}

    def test_completion_status_empty(self):
        assert get_completion_status([]) == {"total": 0, "complete": 0, "incomplete": 0, "is_valid": False}

    def test_completion_status_valid(self):
        assert get_completion_status([COMPLETE])["is_valid"] is True
