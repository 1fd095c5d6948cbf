from __future__ import annotations

from fakes import SCENARIO_ENTRIES, make_context

from pizzaworld_ai.services.numeric_guard import validate
from pizzaworld_ai.shared.numbers import equivalent_forms, normalized_tokens, tokenize


def test_tokenizer_ignores_plain_numbers_and_percentages() -> None:
    text = "In 2022 store 42 grew 13.85% to $1,200 on 1,234.50 and 2,046,713 orders"
    assert tokenize(text) == ["$1,200", "1,234.50", "2,046,713"]
    assert normalized_tokens(text) == ["1200", "1234.50", "2046713"]


def test_equivalent_forms_cover_zero_cents() -> None:
    assert equivalent_forms("1200") == frozenset({"1200", "1200.00"})
    assert equivalent_forms("1200.00") == frozenset({"1200", "1200.00"})
    assert equivalent_forms("1200.50") == frozenset({"1200.50"})


def test_answer_quoting_context_numbers_is_accepted() -> None:
    context = make_context(SCENARIO_ENTRIES)
    outcome = validate("Total revenue is $50,211,527.85 from 2,046,713 orders.", context)
    assert outcome.accepted
    assert outcome.rejected_tokens == frozenset()


def test_invented_number_is_rejected() -> None:
    context = make_context(SCENARIO_ENTRIES)
    outcome = validate("Revenue reached $52,000,000.00 this year.", context)
    assert not outcome.accepted
    assert outcome.rejected_tokens == frozenset({"52000000.00"})


def test_zero_cents_variants_match() -> None:
    context = make_context([("avg", "Average Order Value", "$1,200.00")])
    assert validate("Average order is $1,200", context).accepted
    assert validate("Average order is 1,200.00", context).accepted


def test_empty_text_and_prose_are_accepted() -> None:
    context = make_context([])
    assert validate("", context).accepted
    assert validate(None, context).accepted
    assert validate("Revenue grew in 2022 across 12 stores.", context).accepted


def test_tokenizer_reads_the_whole_digit_run() -> None:
    assert normalized_tokens("2,046,713.5 orders") == ["2046713.5"]
    assert normalized_tokens("Revenue was $50,211,527.851") == ["50211527.851"]
    assert normalized_tokens("2,046,7130 orders") == ["20467130"]
    assert normalized_tokens("12345,678 pies") == ["12345678"]
    assert normalized_tokens("Years 2021, 2022 and 2023") == []


def test_numbers_extending_a_context_value_are_rejected() -> None:
    context = make_context(SCENARIO_ENTRIES)
    extended_decimal = validate("Orders reached 2,046,713.5 this year", context)
    extra_cents_digit = validate("Revenue was $50,211,527.851", context)
    extra_digit = validate("2,046,7130 orders", context)

    assert not extended_decimal.accepted
    assert extended_decimal.rejected_tokens == frozenset({"2046713.5"})
    assert not extra_cents_digit.accepted
    assert extra_cents_digit.rejected_tokens == frozenset({"50211527.851"})
    assert not extra_digit.accepted
    assert extra_digit.rejected_tokens == frozenset({"20467130"})
