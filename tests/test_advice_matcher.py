import pytest

from healthrecords.utils.advice_matcher import (
    ADVICE_RULES,
    APPOINTMENT_ADVICE,
    COUGH_COLD_ADVICE,
    DEFAULT_ADVICE,
    EMERGENCY_ADVICE,
    FEVER_ADVICE,
    HEADACHE_ADVICE,
    MEDICATION_ADVICE,
    NUTRITION_ADVICE,
    QUICK_QUESTIONS,
    VACCINATION_ADVICE,
    contains_any,
    match_advice,
)


def test_fever_advice_text_is_exact():
    assert match_advice("I have a fever of 102") == (
        "For fever management:\n"
        "• Rest and stay hydrated\n"
        "• Take temperature regularly\n"
        "• Consider over-the-counter fever reducers if needed\n"
        "• Seek medical attention if fever persists over 3 days or exceeds 103°F (39.4°C)\n"
        "• If you're a migrant worker, ensure you have access to medical care and don't hesitate to visit a healthcare facility."
    )


@pytest.mark.parametrize('text, expected', [
    ("My TEMPERATURE is high", FEVER_ADVICE),
    ("bad headache since morning", HEADACHE_ADVICE),
    ("sharp head pain", HEADACHE_ADVICE),
    ("I caught a cold", COUGH_COLD_ADVICE),
    ("Can I see a doctor tomorrow?", APPOINTMENT_ADVICE),
    ("when is the next vaccine", VACCINATION_ADVICE),
    ("this is urgent", EMERGENCY_ADVICE),
    ("I forgot my medicine", MEDICATION_ADVICE),
    ("what food should I eat", NUTRITION_ADVICE),
])
def test_keywords_map_to_their_advice(text, expected):
    assert match_advice(text) == expected


def test_first_matching_rule_wins():
    # "doctor" appears first in the text but the fever rule is checked first
    assert match_advice("doctor, I have a fever") == FEVER_ADVICE
    assert match_advice("urgent: cough all night") == COUGH_COLD_ADVICE


@pytest.mark.parametrize('text', ["hello there", "", "   ", None, 42])
def test_unmatched_or_invalid_input_gets_default(text):
    assert match_advice(text) == DEFAULT_ADVICE


def test_matching_is_deterministic():
    assert match_advice("fever and cough") == match_advice("fever and cough")


def test_quick_questions_all_have_specific_answers():
    for question in QUICK_QUESTIONS:
        assert match_advice(question) != DEFAULT_ADVICE


def test_custom_rules():
    rules = [(contains_any('water'), 'Drink it.')]
    assert match_advice("how much water", rules=rules) == 'Drink it.'
    assert match_advice("fever", rules=rules) == DEFAULT_ADVICE


def test_rules_are_ordered_fever_first():
    assert ADVICE_RULES[0][1] == FEVER_ADVICE
    assert ADVICE_RULES[0][0].keywords == ('fever', 'temperature')
