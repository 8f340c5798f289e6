import pytest

from disc_insights.scoring.disc import (
    INTENSITY_HIGH,
    INTENSITY_LOW,
    INTENSITY_MODERATE,
    INTENSITY_VERY_HIGH,
    calculate_disc_results,
    count_answers,
    get_intensity,
    get_profile_description,
    get_profile_details,
    get_profile_recommendations,
)


def test_scores_for_small_answer_set():
    results = calculate_disc_results({1: "D", 2: "D", 3: "I", 4: "S"})

    assert results["scores"] == pytest.approx({"D": 50.0, "I": 25.0, "S": 25.0, "C": 0.0})
    assert results["primaryProfile"] == "D"
    assert results["secondaryProfile"] == "I"
    assert results["intensity"] == {
        "D": INTENSITY_MODERATE,
        "I": INTENSITY_LOW,
        "S": INTENSITY_LOW,
        "C": INTENSITY_LOW,
    }


@pytest.mark.parametrize("answers", [None, {}])
def test_empty_answers_give_even_split(answers):
    results = calculate_disc_results(answers)

    assert results["scores"] == {"D": 25.0, "I": 25.0, "S": 25.0, "C": 25.0}
    assert results["primaryProfile"] == "D"
    assert results["secondaryProfile"] == "I"
    assert set(results["intensity"].values()) == {INTENSITY_MODERATE}


def test_scores_sum_to_100():
    answers = {i: "DISC"[i % 4] for i in range(1, 8)}
    answers.update({8: "C", 9: "C"})
    results = calculate_disc_results(answers)

    assert sum(results["scores"].values()) == pytest.approx(100.0, abs=0.1)
    assert all(0 <= value <= 100 for value in results["scores"].values())


def test_primary_and_secondary_are_distinct_and_ordered():
    results = calculate_disc_results({1: "C", 2: "C", 3: "C", 4: "S", 5: "S", 6: "I"})

    assert results["primaryProfile"] == "C"
    assert results["secondaryProfile"] == "S"


@pytest.mark.parametrize(
    "answers",
    [
        {1: "C", 2: "C", 3: "C", 4: "S", 5: "S", 6: "I"},
        {1: "I", 2: "D", 3: "I", 4: "D", 5: "S", 6: "I"},
        {1: "S"},
        {1: "D", 2: "I", 3: "S", 4: "C"},
        {i: "C" if i % 3 else "D" for i in range(1, 29)},
        {1: "I", 2: "C", 3: "C", 4: "I", 5: "S", 6: "S", 7: "D"},
    ],
)
def test_primary_beats_secondary_beats_the_rest(answers):
    results = calculate_disc_results(answers)
    scores = results["scores"]
    primary, secondary = results["primaryProfile"], results["secondaryProfile"]

    assert primary != secondary
    assert scores[primary] >= scores[secondary]
    for category in set(scores) - {primary, secondary}:
        assert scores[secondary] >= scores[category]


def test_ties_keep_category_order():
    results = calculate_disc_results({1: "S", 2: "C"})

    assert results["primaryProfile"] == "S"
    assert results["secondaryProfile"] == "C"


def test_scoring_is_deterministic():
    answers = {1: "I", 2: "S", 3: "I", 4: "C", 5: "D"}
    assert calculate_disc_results(answers) == calculate_disc_results(dict(answers))


def test_unknown_symbols_are_ignored():
    assert count_answers({1: "D", 2: "X", 3: "d"}) == {"D": 1, "I": 0, "S": 0, "C": 0}
    results = calculate_disc_results({1: "D", 2: "X"})
    assert results["scores"]["D"] == pytest.approx(100.0)


@pytest.mark.parametrize(
    "percentage, expected",
    [
        (0, INTENSITY_LOW),
        (25, INTENSITY_LOW),
        (25.01, INTENSITY_MODERATE),
        (50, INTENSITY_MODERATE),
        (75, INTENSITY_HIGH),
        (75.5, INTENSITY_VERY_HIGH),
        (100, INTENSITY_VERY_HIGH),
    ],
)
def test_intensity_bands(percentage, expected):
    assert get_intensity(percentage) == expected


def test_profile_texts():
    assert get_profile_description("D").startswith("Perfil Dominante")
    assert get_profile_description("X") == ""
    assert get_profile_details("S")["conflictStyle"]
    assert get_profile_details("X") is None


def test_recommendations_combine_primary_and_secondary():
    recommendations = get_profile_recommendations("D", "I")

    assert len(recommendations) == 5
    assert recommendations[0] == "Pratique escuta ativa e seja mais paciente com outros"
    assert recommendations[3] == "Mantenha o foco em detalhes e prazos"
