# FILE: tests/test_answer_checker.py

import pytest

from quizbank.core.quiz.answer_checker import check_answer, normalize_answer


def _question(question_type, correct_answer):
    return {"type": question_type, "correct_answer": correct_answer}


def test_arabic_true_matches_canonical_true():
    assert check_answer(_question("TRUE_FALSE", "true"), "صح")


def test_arabic_false_matches_canonical_zero():
    assert check_answer(_question("TRUE_FALSE", "0"), "خطأ")


@pytest.mark.parametrize("correct", ["true", "صح", "صحيح", "1", " TRUE "])
def test_arabic_true_accepts_every_true_spelling(correct):
    assert check_answer(_question("TRUE_FALSE", correct), "صح")


def test_arabic_answers_do_not_cross_over():
    assert not check_answer(_question("TRUE_FALSE", "true"), "خطأ")
    assert not check_answer(_question("TRUE_FALSE", "false"), "صح")


def test_true_false_exact_match_is_case_insensitive():
    assert check_answer(_question("TRUE_FALSE", "False"), "  false ")


def test_mcq_requires_exact_match():
    question = _question("MCQ", "Chloroplast")
    assert check_answer(question, " chloroplast")
    assert not check_answer(question, "Chloro plast")


@pytest.mark.parametrize("question_type", ["SHORT_ANSWER", "FILL_BLANK"])
def test_short_answers_tolerate_spacing(question_type):
    question = _question(question_type, "Cell Membrane")
    assert check_answer(question, "cellmembrane")
    assert check_answer(question, "cell   membrane")
    assert not check_answer(question, "cell membrain")


def test_unknown_type_uses_exact_match():
    question = _question("ESSAY", "Yes")
    assert check_answer(question, "yes")
    assert not check_answer(question, "y e s")


def test_normalize_answer_handles_none():
    assert normalize_answer(None) == ""
    assert normalize_answer("  MiXeD ") == "mixed"
