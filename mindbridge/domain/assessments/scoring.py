"""Severity bands for the PHQ-9 and GAD-7 questionnaires"""

from typing import Optional

PHQ9_QUESTIONS = 9
GAD7_QUESTIONS = 7
MAX_ANSWER = 3

PHQ9_MAX = PHQ9_QUESTIONS * MAX_ANSWER
GAD7_MAX = GAD7_QUESTIONS * MAX_ANSWER

# (inclusive upper bound, label)
PHQ9_BANDS = [
    (4, "Minimal or none"),
    (9, "Mild"),
    (14, "Moderate"),
    (19, "Moderately severe"),
    (PHQ9_MAX, "Severe"),
]
GAD7_BANDS = [
    (4, "Minimal or none"),
    (9, "Mild"),
    (14, "Moderate"),
    (GAD7_MAX, "Severe"),
]


def _band(score: int, bands: list[tuple[int, str]]) -> str:
    for upper, label in bands:
        if score <= upper:
            return label
    return bands[-1][1]


def depression_severity(phq9_score: int) -> str:
    return _band(phq9_score, PHQ9_BANDS)


def anxiety_severity(gad7_score: int) -> str:
    return _band(gad7_score, GAD7_BANDS)


def answers_error(answers: Optional[list[int]], questions: int, name: str) -> Optional[str]:
    """Describe what is wrong with a list of answers, or None when it is usable"""
    if answers is None:
        return None
    if len(answers) != questions:
        return f"{name} requires {questions} answers"
    if any(not 0 <= answer <= MAX_ANSWER for answer in answers):
        return f"{name} answers must be between 0 and {MAX_ANSWER}"
    return None
