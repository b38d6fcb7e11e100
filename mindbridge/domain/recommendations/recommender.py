"""Rule-based symptom-to-specialist recommender"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Recommendation:
    specialist: str
    resources: list[str] = field(default_factory=list)
    symptom: Optional[str] = None

    @property
    def message(self) -> str:
        if self.symptom is None:
            return (
                "Based on the symptoms you've described, I recommend consulting with a "
                f"{self.specialist}. They can provide a proper diagnosis and treatment plan."
            )
        return (
            f"Based on your mention of {self.symptom}, I recommend consulting with a {self.specialist}. "
            "They specialize in treating conditions related to this symptom."
        )


# Checked in order; the first keyword found in the message wins
SYMPTOM_RULES: list[tuple[str, str, list[str]]] = [
    # Mental health symptoms
    ("anxiety", "Psychiatrist", ["Anxiety Management Guide", "Meditation Resources"]),
    ("depression", "Psychiatrist", ["Depression Support Guide", "Mood Tracking Tools"]),
    ("stress", "Psychologist", ["Stress Management Techniques", "Work-Life Balance Guide"]),
    ("insomnia", "Sleep Specialist", ["Sleep Hygiene Guide", "Relaxation Techniques"]),
    ("mood swings", "Psychiatrist", ["Mood Disorder Information", "Emotional Regulation Techniques"]),
    ("panic", "Psychiatrist", ["Panic Attack Management", "Breathing Exercises"]),
    # Physical symptoms
    ("headache", "Neurologist", ["Headache Triggers Guide", "Pain Management Techniques"]),
    ("fatigue", "General Physician", ["Energy Management Guide", "Nutrition for Energy"]),
    ("pain", "Pain Management Specialist", ["Chronic Pain Resources", "Physical Therapy Information"]),
    ("dizziness", "ENT Specialist", ["Balance Exercises", "Vertigo Information"]),
]

DEFAULT_RECOMMENDATION = Recommendation(
    specialist="General Physician",
    resources=["General Health Guidelines", "When to Seek Medical Help"],
)


def recommend(message: str) -> Recommendation:
    """Map a free-text symptom description to a specialist"""
    text = message.lower()
    for symptom, specialist, resources in SYMPTOM_RULES:
        if symptom in text:
            return Recommendation(specialist=specialist, resources=list(resources), symptom=symptom)
    return DEFAULT_RECOMMENDATION
