"""The fixed question set and answer grading."""
from typing import List, Optional, Sequence

from models import Question

QUESTIONS = (
    Question(prompt="Capital of France?", options=["Paris", "London", "Berlin"], answer="Paris"),
    Question(prompt="2 + 2 = ?", options=["3", "4", "5"], answer="4"),
    Question(prompt="Color of the sky?", options=["Blue", "Red", "Green"], answer="Blue"),
)


def list_questions(reveal: bool = False) -> List[dict]:
    """Serialize the question set; answers are stripped unless `reveal`."""
    exclude = None if reveal else {"answer"}
    return [q.model_dump(by_alias=True, exclude=exclude) for q in QUESTIONS]


def grade(answers: Optional[Sequence[Optional[str]]]) -> int:
    # Positional: answers[i] is checked against QUESTIONS[i]; missing entries count as wrong
    if not answers:
        return 0
    return sum(
        1
        for i, question in enumerate(QUESTIONS)
        if i < len(answers) and answers[i] == question.answer
    )
