from typing import List, Sequence, Tuple

from models import QuizItem, UserAnswer


def grade_answers(
    questions: Sequence[QuizItem], selected: Sequence[str]
) -> Tuple[int, List[UserAnswer]]:
    """
    Grade selected options against the quiz answers.

    ``selected[i]`` is the option picked for question ``i``; an empty string
    or a missing trailing entry means the question was left unanswered.
    """
    if len(selected) > len(questions):
        raise ValueError(
            f"Got {len(selected)} answers for a quiz with {len(questions)} questions"
        )

    answers = []
    for index, question in enumerate(questions):
        choice = selected[index] if index < len(selected) else ""
        answers.append(
            UserAnswer(
                question_index=index,
                selected_answer=choice,
                is_correct=bool(choice) and choice == question.answer,
            )
        )
    score = sum(1 for a in answers if a.is_correct)
    return score, answers
