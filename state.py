import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional

from schemas import ExplanationSection, QuizQuestion


class Screen(str, Enum):
    TOPICS = "topics"
    EXPLANATION = "explanation"
    QUIZ = "quiz"
    RESULTS = "results"


class MasteryLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


@dataclass(frozen=True)
class StudentAnswer:
    """Outcome of one answered question; also used as the live feedback."""
    question_number: int
    student_answer: str
    is_correct: bool
    feedback: str = ""


@dataclass(frozen=True)
class QuizResult:
    score: int
    total: int
    mastery_level: MasteryLevel
    answers: List[StudentAnswer] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        # half-up, so 1 of 8 reads 13%
        return math.floor(self.score / self.total * 100 + 0.5)


@dataclass
class LearningState:
    screen: Screen = Screen.TOPICS
    concept: str = ""
    explanation_sections: List[ExplanationSection] = field(default_factory=list)
    questions: List[QuizQuestion] = field(default_factory=list)
    current_question: int = 0
    selection: str = ""
    student_answers: Dict[int, str] = field(default_factory=dict)
    feedback: Optional[StudentAnswer] = None
    result: Optional[QuizResult] = None
    recent_topics: List[str] = field(default_factory=list)
    loading: bool = False
    error: str = ""

    @property
    def current(self) -> Optional[QuizQuestion]:
        if 0 <= self.current_question < len(self.questions):
            return self.questions[self.current_question]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_question >= len(self.questions) - 1
