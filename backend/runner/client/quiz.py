from dataclasses import dataclass
from typing import List, Optional, Sequence

# Absorbs float drift from summing per-tick deltas
_EPSILON = 1e-9


@dataclass(frozen=True)
class Question:
    id: int
    prompt: str
    options: Sequence[str]
    answer_index: int


DEFAULT_QUESTIONS: List[Question] = [
    Question(1, 'What is the capital of France?', ('London', 'Berlin', 'Paris', 'Madrid'), 2),
    Question(2, 'Which planet is known as the Red Planet?', ('Venus', 'Mars', 'Jupiter', 'Saturn'), 1),
    Question(3, 'What is 2 + 2 * 2?', ('6', '8', '4', '10'), 0),
    Question(4, "Which element has the chemical symbol 'O'?", ('Gold', 'Silver', 'Oxygen', 'Iron'), 2),
    Question(5, 'How many bits are in a byte?', ('4', '8', '16', '32'), 1),
    Question(6, 'What is the largest ocean on Earth?', ('Atlantic', 'Indian', 'Arctic', 'Pacific'), 3),
    Question(7, 'Which language runs natively in web browsers?', ('JavaScript', 'COBOL', 'Fortran', 'Ada'), 0),
    Question(8, 'How many continents are there?', ('5', '6', '7', '8'), 2),
    Question(9, 'What is the boiling point of water at sea level in Celsius?', ('90', '100', '110', '120'), 1),
    Question(10, 'Which protocol secures web traffic?', ('FTP', 'SMTP', 'HTTPS', 'Telnet'), 2),
]


@dataclass(frozen=True)
class QuizResult:
    correct: bool
    timed_out: bool
    bonus: int


class QuizInterrupt:
    """Modal question with a per-second countdown.

    Running out of time resolves exactly like a wrong answer.
    """

    def __init__(self, seconds: int, bonus: int):
        self.seconds = seconds
        self.bonus = bonus
        self.question: Optional[Question] = None
        self.time_left = seconds
        self._elapsed = 0.0

    @property
    def active(self) -> bool:
        return self.question is not None

    def open(self, question: Question) -> None:
        self.question = question
        self.time_left = self.seconds
        self._elapsed = 0.0

    def advance(self, dt: float) -> Optional[QuizResult]:
        """Run the countdown; returns the timeout result once it reaches zero."""
        if not self.active:
            return None
        self._elapsed += dt
        while self._elapsed >= 1.0 - _EPSILON and self.time_left > 0:
            self._elapsed -= 1.0
            self.time_left -= 1
        if self.time_left <= 0:
            return self._resolve(correct=False, timed_out=True)
        return None

    def answer(self, index: Optional[int]) -> Optional[QuizResult]:
        if not self.active:
            return None
        return self._resolve(correct=index == self.question.answer_index, timed_out=False)

    def cancel(self) -> None:
        self.question = None
        self.time_left = self.seconds
        self._elapsed = 0.0

    def _resolve(self, correct: bool, timed_out: bool) -> QuizResult:
        result = QuizResult(correct=correct, timed_out=timed_out, bonus=self.bonus if correct else 0)
        self.cancel()
        return result
