import random
from typing import Optional

from runner.client.session import SessionStatus


class Autopilot:
    """Simple jump policy for headless runs: hop crates and platform ends."""

    def __init__(self, config, required_players: int = 1, obstacle_lead: float = 45,
                 edge_lead: Optional[float] = None, seed: Optional[int] = None):
        self.config = config
        self.required_players = required_players
        self.obstacle_lead = obstacle_lead
        self.edge_lead = edge_lead if edge_lead is not None else 3 * config.SPEED
        self.rng = random.Random(seed)
        self._readied = False
        self._start_requested = False

    def drive(self, session) -> None:
        if session.status == SessionStatus.QUIZ and session.quiz.question:
            session.answer_quiz(self.rng.randrange(len(session.quiz.question.options)))
            return
        if session.simulating and self.should_jump(session.ctx):
            session.jump()

    def drive_team(self, session) -> None:
        if session.status == SessionStatus.WAITING_ROOM:
            if not self._readied:
                session.toggle_ready()
                self._readied = True
            roster = session.roster
            if not self._start_requested and len(roster) == self.required_players and all(p.is_ready for p in roster):
                session.request_start()
                self._start_requested = True
            return
        self.drive(session)

    def should_jump(self, ctx) -> bool:
        player = ctx.player
        if player.is_jumping:
            return False
        for obstacle in ctx.obstacles:
            if 0 <= obstacle.x - player.right <= self.obstacle_lead:
                return True

        under = next((p for p in ctx.platforms if p.x <= player.x < p.right), None)
        if under is None or under.right - player.x > self.edge_lead:
            return False
        # Consecutive platforms share an edge; only jump when a pit follows
        return not any(p.x <= under.right + 1 < p.right for p in ctx.platforms if p is not under)
