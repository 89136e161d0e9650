"""
Business logic for financial insights, education and bill splitting.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import NotFoundError, ValidationError
from ..store import ResourceStore, parse_decimal, parse_int, utcnow

logger = logging.getLogger(__name__)

PASSING_SCORE = Decimal("70")
COMPLETE_PROGRESS = Decimal("100")


def _required_int(value: Any, name: str) -> int:
    if value is None:
        raise ValidationError(f"{name} is required")
    return parse_int(value, name)


def _required_decimal(value: Any, name: str) -> Decimal:
    if value is None:
        raise ValidationError(f"{name} is required")
    return parse_decimal(value, name)


class FinanceService:
    def __init__(self, store: ResourceStore):
        self.store = store

    # ------------------------------------------------------------------
    # Financial health
    # ------------------------------------------------------------------

    async def get_financial_health(self, user_id: int) -> Dict[str, Any]:
        health = self.store.find_one("financial_health", {"userId": user_id})
        if health is None:
            raise NotFoundError("Financial health not found")
        return health

    async def upsert_financial_health(self, user_id: int, scores: Mapping[str, Any]) -> Dict[str, Any]:
        """Store the user's latest health snapshot, replacing the previous one."""
        values = {key: value for key, value in scores.items() if key not in {"id", "userId"}}
        existing = self.store.find_one("financial_health", {"userId": user_id})
        if existing is None:
            return self.store.create("financial_health", {**values, "userId": user_id})
        return self.store.update("financial_health", existing["id"], values)

    # ------------------------------------------------------------------
    # Education
    # ------------------------------------------------------------------

    async def list_education_progress(self, user_id: int) -> List[Dict[str, Any]]:
        return self.store.get_by_owner("user_education", user_id)

    async def update_education_progress(self, user_id: int, module_id: Any, progress: Any) -> Dict[str, Any]:
        """Upsert the user's progress in a module.

        Reaching 100 completes the module.  Every update counts as one
        more unit of time spent.
        """
        module_id = _required_int(module_id, "moduleId")
        amount = _required_decimal(progress, "progress")
        if self.store.get("education_modules", module_id) is None:
            raise NotFoundError("Education module not found")
        existing = self.store.find_one("user_education", {"userId": user_id, "moduleId": module_id})
        completed = amount >= COMPLETE_PROGRESS
        values: Dict[str, Any] = {
            "progress": amount,
            "isCompleted": completed,
            "completedAt": None,
            "lastAccessedAt": utcnow(),
            "timeSpent": (existing["timeSpent"] or 0) + 1 if existing else 1,
        }
        if completed:
            values["completedAt"] = existing["completedAt"] if existing and existing["completedAt"] else utcnow()
        if existing is None:
            return self.store.create("user_education", {**values, "userId": user_id, "moduleId": module_id})
        return self.store.update("user_education", existing["id"], values)

    def _active_questions(self, module_id: int) -> List[Dict[str, Any]]:
        if self.store.get("education_modules", module_id) is None:
            raise NotFoundError("Education module not found")
        questions = self.store.find("quiz_questions", {"moduleId": module_id, "isActive": True})
        return sorted(questions, key=lambda question: question["id"])

    async def get_quiz(self, module_id: int) -> List[Dict[str, Any]]:
        """Active questions of a module without their answers."""
        hidden = {"correctAnswer", "explanation"}
        return [
            {key: value for key, value in question.items() if key not in hidden}
            for question in self._active_questions(module_id)
        ]

    async def submit_quiz_attempt(self, module_id: int, user_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Score a quiz attempt.

        ``answers`` maps question ids to the index of the chosen
        option.  The score is the percentage of correct answers; 70 or
        more passes.
        """
        answers = data.get("answers")
        if not isinstance(answers, dict):
            raise ValidationError("answers must be an object mapping question ids to option indexes")
        questions = self._active_questions(module_id)
        if not questions:
            raise ValidationError("This module has no quiz")
        correct = 0
        for question in questions:
            answer = answers.get(str(question["id"]))
            if answer is not None and not isinstance(answer, bool) and answer == question["correctAnswer"]:
                correct += 1
        score = (Decimal(correct) * 100 / len(questions)).quantize(Decimal("0.01"))
        attempt = self.store.create(
            "quiz_attempts",
            {
                "userId": user_id,
                "moduleId": module_id,
                "score": score,
                "totalQuestions": len(questions),
                "correctAnswers": correct,
                "timeSpent": data.get("timeSpent"),
                "isPassed": score >= PASSING_SCORE,
            },
        )
        logger.info("User %s scored %s on module %s quiz", user_id, score, module_id)
        return attempt

    # ------------------------------------------------------------------
    # Bill splits
    # ------------------------------------------------------------------

    async def create_bill_split(self, data: Mapping[str, Any], creator_id: int) -> Dict[str, Any]:
        return self.store.create("bill_splits", {**data, "createdBy": creator_id})

    async def join_bill_split(self, bill_id: int, user_id: int, share_amount: Any) -> Dict[str, Any]:
        """Join a bill split owing ``share_amount``."""
        bill = self.store.get("bill_splits", bill_id)
        if bill is None:
            raise NotFoundError("Bill split not found")
        amount = _required_decimal(share_amount, "shareAmount")
        if self.store.find_one("bill_split_members", {"billId": bill_id, "userId": user_id}):
            raise ValidationError("Already part of this bill split")
        return self.store.create("bill_split_members", {"billId": bill_id, "userId": user_id, "owedAmount": amount})

    async def list_user_bill_splits(self, user_id: int) -> List[Dict[str, Any]]:
        """Bill splits the user created or joined, newest first."""
        bills = {bill["id"]: bill for bill in self.store.get_by_owner("bill_splits", user_id)}
        for membership in self.store.find("bill_split_members", {"userId": user_id}):
            bill: Optional[Dict[str, Any]] = self.store.get("bill_splits", membership["billId"])
            if bill is not None:
                bills[bill["id"]] = bill
        return sorted(bills.values(), key=lambda bill: (bill["createdAt"] or "", bill["id"]), reverse=True)
