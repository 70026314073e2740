"""Filter builders for contest queries.

Client text never reaches MongoDB as an operator or a raw pattern: values
are placed under fixed keys and search terms are escaped and truncated.
"""
import re
from typing import Any, Dict, Optional

from bson import ObjectId

APPROVED = "approved"
PENDING = "pending"

MAX_SEARCH_LENGTH = 64


def approved_contests(category: Optional[str] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {"status": APPROVED}
    if category:
        query["category"] = str(category)
    return query


def category_search(term: str) -> Dict[str, Any]:
    """Approved contests whose category contains term, ignoring case."""
    pattern = re.escape(str(term).strip()[:MAX_SEARCH_LENGTH])
    return {
        "status": APPROVED,
        "category": {"$regex": pattern, "$options": "i"},
    }


def by_creator(email: str) -> Dict[str, Any]:
    return {"creatorInfo.email": str(email)}


def by_participant(email: str) -> Dict[str, Any]:
    return {"participants.email": str(email)}


def by_winner(email: str) -> Dict[str, Any]:
    return {"winnerInfo.email": str(email)}


def without_winner(contest_id: ObjectId) -> Dict[str, Any]:
    # None matches a missing field as well as an explicit null
    return {"_id": contest_id, "winnerInfo": None}
