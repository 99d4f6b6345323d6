"""
DecentraID Disclosure Engine
Derives what a verifier gets to see from the purpose it stated.
"""

from typing import Any, Dict, Optional, Protocol


class DisclosurePolicy(Protocol):
    """Maps a stated purpose and a full record to the released subset."""

    def filter(self, purpose: str, full_record: Any) -> Any:
        ...


class KeywordDisclosurePolicy:
    """
    Case-insensitive keyword matching on the purpose text.

    | keyword in purpose  | disclosed field  |
    |---------------------|------------------|
    | "age" or "18"       | isOver18 = True  |
    | "id" or "identity"  | idVerified = True|

    When nothing matches, the full record is released unchanged.
    """

    RULES = (
        (("age", "18"), "isOver18"),
        (("id", "identity"), "idVerified"),
    )

    def filter(self, purpose: str, full_record: Any) -> Any:
        p = (purpose or "").lower()

        disclosed: Dict[str, Any] = {}
        for keywords, claim in self.RULES:
            if any(keyword in p for keyword in keywords):
                disclosed[claim] = True

        return disclosed if disclosed else full_record


class DisclosureEngine:
    """Stateless front for the active disclosure policy."""

    def __init__(self, policy: Optional[DisclosurePolicy] = None):
        self.policy = policy or KeywordDisclosurePolicy()

    def filter(self, purpose: str, full_record: Any) -> Any:
        return self.policy.filter(purpose, full_record)
