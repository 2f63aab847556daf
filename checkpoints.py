from typing import List, NamedTuple


class Checkpoint(NamedTuple):
    name: str
    category: str


CHECKPOINTS: List[Checkpoint] = [
    Checkpoint("Photosynthesis", "Science"),
    Checkpoint("Fractions", "Math"),
    Checkpoint("Water Cycle", "Science"),
    Checkpoint("Verbs", "English"),
    Checkpoint("Solar System", "Science"),
    Checkpoint("Decimals", "Math"),
]


def filter_checkpoints(query: str, checkpoints: List[Checkpoint] = CHECKPOINTS) -> List[Checkpoint]:
    """Suggested topics whose name or category contains ``query`` (any case)."""
    needle = query.strip().lower()
    if not needle:
        return list(checkpoints)
    return [cp for cp in checkpoints if needle in cp.name.lower() or needle in cp.category.lower()]
