from app.models.numbering_rule import NumberingRule
from app.models.sequence_counter import SequenceCounter

__all__ = [
    "NumberingRule",
    "SequenceCounter",
]
