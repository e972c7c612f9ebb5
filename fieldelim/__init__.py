from .eliminator import (
    EliminationResult,
    EliminationStateError,
    FieldEliminator,
    Mode,
    apply_log,
    eliminate,
)
from .field import QQ, PrimeField, RationalField
from .matrix import FieldMatrix
from .steps import AddCol, AddRow, ScaleCol, ScaleRow, SwapCols, SwapRows

__all__ = [
    "AddCol",
    "AddRow",
    "EliminationResult",
    "EliminationStateError",
    "FieldEliminator",
    "FieldMatrix",
    "Mode",
    "PrimeField",
    "QQ",
    "RationalField",
    "ScaleCol",
    "ScaleRow",
    "SwapCols",
    "SwapRows",
    "apply_log",
    "eliminate",
]
