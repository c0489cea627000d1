# -*- coding: utf-8 -*-
# sv/path/calc_method.py

"""
Methods used to compute the number of curve points of a path.

SPACING      constant spacing between curve points.
SUBDIVISION  constant number of subdivisions per control-point segment.
TOTAL        constant total number of curve points.
"""

from typing import List

from ..errors import PathError, valid_names_text


class CalculationMethod:
    SPACING = "SPACING"
    SUBDIVISION = "SUBDIVISION"
    TOTAL = "TOTAL"

    # Enum codes stored in the `method` attributes of .pth files.
    _FILE_CODES = {
        TOTAL: 0,
        SUBDIVISION: 1,
        SPACING: 2,
    }

    @classmethod
    def get_names(cls) -> List[str]:
        return [cls.SPACING, cls.SUBDIVISION, cls.TOTAL]

    @classmethod
    def check(cls, name, operation: str = "set_method") -> str:
        """Return the canonical method name or raise PathError listing valid names."""
        if isinstance(name, str) and name.upper() in cls.get_names():
            return name.upper()
        raise PathError("Unknown calculation method '{}'. Valid names are: {}."
                        .format(name, valid_names_text(cls.get_names())), operation=operation)

    @classmethod
    def to_code(cls, name: str) -> int:
        return cls._FILE_CODES[cls.check(name)]

    @classmethod
    def from_code(cls, code, operation: str = "read") -> str:
        for name, value in cls._FILE_CODES.items():
            if str(value) == str(code).strip():
                return name
        # Newer files may spell the name out.
        return cls.check(code, operation=operation)
