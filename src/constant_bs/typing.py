from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

# typing only
FloatArray: TypeAlias = NDArray[np.floating]
Level: TypeAlias = float | np.floating | NDArray[np.floating]  # one path or many
Observer: TypeAlias = Callable[[], None]

