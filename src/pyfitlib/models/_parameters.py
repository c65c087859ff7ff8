from typing import List, Optional

from pyfitlib.core.matrix import Matrix
from pyfitlib.data.constants import ErrorMessages


def unpack_parameters(beta: Matrix, count: Optional[int], model: str) -> List[float]:
    """Read a coefficient column into floats, checking its length when count is given."""
    if beta.cols != 1 or (count is not None and beta.rows != count):
        raise ValueError(ErrorMessages.PARAMETER_COUNT.format(model=model, expected=count,
                                                              count=f"a {beta.rows}x{beta.cols} matrix"))
    return [beta.get(i, 0) for i in range(beta.rows)]
