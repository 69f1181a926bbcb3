# split_ledger/services/allocation.py
from typing import List, Sequence

from split_ledger.constants import EPSILON, CONSERVATION_TOLERANCE, WIDTH_UNITS_PER_LENGTH_UNIT
from split_ledger.errors import InternalError


def area_from_length(width: int, length: float) -> float:
    '''
    Area of a strip of `width` (mm) cut to `length` (m).
    Every row of a plan shares the same length; only the width differs.
    '''
    return (width / WIDTH_UNITS_PER_LENGTH_UNIT) * length


def allocate_area(requested_area: float, widths: Sequence[int], original_width: int) -> List[float]:
    '''
    Split requested_area across rows in proportion to their widths.

    Rules:
    - every row but the last gets requested_area * width_i / original_width
    - the last row gets the exact remainder, so the rows always sum back to requested_area
    - values within EPSILON of zero become 0.0
    - a negative value beyond EPSILON, or a total off by more than CONSERVATION_TOLERANCE,
      is an InternalError (inputs were already validated)

    :param requested_area: area consumed from the source bucket, > 0
    :param widths: row widths in plan order, already validated to sum to original_width
    :param original_width: master width, > 0
    :return: allocated area per row, in plan order
    '''
    if original_width <= 0:
        raise InternalError(
            "Original width must be positive to allocate area",
            details={"original_width": original_width},
        )
    if not widths:
        raise InternalError("Cannot allocate area over an empty split plan")

    allocations: List[float] = []
    for width in widths[:-1]:
        allocations.append(requested_area * (width / original_width))
    allocations.append(requested_area - sum(allocations))

    for index, value in enumerate(allocations):
        if abs(value) <= EPSILON:
            allocations[index] = 0.0
        elif value < 0:
            raise InternalError(
                "Allocation produced a negative area",
                details={"row": index, "allocated_area": value},
            )

    delta = abs(sum(allocations) - requested_area)
    if delta > CONSERVATION_TOLERANCE:
        raise InternalError(
            "Split allocation failed to conserve area",
            details={
                "requested_area": requested_area,
                "allocated_total": sum(allocations),
                "conservation_delta": delta,
            },
        )
    return allocations
