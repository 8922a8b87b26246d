"""
Result Materializer

Turns result rows into output records: one fresh instance per row, column i
assigned to the i-th field of the resolved output order.
"""

from typing import Any, Callable, Iterable, List, Sequence

from procmap.core.errors import ScanError


def materialize(
    factory: Callable[[], Any],
    fields: Sequence[str],
    rows: Iterable[Sequence[Any]]
) -> List[Any]:
    """
    Build one output record per row.

    Args:
        factory: Returns a new empty output record (IRecordDescriptor.new_empty_output)
        fields: Resolved field sequence of the output shape
        rows: Result rows, each indexable by column position

    Returns:
        Populated records in row order; an empty list when there are no rows

    Raises:
        ScanError: If a row's width differs from the number of fields, or the
            output record rejects an assignment (frozen dataclass, pydantic
            validate_assignment). Remaining rows are not processed.
    """
    results = []
    for row_number, row in enumerate(rows):
        if len(row) != len(fields):
            raise ScanError(
                f"Row {row_number} has {len(row)} columns, expected {len(fields)}"
            )

        item = factory()
        for name, value in zip(fields, row):
            try:
                setattr(item, name, value)
            except (AttributeError, TypeError, ValueError) as exc:
                raise ScanError(
                    f"Row {row_number}: cannot assign column {name!r} "
                    f"on {type(item).__name__}: {exc}"
                ) from exc
        results.append(item)
    return results


def scan_first_int(rows: Iterable[Sequence[Any]]) -> int:
    """
    Read the first column of the first row as an int.

    Returns:
        The integer value, or 0 when there is no row

    Raises:
        ScanError: If the row is empty, the value is NULL, or it is not integral
    """
    for row in rows:
        if len(row) == 0:
            raise ScanError("First row has no columns")
        value = row[0]
        if value is None or isinstance(value, bool):
            raise ScanError(f"Cannot scan {value!r} into an integer id")
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ScanError(f"Cannot scan {value!r} into an integer id") from exc
        if isinstance(value, float) and number != value:
            raise ScanError(f"Cannot scan {value!r} into an integer id")
        return number
    return 0
