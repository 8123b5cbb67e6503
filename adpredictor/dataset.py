"""Read sparse labeled examples from text files.

One example per line: a label followed by whitespace-separated
``id:value`` tokens, e.g.::

    1 3:1 17:0.5 42:1
    0 3:1 9:2

A bare ``id`` token means value 1.0. Blank lines and lines starting with
``#`` are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Union

from .errors import DataFormatError
from .types import DataSet, Example, FeatureActivation

logger = logging.getLogger(__name__)


def parse_example_line(line: str) -> Example:
    """Parse one data line. Raises ``ValueError`` on malformed input."""
    tks = line.split()
    if not tks:
        raise ValueError("empty line")

    label = float(tks[0])
    features = []
    for tk in tks[1:]:
        fid, sep, value = tk.partition(":")
        features.append(FeatureActivation(int(fid), float(value) if sep else 1.0))
    return Example(features=features, label=label)


def iter_examples(path: Union[str, Path]) -> Iterator[Example]:
    """Stream examples from ``path`` in file order.

    Raises:
        DataFormatError: On the first malformed line.
    """
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            try:
                yield parse_example_line(stripped)
            except ValueError as e:
                raise DataFormatError(str(path), line_no, str(e)) from e


def read_dataset(path: Union[str, Path]) -> DataSet:
    """Load every example in ``path`` into memory."""
    dataset = DataSet(list(iter_examples(path)))
    logger.info(
        "Read %d examples from %s (positive rate %.4f)",
        len(dataset), path, dataset.positive_rate,
    )
    return dataset
