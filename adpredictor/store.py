"""Per-feature weight posteriors with plain-text persistence.

Holds one ``GaussianBelief`` per sparse feature id. Unseen ids read as
the prior N(0, init_var); training inserts the prior on first sight.

File format: one line per feature, ``<id>\\t<mean>\\t<variance>``, no
header, any order.
"""

from __future__ import annotations

import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Iterator, Union

from .errors import ModelFormatError
from .gaussian import GaussianBelief

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class WeightPosteriorStore:
    """Mapping from feature id to its current weight belief."""

    def __init__(self, init_var: float = 1.0) -> None:
        self.init_var = init_var
        self._cache: dict[int, GaussianBelief] = {}

    @property
    def prior(self) -> GaussianBelief:
        return GaussianBelief(0.0, self.init_var)

    def get(self, feature_id: int) -> GaussianBelief:
        """Current belief, or the prior if unseen. Never inserts."""
        return self._cache.get(feature_id, self.prior)

    def get_or_create(self, feature_id: int) -> GaussianBelief:
        belief = self._cache.get(feature_id)
        if belief is None:
            belief = self.prior
            self._cache[feature_id] = belief
        return belief

    def set(self, feature_id: int, belief: GaussianBelief) -> None:
        self._cache[feature_id] = belief

    def update(self, beliefs: dict[int, GaussianBelief]) -> None:
        self._cache.update(beliefs)

    def clear(self) -> None:
        self._cache = {}

    def snapshot(self) -> dict[int, GaussianBelief]:
        return dict(self._cache)

    def items(self):
        return self._cache.items()

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._cache

    def __iter__(self) -> Iterator[tuple[int, GaussianBelief]]:
        return iter(self._cache.items())

    def __len__(self) -> int:
        return len(self._cache)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: PathLike) -> int:
        """Write all beliefs to ``path``. Returns count written."""
        path = Path(path)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                for fid, g in self._cache.items():
                    f.write(f"{fid}\t{g.mean!r}\t{g.variance!r}\n")
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info("Saved %d feature posteriors to %s", len(self._cache), path)
        return len(self._cache)

    def load(self, path: PathLike) -> int:
        """Replace the store's contents with the beliefs in ``path``.

        The file is parsed completely before anything is replaced; a
        malformed line aborts the load and leaves the store untouched.

        Raises:
            ModelFormatError: On the first malformed line.
        """
        path = Path(path)
        staged: dict[int, GaussianBelief] = {}
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.rstrip("\r\n")
                if not line.strip():
                    continue
                fid, belief = _parse_line(str(path), line_no, line)
                staged[fid] = belief

        self._cache = staged
        logger.info("Loaded %d feature posteriors from %s", len(staged), path)
        return len(staged)


def _parse_line(path: str, line_no: int, line: str) -> tuple[int, GaussianBelief]:
    tks = line.split("\t")
    if len(tks) != 3:
        raise ModelFormatError(path, line_no, f"expected 3 tab-separated fields, got {len(tks)}")
    try:
        fid = int(tks[0])
    except ValueError:
        raise ModelFormatError(path, line_no, f"bad feature id {tks[0]!r}") from None
    try:
        mean = float(tks[1])
        vari = float(tks[2])
    except ValueError:
        raise ModelFormatError(path, line_no, f"bad number in {line!r}") from None
    if not (math.isfinite(mean) and math.isfinite(vari)):
        raise ModelFormatError(path, line_no, "mean and variance must be finite")
    if vari <= 0.0:
        raise ModelFormatError(path, line_no, f"variance must be positive, got {vari!r}")
    return fid, GaussianBelief(mean, vari)
