from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, Iterable, Iterator, Tuple, Union


PathLike = Union[str, Path]


class LabelTable:
    """
    Ordered class names, index = class id.

    Lookups never raise: anything that is not a valid index (negative, too
    large, NaN, not a number at all) resolves to the caller's fallback.
    """

    def __init__(self, labels: Iterable[str] = ()):
        self._labels: Tuple[str, ...] = tuple(str(label) for label in labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelTable):
            return NotImplemented
        return self._labels == other._labels

    def __repr__(self) -> str:
        return f"LabelTable({list(self._labels)!r})"

    def resolve(self, class_id: object, fallback: str = "?") -> str:
        if isinstance(class_id, bool):
            return fallback
        try:
            if isinstance(class_id, float) and not math.isfinite(class_id):
                return fallback
            idx = int(class_id)  # type: ignore[call-overload]
        except (TypeError, ValueError, OverflowError):
            return fallback
        if 0 <= idx < len(self._labels):
            return self._labels[idx]
        return fallback

    def as_dict(self) -> Dict[int, str]:
        return {i: name for i, name in enumerate(self._labels)}


def load_labels(path: PathLike) -> LabelTable:
    """
    Load a newline-delimited label file (one label per line, line index = class id).

    Blank lines are skipped and trailing whitespace is stripped.
    """

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Label file not found: {p}")

    labels = []
    with open(p, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.rstrip()
            if not line.strip():
                continue
            labels.append(line)
    return LabelTable(labels)


def load_class_names(metadata_path: PathLike) -> LabelTable:
    """
    Load class names from an exported `metadata.yaml`:

        names:
          0: person
          1: bicycle
          ...

    Only the `names:` block is read; ids must run 0..N-1 without gaps.
    """

    names: Dict[int, str] = {}
    in_names = False

    with open(metadata_path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line == "names:":
                in_names = True
                continue
            if not in_names:
                continue
            # A top-level key after the block ends it.
            if not raw[:1].isspace():
                break

            if ":" not in line:
                continue
            left, right = line.split(":", 1)
            left = left.strip()
            right = right.strip().strip("'").strip('"')
            if not left.isdigit():
                continue
            names[int(left)] = right

    if sorted(names) != list(range(len(names))):
        raise ValueError(f"Class ids in {metadata_path} are not contiguous from 0: {sorted(names)}")
    return LabelTable(names[i] for i in range(len(names)))
