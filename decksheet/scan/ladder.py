"""Decode ladder: the retry parameters for recovering QR codes from a sheet.

Every region is tried at each magnification of its ladder, first as-is and
then binarized, stopping at the first success. If the tight rectangle never
decodes, a widened rectangle is tried at the (lower) widened magnifications.

What comes back depends on the pixels per QR module left in the candidate;
the detector needs about 2. For a typical deck the main QR has about 9 px per
module and is recovered from 0.5x to 1.5x, JPEG-recompressed included. A cell
QR is about 102 px: payloads up to 53 bytes get 3 px per module, up to 192
bytes 2 px, and anything larger is drawn with a warning and is not expected
to scan back. A rescaled copy scales the pitch with it, so short cell
payloads are expected back from about 0.67x and 2 px payloads from 1.0x.
At 0.5x cell QRs are generally missed; a miss only shrinks the recovered
set and never yields a wrong card. The blank leader QR is large (about
10 px per module) and is recovered at 0.5x.

The defaults can be overridden from a YAML file, e.g.::

    cell_scales: [3.0, 2.0, 4.0]
    threshold: 140

Point ``DECKSHEET_LADDER`` at the file to use it by default.
"""

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from decksheet.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeLadder:
    # Main QR: one large code, few attempts needed
    main_scales: tuple[float, ...] = (1.0, 1.5, 2.0, 0.75)
    main_widened_scales: tuple[float, ...] = (1.0, 0.75)
    main_widen: float = 0.08

    # Blank leader QR inside the leader region
    leader_scales: tuple[float, ...] = (1.0, 1.5, 2.0)
    leader_widened_scales: tuple[float, ...] = (1.0,)
    leader_widen: float = 0.15

    # Cell QRs: small and failure-prone, so a wider ladder
    cell_scales: tuple[float, ...] = (3.0, 2.0, 4.0, 1.5, 5.0, 1.0)
    cell_widened_scales: tuple[float, ...] = (2.0, 1.5)
    cell_widen: float = 0.25

    # Mean-RGB cut for binarization (0-255)
    threshold: int = 128
    # White margin around each scratch image, as a fraction of its side
    quiet_zone: float = 0.12
    # Magnifications that would exceed this side length (px) are skipped
    max_scratch: int = 2400

    def __post_init__(self):
        if not 0 <= self.threshold <= 255:
            raise ValueError(f"threshold must be within 0-255, got {self.threshold}")
        for f in fields(self):
            if f.name.endswith("_scales"):
                scales = tuple(float(s) for s in getattr(self, f.name))
                if not scales or any(s <= 0 for s in scales):
                    raise ValueError(f"{f.name} must be a non-empty list of positive numbers")
                object.__setattr__(self, f.name, scales)

    @classmethod
    def from_dict(cls, data: dict) -> "DecodeLadder":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown ladder keys: {', '.join(sorted(unknown))}")
        values = {k: v for k, v in data.items() if k in known}
        for key, value in values.items():
            if key.endswith("_scales"):
                values[key] = tuple(value)
        return cls(**values)

    def to_dict(self) -> dict:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data

    @classmethod
    def from_yaml(cls, path: Path) -> "DecodeLadder":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} does not contain a mapping")
        return cls.from_dict(data)

    def to_yaml(self) -> str:
        return yaml.dump(self.to_dict(), default_flow_style=False, allow_unicode=True, sort_keys=False)


def load_ladder(path: Optional[Path] = None) -> DecodeLadder:
    """Ladder from ``path``, else from ``DECKSHEET_LADDER``, else the defaults."""
    path = path or get_settings().ladder_path
    if path is None:
        return DecodeLadder()
    ladder = DecodeLadder.from_yaml(Path(path))
    logger.info(f"Loaded decode ladder from {path}")
    return ladder
