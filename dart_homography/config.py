"""
Estimator and dartboard settings.

Both settings objects have working defaults; ``load_config`` reads overrides
from a YAML file laid out as::

    estimator:
      normalize: true
      scale_convention: h22
      degeneracy_tolerance: 1.0e-8
    board:
      diameter: 451.0
      ring_width: 10.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

LOGGER = logging.getLogger(__name__)

SCALE_CONVENTIONS = ("h22", "frobenius")


def _coerce_float(obj: Any, name: str, label: str) -> None:
    # YAML reads exponents without a decimal point (1e-6) as strings
    value = getattr(obj, name)
    if isinstance(value, bool):
        raise ValueError(f"{label} {name} must be a number, got {value!r}")
    try:
        converted = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} {name} must be a number, got {value!r}") from exc
    object.__setattr__(obj, name, converted)


@dataclass(frozen=True, slots=True)
class EstimatorConfig:
    """Settings for the DLT solve.

    Attributes:
        normalize: Condition points before solving (Hartley normalization)
        scale_convention: ``"h22"`` divides by H[2, 2]; ``"frobenius"``
            scales to unit Frobenius norm
        degeneracy_tolerance: Relative singular-value threshold below which
            a point set or the linear system counts as rank deficient
    """

    normalize: bool = True
    scale_convention: str = "h22"
    degeneracy_tolerance: float = 1e-8

    def __post_init__(self) -> None:
        _coerce_float(self, "degeneracy_tolerance", "Estimator")
        if not isinstance(self.normalize, bool):
            raise ValueError(f"Estimator normalize must be true or false, got {self.normalize!r}")
        if self.scale_convention not in SCALE_CONVENTIONS:
            raise ValueError(
                f"Unknown scale convention {self.scale_convention!r}; "
                f"expected one of {SCALE_CONVENTIONS}"
            )
        if not self.degeneracy_tolerance > 0:
            raise ValueError(
                f"Degeneracy tolerance must be positive, got {self.degeneracy_tolerance}"
            )


@dataclass(frozen=True, slots=True)
class BoardGeometry:
    """Dartboard measurements in millimetres (regulation board by default)."""

    diameter: float = 451.0
    ring_width: float = 10.0
    bullseye_wire: float = 1.6
    bull_radius: float = 6.35
    outer_bull_radius: float = 15.9
    treble_outer: float = 107.4
    double_outer: float = 170.0

    def __post_init__(self) -> None:
        for f in fields(self):
            _coerce_float(self, f.name, "Board")
            if not getattr(self, f.name) > 0:
                raise ValueError(f"Board {f.name} must be positive, got {getattr(self, f.name)}")
        if not self.double_outer * 2 <= self.diameter:
            raise ValueError("Double ring does not fit inside the board diameter")


def _section(data: Dict[str, Any], name: str, cls: type) -> Any:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}")
    return cls(**section)


def config_from_dict(data: Optional[Dict[str, Any]]) -> Tuple[EstimatorConfig, BoardGeometry]:
    """Build settings from an already parsed mapping."""
    data = data or {}
    return _section(data, "estimator", EstimatorConfig), _section(data, "board", BoardGeometry)


def load_config(path: Union[str, Path]) -> Tuple[EstimatorConfig, BoardGeometry]:
    """
    Load estimator and board settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Tuple of (EstimatorConfig, BoardGeometry); missing sections use defaults
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as fh:
        data = yaml.safe_load(fh)

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")

    LOGGER.debug("Loaded config from %s", path)
    return config_from_dict(data)
