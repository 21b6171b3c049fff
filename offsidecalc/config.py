"""
Configuration for line detection, suggestion filtering, and logging.

This module centralizes the tunable parameters:
- Edge/Hough settings used by the OpenCV segment source.
- Clustering thresholds and confidence weights used by the reducer.
- Acceptance floor and top-N cap applied to suggestions.

The default :class:`Config` matches the values the calculator was tuned with.
Overrides can be loaded from a YAML file with :func:`load_config`; the file
mirrors the dataclass fields, for example::

    detection:
      min_confidence: 0.6
      top_n: 4
    log_level: DEBUG
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, cast

import yaml


@dataclass
class DetectionConfig:
    """
    Parameters for detecting and reducing candidate lines.

    Attributes:
        min_line_length: Minimum Hough segment length in pixels.
        max_line_gap: Maximum gap (pixels) the Hough transform bridges.
        canny_low: Canny lower hysteresis threshold.
        canny_high: Canny upper hysteresis threshold.
        hough_threshold: Accumulator votes needed for a Hough segment.
        blur_kernel: Gaussian blur kernel size (odd).
        angle_tolerance_deg: Max deviation from horizontal for a segment to
            be kept, and the zero point of the angle score.
        cluster_angle_deg: Segments closer than this in angle may merge.
        cluster_vertical_px: Segments whose mid-heights differ by less than
            this may merge.
        length_weight: Weight of the length score in the confidence.
        angle_weight: Weight of the angle score in the confidence.
        length_saturation_px: Length at which the length score reaches 1.
        min_confidence: Suggestions below this confidence are dropped.
        top_n: Maximum number of suggestions offered.
    """

    min_line_length: float = 80.0
    max_line_gap: float = 15.0
    canny_low: float = 50.0
    canny_high: float = 150.0
    hough_threshold: int = 80
    blur_kernel: int = 5

    angle_tolerance_deg: float = 20.0
    cluster_angle_deg: float = 5.0
    cluster_vertical_px: float = 30.0

    length_weight: float = 0.4
    angle_weight: float = 0.6
    length_saturation_px: float = 400.0

    min_confidence: float = 0.5
    top_n: int = 6

    def validate(self) -> None:
        """
        Raise ``ValueError`` if any parameter is out of range.
        """
        if not 0.0 < self.angle_tolerance_deg <= 90.0:
            raise ValueError("angle_tolerance_deg must be in (0, 90].")
        if self.length_saturation_px <= 0.0:
            raise ValueError("length_saturation_px must be positive.")
        if self.length_weight < 0.0 or self.angle_weight < 0.0:
            raise ValueError("Confidence weights must be non-negative.")
        if abs(self.length_weight + self.angle_weight - 1.0) > 1e-6:
            raise ValueError("length_weight and angle_weight must sum to 1.")
        if self.cluster_angle_deg < 0.0 or self.cluster_vertical_px < 0.0:
            raise ValueError("Cluster thresholds must be non-negative.")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must be in [0, 1].")
        if self.top_n < 1:
            raise ValueError("top_n must be at least 1.")
        if self.blur_kernel < 1 or self.blur_kernel % 2 == 0:
            raise ValueError("blur_kernel must be a positive odd integer.")


@dataclass
class Config:
    """
    High-level configuration for an editing session.

    Attributes:
        detection: Detection and suggestion parameters.
        hit_threshold_px: Max distance (pixels) for picking a line by click.
        log_level: Logging level name for :func:`setup_logging`.
        log_file: Optional file that receives a copy of the log.
    """

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    hit_threshold_px: float = 12.0
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def validate(self) -> None:
        self.detection.validate()
        if self.hit_threshold_px <= 0.0:
            raise ValueError("hit_threshold_px must be positive.")


DEFAULT_CONFIG = Config()


def _apply_overrides(target: Any, values: Dict[str, Any], section: str) -> Any:
    known = {f.name for f in fields(target)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown {section} option(s): {', '.join(unknown)}")
    return replace(target, **values)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """
    Build a :class:`Config` from a mapping shaped like the YAML file.
    """
    data = dict(data)
    detection_data = cast(Dict[str, Any], data.pop("detection", {}) or {})
    if not isinstance(detection_data, dict):
        raise ValueError("'detection' must be a mapping.")
    if data.get("log_file") is not None:
        data["log_file"] = Path(data["log_file"])

    config = _apply_overrides(Config(), data, "top-level")
    config.detection = _apply_overrides(DetectionConfig(), detection_data, "detection")
    config.validate()
    return config


def load_config(config_path: Path | str | None) -> Config:
    """
    Load a YAML configuration file.

    The file is optional; when ``config_path`` is ``None`` or missing, the
    defaults are returned.
    """
    if config_path is None:
        return Config()
    path = Path(config_path)
    if not path.exists():
        return Config()
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a top-level mapping.")
    return config_from_dict(cast(Dict[str, Any], data))
