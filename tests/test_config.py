import pytest

from offsidecalc.config import DEFAULT_CONFIG, Config, DetectionConfig, config_from_dict, load_config


def test_defaults_match_documented_values():
    det = DEFAULT_CONFIG.detection
    assert det.min_line_length == 80.0
    assert det.max_line_gap == 15.0
    assert det.angle_tolerance_deg == 20.0
    assert det.cluster_angle_deg == 5.0
    assert det.cluster_vertical_px == 30.0
    assert (det.length_weight, det.angle_weight) == (0.4, 0.6)
    assert det.length_saturation_px == 400.0
    assert det.min_confidence == 0.5
    assert det.top_n == 6
    DEFAULT_CONFIG.validate()


def test_missing_or_absent_file_gives_defaults(tmp_path):
    assert load_config(None) == Config()
    assert load_config(tmp_path / "nope.yaml") == Config()


def test_yaml_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "detection:\n  min_confidence: 0.7\n  top_n: 3\nlog_level: DEBUG\nlog_file: run.log\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.detection.min_confidence == 0.7
    assert config.detection.top_n == 3
    assert config.detection.cluster_angle_deg == 5.0
    assert config.log_level == "DEBUG"
    assert config.log_file.name == "run.log"


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == Config()


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError, match="colour"):
        config_from_dict({"colour": "red"})
    with pytest.raises(ValueError, match="top_k"):
        config_from_dict({"detection": {"top_k": 3}})


@pytest.mark.parametrize(
    "overrides",
    [
        {"angle_tolerance_deg": 0.0},
        {"length_saturation_px": 0.0},
        {"length_weight": 0.5, "angle_weight": 0.6},
        {"min_confidence": 1.5},
        {"top_n": 0},
        {"blur_kernel": 4},
        {"cluster_angle_deg": -1.0},
    ],
)
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        DetectionConfig(**overrides).validate()


def test_hit_threshold_must_be_positive():
    with pytest.raises(ValueError):
        Config(hit_threshold_px=0.0).validate()
