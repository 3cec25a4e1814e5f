"""Test export options validation and layering."""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from lapexport.conf.settings import Settings
from lapexport.schemas.options import AlignmentMode, ExportOptions


def test_defaults_follow_settings():
    options = ExportOptions()

    assert options.alignment_mode is AlignmentMode.NEAREST
    assert options.master_channel == "ECEF position_X"
    assert options.desired_channels == ["ECEF position_X", "ECEF position_Y", "ECEF position_Z"]
    assert options.lap_number_base == 1
    assert options.has_time_column


def test_explicit_channels_replace_defaults():
    options = ExportOptions(channels=["RPM"])

    assert options.desired_channels == ["RPM"]


@pytest.mark.parametrize("values", [
    {"delimiter": ";;"},
    {"delimiter": ""},
    {"lap_number_base": 2},
    {"max_workers": 0},
    {"alignment_mode": "interpolate"},
    {"alignment_mode": "nearest", "master_channel": None},
])
def test_invalid_options(values):
    with pytest.raises(ValidationError):
        ExportOptions(**values)


def test_union_does_not_need_master():
    options = ExportOptions(alignment_mode="union", master_channel=None)

    assert options.alignment_mode is AlignmentMode.UNION


def test_from_settings_ignores_none_overrides():
    settings = Settings(include_units=True, alignment_mode="union", master_channel="RPM")

    options = ExportOptions.from_settings(settings, include_units=None, channels=None)

    assert options.include_units is True
    assert options.alignment_mode is AlignmentMode.UNION
    assert options.master_channel == "RPM"
    assert options.channels is None


def test_from_settings_overrides_win():
    settings = Settings(lap_number_base=1)

    options = ExportOptions.from_settings(settings, lap_number_base=0, delimiter="\t")

    assert options.lap_number_base == 0
    assert options.delimiter == "\t"


def test_from_yaml(tmp_path):
    config = tmp_path / "export.yaml"
    config.write_text(
        "channels:\n"
        "  - ECEF position_X\n"
        "  - GPS Speed\n"
        "alignment_mode: union\n"
        "include_units: true\n"
        "output_path: out/laps.csv\n"
    )

    options = ExportOptions.from_yaml(config, include_units=False)

    assert options.channels == ["ECEF position_X", "GPS Speed"]
    assert options.alignment_mode is AlignmentMode.UNION
    assert options.include_units is False
    assert options.output_path == Path("out/laps.csv")


def test_from_yaml_requires_mapping(tmp_path):
    config = tmp_path / "export.yaml"
    config.write_text("- nearest\n- union\n")

    with pytest.raises(ValueError, match="mapping"):
        ExportOptions.from_yaml(config)


def test_empty_yaml_uses_settings(tmp_path):
    config = tmp_path / "export.yaml"
    config.write_text("")

    options = ExportOptions.from_yaml(config, settings=Settings(max_workers=4))

    assert options.max_workers == 4
