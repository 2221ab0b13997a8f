from __future__ import annotations

import os
from pathlib import Path

import pytest

from flows2fim import fim
from flows2fim.errors import MissingToolError, ShapeError
from flows2fim.fim import absolute_path, required_tools, run_fim
from tests.utils import FakeTools, write_controls


def _always(_name: str) -> bool:
    return True


def test_required_tools() -> None:
    assert required_tools("vrt") == ["gdalbuildvrt"]
    assert required_tools("COG") == ["gdalbuildvrt", "gdal_translate"]
    assert required_tools("gtiff") == ["gdalbuildvrt", "gdal_translate"]


def test_absolute_path_keeps_vsi(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert absolute_path("/vsis3/bucket/lib") == "/vsis3/bucket/lib"
    assert absolute_path("lib") == os.path.join(os.getcwd(), "lib")


def test_run_fim_end_to_end_example(tmp_path: Path) -> None:
    controls = write_controls(
        tmp_path / "controls.csv",
        [("2821866", "10283", "nd"), ("2821867", "11199", "53.5")],
    )
    output = tmp_path / "out" / "fim.vrt"
    tools = FakeTools()

    result = run_fim(
        library_root="/lib",
        controls_path=controls,
        output_path=str(output),
        output_format="VRT",
        tools=tools,
        tool_available=_always,
    )

    expected = ["/lib/2821866/z_nd/f_10283.tif", "/lib/2821867/z_53_5/f_11199.tif"]
    assert result.file_list.paths() == expected
    assert tools.listed_paths == expected
    assert result.output_path == str(output)
    assert result.output_format == "VRT"
    text = output.read_text(encoding="utf-8")
    assert text.index(expected[0]) < text.index(expected[1])


def test_run_fim_relative_paths_are_absolutized(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    write_controls(tmp_path / "controls.csv", [("100", "5", "nd")])
    tools = FakeTools()

    result = run_fim(
        library_root="library",
        controls_path=Path("controls.csv"),
        output_path="fim.vrt",
        tools=tools,
        tool_available=_always,
    )

    cwd = os.getcwd()
    assert result.output_path == os.path.join(cwd, "fim.vrt")
    assert tools.listed_paths == [os.path.join(cwd, "library", "100", "z_nd", "f_5.tif")]


def test_run_fim_with_domain(tmp_path: Path) -> None:
    controls = write_controls(
        tmp_path / "controls.csv",
        [("2821866", "10283", "nd"), ("2821867", "11199", "53.5")],
    )
    tools = FakeTools()

    result = run_fim(
        library_root="/vsis3/bucket/lib",
        controls_path=controls,
        output_path=str(tmp_path / "fim.tif"),
        output_format="gtiff",
        with_domain=True,
        tools=tools,
        tool_available=_always,
    )

    assert tools.listed_paths == [
        "/vsis3/bucket/lib/2821866/domain.tif",
        "/vsis3/bucket/lib/2821867/domain.tif",
        "/vsis3/bucket/lib/2821866/z_nd/f_10283.tif",
        "/vsis3/bucket/lib/2821867/z_53_5/f_11199.tif",
    ]
    assert result.output_format == "GTIFF"
    assert tools.calls[-1][2] == "GTIFF"


def test_run_fim_missing_tool_before_any_io(tmp_path: Path) -> None:
    tools = FakeTools()
    checked: list[str] = []

    def no_translate(name: str) -> bool:
        checked.append(name)
        return name != "gdal_translate"

    with pytest.raises(MissingToolError, match="gdal_translate"):
        run_fim(
            library_root="/lib",
            controls_path=tmp_path / "missing.csv",
            output_path=str(tmp_path / "fim.tif"),
            output_format="COG",
            tools=tools,
            tool_available=no_translate,
        )

    assert checked == ["gdalbuildvrt", "gdal_translate"]
    assert tools.calls == []


def test_run_fim_vrt_only_needs_buildvrt(tmp_path: Path) -> None:
    controls = write_controls(tmp_path / "controls.csv", [("1", "2", "nd")])

    run_fim(
        library_root="/lib",
        controls_path=controls,
        output_path=str(tmp_path / "fim.vrt"),
        tools=FakeTools(),
        tool_available=lambda name: name == "gdalbuildvrt",
    )

    assert (tmp_path / "fim.vrt").exists()


def test_run_fim_shape_error_before_resolution(tmp_path: Path, monkeypatch) -> None:
    controls = write_controls(tmp_path / "controls.csv", [])
    tools = FakeTools()

    def unexpected(*_args, **_kwargs):
        raise AssertionError("file list should not be built")

    monkeypatch.setattr(fim, "build_file_list", unexpected)

    with pytest.raises(ShapeError):
        run_fim(
            library_root="/lib",
            controls_path=controls,
            output_path=str(tmp_path / "fim.vrt"),
            tools=tools,
            tool_available=_always,
        )

    assert tools.calls == []
    assert not (tmp_path / "fim.vrt").exists()
