"""
Tests for main.py — the command-line entry point.

Covers:
  - heatmaps written to --out, summary printed
  - --json prints the wire form and still writes heatmaps
  - inputs sharing a file stem get distinct ids and heatmap files
  - ConfigError → exit status 2
  - AnalysisResult.to_dict() wire keys
"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

import main as main_mod
from errors import ConfigError
from heatmap import synthesize_heatmap
from image_codec import to_data_uri
from models import AnalysisResult, PackagingAnalysis, UploadedImage


def make_result(image_id: str, heatmap_src) -> AnalysisResult:
    analysis = PackagingAnalysis(7.5, 6, 8, 9, ["Bigger logo", "Less text"], "Solid.")
    return AnalysisResult.build(
        UploadedImage(id=image_id, raw_bytes=b"", preview="preview"), heatmap_src, analysis,
    )


@pytest.fixture
def image_file(tmp_path, make_image):
    path = tmp_path / "front.png"
    path.write_bytes(make_image(20, 20))
    return path


class TestMain:
    def test_writes_heatmap_and_prints_summary(self, tmp_path, image_file, make_image, capsys):
        heatmap_src = to_data_uri(synthesize_heatmap(make_image(20, 20)), "image/jpeg")
        out_dir = tmp_path / "out"
        with patch.object(main_mod, "analyse_images",
                          AsyncMock(return_value=[make_result("front", heatmap_src)])) as run:
            status = main_mod.main([str(image_file), "--out", str(out_dir)])

        assert status == 0
        (images,) = run.call_args.args
        assert [img.id for img in images] == ["front"]
        assert (out_dir / "front_heatmap.jpg").read_bytes()[:2] == b"\xff\xd8"
        printed = capsys.readouterr().out
        assert "7.5/10" in printed
        assert "Bigger logo" in printed

    def test_missing_heatmap_is_reported(self, tmp_path, image_file, capsys):
        with patch.object(main_mod, "analyse_images",
                          AsyncMock(return_value=[make_result("front", None)])):
            main_mod.main([str(image_file), "--out", str(tmp_path / "out")])
        assert "not available" in capsys.readouterr().out
        assert not (tmp_path / "out").exists()

    def test_json_output(self, image_file, capsys):
        with patch.object(main_mod, "analyse_images",
                          AsyncMock(return_value=[make_result("front", None)])):
            main_mod.main([str(image_file), "--json"])
        (payload,) = json.loads(capsys.readouterr().out)
        assert payload["imageId"] == "front"
        assert payload["attentionScore"] == 7.5
        assert payload["aiAnalysis"] == "Solid."
        assert payload["heatmapSrc"] is None

    def test_json_mode_still_writes_heatmaps(self, tmp_path, image_file, make_image, capsys):
        heatmap_src = to_data_uri(synthesize_heatmap(make_image(20, 20)), "image/jpeg")
        out_dir = tmp_path / "out"
        with patch.object(main_mod, "analyse_images",
                          AsyncMock(return_value=[make_result("front", heatmap_src)])):
            main_mod.main([str(image_file), "--json", "--out", str(out_dir)])
        (payload,) = json.loads(capsys.readouterr().out)
        assert payload["imageId"] == "front"
        assert (out_dir / "front_heatmap.jpg").read_bytes()[:2] == b"\xff\xd8"

    def test_shared_stems_get_distinct_ids(self, tmp_path, make_image):
        paths = []
        for folder, fmt, suffix in (("a", "JPEG", "jpg"), ("b", "PNG", "png"), ("c", "PNG", "png")):
            (tmp_path / folder).mkdir()
            path = tmp_path / folder / f"front.{suffix}"
            path.write_bytes(make_image(10, 10, fmt=fmt))
            paths.append(path)

        images = main_mod._load_images(paths)
        assert [img.id for img in images] == ["front", "front-2", "front-3"]

    def test_shared_stems_write_separate_heatmaps(self, tmp_path, make_image):
        heatmap_src = to_data_uri(synthesize_heatmap(make_image(20, 20)), "image/jpeg")
        paths = []
        for folder in ("a", "b"):
            (tmp_path / folder).mkdir()
            path = tmp_path / folder / "front.png"
            path.write_bytes(make_image(10, 10))
            paths.append(path)

        async def fake_analyse(images):
            return [make_result(img.id, heatmap_src) for img in images]

        out_dir = tmp_path / "out"
        with patch.object(main_mod, "analyse_images", AsyncMock(side_effect=fake_analyse)):
            main_mod.main([str(p) for p in paths] + ["--out", str(out_dir)])
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "front-2_heatmap.jpg", "front_heatmap.jpg",
        ]

    def test_config_error_exit_code(self, image_file):
        with patch.object(main_mod, "analyse_images",
                          AsyncMock(side_effect=ConfigError("no key"))):
            assert main_mod.main([str(image_file)]) == 2

    def test_missing_file_is_a_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main_mod.main([str(tmp_path / "nope.png")])
        assert exc.value.code == 2


class TestWireForm:
    def test_result_keys(self):
        data = make_result("x", None).to_dict()
        assert list(data) == [
            "imageId", "originalSrc", "heatmapSrc", "attentionScore", "colorImpact",
            "readability", "brandVisibility", "suggestions", "aiAnalysis",
        ]

    def test_analysis_round_trips_through_wire_keys(self):
        analysis = PackagingAnalysis(1, 2, 3, 4, ["a"], "b")
        assert analysis.to_dict() == {
            "attentionScore": 1, "colorImpact": 2, "readability": 3,
            "brandVisibility": 4, "suggestions": ["a"], "analysis": "b",
        }
