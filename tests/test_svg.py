"""
Tests for SVG validation and dimension parsing.
"""
import pytest

from svgshare.services.svg import SvgValidationError, parse_dimensions, validate_svg_upload

MAX = 2 * 1024 * 1024
SVG = b'<svg xmlns="http://www.w3.org/2000/svg" width="10" height="20"></svg>'


class TestParseDimensions:
    @pytest.mark.parametrize("text,expected", [
        ('<svg width="10" height="20">', (10, 20)),
        ('<svg width="12.5px" height="100%">', (12, 100)),
        ('<svg width="auto" height="">', (0, 0)),
        ('<svg viewBox="0 0 10 10">', (0, 0)),
        ('<svg height="7" width="3">', (3, 7)),
        ('<svg stroke-width="4" width="9" height="9">', (9, 9)),
        ('<svg width="1" height="2"><rect width="50" height="60"/></svg>', (1, 2)),
    ])
    def test_cases(self, text, expected):
        assert parse_dimensions(text) == expected


class TestValidateUpload:
    def test_valid(self):
        assert validate_svg_upload("logo.SVG", "image/svg+xml", SVG, MAX) == SVG.decode()

    def test_content_type_parameters_ignored(self):
        validate_svg_upload("a.svg", "image/svg+xml; charset=utf-8", SVG, MAX)

    @pytest.mark.parametrize("filename,content_type,data,message", [
        (None, "image/svg+xml", SVG, "No file provided"),
        ("a.svg", "image/svg+xml", None, "No file provided"),
        ("a.png", "image/svg+xml", SVG, "Only SVG allowed"),
        ("a.svg", "image/png", SVG, "Only SVG allowed"),
        ("a.svg", None, SVG, "Only SVG allowed"),
        ("a.svg", "image/svg+xml", b"\xff\xfe<svg>", "SVG must be UTF-8 text"),
        ("a.svg", "image/svg+xml", b"<html></html>", "Not an SVG document"),
    ])
    def test_rejections(self, filename, content_type, data, message):
        with pytest.raises(SvgValidationError) as exc_info:
            validate_svg_upload(filename, content_type, data, MAX)
        assert str(exc_info.value) == message

    def test_size_limit(self):
        with pytest.raises(SvgValidationError, match="File too large"):
            validate_svg_upload("a.svg", "image/svg+xml", SVG + b" " * MAX, MAX)
