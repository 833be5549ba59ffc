"""Tests for gendoc.plugin module."""

import json
import re

import pytest
from google.protobuf.compiler import plugin_pb2

from gendoc.errors import OptionsError, PatternError, RenderError, TemplateReadError
from gendoc.plugin import (
    MAXIMUM_EDITION,
    MINIMUM_EDITION,
    ROOT_DIRECTORY,
    SUPPORTED_FEATURES,
    exclude_unwanted_protos,
    files_to_generate,
    generate,
    group_protos_by_directory,
    read_template_file,
    run,
)

from conftest import make_file, make_request


def names(fds):
    return [fd.name for fd in fds]


class TestFilesToGenerate:
    """Tests for files_to_generate()."""

    def test_only_requested_files(self):
        fds = [make_file("dep.proto"), make_file("main.proto")]
        request = make_request(fds, files_to_generate=["main.proto"])

        assert names(files_to_generate(request)) == ["main.proto"]

    def test_follows_file_to_generate_order(self):
        fds = [make_file("b.proto"), make_file("a.proto")]
        request = make_request(fds, files_to_generate=["a.proto", "b.proto"])

        assert names(files_to_generate(request)) == ["a.proto", "b.proto"]

    def test_missing_file_is_logged(self, caplog):
        request = make_request([make_file("a.proto")], files_to_generate=["a.proto", "gone.proto"])

        assert names(files_to_generate(request)) == ["a.proto"]
        assert "gone.proto" in caplog.text


class TestExcludeUnwantedProtos:
    """Tests for exclude_unwanted_protos()."""

    def test_no_patterns(self):
        fds = [make_file("a.proto"), make_file("b.proto")]

        assert names(exclude_unwanted_protos(fds, [])) == ["a.proto", "b.proto"]

    def test_preserves_order(self):
        fds = [make_file("a.proto"), make_file("b.proto"), make_file("c.proto")]

        result = exclude_unwanted_protos(fds, [re.compile(r"^b\.proto$")])

        assert names(result) == ["a.proto", "c.proto"]

    def test_any_pattern_matches(self):
        fds = [
            make_file("foo.internal.proto"),
            make_file("foo.proto"),
            make_file("another.proto"),
        ]
        patterns = [re.compile(r"\.internal\.proto$"), re.compile(r"another\.proto$")]

        assert names(exclude_unwanted_protos(fds, patterns)) == ["foo.proto"]

    def test_unanchored_search(self):
        fds = [make_file("google/protobuf/empty.proto"), make_file("app/api.proto")]

        result = exclude_unwanted_protos(fds, [re.compile("protobuf")])

        assert names(result) == ["app/api.proto"]

    def test_returns_new_list(self):
        fds = [make_file("a.proto")]

        result = exclude_unwanted_protos(fds, [])

        assert result == fds
        assert result is not fds


class TestGroupProtosByDirectory:
    """Tests for group_protos_by_directory()."""

    def test_single_group_without_source_relative(self):
        fds = [make_file("a/x.proto"), make_file("b/y.proto"), make_file("z.proto")]

        groups = group_protos_by_directory(fds, source_relative=False)

        assert list(groups) == [ROOT_DIRECTORY]
        assert names(groups[ROOT_DIRECTORY]) == ["a/x.proto", "b/y.proto", "z.proto"]

    def test_empty_input(self):
        assert group_protos_by_directory([], source_relative=False) == {}

    def test_source_relative(self):
        fds = [
            make_file("a/one.proto"),
            make_file("b/two.proto"),
            make_file("a/three.proto"),
            make_file("top.proto"),
        ]

        groups = group_protos_by_directory(fds, source_relative=True)

        assert list(groups) == ["a/", "b/", ROOT_DIRECTORY]
        assert names(groups["a/"]) == ["a/one.proto", "a/three.proto"]
        assert names(groups["b/"]) == ["b/two.proto"]
        assert names(groups[ROOT_DIRECTORY]) == ["top.proto"]

    def test_nested_directories_are_separate(self):
        fds = [make_file("a/b/c.proto"), make_file("a/d.proto")]

        groups = group_protos_by_directory(fds, source_relative=True)

        assert list(groups) == ["a/b/", "a/"]

    def test_file_at_filesystem_root(self):
        fds = [make_file("/abs/x.proto"), make_file("/top.proto")]

        groups = group_protos_by_directory(fds, source_relative=True)

        assert list(groups) == ["/abs/", "/"]


class TestReadTemplateFile:
    """Tests for read_template_file()."""

    def test_reads_file(self, tmp_path):
        path = tmp_path / "custom.tpl"
        path.write_text("{{ files | length }}", encoding="utf-8")

        assert read_template_file(str(path)) == "{{ files | length }}"

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "nope.tpl"

        with pytest.raises(TemplateReadError, match="nope.tpl"):
            read_template_file(str(missing))


class TestGenerate:
    """Tests for generate()."""

    def test_single_html_document(self, booking_request):
        response = generate(booking_request)

        assert [f.name for f in response.file] == ["index.html"]
        assert "<h3 id=\"com-example-Booking\">Booking</h3>" in response.file[0].content

    def test_capabilities(self, booking_request):
        response = generate(booking_request)

        assert SUPPORTED_FEATURES == plugin_pb2.CodeGeneratorResponse.FEATURE_SUPPORTS_EDITIONS
        assert response.supported_features == SUPPORTED_FEATURES
        assert response.minimum_edition == MINIMUM_EDITION == 900
        assert response.maximum_edition == MAXIMUM_EDITION == 1001

    def test_capabilities_without_files(self):
        response = generate(make_request([]))

        assert len(response.file) == 0
        assert response.supported_features == SUPPORTED_FEATURES

    def test_default_parameter(self, booking_proto):
        response = generate(make_request([booking_proto]))

        assert [f.name for f in response.file] == ["index.html"]

    def test_source_relative_output(self):
        fds = [make_file("a/one.proto"), make_file("b/two.proto"), make_file("a/three.proto")]
        request = make_request(fds, parameter="markdown,docs.md,source_relative")

        response = generate(request)

        assert [f.name for f in response.file] == ["a/docs.md", "b/docs.md"]
        a_doc = response.file[0].content
        assert a_doc.index("## a/one.proto") < a_doc.index("## a/three.proto")
        assert "b/two.proto" not in a_doc

    def test_absolute_source_relative_output(self):
        fds = [make_file("/abs/x.proto"), make_file("/top.proto")]
        request = make_request(fds, parameter="markdown,d.md,source_relative")

        response = generate(request)

        assert [f.name for f in response.file] == ["/abs/d.md", "/d.md"]

    def test_sections_follow_file_to_generate_order(self):
        fds = [make_file("b.proto"), make_file("a.proto")]
        request = make_request(
            fds, parameter="json,api.json", files_to_generate=["a.proto", "b.proto"]
        )

        data = json.loads(generate(request).file[0].content)

        assert [f["name"] for f in data["files"]] == ["a.proto", "b.proto"]

    def test_excluded_files_not_rendered(self):
        fds = [make_file("foo.internal.proto"), make_file("foo.proto")]
        request = make_request(
            fds,
            parameter="json,api.json:exclude_patterns=\\.internal\\.proto$,another\\.proto$",
        )

        response = generate(request)
        data = json.loads(response.file[0].content)

        assert [f["name"] for f in data["files"]] == ["foo.proto"]

    def test_custom_template_file(self, tmp_path, booking_proto):
        path = tmp_path / "names.tpl"
        path.write_text(
            "{% for f in files %}{% for m in f.messages %}{{ m.long_name }};{% endfor %}{% endfor %}",
            encoding="utf-8",
        )
        request = make_request([booking_proto], parameter=f"{path},names.txt")

        response = generate(request)

        assert response.file[0].name == "names.txt"
        assert response.file[0].content == "Booking;Booking.LabelsEntry;"

    def test_missing_template_file(self, booking_proto, tmp_path):
        request = make_request([booking_proto], parameter=f"{tmp_path / 'gone.tpl'},out.txt")

        with pytest.raises(TemplateReadError, match="gone.tpl"):
            generate(request)

    def test_template_error_aborts(self, tmp_path):
        path = tmp_path / "broken.tpl"
        path.write_text("{{ files[0].nothing }}", encoding="utf-8")
        fds = [make_file("a/one.proto"), make_file("b/two.proto")]
        request = make_request(fds, parameter=f"{path},out.txt,source_relative")

        with pytest.raises(RenderError):
            generate(request)

    def test_invalid_parameter(self, booking_proto):
        with pytest.raises(OptionsError, match="Invalid parameter: html"):
            generate(make_request([booking_proto], parameter="html"))

    def test_invalid_pattern(self, booking_proto):
        with pytest.raises(PatternError):
            generate(make_request([booking_proto], parameter=":exclude_patterns=*bad"))


class TestRun:
    """Tests for run()."""

    def test_serialized_round_trip(self, booking_request):
        data = run(booking_request.SerializeToString())

        response = plugin_pb2.CodeGeneratorResponse.FromString(data)
        assert response.file[0].name == "index.html"
        assert response.maximum_edition == MAXIMUM_EDITION

    def test_empty_input(self):
        response = plugin_pb2.CodeGeneratorResponse.FromString(run(b""))

        assert len(response.file) == 0
        assert response.supported_features == SUPPORTED_FEATURES
