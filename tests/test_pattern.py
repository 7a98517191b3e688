"""Tests for perch.routing.pattern: template compilation and matching."""

from perch.routing.pattern import Segment, compile_pattern, parse_template


class TestParseTemplate:
    def test_root(self) -> None:
        assert parse_template("/") == ()

    def test_static(self) -> None:
        segments = parse_template("/api/v2/users")
        assert [s.value for s in segments] == ["api", "v2", "users"]
        assert not any(s.is_param for s in segments)

    def test_param(self) -> None:
        segments = parse_template("/users/{id}")
        assert segments[1] == Segment(value="{id}", param_name="id")
        assert segments[1].is_param is True

    def test_partial_segment_braces_are_literal(self) -> None:
        segments = parse_template("/files/report.{ext}")
        assert segments[1].is_param is False
        assert segments[1].value == "report.{ext}"

    def test_malformed_braces_are_literal(self) -> None:
        for template in ("/a/{b-c}", "/a/{b", "/a/b}", "/a/{}", "/a/{{b}}"):
            segments = parse_template(template)
            assert segments[1].is_param is False, template


class TestMatch:
    def test_root(self) -> None:
        matcher = compile_pattern("/")
        assert matcher.match("/") == {}
        assert matcher.match("/users") is None

    def test_literal_exact(self) -> None:
        matcher = compile_pattern("/users/new")
        assert matcher.match("/users/new") == {}
        assert matcher.match("/users/newer") is None
        assert matcher.match("/users") is None

    def test_extracts_params(self) -> None:
        matcher = compile_pattern("/posts/{slug}/comments/{cid}")
        assert matcher.match("/posts/hello-world/comments/42") == {
            "slug": "hello-world",
            "cid": "42",
        }

    def test_placeholder_never_captures_slash(self) -> None:
        matcher = compile_pattern("/files/{name}")
        assert matcher.match("/files/a/b") is None
        assert matcher.match("/files/a") == {"name": "a"}

    def test_placeholder_needs_content(self) -> None:
        matcher = compile_pattern("/files/{name}")
        assert matcher.match("/files/") is None

    def test_anchored_no_prefix_match(self) -> None:
        matcher = compile_pattern("/users/{id}")
        assert matcher.match("/users/7/edit") is None
        assert matcher.match("/api/users/7") is None

    def test_literal_is_not_regex(self) -> None:
        matcher = compile_pattern("/a.b/{id}")
        assert matcher.match("/a.b/1") == {"id": "1"}
        assert matcher.match("/axb/1") is None

    def test_partial_segment_braces_match_literally(self) -> None:
        matcher = compile_pattern("/files/report.{ext}")
        assert matcher.match("/files/report.{ext}") == {}
        assert matcher.match("/files/report.pdf") is None

    def test_match_args_keep_template_order(self) -> None:
        matcher = compile_pattern("/{b}/{a}")
        assert matcher.match_args("/x/y") == ("x", "y")
        assert matcher.param_names == ("b", "a")

    def test_duplicate_name_keeps_rightmost_capture(self) -> None:
        matcher = compile_pattern("/{id}/{id}")
        assert matcher.match("/1/2") == {"id": "2"}
        assert matcher.match_args("/1/2") == ("1", "2")


class TestCompile:
    def test_idempotent(self) -> None:
        first = compile_pattern("/users/{id}")
        second = compile_pattern("/users/{id}")
        assert first == second
        for path in ("/users/1", "/users", "/users/1/2", "/"):
            assert first.match(path) == second.match(path)

    def test_cached(self) -> None:
        assert compile_pattern("/cached/{x}") is compile_pattern("/cached/{x}")

    def test_never_fails(self) -> None:
        for template in ("/(", "/[a-z", "/{", "/}", "/*", "/a\\b"):
            matcher = compile_pattern(template)
            assert matcher.match(template) == {}
