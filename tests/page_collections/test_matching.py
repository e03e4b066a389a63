from plugins.page_collections.matching import expand_braces, match

PATHS = ["one.md", "two.md", "three.md", "four.md", "blog/post.md", "index.html"]


class TestMatch:
    def test_single_pattern_keeps_path_order(self):
        assert match("*.md", ["two.md", "one.md", "index.html"]) == ["two.md", "one.md"]

    def test_star_stays_within_a_segment(self):
        """`*` never crosses a directory separator."""
        assert match("*.md", PATHS) == ["one.md", "two.md", "three.md", "four.md"]
        assert match("blog/*.md", ["blog/a.md", "blog/drafts/b.md"]) == ["blog/a.md"]

    def test_globstar_matches_zero_or_more_directories(self):
        paths = ["index.md", "blog/a.md", "blog/drafts/b.md", "blog/logo.png"]

        assert match("**/*.md", paths) == ["index.md", "blog/a.md", "blog/drafts/b.md"]
        assert match("blog/**/*.md", paths) == ["blog/a.md", "blog/drafts/b.md"]
        assert match("blog/**", paths) == ["blog/a.md", "blog/drafts/b.md", "blog/logo.png"]

    def test_negated_globstar(self):
        paths = ["blog/a.md", "blog/drafts/b.md"]
        assert match(["blog/**/*.md", "!**/drafts/**"], paths) == ["blog/a.md"]

    def test_negated_patterns(self):
        """Negated patterns remove paths that positive patterns matched."""
        assert match(["*.md", "!one.md", "!two.md", "!four.md", "!blog/*"], PATHS) == ["three.md"]

    def test_only_negated_patterns_match_nothing(self):
        assert match(["!one.md"], PATHS) == []

    def test_brace_alternation(self):
        assert match("{one,three}.md", PATHS) == ["one.md", "three.md"]

    def test_windows_separators(self):
        assert match("blog/*.md", ["blog\\post.md"]) == ["blog\\post.md"]

    def test_no_match(self):
        assert match("posts/*.md", PATHS) == []


def test_expand_braces():
    assert expand_braces("{a,b}/{c,d}.md") == ["a/c.md", "a/d.md", "b/c.md", "b/d.md"]
    assert expand_braces("plain.md") == ["plain.md"]
